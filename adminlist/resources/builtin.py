# -*- coding: utf-8 -*-
"""
builtin

Resource schemas of the e-commerce dashboard backend.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

from typing import Any, Mapping

from ..core.comparators import parse_number
from ..core.schema import FieldSpec, ResourceSchema
from .registry import ResourceRegistry


def _cart_items(record: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    items = record.get("items")
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, Mapping)]


def cart_total(record: Mapping[str, Any]) -> float | None:
    """Return ``sum(quantity * price)`` over the cart items."""

    items = _cart_items(record)
    if not items:
        return 0
    total = 0.0
    for item in items:
        quantity = parse_number(item.get("quantity"))
        price = parse_number(item.get("price"))
        if quantity is None or price is None:
            return None
        total += quantity * price
    return total


def cart_item_count(record: Mapping[str, Any]) -> int:
    """Return the number of line items in the cart."""

    return len(_cart_items(record))


def cart_quantity(record: Mapping[str, Any]) -> float:
    """Return the summed quantity of all cart items."""

    return sum(parse_number(item.get("quantity")) or 0 for item in _cart_items(record))


CATEGORIES = ResourceSchema(
    name="categories",
    endpoint="/public/category",
    label="Categories",
    items_key="categories",
    item_key="category",
    fields=[
        FieldSpec(name="name", searchable=True),
        FieldSpec(name="description", searchable=True, sortable=False),
        FieldSpec(name="imageId", reference="images", sortable=False),
        FieldSpec(name="createdAt", kind="date"),
        FieldSpec(name="updatedAt", kind="date"),
    ],
)

SUB_CATEGORIES = ResourceSchema(
    name="sub-categories",
    endpoint="/public/sub-category",
    label="Sub-categories",
    items_key="subCategories",
    item_key="subCategory",
    fields=[
        FieldSpec(name="name", searchable=True),
        FieldSpec(name="categoryId", label="Category", searchable=True, reference="categories"),
        FieldSpec(name="createdAt", kind="date"),
        FieldSpec(name="updatedAt", kind="date"),
    ],
)

ADMINS = ResourceSchema(
    name="admins",
    endpoint="/admin",
    label="Admins",
    items_key="admins",
    item_key="admin",
    fields=[
        FieldSpec(name="name", searchable=True),
        FieldSpec(name="email", searchable=True),
        FieldSpec(name="role"),
        FieldSpec(name="createdAt", kind="date"),
        FieldSpec(name="updatedAt", kind="date"),
    ],
)

USERS = ResourceSchema(
    name="users",
    endpoint="/admin/user",
    label="Users",
    items_key="users",
    item_key="user",
    batch=True,
    fields=[
        FieldSpec(name="name", searchable=True),
        FieldSpec(name="email", searchable=True),
        FieldSpec(name="isDeleted", kind="boolean"),
        FieldSpec(name="createdAt", kind="date"),
        FieldSpec(name="updatedAt", kind="date"),
        FieldSpec(name="deletedAt", kind="date"),
    ],
)

ORDERS = ResourceSchema(
    name="orders",
    endpoint="/admin/order",
    label="Orders",
    items_key="orders",
    item_key="order",
    display_field="id",
    fields=[
        FieldSpec(name="id", searchable=True),
        FieldSpec(name="userId", label="Customer", searchable=True, reference="users"),
        FieldSpec(name="totalAmount", kind="number"),
        FieldSpec(name="status"),
        FieldSpec(name="paymentStatus"),
        FieldSpec(name="shippingAddress.city", searchable=True),
        FieldSpec(name="shippingAddress.pin", searchable=True),
        FieldSpec(name="createdAt", kind="date"),
        FieldSpec(name="updatedAt", kind="date"),
    ],
)

PRODUCTS = ResourceSchema(
    name="products",
    endpoint="/public/product",
    label="Products",
    items_key="products",
    item_key="product",
    fields=[
        FieldSpec(name="name", searchable=True),
        FieldSpec(name="description", searchable=True, sortable=False),
        FieldSpec(name="subCategoryId", label="Sub-category", reference="sub-categories"),
        FieldSpec(name="price", kind="number"),
        FieldSpec(name="originalPrice", kind="number"),
        FieldSpec(name="stock", kind="number"),
        FieldSpec(name="isCOD", label="Cash on delivery", kind="boolean"),
        FieldSpec(name="createdAt", kind="date"),
        FieldSpec(name="updatedAt", kind="date"),
    ],
)

CARTS = ResourceSchema(
    name="carts",
    endpoint="/admin/cart",
    label="Carts",
    items_key="carts",
    item_key="cart",
    display_field="id",
    fields=[
        FieldSpec(name="id", searchable=True),
        FieldSpec(name="userId", label="Customer", searchable=True, reference="users"),
        FieldSpec(name="items.product.name", label="Product", searchable=True, sortable=False),
        FieldSpec(name="items.variant.name", label="Variant", searchable=True, sortable=False),
        FieldSpec(name="totalAmount", kind="number", compute=cart_total),
        FieldSpec(name="itemCount", label="Items", kind="number", compute=cart_item_count),
        FieldSpec(name="quantity", kind="number", compute=cart_quantity),
        FieldSpec(name="createdAt", kind="date"),
        FieldSpec(name="updatedAt", kind="date"),
    ],
)

VARIANTS = ResourceSchema(
    name="variants",
    endpoint="/public/variant",
    label="Variants",
    items_key="variants",
    item_key="variant",
    fields=[
        FieldSpec(name="name", searchable=True),
        FieldSpec(name="productId", label="Product", searchable=True, reference="products"),
        FieldSpec(name="price", kind="number"),
        FieldSpec(name="stock", kind="number"),
        FieldSpec(name="createdAt", kind="date"),
        FieldSpec(name="updatedAt", kind="date"),
    ],
)

BLOGS = ResourceSchema(
    name="blogs",
    endpoint="/public/blog",
    label="Blogs",
    items_key="blogs",
    item_key="blog",
    display_field="data.title",
    fields=[
        FieldSpec(name="id", searchable=True),
        FieldSpec(name="data.title", label="Title", searchable=True),
        FieldSpec(name="data.author", label="Author", searchable=True),
        FieldSpec(name="status"),
        FieldSpec(name="createdAt", kind="date"),
        FieldSpec(name="updatedAt", kind="date"),
    ],
)

IMAGES = ResourceSchema(
    name="images",
    endpoint="/public/image",
    label="Images",
    items_key="images",
    item_key="image",
    display_field="url",
    batch=True,
    fields=[
        FieldSpec(name="id", searchable=True),
        FieldSpec(name="url", searchable=True),
        FieldSpec(name="productId", label="Product", searchable=True, reference="products"),
        FieldSpec(name="categoryId", label="Category", searchable=True, reference="categories"),
        FieldSpec(
            name="subCategoryId",
            label="Sub-category",
            searchable=True,
            reference="sub-categories",
        ),
        FieldSpec(name="blogId", label="Blog", searchable=True, reference="blogs"),
        FieldSpec(name="isHeroImage", kind="boolean"),
        FieldSpec(name="isLogo", kind="boolean"),
        FieldSpec(name="isIcon", kind="boolean"),
        FieldSpec(name="createdAt", kind="date"),
        FieldSpec(name="updatedAt", kind="date"),
    ],
)


BUILTIN_RESOURCES: tuple[ResourceSchema, ...] = (
    CATEGORIES,
    SUB_CATEGORIES,
    ADMINS,
    USERS,
    ORDERS,
    PRODUCTS,
    CARTS,
    VARIANTS,
    BLOGS,
    IMAGES,
)


def default_registry() -> ResourceRegistry:
    """Return a fresh registry holding every dashboard resource."""

    registry = ResourceRegistry(BUILTIN_RESOURCES)
    registry.validate()
    return registry


__all__ = [
    "ADMINS",
    "BLOGS",
    "BUILTIN_RESOURCES",
    "CARTS",
    "CATEGORIES",
    "IMAGES",
    "ORDERS",
    "PRODUCTS",
    "SUB_CATEGORIES",
    "USERS",
    "VARIANTS",
    "cart_item_count",
    "cart_quantity",
    "cart_total",
    "default_registry",
]


# The End
