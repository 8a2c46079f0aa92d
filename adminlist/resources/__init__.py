# -*- coding: utf-8 -*-
"""resources

Resource schemas and their registry.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from .builtin import BUILTIN_RESOURCES, default_registry
from .registry import ResourceRegistry

__all__ = ["BUILTIN_RESOURCES", "ResourceRegistry", "default_registry"]

# The End
