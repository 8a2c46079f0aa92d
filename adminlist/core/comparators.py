# -*- coding: utf-8 -*-
"""
comparators

Sort key table keyed by semantic field type.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from __future__ import annotations

import locale
import math
from datetime import date, datetime, time, timezone
from typing import Any, Callable, Dict, Iterable

from .schema import FieldKind

SortKey = Callable[[Any], Any]


def parse_timestamp(value: Any) -> float | None:
    """Return ``value`` as a POSIX timestamp or ``None`` when unparseable.

    Strings are read as ISO 8601; a trailing ``Z`` and date-only values are
    accepted, naive values are taken as UTC. Numbers are epoch milliseconds.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime.combine(value, time.min)
    elif isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        return float(value) / 1000.0
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()


def _string_key(value: Any) -> Any:
    """Case-folded key collated by the process ``LC_COLLATE`` locale.

    The host application selects the locale with ``locale.setlocale``; under
    the default C locale the order is by code point.
    """
    if value is None or isinstance(value, (dict, list, tuple)):
        return None
    text = value if isinstance(value, str) else str(value)
    folded = text.casefold()
    try:
        collated = locale.strxfrm(folded)
    except ValueError:  # embedded NUL
        collated = folded
    return (collated, folded, text)


def parse_number(value: Any) -> float | None:
    """Return ``value`` as a finite float, ``None`` for anything else."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _boolean_key(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized == "true":
            return 1
        if normalized == "false":
            return 0
    return None


COMPARATORS: Dict[str, SortKey] = {
    "string": _string_key,
    "number": parse_number,
    "boolean": _boolean_key,
    "date": parse_timestamp,
}


def sort_key_for(kind: FieldKind) -> SortKey:
    """Return the key normaliser registered for ``kind``.

    Every normaliser maps a raw value onto a single comparable type, or onto
    ``None`` for nulls and malformed values.
    """

    return COMPARATORS.get(kind, _string_key)


def infer_kind(values: Iterable[Any]) -> FieldKind:
    """Guess the semantic type of an undeclared field from its values."""

    seen = [v for v in values if v is not None]
    if not seen:
        return "string"
    if all(isinstance(v, bool) for v in seen):
        return "boolean"
    if all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in seen):
        return "number"
    return "string"


__all__ = [
    "COMPARATORS",
    "SortKey",
    "infer_kind",
    "parse_number",
    "parse_timestamp",
    "sort_key_for",
]


# The End
