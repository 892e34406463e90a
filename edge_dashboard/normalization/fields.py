"""Ordered-candidate field lookup shared by every vendor normalizer.

Vendors spell the same concept several ways (``SiteId``, ``siteId``, ``Id``)
and nest it at different depths (``Sites``, ``Result.Sites``). A candidate is
a dotted path; numeric segments index into lists. The first candidate that
resolves to a non-null value wins.
"""

from __future__ import annotations

import math
from typing import Any, Mapping

_MISSING = object()


def get_path(record: Any, path: str) -> Any:
    """Resolve a dotted path, returning ``None`` when any segment is absent."""
    current = record
    for segment in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(segment, _MISSING)
        elif isinstance(current, (list, tuple)) and segment.isdigit():
            idx = int(segment)
            current = current[idx] if idx < len(current) else _MISSING
        else:
            return None
        if current is _MISSING:
            return None
    return current


def pick(record: Any, *candidates: str, default: Any = None) -> Any:
    for candidate in candidates:
        value = get_path(record, candidate)
        if value is not None:
            return value
    return default


def to_number(value: Any) -> int | float:
    """Coerce a vendor value to a non-negative number; anything else is 0."""
    if value is None or isinstance(value, (dict, list, tuple)):
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, str):
        text = value.strip()
        try:
            value = int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError:
                return 0
        return to_number(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value) or value < 0:
            return 0
        return int(value) if value.is_integer() else value
    return 0


def pick_str(record: Any, *candidates: str, default: str = "") -> str:
    value = pick(record, *candidates)
    if value is None or isinstance(value, (dict, list, tuple)):
        return default
    return str(value)


def pick_number(record: Any, *candidates: str) -> int | float:
    return to_number(pick(record, *candidates))


def pick_int(record: Any, *candidates: str) -> int:
    return int(pick_number(record, *candidates))


def pick_list(record: Any, *candidates: str) -> list:
    """First candidate that holds a list; wrappers such as ``{"Site": [...]}``
    are skipped so a later candidate can reach the list inside them."""
    for candidate in candidates:
        value = get_path(record, candidate)
        if isinstance(value, list):
            return value
    return []


def pick_dict(record: Any, *candidates: str) -> dict:
    for candidate in candidates:
        value = get_path(record, candidate)
        if isinstance(value, dict):
            return value
    return {}
