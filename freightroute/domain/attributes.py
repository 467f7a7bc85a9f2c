"""Attribute values carried by graph nodes and edges.

An attribute map is a ``dict`` from text keys to tagged values: bool,
int, float, str, or lists and nested maps of those. The Python type is
the tag, so a bool stays a bool and an int stays an int across document
round-trips.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import InvalidArgumentError

AttrValue = Union[bool, int, float, str, List[Any], Dict[str, Any]]
AttrMap = Dict[str, AttrValue]


def _copy_value(value: Any, path: str) -> AttrValue:
    if isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (list, tuple)):
        return [_copy_value(item, f"{path}[{i}]") for i, item in enumerate(value)]
    if isinstance(value, Mapping):
        return copy_attributes(value, path)
    raise InvalidArgumentError(
        f"Unsupported attribute value at {path}: {type(value).__name__}",
        argument=path,
    )


def copy_attributes(attrs: Optional[Mapping[str, Any]], path: str = "attrs") -> AttrMap:
    """Validate and deep-copy an attribute map.

    Tuples are stored as lists. ``None`` yields an empty map.

    Args:
        attrs: Mapping of text keys to attribute values.
        path: Location used in error messages.

    Returns:
        A fresh AttrMap safe to store or hand out.

    Raises:
        InvalidArgumentError: If a key is not text or a value has an
            unsupported type.
    """
    if attrs is None:
        return {}
    if not isinstance(attrs, Mapping):
        raise InvalidArgumentError(
            f"Attributes at {path} must be a mapping, got {type(attrs).__name__}",
            argument=path,
        )
    copied: AttrMap = {}
    for key, value in attrs.items():
        if not isinstance(key, str):
            raise InvalidArgumentError(
                f"Attribute key at {path} must be text, got {key!r}",
                argument=path,
            )
        copied[key] = _copy_value(value, f"{path}.{key}")
    return copied


def numeric_attribute(attrs: Mapping[str, Any], key: str, default: float) -> float:
    """Read a numeric attribute, returning ``default`` when absent.

    Text values holding a number are accepted. Booleans, other text
    and NaN count as absent.
    """
    value = attrs.get(key)
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return default
    else:
        return default
    if math.isnan(number):
        return default
    return number
