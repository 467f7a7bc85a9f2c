"""Conversion between record dataclasses and plain mappings.

Records declare their fields with ``int``, ``float``, ``str`` or
``bool`` annotations. ``record_from_dict`` converts text (as produced by
the file readers) or JSON values to those types, and fills in dataclass
defaults for absent keys.
"""

from __future__ import annotations

import dataclasses
import math
from typing import Any, Callable, Dict, Mapping, Type, TypeVar

from .errors import InvalidArgumentError

R = TypeVar("R")


def parse_flag(value: Any) -> bool:
    """Truthy for True, 1, ``"1"`` and ``"true"`` in any case."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        text = value.strip()
        return text == "1" or text.lower() == "true"
    raise ValueError(f"not a flag: {value!r}")


def parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"not an integer: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"not an integer: {value!r}")
        return int(value)
    return int(str(value).strip())


def parse_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    number = float(value.strip() if isinstance(value, str) else value)
    if math.isnan(number):
        raise ValueError(f"not a number: {value!r}")
    return number


_CONVERTERS: Dict[str, Callable[[Any], Any]] = {
    "int": parse_int,
    "float": parse_float,
    "str": str,
    "bool": parse_flag,
}


def record_from_dict(cls: Type[R], data: Mapping[str, Any], **overrides: Any) -> R:
    """Build a record dataclass from a mapping.

    Args:
        cls: Record dataclass.
        data: Field values, as text or JSON values. Unknown keys are ignored.
        **overrides: Values taking precedence over ``data``.

    Returns:
        The record.

    Raises:
        InvalidArgumentError: If a required field is missing or a value
            cannot be converted.
    """
    if not isinstance(data, Mapping):
        raise InvalidArgumentError(
            f"{cls.__name__} data must be a mapping", argument=cls.__name__
        )
    values: Dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if f.name in overrides:
            raw = overrides[f.name]
        elif f.name in data:
            raw = data[f.name]
        elif f.default is not dataclasses.MISSING:
            continue
        else:
            raise InvalidArgumentError(
                f"{cls.__name__} is missing field {f.name!r}", argument=f.name
            )
        try:
            values[f.name] = _CONVERTERS[str(f.type)](raw)
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(
                f"Invalid value for {cls.__name__}.{f.name}: {raw!r}",
                argument=f.name,
                cause=e,
            )
    return cls(**values)


def record_to_dict(record: Any) -> Dict[str, Any]:
    return dataclasses.asdict(record)
