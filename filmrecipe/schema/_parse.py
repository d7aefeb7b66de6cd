# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""Field coercion helpers shared by the schema ``from_dict`` validators."""

from __future__ import annotations

from typing import Iterable, Optional

from filmrecipe.errors import ValidationError


def is_number(value: object) -> bool:
    """True for int/float values; bools are rejected even though they are ints."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def optional_number(data: dict, key: str, where: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    if not is_number(value):
        raise ValidationError(
            f"{where}.{key} must be a number, got {type(value).__name__}"
        )
    return float(value)


def optional_bool(data: dict, key: str, where: str) -> Optional[bool]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValidationError(
            f"{where}.{key} must be a boolean, got {type(value).__name__}"
        )
    return value


def optional_str(data: dict, key: str, where: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(
            f"{where}.{key} must be a string, got {type(value).__name__}"
        )
    return value


def number_tuple(value: object, where: str) -> tuple[float, ...]:
    """Coerce a list of numbers into a tuple of floats."""
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{where} must be a list of numbers")
    items = []
    for item in value:
        if not is_number(item):
            raise ValidationError(
                f"{where} must contain only numbers, got {type(item).__name__}"
            )
        items.append(float(item))
    return tuple(items)


def mapping(value: object, where: str) -> dict:
    if not isinstance(value, dict):
        raise ValidationError(f"{where} must be a mapping, got {type(value).__name__}")
    return value


def reject_unknown(data: dict, allowed: Iterable[str], where: str) -> None:
    unknown = set(data) - set(allowed)
    if unknown:
        raise ValidationError(f"Unknown {where} fields: {', '.join(sorted(unknown))}")
