# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""Number formatting, escaping and stable identifiers shared by the serializers."""

from __future__ import annotations

import hashlib
import json
import math
import uuid
from typing import Optional
from xml.sax.saxutils import escape

from filmrecipe.errors import SerializationError
from filmrecipe.numeric import clamp, round_half_up
from filmrecipe.schema import AdjustmentModel, IncludeFlags


# =============================================================================
# Numbers
# =============================================================================


def finite(value: Optional[float], name: str) -> Optional[float]:
    """Pass None through; reject NaN and infinities."""
    if value is None:
        return None
    if not math.isfinite(value):
        raise SerializationError(f"{name} is not a finite number: {value}")
    return float(value)


def clamped_int(value: Optional[float], low: float, high: float, name: str) -> Optional[int]:
    """Clamp then round half up; None stays None."""
    value = finite(value, name)
    if value is None:
        return None
    return round_half_up(clamp(value, low, high))


def f3(value: float) -> str:
    return f"{value:.3f}"


def format_number(value: float) -> str:
    """Integer when within 1e-4 of one, otherwise six decimals."""
    nearest = round_half_up(value)
    if abs(value - nearest) < 1e-4:
        return str(nearest)
    return f"{value:.6f}"


def format_plain(value: float) -> str:
    """Shortest plain rendering: integral floats print without a fraction."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def xml_escape(text: str) -> str:
    """Escape for both element text and double- or single-quoted attributes."""
    return escape(text, {'"': "&quot;", "'": "&apos;"})


# =============================================================================
# Deterministic Identifiers
# =============================================================================


def content_digest(model: AdjustmentModel, include: IncludeFlags) -> str:
    """SHA-256 over the canonical JSON of the serializer inputs."""
    payload = json.dumps(
        {"adjustments": model.to_dict(), "include": include.to_dict()},
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def stable_hex(*parts: object) -> str:
    """32 uppercase hex characters derived from ``parts``."""
    text = "\x1f".join(str(p) for p in parts)
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:32].upper()


def stable_uuid(*parts: object) -> str:
    """Uppercase version-4-shaped UUID derived from ``parts``."""
    return str(uuid.UUID(hex=stable_hex(*parts), version=4)).upper()
