# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""Rounding and clamping shared by the analyzer and the serializers."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round .5 toward positive infinity (0.5 -> 1, -0.5 -> 0, -1.5 -> -1)."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def safe_ratio(numerator: float, denominator: float, default: float = 1.0) -> float:
    """numerator / denominator, or ``default`` when the result would not be finite."""
    if denominator == 0:
        return default
    ratio = numerator / denominator
    return ratio if math.isfinite(ratio) else default
