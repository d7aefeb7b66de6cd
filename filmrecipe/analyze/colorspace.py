# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Color space helpers used alongside the matcher.

Conversion chain: sRGB -> Linear RGB -> XYZ (D65, 2 deg observer) -> CIELAB

Also provides CIEDE2000 distance, histogram specification, McCamy's CCT
approximation and a dominant-color cast classifier. These do not feed the
exported recipes; they are diagnostics for callers comparing looks.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from filmrecipe.numeric import clamp, round_half_up
from filmrecipe.schema import DominantColor, RGBColor


# =============================================================================
# sRGB -> CIELAB
# =============================================================================

# Linear sRGB to XYZ, D65
_RGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
], dtype=np.float64)

_D65_WHITE = np.array([0.95047, 1.00000, 1.08883], dtype=np.float64)


def srgb_to_linear(srgb: ArrayLike) -> NDArray[np.float64]:
    """Decode the sRGB transfer curve; input in [0, 1]."""
    srgb = np.asarray(srgb, dtype=np.float64)
    return np.where(
        srgb > 0.04045,
        np.power((srgb + 0.055) / 1.055, 2.4),
        srgb / 12.92,
    )


def rgb_to_lab(rgb: ArrayLike) -> NDArray[np.float64]:
    """
    Convert 8-bit sRGB to CIELAB.

    Args:
        rgb: Array of shape (..., 3) with values 0-255

    Returns:
        Array of shape (..., 3) with (L, a, b)
    """
    linear = srgb_to_linear(np.asarray(rgb, dtype=np.float64) / 255.0)
    xyz = np.einsum("...j,ij->...i", linear, _RGB_TO_XYZ) / _D65_WHITE

    f = np.where(xyz > 0.008856, np.cbrt(xyz), 7.787 * xyz + 16.0 / 116.0)

    lab = np.empty_like(f)
    lab[..., 0] = 116.0 * f[..., 1] - 16.0
    lab[..., 1] = 500.0 * (f[..., 0] - f[..., 1])
    lab[..., 2] = 200.0 * (f[..., 1] - f[..., 2])
    return lab


def rgb_to_hsv(color: RGBColor) -> tuple[int, float, float]:
    """Hue in whole degrees [0, 360), saturation and value in percent."""
    r, g, b = color.r / 255.0, color.g / 255.0, color.b / 255.0
    high = max(r, g, b)
    diff = high - min(r, g, b)

    hue = 0
    if diff != 0:
        if high == r:
            h = math.fmod((g - b) / diff, 6.0)
        elif high == g:
            h = (b - r) / diff + 2.0
        else:
            h = (r - g) / diff + 4.0
        hue = round_half_up(h * 60.0)
        if hue < 0:
            hue += 360

    saturation = 0.0 if high == 0 else diff / high
    return hue, saturation * 100.0, high * 100.0


# =============================================================================
# Color Difference
# =============================================================================


def delta_e_2000(lab1: Sequence[float], lab2: Sequence[float]) -> float:
    """
    CIEDE2000 color difference with kL = kC = kH = 1.

    Symmetric; zero for identical inputs.
    """
    l1, a1, b1 = (float(v) for v in lab1)
    l2, a2, b2 = (float(v) for v in lab2)

    c_bar = (math.hypot(a1, b1) + math.hypot(a2, b2)) / 2.0
    g = 0.5 * (1.0 - math.sqrt(c_bar ** 7 / (c_bar ** 7 + 25.0 ** 7)))
    a1p, a2p = a1 * (1.0 + g), a2 * (1.0 + g)
    c1p, c2p = math.hypot(a1p, b1), math.hypot(a2p, b2)

    h1p = math.degrees(math.atan2(b1, a1p)) % 360.0
    h2p = math.degrees(math.atan2(b2, a2p)) % 360.0

    dl = l2 - l1
    dc = c2p - c1p

    dh = 0.0
    h_bar = 0.0
    if c1p * c2p != 0:
        diff = h2p - h1p
        if abs(diff) <= 180.0:
            dh = diff
            h_bar = (h1p + h2p) / 2.0
        else:
            dh = diff - 360.0 if diff > 180.0 else diff + 360.0
            h_bar = (h1p + h2p + (360.0 if h1p + h2p < 360.0 else -360.0)) / 2.0
    dH = 2.0 * math.sqrt(c1p * c2p) * math.sin(math.radians(dh) / 2.0)

    l_bar = (l1 + l2) / 2.0
    c_bar_p = (c1p + c2p) / 2.0

    t = (
        1.0
        - 0.17 * math.cos(math.radians(h_bar - 30.0))
        + 0.24 * math.cos(math.radians(2.0 * h_bar))
        + 0.32 * math.cos(math.radians(3.0 * h_bar + 6.0))
        - 0.20 * math.cos(math.radians(4.0 * h_bar - 63.0))
    )
    d_theta = 30.0 * math.exp(-(((h_bar - 275.0) / 25.0) ** 2))
    rc = 2.0 * math.sqrt(c_bar_p ** 7 / (c_bar_p ** 7 + 25.0 ** 7))
    sl = 1.0 + 0.015 * (l_bar - 50.0) ** 2 / math.sqrt(20.0 + (l_bar - 50.0) ** 2)
    sc = 1.0 + 0.045 * c_bar_p
    sh = 1.0 + 0.015 * c_bar_p * t
    rt = -math.sin(math.radians(2.0 * d_theta)) * rc

    return math.sqrt(
        (dl / sl) ** 2
        + (dc / sc) ** 2
        + (dH / sh) ** 2
        + rt * (dc / sc) * (dH / sh)
    )


# =============================================================================
# Histogram Specification
# =============================================================================


def cumulative_distribution(histogram: Sequence[float]) -> NDArray[np.float64]:
    """Normalized CDF; an empty histogram yields all zeros."""
    counts = np.asarray(histogram, dtype=np.float64)
    total = counts.sum()
    if total == 0:
        return np.zeros_like(counts)
    return np.cumsum(counts) / total


def match_histogram(source: Sequence[float], target: Sequence[float]) -> list[int]:
    """
    Lookup table mapping each source level to the target level whose CDF
    value is nearest. Ties resolve to the lowest target level.
    """
    src_cdf = cumulative_distribution(source)
    dst_cdf = cumulative_distribution(target)
    distance = np.abs(src_cdf[:, None] - dst_cdf[None, :])
    return [int(i) for i in np.argmin(distance, axis=1)]


# =============================================================================
# Temperature and Cast
# =============================================================================


def color_correction_gains(
    source: RGBColor,
    target: RGBColor,
) -> tuple[float, float, float]:
    """Per-channel gain source/target, clamped to [0.1, 10]; 1 for a zero target channel."""
    gains = []
    for s, t in ((source.r, target.r), (source.g, target.g), (source.b, target.b)):
        gains.append(clamp(s / t, 0.1, 10.0) if t > 0 else 1.0)
    return tuple(gains)


def mccamy_temperature(r: float, g: float, b: float) -> int:
    """
    Correlated color temperature from RGB chromaticity (McCamy's cubic).

    Treats r/(r+g+b), g/(r+g+b) as xy. Result clamped to [1000, 25000];
    black returns 6500.
    """
    total = r + g + b
    if total == 0:
        return 6500
    x, y = r / total, g / total
    if y == 0.1858:
        return 25000 if x > 0.3320 else 1000
    n = (x - 0.3320) / (0.1858 - y)
    cct = 449.0 * n ** 3 + 3525.0 * n ** 2 + 6823.3 * n + 5520.33
    return int(clamp(round_half_up(cct), 1000, 25000))


@dataclass(frozen=True, slots=True)
class ColorCast:
    """
    Balance estimate from dominant colors.

    Attributes:
        temperature: McCamy CCT of the weighted mean color
        tint: Magenta (+) / green (-) shift
        cast: One of "neutral", "warm", "cool", "magenta", "green"
    """
    temperature: int
    tint: int
    cast: str

    def to_dict(self) -> dict:
        return {"temperature": self.temperature, "tint": self.tint, "colorCast": self.cast}


def analyze_color_balance(dominant: Iterable[DominantColor]) -> ColorCast:
    """Classify the cast of a palette, weighting each color by its share."""
    dominant = list(dominant)
    if not dominant:
        return ColorCast(6500, 0, "neutral")

    weights = np.array([dc.percentage / 100.0 for dc in dominant], dtype=np.float64)
    colors = np.array(
        [(dc.color.r, dc.color.g, dc.color.b) for dc in dominant], dtype=np.float64
    )
    weighted = (colors * weights[:, None]).sum(axis=0)
    if weights.sum() > 0:
        weighted /= weights.sum()
    r, g, b = (float(v) for v in weighted)

    temperature = mccamy_temperature(r, g, b)
    tint = ((r + b) / 2.0 - g) / 2.55

    if abs(tint) > 10:
        cast = "magenta" if tint > 0 else "green"
    elif temperature < 3000:
        cast = "warm"
    elif temperature > 8000:
        cast = "cool"
    else:
        cast = "neutral"
    return ColorCast(temperature, round_half_up(tint), cast)
