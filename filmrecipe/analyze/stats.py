# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Color statistics for one image.

This is the analysis entry point: histograms, average color, dominant
quantized colors and the temperature/tint heuristics.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from filmrecipe.analyze.pixels import ImageSource, PixelBuffer, load_pixels
from filmrecipe.config import AnalysisConfig
from filmrecipe.errors import DecodeError
from filmrecipe.numeric import round_half_up
from filmrecipe.schema import ChannelHistogram, ColorAnalysis, DominantColor, RGBColor

logger = logging.getLogger(__name__)

NEUTRAL_TEMPERATURE = 6500


def estimate_temperature(avg: RGBColor) -> int:
    """
    Heuristic color temperature: ``round(6500 - (b / r - 1) * 1000)``.

    Not colorimetric. Kept as-is because exported recipes depend on these
    exact numbers. Black red channel returns the neutral 6500.
    """
    if avg.r == 0:
        return NEUTRAL_TEMPERATURE
    return round_half_up(NEUTRAL_TEMPERATURE - (avg.b / avg.r - 1) * 1000)


def estimate_tint(avg: RGBColor) -> int:
    """Magenta (+) / green (-) shift: ``round(((r + b) / 2 - g) / 2.55)``."""
    return round_half_up(((avg.r + avg.b) / 2 - avg.g) / 2.55)


def _dominant_colors(
    rgb: NDArray[np.uint8],
    step: int,
    limit: int,
) -> tuple[DominantColor, ...]:
    """
    Most frequent quantized colors.

    Channels are bucketed to ``floor(v / step) * step``. Ties keep the
    bucket that appears first in scan order. Percentages are rounded half
    up to 2 decimals in exact integer arithmetic, then trimmed from the
    tail so the reported shares never sum above 100.
    """
    total = rgb.shape[0]
    quant = (rgb // step).astype(np.int64) * step
    keys = (quant[:, 0] << 16) | (quant[:, 1] << 8) | quant[:, 2]
    unique, first_index, counts = np.unique(keys, return_index=True, return_counts=True)

    order = np.lexsort((first_index, -counts))[:limit]

    # hundredths of a percent, rounded half up: (2 * c * 10000 + total) // (2 * total)
    hundredths = [(2 * int(counts[i]) * 10000 + total) // (2 * total) for i in order]
    overflow = sum(hundredths) - 10000
    for j in range(len(hundredths) - 1, -1, -1):
        if overflow <= 0:
            break
        cut = min(overflow, hundredths[j])
        hundredths[j] -= cut
        overflow -= cut

    result = []
    for i, h in zip(order, hundredths):
        key = int(unique[i])
        color = RGBColor((key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF)
        result.append(DominantColor(color=color, percentage=h / 100))
    return tuple(result)


def analyze_colors(
    buffer: PixelBuffer,
    config: Optional[AnalysisConfig] = None,
) -> ColorAnalysis:
    """
    Compute color statistics for an analysis-sized pixel buffer.

    The buffer is not resized here; use ``analyze_image`` to decode and
    resize in one step.

    Args:
        buffer: Decoded pixels (alpha ignored).
        config: Quantization and dominant-color settings.

    Returns:
        ColorAnalysis. Deterministic for identical pixels; the input
        array is never modified.
    """
    config = config or AnalysisConfig()
    rgb = buffer.rgb()
    total = rgb.shape[0]
    if total == 0:
        raise DecodeError("Pixel buffer is empty")

    histogram = ChannelHistogram(
        red=tuple(int(v) for v in np.bincount(rgb[:, 0], minlength=256)),
        green=tuple(int(v) for v in np.bincount(rgb[:, 1], minlength=256)),
        blue=tuple(int(v) for v in np.bincount(rgb[:, 2], minlength=256)),
    )

    sums = rgb.sum(axis=0, dtype=np.int64)
    average = RGBColor(*(round_half_up(int(s) / total) for s in sums))

    dominant = _dominant_colors(rgb, config.quantize_step, config.max_dominant)

    analysis = ColorAnalysis(
        histogram=histogram,
        average_color=average,
        dominant_colors=dominant,
        temperature=estimate_temperature(average),
        tint=estimate_tint(average),
        pixel_count=total,
    )
    logger.debug(
        "Analyzed %d pixels: avg=%s temperature=%d tint=%d",
        total, average.to_dict(), analysis.temperature, analysis.tint,
    )
    return analysis


def analyze_image(
    source: ImageSource,
    config: Optional[AnalysisConfig] = None,
) -> ColorAnalysis:
    """
    Decode (if needed), resize to the analysis box and analyze.

    Example:
        >>> from filmrecipe import analyze_image
        >>> a = analyze_image("film.jpg")
        >>> a.temperature, a.tint
        (6120, 3)
    """
    config = config or AnalysisConfig()
    buffer = load_pixels(source, max_size=config.max_size)
    return analyze_colors(buffer, config)
