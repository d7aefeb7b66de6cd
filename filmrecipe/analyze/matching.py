# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Adjustment calculation: what to change in the target to look like the base.

Each enabled rule compares one statistic of the two analyses and turns the
ratio into a clamped correction. Disabled rules leave the identity value,
except temperature and tint which always start from the target's own
estimates.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from filmrecipe.analyze.pixels import ImageSource
from filmrecipe.analyze.stats import analyze_image
from filmrecipe.config import AnalysisConfig
from filmrecipe.numeric import clamp, safe_ratio
from filmrecipe.schema import (
    AdjustmentSet,
    ChannelHistogram,
    ColorAnalysis,
    ColorBalance,
    MatchOptions,
)
from filmrecipe.schema.analysis import BALANCE_RANGE, RATIO_RANGE

logger = logging.getLogger(__name__)


def contrast_metric(histogram: ChannelHistogram) -> float:
    """
    Spread of the luminance histogram, normalized by 128.

    The standard deviation of bin index weighted by the Rec. 601 luminance
    count of each bin. An empty histogram scores 1.0.
    """
    weights = np.asarray(histogram.luminance(), dtype=np.float64)
    total = weights.sum()
    if total == 0:
        return 1.0
    bins = np.arange(weights.size, dtype=np.float64)
    mean = float((bins * weights).sum() / total)
    variance = float((weights * (bins - mean) ** 2).sum() / total)
    return math.sqrt(variance) / 128.0


def _clamped_ratio(base: float, target: float, bounds: tuple[float, float]) -> float:
    return clamp(safe_ratio(base, target), *bounds)


def calculate_adjustments(
    base: ColorAnalysis,
    target: ColorAnalysis,
    options: Optional[MatchOptions] = None,
) -> AdjustmentSet:
    """
    Compute the corrections that move ``target`` toward ``base``.

    Args:
        base: Analysis of the reference (look) image.
        target: Analysis of the image being corrected.
        options: Which rules to apply; all enabled by default.

    Returns:
        AdjustmentSet with ratio fields inside RATIO_RANGE and balance
        gains inside BALANCE_RANGE. A zero target statistic yields the
        identity value for that rule.
    """
    options = options or MatchOptions()

    exposure = 0.0
    brightness = contrast = saturation = 1.0
    temperature = float(target.temperature)
    tint = float(target.tint)
    balance = ColorBalance()

    if options.match_brightness:
        brightness = _clamped_ratio(
            base.average_color.luminance, target.average_color.luminance, RATIO_RANGE
        )
        exposure = math.log2(brightness) * 0.5

    if options.match_colors:
        temperature = float(base.temperature)
        tint = float(base.tint)
        b, t = base.average_color, target.average_color
        balance = ColorBalance(
            red=_clamped_ratio(b.r, t.r, BALANCE_RANGE),
            green=_clamped_ratio(b.g, t.g, BALANCE_RANGE),
            blue=_clamped_ratio(b.b, t.b, BALANCE_RANGE),
        )

    if options.match_contrast:
        contrast = _clamped_ratio(
            contrast_metric(base.histogram), contrast_metric(target.histogram), RATIO_RANGE
        )

    if options.match_saturation:
        saturation = _clamped_ratio(
            base.average_color.saturation, target.average_color.saturation, RATIO_RANGE
        )

    result = AdjustmentSet(
        exposure=exposure,
        brightness=brightness,
        contrast=contrast,
        saturation=saturation,
        temperature=temperature,
        tint=tint,
        color_balance=balance,
    )
    logger.debug("Calculated adjustments: %s", result.to_dict())
    return result


@dataclass(frozen=True, slots=True)
class StyleMatch:
    """Both analyses plus the adjustments derived from them."""
    base: ColorAnalysis
    target: ColorAnalysis
    adjustments: AdjustmentSet

    def to_dict(self) -> dict:
        return {
            "baseAnalysis": self.base.to_dict(),
            "targetAnalysis": self.target.to_dict(),
            "adjustments": self.adjustments.to_dict(),
        }


def match_style(
    base_source: ImageSource,
    target_source: ImageSource,
    options: Optional[MatchOptions] = None,
    config: Optional[AnalysisConfig] = None,
) -> StyleMatch:
    """Analyze two images and compute the adjustments between them."""
    base = analyze_image(base_source, config)
    target = analyze_image(target_source, config)
    return StyleMatch(base, target, calculate_adjustments(base, target, options))
