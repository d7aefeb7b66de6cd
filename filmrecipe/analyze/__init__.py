# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Image analysis and style matching.

Pipeline:
1. Decode and resize (pixels.py)
2. Histogram, average, dominant colors, temperature/tint (stats.py)
3. Compare two analyses into an AdjustmentSet (matching.py)

colorspace.py adds CIELAB and cast diagnostics; worker.py runs analysis
tasks off the event loop.
"""

from filmrecipe.analyze.colorspace import (
    ColorCast,
    analyze_color_balance,
    color_correction_gains,
    delta_e_2000,
    match_histogram,
    mccamy_temperature,
    rgb_to_hsv,
    rgb_to_lab,
)
from filmrecipe.analyze.matching import (
    StyleMatch,
    calculate_adjustments,
    contrast_metric,
    match_style,
)
from filmrecipe.analyze.pixels import PixelBuffer, decode_image, load_pixels
from filmrecipe.analyze.stats import analyze_colors, analyze_image
from filmrecipe.analyze.worker import AnalysisResponse, AnalysisTask, AnalysisWorker

__all__ = [
    "PixelBuffer",
    "decode_image",
    "load_pixels",
    "analyze_colors",
    "analyze_image",
    "calculate_adjustments",
    "contrast_metric",
    "match_style",
    "StyleMatch",
    "rgb_to_lab",
    "rgb_to_hsv",
    "delta_e_2000",
    "match_histogram",
    "color_correction_gains",
    "mccamy_temperature",
    "analyze_color_balance",
    "ColorCast",
    "AnalysisWorker",
    "AnalysisTask",
    "AnalysisResponse",
]
