# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Schema definitions for analysis results, recipes and export requests.

All types in this module are immutable (frozen dataclasses). Validation
happens at construction; ``from_dict`` rejects unknown or mistyped fields.
"""

from filmrecipe.schema.adjustments import (
    HSL_BANDS,
    AdjustmentModel,
    ColorGrading,
    ColorWheel,
    CurvePoint,
    DetailSettings,
    GrainSettings,
    GrayMixer,
    HSLBand,
    HSLTable,
    IncludeFlags,
    ParametricCurve,
    ToneCurves,
    ToneSettings,
    VignetteSettings,
)
from filmrecipe.schema.analysis import (
    AdjustmentSet,
    ChannelHistogram,
    ColorAnalysis,
    ColorBalance,
    DominantColor,
    MatchOptions,
    RGBColor,
)
from filmrecipe.schema.masks import (
    MASK_KINDS,
    ColorRangeMask,
    LinearMask,
    LocalAdjustments,
    LuminanceRangeMask,
    Mask,
    RadialMask,
    SubjectMask,
    apply_mask_overrides,
    normalize_mask_type,
    parse_mask,
)
from filmrecipe.schema.request import (
    ExportAction,
    ExportRequest,
    ExportResponse,
    ExportType,
)

__all__ = [
    # Analysis
    "RGBColor",
    "ChannelHistogram",
    "DominantColor",
    "ColorAnalysis",
    "MatchOptions",
    "ColorBalance",
    "AdjustmentSet",
    # Recipe
    "HSL_BANDS",
    "AdjustmentModel",
    "ToneSettings",
    "HSLBand",
    "HSLTable",
    "GrayMixer",
    "ColorWheel",
    "ColorGrading",
    "ParametricCurve",
    "CurvePoint",
    "ToneCurves",
    "GrainSettings",
    "VignetteSettings",
    "DetailSettings",
    "IncludeFlags",
    # Masks
    "MASK_KINDS",
    "Mask",
    "LocalAdjustments",
    "RadialMask",
    "LinearMask",
    "SubjectMask",
    "ColorRangeMask",
    "LuminanceRangeMask",
    "parse_mask",
    "normalize_mask_type",
    "apply_mask_overrides",
    # Export contract
    "ExportType",
    "ExportAction",
    "ExportRequest",
    "ExportResponse",
]
