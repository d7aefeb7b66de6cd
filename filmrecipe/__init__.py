# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Filmrecipe -- color matching and film recipe export.

Measures the color character of a reference image, derives the global
corrections that move another image toward it, and writes film recipes
as Lightroom presets, Lightroom profiles or Capture One styles.

Quick start::

    from filmrecipe import analyze_image, match_style, export

    a = analyze_image("reference.jpg")
    m = match_style("reference.jpg", "target.jpg")
    r = export({
        "type": "lightroom-preset",
        "action": "download",
        "adjustments": {"contrast": 20, "hue_red": -5},
        "recipeName": "Portra Warm",
    })
    r.filename   # "Portra-Warm.xmp"
"""

from __future__ import annotations

__version__ = "1.0.0"

from filmrecipe.analyze import analyze_image, calculate_adjustments, match_style
from filmrecipe.config import Config, load_config
from filmrecipe.errors import (
    DecodeError,
    ExportIOError,
    FilmRecipeError,
    SerializationError,
    ValidationError,
)
from filmrecipe.export import (
    export,
    to_capture_one_basic_style,
    to_capture_one_style,
    to_lightroom_preset,
    to_lightroom_profile,
)
from filmrecipe.schema import (
    AdjustmentModel,
    AdjustmentSet,
    ColorAnalysis,
    ExportRequest,
    ExportResponse,
    IncludeFlags,
    MatchOptions,
)

__all__ = [
    # Core API
    "analyze_image",
    "calculate_adjustments",
    "match_style",
    "export",
    "to_lightroom_preset",
    "to_lightroom_profile",
    "to_capture_one_style",
    "to_capture_one_basic_style",
    # Types
    "ColorAnalysis",
    "MatchOptions",
    "AdjustmentSet",
    "AdjustmentModel",
    "IncludeFlags",
    "ExportRequest",
    "ExportResponse",
    # Config and errors
    "Config",
    "load_config",
    "FilmRecipeError",
    "DecodeError",
    "ValidationError",
    "SerializationError",
    "ExportIOError",
    # Version
    "__version__",
]
