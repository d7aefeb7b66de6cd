# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Serializers for preset, profile and style output.

Each serializer is a pure function of (AdjustmentModel, IncludeFlags) and
returns the complete document text.
"""

from filmrecipe.export.serializers.capture_one import (
    to_capture_one_basic_style,
    to_capture_one_style,
)
from filmrecipe.export.serializers.crs import (
    normalize_camera_profile,
    sanitize_preset_name,
    select_camera_profile,
)
from filmrecipe.export.serializers.lightroom import to_lightroom_preset
from filmrecipe.export.serializers.profile import to_lightroom_profile

__all__ = [
    "to_lightroom_preset",
    "to_lightroom_profile",
    "to_capture_one_style",
    "to_capture_one_basic_style",
    "sanitize_preset_name",
    "normalize_camera_profile",
    "select_camera_profile",
]
