# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Preset export.

serializers/ turns an AdjustmentModel into Lightroom or Capture One
document text; orchestrator.py validates requests and delivers the
result as bytes or as a file.
"""

from filmrecipe.export.orchestrator import (
    download_capture_one_style,
    download_lightroom_preset,
    download_lightroom_profile,
    export,
    safe_filename,
    save_capture_one_style_to_folder,
    save_lightroom_preset_to_folder,
    save_lightroom_profile_to_folder,
)
from filmrecipe.export.serializers import (
    to_capture_one_basic_style,
    to_capture_one_style,
    to_lightroom_preset,
    to_lightroom_profile,
)

__all__ = [
    "export",
    "safe_filename",
    "download_lightroom_preset",
    "download_lightroom_profile",
    "download_capture_one_style",
    "save_lightroom_preset_to_folder",
    "save_lightroom_profile_to_folder",
    "save_capture_one_style_to_folder",
    "to_lightroom_preset",
    "to_lightroom_profile",
    "to_capture_one_style",
    "to_capture_one_basic_style",
]
