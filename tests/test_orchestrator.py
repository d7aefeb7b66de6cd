# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""Tests for export dispatch, filenames and file delivery."""

import importlib
import os
from datetime import datetime

import pytest

from filmrecipe.config import ExportConfig
from filmrecipe.export import (
    download_capture_one_style,
    download_lightroom_preset,
    download_lightroom_profile,
    export,
    safe_filename,
    save_capture_one_style_to_folder,
    save_lightroom_preset_to_folder,
)
from filmrecipe.export.orchestrator import write_atomic
from filmrecipe.errors import ExportIOError
from filmrecipe.schema import AdjustmentModel, ExportRequest, IncludeFlags

NOW = datetime(2026, 1, 2, 3, 4, 5)

ADJUSTMENTS = {
    "contrast": 20,
    "hue_red": -5,
    "masks": [{"type": "radial", "name": "Spot", "adjustments": {"local_exposure": 0.5}}],
}


def _request(**overrides):
    data = {
        "type": "lightroom-preset",
        "action": "download",
        "adjustments": ADJUSTMENTS,
        "recipeName": "Portra Warm!",
    }
    data.update(overrides)
    return data


class TestSafeFilename:

    def test_strips_and_dashes(self):
        assert safe_filename("Portra  Warm!") == "Portra-Warm"
        assert safe_filename("  Tri-X_400 / pushed ") == "Tri-X_400-pushed"

    def test_empty(self):
        assert safe_filename(None) == ""
        assert safe_filename("???") == ""


class TestDownload:

    def test_lightroom_preset(self):
        response = export(_request())
        assert response.success
        assert response.filename == "Portra-Warm.xmp"
        assert response.buffer.decode("utf-8").startswith("<?xpacket")
        assert response.output_path is None

    def test_recipe_name_becomes_preset_name(self):
        text = export(_request(recipeName="Velvia")).buffer.decode("utf-8")
        assert 'crs:Name="Velvia"' in text

    @pytest.mark.parametrize(
        "export_type, filename",
        [
            ("lightroom-preset", "Portra-Warm.xmp"),
            ("lightroom-profile", "Portra-Warm-Profile.xmp"),
            ("capture-one-style", "Portra-Warm.costyle"),
            ("capture-one-basic-style", "Portra-Warm-Basic.costyle"),
        ],
    )
    def test_filenames(self, export_type, filename):
        assert export(_request(type=export_type)).filename == filename

    @pytest.mark.parametrize(
        "export_type, filename",
        [
            ("lightroom-preset", "Custom-Preset.xmp"),
            ("lightroom-profile", "Custom-Profile-Profile.xmp"),
            ("capture-one-style", "Custom-Style.costyle"),
        ],
    )
    def test_default_names(self, export_type, filename):
        request = _request(type=export_type)
        del request["recipeName"]
        assert export(request).filename == filename

    def test_accepts_request_object(self):
        request = ExportRequest(
            type="capture-one-style",
            action="download",
            adjustments=AdjustmentModel.from_dict(ADJUSTMENTS),
            recipe_name="Gold",
        )
        response = export(request)
        assert response.success
        assert response.buffer.decode("utf-8").startswith('<?xml version="1.0"?>')

    def test_user_rating_accepted(self):
        assert export(_request(userRating=5)).success


class TestFailures:

    def test_unknown_type(self):
        response = export(_request(type="photoshop-action"))
        assert not response.success
        assert "Unknown export type" in response.error

    def test_unknown_action(self):
        response = export(_request(action="print"))
        assert not response.success
        assert "Unknown export action" in response.error

    def test_invalid_adjustments(self):
        response = export(_request(adjustments={"contrast": "lots"}))
        assert not response.success
        assert "contrast" in response.error

    def test_non_mapping_mask_with_overrides(self):
        adjustments = {"masks": ["sky"], "maskOverrides": [{"op": "add", "type": "sky"}]}
        response = export(_request(adjustments=adjustments))
        assert response.success is False
        assert "mapping" in response.error

    def test_non_mapping_override_adjustments(self):
        adjustments = {
            "masks": [{"type": "sky"}],
            "maskOverrides": [{"op": "update", "type": "sky", "adjustments": [1]}],
        }
        response = export(_request(adjustments=adjustments))
        assert response.success is False
        assert "adjustments" in response.error

    def test_convenience_rejects_malformed_masks(self):
        response = download_lightroom_preset({"masks": [["sky"]], "maskOverrides": []})
        assert response.success is False

    def test_unexpected_error_becomes_failure(self, monkeypatch, tmp_path):
        def broken(*args, **kwargs):
            raise RuntimeError("renderer exploded")

        monkeypatch.setattr(
            importlib.import_module("filmrecipe.export.orchestrator"), "write_atomic", broken
        )
        response = export(_request(action="save-to-folder"), tmp_path / "out.xmp")
        assert response.success is False
        assert "renderer exploded" in response.error

    def test_bad_rating(self):
        assert not export(_request(userRating=7)).success

    def test_non_finite_value(self):
        request = ExportRequest(
            type="lightroom-preset",
            action="download",
            adjustments=AdjustmentModel.from_dict({"contrast": float("nan")}),
        )
        response = export(request)
        assert not response.success
        assert "finite" in response.error

    def test_save_needs_destination(self):
        response = export(_request(action="save-to-folder"))
        assert not response.success
        assert "destination" in response.error

    def test_save_needs_absolute_path(self):
        response = export(_request(action="save-to-folder"), "relative/out.xmp")
        assert not response.success
        assert "absolute" in response.error


class TestSaveToFolder:

    def test_directory_gets_timestamped_name(self, tmp_path):
        response = export(_request(action="save-to-folder"), tmp_path, now=NOW)
        assert response.success
        expected = tmp_path / "Portra-Warm-20260102-030405.xmp"
        assert response.output_path == str(expected)
        assert response.file_path == str(expected)
        assert expected.read_bytes() == export(_request()).buffer
        assert os.listdir(tmp_path) == [expected.name]

    def test_suffix_follows_timestamp(self, tmp_path):
        response = export(_request(type="capture-one-basic-style", action="save-to-folder"), tmp_path, now=NOW)
        assert response.filename == "Portra-Warm-20260102-030405-Basic.costyle"

    def test_timestamp_format_from_config(self, tmp_path):
        config = ExportConfig(timestamp_format="%Y")
        response = export(_request(action="save-to-folder"), tmp_path, now=NOW, config=config)
        assert response.filename == "Portra-Warm-2026.xmp"

    def test_trailing_separator_creates_directory(self, tmp_path):
        target = str(tmp_path / "new" / "presets") + os.sep
        response = export(_request(action="save-to-folder"), target, now=NOW)
        assert response.success
        assert (tmp_path / "new" / "presets" / "Portra-Warm-20260102-030405.xmp").is_file()

    def test_explicit_file_path(self, tmp_path):
        destination = tmp_path / "exact.xmp"
        response = export(_request(action="save-to-folder"), destination)
        assert response.success
        assert response.output_path == str(destination)
        assert destination.read_text(encoding="utf-8").startswith("<?xpacket")

    def test_overwrites_existing_file(self, tmp_path):
        destination = tmp_path / "exact.xmp"
        destination.write_text("old")
        assert export(_request(action="save-to-folder"), destination).success
        assert destination.read_text(encoding="utf-8") != "old"

    def test_missing_parent_fails_cleanly(self, tmp_path):
        destination = tmp_path / "missing" / "out.xmp"
        response = export(_request(action="save-to-folder"), destination)
        assert not response.success
        assert not (tmp_path / "missing").exists()


class TestWriteAtomic:

    def test_writes_bytes(self, tmp_path):
        path = tmp_path / "a.bin"
        write_atomic(path, b"abc")
        assert path.read_bytes() == b"abc"
        assert os.listdir(tmp_path) == ["a.bin"]

    def test_failure_raises_export_error(self, tmp_path):
        with pytest.raises(ExportIOError) as exc:
            write_atomic(tmp_path / "nope" / "a.bin", b"abc")
        assert exc.value.path == str(tmp_path / "nope" / "a.bin")


class TestConvenience:

    def test_masks_on_by_default(self):
        response = download_lightroom_preset(ADJUSTMENTS, recipe_name="Spot")
        assert response.success
        assert b"MaskGroupBasedCorrections" in response.buffer

    def test_include_masks_override(self):
        response = download_lightroom_preset(ADJUSTMENTS, include_masks=False)
        assert b"MaskGroupBasedCorrections" not in response.buffer

    def test_explicit_include_respected(self):
        response = download_lightroom_preset(ADJUSTMENTS, include={"masks": False, "hsl": False})
        assert b"MaskGroupBasedCorrections" not in response.buffer
        assert b"HueAdjustment" not in response.buffer

    def test_profile_never_has_masks(self):
        response = download_lightroom_profile(ADJUSTMENTS, include_masks=True)
        assert b"MaskGroupBasedCorrections" not in response.buffer

    def test_capture_one_basic(self):
        response = download_capture_one_style(ADJUSTMENTS, recipe_name="Gold", basic=True)
        assert response.filename == "Gold-Basic.costyle"
        assert response.buffer.endswith(b"<LDS>\n</LDS>\n")

    def test_capture_one_layers(self):
        response = download_capture_one_style(ADJUSTMENTS, IncludeFlags(), include_masks=True)
        assert b'<E K="MaskType" V="2" />' in response.buffer

    def test_invalid_adjustments(self):
        response = download_lightroom_preset({"nonsense": 1})
        assert not response.success

    def test_save_helpers(self, tmp_path):
        preset = save_lightroom_preset_to_folder(ADJUSTMENTS, tmp_path, recipe_name="A")
        style = save_capture_one_style_to_folder(ADJUSTMENTS, tmp_path / "b.costyle")
        assert preset.success and style.success
        assert (tmp_path / "b.costyle").is_file()
