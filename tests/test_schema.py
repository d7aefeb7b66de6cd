# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""Tests for schema types, validation and wire-format parsing."""

import pytest

from filmrecipe.errors import ValidationError
from filmrecipe.schema import (
    AdjustmentModel,
    ChannelHistogram,
    ColorAnalysis,
    ColorRangeMask,
    CurvePoint,
    DominantColor,
    ExportAction,
    ExportRequest,
    ExportResponse,
    ExportType,
    IncludeFlags,
    LinearMask,
    LuminanceRangeMask,
    RadialMask,
    RGBColor,
    SubjectMask,
    ToneCurves,
    apply_mask_overrides,
    normalize_mask_type,
    parse_mask,
)


class TestColorTypes:

    def test_rgb_range(self):
        with pytest.raises(ValidationError):
            RGBColor(256, 0, 0)

    def test_rgb_luminance_and_saturation(self):
        c = RGBColor(200, 100, 0)
        assert c.luminance == 100.0
        assert c.saturation == 1.0
        assert RGBColor(0, 0, 0).saturation == 0.0

    def test_dominant_percentage_range(self):
        with pytest.raises(ValidationError):
            DominantColor(RGBColor(0, 0, 0), 101.0)

    def test_histogram_needs_256_bins(self):
        with pytest.raises(ValidationError, match="256"):
            ChannelHistogram(red=(0,) * 10, green=(0,) * 256, blue=(0,) * 256)

    def test_analysis_limits_dominant_colors(self):
        bins = (0,) * 256
        dominant = tuple(DominantColor(RGBColor(i, 0, 0), 10.0) for i in range(6))
        with pytest.raises(ValidationError, match="At most 5"):
            ColorAnalysis(
                histogram=ChannelHistogram(bins, bins, bins),
                average_color=RGBColor(0, 0, 0),
                dominant_colors=dominant,
                temperature=6500,
                tint=0,
            )

    def test_analysis_roundtrip(self):
        bins = tuple(range(256))
        analysis = ColorAnalysis(
            histogram=ChannelHistogram(bins, bins, bins),
            average_color=RGBColor(10, 20, 30),
            dominant_colors=(DominantColor(RGBColor(0, 16, 32), 60.0),),
            temperature=7000,
            tint=-3,
        )
        assert ColorAnalysis.from_dict(analysis.to_dict()) == analysis


class TestAdjustmentModel:

    def test_flat_mapping(self):
        model = AdjustmentModel.from_dict({
            "preset_name": "Portra",
            "contrast": 20,
            "hue_red": -5,
            "sat_blue": 10,
            "color_grade_shadow_hue": 220,
            "color_grade_global_sat": 5,
            "parametric_darks": -10,
            "tone_curve": [{"input": 0, "output": 10}, [128, 140], {"x": 255, "y": 250}],
            "grain_frequency": 40,
            "vignette_style": 2,
            "sharpen_radius": 1.2,
            "confidence": 0.9,
        })
        assert model.tone.contrast == 20.0
        assert model.hsl.red.hue == -5.0
        assert model.hsl.blue.saturation == 10.0
        assert model.color_grading.shadow.hue == 220.0
        assert model.color_grading.global_.sat == 5.0
        assert model.parametric.darks == -10.0
        assert model.curves.rgb == (CurvePoint(0, 10), CurvePoint(128, 140), CurvePoint(255, 250))
        assert model.grain.roughness == 40.0
        assert model.vignette.style == 2.0
        assert model.detail.sharpen_radius == 1.2

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError, match="bogus"):
            AdjustmentModel.from_dict({"bogus": 1})

    def test_mistyped_value_rejected(self):
        with pytest.raises(ValidationError, match="contrast"):
            AdjustmentModel.from_dict({"contrast": "high"})

    def test_bool_is_not_a_number(self):
        with pytest.raises(ValidationError):
            AdjustmentModel.from_dict({"contrast": True})

    def test_curve_must_be_monotonic(self):
        with pytest.raises(ValidationError, match="non-decreasing"):
            ToneCurves(rgb=(CurvePoint(100, 0), CurvePoint(50, 0)))

    def test_curve_point_range(self):
        with pytest.raises(ValidationError):
            CurvePoint(300, 0)

    def test_values_not_clamped(self):
        model = AdjustmentModel.from_dict({"contrast": 500})
        assert model.tone.contrast == 500.0

    def test_treatment_validated(self):
        with pytest.raises(ValidationError, match="treatment"):
            AdjustmentModel(treatment="sepia")

    def test_monochrome_detection(self):
        assert AdjustmentModel(treatment="black_and_white").is_monochrome
        assert AdjustmentModel(camera_profile="Adobe Monochrome").is_monochrome
        assert AdjustmentModel.from_dict({"saturation": -100}).is_monochrome
        assert not AdjustmentModel().is_monochrome

    def test_with_name_only_fills_gap(self):
        assert AdjustmentModel().with_name("A").preset_name == "A"
        assert AdjustmentModel(preset_name="B").with_name("A").preset_name == "B"

    def test_roundtrip(self):
        data = {
            "preset_name": "X",
            "exposure": 0.3,
            "lum_green": 4.0,
            "tone_curve_red": [{"input": 0.0, "output": 5.0}],
            "point_colors": [[1.0, 2.0, 3.0]],
            "masks": [{"type": "sky", "adjustments": {"local_exposure": -0.2}}],
        }
        model = AdjustmentModel.from_dict(data)
        assert AdjustmentModel.from_dict(model.to_dict()) == model


class TestMasks:

    def test_geometric_variants(self):
        assert isinstance(parse_mask({"type": "radial", "top": 0.1}), RadialMask)
        assert isinstance(parse_mask({"type": "linear", "zeroX": 0.2}), LinearMask)
        assert isinstance(parse_mask({"type": "range_color", "pointModels": [[0.1, 0.2]]}), ColorRangeMask)
        assert isinstance(parse_mask({"type": "range_luminance"}), LuminanceRangeMask)

    def test_linear_keys(self):
        mask = parse_mask({"type": "linear", "zeroX": 0.2, "fullY": 0.9})
        assert (mask.zero_x, mask.full_y) == (0.2, 0.9)
        assert mask.to_dict()["zeroX"] == 0.2

    def test_subject_synonyms(self):
        assert normalize_mask_type("people") == "subject"
        assert normalize_mask_type("person") == "person"
        assert normalize_mask_type("Sky") == "sky"
        assert normalize_mask_type("Eyes") == "iris_pupil"
        assert normalize_mask_type(None) == "subject"
        assert normalize_mask_type("spaceship") == "subject"

    def test_subject_config(self):
        mask = parse_mask({"type": "sky"})
        assert isinstance(mask, SubjectMask)
        assert mask.config.sub_type == "0"
        assert mask.resolved_sub_category == "50006"

    def test_caller_sub_category_fills_gap(self):
        mask = parse_mask({"type": "animal", "subCategoryId": 7})
        assert mask.resolved_sub_category == "7"

    def test_range_invert_alias(self):
        assert parse_mask({"type": "range_color", "invert": True}).inverted

    def test_luminance_range_lengths(self):
        with pytest.raises(ValidationError, match="lumRange"):
            parse_mask({"type": "range_luminance", "lumRange": [0, 1]})

    def test_unknown_mask_field(self):
        with pytest.raises(ValidationError):
            parse_mask({"type": "radial", "radius": 3})

    def test_unknown_local_adjustment(self):
        with pytest.raises(ValidationError):
            parse_mask({"type": "radial", "adjustments": {"local_glow": 1}})

    def test_display_name(self):
        assert RadialMask(name="Sun").display_name(0) == "Sun"
        assert RadialMask().display_name(2) == "Radial Mask"
        assert SubjectMask(kind="sky").display_name(0) == "Sky"
        assert SubjectMask(kind="iris_pupil").display_name(0) == "Eye Pop"
        assert SubjectMask(kind="vehicle").display_name(4) == "Mask 5"

    def test_geometry_is_flattened(self):
        mask = parse_mask({"type": "radial", "geometry": {"top": 0.1, "feather": 40}})
        assert (mask.top, mask.feather) == (0.1, 40.0)

    def test_geometry_must_be_mapping(self):
        with pytest.raises(ValidationError, match="geometry"):
            parse_mask({"type": "radial", "geometry": [0.1]})

    def test_unknown_geometry_field(self):
        with pytest.raises(ValidationError, match="radius"):
            parse_mask({"type": "radial", "geometry": {"radius": 3}})


class TestMaskOverrides:

    def _masks(self):
        return [
            {"name": "Sky", "type": "sky", "adjustments": {"local_exposure": 0.5}},
            {"name": "Face", "type": "face_skin"},
        ]

    def test_update_merges_adjustments(self):
        result = apply_mask_overrides(
            self._masks(),
            [{"op": "update", "name": "Sky", "adjustments": {"local_contrast": 10}}],
        )
        assert len(result) == 2
        assert result[0]["adjustments"] == {"local_exposure": 0.5, "local_contrast": 10}

    def test_add_appends_new(self):
        result = apply_mask_overrides(self._masks(), [{"name": "Vignette", "type": "radial"}])
        assert [m["name"] for m in result] == ["Sky", "Face", "Vignette"]

    def test_remove(self):
        result = apply_mask_overrides(self._masks(), [{"op": "remove", "name": "Sky"}])
        assert [m["name"] for m in result] == ["Face"]

    def test_clear(self):
        assert apply_mask_overrides(self._masks(), [{"op": "clear"}]) == []

    def test_unknown_op(self):
        with pytest.raises(ValidationError, match="op"):
            apply_mask_overrides(self._masks(), [{"op": "explode"}])

    def test_inputs_not_mutated(self):
        masks = self._masks()
        apply_mask_overrides(masks, [{"op": "update", "name": "Sky", "adjustments": {"local_contrast": 1}}])
        assert masks[0]["adjustments"] == {"local_exposure": 0.5}

    def test_non_mapping_mask(self):
        with pytest.raises(ValidationError, match="mapping"):
            apply_mask_overrides(["sky"], [{"op": "add", "type": "sky"}])

    def test_non_mapping_override(self):
        with pytest.raises(ValidationError, match="mapping"):
            apply_mask_overrides(self._masks(), ["sky"])

    def test_non_mapping_override_adjustments(self):
        with pytest.raises(ValidationError, match="adjustments"):
            apply_mask_overrides(self._masks(), [{"op": "update", "name": "Sky", "adjustments": [1]}])

    def test_override_geometry_merges(self):
        masks = [{"name": "Spot", "type": "radial", "top": 0.1, "left": 0.2}]
        result = apply_mask_overrides(masks, [{"op": "update", "name": "Spot", "geometry": {"top": 0.5}}])
        assert (result[0]["top"], result[0]["left"]) == (0.5, 0.2)

    def test_model_rejects_malformed_masks(self):
        with pytest.raises(ValidationError):
            AdjustmentModel.from_dict({"masks": ["sky"], "maskOverrides": [{"op": "add", "type": "sky"}]})

    def test_applied_by_model(self):
        model = AdjustmentModel.from_dict({
            "masks": self._masks(),
            "maskOverrides": [{"op": "remove", "name": "Face"}],
        })
        assert [m.name for m in model.masks] == ["Sky"]


class TestIncludeFlags:

    def test_defaults(self):
        flags = IncludeFlags()
        assert flags.basic and flags.hsl and flags.curves
        assert not flags.masks and not flags.exposure and not flags.sharpen_noise
        assert flags.strength == 0.5

    def test_aliases(self):
        flags = IncludeFlags.from_dict({"wbBasic": False, "colorGrading": False, "strength": 1})
        assert not flags.basic
        assert not flags.color_grading
        assert flags.strength == 1.0

    def test_strength_range(self):
        with pytest.raises(ValidationError, match="strength"):
            IncludeFlags(strength=2.5)

    def test_flag_types(self):
        with pytest.raises(ValidationError):
            IncludeFlags.from_dict({"hsl": "yes"})

    def test_with_masks(self):
        flags = IncludeFlags()
        assert flags.with_masks(None) is flags
        assert flags.with_masks(True).masks


class TestExportContract:

    def test_request_from_dict(self):
        request = ExportRequest.from_dict({
            "type": "capture-one-style",
            "action": "save-to-folder",
            "adjustments": {"contrast": 5},
            "recipeName": "Tri-X",
            "userRating": 4,
        })
        assert request.type is ExportType.CAPTURE_ONE_STYLE
        assert request.action is ExportAction.SAVE_TO_FOLDER
        assert request.recipe_name == "Tri-X"

    def test_action_defaults_to_download(self):
        assert ExportRequest.from_dict({"type": "lightroom-preset"}).action is ExportAction.DOWNLOAD

    def test_unknown_type(self):
        with pytest.raises(ValidationError, match="Unknown export type"):
            ExportRequest(type="photoshop-action", action="download")

    def test_unknown_action(self):
        with pytest.raises(ValidationError, match="Unknown export action"):
            ExportRequest(type="lightroom-preset", action="email")

    def test_missing_type(self):
        with pytest.raises(ValidationError, match="type"):
            ExportRequest.from_dict({"action": "download"})

    def test_user_rating_range(self):
        with pytest.raises(ValidationError, match="userRating"):
            ExportRequest(type="lightroom-preset", action="download", user_rating=9)

    def test_response_to_dict(self):
        assert ExportResponse.failure("nope").to_dict() == {"success": False, "error": "nope"}
        ok = ExportResponse(success=True, file_path="/a/b.xmp", output_path="/a/b.xmp")
        assert ok.to_dict() == {"success": True, "filePath": "/a/b.xmp", "outputPath": "/a/b.xmp"}
