# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""Tests for the adjustment calculator."""

import math

import numpy as np
import pytest

from filmrecipe.analyze import PixelBuffer, analyze_colors, calculate_adjustments, contrast_metric, match_style
from filmrecipe.errors import ValidationError
from filmrecipe.schema import AdjustmentSet, ChannelHistogram, MatchOptions


def _analysis(r, g, b):
    return analyze_colors(PixelBuffer(np.full((8, 8, 3), [r, g, b], dtype=np.uint8)))


def _histogram(weights):
    bins = [0] * 256
    for index, count in weights.items():
        bins[index] = count
    return ChannelHistogram(red=tuple(bins), green=tuple(bins), blue=tuple(bins))


NONE = MatchOptions(
    match_brightness=False, match_colors=False, match_contrast=False, match_saturation=False
)


class TestContrastMetric:

    def test_empty_histogram(self):
        assert contrast_metric(_histogram({})) == 1.0

    def test_single_bin_has_no_spread(self):
        assert contrast_metric(_histogram({100: 50})) == 0.0

    def test_two_extremes(self):
        # mean 127.5, standard deviation 127.5
        assert contrast_metric(_histogram({0: 10, 255: 10})) == pytest.approx(127.5 / 128)


class TestCalculateAdjustments:

    def test_identical_images_are_identity(self):
        a = _analysis(120, 100, 80)
        result = calculate_adjustments(a, a)
        assert result.exposure == 0.0
        assert result.brightness == 1.0
        assert result.saturation == pytest.approx(1.0)
        assert result.color_balance.to_dict() == {"red": 1.0, "green": 1.0, "blue": 1.0}
        assert result.temperature == a.temperature

    def test_brightness_ratio_and_exposure(self):
        result = calculate_adjustments(_analysis(200, 200, 200), _analysis(100, 100, 100))
        assert result.brightness == pytest.approx(2.0)
        assert result.exposure == pytest.approx(0.5)

    def test_brightness_clamped(self):
        result = calculate_adjustments(_analysis(255, 255, 255), _analysis(10, 10, 10))
        assert result.brightness == 3.0
        assert result.exposure == pytest.approx(math.log2(3.0) * 0.5)

    def test_black_target_is_identity(self):
        result = calculate_adjustments(_analysis(200, 200, 200), _analysis(0, 0, 0))
        assert result.brightness == 1.0
        assert result.exposure == 0.0
        assert result.color_balance.red == 1.0

    def test_colors_copy_base_temperature(self):
        base, target = _analysis(200, 100, 50), _analysis(50, 100, 200)
        result = calculate_adjustments(base, target)
        assert result.temperature == base.temperature
        assert result.tint == base.tint
        assert result.color_balance.red == 2.0
        assert result.color_balance.green == 1.0
        assert result.color_balance.blue == 0.5

    def test_disabled_rules_keep_target_white_balance(self):
        base, target = _analysis(200, 100, 50), _analysis(50, 100, 200)
        result = calculate_adjustments(base, target, NONE)
        assert result.temperature == target.temperature
        assert result.tint == target.tint
        assert result == AdjustmentSet(temperature=target.temperature, tint=target.tint)

    def test_gray_target_saturation_identity(self):
        result = calculate_adjustments(_analysis(200, 50, 50), _analysis(90, 90, 90))
        assert result.saturation == 1.0

    def test_ratios_stay_in_range(self):
        result = calculate_adjustments(_analysis(255, 0, 0), _analysis(1, 1, 254))
        for value in (result.brightness, result.contrast, result.saturation):
            assert 0.1 <= value <= 3.0

    def test_to_dict_keys(self):
        d = calculate_adjustments(_analysis(1, 2, 3), _analysis(3, 2, 1)).to_dict()
        assert set(d) == {
            "exposure", "brightness", "contrast", "saturation",
            "temperature", "tint", "colorBalance",
        }


class TestMatchOptions:

    def test_missing_flags_are_false(self):
        options = MatchOptions.from_dict({"matchColors": True})
        assert options.match_colors
        assert not options.match_brightness

    def test_defaults_enable_everything(self):
        options = MatchOptions()
        assert options.match_brightness and options.match_contrast


class TestAdjustmentSetValidation:

    def test_rejects_out_of_range_ratio(self):
        with pytest.raises(ValidationError):
            AdjustmentSet(brightness=5.0)

    def test_rejects_non_finite(self):
        with pytest.raises(ValidationError):
            AdjustmentSet(exposure=float("inf"))


class TestMatchStyle:

    def test_arrays(self):
        base = np.full((20, 20, 3), [180, 160, 140], dtype=np.uint8)
        target = np.full((20, 20, 3), [90, 80, 70], dtype=np.uint8)
        match = match_style(base, target)
        assert match.adjustments.brightness == pytest.approx(2.0)
        d = match.to_dict()
        assert set(d) == {"baseAnalysis", "targetAnalysis", "adjustments"}
