# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""Tests for decoding and per-image color statistics."""

import numpy as np
import pytest
from PIL import Image

from filmrecipe.analyze import PixelBuffer, analyze_colors, analyze_image, decode_image, load_pixels
from filmrecipe.analyze.pixels import fit_inside
from filmrecipe.analyze.stats import estimate_temperature, estimate_tint
from filmrecipe.config import AnalysisConfig
from filmrecipe.errors import DecodeError
from filmrecipe.schema import RGBColor


def _solid_image(r, g, b, height=10, width=10):
    return np.full((height, width, 3), [r, g, b], dtype=np.uint8)


def _two_tone_image(rgb1, rgb2, height=10, width=20):
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[:, : width // 2] = rgb1
    img[:, width // 2 :] = rgb2
    return img


class TestPixelBuffer:

    def test_accepts_rgb_and_rgba(self):
        assert PixelBuffer(np.zeros((2, 3, 3), dtype=np.uint8)).pixel_count == 6
        assert PixelBuffer(np.zeros((2, 3, 4), dtype=np.uint8)).channels == 4

    def test_rejects_bad_shape(self):
        with pytest.raises(DecodeError):
            PixelBuffer(np.zeros((4, 4), dtype=np.uint8))

    def test_rejects_wrong_dtype(self):
        with pytest.raises(DecodeError, match="uint8"):
            PixelBuffer(np.zeros((4, 4, 3), dtype=np.float32))

    def test_rejects_empty(self):
        with pytest.raises(DecodeError):
            PixelBuffer(np.zeros((0, 4, 3), dtype=np.uint8))


class TestResize:

    def test_fit_inside_keeps_aspect(self):
        assert fit_inside(600, 300, 256) == (256, 128)

    def test_never_enlarges(self):
        assert fit_inside(100, 50, 256) == (100, 50)

    def test_load_pixels_resizes_arrays(self):
        buffer = load_pixels(np.zeros((300, 600, 3), dtype=np.uint8), max_size=256)
        assert (buffer.width, buffer.height) == (256, 128)

    def test_rejects_unknown_source(self):
        with pytest.raises(DecodeError, match="Unsupported"):
            load_pixels(42)


class TestDecode:

    def test_decodes_png_file(self, tmp_path):
        path = tmp_path / "red.png"
        Image.fromarray(_solid_image(255, 0, 0, 20, 30)).save(path)
        buffer = decode_image(path)
        assert (buffer.width, buffer.height) == (30, 20)
        assert tuple(buffer.pixels[0, 0, :3]) == (255, 0, 0)

    def test_missing_file_carries_path(self, tmp_path):
        path = tmp_path / "missing.png"
        with pytest.raises(DecodeError) as exc:
            decode_image(path)
        assert exc.value.path == str(path)

    def test_garbage_bytes(self):
        with pytest.raises(DecodeError):
            decode_image(b"definitely not an image")

    def test_oversized_image_is_decode_error(self, tmp_path, monkeypatch):
        path = tmp_path / "huge.png"
        Image.fromarray(_solid_image(10, 20, 30, 100, 100)).save(path)
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
        with pytest.raises(DecodeError, match="exceeds limit") as exc:
            decode_image(path)
        assert exc.value.path == str(path)


class TestAnalyzeColors:

    def test_solid_color(self):
        analysis = analyze_colors(PixelBuffer(_solid_image(200, 100, 50)))
        assert analysis.average_color == RGBColor(200, 100, 50)
        assert analysis.histogram.red[200] == 100
        assert analysis.histogram.green[100] == 100
        assert sum(analysis.histogram.blue) == 100
        assert len(analysis.dominant_colors) == 1
        assert analysis.dominant_colors[0].color == RGBColor(192, 96, 48)
        assert analysis.dominant_colors[0].percentage == 100.0

    def test_temperature_and_tint(self):
        analysis = analyze_colors(PixelBuffer(_solid_image(200, 100, 50)))
        # 6500 - (50/200 - 1) * 1000
        assert analysis.temperature == 7250
        # ((200 + 50) / 2 - 100) / 2.55 = 9.8
        assert analysis.tint == 10

    def test_black_is_neutral(self):
        analysis = analyze_colors(PixelBuffer(_solid_image(0, 0, 0)))
        assert analysis.temperature == 6500
        assert analysis.tint == 0

    def test_ties_keep_scan_order(self):
        img = _two_tone_image([0, 0, 255], [255, 0, 0])
        dominant = analyze_colors(PixelBuffer(img)).dominant_colors
        assert [dc.percentage for dc in dominant] == [50.0, 50.0]
        assert dominant[0].color == RGBColor(0, 0, 240)

    def test_percentages_never_exceed_100(self):
        # 3/7, 2/7, 1/7, 1/7 round to 42.86 + 28.57 + 14.29 + 14.29
        row = [[0, 0, 0]] * 3 + [[255, 0, 0]] * 2 + [[0, 255, 0], [0, 0, 255]]
        img = np.array([row], dtype=np.uint8)
        dominant = analyze_colors(PixelBuffer(img)).dominant_colors
        assert [dc.percentage for dc in dominant] == [42.86, 28.57, 14.29, 14.28]

    def test_dominant_limit(self):
        colors = [[i * 40, 0, 0] for i in range(7)]
        img = np.array([colors], dtype=np.uint8)
        assert len(analyze_colors(PixelBuffer(img)).dominant_colors) == 5
        config = AnalysisConfig(max_dominant=2)
        assert len(analyze_colors(PixelBuffer(img), config).dominant_colors) == 2

    def test_alpha_ignored(self):
        rgba = np.zeros((4, 4, 4), dtype=np.uint8)
        rgba[..., :3] = [10, 20, 30]
        rgba[..., 3] = 7
        analysis = analyze_colors(PixelBuffer(rgba))
        assert analysis.average_color == RGBColor(10, 20, 30)

    def test_input_not_modified(self):
        img = _two_tone_image([200, 50, 50], [50, 50, 200])
        before = img.copy()
        analyze_colors(PixelBuffer(img))
        assert np.array_equal(img, before)

    def test_deterministic(self):
        img = _two_tone_image([200, 50, 50], [50, 50, 200])
        assert analyze_colors(PixelBuffer(img)) == analyze_colors(PixelBuffer(img))

    def test_to_dict_keys(self):
        d = analyze_colors(PixelBuffer(_solid_image(1, 2, 3))).to_dict()
        assert set(d) == {"histogram", "averageColor", "dominantColors", "temperature", "tint"}
        assert len(d["histogram"]["red"]) == 256


class TestAnalyzeImage:

    def test_from_path_is_resized(self, tmp_path):
        path = tmp_path / "big.png"
        Image.fromarray(_solid_image(90, 90, 90, 400, 800)).save(path)
        analysis = analyze_image(path, AnalysisConfig(max_size=64))
        assert analysis.pixel_count == 64 * 32
        assert analysis.average_color == RGBColor(90, 90, 90)

    def test_heuristics_directly(self):
        assert estimate_temperature(RGBColor(100, 100, 100)) == 6500
        assert estimate_tint(RGBColor(100, 100, 100)) == 0
