# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Color analysis and matching results.

Design principles:
- Immutable: All types are frozen dataclasses
- Deterministic: Same pixels produce the same analysis
- Serializable: ``to_dict`` uses the camelCase keys the UI layer expects

RGB values are 8-bit sRGB integers (0-255). Temperature is a Kelvin-like
heuristic centered on 6500; tint is a signed magenta/green shift.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from filmrecipe.errors import ValidationError
from filmrecipe.schema._parse import mapping


# =============================================================================
# Clamp Ranges
# =============================================================================

RATIO_RANGE = (0.1, 3.0)
BALANCE_RANGE = (0.5, 2.0)
HISTOGRAM_BINS = 256


# =============================================================================
# Core Color Types
# =============================================================================


@dataclass(frozen=True, slots=True)
class RGBColor:
    """An 8-bit sRGB color."""
    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValidationError(f"{name} must be 0-255, got {value}")

    @property
    def luminance(self) -> float:
        """Unweighted channel mean, used for brightness matching."""
        return (self.r + self.g + self.b) / 3.0

    @property
    def saturation(self) -> float:
        """HSV-style saturation ``(max - min) / max``; 0 for black."""
        high = max(self.r, self.g, self.b)
        if high == 0:
            return 0.0
        return (high - min(self.r, self.g, self.b)) / high

    def to_dict(self) -> dict:
        return {"r": self.r, "g": self.g, "b": self.b}

    @classmethod
    def from_dict(cls, data: dict) -> RGBColor:
        return cls(r=data["r"], g=data["g"], b=data["b"])


@dataclass(frozen=True, slots=True)
class DominantColor:
    """
    A quantized color and its share of the analyzed pixels.

    Attributes:
        color: Bucket color (each channel a multiple of the quantize step)
        percentage: Share of pixels in percent, rounded to 2 decimals
    """
    color: RGBColor
    percentage: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.percentage <= 100.0:
            raise ValidationError(f"percentage must be 0-100, got {self.percentage}")

    def to_dict(self) -> dict:
        return {"color": self.color.to_dict(), "percentage": self.percentage}

    @classmethod
    def from_dict(cls, data: dict) -> DominantColor:
        return cls(color=RGBColor.from_dict(data["color"]), percentage=data["percentage"])


@dataclass(frozen=True, slots=True)
class ChannelHistogram:
    """Per-channel 256-bin pixel counts."""
    red: tuple[int, ...]
    green: tuple[int, ...]
    blue: tuple[int, ...]

    def __post_init__(self) -> None:
        for name in ("red", "green", "blue"):
            bins = getattr(self, name)
            if len(bins) != HISTOGRAM_BINS:
                raise ValidationError(
                    f"{name} histogram must have {HISTOGRAM_BINS} bins, got {len(bins)}"
                )

    def luminance(self) -> list[float]:
        """Weighted luminance histogram (Rec. 601 weights per bin)."""
        return [
            r * 0.299 + g * 0.587 + b * 0.114
            for r, g, b in zip(self.red, self.green, self.blue)
        ]

    def to_dict(self) -> dict:
        return {"red": list(self.red), "green": list(self.green), "blue": list(self.blue)}

    @classmethod
    def from_dict(cls, data: dict) -> ChannelHistogram:
        return cls(
            red=tuple(data["red"]),
            green=tuple(data["green"]),
            blue=tuple(data["blue"]),
        )


# =============================================================================
# Analysis Result
# =============================================================================


@dataclass(frozen=True, slots=True)
class ColorAnalysis:
    """
    Pixel statistics for one image.

    Attributes:
        histogram: R/G/B histograms of the analyzed (resized) pixels
        average_color: Per-channel mean, rounded half up
        dominant_colors: Up to five quantized colors, most frequent first
        temperature: ``round(6500 - (avgB / avgR - 1) * 1000)``
        tint: ``round(((avgR + avgB) / 2 - avgG) / 2.55)``
        pixel_count: Number of pixels analyzed
    """
    histogram: ChannelHistogram
    average_color: RGBColor
    dominant_colors: tuple[DominantColor, ...]
    temperature: int
    tint: int
    pixel_count: int = 0

    def __post_init__(self) -> None:
        if len(self.dominant_colors) > 5:
            raise ValidationError(
                f"At most 5 dominant colors allowed, got {len(self.dominant_colors)}"
            )
        total = sum(dc.percentage for dc in self.dominant_colors)
        if total > 100.0 + 1e-6:
            raise ValidationError(f"Dominant color percentages sum to {total}")

    def to_dict(self) -> dict:
        """Serialize using the UI wire keys."""
        return {
            "histogram": self.histogram.to_dict(),
            "averageColor": self.average_color.to_dict(),
            "dominantColors": [dc.to_dict() for dc in self.dominant_colors],
            "temperature": self.temperature,
            "tint": self.tint,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ColorAnalysis:
        return cls(
            histogram=ChannelHistogram.from_dict(data["histogram"]),
            average_color=RGBColor.from_dict(data["averageColor"]),
            dominant_colors=tuple(
                DominantColor.from_dict(dc) for dc in data.get("dominantColors", [])
            ),
            temperature=data["temperature"],
            tint=data["tint"],
            pixel_count=data.get("pixelCount", 0),
        )


# =============================================================================
# Matching
# =============================================================================


@dataclass(frozen=True, slots=True)
class MatchOptions:
    """Which matching rules the calculator applies."""
    match_brightness: bool = True
    match_colors: bool = True
    match_contrast: bool = True
    match_saturation: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> MatchOptions:
        """Accept the camelCase flags sent by the UI layer."""
        data = mapping(data, "options")
        return cls(
            match_brightness=bool(data.get("matchBrightness", False)),
            match_colors=bool(data.get("matchColors", False)),
            match_contrast=bool(data.get("matchContrast", False)),
            match_saturation=bool(data.get("matchSaturation", False)),
        )


@dataclass(frozen=True, slots=True)
class ColorBalance:
    """Per-channel gain, each within BALANCE_RANGE."""
    red: float = 1.0
    green: float = 1.0
    blue: float = 1.0

    def __post_init__(self) -> None:
        low, high = BALANCE_RANGE
        for name in ("red", "green", "blue"):
            value = getattr(self, name)
            if not math.isfinite(value) or not low <= value <= high:
                raise ValidationError(f"color balance {name} must be {low}-{high}, got {value}")

    def to_dict(self) -> dict:
        return {"red": self.red, "green": self.green, "blue": self.blue}


@dataclass(frozen=True, slots=True)
class AdjustmentSet:
    """
    Global corrections that move the target image toward the base image.

    Ratio fields (brightness, contrast, saturation) are always inside
    RATIO_RANGE; construction fails otherwise.
    """
    exposure: float = 0.0
    brightness: float = 1.0
    contrast: float = 1.0
    saturation: float = 1.0
    temperature: float = 6500.0
    tint: float = 0.0
    color_balance: ColorBalance = field(default_factory=ColorBalance)

    def __post_init__(self) -> None:
        for name in ("exposure", "temperature", "tint"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValidationError(f"{name} must be finite, got {value}")
        low, high = RATIO_RANGE
        for name in ("brightness", "contrast", "saturation"):
            value = getattr(self, name)
            if not math.isfinite(value) or not low <= value <= high:
                raise ValidationError(f"{name} must be {low}-{high}, got {value}")

    def to_dict(self) -> dict:
        return {
            "exposure": self.exposure,
            "brightness": self.brightness,
            "contrast": self.contrast,
            "saturation": self.saturation,
            "temperature": self.temperature,
            "tint": self.tint,
            "colorBalance": self.color_balance.to_dict(),
        }
