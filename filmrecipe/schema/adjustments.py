# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
AdjustmentModel -- canonical film recipe.

The model aggregates every global and local adjustment a preset can carry.
Values use editor slider units and are NOT clamped here: serializers clamp
and rescale into each target format's native range. Construction only
checks types and structural invariants (curve ordering, enum values).

Wire format (``from_dict`` / ``to_dict``) is the flat recipe mapping:

    exposure, temperature, tint, contrast, highlights, ...
    hue_red, sat_red, lum_red, ...              HSL, 8 bands
    gray_red, ...                               B&W mixer, 8 bands
    color_grade_shadow_hue, ...                 color wheels
    parametric_shadows, ...                     parametric curve
    tone_curve, tone_curve_red, ...             point curves (0-255)
    point_colors, grain_*, vignette_*, sharpen_* / *_noise_reduction
    masks, maskOverrides
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from typing import Optional

from filmrecipe.errors import ValidationError
from filmrecipe.schema._parse import (
    is_number,
    mapping,
    number_tuple,
    optional_bool,
    optional_number,
    optional_str,
    reject_unknown,
)
from filmrecipe.schema.masks import Mask, apply_mask_overrides, parse_mask


# =============================================================================
# Field Tables
# =============================================================================

HSL_BANDS = ("red", "orange", "yellow", "green", "aqua", "blue", "purple", "magenta")

TONE_FIELDS = (
    "exposure", "temperature", "tint", "contrast", "highlights", "shadows",
    "whites", "blacks", "clarity", "vibrance", "saturation", "brightness",
    "dehaze", "texture",
)

# wire prefix -> ColorGrading attribute
GRADE_WHEELS = {"shadow": "shadow", "midtone": "midtone", "highlight": "highlight", "global": "global_"}

PARAMETRIC_FIELDS = (
    "shadows", "darks", "lights", "highlights",
    "shadow_split", "midtone_split", "highlight_split",
)

# ToneCurves attribute -> wire key
CURVE_KEYS = {
    "rgb": "tone_curve",
    "red": "tone_curve_red",
    "green": "tone_curve_green",
    "blue": "tone_curve_blue",
    "luminance": "tone_curve_luminance",
}

GRAIN_KEYS = {"amount": "grain_amount", "size": "grain_size", "roughness": "grain_frequency"}

VIGNETTE_FIELDS = ("amount", "midpoint", "feather", "roundness", "style", "highlight_contrast")

DETAIL_FIELDS = (
    "sharpness", "sharpen_radius", "sharpen_detail", "sharpen_masking",
    "luminance_noise_reduction", "color_noise_reduction",
)

TREATMENTS = ("color", "black_and_white")

# Accepted on the wire but carry no rendering information
_INFORMATIONAL_KEYS = ("confidence", "reasoning", "color_variance")


# =============================================================================
# Sections
# =============================================================================


@dataclass(frozen=True, slots=True)
class ToneSettings:
    """
    Global tone and white balance.

    exposure is in stops, temperature in Kelvin, tint -150..150; the rest
    are -100..100 sliders. None means "not set".
    """
    exposure: Optional[float] = None
    temperature: Optional[float] = None
    tint: Optional[float] = None
    contrast: Optional[float] = None
    highlights: Optional[float] = None
    shadows: Optional[float] = None
    whites: Optional[float] = None
    blacks: Optional[float] = None
    clarity: Optional[float] = None
    vibrance: Optional[float] = None
    saturation: Optional[float] = None
    brightness: Optional[float] = None
    dehaze: Optional[float] = None
    texture: Optional[float] = None


@dataclass(frozen=True, slots=True)
class HSLBand:
    """Hue/saturation/luminance shift for one named hue range."""
    hue: Optional[float] = None
    saturation: Optional[float] = None
    luminance: Optional[float] = None


@dataclass(frozen=True, slots=True)
class HSLTable:
    """The eight HSL bands, red through magenta."""
    red: HSLBand = field(default_factory=HSLBand)
    orange: HSLBand = field(default_factory=HSLBand)
    yellow: HSLBand = field(default_factory=HSLBand)
    green: HSLBand = field(default_factory=HSLBand)
    aqua: HSLBand = field(default_factory=HSLBand)
    blue: HSLBand = field(default_factory=HSLBand)
    purple: HSLBand = field(default_factory=HSLBand)
    magenta: HSLBand = field(default_factory=HSLBand)

    def bands(self) -> list[tuple[str, HSLBand]]:
        """(name, band) pairs in HSL_BANDS order."""
        return [(name, getattr(self, name)) for name in HSL_BANDS]


@dataclass(frozen=True, slots=True)
class GrayMixer:
    """Black & white channel mix, one value per HSL band."""
    red: Optional[float] = None
    orange: Optional[float] = None
    yellow: Optional[float] = None
    green: Optional[float] = None
    aqua: Optional[float] = None
    blue: Optional[float] = None
    purple: Optional[float] = None
    magenta: Optional[float] = None

    @property
    def is_set(self) -> bool:
        return any(getattr(self, name) is not None for name in HSL_BANDS)


@dataclass(frozen=True, slots=True)
class ColorWheel:
    """One color grading wheel: hue 0-360, sat 0-100, lum -100..100."""
    hue: Optional[float] = None
    sat: Optional[float] = None
    lum: Optional[float] = None

    @property
    def is_set(self) -> bool:
        return self.hue is not None or self.sat is not None or self.lum is not None


@dataclass(frozen=True, slots=True)
class ColorGrading:
    """Shadow/midtone/highlight/global wheels plus blending and balance."""
    shadow: ColorWheel = field(default_factory=ColorWheel)
    midtone: ColorWheel = field(default_factory=ColorWheel)
    highlight: ColorWheel = field(default_factory=ColorWheel)
    global_: ColorWheel = field(default_factory=ColorWheel)
    blending: Optional[float] = None
    balance: Optional[float] = None


@dataclass(frozen=True, slots=True)
class ParametricCurve:
    """Region sliders (-100..100) and split points (0-100)."""
    shadows: Optional[float] = None
    darks: Optional[float] = None
    lights: Optional[float] = None
    highlights: Optional[float] = None
    shadow_split: Optional[float] = None
    midtone_split: Optional[float] = None
    highlight_split: Optional[float] = None


@dataclass(frozen=True, slots=True)
class CurvePoint:
    """A tone curve control point, both axes 0-255."""
    x: float
    y: float

    def __post_init__(self) -> None:
        for name in ("x", "y"):
            value = getattr(self, name)
            if not math.isfinite(value) or not 0.0 <= value <= 255.0:
                raise ValidationError(f"Curve point {name} must be 0-255, got {value}")


def _check_monotonic(points: tuple[CurvePoint, ...], channel: str) -> None:
    for prev, cur in zip(points, points[1:]):
        if cur.x < prev.x:
            raise ValidationError(
                f"{channel} curve x values must be non-decreasing "
                f"({prev.x} followed by {cur.x})"
            )


@dataclass(frozen=True, slots=True)
class ToneCurves:
    """
    Point curves per channel.

    Points are emitted in the given order; x must be non-decreasing.
    An empty tuple means the channel has no curve.
    """
    rgb: tuple[CurvePoint, ...] = ()
    red: tuple[CurvePoint, ...] = ()
    green: tuple[CurvePoint, ...] = ()
    blue: tuple[CurvePoint, ...] = ()
    luminance: tuple[CurvePoint, ...] = ()

    def __post_init__(self) -> None:
        for channel in CURVE_KEYS:
            _check_monotonic(getattr(self, channel), channel)


@dataclass(frozen=True, slots=True)
class GrainSettings:
    """Film grain: amount, size and roughness, each 0-100."""
    amount: Optional[float] = None
    size: Optional[float] = None
    roughness: Optional[float] = None


@dataclass(frozen=True, slots=True)
class VignetteSettings:
    """
    Post-crop vignette.

    amount and roundness are -100..100; midpoint, feather and
    highlight_contrast 0-100; style 1-3 (highlight priority, color
    priority, paint overlay).
    """
    amount: Optional[float] = None
    midpoint: Optional[float] = None
    feather: Optional[float] = None
    roundness: Optional[float] = None
    style: Optional[float] = None
    highlight_contrast: Optional[float] = None


@dataclass(frozen=True, slots=True)
class DetailSettings:
    """Sharpening (amount 0-150, radius 0.5-3) and noise reduction (0-100)."""
    sharpness: Optional[float] = None
    sharpen_radius: Optional[float] = None
    sharpen_detail: Optional[float] = None
    sharpen_masking: Optional[float] = None
    luminance_noise_reduction: Optional[float] = None
    color_noise_reduction: Optional[float] = None


# =============================================================================
# Canonical Model
# =============================================================================


@dataclass(frozen=True, slots=True)
class AdjustmentModel:
    """
    Complete film recipe.

    Attributes:
        preset_name: Display name written into the preset
        description: Free-text description (Lightroom profiles)
        treatment: "color" or "black_and_white"
        camera_profile: Requested base profile, e.g. "Adobe Portrait"
        monochrome: Force black & white rendering
        tone: Global tone and white balance
        hsl: Eight-band HSL table
        gray_mixer: B&W channel mix
        color_grading: Color wheels
        parametric: Parametric tone curve
        curves: Point curves
        point_colors: Raw Lightroom point color vectors, in order
        grain, vignette, detail: Effects sections
        masks: Local adjustments, in order
    """
    preset_name: Optional[str] = None
    description: Optional[str] = None
    treatment: Optional[str] = None
    camera_profile: Optional[str] = None
    monochrome: bool = False
    tone: ToneSettings = field(default_factory=ToneSettings)
    hsl: HSLTable = field(default_factory=HSLTable)
    gray_mixer: GrayMixer = field(default_factory=GrayMixer)
    color_grading: ColorGrading = field(default_factory=ColorGrading)
    parametric: ParametricCurve = field(default_factory=ParametricCurve)
    curves: ToneCurves = field(default_factory=ToneCurves)
    point_colors: tuple[tuple[float, ...], ...] = ()
    grain: GrainSettings = field(default_factory=GrainSettings)
    vignette: VignetteSettings = field(default_factory=VignetteSettings)
    detail: DetailSettings = field(default_factory=DetailSettings)
    masks: tuple[Mask, ...] = ()

    def __post_init__(self) -> None:
        if self.treatment is not None and self.treatment not in TREATMENTS:
            raise ValidationError(
                f"treatment must be one of {TREATMENTS}, got {self.treatment!r}"
            )

    @property
    def is_monochrome(self) -> bool:
        """True when any field asks for a black & white rendering."""
        if self.monochrome or self.treatment == "black_and_white":
            return True
        if self.camera_profile and "monochrome" in self.camera_profile.lower():
            return True
        saturation = self.tone.saturation
        return saturation is not None and saturation <= -100

    def with_name(self, name: Optional[str]) -> AdjustmentModel:
        """Copy with ``preset_name`` filled in when it is not already set."""
        if self.preset_name or not name:
            return self
        return replace(self, preset_name=name)

    # -------------------------------------------------------------------------
    # Wire format
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Serialize to the flat recipe mapping, omitting unset fields."""
        d: dict = {}
        for key in ("preset_name", "description", "treatment", "camera_profile"):
            value = getattr(self, key)
            if value is not None:
                d[key] = value
        if self.monochrome:
            d["monochrome"] = True

        for name in TONE_FIELDS:
            _put(d, name, getattr(self.tone, name))
        for band, values in self.hsl.bands():
            _put(d, f"hue_{band}", values.hue)
            _put(d, f"sat_{band}", values.saturation)
            _put(d, f"lum_{band}", values.luminance)
        for band in HSL_BANDS:
            _put(d, f"gray_{band}", getattr(self.gray_mixer, band))
        for wire, attr in GRADE_WHEELS.items():
            wheel = getattr(self.color_grading, attr)
            for prop in ("hue", "sat", "lum"):
                _put(d, f"color_grade_{wire}_{prop}", getattr(wheel, prop))
        _put(d, "color_grade_blending", self.color_grading.blending)
        _put(d, "color_grade_balance", self.color_grading.balance)
        for name in PARAMETRIC_FIELDS:
            _put(d, f"parametric_{name}", getattr(self.parametric, name))
        for attr, key in CURVE_KEYS.items():
            points = getattr(self.curves, attr)
            if points:
                d[key] = [{"input": p.x, "output": p.y} for p in points]
        if self.point_colors:
            d["point_colors"] = [list(p) for p in self.point_colors]
        for attr, key in GRAIN_KEYS.items():
            _put(d, key, getattr(self.grain, attr))
        for name in VIGNETTE_FIELDS:
            _put(d, f"vignette_{name}", getattr(self.vignette, name))
        for name in DETAIL_FIELDS:
            _put(d, name, getattr(self.detail, name))
        if self.masks:
            d["masks"] = [m.to_dict() for m in self.masks]
        return d

    @classmethod
    def from_dict(cls, data: dict) -> AdjustmentModel:
        """
        Validate and build from the flat recipe mapping.

        Unknown keys and mistyped values raise ValidationError. If
        ``maskOverrides`` is present it is applied to ``masks`` first.
        """
        data = mapping(data, "adjustments")
        reject_unknown(data, _KNOWN_KEYS, "adjustment")
        where = "adjustments"

        treatment = optional_str(data, "treatment", where)
        tone = ToneSettings(**{n: optional_number(data, n, where) for n in TONE_FIELDS})
        hsl = HSLTable(**{
            band: HSLBand(
                hue=optional_number(data, f"hue_{band}", where),
                saturation=optional_number(data, f"sat_{band}", where),
                luminance=optional_number(data, f"lum_{band}", where),
            )
            for band in HSL_BANDS
        })
        gray = GrayMixer(**{b: optional_number(data, f"gray_{b}", where) for b in HSL_BANDS})
        grading = ColorGrading(
            **{
                attr: ColorWheel(**{
                    prop: optional_number(data, f"color_grade_{wire}_{prop}", where)
                    for prop in ("hue", "sat", "lum")
                })
                for wire, attr in GRADE_WHEELS.items()
            },
            blending=optional_number(data, "color_grade_blending", where),
            balance=optional_number(data, "color_grade_balance", where),
        )
        parametric = ParametricCurve(**{
            n: optional_number(data, f"parametric_{n}", where) for n in PARAMETRIC_FIELDS
        })
        curves = ToneCurves(**{
            attr: _parse_curve(data.get(key), key) for attr, key in CURVE_KEYS.items()
        })

        point_colors = data.get("point_colors") or []
        if not isinstance(point_colors, list):
            raise ValidationError("point_colors must be a list of number lists")

        masks = data.get("masks") or []
        overrides = data.get("maskOverrides", data.get("mask_overrides"))
        if not isinstance(masks, list):
            raise ValidationError("masks must be a list")
        if overrides:
            if not isinstance(overrides, list):
                raise ValidationError("maskOverrides must be a list")
            masks = apply_mask_overrides(masks, overrides)

        return cls(
            preset_name=optional_str(data, "preset_name", where),
            description=optional_str(data, "description", where),
            treatment=treatment,
            camera_profile=optional_str(data, "camera_profile", where),
            monochrome=bool(optional_bool(data, "monochrome", where)),
            tone=tone,
            hsl=hsl,
            gray_mixer=gray,
            color_grading=grading,
            parametric=parametric,
            curves=curves,
            point_colors=tuple(number_tuple(p, "point_colors[]") for p in point_colors),
            grain=GrainSettings(**{
                attr: optional_number(data, key, where) for attr, key in GRAIN_KEYS.items()
            }),
            vignette=VignetteSettings(**{
                n: optional_number(data, f"vignette_{n}", where) for n in VIGNETTE_FIELDS
            }),
            detail=DetailSettings(**{n: optional_number(data, n, where) for n in DETAIL_FIELDS}),
            masks=tuple(parse_mask(m) for m in masks),
        )


def _put(d: dict, key: str, value: Optional[float]) -> None:
    if value is not None:
        d[key] = value


def _parse_curve(raw: object, key: str) -> tuple[CurvePoint, ...]:
    """Accept ``{input, output}``, ``{x, y}`` or ``[x, y]`` points."""
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValidationError(f"{key} must be a list of points")
    points = []
    for p in raw:
        if isinstance(p, dict):
            x = p.get("input", p.get("x"))
            y = p.get("output", p.get("y"))
        elif isinstance(p, (list, tuple)) and len(p) == 2:
            x, y = p
        else:
            raise ValidationError(f"{key} contains a malformed point: {p!r}")
        if not (is_number(x) and is_number(y)):
            raise ValidationError(f"{key} point coordinates must be numbers: {p!r}")
        points.append(CurvePoint(float(x), float(y)))
    return tuple(points)


def _known_keys() -> frozenset[str]:
    keys = {
        "preset_name", "description", "treatment", "camera_profile", "monochrome",
        "color_grade_blending", "color_grade_balance", "point_colors",
        "masks", "maskOverrides", "mask_overrides",
    }
    keys.update(TONE_FIELDS)
    keys.update(DETAIL_FIELDS)
    keys.update(_INFORMATIONAL_KEYS)
    for band in HSL_BANDS:
        keys.update({f"hue_{band}", f"sat_{band}", f"lum_{band}", f"gray_{band}"})
    for wire in GRADE_WHEELS:
        keys.update(f"color_grade_{wire}_{prop}" for prop in ("hue", "sat", "lum"))
    keys.update(f"parametric_{n}" for n in PARAMETRIC_FIELDS)
    keys.update(CURVE_KEYS.values())
    keys.update(GRAIN_KEYS.values())
    keys.update(f"vignette_{n}" for n in VIGNETTE_FIELDS)
    return frozenset(keys)


_KNOWN_KEYS = _known_keys()


# =============================================================================
# Include Flags
# =============================================================================

# wire key -> IncludeFlags attribute
_INCLUDE_ALIASES = {
    "basic": "basic",
    "wbBasic": "basic",
    "hsl": "hsl",
    "colorGrading": "color_grading",
    "color_grading": "color_grading",
    "curves": "curves",
    "pointColor": "point_color",
    "point_color": "point_color",
    "grain": "grain",
    "vignette": "vignette",
    "masks": "masks",
    "exposure": "exposure",
    "sharpenNoise": "sharpen_noise",
    "sharpen_noise": "sharpen_noise",
    "strength": "strength",
    "iccProfile": "icc_profile",
    "icc_profile": "icc_profile",
    "filmCurve": "film_curve",
    "film_curve": "film_curve",
}


@dataclass(frozen=True, slots=True)
class IncludeFlags:
    """
    Which sections a serializer emits.

    Everything is on by default except masks, exposure and sharpen_noise.
    ``strength`` (0-2) scales Lightroom preset values; ``icc_profile`` and
    ``film_curve`` are optional Capture One overrides.
    """
    basic: bool = True
    hsl: bool = True
    color_grading: bool = True
    curves: bool = True
    point_color: bool = True
    grain: bool = True
    vignette: bool = True
    masks: bool = False
    exposure: bool = False
    sharpen_noise: bool = False
    strength: float = 0.5
    icc_profile: Optional[str] = None
    film_curve: Optional[str] = None

    def __post_init__(self) -> None:
        if not is_number(self.strength) or not 0.0 <= self.strength <= 2.0:
            raise ValidationError(f"strength must be 0-2, got {self.strength!r}")

    def with_masks(self, masks: Optional[bool]) -> IncludeFlags:
        """Copy with ``masks`` overridden; None leaves the flags untouched."""
        if masks is None or masks == self.masks:
            return self
        return replace(self, masks=masks)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> IncludeFlags:
        """Build from camelCase or snake_case flags; ``wbBasic`` aliases ``basic``."""
        if data is None:
            return cls()
        data = mapping(data, "include")
        reject_unknown(data, _INCLUDE_ALIASES, "include")
        kwargs: dict = {}
        for key, value in data.items():
            attr = _INCLUDE_ALIASES[key]
            if value is None:
                continue
            if attr == "strength":
                if not is_number(value):
                    raise ValidationError("include.strength must be a number")
                kwargs[attr] = float(value)
            elif attr in ("icc_profile", "film_curve"):
                if not isinstance(value, str):
                    raise ValidationError(f"include.{key} must be a string")
                kwargs[attr] = value.strip() or None
            else:
                if not isinstance(value, bool):
                    raise ValidationError(f"include.{key} must be a boolean")
                kwargs[attr] = value
        return cls(**kwargs)
