# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Capture One style serializer (.costyle).

A style is a flat ``<SL Engine="1300">`` list of ``<E K="key" V="value" />``
entries, sorted by key, followed by an ``<LDS>`` layer section. The layer
section is always present; it is empty unless masks are included.

Capture One values are written unscaled (no strength multiplier), clamped
to the application's slider ranges.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Optional

from filmrecipe.export.serializers.base import (
    content_digest,
    finite,
    format_number,
    stable_uuid,
    xml_escape,
)
from filmrecipe.export.serializers.crs import DEFAULT_PRESET_NAME
from filmrecipe.numeric import clamp
from filmrecipe.schema import (
    AdjustmentModel,
    ColorWheel,
    CurvePoint,
    IncludeFlags,
    LinearMask,
    Mask,
    RadialMask,
    SubjectMask,
)

# Capture One MaskType codes
MASK_TYPE_GRADIENT = "1"
MASK_TYPE_RADIAL = "2"
MASK_TYPE_BACKGROUND = "3"
MASK_TYPE_AI = "4"

# Subject option key -> mask kinds that enable it
SUBJECT_OPTIONS = (
    ("Body", ("body_skin",)),
    ("Clothes", ("clothing",)),
    ("Eyebrows", ("eyebrows",)),
    ("Face", ("face_skin",)),
    ("Hair", ("hair",)),
    ("IrisAndPupil", ("iris_pupil",)),
    ("Lips", ("lips",)),
    ("Sclera", ("eye_whites",)),
)

_RETOUCHING = (
    ("RetouchingBlemishRemovalAmount", "0"),
    ("RetouchingDarkCirclesReductionAmount", "0"),
    ("RetouchingFaceSculptingContouring", "0"),
    ("RetouchingOpacity", "100"),
    ("RetouchingSkinEveningAmount", "0"),
    ("RetouchingSkinEveningTexture", "0"),
)

# Channel phase offsets in radians (120 degrees)
_PHASE = 2.094


def _entry(key: str, value: str, indent: str = "\t") -> str:
    return f'{indent}<E K="{key}" V="{value}" />'


def _num(value: Optional[float], low: float, high: float, name: str) -> Optional[float]:
    value = finite(value, name)
    return None if value is None else clamp(value, low, high)


class _Entries:
    """Collects key/value pairs; numbers go through format_number."""

    def __init__(self) -> None:
        self.items: list[tuple[str, str]] = []

    def add(self, key: str, value: object) -> None:
        if value is None:
            return
        if isinstance(value, (int, float)):
            value = format_number(value)
        self.items.append((key, str(value)))

    def sorted(self) -> list[tuple[str, str]]:
        return sorted(self.items, key=lambda kv: (kv[0].casefold(), kv[0]))


# =============================================================================
# Global Sections
# =============================================================================


def _wheel(wheel: ColorWheel, name: str) -> Optional[tuple[float, float]]:
    hue = _num(wheel.hue, 0, 360, f"{name}_hue")
    sat = _num(wheel.sat, 0, 100, f"{name}_sat")
    if hue is None and sat is None:
        return None
    return hue or 0.0, sat or 0.0


def _balance_multipliers(hue: float, sat: float) -> str:
    h = math.radians(hue)
    s = sat / 100.0 * 0.3
    r = 1 + s * math.cos(h)
    g = 1 + s * math.cos(h - _PHASE)
    b = 1 + s * math.cos(h + _PHASE)
    return f"{r:.6f};{g:.6f};{b:.6f}"


def _color_shift(hue: float, sat: float) -> str:
    h = math.radians(hue)
    s = sat / 100.0
    parts = (
        abs(s),
        s * math.cos(h) * 0.1,
        s * math.cos(h - _PHASE) * 0.1,
        s * math.cos(h + _PHASE) * 0.1,
    )
    return ";".join(format_number(p) for p in parts)


def _curve(points: tuple[CurvePoint, ...]) -> str:
    return ";".join(
        f"{format_number(p.x / 255.0)},{format_number(p.y / 255.0)}" for p in points
    )


def _global_entries(model: AdjustmentModel, include: IncludeFlags, style_id: str) -> _Entries:
    e = _Entries()
    tone = model.tone
    bw = model.is_monochrome

    e.add("Name", xml_escape(model.preset_name or DEFAULT_PRESET_NAME))
    e.add("UUID", style_id)

    exposure = _num(tone.exposure, -5, 5, "exposure") if include.exposure else None
    e.add("Exposure", exposure if exposure is not None else 0)

    if include.basic:
        e.add("Contrast", _num(tone.contrast, -100, 100, "contrast"))
        e.add("Brightness", _num(tone.brightness, -100, 100, "brightness"))
        if not bw:
            e.add("Saturation", _num(tone.saturation, -100, 100, "saturation"))
        highlights = _num(tone.highlights, -100, 100, "highlights")
        e.add("HighlightRecoveryEx", None if highlights is None else -highlights)
        e.add("ShadowRecovery", _num(tone.shadows, -100, 100, "shadows"))
        e.add("WhiteRecovery", _num(tone.whites, -100, 100, "whites"))
        e.add("BlackRecovery", _num(tone.blacks, -100, 100, "blacks"))

    if bw:
        e.add("Saturation", -100)
        e.add("BwEnabled", "1")
        for channel in ("BwRed", "BwGreen", "BwBlue", "BwYellow", "BwCyan", "BwMagenta"):
            e.add(channel, "0")

    if include.film_curve:
        e.add("FilmCurve", xml_escape(include.film_curve))
    if include.icc_profile:
        e.add("ICCProfile", xml_escape(include.icc_profile))

    e.add("ColorBalance", "1;1;1")

    if include.color_grading:
        grading = model.color_grading
        wheels = (
            ("Shadow", _wheel(grading.shadow, "color_grade_shadow")),
            ("Midtone", _wheel(grading.midtone, "color_grade_midtone")),
            ("Highlight", _wheel(grading.highlight, "color_grade_highlight")),
        )
        for label, values in wheels:
            if values is not None:
                e.add(f"ColorBalance{label}", _balance_multipliers(*values))
                e.add(label, _color_shift(*values))

    if include.grain:
        g = model.grain
        amount = _num(g.amount, 0, 100, "grain_amount")
        e.add("FilmGrainAmount", amount)
        e.add("FilmGrainGranularity", _num(g.size, 0, 100, "grain_size"))
        e.add("FilmGrainDensity", _num(g.roughness, 0, 100, "grain_frequency"))
        if amount is not None and amount > 0:
            e.add("FilmGrainType", 1)

    if include.vignette:
        v = model.vignette
        amount = _num(v.amount, -100, 100, "vignette_amount")
        if amount is not None:
            midpoint = _num(v.midpoint, 0, 100, "vignette_midpoint")
            feather = _num(v.feather, 0, 100, "vignette_feather")
            roundness = _num(v.roundness, -100, 100, "vignette_roundness")
            parts = (
                amount / 100,
                0.5 if midpoint is None else midpoint / 100,
                0.5 if feather is None else feather / 100,
                0.0 if roundness is None else roundness / 100,
            )
            e.add("Vignetting", "|".join(format_number(p) for p in parts))

    if include.curves:
        c = model.curves
        for key, points in (
            ("GradationCurve", c.rgb),
            ("GradationCurveRed", c.red),
            ("GradationCurveGreen", c.green),
            ("GradationCurveBlue", c.blue),
            ("GradationCurveY", c.luminance),
        ):
            if points:
                e.add(key, _curve(points))

    for key, value in _RETOUCHING:
        e.add(key, value)
    return e


# =============================================================================
# Layers
# =============================================================================


def _mask_type(mask: Mask) -> str:
    if isinstance(mask, LinearMask):
        return MASK_TYPE_GRADIENT
    if isinstance(mask, RadialMask):
        return MASK_TYPE_RADIAL
    if isinstance(mask, SubjectMask) and mask.kind == "background":
        return MASK_TYPE_BACKGROUND
    return MASK_TYPE_AI


def _layer(mask: Mask, index: int) -> str:
    adj = mask.adjustments
    e = _Entries()
    e.add("AIColorGrade", "0")
    e.add("Enabled", "1")
    e.add("Moire", "0;0")
    e.add("Name", xml_escape(mask.display_name(index)))
    e.add("Exposure", _num(adj.local_exposure, -4, 4, "local_exposure"))
    e.add("Contrast", _num(adj.local_contrast, -100, 100, "local_contrast"))
    e.add("Brightness", _num(adj.local_brightness, -100, 100, "local_brightness"))
    e.add("Saturation", _num(adj.local_saturation, -100, 100, "local_saturation"))
    highlights = _num(adj.local_highlights, -100, 100, "local_highlights")
    e.add("HighlightRecoveryEx", None if highlights is None else -highlights)
    e.add("ShadowRecovery", _num(adj.local_shadows, -100, 100, "local_shadows"))
    e.add("Opacity", "100")
    e.add("UsmMethod", "0")

    mask_type = _mask_type(mask)
    out = "\t<LD>\n\t\t<LA>\n"
    out += "\n".join(_entry(k, v, "\t\t\t") for k, v in e.items) + "\n"
    out += "\t\t</LA>\n\t\t<MD>\n"
    out += _entry("MaskType", mask_type, "\t\t\t")

    if mask_type == MASK_TYPE_AI:
        kind = mask.kind if isinstance(mask, SubjectMask) else None
        enabled = {key: kind in kinds for key, kinds in SUBJECT_OPTIONS}
        if not any(enabled.values()):
            # AI masks need at least one part enabled
            enabled["Face"] = True
        options = [_entry(key, "1" if on else "0", "\t\t\t\t") for key, on in enabled.items()]
        out += "\n\t\t\t<SO>\n" + "\n".join(options) + "\n\t\t\t</SO>"

    out += "\n\t\t</MD>\n\t</LD>\n"
    return out


# =============================================================================
# Public Entry Points
# =============================================================================


def to_capture_one_style(
    model: AdjustmentModel,
    include: Optional[IncludeFlags] = None,
) -> str:
    """
    Serialize a recipe as a Capture One style.

    Masks are written to the layer section only when ``include.masks`` is
    set; mask order is preserved. HSL and sharpening have no style
    equivalent here and are not written.

    Exposure is gated by ``include.exposure``, which is off by default, so
    a style built with default flags carries ``Exposure`` as 0. Pass
    ``IncludeFlags(exposure=True)`` to write the recipe's exposure.

    Raises:
        SerializationError: If a value is NaN or infinite.
    """
    include = include or IncludeFlags()
    style_id = stable_uuid(content_digest(model, include), "style")
    entries = _global_entries(model, include, style_id)

    xml = '<?xml version="1.0"?>\n<SL Engine="1300">\n'
    xml += "\n".join(_entry(k, v) for k, v in entries.sorted()) + "\n"
    xml += "</SL>\n"

    if include.masks and model.masks:
        xml += "<LDS>\n"
        xml += "".join(_layer(mask, i) for i, mask in enumerate(model.masks))
        xml += "</LDS>\n"
    else:
        xml += "<LDS>\n</LDS>\n"
    return xml


def to_capture_one_basic_style(
    model: AdjustmentModel,
    include: Optional[IncludeFlags] = None,
) -> str:
    """Capture One style limited to basic tone, curves and exposure."""
    include = include or IncludeFlags()
    basic = replace(
        include,
        hsl=False,
        color_grading=False,
        grain=False,
        vignette=False,
        masks=False,
    )
    return to_capture_one_style(model, basic)
