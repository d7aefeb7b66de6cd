# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Camera Raw (``crs:``) develop settings shared by the Lightroom serializers.

Presets and profiles wrap the same element list in different XMP headers.
Values arrive in editor slider units; ``strength`` scales the tone, HSL
saturation/luminance, color grading and vignette amount, then everything
is clamped and rounded to Lightroom's native ranges.

Element order:
    Treatment, basic tone, exposure, parametric curve, point curves,
    HSL or gray mixer, color grading, point colors, grain, vignette,
    detail, masks
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from filmrecipe.export.serializers.base import (
    clamped_int,
    f3,
    finite,
    format_plain,
    stable_hex,
    xml_escape,
)
from filmrecipe.numeric import clamp
from filmrecipe.schema import (
    HSL_BANDS,
    AdjustmentModel,
    ColorRangeMask,
    CurvePoint,
    IncludeFlags,
    LinearMask,
    LocalAdjustments,
    LuminanceRangeMask,
    Mask,
    RadialMask,
    SubjectMask,
)

logger = logging.getLogger(__name__)

CRS_NAMESPACE = "http://ns.adobe.com/camera-raw-settings/1.0/"
RDF_NAMESPACE = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"

DEFAULT_PRESET_NAME = "Custom Recipe"
MAX_POINT_COLORS = 4

# Local adjustments are softened relative to the global strength
MASK_STRENGTH_FACTOR = 0.6

_IND = "      "

_NAME_NOISE_RE = re.compile(
    r"\b(image\s*match|imagematch|match|target|base|ai|photo)\b", re.IGNORECASE
)


# =============================================================================
# Names and Profiles
# =============================================================================


def sanitize_preset_name(name: Optional[str]) -> str:
    """Strip matching jargon from a generated name; never returns empty."""
    if not name:
        return DEFAULT_PRESET_NAME
    cleaned = _NAME_NOISE_RE.sub("", name)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    return cleaned or DEFAULT_PRESET_NAME


def normalize_camera_profile(name: Optional[str]) -> Optional[str]:
    """Map a free-form profile request onto Adobe's built-in profiles."""
    if not name or not name.strip():
        return None
    n = name.lower()
    if re.search(r"mono|black\s*&?\s*white|b\s*&\s*w", n):
        return "Adobe Monochrome"
    if re.search(r"portrait|people|skin", n):
        return "Adobe Portrait"
    if re.search(r"landscape|sky|mountain|nature", n):
        return "Adobe Landscape"
    return "Adobe Color"


def select_camera_profile(model: AdjustmentModel) -> str:
    """Requested profile if any, otherwise pick one from the masks."""
    requested = normalize_camera_profile(model.camera_profile)
    if requested:
        return requested
    if model.is_monochrome:
        return "Adobe Monochrome"

    people = False
    scenery = False
    for mask in model.masks:
        if not isinstance(mask, SubjectMask):
            continue
        category = mask.config.category
        if category in ("face", "subject"):
            people = True
        if category in ("landscape", "background"):
            scenery = True
    if people:
        return "Adobe Portrait"
    if scenery:
        return "Adobe Landscape"
    return "Adobe Color"


# =============================================================================
# Element Helpers
# =============================================================================


def _tag(lines: list[str], name: str, value: object) -> None:
    if value is not None:
        lines.append(f"{_IND}<crs:{name}>{value}</crs:{name}>")


def _scaled(value: Optional[float], strength: float, name: str) -> Optional[float]:
    value = finite(value, name)
    return None if value is None else value * strength


def _curve(lines: list[str], name: str, points: tuple[CurvePoint, ...]) -> None:
    if not points:
        return
    lines.append(f"{_IND}<crs:{name}>")
    lines.append(f"{_IND}  <rdf:Seq>")
    for p in points:
        x = clamped_int(p.x, 0, 255, f"{name}.x")
        y = clamped_int(p.y, 0, 255, f"{name}.y")
        lines.append(f"{_IND}    <rdf:li>{x}, {y}</rdf:li>")
    lines.append(f"{_IND}  </rdf:Seq>")
    lines.append(f"{_IND}</crs:{name}>")


def alt_element(name: str, text: str, indent: str = _IND) -> list[str]:
    """A ``crs:`` property holding a single x-default ``rdf:Alt`` entry."""
    return [
        f"{indent}<crs:{name}>",
        f"{indent}  <rdf:Alt>",
        f'{indent}    <rdf:li xml:lang="x-default">{xml_escape(text)}</rdf:li>',
        f"{indent}  </rdf:Alt>",
        f"{indent}</crs:{name}>",
    ]


# =============================================================================
# Global Sections
# =============================================================================


def _basic(lines: list[str], model: AdjustmentModel, strength: float, bw: bool) -> None:
    tone = model.tone
    temperature = finite(tone.temperature, "temperature")
    tint = finite(tone.tint, "tint")
    _tag(lines, "Temperature", clamped_int(6500.0 if temperature is None else temperature, 2000, 50000, "temperature"))
    _tag(lines, "Tint", clamped_int(0.0 if tint is None else tint, -150, 150, "tint"))

    for tag, field_name in (
        ("Contrast2012", "contrast"),
        ("Highlights2012", "highlights"),
        ("Shadows2012", "shadows"),
        ("Whites2012", "whites"),
        ("Blacks2012", "blacks"),
        ("Clarity2012", "clarity"),
        ("Texture", "texture"),
        ("Dehaze", "dehaze"),
        ("Vibrance", "vibrance"),
    ):
        value = _scaled(getattr(tone, field_name), strength, field_name)
        _tag(lines, tag, clamped_int(value, -100, 100, field_name))

    if bw:
        _tag(lines, "Saturation", 0)
    else:
        value = _scaled(tone.saturation, strength, "saturation")
        _tag(lines, "Saturation", clamped_int(value, -100, 100, "saturation"))


def _exposure(lines: list[str], model: AdjustmentModel, strength: float) -> None:
    value = _scaled(model.tone.exposure, strength, "exposure")
    if value is not None:
        _tag(lines, "Exposure2012", f"{clamp(value, -5.0, 5.0):.2f}")


def _curves(lines: list[str], model: AdjustmentModel, strength: float) -> None:
    p = model.parametric
    for tag, field_name in (
        ("ParametricShadows", "shadows"),
        ("ParametricDarks", "darks"),
        ("ParametricLights", "lights"),
        ("ParametricHighlights", "highlights"),
    ):
        value = _scaled(getattr(p, field_name), strength, f"parametric_{field_name}")
        _tag(lines, tag, clamped_int(value, -100, 100, field_name))
    for tag, field_name in (
        ("ParametricShadowSplit", "shadow_split"),
        ("ParametricMidtoneSplit", "midtone_split"),
        ("ParametricHighlightSplit", "highlight_split"),
    ):
        _tag(lines, tag, clamped_int(getattr(p, field_name), 0, 100, field_name))

    # Lightroom has no separate luminance point curve
    c = model.curves
    _curve(lines, "ToneCurvePV2012", c.rgb)
    _curve(lines, "ToneCurvePV2012Red", c.red)
    _curve(lines, "ToneCurvePV2012Green", c.green)
    _curve(lines, "ToneCurvePV2012Blue", c.blue)


def _hsl(lines: list[str], model: AdjustmentModel, strength: float) -> None:
    bands = model.hsl.bands()
    for band, values in bands:
        hue = finite(values.hue, f"hue_{band}")
        _tag(lines, f"HueAdjustment{band.capitalize()}", clamped_int(hue or 0.0, -100, 100, band))
    for band, values in bands:
        sat = _scaled(values.saturation, strength, f"sat_{band}")
        _tag(lines, f"SaturationAdjustment{band.capitalize()}", clamped_int(sat or 0.0, -100, 100, band))
    for band, values in bands:
        lum = _scaled(values.luminance, strength, f"lum_{band}")
        _tag(lines, f"LuminanceAdjustment{band.capitalize()}", clamped_int(lum or 0.0, -100, 100, band))


def _gray_mixer(lines: list[str], model: AdjustmentModel) -> None:
    for band in HSL_BANDS:
        value = finite(getattr(model.gray_mixer, band), f"gray_{band}")
        _tag(lines, f"GrayMixer{band.capitalize()}", clamped_int(value or 0.0, -100, 100, band))


def _color_grading(lines: list[str], model: AdjustmentModel, strength: float) -> None:
    grading = model.color_grading
    for label, wheel in (
        ("Midtone", grading.midtone),
        ("Shadow", grading.shadow),
        ("Highlight", grading.highlight),
        ("Global", grading.global_),
    ):
        where = f"color_grade_{label.lower()}"
        _tag(lines, f"ColorGrade{label}Hue", clamped_int(wheel.hue, 0, 360, f"{where}_hue"))
        sat = _scaled(wheel.sat, strength, f"{where}_sat")
        _tag(lines, f"ColorGrade{label}Sat", clamped_int(sat, 0, 100, f"{where}_sat"))
        lum = _scaled(wheel.lum, strength, f"{where}_lum")
        _tag(lines, f"ColorGrade{label}Lum", clamped_int(lum, -100, 100, f"{where}_lum"))
    blending = _scaled(grading.blending, strength, "color_grade_blending")
    _tag(lines, "ColorGradeBlending", clamped_int(blending, 0, 100, "color_grade_blending"))
    balance = _scaled(grading.balance, strength, "color_grade_balance")
    _tag(lines, "ColorGradeBalance", clamped_int(balance, -100, 100, "color_grade_balance"))


def _point_colors(lines: list[str], model: AdjustmentModel) -> None:
    points = model.point_colors
    if len(points) > MAX_POINT_COLORS:
        logger.warning(
            "Lightroom supports %d point colors; dropping %d",
            MAX_POINT_COLORS, len(points) - MAX_POINT_COLORS,
        )
    for i, vector in enumerate(points[:MAX_POINT_COLORS], start=1):
        values = ",".join(str(clamped_int(v, -100, 100, "point_colors")) for v in vector)
        _tag(lines, f"PointColor{i}", values)


def _grain(lines: list[str], model: AdjustmentModel) -> None:
    g = model.grain
    _tag(lines, "GrainAmount", clamped_int(g.amount, 0, 100, "grain_amount"))
    _tag(lines, "GrainSize", clamped_int(g.size, 0, 100, "grain_size"))
    _tag(lines, "GrainFrequency", clamped_int(g.roughness, 0, 100, "grain_frequency"))


def _vignette(lines: list[str], model: AdjustmentModel, strength: float) -> None:
    v = model.vignette
    amount = _scaled(v.amount, strength, "vignette_amount")
    if amount is None:
        return
    _tag(lines, "PostCropVignetteAmount", clamped_int(amount, -100, 100, "vignette_amount"))
    _tag(lines, "PostCropVignetteMidpoint", clamped_int(v.midpoint, 0, 100, "vignette_midpoint"))
    _tag(lines, "PostCropVignetteFeather", clamped_int(v.feather, 0, 100, "vignette_feather"))
    _tag(lines, "PostCropVignetteRoundness", clamped_int(v.roundness, -100, 100, "vignette_roundness"))
    _tag(lines, "PostCropVignetteStyle", clamped_int(v.style, 1, 3, "vignette_style"))
    _tag(
        lines, "PostCropVignetteHighlightContrast",
        clamped_int(v.highlight_contrast, 0, 100, "vignette_highlight_contrast"),
    )


def _detail(lines: list[str], model: AdjustmentModel) -> None:
    d = model.detail
    _tag(lines, "Sharpness", clamped_int(d.sharpness, 0, 150, "sharpness"))
    radius = finite(d.sharpen_radius, "sharpen_radius")
    if radius is not None:
        _tag(lines, "SharpenRadius", f"{clamp(radius, 0.5, 3.0):+.1f}")
    _tag(lines, "SharpenDetail", clamped_int(d.sharpen_detail, 0, 100, "sharpen_detail"))
    _tag(lines, "SharpenEdgeMasking", clamped_int(d.sharpen_masking, 0, 100, "sharpen_masking"))
    _tag(
        lines, "LuminanceSmoothing",
        clamped_int(d.luminance_noise_reduction, 0, 100, "luminance_noise_reduction"),
    )
    _tag(
        lines, "ColorNoiseReduction",
        clamped_int(d.color_noise_reduction, 0, 100, "color_noise_reduction"),
    )


# =============================================================================
# Masks
# =============================================================================


def _attr_lines(indent: str, attrs: list[tuple[str, object]]) -> list[str]:
    return [f'{indent}crs:{key}="{value}"' for key, value in attrs]


def _local_values(adj: LocalAdjustments, mask_strength: float) -> list[tuple[str, str]]:
    """Local*2012 attributes for the fields that are set."""

    def unit(value: Optional[float], name: str) -> Optional[str]:
        value = finite(value, name)
        if value is None:
            return None
        return f3(clamp(value / 100.0 * mask_strength, -1.0, 1.0))

    attrs: list[tuple[str, str]] = []
    exposure = finite(adj.local_exposure, "local_exposure")
    if exposure is not None:
        attrs.append(("LocalExposure2012", f3(clamp(exposure * mask_strength, -4.0, 4.0))))
    for key, field_name in (
        ("LocalContrast2012", "local_contrast"),
        ("LocalHighlights2012", "local_highlights"),
        ("LocalShadows2012", "local_shadows"),
        ("LocalWhites2012", "local_whites"),
        ("LocalBlacks2012", "local_blacks"),
        ("LocalClarity2012", "local_clarity"),
        ("LocalDehaze", "local_dehaze"),
        ("LocalTexture", "local_texture"),
        ("LocalTemperature", "local_temperature"),
        ("LocalTint", "local_tint"),
    ):
        value = unit(getattr(adj, field_name), field_name)
        if value is not None:
            attrs.append((key, value))
    return attrs


def _legacy_unit(value: Optional[float], mask_strength: float, name: str) -> str:
    value = finite(value, name)
    if value is None:
        return "0"
    return f3(clamp(value / 100.0 * mask_strength, -1.0, 1.0))


def _unit_or(value: Optional[float], default: str, name: str) -> str:
    value = finite(value, name)
    return default if value is None else f3(clamp(value, 0.0, 1.0))


def _int_or(value: Optional[float], low: float, high: float, default: int, name: str) -> int:
    result = clamped_int(value, low, high, name)
    return default if result is None else result


def _mask_common(name: str, inverted: bool) -> list[tuple[str, object]]:
    return [
        ("MaskActive", "true"),
        ("MaskName", name),
        ("MaskBlendMode", "0"),
        ("MaskInverted", "true" if inverted else "false"),
    ]


def _mask_entry(mask: Mask, name: str, sync_id: str, indent: str) -> list[str]:
    """The ``rdf:li`` inside CorrectionMasks for one mask variant."""
    inner = indent + " "
    if isinstance(mask, LinearMask):
        attrs = [("What", "Mask/Gradient"), *_mask_common(name, mask.inverted), ("MaskValue", "1")]
        attrs += [
            ("ZeroX", _unit_or(mask.zero_x, "0.500", "zeroX")),
            ("ZeroY", _unit_or(mask.zero_y, "0.500", "zeroY")),
            ("FullX", _unit_or(mask.full_x, "0.500", "fullX")),
            ("FullY", _unit_or(mask.full_y, "0.800", "fullY")),
        ]
        lines = [f"{indent}<rdf:li"] + _attr_lines(inner, attrs)
        lines[-1] += "/>"
        return lines

    if isinstance(mask, RadialMask):
        angle = finite(mask.angle, "angle")
        attrs = [("What", "Mask/CircularGradient"), *_mask_common(name, mask.inverted), ("MaskValue", "1")]
        attrs += [
            ("Top", _unit_or(mask.top, "0.200", "top")),
            ("Left", _unit_or(mask.left, "0.200", "left")),
            ("Bottom", _unit_or(mask.bottom, "0.800", "bottom")),
            ("Right", _unit_or(mask.right, "0.800", "right")),
            ("Angle", f3(angle or 0.0)),
            ("Midpoint", _int_or(mask.midpoint, 0, 100, 50, "midpoint")),
            ("Roundness", _int_or(mask.roundness, -100, 100, 0, "roundness")),
            ("Feather", _int_or(mask.feather, 0, 100, 75, "feather")),
            ("Flipped", "true" if mask.flipped else "false"),
            ("Version", "2"),
        ]
        lines = [f"{indent}<rdf:li"] + _attr_lines(inner, attrs)
        lines[-1] += "/>"
        return lines

    if isinstance(mask, SubjectMask):
        attrs = [("What", "Mask/Image"), *_mask_common(name, mask.inverted)]
        attrs += [
            ("MaskSyncID", sync_id),
            ("MaskValue", "1"),
            ("MaskVersion", "1"),
            ("MaskSubType", mask.config.sub_type),
        ]
        sub_category = mask.resolved_sub_category
        if sub_category:
            attrs.append(("MaskSubCategoryID", sub_category))
        rx = _unit_or(mask.reference_x, "0.500", "referenceX")
        ry = _unit_or(mask.reference_y, "0.500", "referenceY")
        attrs += [("ReferencePoint", f"{rx} {ry}"), ("ErrorReason", "0")]
        lines = [f"{indent}<rdf:li"] + _attr_lines(inner, attrs)
        lines[-1] += "/>"
        return lines

    # Range masks wrap their settings in a nested CorrectionRangeMask
    desc = inner + " "
    attrs = [
        ("What", "Mask/RangeMask"),
        *_mask_common(name, False),
        ("MaskSyncID", ""),
        ("MaskValue", "1"),
    ]
    lines = [f"{indent}<rdf:li>", f"{inner}<rdf:Description"] + _attr_lines(desc, attrs)
    lines[-1] += ">"
    invert = "true" if mask.inverted else "false"

    if isinstance(mask, ColorRangeMask):
        range_attrs = [
            ("Version", "3"),
            ("Type", "1"),
            ("ColorAmount", _unit_or(mask.color_amount, "0.500", "colorAmount")),
            ("Invert", invert),
            ("SampleType", "0"),
        ]
        lines.append(f"{desc}<crs:CorrectionRangeMask>")
        lines.append(f"{desc} <rdf:Description")
        lines += _attr_lines(desc + "  ", range_attrs)
        lines[-1] += ">"
        if mask.point_models:
            lines.append(f"{desc}  <crs:PointModels>")
            lines.append(f"{desc}   <rdf:Seq>")
            for model in mask.point_models:
                values = " ".join(format_plain(finite(v, "pointModels")) for v in model)
                lines.append(f"{desc}    <rdf:li>{values}</rdf:li>")
            lines.append(f"{desc}   </rdf:Seq>")
            lines.append(f"{desc}  </crs:PointModels>")
        lines.append(f"{desc} </rdf:Description>")
        lines.append(f"{desc}</crs:CorrectionRangeMask>")
    elif isinstance(mask, LuminanceRangeMask):
        lum = mask.lum_range if mask.lum_range is not None else (0.0, 1.0, 1.0, 1.0)
        depth = mask.depth_sample_info if mask.depth_sample_info is not None else (0.0, 0.5, 0.5)
        range_attrs = [
            ("Version", "3"),
            ("Type", "2"),
            ("Invert", invert),
            ("SampleType", "0"),
            ("LumRange", " ".join(f"{finite(v, 'lumRange'):.6f}" for v in lum)),
            (
                "LuminanceDepthSampleInfo",
                " ".join(f"{finite(v, 'luminanceDepthSampleInfo'):.6f}" for v in depth),
            ),
        ]
        lines.append(f"{desc}<crs:CorrectionRangeMask")
        lines += _attr_lines(desc + " ", range_attrs)
        lines[-1] += "/>"
    else:
        raise TypeError(f"Unsupported mask variant: {type(mask).__name__}")

    lines.append(f"{inner}</rdf:Description>")
    lines.append(f"{indent}</rdf:li>")
    return lines


def _masks(lines: list[str], model: AdjustmentModel, strength: float, seed: str) -> None:
    mask_strength = strength * MASK_STRENGTH_FACTOR
    i0, i1, i2, i3 = _IND, _IND + " ", _IND + "  ", _IND + "   "

    lines.append(f"{i0}<crs:MaskGroupBasedCorrections>")
    lines.append(f"{i1}<rdf:Seq>")
    for index, mask in enumerate(model.masks):
        name = xml_escape(mask.display_name(index))
        adj = mask.adjustments
        attrs: list[tuple[str, object]] = [
            ("What", "Correction"),
            ("CorrectionAmount", "1"),
            ("CorrectionActive", "true"),
            ("CorrectionName", name),
            ("CorrectionSyncID", stable_hex(seed, "correction", index)),
            ("LocalExposure", "0"),
            ("LocalHue", "0"),
            ("LocalSaturation", _legacy_unit(adj.local_saturation, mask_strength, "local_saturation")),
            ("LocalContrast", "0"),
            ("LocalClarity", "0"),
            ("LocalSharpness", "0"),
            ("LocalBrightness", _legacy_unit(adj.local_brightness, mask_strength, "local_brightness")),
            ("LocalToningHue", "0"),
            ("LocalToningSaturation", "0"),
        ]
        attrs += _local_values(adj, mask_strength)
        attrs += [
            ("LocalLuminanceNoise", "0"),
            ("LocalMoire", "0"),
            ("LocalDefringe", "0"),
            ("LocalGrain", "0"),
            ("LocalCurveRefineSaturation", "100"),
        ]

        lines.append(f"{i2}<rdf:li>")
        lines.append(f"{i3}<rdf:Description")
        lines += _attr_lines(i3 + " ", attrs)
        lines[-1] += ">"
        lines.append(f"{i3}<crs:CorrectionMasks>")
        lines.append(f"{i3} <rdf:Seq>")
        lines += _mask_entry(mask, name, stable_hex(seed, "mask", index), i3 + "  ")
        lines.append(f"{i3} </rdf:Seq>")
        lines.append(f"{i3}</crs:CorrectionMasks>")
        lines.append(f"{i3}</rdf:Description>")
        lines.append(f"{i2}</rdf:li>")
    lines.append(f"{i1}</rdf:Seq>")
    lines.append(f"{i0}</crs:MaskGroupBasedCorrections>")


# =============================================================================
# Public Entry Point
# =============================================================================


def develop_settings(
    model: AdjustmentModel,
    include: IncludeFlags,
    *,
    strength: float,
    allow_masks: bool,
    seed: str,
) -> list[str]:
    """
    Render the ``crs:`` element lines for a recipe.

    Args:
        model: Recipe to render.
        include: Section gates.
        strength: Global scale for tone, HSL and grading values.
        allow_masks: False suppresses the mask block regardless of include.
        seed: Content digest used to derive mask sync ids.

    Returns:
        Lines indented for placement inside ``rdf:Description``.

    Raises:
        SerializationError: If a value is NaN or infinite.
    """
    bw = model.is_monochrome
    lines: list[str] = []

    if bw:
        lines.append(f"{_IND}<crs:Treatment>Black &amp; White</crs:Treatment>")
        lines.append(f"{_IND}<crs:ConvertToGrayscale>True</crs:ConvertToGrayscale>")
    else:
        lines.append(f"{_IND}<crs:Treatment>Color</crs:Treatment>")

    if include.basic:
        _basic(lines, model, strength, bw)
    if include.exposure:
        _exposure(lines, model, strength)
    if include.curves:
        _curves(lines, model, strength)
    if include.hsl:
        if not bw:
            _hsl(lines, model, strength)
        elif model.gray_mixer.is_set:
            _gray_mixer(lines, model)
    if include.color_grading:
        _color_grading(lines, model, strength)
    if include.point_color:
        _point_colors(lines, model)
    if include.grain:
        _grain(lines, model)
    if include.vignette:
        _vignette(lines, model, strength)
    if include.sharpen_noise:
        _detail(lines, model)
    if allow_masks and include.masks and model.masks:
        _masks(lines, model, strength, seed)
    return lines
