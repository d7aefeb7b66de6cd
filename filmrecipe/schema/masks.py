# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Local adjustment masks.

A mask is one of a closed set of variants, each with its own geometry:

- RadialMask: elliptical gradient (top/left/bottom/right box, feather, ...)
- LinearMask: linear gradient from a zero point to a full point
- SubjectMask: AI-detected subject, person part or scene region
- ColorRangeMask: color-sampled range mask
- LuminanceRangeMask: luminance range mask

Every variant carries a name, an ``inverted`` flag and LocalAdjustments.
Mask order is significant: serializers emit masks in sequence order.

Geometry fields are optional. Serializers substitute the editor's neutral
defaults for missing values instead of rejecting the mask.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import ClassVar, Optional, Union

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

logger = logging.getLogger(__name__)


# =============================================================================
# Mask Kinds
# =============================================================================


@dataclass(frozen=True, slots=True)
class MaskKind:
    """
    Lightroom identifiers for an AI-detected mask region.

    Attributes:
        kind: Canonical kind name
        sub_type: Lightroom MaskSubType (3 = people part, 0 = scene, 1 = subject/object)
        sub_category_id: Lightroom MaskSubCategoryID, empty when the kind has none
        category: Grouping used for camera profile selection
    """
    kind: str
    sub_type: str
    sub_category_id: str
    category: str


MASK_KINDS: tuple[MaskKind, ...] = (
    # People parts
    MaskKind("face_skin", "3", "2", "face"),
    MaskKind("iris_pupil", "3", "3", "face"),
    MaskKind("eyebrows", "3", "9", "face"),
    MaskKind("lips", "3", "6", "face"),
    MaskKind("facial_hair", "3", "13", "face"),
    MaskKind("body_skin", "3", "4", "face"),
    MaskKind("eye_whites", "3", "8", "face"),
    MaskKind("hair", "3", "5", "face"),
    MaskKind("clothing", "3", "11", "face"),
    MaskKind("teeth", "3", "12", "face"),
    # Scene regions
    MaskKind("background", "0", "22", "background"),
    MaskKind("architecture", "0", "50001", "landscape"),
    MaskKind("mountains", "0", "50002", "landscape"),
    MaskKind("artificial_ground", "0", "50003", "landscape"),
    MaskKind("natural_ground", "0", "50004", "landscape"),
    MaskKind("vegetation", "0", "50005", "landscape"),
    MaskKind("sky", "0", "50006", "landscape"),
    MaskKind("water", "0", "50007", "landscape"),
    # Subjects and objects
    MaskKind("subject", "1", "0", "subject"),
    MaskKind("person", "1", "0", "subject"),
    MaskKind("vehicle", "1", "", "other"),
    MaskKind("animal", "1", "", "other"),
    MaskKind("object", "1", "", "other"),
)

_KIND_MAP = {k.kind: k for k in MASK_KINDS}

_SYNONYMS = {
    "face": "face_skin",
    "skin": "face_skin",
    "facial_skin": "face_skin",
    "face skin": "face_skin",
    "eye": "iris_pupil",
    "eyes": "iris_pupil",
    "iris": "iris_pupil",
    "pupil": "iris_pupil",
    "eye_white": "eye_whites",
    "sclera": "eye_whites",
    "tooth": "teeth",
    "people": "subject",
    "landscape": "background",
}

GEOMETRIC_TYPES = ("radial", "linear", "range_color", "range_luminance")

_DEFAULT_NAMES = {
    "face_skin": "Face Skin",
    "iris_pupil": "Eye Pop",
    "eye_whites": "Eye Whites",
    "eyebrows": "Eyebrows",
    "lips": "Lips",
    "teeth": "Teeth",
    "hair": "Hair",
    "clothing": "Clothing",
    "body_skin": "Body Skin",
    "sky": "Sky",
    "vegetation": "Vegetation",
    "water": "Water",
    "architecture": "Architecture",
    "natural_ground": "Ground",
    "artificial_ground": "Ground",
    "mountains": "Mountains",
    "background": "Background",
    "subject": "Subject",
    "person": "Person",
    "radial": "Radial Mask",
    "linear": "Linear Mask",
    "range_color": "Color Range",
    "range_luminance": "Luminance Range",
}


def get_mask_kind(kind: str) -> Optional[MaskKind]:
    """Look up a canonical kind; None if it is not an AI mask kind."""
    return _KIND_MAP.get(kind)


def normalize_mask_type(value: Optional[str]) -> str:
    """
    Map a loosely specified AI mask type to a canonical kind.

    Canonical kinds pass through unchanged, then synonyms resolve, so
    ``person`` stays ``person`` while ``people`` becomes ``subject``.
    Unknown strings fall back to ``subject``.
    """
    if not value:
        return "subject"
    t = str(value).lower().strip()
    if t in _KIND_MAP:
        return t
    if t in _SYNONYMS:
        return _SYNONYMS[t]
    logger.warning("Unknown mask type %r, using 'subject'", value)
    return "subject"


# =============================================================================
# Local Adjustments
# =============================================================================


@dataclass(frozen=True, slots=True)
class LocalAdjustments:
    """
    Deltas applied inside a mask.

    ``local_exposure`` is in stops (-4..4); every other field uses the
    -100..100 slider scale. None means the field is not adjusted.
    """
    local_exposure: Optional[float] = None
    local_contrast: Optional[float] = None
    local_highlights: Optional[float] = None
    local_shadows: Optional[float] = None
    local_whites: Optional[float] = None
    local_blacks: Optional[float] = None
    local_clarity: Optional[float] = None
    local_dehaze: Optional[float] = None
    local_texture: Optional[float] = None
    local_temperature: Optional[float] = None
    local_tint: Optional[float] = None
    local_saturation: Optional[float] = None
    local_brightness: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @classmethod
    def from_dict(cls, data: dict) -> LocalAdjustments:
        data = mapping(data, "mask.adjustments")
        names = [f.name for f in fields(cls)]
        reject_unknown(data, names, "local adjustment")
        return cls(**{n: optional_number(data, n, "mask.adjustments") for n in names})


# =============================================================================
# Mask Variants
# =============================================================================


@dataclass(frozen=True, slots=True)
class MaskBase:
    """Fields shared by every mask variant."""
    type: ClassVar[str] = ""

    name: Optional[str] = None
    adjustments: LocalAdjustments = field(default_factory=LocalAdjustments)
    inverted: bool = False

    def display_name(self, index: int) -> str:
        """Name to write into the preset; unnamed masks are named by kind, else numbered."""
        if self.name:
            return self.name
        return _DEFAULT_NAMES.get(getattr(self, "kind", self.type), f"Mask {index + 1}")

    def _common_dict(self) -> dict:
        d: dict = {"type": self.type}
        if self.name is not None:
            d["name"] = self.name
        adjustments = self.adjustments.to_dict()
        if adjustments:
            d["adjustments"] = adjustments
        if self.inverted:
            d["inverted"] = True
        return d


@dataclass(frozen=True, slots=True)
class RadialMask(MaskBase):
    """
    Elliptical gradient. Box edges are normalized 0-1 image coordinates.

    Defaults when absent: box 0.2/0.2/0.8/0.8, angle 0, midpoint 50,
    roundness 0, feather 75.
    """
    type: ClassVar[str] = "radial"

    top: Optional[float] = None
    left: Optional[float] = None
    bottom: Optional[float] = None
    right: Optional[float] = None
    angle: Optional[float] = None
    midpoint: Optional[float] = None
    roundness: Optional[float] = None
    feather: Optional[float] = None
    flipped: bool = False

    def to_dict(self) -> dict:
        d = self._common_dict()
        for key in ("top", "left", "bottom", "right", "angle", "midpoint", "roundness", "feather"):
            value = getattr(self, key)
            if value is not None:
                d[key] = value
        if self.flipped:
            d["flipped"] = True
        return d


@dataclass(frozen=True, slots=True)
class LinearMask(MaskBase):
    """Linear gradient. Defaults when absent: zero 0.5/0.5, full 0.5/0.8."""
    type: ClassVar[str] = "linear"

    zero_x: Optional[float] = None
    zero_y: Optional[float] = None
    full_x: Optional[float] = None
    full_y: Optional[float] = None

    def to_dict(self) -> dict:
        d = self._common_dict()
        for attr, key in _LINEAR_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                d[key] = value
        return d


@dataclass(frozen=True, slots=True)
class SubjectMask(MaskBase):
    """AI-detected region; ``kind`` must be one of MASK_KINDS."""
    type: ClassVar[str] = "subject"

    kind: str = "subject"
    reference_x: Optional[float] = None
    reference_y: Optional[float] = None
    sub_category_id: Optional[int] = None

    def __post_init__(self) -> None:
        if self.kind not in _KIND_MAP:
            raise ValidationError(f"Unknown subject mask kind: {self.kind!r}")

    @property
    def config(self) -> MaskKind:
        return _KIND_MAP[self.kind]

    @property
    def resolved_sub_category(self) -> Optional[str]:
        """Configured sub-category wins; a caller-supplied id fills the gap."""
        if self.config.sub_category_id:
            return self.config.sub_category_id
        if self.sub_category_id is not None:
            return str(self.sub_category_id)
        return None

    def to_dict(self) -> dict:
        d = self._common_dict()
        d["type"] = self.kind
        if self.reference_x is not None:
            d["referenceX"] = self.reference_x
        if self.reference_y is not None:
            d["referenceY"] = self.reference_y
        if self.sub_category_id is not None:
            d["subCategoryId"] = self.sub_category_id
        return d


@dataclass(frozen=True, slots=True)
class ColorRangeMask(MaskBase):
    """Color range mask; each point model is a raw Lightroom sample vector."""
    type: ClassVar[str] = "range_color"

    color_amount: Optional[float] = None
    point_models: tuple[tuple[float, ...], ...] = ()

    def to_dict(self) -> dict:
        d = self._common_dict()
        if self.color_amount is not None:
            d["colorAmount"] = self.color_amount
        if self.point_models:
            d["pointModels"] = [list(pm) for pm in self.point_models]
        return d


@dataclass(frozen=True, slots=True)
class LuminanceRangeMask(MaskBase):
    """
    Luminance range mask.

    ``lum_range`` has four values (0-1) and ``depth_sample_info`` three.
    Defaults when absent: ``0 1 1 1`` and ``0 0.5 0.5``.
    """
    type: ClassVar[str] = "range_luminance"

    lum_range: Optional[tuple[float, ...]] = None
    depth_sample_info: Optional[tuple[float, ...]] = None

    def __post_init__(self) -> None:
        if self.lum_range is not None and len(self.lum_range) != 4:
            raise ValidationError(f"lumRange needs 4 values, got {len(self.lum_range)}")
        if self.depth_sample_info is not None and len(self.depth_sample_info) != 3:
            raise ValidationError(
                f"luminanceDepthSampleInfo needs 3 values, got {len(self.depth_sample_info)}"
            )

    def to_dict(self) -> dict:
        d = self._common_dict()
        if self.lum_range is not None:
            d["lumRange"] = list(self.lum_range)
        if self.depth_sample_info is not None:
            d["luminanceDepthSampleInfo"] = list(self.depth_sample_info)
        return d


Mask = Union[RadialMask, LinearMask, SubjectMask, ColorRangeMask, LuminanceRangeMask]


# =============================================================================
# Parsing
# =============================================================================

_LINEAR_KEYS = {"zero_x": "zeroX", "zero_y": "zeroY", "full_x": "fullX", "full_y": "fullY"}

_MASK_KEYS = frozenset({
    "id", "op", "name", "type", "adjustments", "inverted",
    "top", "left", "bottom", "right", "angle", "midpoint", "roundness", "feather", "flipped",
    "zeroX", "zeroY", "fullX", "fullY",
    "referenceX", "referenceY", "subCategoryId",
    "colorAmount", "invert", "pointModels", "lumRange", "luminanceDepthSampleInfo",
})


def flatten_geometry(data: object, where: str) -> dict:
    """Validate a wire mask and lift its nested ``geometry`` mapping to the top level."""
    data = mapping(data, where)
    if data.get("geometry") is None:
        return {k: v for k, v in data.items() if k != "geometry"}
    geometry = mapping(data["geometry"], f"{where}.geometry")
    flat = {k: v for k, v in data.items() if k != "geometry"}
    flat.update(geometry)
    return flat


def parse_mask(data: dict) -> Mask:
    """
    Build a mask variant from its wire mapping.

    The ``type`` discriminator selects the variant. Geometric types
    (radial, linear, range_color, range_luminance) map directly; anything
    else is normalized into a SubjectMask kind.
    A nested ``geometry`` mapping is flattened into the top level.

    Raises:
        ValidationError: On unknown fields or mistyped values.
    """
    data = flatten_geometry(data, "mask")
    reject_unknown(data, _MASK_KEYS, "mask")

    raw_type = optional_str(data, "type", "mask")
    t = (raw_type or "subject").lower().strip()
    adjustments = LocalAdjustments.from_dict(data.get("adjustments") or {})
    common = dict(
        name=optional_str(data, "name", "mask"),
        adjustments=adjustments,
        inverted=bool(optional_bool(data, "inverted", "mask")),
    )

    if t == "radial":
        return RadialMask(
            **common,
            **{
                key: optional_number(data, key, "mask")
                for key in ("top", "left", "bottom", "right", "angle", "midpoint", "roundness", "feather")
            },
            flipped=bool(optional_bool(data, "flipped", "mask")),
        )
    if t == "linear":
        return LinearMask(
            **common,
            **{attr: optional_number(data, key, "mask") for attr, key in _LINEAR_KEYS.items()},
        )
    if t in ("range_color", "range_luminance"):
        if optional_bool(data, "invert", "mask"):
            common["inverted"] = True
        if t == "range_color":
            models = data.get("pointModels") or []
            if not isinstance(models, list):
                raise ValidationError("mask.pointModels must be a list")
            return ColorRangeMask(
                **common,
                color_amount=optional_number(data, "colorAmount", "mask"),
                point_models=tuple(number_tuple(pm, "mask.pointModels[]") for pm in models),
            )
        lum = data.get("lumRange")
        depth = data.get("luminanceDepthSampleInfo")
        return LuminanceRangeMask(
            **common,
            lum_range=number_tuple(lum, "mask.lumRange") if lum is not None else None,
            depth_sample_info=number_tuple(depth, "mask.luminanceDepthSampleInfo") if depth is not None else None,
        )

    sub_category = data.get("subCategoryId")
    if sub_category is not None and not is_number(sub_category):
        raise ValidationError("mask.subCategoryId must be a number")
    return SubjectMask(
        **common,
        kind=normalize_mask_type(t),
        reference_x=optional_number(data, "referenceX", "mask"),
        reference_y=optional_number(data, "referenceY", "mask"),
        sub_category_id=int(sub_category) if sub_category is not None else None,
    )


# =============================================================================
# Override Operations
# =============================================================================

OVERRIDE_OPS = ("add", "update", "remove", "remove_all", "clear")


def mask_identifier(mask: Optional[dict]) -> str:
    """Stable identity for a wire mask: explicit id, then name, then type and position."""
    if not mask:
        return "mask:undefined"
    if isinstance(mask.get("id"), str) and mask["id"]:
        return mask["id"]
    if isinstance(mask.get("name"), str) and mask["name"]:
        return f"name:{mask['name']}"
    mask_type = str(mask.get("type") or "mask")
    sub = mask.get("subCategoryId", "")
    rx = str(mask.get("referenceX", ""))[:4]
    ry = str(mask.get("referenceY", ""))[:4]
    return f"{mask_type}:{'' if sub is None else sub}:{rx}:{ry}"


def _find_mask_index(masks: list[dict], op: dict) -> int:
    wanted = mask_identifier(op)
    for i, m in enumerate(masks):
        if mask_identifier(m) == wanted:
            return i

    # Underspecified ops: fall back to name, then to type (+ sub-category)
    if op.get("name"):
        for i, m in enumerate(masks):
            if str(m.get("name") or "") == op["name"]:
                return i
    if op.get("type"):
        for i, m in enumerate(masks):
            if (m.get("type") or "") != op["type"]:
                continue
            if is_number(op.get("subCategoryId")):
                if is_number(m.get("subCategoryId")) and m["subCategoryId"] == op["subCategoryId"]:
                    return i
                continue
            return i
    return -1


def _merge(previous: dict, op: dict) -> dict:
    merged = {**previous, **op}
    merged["id"] = previous.get("id") or op.get("id") or mask_identifier(op)
    merged["adjustments"] = {
        **mapping(previous.get("adjustments") or {}, "mask.adjustments"),
        **mapping(op.get("adjustments") or {}, "mask override adjustments"),
    }
    return merged


def apply_mask_overrides(masks: Optional[list[dict]], ops: Optional[list[dict]]) -> list[dict]:
    """
    Apply override operations to a list of wire masks.

    Operations (the ``op`` key, default ``add``):
        add: merge into a matching mask, or append
        update: same as add
        remove: delete the first matching mask
        remove_all / clear: drop every mask

    Returns:
        New list of wire masks; inputs are not mutated.

    Raises:
        ValidationError: If a mask, an override or its adjustments is not a mapping,
            or the op is unknown.
    """
    result = [flatten_geometry(m, "mask") for m in (masks or [])]
    for op in ops or []:
        op = flatten_geometry(op, "mask override")
        operation = op.get("op") or "add"
        if operation not in OVERRIDE_OPS:
            raise ValidationError(f"Unknown mask override op: {operation!r}")
        body = {k: v for k, v in op.items() if k != "op"}

        if operation in ("remove_all", "clear"):
            result = []
            continue

        idx = _find_mask_index(result, body)
        if operation == "remove":
            if idx >= 0:
                del result[idx]
            continue

        if idx >= 0:
            result[idx] = _merge(result[idx], body)
        else:
            result.append({**body, "id": body.get("id") or mask_identifier(body)})
    return result
