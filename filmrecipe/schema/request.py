# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""Export request/response contract exchanged with the UI layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from filmrecipe.errors import ValidationError
from filmrecipe.schema._parse import is_number, mapping, optional_str, reject_unknown
from filmrecipe.schema.adjustments import AdjustmentModel, IncludeFlags


class ExportType(Enum):
    """Target preset formats."""

    LIGHTROOM_PRESET = "lightroom-preset"
    LIGHTROOM_PROFILE = "lightroom-profile"
    CAPTURE_ONE_STYLE = "capture-one-style"
    CAPTURE_ONE_BASIC_STYLE = "capture-one-basic-style"


class ExportAction(Enum):
    """What the orchestrator does with the generated document."""

    DOWNLOAD = "download"
    SAVE_TO_FOLDER = "save-to-folder"


def _enum_value(enum_cls: type, value: object, label: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Unknown export {label}: {value}") from None


@dataclass(frozen=True, slots=True)
class ExportRequest:
    """
    One export call.

    Attributes:
        type: Target format
        action: Download (return bytes) or save-to-folder (write a file)
        adjustments: Recipe to serialize
        include: Section flags
        recipe_name: Used for the preset name and output filename
        user_rating: Optional 0-5 rating, validated and logged only
    """
    type: ExportType
    action: ExportAction
    adjustments: AdjustmentModel = field(default_factory=AdjustmentModel)
    include: IncludeFlags = field(default_factory=IncludeFlags)
    recipe_name: Optional[str] = None
    user_rating: Optional[int] = None

    def __post_init__(self) -> None:
        # Normalize raw strings so callers may pass "lightroom-preset" directly
        object.__setattr__(self, "type", _enum_value(ExportType, self.type, "type"))
        object.__setattr__(self, "action", _enum_value(ExportAction, self.action, "action"))
        if self.user_rating is not None and (
            not is_number(self.user_rating) or not 0 <= self.user_rating <= 5
        ):
            raise ValidationError(f"userRating must be 0-5, got {self.user_rating!r}")

    @classmethod
    def from_dict(cls, data: dict) -> ExportRequest:
        """Validate the camelCase request mapping."""
        data = mapping(data, "request")
        reject_unknown(
            data,
            ("type", "action", "adjustments", "include", "recipeName", "userRating"),
            "request",
        )
        if "type" not in data:
            raise ValidationError("Export request is missing 'type'")
        return cls(
            type=data["type"],
            action=data.get("action", ExportAction.DOWNLOAD.value),
            adjustments=AdjustmentModel.from_dict(data.get("adjustments") or {}),
            include=IncludeFlags.from_dict(data.get("include")),
            recipe_name=optional_str(data, "recipeName", "request"),
            user_rating=data.get("userRating"),
        )


@dataclass(frozen=True, slots=True)
class ExportResponse:
    """
    Outcome of an export call.

    A successful download carries ``buffer``; a successful save carries
    ``output_path`` (mirrored in ``file_path``). Failures carry ``error``.
    """
    success: bool
    file_path: Optional[str] = None
    output_path: Optional[str] = None
    buffer: Optional[bytes] = None
    filename: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> ExportResponse:
        return cls(success=False, error=error)

    def to_dict(self) -> dict:
        d: dict = {"success": self.success}
        if self.file_path is not None:
            d["filePath"] = self.file_path
        if self.output_path is not None:
            d["outputPath"] = self.output_path
        if self.buffer is not None:
            d["buffer"] = self.buffer
        if self.filename is not None:
            d["filename"] = self.filename
        if self.error is not None:
            d["error"] = self.error
        return d
