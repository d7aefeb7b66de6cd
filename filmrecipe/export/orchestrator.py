# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Export orchestrator: the boundary between the UI layer and the serializers.

``export`` validates a request, picks the serializer for its type, and
either returns the document bytes (download) or writes them to disk
(save-to-folder). Every failure comes back as an unsuccessful
ExportResponse; nothing raised below this layer escapes to the caller.

Files are written atomically: the document goes to a temporary file in the
destination directory and is renamed into place, so a failed export never
leaves partial output behind.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from filmrecipe.config import ExportConfig
from filmrecipe.errors import ExportIOError, FilmRecipeError, ValidationError
from filmrecipe.export.serializers import (
    to_capture_one_basic_style,
    to_capture_one_style,
    to_lightroom_preset,
    to_lightroom_profile,
)
from filmrecipe.schema import (
    AdjustmentModel,
    ExportAction,
    ExportRequest,
    ExportResponse,
    ExportType,
    IncludeFlags,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
Render = Callable[[AdjustmentModel, IncludeFlags, ExportConfig], str]


@dataclass(frozen=True, slots=True)
class ExportTarget:
    """How one export type is rendered and named on disk."""
    render: Render
    extension: str
    suffix: str
    default_name: str


TARGETS: dict[ExportType, ExportTarget] = {
    ExportType.LIGHTROOM_PRESET: ExportTarget(
        lambda m, i, c: to_lightroom_preset(m, i, config=c), "xmp", "", "Custom-Preset"
    ),
    ExportType.LIGHTROOM_PROFILE: ExportTarget(
        lambda m, i, c: to_lightroom_profile(m, i, config=c), "xmp", "-Profile", "Custom-Profile"
    ),
    ExportType.CAPTURE_ONE_STYLE: ExportTarget(
        lambda m, i, c: to_capture_one_style(m, i), "costyle", "", "Custom-Style"
    ),
    ExportType.CAPTURE_ONE_BASIC_STYLE: ExportTarget(
        lambda m, i, c: to_capture_one_basic_style(m, i), "costyle", "-Basic", "Custom-Style"
    ),
}


# =============================================================================
# Filenames and Writing
# =============================================================================


def safe_filename(name: Optional[str]) -> str:
    """Keep letters, digits, spaces, ``_`` and ``-``; spaces become dashes."""
    if not name:
        return ""
    cleaned = re.sub(r"[^A-Za-z0-9 _-]+", "", name)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    return cleaned.replace(" ", "-")


def _looks_like_directory(destination: PathLike) -> bool:
    text = str(destination)
    return Path(destination).is_dir() or text.endswith(("/", os.sep))


def write_atomic(path: Path, data: bytes) -> None:
    """
    Write ``data`` to ``path`` via a temporary sibling and rename.

    Raises:
        ExportIOError: If any step fails; the temporary file is removed.
    """
    tmp_name: Optional[str] = None
    try:
        with tempfile.NamedTemporaryFile(
            "wb", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ExportIOError(f"Failed to write {path}: {e}", path) from e


def _resolve_destination(
    destination: Optional[PathLike],
    base_name: str,
    target: ExportTarget,
    now: datetime,
    config: ExportConfig,
) -> Path:
    if destination is None or str(destination) == "":
        raise ValidationError("save-to-folder requires a destination path")
    path = Path(destination)
    if not path.is_absolute():
        raise ValidationError(f"Destination must be an absolute path: {destination}")

    if _looks_like_directory(destination):
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportIOError(f"Cannot create destination folder: {e}", path) from e
        stamp = now.strftime(config.timestamp_format)
        return path / f"{base_name}-{stamp}{target.suffix}.{target.extension}"
    return path


# =============================================================================
# Entry Point
# =============================================================================


def export(
    request: Union[ExportRequest, dict],
    destination: Optional[PathLike] = None,
    *,
    now: Optional[datetime] = None,
    config: Optional[ExportConfig] = None,
) -> ExportResponse:
    """
    Run one export request.

    Args:
        request: ExportRequest, or its camelCase mapping.
        destination: Absolute file or folder path (save-to-folder only).
            A folder (existing, or ending in a separator) gets a
            synthesized ``<name>-<timestamp><suffix>.<ext>`` filename.
        now: Timestamp for synthesized filenames; defaults to the clock.
        config: Export defaults.

    Returns:
        ExportResponse. Downloads carry ``buffer`` and ``filename``; saves
        carry ``output_path`` and ``file_path``. Failures carry ``error``.
    """
    config = config or ExportConfig()
    try:
        if not isinstance(request, ExportRequest):
            request = ExportRequest.from_dict(request)
        target = TARGETS[request.type]

        model = request.adjustments.with_name(request.recipe_name)
        if request.user_rating is not None:
            logger.debug("Exporting recipe rated %s", request.user_rating)

        text = target.render(model, request.include, config)
        data = text.encode("utf-8")
        base_name = safe_filename(request.recipe_name or model.preset_name) or target.default_name

        if request.action is ExportAction.DOWNLOAD:
            filename = f"{base_name}{target.suffix}.{target.extension}"
            logger.info("Prepared %s download %s (%d bytes)", request.type.value, filename, len(data))
            return ExportResponse(success=True, buffer=data, filename=filename)

        path = _resolve_destination(destination, base_name, target, now or datetime.now(), config)
        write_atomic(path, data)
        logger.info("Saved %s to %s", request.type.value, path)
        return ExportResponse(
            success=True,
            file_path=str(path),
            output_path=str(path),
            filename=path.name,
        )
    except (FilmRecipeError, OSError) as e:
        logger.exception("Export failed")
        return ExportResponse.failure(str(e))
    except Exception as e:
        logger.exception("Unexpected export failure")
        return ExportResponse.failure(f"Unexpected error: {e}")


# =============================================================================
# Convenience Calls
# =============================================================================


def _run(
    export_type: ExportType,
    action: ExportAction,
    adjustments: Union[AdjustmentModel, dict],
    include: Optional[Union[IncludeFlags, dict]],
    recipe_name: Optional[str],
    include_masks: Optional[bool],
    destination: Optional[PathLike] = None,
    config: Optional[ExportConfig] = None,
) -> ExportResponse:
    """
    Build a request from loose arguments and export it.

    With no include flags, masks default to on; an explicit
    ``include_masks`` always wins.
    """
    try:
        if not isinstance(adjustments, AdjustmentModel):
            adjustments = AdjustmentModel.from_dict(adjustments)
        if include is None:
            flags = IncludeFlags(masks=True)
        elif isinstance(include, IncludeFlags):
            flags = include
        else:
            flags = IncludeFlags.from_dict(include)
        request = ExportRequest(
            type=export_type,
            action=action,
            adjustments=adjustments,
            include=flags.with_masks(include_masks),
            recipe_name=recipe_name,
        )
    except ValidationError as e:
        logger.warning("Rejected %s export: %s", export_type.value, e)
        return ExportResponse.failure(str(e))
    return export(request, destination, config=config)


def download_lightroom_preset(adjustments, include=None, recipe_name=None, include_masks=None, *, config=None):
    return _run(
        ExportType.LIGHTROOM_PRESET, ExportAction.DOWNLOAD,
        adjustments, include, recipe_name, include_masks, config=config,
    )


def download_lightroom_profile(adjustments, include=None, recipe_name=None, include_masks=None, *, config=None):
    """Profiles never carry masks; ``include_masks`` is accepted for symmetry."""
    return _run(
        ExportType.LIGHTROOM_PROFILE, ExportAction.DOWNLOAD,
        adjustments, include, recipe_name, include_masks, config=config,
    )


def download_capture_one_style(
    adjustments, include=None, recipe_name=None, include_masks=None, *, basic=False, config=None
):
    export_type = ExportType.CAPTURE_ONE_BASIC_STYLE if basic else ExportType.CAPTURE_ONE_STYLE
    return _run(
        export_type, ExportAction.DOWNLOAD,
        adjustments, include, recipe_name, include_masks, config=config,
    )


def save_lightroom_preset_to_folder(
    adjustments, destination, include=None, recipe_name=None, include_masks=None, *, config=None
):
    return _run(
        ExportType.LIGHTROOM_PRESET, ExportAction.SAVE_TO_FOLDER,
        adjustments, include, recipe_name, include_masks, destination, config,
    )


def save_lightroom_profile_to_folder(
    adjustments, destination, include=None, recipe_name=None, include_masks=None, *, config=None
):
    return _run(
        ExportType.LIGHTROOM_PROFILE, ExportAction.SAVE_TO_FOLDER,
        adjustments, include, recipe_name, include_masks, destination, config,
    )


def save_capture_one_style_to_folder(
    adjustments, destination, include=None, recipe_name=None, include_masks=None, *,
    basic=False, config=None,
):
    export_type = ExportType.CAPTURE_ONE_BASIC_STYLE if basic else ExportType.CAPTURE_ONE_STYLE
    return _run(
        export_type, ExportAction.SAVE_TO_FOLDER,
        adjustments, include, recipe_name, include_masks, destination, config,
    )
