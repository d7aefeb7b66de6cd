# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""Exception types raised across filmrecipe.

Analysis and schema code raise these directly to the caller. The export
orchestrator is the only place that converts them into failed responses.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class FilmRecipeError(Exception):
    """Base exception for filmrecipe."""


class DecodeError(FilmRecipeError, ValueError):
    """Pixel source could not be read or is not a supported image."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None) -> None:
        self.path = str(path) if path is not None else None
        if self.path is not None:
            message = f"{message}: {self.path}"
        super().__init__(message)


class ValidationError(FilmRecipeError, ValueError):
    """Malformed adjustment data or an unknown export type/action."""


class SerializationError(FilmRecipeError, ValueError):
    """A value could not be mapped into the target preset format."""


class ExportIOError(FilmRecipeError, OSError):
    """Writing an exported document to its destination failed."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None) -> None:
        self.path = str(path) if path is not None else None
        super().__init__(message)
