# Copyright (c) 2026 Filmrecipe
# SPDX-License-Identifier: MIT

"""
Pixel buffers and image decoding.

Images are decoded with Pillow, converted to sRGB when they embed an ICC
profile, and shrunk to fit inside the analysis box so statistics cost the
same regardless of the source resolution.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import numpy as np
from numpy.typing import NDArray
from PIL import Image, ImageCms, UnidentifiedImageError

from filmrecipe.errors import DecodeError

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, bytes, NDArray[np.uint8], "PixelBuffer"]


@dataclass(frozen=True, slots=True)
class PixelBuffer:
    """
    Decoded 8-bit samples of shape (H, W, C) with C in {3, 4}.

    Only the first three channels (R, G, B) feed the statistics; an alpha
    channel is carried but ignored.
    """
    pixels: NDArray[np.uint8]

    def __post_init__(self) -> None:
        p = self.pixels
        if not isinstance(p, np.ndarray):
            raise DecodeError(f"Expected numpy array, got {type(p).__name__}")
        if p.ndim != 3 or p.shape[2] not in (3, 4):
            raise DecodeError(f"Expected (H, W, 3) or (H, W, 4) array, got shape {p.shape}")
        if p.dtype != np.uint8:
            raise DecodeError(f"Expected uint8 array, got {p.dtype}")
        if p.shape[0] == 0 or p.shape[1] == 0:
            raise DecodeError("Pixel buffer is empty")

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def channels(self) -> int:
        return int(self.pixels.shape[2])

    @property
    def pixel_count(self) -> int:
        return self.height * self.width

    def rgb(self) -> NDArray[np.uint8]:
        """Flattened (N, 3) view of the color channels."""
        return self.pixels[:, :, :3].reshape(-1, 3)


def fit_inside(width: int, height: int, max_size: int) -> tuple[int, int]:
    """Target size that fits inside max_size x max_size, keeping aspect; never enlarges."""
    if width <= max_size and height <= max_size:
        return width, height
    scale = min(max_size / width, max_size / height)
    return max(1, round(width * scale)), max(1, round(height * scale))


def _to_srgb(img: Image.Image, label: str) -> Image.Image:
    """Convert to RGB(A), applying an embedded ICC profile when present."""
    has_alpha = img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info)
    target_mode = "RGBA" if has_alpha else "RGB"

    icc = img.info.get("icc_profile")
    if icc and not has_alpha:
        try:
            embedded = ImageCms.ImageCmsProfile(io.BytesIO(icc))
            srgb = ImageCms.createProfile("sRGB")
            if img.mode != "RGB":
                img = img.convert("RGB")
            return ImageCms.profileToProfile(img, embedded, srgb)
        except ImageCms.PyCMSError as e:
            logger.warning("Ignoring unusable ICC profile in %s: %s", label, e)

    if img.mode != target_mode:
        img = img.convert(target_mode)
    return img


def decode_image(
    source: Union[str, Path, bytes],
    *,
    max_size: int = 256,
) -> PixelBuffer:
    """
    Decode an image file (or its bytes) into a PixelBuffer.

    Args:
        source: Path to an image, or the encoded image bytes.
        max_size: Bounding box for the fit-inside resize.

    Raises:
        DecodeError: If the file is missing, unreadable, not an image, or
            larger than Pillow's decompression-bomb limit.
            The error carries the path when one was given.
    """
    label = "<bytes>" if isinstance(source, bytes) else str(source)
    path = None if isinstance(source, bytes) else source
    try:
        with Image.open(io.BytesIO(source) if isinstance(source, bytes) else source) as img:
            img.load()
            img = _to_srgb(img, label)
            new_size = fit_inside(img.width, img.height, max_size)
            if new_size != img.size:
                img = img.resize(new_size, Image.Resampling.LANCZOS)
            pixels = np.array(img, dtype=np.uint8)
    except FileNotFoundError as e:
        raise DecodeError("Image file not found", path) from e
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise DecodeError(f"Cannot decode image ({e})", path) from e

    logger.debug("Decoded %s to %dx%d", label, pixels.shape[1], pixels.shape[0])
    return PixelBuffer(pixels)


def resize_buffer(buffer: PixelBuffer, max_size: int = 256) -> PixelBuffer:
    """Shrink an in-memory buffer to fit inside max_size x max_size (Lanczos)."""
    new_w, new_h = fit_inside(buffer.width, buffer.height, max_size)
    if (new_w, new_h) == (buffer.width, buffer.height):
        return buffer
    img = Image.fromarray(buffer.pixels)
    img = img.resize((new_w, new_h), Image.Resampling.LANCZOS)
    return PixelBuffer(np.array(img, dtype=np.uint8))


def load_pixels(source: ImageSource, *, max_size: int = 256) -> PixelBuffer:
    """
    Accept any supported pixel source and return an analysis-sized buffer.

    Arrays and PixelBuffers are validated and resized; paths and bytes are
    decoded with Pillow.
    """
    if isinstance(source, PixelBuffer):
        return resize_buffer(source, max_size)
    if isinstance(source, np.ndarray):
        return resize_buffer(PixelBuffer(source), max_size)
    if isinstance(source, (str, Path, bytes)):
        return decode_image(source, max_size=max_size)
    raise DecodeError(f"Unsupported pixel source: {type(source).__name__}")
