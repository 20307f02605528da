"""Texture thumbnails rendered with Pillow."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Final

from PIL import Image, ImageOps, UnidentifiedImageError

from ..errors import DecodeFailure

__all__ = ["THUMBNAIL_SIZE", "TextureThumbnail", "build_texture_thumbnail"]

logger = logging.getLogger(__name__)

THUMBNAIL_SIZE: Final[tuple[int, int]] = (256, 256)
"""Bounding box of texture thumbnails shown on catalog cards."""

_RESAMPLING_FILTER = Image.Resampling.LANCZOS


@dataclass(frozen=True, slots=True)
class TextureThumbnail:
    """PNG encoded preview of a texture together with its source metadata."""

    png: bytes = field(repr=False)
    width: int
    height: int
    mode: str
    source_format: str | None = None

    @property
    def dimensions(self) -> str:
        return f"{self.width}×{self.height}"


def build_texture_thumbnail(data: bytes, size: tuple[int, int] = THUMBNAIL_SIZE) -> TextureThumbnail:
    """Return a PNG thumbnail of the image stored in *data*."""

    if not data:
        raise DecodeFailure("Texture data is empty.")
    try:
        with Image.open(io.BytesIO(data)) as img:
            image = ImageOps.exif_transpose(img)
            source_format = img.format
            width, height = image.width, image.height
            mode = image.mode

            thumbnail = image.copy()
            thumbnail.thumbnail(size, _RESAMPLING_FILTER)
            if thumbnail.mode not in {"RGB", "RGBA", "L", "LA"}:
                thumbnail = thumbnail.convert("RGBA")
            buffer = io.BytesIO()
            thumbnail.save(buffer, format="PNG")
    except (UnidentifiedImageError, OSError) as exc:
        logger.debug("Unable to read texture preview: %s", exc)
        raise DecodeFailure("Texture preview is not available.") from exc

    return TextureThumbnail(
        png=buffer.getvalue(),
        width=width,
        height=height,
        mode=mode,
        source_format=source_format,
    )
