from __future__ import annotations

import io

import pytest
from PIL import Image

from arvr_assets.errors import DecodeFailure
from arvr_assets.rendering.thumbnails import THUMBNAIL_SIZE, build_texture_thumbnail


def _png(size: tuple[int, int], mode: str = "RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, "orange" if mode == "RGB" else 128).save(buffer, format="PNG")
    return buffer.getvalue()


def test_thumbnail_fits_bounding_box() -> None:
    thumbnail = build_texture_thumbnail(_png((1024, 512)))

    with Image.open(io.BytesIO(thumbnail.png)) as image:
        assert image.format == "PNG"
        assert image.width <= THUMBNAIL_SIZE[0]
        assert image.height <= THUMBNAIL_SIZE[1]
        assert image.size == (256, 128)
    assert thumbnail.dimensions == "1024×512"
    assert thumbnail.source_format == "PNG"


def test_small_images_are_not_upscaled() -> None:
    thumbnail = build_texture_thumbnail(_png((16, 8)))

    with Image.open(io.BytesIO(thumbnail.png)) as image:
        assert image.size == (16, 8)


def test_invalid_image_data() -> None:
    with pytest.raises(DecodeFailure):
        build_texture_thumbnail(b"not an image")

    with pytest.raises(DecodeFailure):
        build_texture_thumbnail(b"")
