"""Tests for CachedImage decoding and the JPEG disk form."""

from __future__ import annotations

import io

import pytest
from PIL import Image

from conftest import make_image_bytes
from imagelink.errors import DecodeError
from imagelink.models.types import CachedImage, Size


@pytest.mark.parametrize("fmt", ["PNG", "JPEG", "GIF", "BMP", "TIFF", "WEBP"])
def test_decode_supported_formats(fmt):
    image = CachedImage.decode("k", make_image_bytes(size=(20, 10), fmt=fmt))
    assert image.size == Size(20, 10)
    assert (image.width, image.height) == (20, 10)


@pytest.mark.parametrize("data", [b"", b"<html>not found</html>", b"\x89PNG\r\n\x1a\n truncated"])
def test_decode_rejects_non_images(data):
    with pytest.raises(DecodeError):
        CachedImage.decode("k", data)


def test_encode_is_jpeg_without_alpha():
    rgba = CachedImage.decode("k", make_image_bytes(mode="RGBA", color=(1, 2, 3, 0)))
    data = rgba.encode(quality=80)
    with Image.open(io.BytesIO(data)) as img:
        assert img.format == "JPEG"
        assert img.mode == "RGB"


def test_lower_quality_is_smaller():
    noisy = Image.effect_noise((128, 128), 64).convert("RGB")
    image = CachedImage(key="k", image=noisy)
    assert len(image.encode(quality=30)) < len(image.encode(quality=100))


class TestSize:
    def test_parse(self):
        assert Size.parse("256x128") == Size(256, 128)
        assert Size.parse(" 64 X 64 ") == Size(64, 64)

    @pytest.mark.parametrize("text", ["", "256", "axb", "0x10", "-1x5"])
    def test_parse_rejects(self, text):
        with pytest.raises(ValueError):
            Size.parse(text)

    def test_str(self):
        assert str(Size(300, 200)) == "300x200"
