from __future__ import annotations

from io import BytesIO

from PIL import Image

from coin_collect.session.photos import prepare_photo_for_upload, recompress_photo


def _png_bytes(mode: str = "RGBA") -> bytes:
    image = Image.new(mode, (64, 48), color=(200, 40, 40, 255) if mode == "RGBA" else (200, 40, 40))
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def test_recompress_photo_returns_jpeg() -> None:
    photo = recompress_photo(_png_bytes(), quality=50)

    assert photo is not None
    with Image.open(BytesIO(photo)) as image:
        assert image.format == "JPEG"
        assert image.size == (64, 48)
        assert image.mode == "RGB"


def test_recompress_photo_rejects_non_image_bytes() -> None:
    assert recompress_photo(b"definitely not an image") is None


def test_prepare_photo_for_upload_falls_back_to_original_bytes() -> None:
    raw = b"\x00\x01\x02"

    assert prepare_photo_for_upload(raw) == raw


def test_lower_quality_produces_smaller_payload() -> None:
    image = Image.effect_noise((128, 128), 64).convert("RGB")
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    raw = buffer.getvalue()

    low = recompress_photo(raw, quality=10)
    high = recompress_photo(raw, quality=90)

    assert low is not None and high is not None
    assert len(low) < len(high)
