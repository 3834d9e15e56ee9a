# ABOUTME: Unit tests for image normalization and display re-sizing.
# ABOUTME: Covers bounding, aspect ratio, format choice by file name, determinism, and decode failures.

import pytest

from folio.errors import DecodeFailedError
from folio.media.normalizer import (
    JPEG_CONTENT_TYPE,
    PNG_CONTENT_TYPE,
    WEBP_CONTENT_TYPE,
    ImageAsset,
    ImageConstraints,
    fit_dimensions,
    is_supported_upload,
    normalize,
    output_format_for,
    resize_for_display,
)
from tests.fixtures.images import decode, image_bytes


class TestFitDimensions:
    def test_within_bounds_unchanged(self) -> None:
        assert fit_dimensions(640, 480, 800, 600) == (640, 480)

    def test_scales_by_tighter_axis(self) -> None:
        assert fit_dimensions(2000, 500, 800, 600) == (800, 200)
        assert fit_dimensions(1000, 1500, 800, 600) == (400, 600)

    def test_floors_fractional_sizes(self) -> None:
        assert fit_dimensions(1000, 333, 800, 600) == (800, 266)

    def test_never_below_one_pixel(self) -> None:
        assert fit_dimensions(10000, 1, 800, 600) == (800, 1)


class TestOutputFormat:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("cover.png", ("PNG", PNG_CONTENT_TYPE)),
            ("COVER.PNG", ("PNG", PNG_CONTENT_TYPE)),
            ("cover.webp", ("WEBP", WEBP_CONTENT_TYPE)),
            ("cover.jpg", ("JPEG", JPEG_CONTENT_TYPE)),
            ("cover.gif", ("JPEG", JPEG_CONTENT_TYPE)),
            ("cover", ("JPEG", JPEG_CONTENT_TYPE)),
        ],
    )
    def test_chosen_by_extension(self, name: str, expected: tuple[str, str]) -> None:
        assert output_format_for(name) == expected


class TestNormalize:
    def test_large_image_fits_bounds(self) -> None:
        asset = normalize(image_bytes(1600, 1200), "cover.png")
        image = decode(asset.data)
        assert image.size == (800, 600)

    def test_preserves_aspect_ratio(self) -> None:
        asset = normalize(image_bytes(2000, 500), "wide.jpg")
        assert decode(asset.data).size == (800, 200)

    def test_small_image_not_upscaled(self) -> None:
        asset = normalize(image_bytes(120, 90), "small.png")
        assert decode(asset.data).size == (120, 90)

    def test_custom_constraints(self) -> None:
        constraints = ImageConstraints(max_width=100, max_height=100, quality=70)
        asset = normalize(image_bytes(400, 200), "c.jpg", constraints)
        assert decode(asset.data).size == (100, 50)

    @pytest.mark.parametrize(
        ("name", "content_type", "pil_format"),
        [
            ("c.png", PNG_CONTENT_TYPE, "PNG"),
            ("c.jpg", JPEG_CONTENT_TYPE, "JPEG"),
            ("c.jpeg", JPEG_CONTENT_TYPE, "JPEG"),
            ("c.webp", WEBP_CONTENT_TYPE, "WEBP"),
        ],
    )
    def test_content_type_matches_encoded_bytes(
        self, name: str, content_type: str, pil_format: str
    ) -> None:
        asset = normalize(image_bytes(50, 50, fmt="PNG"), name)
        assert asset.content_type == content_type
        assert decode(asset.data).format == pil_format

    def test_png_named_jpg_becomes_jpeg(self) -> None:
        """The file name, not the decoded format, picks the output encoding."""
        asset = normalize(image_bytes(60, 40, fmt="PNG"), "scan.jpg")
        assert asset.content_type == JPEG_CONTENT_TYPE
        assert decode(asset.data).format == "JPEG"

    def test_transparent_png_to_jpeg(self) -> None:
        data = image_bytes(40, 40, fmt="PNG", mode="RGBA", color=(0, 0, 255, 128))
        asset = normalize(data, "logo.jpg")
        assert decode(asset.data).mode == "RGB"

    def test_32bit_grayscale_converted_for_png(self) -> None:
        data = image_bytes(30, 30, fmt="TIFF", mode="I", color=1000)
        asset = normalize(data, "scan.png")
        assert asset.content_type == PNG_CONTENT_TYPE
        assert decode(asset.data).mode == "RGB"

    def test_gif_source_accepted(self) -> None:
        asset = normalize(image_bytes(30, 30, fmt="GIF", mode="P", color=1), "anim.gif")
        assert asset.content_type == JPEG_CONTENT_TYPE

    def test_is_deterministic(self) -> None:
        data = image_bytes(1200, 900, fmt="JPEG")
        first = normalize(data, "c.jpg")
        second = normalize(data, "c.jpg")
        assert first.data == second.data

    def test_asset_records_source_name(self) -> None:
        asset = normalize(image_bytes(10, 10), "c.png")
        assert asset == ImageAsset(data=asset.data, content_type=PNG_CONTENT_TYPE, source_name="c.png")
        assert asset.extension == ".png"

    def test_garbage_raises_decode_failed(self) -> None:
        with pytest.raises(DecodeFailedError) as exc_info:
            normalize(b"definitely not an image", "c.jpg")
        assert exc_info.value.kind == "DecodeFailed"

    def test_empty_raises_decode_failed(self) -> None:
        with pytest.raises(DecodeFailedError):
            normalize(b"", "c.jpg")

    def test_truncated_raises_decode_failed(self) -> None:
        data = image_bytes(200, 200, fmt="PNG")
        with pytest.raises(DecodeFailedError):
            normalize(data[: len(data) // 2], "c.png")


class TestImageConstraints:
    def test_defaults(self) -> None:
        constraints = ImageConstraints()
        assert (constraints.max_width, constraints.max_height, constraints.quality) == (800, 600, 85)

    @pytest.mark.parametrize(
        "kwargs", [{"max_width": 0}, {"max_height": -1}, {"quality": 0}, {"quality": 101}]
    )
    def test_rejects_invalid_values(self, kwargs: dict[str, int]) -> None:
        with pytest.raises(ValueError):
            ImageConstraints(**kwargs)


class TestIsSupportedUpload:
    @pytest.mark.parametrize(
        ("filename", "content_type"),
        [
            ("cover.jpg", "image/jpeg"),
            ("cover.JPEG", "image/jpeg"),
            ("cover.png", "image/png"),
            ("cover.webp", "image/webp"),
            ("cover.gif", "image/gif"),
            ("cover.bmp", "image/bmp"),
        ],
    )
    def test_accepted(self, filename: str, content_type: str) -> None:
        assert is_supported_upload(filename, content_type)

    @pytest.mark.parametrize(
        ("filename", "content_type"),
        [
            ("notes.txt", "text/plain"),
            ("cover.tiff", "image/tiff"),
            ("cover.jpg", "application/octet-stream"),
            ("cover.jpg", ""),
            ("cover.jpg", None),
            ("", "image/jpeg"),
        ],
    )
    def test_rejected(self, filename: str, content_type: str | None) -> None:
        assert not is_supported_upload(filename, content_type)


class TestResizeForDisplay:
    def test_shrinks_to_requested_width(self) -> None:
        stored = normalize(image_bytes(800, 600, fmt="JPEG"), "c.jpg")
        asset = resize_for_display(stored.data, stored.content_type, width=400)
        assert decode(asset.data).size == (400, 300)
        assert asset.content_type == JPEG_CONTENT_TYPE

    def test_height_only(self) -> None:
        stored = normalize(image_bytes(800, 600), "c.png")
        asset = resize_for_display(stored.data, stored.content_type, height=150)
        assert decode(asset.data).size == (200, 150)

    def test_keeps_stored_content_type(self) -> None:
        stored = normalize(image_bytes(300, 300), "c.png")
        asset = resize_for_display(stored.data, stored.content_type, width=100)
        assert asset.content_type == PNG_CONTENT_TYPE
        assert decode(asset.data).format == "PNG"

    def test_never_upscales(self) -> None:
        stored = normalize(image_bytes(100, 80, fmt="JPEG"), "c.jpg")
        asset = resize_for_display(stored.data, stored.content_type, width=1000, height=1000)
        assert decode(asset.data).size == (100, 80)

    def test_undecodable_raises(self) -> None:
        with pytest.raises(DecodeFailedError):
            resize_for_display(b"garbage", JPEG_CONTENT_TYPE, width=10)
