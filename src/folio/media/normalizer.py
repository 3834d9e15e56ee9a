# ABOUTME: Image normalization for book photos and downloaded cover art.
# ABOUTME: Decodes bytes, shrinks to bounded dimensions, and re-encodes to a canonical format.

import io
import logging
import posixpath
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from folio.errors import DecodeFailedError

logger = logging.getLogger(__name__)

DEFAULT_MAX_WIDTH = 800
DEFAULT_MAX_HEIGHT = 600
DEFAULT_QUALITY = 85

JPEG_CONTENT_TYPE = "image/jpeg"
PNG_CONTENT_TYPE = "image/png"
WEBP_CONTENT_TYPE = "image/webp"

ALLOWED_UPLOAD_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp", ".gif", ".bmp"})

# Pillow format name and canonical content type, keyed by source extension.
# Anything not listed (including no extension at all) is encoded as JPEG.
_FORMATS_BY_EXTENSION = {
    ".png": ("PNG", PNG_CONTENT_TYPE),
    ".webp": ("WEBP", WEBP_CONTENT_TYPE),
}
_JPEG = ("JPEG", JPEG_CONTENT_TYPE)

_FORMATS_BY_CONTENT_TYPE = {
    JPEG_CONTENT_TYPE: _JPEG,
    PNG_CONTENT_TYPE: ("PNG", PNG_CONTENT_TYPE),
    WEBP_CONTENT_TYPE: ("WEBP", WEBP_CONTENT_TYPE),
}

_EXTENSIONS_BY_CONTENT_TYPE = {
    JPEG_CONTENT_TYPE: ".jpg",
    PNG_CONTENT_TYPE: ".png",
    WEBP_CONTENT_TYPE: ".webp",
}

_PNG_MODES = frozenset({"1", "L", "LA", "P", "RGB", "RGBA"})


@dataclass(frozen=True)
class ImageConstraints:
    """Bounding box and lossy quality used when normalizing an image."""

    max_width: int = DEFAULT_MAX_WIDTH
    max_height: int = DEFAULT_MAX_HEIGHT
    quality: int = DEFAULT_QUALITY

    def __post_init__(self) -> None:
        if self.max_width < 1 or self.max_height < 1:
            msg = f"bounds must be positive, got {self.max_width}x{self.max_height}"
            raise ValueError(msg)
        if not 1 <= self.quality <= 100:
            msg = f"quality must be between 1 and 100, got {self.quality}"
            raise ValueError(msg)


@dataclass(frozen=True)
class ImageAsset:
    """Encoded image bytes ready to be stored or served."""

    data: bytes
    content_type: str
    source_name: str

    @property
    def extension(self) -> str:
        """File extension matching the content type (".jpg", ".png", ".webp")."""
        return extension_for_content_type(self.content_type)


def extension_for_content_type(content_type: str | None) -> str:
    """Map a canonical content type to a file extension; unknown types map to ".jpg"."""
    return _EXTENSIONS_BY_CONTENT_TYPE.get((content_type or "").lower(), ".jpg")


def _extension(name: str | None) -> str:
    return posixpath.splitext(name or "")[1].lower()


def output_format_for(source_name: str | None) -> tuple[str, str]:
    """Choose the output encoding from the source name's extension.

    The decoded format is deliberately ignored: a PNG uploaded as "cover.jpg"
    is re-encoded as JPEG.

    Returns:
        (Pillow format name, content type).
    """
    return _FORMATS_BY_EXTENSION.get(_extension(source_name), _JPEG)


def is_supported_upload(filename: str | None, content_type: str | None) -> bool:
    """Cheap pre-decode check that an upload claims to be an accepted image.

    Requires an `image/*` content type and one of the allowed extensions.
    """
    if not filename or not content_type or not content_type.strip():
        return False
    return (
        _extension(filename) in ALLOWED_UPLOAD_EXTENSIONS
        and content_type.strip().lower().startswith("image/")
    )


def _decode(data: bytes, source_name: str) -> Image.Image:
    if not data:
        raise DecodeFailedError(f"Image {source_name!r} is empty")
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        logger.warning("Could not decode image %s: %s", source_name, exc)
        raise DecodeFailedError(f"Image {source_name!r} could not be decoded") from exc
    return image


def fit_dimensions(width: int, height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """Compute the target size for an image bounded by max_width x max_height.

    Images already within bounds keep their size. Larger images are scaled by
    min(max_width/width, max_height/height), floored, preserving aspect ratio.
    Never upscales.
    """
    if width <= max_width and height <= max_height:
        return width, height
    ratio = min(max_width / width, max_height / height)
    return max(1, int(width * ratio)), max(1, int(height * ratio))


def _resize(image: Image.Image, max_width: int, max_height: int) -> Image.Image:
    target = fit_dimensions(image.width, image.height, max_width, max_height)
    if target == image.size:
        return image
    logger.debug("Resizing image from %dx%d to %dx%d", *image.size, *target)
    return image.resize(target, Image.Resampling.LANCZOS)


def _convert_for(image: Image.Image, pil_format: str) -> Image.Image:
    """Convert the pixel mode into one the target encoder can write."""
    has_alpha = "A" in image.mode or "transparency" in image.info
    if pil_format == "JPEG":
        if image.mode not in ("RGB", "L"):
            return image.convert("RGB")
        return image
    if pil_format == "WEBP":
        if image.mode not in ("RGB", "RGBA"):
            return image.convert("RGBA" if has_alpha else "RGB")
        return image
    if image.mode not in _PNG_MODES:
        return image.convert("RGBA" if has_alpha else "RGB")
    return image


def _encode(image: Image.Image, pil_format: str, quality: int) -> bytes:
    image = _convert_for(image, pil_format)
    buffer = io.BytesIO()
    if pil_format == "PNG":
        image.save(buffer, format="PNG", optimize=True, compress_level=9)
    else:
        image.save(buffer, format=pil_format, quality=quality)
    return buffer.getvalue()


def normalize(
    data: bytes,
    source_name: str,
    constraints: ImageConstraints | None = None,
) -> ImageAsset:
    """Decode, bound, and re-encode an image.

    The output format follows the source name's extension (.png -> PNG,
    .webp -> WebP, anything else -> JPEG). JPEG and WebP use the configured
    quality; PNG is lossless at maximum compression. The same input and
    constraints always produce byte-identical output.

    Raises:
        DecodeFailedError: If data is empty or not a decodable raster image.
    """
    constraints = constraints or ImageConstraints()
    image = _decode(data, source_name)
    try:
        resized = _resize(image, constraints.max_width, constraints.max_height)
        pil_format, content_type = output_format_for(source_name)
        try:
            encoded = _encode(resized, pil_format, constraints.quality)
        except (OSError, ValueError) as exc:
            raise DecodeFailedError(
                f"Image {source_name!r} could not be re-encoded as {pil_format}"
            ) from exc
    finally:
        image.close()

    logger.info(
        "Normalized image %s: %d bytes -> %d bytes (%s)",
        source_name,
        len(data),
        len(encoded),
        content_type,
    )
    return ImageAsset(data=encoded, content_type=content_type, source_name=source_name)


def resize_for_display(
    data: bytes,
    content_type: str | None,
    width: int | None = None,
    height: int | None = None,
    quality: int = DEFAULT_QUALITY,
) -> ImageAsset:
    """Re-normalize a stored photo for a one-off read at a requested size.

    A missing bound defaults to the image's own dimension on that axis. The
    output keeps the stored content type. Nothing is persisted.

    Raises:
        DecodeFailedError: If the stored bytes cannot be decoded.
    """
    source_name = f"photo{extension_for_content_type(content_type)}"
    pil_format, canonical_type = _FORMATS_BY_CONTENT_TYPE.get((content_type or "").lower(), _JPEG)
    image = _decode(data, source_name)
    try:
        resized = _resize(image, width or image.width, height or image.height)
        encoded = _encode(resized, pil_format, quality)
    except (OSError, ValueError) as exc:
        raise DecodeFailedError(f"Stored photo could not be re-encoded as {pil_format}") from exc
    finally:
        image.close()
    return ImageAsset(data=encoded, content_type=canonical_type, source_name=source_name)
