# ABOUTME: Media package for book photo and cover normalization.
# ABOUTME: Exports the normalizer entry points and its value types.

from folio.media.normalizer import (
    ImageAsset,
    ImageConstraints,
    is_supported_upload,
    normalize,
    resize_for_display,
)

__all__ = [
    "ImageAsset",
    "ImageConstraints",
    "is_supported_upload",
    "normalize",
    "resize_for_display",
]
