"""
Crop utilities for selecting the calculation area of an image.

Regions come either as a pixel rectangle or as four fractional corners;
corners are reduced to their bounding rectangle before cropping.
"""
import asyncio
import logging
import math
from typing import Optional, Union

from PIL import Image

from core.exceptions import ImageDecodeError
from core.models import QuadRegion, RectRegion
from .image_utils import data_uri_to_image, image_to_data_uri

logger = logging.getLogger(__name__)

Region = Union[RectRegion, QuadRegion]


def quad_to_rect(quad: QuadRegion, width: int, height: int) -> RectRegion:
    """
    Convert fractional corners to an absolute pixel rectangle.

    Args:
        quad: Region with corners in [0, 1]
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        Bounding rectangle of the corners in pixel units
    """
    return quad.bounding_rect(width, height)


def resolve_region(region: Region, width: int, height: int) -> RectRegion:
    """Resolve any supported region to a pixel rectangle."""
    if isinstance(region, QuadRegion):
        return quad_to_rect(region, width, height)
    if isinstance(region, RectRegion):
        return region
    raise TypeError(f"Unsupported region type: {type(region).__name__}")


def crop_pil_image(
    img: Image.Image,
    rect: RectRegion,
    max_pixels: Optional[int] = None
) -> Optional[Image.Image]:
    """
    Crop a decoded image to a pixel rectangle.

    The output is exactly rect.width x rect.height (truncated); areas
    outside the source image come out black.

    Args:
        img: Source image
        rect: Rectangle in pixel units
        max_pixels: Largest allowed output area; unlimited if None

    Returns:
        New cropped image, or None for a non-finite, empty, oversized or
        fully outside rectangle
    """
    if not all(math.isfinite(v) for v in (rect.x, rect.y, rect.width, rect.height)):
        return None

    out_width, out_height = rect.pixel_size
    if out_width <= 0 or out_height <= 0:
        return None
    if max_pixels is not None and out_width * out_height > max_pixels:
        return None

    left, top, right, bottom = rect.box
    img_width, img_height = img.size
    if right <= 0 or bottom <= 0 or left >= img_width or top >= img_height:
        return None

    if img.mode != 'RGB':
        img = img.convert('RGB')

    return img.crop((left, top, right, bottom))


def _crop_sync(
    data_uri: str,
    region: Region,
    fmt: str,
    max_pixels: Optional[int]
) -> Optional[str]:
    img = data_uri_to_image(data_uri)
    rect = resolve_region(region, *img.size)
    cropped = crop_pil_image(img, rect, max_pixels=max_pixels)
    if cropped is None:
        logger.warning("Crop region %s is unusable for image of size %s", rect.to_dict(), img.size)
        return None
    return image_to_data_uri(cropped, fmt=fmt)


async def crop_image(
    data_uri: str,
    region: Region,
    fmt: str = 'JPEG',
    max_pixels: Optional[int] = None
) -> Optional[str]:
    """
    Crop an encoded image to a region.

    Decoding and encoding run in a worker thread so the event loop is not
    blocked by large images.

    Args:
        data_uri: Source image as a data URI
        region: RectRegion in pixels or QuadRegion in fractions
        fmt: Output format ('JPEG' by default)
        max_pixels: Largest allowed output area; unlimited if None

    Returns:
        Cropped image as a data URI, or None if cropping failed
    """
    try:
        return await asyncio.to_thread(_crop_sync, data_uri, region, fmt, max_pixels)
    except (
        ImageDecodeError, OSError, ValueError, OverflowError, Image.DecompressionBombError
    ) as e:
        logger.warning("Cropping failed: %s", e)
        return None
