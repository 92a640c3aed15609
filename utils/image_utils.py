"""
Image utilities for the scan-and-solve workflow.

Handles upload decoding, data URI conversion and size limits.
"""
import base64
import binascii
import re
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from core.constants import DATA_URI_PATTERN, DEFAULT_OCR_PARAMS, IMAGE_MIME_TYPES
from core.exceptions import ImageDecodeError, ImageTooLargeError


def load_image_bytes(
    data: bytes,
    max_bytes: int = 10 * 1024 * 1024,
    max_size: Optional[int] = DEFAULT_OCR_PARAMS['max_image_size']
) -> Image.Image:
    """
    Decode an uploaded image fully into memory.

    Args:
        data: Raw file bytes
        max_bytes: Size ceiling; larger payloads are rejected before decoding
        max_size: Maximum dimension (width or height) before resizing,
            or None to keep the original size

    Returns:
        RGB PIL Image

    Raises:
        ImageTooLargeError: If the payload exceeds max_bytes
        ImageDecodeError: If the payload is not a decodable image
    """
    if len(data) > max_bytes:
        raise ImageTooLargeError(len(data), max_bytes)

    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Could not decode image: {e}") from e

    # Fix EXIF orientation
    img = ImageOps.exif_transpose(img)

    # Convert to RGB
    if img.mode != 'RGB':
        img = img.convert('RGB')

    # Resize if needed
    if max_size and max(img.size) > max_size:
        img.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

    return img


def image_to_data_uri(img: Image.Image, fmt: str = 'PNG', quality: int = 92) -> str:
    """
    Encode a PIL Image as a base64 data URI.

    Args:
        img: Image to encode
        fmt: Pillow format name ('PNG', 'JPEG', 'WEBP')
        quality: Quality for lossy formats

    Returns:
        String of the form data:<mime>;base64,<payload>
    """
    fmt = fmt.upper()
    if fmt not in IMAGE_MIME_TYPES:
        raise ValueError(f"Unsupported image format: '{fmt}'")

    if fmt == 'JPEG' and img.mode != 'RGB':
        img = img.convert('RGB')

    buf = BytesIO()
    save_kwargs = {'quality': quality} if fmt in ('JPEG', 'WEBP') else {}
    img.save(buf, format=fmt, **save_kwargs)
    payload = base64.b64encode(buf.getvalue()).decode()
    return f"data:{IMAGE_MIME_TYPES[fmt]};base64,{payload}"


def parse_data_uri(uri: str) -> Tuple[str, bytes]:
    """
    Split a data URI into its MIME type and decoded bytes.

    Raises:
        ImageDecodeError: If the string is not a base64 data URI
    """
    match = re.match(DATA_URI_PATTERN, uri or "", re.DOTALL)
    if not match:
        raise ImageDecodeError("Not a base64 data URI")

    try:
        data = base64.b64decode(match.group('data'), validate=False)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 payload: {e}") from e

    return match.group('mime') or 'application/octet-stream', data


def data_uri_to_image(uri: str) -> Image.Image:
    """
    Decode a data URI to a PIL Image.

    Raises:
        ImageDecodeError: If the URI or its payload cannot be decoded
    """
    _, data = parse_data_uri(uri)
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Could not decode image: {e}") from e
    return img


def get_image_dimensions(image_or_path) -> Tuple[int, int]:
    """
    Get image dimensions (width, height).

    Args:
        image_or_path: PIL Image, data URI or path to image file

    Returns:
        Tuple of (width, height)
    """
    if isinstance(image_or_path, str):
        if image_or_path.startswith('data:'):
            img = data_uri_to_image(image_or_path)
        else:
            img = Image.open(image_or_path)
    else:
        img = image_or_path

    return img.size
