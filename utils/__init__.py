"""Utilities package - Helper functions for images, cropping and expressions."""

from .image_utils import (
    load_image_bytes,
    image_to_data_uri,
    parse_data_uri,
    data_uri_to_image,
    get_image_dimensions
)

from .crop_utils import (
    quad_to_rect,
    resolve_region,
    crop_pil_image,
    crop_image
)

from .text_utils import (
    strip_code_fences,
    extract_json
)

from .expression_utils import (
    INVALID_EXPRESSION,
    is_invalid,
    normalize_symbols,
    sanitize_expression,
    evaluate_expression,
    format_result
)

__all__ = [
    # Image utils
    'load_image_bytes',
    'image_to_data_uri',
    'parse_data_uri',
    'data_uri_to_image',
    'get_image_dimensions',

    # Crop utils
    'quad_to_rect',
    'resolve_region',
    'crop_pil_image',
    'crop_image',

    # Text utils
    'strip_code_fences',
    'extract_json',

    # Expression utils
    'INVALID_EXPRESSION',
    'is_invalid',
    'normalize_symbols',
    'sanitize_expression',
    'evaluate_expression',
    'format_result'
]
