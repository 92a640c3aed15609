"""Core package - Domain models, constants, session state machine."""

from .models import Point, RectRegion, QuadRegion, OcrExtraction, SolveOutcome
from .constants import (
    OPERATOR_GLYPHS,
    DEFAULT_CORNERS,
    OCR_PROMPTS,
    ENHANCE_PROMPT,
    DEFAULT_OCR_PARAMS,
    POLICY_PERMISSIVE,
    POLICY_STRICT
)
from .exceptions import (
    CalcScanError,
    ImageDecodeError,
    ImageTooLargeError,
    ProcessingError,
    CropError,
    EnhancementError,
    ExtractionError,
    InvalidTransition,
    SessionNotFound
)

__all__ = [
    'Point',
    'RectRegion',
    'QuadRegion',
    'OcrExtraction',
    'SolveOutcome',
    'OPERATOR_GLYPHS',
    'DEFAULT_CORNERS',
    'OCR_PROMPTS',
    'ENHANCE_PROMPT',
    'DEFAULT_OCR_PARAMS',
    'POLICY_PERMISSIVE',
    'POLICY_STRICT',
    'CalcScanError',
    'ImageDecodeError',
    'ImageTooLargeError',
    'ProcessingError',
    'CropError',
    'EnhancementError',
    'ExtractionError',
    'InvalidTransition',
    'SessionNotFound'
]
