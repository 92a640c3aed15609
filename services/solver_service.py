"""
Solver Service - Runs an image through crop, enhancement, OCR and evaluation.

This service orchestrates the solve workflow; each remote step is a
separate collaborator so it can be swapped or faked in tests.
"""
import logging
from typing import Optional, Union

from core.constants import (
    POLICY_PERMISSIVE,
    STATUS_SOLVED,
    STATUS_INVALID,
    STATUS_NO_EQUATION,
)
from core.exceptions import CropError, ExtractionError
from core.models import QuadRegion, RectRegion, SolveOutcome
from utils.crop_utils import crop_image
from utils.expression_utils import INVALID_EXPRESSION, evaluate_expression, is_invalid
from .enhance_service import EnhancementService
from .equation_service import assemble_from_extraction
from .ocr_service import OCRService

logger = logging.getLogger(__name__)


class SolverService:
    """Service for solving handwritten arithmetic from a photo."""

    def __init__(
        self,
        ocr_service: OCRService,
        enhance_service: EnhancementService,
        policy: str = POLICY_PERMISSIVE,
        crop_format: str = 'JPEG',
        crop_max_pixels: Optional[int] = None
    ):
        self.ocr_service = ocr_service
        self.enhance_service = enhance_service
        self.policy = policy
        self.crop_format = crop_format
        self.crop_max_pixels = crop_max_pixels

    async def solve(
        self,
        image_data_uri: str,
        region: Optional[Union[RectRegion, QuadRegion]] = None
    ) -> SolveOutcome:
        """
        Solve the arithmetic shown in an image.

        Args:
            image_data_uri: Source image as a data URI
            region: Optional area of interest; the whole image if None

        Returns:
            SolveOutcome with status 'solved', 'invalid' (expression could
            not be evaluated) or 'no_equation' (nothing recognized)

        Raises:
            CropError: If the region could not be cropped
            EnhancementError: If the enhancement model failed
            ExtractionError: If the OCR model produced no output
        """
        image = image_data_uri
        if region is not None:
            image = await crop_image(
                image_data_uri, region, fmt=self.crop_format, max_pixels=self.crop_max_pixels
            )
            if image is None:
                raise CropError("Cropping failed.")

        enhanced = await self.enhance_service.enhance(image)

        extraction = await self.ocr_service.extract_expression(enhanced)
        if extraction is None:
            raise ExtractionError("Could not extract data from the image.")

        expression = assemble_from_extraction(extraction)
        if not expression.strip():
            logger.info("No equation found in image")
            return SolveOutcome(
                expression="",
                result=INVALID_EXPRESSION,
                status=STATUS_NO_EQUATION,
                extraction=extraction,
                processed_image=enhanced
            )

        result = evaluate_expression(expression, self.policy)
        status = STATUS_INVALID if is_invalid(result) else STATUS_SOLVED
        logger.info("Solved %r -> %s (%s)", expression, result, status)

        return SolveOutcome(
            expression=expression,
            result=result,
            status=status,
            extraction=extraction,
            processed_image=enhanced
        )
