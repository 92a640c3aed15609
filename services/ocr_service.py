"""
OCR Service - Extracts arithmetic from images via a multimodal chat model.

The model is reached through an OpenAI-compatible AsyncOpenAI client and
asked to answer with a JSON object of numbers, operators and expression.
"""
import json
import logging
from typing import Optional

from core.constants import DEFAULT_OCR_PARAMS, OCR_PROMPTS
from core.models import OcrExtraction
from utils.text_utils import extract_json
from .equation_service import fill_missing_operators

logger = logging.getLogger(__name__)


class OCRService:
    """Service for expression extraction using a multimodal model."""

    def __init__(
        self,
        client,
        model: str = "gpt-4o-mini",
        max_tokens: int = DEFAULT_OCR_PARAMS['max_tokens'],
        temperature: float = DEFAULT_OCR_PARAMS['temperature']
    ):
        """
        Initialize OCR service.

        Args:
            client: AsyncOpenAI client instance
            model: Chat model name
            max_tokens: Completion token limit
            temperature: Sampling temperature
        """
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def extract_expression(self, image_data_uri: str) -> Optional[OcrExtraction]:
        """
        Extract numbers, operators and expression from an image.

        Args:
            image_data_uri: Image as a base64 data URI

        Returns:
            OcrExtraction, or None if the model produced no usable output.
            A successful but empty extraction is returned as an empty
            OcrExtraction, not None.
        """
        try:
            response = await self._call_model(image_data_uri)
        except Exception as e:
            logger.error("Error during OCR extraction: %s", e)
            return None

        content = self._response_text(response)
        if not content:
            logger.error("OCR model returned no output")
            return None

        try:
            extraction = OcrExtraction.from_dict(extract_json(content))
        except (json.JSONDecodeError, ValueError, TypeError) as e:
            logger.error("Could not parse OCR output: %s", e)
            return None

        return fill_missing_operators(extraction)

    async def _call_model(self, image_data_uri: str):
        """Call the chat completions API with image and prompt."""
        return await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": OCR_PROMPTS['system']},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": OCR_PROMPTS['extract']},
                        {"type": "image_url", "image_url": {"url": image_data_uri}}
                    ]
                }
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            response_format={"type": "json_object"}
        )

    @staticmethod
    def _response_text(response) -> str:
        choices = getattr(response, 'choices', None) or []
        if not choices:
            return ""
        return choices[0].message.content or ""
