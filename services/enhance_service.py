"""
Enhancement Service - Asks an image model to clean a photo up for OCR.
"""
import logging

from core.constants import ENHANCE_PROMPT, IMAGE_MIME_TYPES
from core.exceptions import EnhancementError, ImageDecodeError
from utils.image_utils import parse_data_uri

logger = logging.getLogger(__name__)

_EXTENSIONS = {mime: fmt.lower() for fmt, mime in IMAGE_MIME_TYPES.items()}


class EnhancementService:
    """Service for contrast/sharpness enhancement via the images API."""

    def __init__(self, client, model: str = "gpt-image-1", enabled: bool = True):
        """
        Initialize enhancement service.

        Args:
            client: AsyncOpenAI client instance
            model: Image model name
            enabled: When False, images are passed through untouched
        """
        self.client = client
        self.model = model
        self.enabled = enabled

    async def enhance(self, image_data_uri: str) -> str:
        """
        Enhance an image for recognition.

        Args:
            image_data_uri: Image as a base64 data URI

        Returns:
            Enhanced image as a PNG data URI

        Raises:
            EnhancementError: If the model call fails or returns no image
        """
        if not self.enabled:
            return image_data_uri

        try:
            mime, data = parse_data_uri(image_data_uri)
        except ImageDecodeError as e:
            raise EnhancementError(str(e)) from e

        filename = f"input.{_EXTENSIONS.get(mime, 'png')}"

        try:
            response = await self.client.images.edit(
                model=self.model,
                image=(filename, data, mime),
                prompt=ENHANCE_PROMPT,
            )
        except Exception as e:
            logger.error("Image enhancement call failed: %s", e)
            raise EnhancementError(f"Enhancement request failed: {e}") from e

        items = getattr(response, 'data', None) or []
        b64 = getattr(items[0], 'b64_json', None) if items else None
        if not b64:
            raise EnhancementError("Image processing failed to return an image.")

        return f"data:image/png;base64,{b64}"
