"""
Pytest configuration and global fixtures.
"""
import base64
import json
import sys
from io import BytesIO
from pathlib import Path
from types import SimpleNamespace

import pytest
from PIL import Image

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


def make_gradient_image(width: int = 120, height: int = 80) -> Image.Image:
    """Image whose every pixel encodes its own coordinates."""
    img = Image.new('RGB', (width, height))
    img.putdata([
        (x % 256, y % 256, (x * 3 + y * 7) % 256)
        for y in range(height)
        for x in range(width)
    ])
    return img


def to_data_uri(img: Image.Image, fmt: str = 'PNG') -> str:
    buf = BytesIO()
    img.save(buf, format=fmt)
    mime = 'image/png' if fmt == 'PNG' else 'image/jpeg'
    return f"data:{mime};base64,{base64.b64encode(buf.getvalue()).decode()}"


def to_bytes(img: Image.Image, fmt: str = 'PNG') -> bytes:
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


class FakeCompletions:
    """Stands in for client.chat.completions; records every call."""

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        if self.content is None:
            return SimpleNamespace(choices=[])
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason='stop')])


class FakeImages:
    """Stands in for client.images; returns a fixed base64 payload."""

    def __init__(self, b64=None, error=None):
        self.b64 = b64
        self.error = error
        self.calls = []

    async def edit(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        data = [SimpleNamespace(b64_json=self.b64)] if self.b64 else []
        return SimpleNamespace(data=data)


def make_fake_client(content=None, chat_error=None, image_b64=None, image_error=None):
    """Build an object shaped like AsyncOpenAI for the calls we make."""
    return SimpleNamespace(
        chat=SimpleNamespace(completions=FakeCompletions(content, chat_error)),
        images=FakeImages(image_b64, image_error),
    )


@pytest.fixture
def gradient_image():
    """120x80 RGB image with coordinate-encoded pixels."""
    return make_gradient_image()


@pytest.fixture
def gradient_data_uri(gradient_image):
    """The gradient image as a PNG data URI."""
    return to_data_uri(gradient_image)


@pytest.fixture
def sample_png_bytes():
    """Provide PNG bytes of a small solid image."""
    return to_bytes(Image.new('RGB', (100, 100), color='blue'))


@pytest.fixture
def enhanced_b64():
    """Base64 PNG standing in for a model-enhanced image."""
    return base64.b64encode(to_bytes(Image.new('RGB', (10, 10), color='white'))).decode()


@pytest.fixture
def ocr_json():
    """Factory for model OCR responses."""
    def _make(expression="", numbers=(), operators=()):
        return json.dumps({
            'expression': expression,
            'numbers': list(numbers),
            'operators': list(operators),
        })
    return _make


@pytest.fixture
def fake_client_factory():
    """Factory for fake AsyncOpenAI clients."""
    return make_fake_client
