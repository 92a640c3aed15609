"""
API Dependencies - Dependency injection for FastAPI.

Provides reusable dependencies for the model client, services and the
session store.
"""
from functools import lru_cache
from openai import AsyncOpenAI

from config.settings import settings
from serving.session_store import SessionStore
from services.enhance_service import EnhancementService
from services.ocr_service import OCRService
from services.solver_service import SolverService

_session_store = SessionStore(
    max_sessions=settings.max_sessions,
    ttl_seconds=settings.session_ttl_seconds
)


@lru_cache(maxsize=1)
def get_openai_client() -> AsyncOpenAI:
    """
    Dependency for the model client.

    Returns:
        AsyncOpenAI client configured from settings
    """
    return AsyncOpenAI(
        api_key=settings.openai_api_key or None,
        base_url=settings.openai_base_url
    )


def get_ocr_service() -> OCRService:
    """
    Dependency for OCR service.

    Returns:
        OCRService instance
    """
    return OCRService(
        client=get_openai_client(),
        model=settings.ocr_model,
        **settings.get_ocr_params()
    )


def get_enhance_service() -> EnhancementService:
    """Dependency for enhancement service."""
    return EnhancementService(
        client=get_openai_client(),
        model=settings.enhance_model,
        enabled=settings.enhance_enabled
    )


def get_solver_service() -> SolverService:
    """
    Dependency for the solve pipeline.

    Returns:
        SolverService wired with OCR and enhancement services
    """
    return SolverService(
        ocr_service=get_ocr_service(),
        enhance_service=get_enhance_service(),
        policy=settings.expression_policy,
        crop_format=settings.crop_output_format,
        crop_max_pixels=settings.max_crop_pixels
    )


def get_session_store() -> SessionStore:
    """Dependency for the in-memory session store."""
    return _session_store
