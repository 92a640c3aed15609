"""Services package - Remote model collaborators and the solve pipeline."""

from .ocr_service import OCRService
from .enhance_service import EnhancementService
from .solver_service import SolverService
from .equation_service import assemble_equation, fill_missing_operators

__all__ = [
    'OCRService',
    'EnhancementService',
    'SolverService',
    'assemble_equation',
    'fill_missing_operators',
]
