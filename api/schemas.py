"""
Pydantic schemas for API request/response validation.
"""
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field


class EvaluateRequest(BaseModel):
    """Request body for evaluating an expression."""
    expression: str
    policy: Optional[str] = Field(default=None, pattern="^(permissive|strict)$")


class EvaluateResponse(BaseModel):
    """Response for an evaluated expression."""
    expression: str
    result: Optional[float]
    display: str
    valid: bool


class AssembleRequest(BaseModel):
    """Request body for assembling an equation from OCR tokens."""
    numbers: List[str] = []
    operators: List[str] = []
    expression: Optional[str] = None


class AssembleResponse(BaseModel):
    """Response for an assembled equation."""
    equation: str
    found: bool


class CropResponse(BaseModel):
    """Response for a cropped image."""
    image: str
    width: int
    height: int


class CornerUpdate(BaseModel):
    """Request body for moving one region corner (fractions of the image)."""
    x: float
    y: float


class ExpressionUpdate(BaseModel):
    """Request body for correcting the extracted expression."""
    expression: str


class SessionResponse(BaseModel):
    """Response for session state."""
    id: str
    state: Dict[str, Any]
    message: Optional[str] = None
