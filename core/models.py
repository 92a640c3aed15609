"""
Core domain models for the scan-and-solve workflow.

These are pure data structures without business logic.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .constants import DEFAULT_CORNERS


def clamp_fraction(value: float) -> float:
    """Clamp a fractional coordinate to [0, 1]."""
    return max(0.0, min(1.0, float(value)))


@dataclass(frozen=True)
class Point:
    """A 2D point, either in pixels or as a fraction of the image size."""
    x: float
    y: float

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y}


@dataclass(frozen=True)
class RectRegion:
    """Axis-aligned rectangle in pixel units."""
    x: float
    y: float
    width: float
    height: float

    @property
    def pixel_size(self) -> Tuple[int, int]:
        """Output raster size, truncated to whole pixels."""
        return int(self.width), int(self.height)

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """Pillow-style (left, top, right, bottom) box."""
        left, top = int(self.x), int(self.y)
        width, height = self.pixel_size
        return left, top, left + width, top + height

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height
        }


@dataclass(frozen=True)
class QuadRegion:
    """
    Quadrilateral given by four fractional corners.

    Every coordinate is clamped to [0, 1] on construction, so a stored
    region can never point outside the image.
    """
    corners: Tuple[Point, Point, Point, Point] = field(
        default_factory=lambda: tuple(Point(x, y) for x, y in DEFAULT_CORNERS)
    )

    def __post_init__(self):
        corners = tuple(
            Point(clamp_fraction(c.x), clamp_fraction(c.y)) for c in self.corners
        )
        if len(corners) != 4:
            raise ValueError(f"Quadrilateral needs 4 corners, got {len(corners)}")
        object.__setattr__(self, 'corners', corners)

    @classmethod
    def from_pairs(cls, pairs: Sequence[Sequence[float]]) -> "QuadRegion":
        return cls(tuple(Point(x, y) for x, y in pairs))

    def move_corner(self, index: int, x: float, y: float) -> "QuadRegion":
        """Return a new region with one corner moved (and clamped)."""
        if not 0 <= index < 4:
            raise IndexError(f"Corner index out of range: {index}")
        corners = list(self.corners)
        corners[index] = Point(x, y)
        return QuadRegion(tuple(corners))

    def to_pixels(self, width: int, height: int) -> List[Point]:
        """Convert fractional corners to absolute pixel coordinates."""
        return [Point(c.x * width, c.y * height) for c in self.corners]

    def bounding_rect(self, width: int, height: int) -> RectRegion:
        """
        Axis-aligned bounding rectangle of the corners in pixels.

        No perspective correction is applied; a skewed quadrilateral is
        cropped to its bounds.
        """
        points = self.to_pixels(width, height)
        left = min(p.x for p in points)
        top = min(p.y for p in points)
        right = max(p.x for p in points)
        bottom = max(p.y for p in points)
        return RectRegion(x=left, y=top, width=right - left, height=bottom - top)

    def to_dict(self) -> dict:
        return {'corners': [c.to_dict() for c in self.corners]}


@dataclass(frozen=True)
class OcrExtraction:
    """Numbers, operators and best-guess expression recognized in an image."""
    numbers: Tuple[str, ...] = ()
    operators: Tuple[str, ...] = ()
    expression: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "OcrExtraction":
        """Build from a model response, coercing tokens to strings."""
        if not isinstance(data, dict):
            raise ValueError(f"Expected an object, got {type(data).__name__}")
        return cls(
            numbers=tuple(str(n) for n in data.get('numbers') or ()),
            operators=tuple(str(o) for o in data.get('operators') or ()),
            expression=str(data.get('expression') or ""),
        )

    @property
    def is_empty(self) -> bool:
        """True when nothing at all was recognized."""
        return not self.numbers and not self.operators and not self.expression.strip()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'expression': self.expression,
            'numbers': list(self.numbers),
            'operators': list(self.operators)
        }


@dataclass
class SolveOutcome:
    """Result of running one image through the solve pipeline."""
    expression: str
    result: float
    status: str
    extraction: Optional[OcrExtraction] = None
    processed_image: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'expression': self.expression,
            'result': self.result,
            'status': self.status,
            'extraction': self.extraction.to_dict() if self.extraction else None,
            'processed_image': self.processed_image
        }
