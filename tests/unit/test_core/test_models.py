"""
Unit tests for core.models module.
"""
import dataclasses

import pytest
from core.models import (
    clamp_fraction,
    Point,
    RectRegion,
    QuadRegion,
    OcrExtraction,
    SolveOutcome
)


class TestClampFraction:
    """Tests for clamp_fraction function."""

    @pytest.mark.parametrize("value,expected", [
        (-0.5, 0.0),
        (0.0, 0.0),
        (0.42, 0.42),
        (1.0, 1.0),
        (7.3, 1.0),
    ])
    def test_clamp(self, value, expected):
        assert clamp_fraction(value) == expected


class TestRectRegion:
    """Tests for RectRegion dataclass."""

    def test_box(self):
        """Test Pillow box from x/y/width/height."""
        rect = RectRegion(x=10, y=20, width=100, height=50)

        assert rect.box == (10, 20, 110, 70)

    def test_pixel_size_truncates(self):
        rect = RectRegion(x=0.7, y=0.2, width=99.9, height=10.5)

        assert rect.pixel_size == (99, 10)
        assert rect.box == (0, 0, 99, 10)

    def test_to_dict(self):
        rect = RectRegion(1, 2, 3, 4)

        assert rect.to_dict() == {'x': 1, 'y': 2, 'width': 3, 'height': 4}

    def test_immutable(self):
        rect = RectRegion(1, 2, 3, 4)
        with pytest.raises(dataclasses.FrozenInstanceError):
            rect.x = 5


class TestQuadRegion:
    """Tests for QuadRegion dataclass."""

    def test_default_corners(self):
        """Test default corners match the initial selection."""
        quad = QuadRegion()

        assert [c.to_dict() for c in quad.corners] == [
            {'x': 0.1, 'y': 0.1},
            {'x': 0.9, 'y': 0.1},
            {'x': 0.9, 'y': 0.9},
            {'x': 0.1, 'y': 0.9},
        ]

    def test_construction_clamps(self):
        """Test out-of-range corners are clamped on construction."""
        quad = QuadRegion.from_pairs([(-1, 0.5), (2, -3), (0.5, 1.5), (0.3, 0.3)])

        for corner in quad.corners:
            assert 0.0 <= corner.x <= 1.0
            assert 0.0 <= corner.y <= 1.0
        assert quad.corners[0] == Point(0.0, 0.5)
        assert quad.corners[1] == Point(1.0, 0.0)

    def test_move_corner_clamps(self):
        """Test dragging a corner outside the image stays in [0, 1]."""
        quad = QuadRegion().move_corner(2, 1.7, -0.2)

        assert quad.corners[2] == Point(1.0, 0.0)

    def test_move_corner_returns_new(self):
        """Test move_corner does not mutate the original."""
        original = QuadRegion()
        moved = original.move_corner(0, 0.3, 0.3)

        assert original.corners[0] == Point(0.1, 0.1)
        assert moved.corners[0] == Point(0.3, 0.3)

    def test_move_corner_bad_index(self):
        with pytest.raises(IndexError):
            QuadRegion().move_corner(4, 0.5, 0.5)

    def test_wrong_corner_count(self):
        with pytest.raises(ValueError):
            QuadRegion.from_pairs([(0, 0), (1, 1)])

    def test_to_pixels(self):
        pixels = QuadRegion().to_pixels(200, 100)

        assert pixels[0].x == pytest.approx(20)
        assert pixels[2].y == pytest.approx(90)


class TestOcrExtraction:
    """Tests for OcrExtraction dataclass."""

    def test_from_dict(self):
        extraction = OcrExtraction.from_dict({
            'expression': '2 + 3',
            'numbers': ['2', '3'],
            'operators': ['+']
        })

        assert extraction.numbers == ('2', '3')
        assert extraction.operators == ('+',)
        assert extraction.expression == '2 + 3'

    def test_from_dict_coerces_numbers(self):
        """Test numeric tokens are kept as strings."""
        extraction = OcrExtraction.from_dict({'numbers': [2, 3.5]})

        assert extraction.numbers == ('2', '3.5')

    def test_from_dict_missing_keys(self):
        extraction = OcrExtraction.from_dict({})

        assert extraction.is_empty

    def test_from_dict_null_values(self):
        extraction = OcrExtraction.from_dict({'expression': None, 'numbers': None})

        assert extraction.expression == ""
        assert extraction.numbers == ()

    def test_from_non_dict(self):
        with pytest.raises(ValueError):
            OcrExtraction.from_dict(["2", "3"])

    def test_is_empty(self):
        assert OcrExtraction().is_empty
        assert not OcrExtraction(numbers=('1',)).is_empty

    def test_immutable(self):
        extraction = OcrExtraction(numbers=('1',))
        with pytest.raises(dataclasses.FrozenInstanceError):
            extraction.numbers = ('2',)

    def test_to_dict(self):
        extraction = OcrExtraction(numbers=('1', '2'), operators=('*',), expression='1*2')

        assert extraction.to_dict() == {
            'expression': '1*2',
            'numbers': ['1', '2'],
            'operators': ['*']
        }


class TestSolveOutcome:
    """Tests for SolveOutcome dataclass."""

    def test_to_dict_without_extraction(self):
        outcome = SolveOutcome(expression='1+1', result=2.0, status='solved')

        data = outcome.to_dict()

        assert data['extraction'] is None
        assert data['result'] == 2.0
        assert data['processed_image'] == ""
