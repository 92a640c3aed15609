"""
Unit tests for core.session module.
"""
import math

import pytest
from core.exceptions import InvalidTransition
from core.models import OcrExtraction, Point, QuadRegion
from core.session import (
    UploadState,
    RegionSelectionState,
    ProcessingState,
    ReviewState,
    ImageLoaded,
    CornerMoved,
    SolveRequested,
    SolveSucceeded,
    SolveFailed,
    ExpressionEdited,
    Recalculate,
    Reset,
    transition,
    describe
)

IMAGE = "data:image/png;base64,AAAA"


@pytest.fixture
def selecting():
    return transition(UploadState(), ImageLoaded(image=IMAGE, width=640, height=480))


@pytest.fixture
def processing(selecting):
    return transition(selecting, SolveRequested(request_id="req-1"))


@pytest.fixture
def reviewing(processing):
    return transition(processing, SolveSucceeded(
        request_id="req-1",
        processed_image="data:image/png;base64,BBBB",
        extraction=OcrExtraction(numbers=('2', '3'), operators=('*',), expression='2*3'),
        expression='2*3',
        result=6.0
    ))


class TestUploadStage:
    """Tests for transitions out of the upload stage."""

    def test_image_loaded(self, selecting):
        """Test loading an image moves to region selection with default corners."""
        assert isinstance(selecting, RegionSelectionState)
        assert selecting.width == 640
        assert selecting.height == 480
        assert selecting.region == QuadRegion()

    def test_solve_without_image_rejected(self):
        with pytest.raises(InvalidTransition):
            transition(UploadState(), SolveRequested(request_id="x"))

    def test_corner_without_image_rejected(self):
        with pytest.raises(InvalidTransition):
            transition(UploadState(), CornerMoved(index=0, x=0.5, y=0.5))


class TestRegionSelection:
    """Tests for the region selection stage."""

    def test_corner_moved(self, selecting):
        state = transition(selecting, CornerMoved(index=1, x=0.8, y=0.2))

        assert state.region.corners[1] == Point(0.8, 0.2)
        assert state.image == IMAGE

    def test_corner_clamped(self, selecting):
        """Test dragging outside the image never stores out-of-range corners."""
        state = transition(selecting, CornerMoved(index=3, x=-0.4, y=1.9))

        assert state.region.corners[3] == Point(0.0, 1.0)

    def test_original_state_untouched(self, selecting):
        """Test transitions do not mutate the input state."""
        transition(selecting, CornerMoved(index=0, x=0.5, y=0.5))

        assert selecting.region.corners[0] == Point(0.1, 0.1)

    def test_solve_requested(self, processing, selecting):
        assert isinstance(processing, ProcessingState)
        assert processing.request_id == "req-1"
        assert processing.region == selecting.region

    def test_recalculate_rejected(self, selecting):
        with pytest.raises(InvalidTransition):
            transition(selecting, Recalculate())


class TestProcessing:
    """Tests for the processing stage and request fencing."""

    def test_success(self, reviewing):
        assert isinstance(reviewing, ReviewState)
        assert reviewing.expression == '2*3'
        assert reviewing.result == 6.0
        assert reviewing.status == 'solved'

    def test_failure_rolls_back(self, processing):
        """Test a failed call returns to region selection keeping the image."""
        state = transition(processing, SolveFailed(request_id="req-1", message="Could not process"))

        assert isinstance(state, RegionSelectionState)
        assert state.image == IMAGE
        assert state.region == processing.region
        assert state.error == "Could not process"

    def test_stale_success_dropped(self, processing):
        """Test a response for another request id is ignored."""
        state = transition(processing, SolveSucceeded(
            request_id="req-0",
            processed_image="",
            extraction=None,
            expression='1+1',
            result=2.0
        ))

        assert state is processing

    def test_late_response_after_reset_dropped(self, processing):
        """Test a response arriving after reset cannot overwrite the reset state."""
        reset = transition(processing, Reset())
        state = transition(reset, SolveSucceeded(
            request_id="req-1",
            processed_image="",
            extraction=None,
            expression='1+1',
            result=2.0
        ))

        assert isinstance(state, UploadState)

    def test_late_failure_after_new_image_dropped(self, processing):
        reloaded = transition(processing, ImageLoaded(image="data:x;base64,", width=1, height=1))
        state = transition(reloaded, SolveFailed(request_id="req-1", message="boom"))

        assert state is reloaded
        assert state.error is None

    def test_second_solve_rejected(self, processing):
        with pytest.raises(InvalidTransition):
            transition(processing, SolveRequested(request_id="req-2"))


class TestReview:
    """Tests for the review stage."""

    def test_edit_then_recalculate(self, reviewing):
        """Test a corrected expression is re-evaluated locally."""
        edited = transition(reviewing, ExpressionEdited(expression='2×3+4'))
        state = transition(edited, Recalculate())

        assert state.result == 10
        assert state.status == 'solved'
        assert state.processed_image == reviewing.processed_image
        assert state.extraction == reviewing.extraction

    def test_recalculate_invalid(self, reviewing):
        """Test an invalid correction keeps the image and extraction."""
        edited = transition(reviewing, ExpressionEdited(expression='2+*'))
        state = transition(edited, Recalculate(policy='strict'))

        assert math.isnan(state.result)
        assert state.status == 'invalid'
        assert state.extraction is not None

    def test_recalculate_empty(self, reviewing):
        edited = transition(reviewing, ExpressionEdited(expression='  '))
        state = transition(edited, Recalculate())

        assert state.status == 'no_equation'

    def test_recalculate_twice_same(self, reviewing):
        """Test recalculating the same expression is deterministic."""
        edited = transition(reviewing, ExpressionEdited(expression='1.5 * 4'))
        first = transition(edited, Recalculate())
        second = transition(first, Recalculate())

        assert first.result == second.result == 6

    def test_corner_rejected(self, reviewing):
        with pytest.raises(InvalidTransition):
            transition(reviewing, CornerMoved(index=0, x=0, y=0))


class TestReset:
    """Tests for the reset transition."""

    @pytest.mark.parametrize("fixture_name", ["selecting", "processing", "reviewing"])
    def test_reset_from_any_stage(self, fixture_name, request):
        state = request.getfixturevalue(fixture_name)

        assert isinstance(transition(state, Reset()), UploadState)

    def test_reset_from_upload(self):
        assert isinstance(transition(UploadState(), Reset()), UploadState)


class TestDescribe:
    """Tests for describe function."""

    def test_upload(self):
        assert describe(UploadState()) == {'stage': 'upload'}

    def test_region_selection(self, selecting):
        view = describe(selecting)

        assert view['stage'] == 'region_selection'
        assert len(view['region']['corners']) == 4
        assert view['error'] is None

    def test_review_invalid_result_is_none(self, reviewing):
        """Test NaN results are not leaked into JSON views."""
        state = transition(
            transition(reviewing, ExpressionEdited(expression='')), Recalculate()
        )

        view = describe(state)

        assert view['stage'] == 'review'
        assert view['result'] is None
        assert view['extraction']['numbers'] == ['2', '3']
