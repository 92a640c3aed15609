"""
Session state machine for the scan-and-solve flow.

upload -> region_selection -> processing -> review, with reset from
anywhere back to upload. States and events are immutable; transition()
is a pure function of (state, event).

Each solve request carries a request id. A completion event is applied
only while the session is still processing that same request, so a
response that arrives after a reset (or after a newer request) is
discarded.
"""
from dataclasses import dataclass, replace
from typing import Optional, Union

from .constants import (
    POLICY_PERMISSIVE,
    STATUS_SOLVED,
    STATUS_INVALID,
    STATUS_NO_EQUATION,
)
from .exceptions import InvalidTransition
from .models import OcrExtraction, QuadRegion
from utils.expression_utils import evaluate_expression, is_invalid


# States

@dataclass(frozen=True)
class UploadState:
    name = 'upload'


@dataclass(frozen=True)
class RegionSelectionState:
    image: str
    width: int
    height: int
    region: QuadRegion = QuadRegion()
    error: Optional[str] = None
    name = 'region_selection'


@dataclass(frozen=True)
class ProcessingState:
    image: str
    width: int
    height: int
    region: QuadRegion
    request_id: str
    name = 'processing'


@dataclass(frozen=True)
class ReviewState:
    image: str
    width: int
    height: int
    region: QuadRegion
    processed_image: str
    extraction: Optional[OcrExtraction]
    expression: str
    result: float
    status: str
    name = 'review'


SessionState = Union[UploadState, RegionSelectionState, ProcessingState, ReviewState]


# Events

@dataclass(frozen=True)
class ImageLoaded:
    image: str
    width: int
    height: int


@dataclass(frozen=True)
class CornerMoved:
    index: int
    x: float
    y: float


@dataclass(frozen=True)
class SolveRequested:
    request_id: str


@dataclass(frozen=True)
class SolveSucceeded:
    request_id: str
    processed_image: str
    extraction: Optional[OcrExtraction]
    expression: str
    result: float
    status: str = STATUS_SOLVED


@dataclass(frozen=True)
class SolveFailed:
    request_id: str
    message: str


@dataclass(frozen=True)
class ExpressionEdited:
    expression: str


@dataclass(frozen=True)
class Recalculate:
    policy: str = POLICY_PERMISSIVE


@dataclass(frozen=True)
class Reset:
    pass


SessionEvent = Union[
    ImageLoaded, CornerMoved, SolveRequested, SolveSucceeded,
    SolveFailed, ExpressionEdited, Recalculate, Reset,
]


def _reject(state: SessionState, event: SessionEvent):
    raise InvalidTransition(state.name, type(event).__name__)


def _is_current(state: SessionState, request_id: str) -> bool:
    return isinstance(state, ProcessingState) and state.request_id == request_id


def transition(state: SessionState, event: SessionEvent) -> SessionState:
    """
    Apply an event to a session state.

    Args:
        state: Current state
        event: Event to apply

    Returns:
        The next state (the same object when a stale completion is dropped)

    Raises:
        InvalidTransition: If the event does not apply to the state
    """
    if isinstance(event, Reset):
        return UploadState()

    if isinstance(event, ImageLoaded):
        # Replacing the image also orphans any request still in flight
        return RegionSelectionState(
            image=event.image,
            width=event.width,
            height=event.height,
        )

    if isinstance(event, CornerMoved):
        if not isinstance(state, RegionSelectionState):
            _reject(state, event)
        return replace(
            state,
            region=state.region.move_corner(event.index, event.x, event.y),
            error=None,
        )

    if isinstance(event, SolveRequested):
        if not isinstance(state, RegionSelectionState):
            _reject(state, event)
        return ProcessingState(
            image=state.image,
            width=state.width,
            height=state.height,
            region=state.region,
            request_id=event.request_id,
        )

    if isinstance(event, SolveSucceeded):
        if not _is_current(state, event.request_id):
            return state
        return ReviewState(
            image=state.image,
            width=state.width,
            height=state.height,
            region=state.region,
            processed_image=event.processed_image,
            extraction=event.extraction,
            expression=event.expression,
            result=event.result,
            status=event.status,
        )

    if isinstance(event, SolveFailed):
        if not _is_current(state, event.request_id):
            return state
        return RegionSelectionState(
            image=state.image,
            width=state.width,
            height=state.height,
            region=state.region,
            error=event.message,
        )

    if isinstance(event, ExpressionEdited):
        if not isinstance(state, ReviewState):
            _reject(state, event)
        return replace(state, expression=event.expression)

    if isinstance(event, Recalculate):
        if not isinstance(state, ReviewState):
            _reject(state, event)
        result = evaluate_expression(state.expression, event.policy)
        if is_invalid(result):
            status = STATUS_INVALID if state.expression.strip() else STATUS_NO_EQUATION
        else:
            status = STATUS_SOLVED
        return replace(state, result=result, status=status)

    raise TypeError(f"Unknown event: {type(event).__name__}")


def describe(state: SessionState) -> dict:
    """Serializable view of a state."""
    view = {'stage': state.name}
    if isinstance(state, UploadState):
        return view

    view.update({
        'width': state.width,
        'height': state.height,
        'region': state.region.to_dict(),
    })
    if isinstance(state, RegionSelectionState):
        view['error'] = state.error
    elif isinstance(state, ProcessingState):
        view['request_id'] = state.request_id
    elif isinstance(state, ReviewState):
        view.update({
            'processed_image': state.processed_image,
            'extraction': state.extraction.to_dict() if state.extraction else None,
            'expression': state.expression,
            'result': None if is_invalid(state.result) else state.result,
            'status': state.status,
        })
    return view
