"""
Workflow API for the scan-and-solve pipeline.

Provides endpoints for:
- Expression evaluation and equation assembly
- Image cropping
- Interactive sessions (upload, adjust region, solve, correct, reset)
"""
import logging
import uuid

from fastapi import FastAPI, File, UploadFile, Form, Depends, HTTPException
from fastapi.responses import Response

from api.dependencies import get_session_store, get_solver_service
from api.schemas import (
    EvaluateRequest,
    EvaluateResponse,
    AssembleRequest,
    AssembleResponse,
    CropResponse,
    CornerUpdate,
    ExpressionUpdate,
    SessionResponse,
)
from config.logging_config import configure_logging
from config.settings import settings
from core.constants import NO_EQUATION_LABEL
from core.exceptions import (
    ImageDecodeError,
    ImageTooLargeError,
    InvalidTransition,
    ProcessingError,
    SessionNotFound,
)
from core.models import RectRegion
from core.session import (
    ImageLoaded,
    CornerMoved,
    SolveRequested,
    SolveSucceeded,
    SolveFailed,
    ExpressionEdited,
    Recalculate,
    Reset,
    ReviewState,
    describe,
)
from services.equation_service import assemble_equation
from services.solver_service import SolverService
from utils.crop_utils import crop_image
from utils.expression_utils import evaluate_expression, format_result, is_invalid
from utils.image_utils import get_image_dimensions, image_to_data_uri, load_image_bytes
from .session_store import SessionStore

logger = logging.getLogger(__name__)


# Create FastAPI app
workflow_app = FastAPI(
    title="CalcScan API",
    description="Scan handwritten arithmetic, extract it with a multimodal model and solve it",
    version="1.0.0"
)


@workflow_app.on_event("startup")
async def startup_event():
    """Configure logging on startup."""
    configure_logging(settings.log_level)
    logger.info("CalcScan API initialized")


async def _read_image(file: UploadFile, max_size=settings.max_image_size):
    """Read and decode an uploaded image, mapping input errors to HTTP errors."""
    content = await file.read()
    try:
        return load_image_bytes(
            content,
            max_bytes=settings.max_upload_bytes,
            max_size=max_size
        )
    except ImageTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))
    except ImageDecodeError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _session_response(session_id: str, state, message=None) -> SessionResponse:
    return SessionResponse(id=session_id, state=describe(state), message=message)


def _apply(store: SessionStore, session_id: str, event):
    try:
        return store.apply(session_id, event)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    except IndexError as e:
        raise HTTPException(status_code=422, detail=str(e))


@workflow_app.post("/evaluate", response_model=EvaluateResponse)
async def evaluate(request: EvaluateRequest):
    """
    Evaluate an arithmetic expression.

    An invalid expression is a normal result (valid=false), not an error.
    """
    policy = request.policy or settings.expression_policy
    result = evaluate_expression(request.expression, policy)
    valid = not is_invalid(result)
    return EvaluateResponse(
        expression=request.expression,
        result=result if valid else None,
        display=format_result(result),
        valid=valid
    )


@workflow_app.post("/assemble", response_model=AssembleResponse)
async def assemble(request: AssembleRequest):
    """Assemble the expression to evaluate from OCR tokens."""
    equation = assemble_equation(request.numbers, request.operators, request.expression)
    return AssembleResponse(equation=equation, found=bool(equation.strip()))


@workflow_app.post("/crop", response_model=CropResponse)
async def crop(
    file: UploadFile = File(...),
    x: float = Form(...),
    y: float = Form(...),
    width: float = Form(..., gt=0),
    height: float = Form(..., gt=0)
):
    """
    Crop an uploaded image to a pixel rectangle.

    Returns:
        The cropped image as a data URI
    """
    img = await _read_image(file, max_size=None)
    rect = RectRegion(x=x, y=y, width=width, height=height)

    cropped = await crop_image(
        image_to_data_uri(img),
        rect,
        fmt=settings.crop_output_format,
        max_pixels=settings.max_crop_pixels
    )
    if cropped is None:
        raise HTTPException(status_code=422, detail="Cropping failed.")

    out_width, out_height = rect.pixel_size
    return CropResponse(image=cropped, width=out_width, height=out_height)


@workflow_app.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session(
    file: UploadFile = File(...),
    store: SessionStore = Depends(get_session_store)
):
    """Start a session from an uploaded photo."""
    img = await _read_image(file)
    width, height = get_image_dimensions(img)

    session_id = store.create()
    state = store.apply(
        session_id,
        ImageLoaded(image=image_to_data_uri(img), width=width, height=height)
    )
    return _session_response(session_id, state)


@workflow_app.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store)
):
    """Get the current stage and payload of a session."""
    try:
        state = store.get(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")
    return _session_response(session_id, state)


@workflow_app.put("/sessions/{session_id}/corners/{index}", response_model=SessionResponse)
async def move_corner(
    session_id: str,
    index: int,
    update: CornerUpdate,
    store: SessionStore = Depends(get_session_store)
):
    """Move one corner of the selection; coordinates are clamped to [0, 1]."""
    state = _apply(store, session_id, CornerMoved(index=index, x=update.x, y=update.y))
    return _session_response(session_id, state)


@workflow_app.post("/sessions/{session_id}/solve", response_model=SessionResponse)
async def solve_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
    solver: SolverService = Depends(get_solver_service)
):
    """
    Crop, enhance, extract and evaluate the session's image.

    Remote failures roll the session back to region selection and return
    502 so the user can retry.
    """
    request_id = str(uuid.uuid4())
    state = _apply(store, session_id, SolveRequested(request_id=request_id))

    try:
        outcome = await solver.solve(state.image, state.region)
    except ProcessingError as e:
        logger.warning("Solve failed for session %s: %s", session_id, e)
        _apply(store, session_id, SolveFailed(request_id=request_id, message=e.user_message))
        raise HTTPException(status_code=502, detail=e.user_message)
    except Exception as e:
        logger.exception("Unexpected solve error for session %s", session_id)
        message = ProcessingError.user_message
        _apply(store, session_id, SolveFailed(request_id=request_id, message=message))
        raise HTTPException(status_code=502, detail=message) from e

    state = _apply(store, session_id, SolveSucceeded(
        request_id=request_id,
        processed_image=outcome.processed_image,
        extraction=outcome.extraction,
        expression=outcome.expression,
        result=outcome.result,
        status=outcome.status
    ))
    if not isinstance(state, ReviewState):
        raise HTTPException(status_code=409, detail="Session was reset while processing")

    message = format_result(outcome.result) if outcome.expression else NO_EQUATION_LABEL
    return _session_response(session_id, state, message=message)


@workflow_app.put("/sessions/{session_id}/expression", response_model=SessionResponse)
async def edit_expression(
    session_id: str,
    update: ExpressionUpdate,
    store: SessionStore = Depends(get_session_store)
):
    """Replace the extracted expression with a corrected one."""
    state = _apply(store, session_id, ExpressionEdited(expression=update.expression))
    return _session_response(session_id, state)


@workflow_app.post("/sessions/{session_id}/recalculate", response_model=SessionResponse)
async def recalculate(
    session_id: str,
    store: SessionStore = Depends(get_session_store)
):
    """Re-evaluate the current expression locally, without any model call."""
    state = _apply(store, session_id, Recalculate(policy=settings.expression_policy))
    return _session_response(session_id, state, message=format_result(state.result))


@workflow_app.post("/sessions/{session_id}/reset", response_model=SessionResponse)
async def reset_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store)
):
    """Discard the image and expression and go back to upload."""
    state = _apply(store, session_id, Reset())
    return _session_response(session_id, state)


@workflow_app.post("/sessions/{session_id}/image", response_model=SessionResponse)
async def replace_image(
    session_id: str,
    file: UploadFile = File(...),
    store: SessionStore = Depends(get_session_store)
):
    """Load a new photo into an existing session."""
    img = await _read_image(file)
    width, height = get_image_dimensions(img)
    state = _apply(store, session_id, ImageLoaded(
        image=image_to_data_uri(img), width=width, height=height
    ))
    return _session_response(session_id, state)


@workflow_app.delete("/sessions/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store)
):
    """Delete a session."""
    try:
        store.delete(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")
    return Response(status_code=204)


@workflow_app.get("/")
async def root():
    """API root endpoint."""
    return {
        "name": "CalcScan API",
        "version": "1.0.0",
        "endpoints": {
            "evaluate": "POST /evaluate",
            "assemble": "POST /assemble",
            "crop": "POST /crop",
            "create_session": "POST /sessions",
            "get_session": "GET /sessions/{session_id}",
            "move_corner": "PUT /sessions/{session_id}/corners/{index}",
            "solve": "POST /sessions/{session_id}/solve",
            "edit_expression": "PUT /sessions/{session_id}/expression",
            "recalculate": "POST /sessions/{session_id}/recalculate",
            "reset": "POST /sessions/{session_id}/reset",
            "replace_image": "POST /sessions/{session_id}/image",
            "delete_session": "DELETE /sessions/{session_id}"
        }
    }


# Export app for uvicorn
app = workflow_app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
