"""Exception handlers translating service errors into the public JSON contract."""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import (
    HISTORY_FAILED_MESSAGE,
    PAYLOAD_TOO_LARGE_MESSAGE,
    PREDICTION_FAILED_MESSAGE,
    ImageRequiredError,
    PayloadTooLargeError,
    PredictionFailedError,
    StoreError,
)
from .schemas import FailResponse
from .utils.logger import get_logger

logger = get_logger(__name__)


def fail_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=FailResponse(message=message).model_dump())


async def handle_image_required(request: Request, exc: ImageRequiredError) -> JSONResponse:
    return fail_response(400, str(exc))


async def handle_payload_too_large(request: Request, exc: PayloadTooLargeError) -> JSONResponse:
    logger.warning("Payload rejected", path=request.url.path, max_bytes=exc.max_bytes)
    return fail_response(413, exc.message)


async def handle_prediction_failed(request: Request, exc: PredictionFailedError) -> JSONResponse:
    return fail_response(400, PREDICTION_FAILED_MESSAGE)


async def handle_store_error(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Store failure", path=request.url.path, error=str(exc))
    return fail_response(500, HISTORY_FAILED_MESSAGE)


async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    # Any size-limit rejection gets the canonical body, whatever raised it.
    if exc.status_code == 413:
        max_bytes = request.app.state.settings.max_payload_bytes
        return fail_response(413, PAYLOAD_TOO_LARGE_MESSAGE.format(max_bytes=max_bytes))
    return await http_exception_handler(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ImageRequiredError, handle_image_required)
    app.add_exception_handler(PayloadTooLargeError, handle_payload_too_large)
    app.add_exception_handler(PredictionFailedError, handle_prediction_failed)
    app.add_exception_handler(StoreError, handle_store_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
