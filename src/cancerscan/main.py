"""FastAPI entrypoint for the CancerScan prediction service."""
from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

import anyio
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, settings
from .handlers import register_exception_handlers
from .middleware import PayloadLimitMiddleware
from .routes import predict
from .schemas import HealthResponse
from .services.inference import load_engine
from .services.pipeline import PredictionPipeline
from .services.store import ResultStore
from .utils.logger import get_logger

logger = get_logger(__name__)

PREFLIGHT_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
PREFLIGHT_HEADERS = "Origin, X-Requested-With, Content-Type, Accept"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load the model and open the store once for the life of the process."""
    app_settings: Settings = app.state.settings
    engine = load_engine(app_settings)
    store = ResultStore(app_settings.database_url)
    store.create_schema()
    app.state.engine = engine
    app.state.store = store
    app.state.pipeline = PredictionPipeline(
        engine=engine,
        store=store,
        limiter=anyio.CapacityLimiter(app_settings.inference_workers),
        timeout=app_settings.inference_timeout_seconds,
    )
    yield
    store.close()


def create_app(app_settings: Settings | None = None) -> FastAPI:
    app_settings = app_settings or settings
    app = FastAPI(title="CancerScan Prediction API", version="0.1.0", lifespan=lifespan)
    app.state.settings = app_settings

    app.add_middleware(
        PayloadLimitMiddleware,
        max_bytes=app_settings.max_payload_bytes,
        paths=("/predict",),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["authorization", "content-type"],
    )

    @app.middleware("http")
    async def answer_preflight(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(
                status_code=204,
                headers={
                    "Access-Control-Allow-Origin": app_settings.preflight_origin,
                    "Access-Control-Allow-Methods": PREFLIGHT_METHODS,
                    "Access-Control-Allow-Headers": PREFLIGHT_HEADERS,
                },
            )
        return await call_next(request)

    register_exception_handlers(app)
    app.include_router(predict.router, tags=["predict"])

    @app.get("/health", tags=["system"], response_model=HealthResponse)
    async def healthcheck(request: Request) -> JSONResponse:
        """Report whether the classifier loaded at startup."""
        if request.app.state.engine.ready:
            return JSONResponse(HealthResponse(status="ok", model="ready").model_dump())
        return JSONResponse(
            HealthResponse(status="degraded", model="unavailable").model_dump(),
            status_code=503,
        )

    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn; an unrecoverable failure exits the process."""
    with logger.catch(onerror=lambda _: sys.exit(1)):
        logger.info("Server starting", host=settings.host, port=settings.port)
        uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
