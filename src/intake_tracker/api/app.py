"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from intake_tracker.api.admin import router as admin_router
from intake_tracker.api.intake import router as intake_router
from intake_tracker.api.leaderboard import router as leaderboard_router
from intake_tracker.api.relay import router as relay_router
from intake_tracker.app_logging import configure_logging
from intake_tracker.containers import AppContainer
from intake_tracker.domain.errors import (
    CorruptedLedger,
    InferenceUnavailable,
    MalformedAiResponse,
    NoJsonFound,
    NotFound,
    ReservedUserName,
    StoreUnavailable,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)
    app.include_router(intake_router)
    app.include_router(leaderboard_router)
    app.include_router(relay_router)

    @app.exception_handler(NotFound)
    async def not_found(request: Request, exc: NotFound) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.exception_handler(ReservedUserName)
    async def reserved_user_name(
        request: Request, exc: ReservedUserName
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc)},
        )

    @app.exception_handler(NoJsonFound)
    async def no_json_found(request: Request, exc: NoJsonFound) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=_parse_failure(container, exc, stage=None),
        )

    @app.exception_handler(MalformedAiResponse)
    async def malformed_response(
        request: Request, exc: MalformedAiResponse
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=_parse_failure(container, exc, stage=exc.stage),
        )

    @app.exception_handler(InferenceUnavailable)
    async def inference_unavailable(
        request: Request, exc: InferenceUnavailable
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            content={"detail": "Inference service unavailable"},
        )

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable(
        request: Request, exc: StoreUnavailable
    ) -> JSONResponse:
        logger.error("Store unavailable: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Storage unavailable"},
        )

    @app.exception_handler(CorruptedLedger)
    async def corrupted_ledger(request: Request, exc: CorruptedLedger) -> JSONResponse:
        logger.error("Corrupted ledger read: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Stored data is corrupted"},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _parse_failure(
    container: AppContainer, exc: Exception, stage: str | None
) -> dict[str, object]:
    """Return the parse failure body, with debug detail in local runs."""
    content: dict[str, object] = {"detail": "Failed to parse AI response"}
    if stage is not None:
        content["stage"] = stage
    if container.settings.environment == "local":
        content["debug"] = f"{type(exc).__name__}: {exc}"
    return content
