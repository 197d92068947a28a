"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from vc_relay.api.issuer import router as issuer_router
from vc_relay.api.verifier import router as verifier_router
from vc_relay.app_logging import configure_logging
from vc_relay.containers import AppContainer
from vc_relay.errors import RelayError


def error_response(message: str) -> JSONResponse:
    """Return the 400 error body used for every failed request."""
    return JSONResponse(
        status_code=400,
        content={"error": "400", "error_description": message},
    )


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level.upper())
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        templates = app.state.container.templates
        try:
            await templates.presentation_request()
            await templates.issuance_request()
        except Exception:
            logger.exception("Failed to preload request templates")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(verifier_router)
    app.include_router(issuer_router)

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return error_response(exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return error_response(str(exc.errors()))

    @app.middleware("http")
    async def trace_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        forwarded_for = request.headers.get("x-forwarded-for")
        client_address = forwarded_for or (request.client.host if request.client else "")
        logger.debug(
            "%s -> %s %s", client_address, request.method, request.url.path
        )
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error for %s %s", request.method, request.url)
            return error_response(str(exc) or type(exc).__name__)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
