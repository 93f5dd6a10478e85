from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from structlog.contextvars import bind_contextvars, reset_contextvars

from ytscribe.api.routes import router
from ytscribe.dependencies import get_settings, get_telemetry
from ytscribe.logging_config import configure_application_logging


def health_check() -> dict[str, str]:
    return {"status": "ok"}


@asynccontextmanager
async def app_lifespan(_: FastAPI) -> AsyncIterator[None]:
    configure_application_logging(get_settings())
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="ytscribe API", version="0.1.0", lifespan=app_lifespan)

    @app.middleware("http")
    async def request_context_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("X-Request-ID", "").strip() or str(uuid4())
        context_tokens = bind_contextvars(http_request_id=request_id)
        started_at = perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            get_telemetry().emit(
                "http.request.finish",
                path=request.url.path,
                status_code=status_code,
                duration_ms=int((perf_counter() - started_at) * 1000),
            )
            reset_contextvars(**context_tokens)

    app.include_router(router)
    app.add_api_route(
        "/health",
        health_check,
        methods=["GET"],
        tags=["system"],
        operation_id="health_check",
    )

    return app


app = create_app()
