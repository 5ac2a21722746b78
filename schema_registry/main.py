import os
import threading
import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from schema_registry.api import routes_health, routes_metrics, routes_schema, routes_upload
from schema_registry.core.config import get_settings
from schema_registry.core.errors import RegistryError
from schema_registry.core.logging import log_request, setup_logging
from schema_registry.core.metrics import MetricsCollector
from schema_registry.db.schema import apply_schema
from schema_registry.db.sqlite import get_connection
from schema_registry.storage.content_store import ContentStore


def _get_endpoint_label(request: Request) -> str:
    route = request.scope.get("route")
    if route and hasattr(route, "path"):
        return f"{request.method} {route.path}"
    return f"{request.method} {request.url.path}"


def _get_application(request: Request) -> Optional[str]:
    application = getattr(request.state, "application", None)
    if application is None:
        application = request.query_params.get("application")
    if not application:
        return None
    return application.strip() or None


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        app.state.db.close()

    app = FastAPI(title="schema-registry", lifespan=lifespan)
    conn = get_connection(settings.db_path, timeout=settings.db_timeout_seconds)
    apply_schema(conn)

    app.state.db = conn
    app.state.db_lock = threading.Lock()
    app.state.store = ContentStore(settings.storage_root)
    app.state.settings = settings
    app.state.metrics = MetricsCollector()

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400, content={"detail": "Invalid request", "kind": "invalid_input"}
        )

    @app.exception_handler(RegistryError)
    async def registry_exception_handler(request: Request, exc: RegistryError):
        request.state.error_kind = exc.kind.value
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "kind": exc.kind.value},
        )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception:
            response = JSONResponse(
                status_code=500, content={"detail": "Internal Server Error"}
            )
        latency_ms = (time.perf_counter() - start) * 1000
        endpoint_label = _get_endpoint_label(request)
        application = _get_application(request)
        error_kind = getattr(request.state, "error_kind", None)
        app.state.metrics.record_request(
            endpoint_label, application, status_code, latency_ms, error_kind
        )
        log_request(
            {
                "request_id": request_id,
                "application": application,
                "method": request.method,
                "path": request.url.path,
                "status": status_code,
                "error_kind": error_kind,
                "latency_ms": latency_ms,
            }
        )
        response.headers["X-Request-Id"] = request_id
        return response

    app.include_router(routes_upload.router)
    app.include_router(routes_schema.router)
    app.include_router(routes_health.router)
    app.include_router(routes_metrics.router)

    return app


if os.getenv("APP_DISABLE_AUTOCREATE") == "1":
    app = FastAPI()
else:
    app = create_app()
