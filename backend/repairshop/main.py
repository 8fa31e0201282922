"""
Repair Shop Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       ``app`` is the module-level instance uvicorn serves
       (uvicorn repairshop.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Access Log → GZip → CORS      │
    │                                                          │
    │  Routes:                                                 │
    │    /api/customers/*   /api/employees/*   /api/products/* │
    │    /uploads/*         /health                            │
    │                                                          │
    │  Exception Handlers:                                     │
    │    ValidationError / ConflictError → 400                 │
    │    NotFoundError → 404                                   │
    │    DatabaseError / FileStorageError / other → 500        │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, upload directory
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from repairshop import __version__
from repairshop.config import settings
from repairshop.database import dispose_engine
from repairshop.exceptions import (
    ConflictError,
    DatabaseError,
    FileStorageError,
    NotFoundError,
    RepairShopError,
    ValidationError,
)
from repairshop.middleware.logging import RequestLoggingMiddleware
from repairshop.middleware.request_id import RequestIDLogFilter, RequestIDMiddleware, request_id_var
from repairshop.routes import customers, employees, health, products, uploads

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s
    The request ID comes from RequestIDLogFilter, attached to the handler so
    third-party records get it too.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Repair Shop Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")
        # Keep serving: /health reports the database state

    uploads_dir = Path(settings.upload_root)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Upload directory: %s", uploads_dir.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Repair Shop Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(error: str, message: str, **extra: Any) -> Dict[str, Any]:
    """The error envelope shared by every handler."""
    body: Dict[str, Any] = {"error": error, "message": message}
    body.update({key: value for key, value in extra.items() if value})
    body["request_id"] = request_id_var.get("")
    return body


# Resource named in the 404 for a path id that is not an integer
RESOURCE_BY_PREFIX = {
    "/api/customers/": "Customer",
    "/api/employees/": "Employee",
    "/api/products/": "Product",
}


def resource_for_path(path: str) -> str:
    for prefix, resource in RESOURCE_BY_PREFIX.items():
        if path.startswith(prefix):
            return resource
    return "Resource"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to status codes and the error envelope.

    Handler hierarchy:
        ValidationError         → 400 validation_error (with ``errors``)
        RequestValidationError  → 404 not_found for a non-integer path id,
                                  400 validation_error for a malformed body
        ConflictError           → 400 conflict
        NotFoundError           → 404 not_found
        DatabaseError           → 500 server_error (generic message)
        FileStorageError        → 500 server_error
        RepairShopError (base)  → 500 server_error
        Exception (fallback)    → 500 internal_server_error

    Responses never include driver errors, SQL or stack traces; those are
    logged server-side.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors or exc.message)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", exc.message, errors=exc.errors),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        if any(tuple(err.get("loc", ()))[:1] == ("path",) for err in exc.errors()):
            # An id that is not an integer cannot name a stored row
            resource = resource_for_path(request.url.path)
            logger.info("Unparseable id on %s", request.url.path)
            return JSONResponse(
                status_code=404,
                content=error_body("not_found", f"{resource} not found"),
            )

        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or "body",
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        logger.warning("Malformed request on %s: %s", request.url.path, errors)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", "Validation failed", errors=errors),
        )

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.info("Conflict on %s: %s", request.url.path, exc.message)
        return JSONResponse(
            status_code=400,
            content=error_body("conflict", exc.message, details=exc.context),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=error_body("not_found", exc.message))

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("Database error: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error("File storage error: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(status_code=500, content=error_body("server_error", exc.message))

    @app.exception_handler(RepairShopError)
    async def handle_application_error(request: Request, exc: RepairShopError):
        logger.error("Unhandled application error: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(status_code=500, content=error_body("server_error", exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Repair Shop Management API",
        description=(
            "Customers, employees and products of a repair shop. Customers and "
            "employees own one or more phone numbers; products may carry an image."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in reverse order of addition:
    # RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(customers.router)
    app.include_router(employees.router)
    app.include_router(products.router)
    app.include_router(uploads.router)
    app.include_router(health.router)

    return app


app = create_app()
