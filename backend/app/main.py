from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import router
from app.core.config import get_settings
from app.core.logging import configure_logging, get_logger
from app.services.errors import RangeNotSatisfiable, StorageError


settings = get_settings()
configure_logging(settings.debug, redact_root=settings.base_dir)

_logger = get_logger(__name__)

app = FastAPI(title="Bloodline Storage API", version="0.1.0", debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Translate storage failures into ``{"error": ...}`` bodies."""

    headers: dict[str, str] = {}
    if isinstance(exc, RangeNotSatisfiable):
        headers["Content-Range"] = f"bytes */{exc.size}"
    if exc.status_code >= 500:
        _logger.error(
            "Storage request failed",
            method=request.method,
            path=request.url.path,
            error=type(exc).__name__,
        )
    return JSONResponse(
        {"error": exc.message}, status_code=exc.status_code, headers=headers
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request fields with the same ``{"error": ...}`` shape."""

    problems = []
    for error in exc.errors():
        message = error.get("msg", "invalid value")
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{field}: {message}" if field else message)
    return JSONResponse(
        {"error": "; ".join(problems) or "Invalid request"},
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    )


@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Return basic service health."""

    return {"status": "ok"}
