"""FastAPI application for the training camp certificate preview."""

import hashlib
import logging
from contextlib import asynccontextmanager
from pathlib import Path

import fastapi
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded

from core.config import get_settings
from core.logger import configure_logging
from core.middleware import SecurityHeadersMiddleware
from core.ratelimit import limiter, rate_limit_exceeded_handler
from core.templates import templates
from routes import health_router, htmx_router, pages_router
from services.preview_page_service import PreviewPageNotFoundError, clear_pages

configure_logging()
logger = logging.getLogger(__name__)


def _build_static_file_hashes(static_dir: Path) -> dict[str, str]:
    """Compute short content hashes for static files (cache-busting)."""
    hashes: dict[str, str] = {}
    if not static_dir.exists():
        return hashes
    for file_path in static_dir.rglob("*"):
        if file_path.is_file():
            rel = file_path.relative_to(static_dir).as_posix()
            digest = hashlib.md5(
                file_path.read_bytes(), usedforsecurity=False
            ).hexdigest()[:8]
            hashes[rel] = digest
    return hashes


_static_hashes: dict[str, str] = {}


def _static_url(path: str) -> str:
    """Return a cache-busted static URL, e.g. /static/css/editor.css?v=a1b2c3d4."""
    version = _static_hashes.get(path, "")
    if version:
        return f"/static/{path}?v={version}"
    return f"/static/{path}"


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for unhandled exceptions."""
    logger.exception(
        "unhandled.exception",
        extra={
            "exc_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred. Please try again."},
    )


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handler for request validation errors."""
    if not isinstance(exc, RequestValidationError):
        return JSONResponse(status_code=500, content={"detail": "Unexpected error"})

    logger.warning(
        "request.validation_error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(exc.errors()),
        },
    )
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors()},
    )


async def page_not_found_handler(request: Request, exc: Exception) -> HTMLResponse:
    """Expired or unknown preview page: ask the user to reload."""
    page_id = exc.page_id if isinstance(exc, PreviewPageNotFoundError) else None
    logger.info(
        "preview.page.not_found",
        extra={"page_id": page_id, "path": request.url.path},
    )
    return HTMLResponse(
        '<div class="text-red-600 text-sm p-2">页面已过期，请刷新后重试。</div>',
        status_code=404,
    )


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Log startup; drop every open preview page on shutdown."""
    logger.info("init.complete")
    try:
        yield
    finally:
        clear_pages()
        logger.info("shutdown.complete")


_settings = get_settings()

app = fastapi.FastAPI(
    title="Training Camp Certificate Preview",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if _settings.enable_docs or _settings.debug else None,
    redoc_url="/redoc" if _settings.enable_docs or _settings.debug else None,
    openapi_url=("/openapi.json" if _settings.enable_docs or _settings.debug else None),
)

app.state.templates = templates
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(PreviewPageNotFoundError, page_not_found_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(SecurityHeadersMiddleware)

if _settings.debug:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "HX-Request", "HX-Target", "HX-Trigger"],
        max_age=600,
    )

_static_dir = Path(__file__).parent / "static"
if _static_dir.exists():
    _static_hashes.update(_build_static_file_hashes(_static_dir))
    app.mount("/static", StaticFiles(directory=str(_static_dir)), name="static")

templates.env.globals["static_url"] = _static_url


app.include_router(health_router)
app.include_router(htmx_router)
# Must be last to avoid catching API routes
app.include_router(pages_router)
