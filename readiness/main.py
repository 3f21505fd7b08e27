"""
Readiness API: FastAPI application entry point
Audits a page for AI search readiness and exports report text as PDF.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import get_settings
from .errors import AuditError, RenderError, UpstreamFetchError
from .logging import configure_logging, get_logger
from .middleware.preflight import PreflightMiddleware
from .models import ErrorResponse
from .routers.analyze_router import router as analyze_router
from .routers.pdf_router import router as pdf_router

settings = get_settings()
logger = get_logger("api")

# Message for a body FastAPI could not parse, keyed by path
_MISSING_FIELD_MESSAGES = {
    "/analyze": "URL is required",
    "/check-llms": "URL is required",
    "/pdf": "Missing result",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    logger.info("readiness API starting (%s)", settings.environment)
    yield


app = FastAPI(
    title="Readiness API",
    description=(
        "**Readiness** scores a web page for AI search readiness\n\n"
        "Checks llms.txt, robots.txt, sitemap.xml, HTTPS, JSON-LD, favicon and "
        "content volume, and exports report text as PDF."
    ),
    version="1.0.0",
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Added last so it is outermost and answers OPTIONS before CORSMiddleware does
app.add_middleware(PreflightMiddleware)

app.include_router(analyze_router)
app.include_router(pdf_router)


# ── Error handlers ─────────────────────────────────────────────────────────────

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@app.exception_handler(RenderError)
async def render_error_handler(request: Request, exc: RenderError):
    logger.error("PDF render failed: %s", exc.message)
    return PlainTextResponse("PDF error", status_code=500)


@app.exception_handler(UpstreamFetchError)
async def upstream_error_handler(request: Request, exc: UpstreamFetchError):
    logger.warning("upstream fetch failed: %s", exc.cause or exc.message)
    return _error(exc.status_code, exc.message)


@app.exception_handler(AuditError)
async def audit_error_handler(request: Request, exc: AuditError):
    return _error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    message = _MISSING_FIELD_MESSAGES.get(request.url.path, "Invalid request body")
    logger.debug("rejected body for %s: %s", request.url.path, exc.errors())
    return _error(400, message)


# ── Health ─────────────────────────────────────────────────────────────────────

@app.get("/", tags=["Health"])
async def root():
    return {"service": "Readiness API", "version": app.version, "status": "running", "docs": "/docs"}


@app.api_route("/health", methods=["GET", "HEAD"], tags=["Health"])
async def health():
    return {
        "status": "ok",
        "environment": settings.environment,
        "probe_timeout_seconds": settings.probe_timeout_seconds,
        "page_timeout_seconds": settings.page_timeout_seconds,
    }
