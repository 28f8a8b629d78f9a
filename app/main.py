import logging
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import Any, Dict, List, Optional, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import limiter as limiter_module
from .config import Settings, get_settings
from .db import StringStore
from .logging import RequestLoggingMiddleware, init_logging
from .routes import router

logger = logging.getLogger("string_analyzer")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Startup: %s ready with an empty store", app.title)
    try:
        yield
    finally:
        store: StringStore = app.state.store
        logger.info("Shutdown: discarding %d stored strings", store.count())
        store.clear()


def _error_body(status_code: int, message: str, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": HTTPStatus(status_code).phrase, "message": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


def _validation_status(request: Request, errors: List[Dict[str, Any]]) -> int:
    """Missing or unreadable input is 400; a present field of the wrong type on POST /strings is 422."""
    is_post_strings = request.method == "POST" and request.url.path.rstrip("/").endswith("/strings")
    if not is_post_strings:
        return 400
    for err in errors:
        if err.get("type") in {"missing", "json_invalid"}:
            return 400
        # The body itself is not a JSON object
        if tuple(err.get("loc", ())) == ("body",):
            return 400
    return 422


# -------------------------------
# Unified error response handlers
# -------------------------------
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(
        "HTTPException: %s %s -> %s | detail=%s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.detail,
    )
    if isinstance(exc.detail, dict):
        detail = dict(exc.detail)
        message = detail.pop("message", HTTPStatus(exc.status_code).phrase)
        body = _error_body(exc.status_code, message, **detail)
    else:
        body = _error_body(exc.status_code, str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    status_code = _validation_status(request, list(errors))
    logger.warning(
        "ValidationError: %s %s -> %s | errors=%s",
        request.method,
        request.url.path,
        status_code,
        errors,
    )
    return JSONResponse(
        status_code=status_code,
        content=_error_body(status_code, "Validation failed", details=jsonable_encoder(errors)),
    )


# slowapi calls this synchronously from its middleware for sync endpoints.
def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("Rate limit exceeded: %s %s (%s)", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=429, content=_error_body(429, f"Rate limit exceeded: {exc.detail}"))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=_error_body(500, "An error occurred while processing the request"),
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    init_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=(
            "Analyze strings, store their computed properties and filter them by "
            "query parameters or by a natural language query."
        ),
        lifespan=lifespan,
    )
    app.state.store = StringStore()
    app.state.limiter = limiter_module.create_limiter(settings)

    mw = cast(Any, limiter_module.get_middleware())
    app.add_middleware(mw)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(StarletteHTTPException, cast(Any, http_exception_handler))
    app.add_exception_handler(RequestValidationError, cast(Any, validation_exception_handler))
    app.add_exception_handler(RateLimitExceeded, cast(Any, rate_limit_exceeded_handler))
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(router)
    return app


app = create_app()
