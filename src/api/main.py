"""Promptu API application: lifespan, middleware, error rendering and routers."""
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import categories, cursor_rules, health, prompts, stats, trending, users
from core.config import get_settings
from core.redis import RedisClient
from db.session import get_session_factory
from services.container import build_services

SECURITY_HEADERS = {
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """
    Build the engagement services around one shared Redis connection.

    Redis is optional; without it the caches run on per-process memory.
    """
    settings = get_settings()
    redis_client = RedisClient(
        settings.redis_url,
        enabled=settings.redis_enabled,
        pool_size=settings.redis_pool_size,
    )
    await redis_client.connect()
    app.state.services = build_services(settings, redis_client, get_session_factory())
    try:
        yield
    finally:
        await redis_client.close()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach SECURITY_HEADERS to every response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        return response


app_settings = get_settings()

app = FastAPI(
    title="Promptu API",
    description="Share, discover and vote on AI prompts and editor rules.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    _request: Request, exc: StarletteHTTPException,
) -> JSONResponse:
    """Render HTTP errors as ``{"error": ...}``, keeping structured details."""
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    else:
        content = {"error": exc.detail}
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(content),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    _request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Render request validation failures as 400 with one message per error."""
    details = [
        f"{'.'.join(str(part) for part in error['loc'][1:])}: {error['msg']}"
        if len(error["loc"]) > 1 else error["msg"]
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "details": details},
    )


# Added first, so it wraps inside CORS
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (health, prompts, cursor_rules, trending, stats, categories, users):
    app.include_router(module.router)
