import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from live_translator.config import settings
from live_translator.errors import PipelineError, error_to_http_response
from live_translator.middleware.cors import SELF_CORS_PATHS, RouteCORSMiddleware
from live_translator.routers import health, languages, ptt, translate, tts
from live_translator.services.validation import request_validation_error

logger = logging.getLogger("live_translator")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Live Translator starting up")
    logger.info("Translation provider: %s", settings.translation_provider)
    for service, configured in (
        ("STT", settings.stt_configured),
        ("Translation", settings.translation_configured),
        ("TTS", settings.tts_configured),
    ):
        if not configured:
            logger.warning("%s credential not configured, requests will get 503", service)

    yield

    from live_translator.dependencies import _redis_pool
    if _redis_pool is not None:
        await _redis_pool.aclose()
    logger.info("Live Translator shutting down")


API_DESCRIPTION = """
# Live Translator API

Push-to-talk voice translation through hosted AI services.

## Pipeline

**Voice:** Audio -> STT (Whisper) -> Translation (GPT-4o / Claude) -> TTS (ElevenLabs) -> Audio stream

Stage timings come back in `X-STT-Latency`, `X-Translation-Latency`,
`X-TTS-Latency` and `X-Total-Latency` (ms); the transcript and translation in
`X-Source-Text` / `X-Target-Text` (base64 UTF-8).

## Authentication

All endpoints except `/health` and `/languages` require a header:

```
Authorization: Bearer <API_KEY>
```
"""

app = FastAPI(
    title="Live Translator API",
    description=API_DESCRIPTION,
    version=health.VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "health", "description": "Server and upstream status"},
        {"name": "ptt", "description": "Push-to-talk translation"},
        {"name": "tts", "description": "Text-to-Speech (ElevenLabs streaming)"},
        {"name": "translate", "description": "Text translation"},
        {"name": "languages", "description": "Supported languages and voices"},
    ],
)


def error_response(request: Request, exc: Exception) -> JSONResponse:
    status_code, body = error_to_http_response(exc)
    headers = {}
    if request.url.path in SELF_CORS_PATHS:
        headers.update(ptt.CORS_HEADERS)
    result = getattr(exc, "pipeline_result", None)
    if result is not None:
        headers.update(ptt.failure_headers(result))
    return JSONResponse(status_code=status_code, content=body, headers=headers or None)


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    return error_response(request, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(request, request_validation_error(exc.errors()))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(request, exc)


# CORS; /ptt and /tts send their own headers
cors_origins = list(settings.cors_origins) + ["*"]
app.add_middleware(
    RouteCORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["POST", "OPTIONS", "GET"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=list(ptt.EXPOSED_HEADERS),
)

# Prometheus metrics
if settings.prometheus_enabled:
    from live_translator.middleware.metrics import setup_metrics

    setup_metrics(app)

# Rate limiting (inside auth, so only authenticated keys are counted)
if settings.rate_limit_enabled:
    from live_translator.middleware.rate_limit import RateLimitMiddleware

    app.add_middleware(RateLimitMiddleware)

# Auth middleware
from live_translator.middleware.auth import AuthMiddleware

app.add_middleware(AuthMiddleware)

# Routers
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(ptt.router, prefix="/api/v1", tags=["ptt"])
app.include_router(tts.router, prefix="/api/v1", tags=["tts"])
app.include_router(translate.router, prefix="/api/v1", tags=["translate"])
app.include_router(languages.router, prefix="/api/v1", tags=["languages"])
