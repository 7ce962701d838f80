import logging

import redis.exceptions
from fastapi import APIRouter

from live_translator.dependencies import RedisDep, SettingsDep
from live_translator.schemas.health import HealthResponse

logger = logging.getLogger("live_translator")
router = APIRouter()

VERSION = "0.1.0"


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(settings: SettingsDep, r: RedisDep):
    """Server status, configured upstream services and Redis connectivity.

    No authentication required.
    """
    redis_ok = False
    try:
        await r.ping()
        redis_ok = True
    except (redis.exceptions.RedisError, OSError) as e:
        logger.debug("Redis ping failed: %s", e)

    services = {
        "stt": settings.stt_configured,
        "translation": settings.translation_configured,
        "tts": settings.tts_configured,
    }
    healthy = redis_ok and all(services.values())

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=VERSION,
        translation_provider=settings.translation_provider,
        services=services,
        redis_connected=redis_ok,
    )
