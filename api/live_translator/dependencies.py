import logging
from typing import Annotated

import httpx
import redis.asyncio as redis
from fastapi import Depends

from live_translator.config import Settings, settings
from live_translator.models.translator import (
    ClaudeTranslator,
    OpenAITranslator,
    load_translator,
)
from live_translator.models.tts import ElevenLabsTTS
from live_translator.services.pipeline import PttPipeline

logger = logging.getLogger("live_translator")

_redis_pool: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.from_url(
            settings.redis_url, decode_responses=True
        )
    return _redis_pool


def get_settings() -> Settings:
    return settings


def get_upstream_transport() -> httpx.AsyncBaseTransport | None:
    """Transport for outbound calls; None means a real network connection."""
    return None


SettingsDep = Annotated[Settings, Depends(get_settings)]
TransportDep = Annotated[httpx.AsyncBaseTransport | None, Depends(get_upstream_transport)]


def get_pipeline(settings: SettingsDep, transport: TransportDep) -> PttPipeline:
    return PttPipeline.from_settings(settings, transport)


def get_translator(
    settings: SettingsDep, transport: TransportDep
) -> OpenAITranslator | ClaudeTranslator:
    return load_translator(settings, transport)


def get_tts(settings: SettingsDep, transport: TransportDep) -> ElevenLabsTTS:
    return ElevenLabsTTS(settings, transport)


RedisDep = Annotated[redis.Redis, Depends(get_redis)]
PipelineDep = Annotated[PttPipeline, Depends(get_pipeline)]
TranslatorDep = Annotated[OpenAITranslator | ClaudeTranslator, Depends(get_translator)]
TTSDep = Annotated[ElevenLabsTTS, Depends(get_tts)]
