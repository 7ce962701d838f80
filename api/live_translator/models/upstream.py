import logging

import httpx

from live_translator.errors import UpstreamError, classify_upstream_error
from live_translator.middleware.metrics import UPSTREAM_ERRORS

logger = logging.getLogger("live_translator")


def upstream_message(response: httpx.Response) -> str:
    """Best-effort error message from an upstream error body.

    OpenAI nests it under error.message, ElevenLabs under detail.message;
    anything else is returned as text.
    """
    try:
        data = response.json()
    except ValueError:
        return response.text.strip() or f"HTTP {response.status_code}"

    if isinstance(data, dict):
        for key in ("error", "detail"):
            value = data.get(key)
            if isinstance(value, dict) and value.get("message"):
                return str(value["message"])
            if isinstance(value, str) and value:
                return value
    return response.text.strip()


def response_error(service: str, response: httpx.Response) -> UpstreamError:
    message = upstream_message(response)
    logger.error("%s upstream error: %d - %s", service, response.status_code, message)
    UPSTREAM_ERRORS.labels(service=service, status=str(response.status_code)).inc()
    return classify_upstream_error(service, message, response.status_code)


def transport_error(service: str, exc: Exception) -> UpstreamError:
    if isinstance(exc, httpx.TimeoutException):
        message = f"{service} request timed out"
    else:
        message = str(exc) or type(exc).__name__
    logger.error("%s transport error: %s", service, message)
    UPSTREAM_ERRORS.labels(service=service, status="transport").inc()
    return classify_upstream_error(service, message)
