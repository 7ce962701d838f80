"""Error taxonomy for the translation pipeline and its HTTP mapping.

Adapters and the orchestrator raise these; only the application exception
handler turns them into responses, through `error_to_http_response`.
"""

SERVICE_LABELS = {
    "stt": "STT",
    "translation": "Translation",
    "tts": "TTS",
}

AUDIO_TOO_LARGE = "Audio payload too large"


class PipelineError(Exception):
    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, error: str | None = None, details: str | None = None):
        if error is not None:
            self.error = error
        self.details = details
        self.stage: str | None = None
        # Set by the orchestrator on the way out
        self.pipeline_result = None
        super().__init__(details or self.error)


class ValidationError(PipelineError):
    status_code = 400


class ServiceUnavailable(PipelineError):
    status_code = 503

    def __init__(self, service: str):
        self.service = service
        super().__init__(f"{SERVICE_LABELS[service]} service not configured")


class UpstreamError(PipelineError):
    """Transport or API failure from an upstream service."""

    def __init__(self, service: str, message: str, upstream_status: int | None = None):
        self.service = service
        self.upstream_status = upstream_status
        super().__init__(f"{SERVICE_LABELS[service]} request failed", details=message)
        if upstream_status is not None and upstream_status >= 400:
            self.status_code = upstream_status

    @property
    def message(self) -> str:
        return self.details or ""


class InvalidApiKey(UpstreamError):
    def __init__(self, service: str, message: str, upstream_status: int | None = None):
        super().__init__(service, message, upstream_status)
        self.status_code = 401
        self.error = "Invalid API key"


class RateLimitExceeded(UpstreamError):
    def __init__(self, service: str, message: str, upstream_status: int | None = None):
        super().__init__(service, message, upstream_status)
        self.status_code = 429
        self.error = "Rate limit exceeded"


class InvalidAudioFormat(UpstreamError):
    def __init__(self, service: str, message: str, upstream_status: int | None = None):
        super().__init__(service, message, upstream_status)
        self.status_code = 400
        self.error = "Invalid audio format"


class AudioPayloadTooLarge(UpstreamError):
    def __init__(self, service: str, message: str, upstream_status: int | None = None):
        super().__init__(service, message, upstream_status)
        self.status_code = 400
        self.error = AUDIO_TOO_LARGE


class TtsGenerationFailed(UpstreamError):
    def __init__(self, message: str, upstream_status: int | None = None):
        super().__init__("tts", message, upstream_status)
        self.error = "TTS generation failed"


class ContentFailure(PipelineError):
    """Upstream call succeeded but produced unusable output."""


class NoSpeechDetected(ContentFailure):
    status_code = 400
    error = "No speech detected in audio"


class TranslationFailed(ContentFailure):
    status_code = 500
    error = "Translation failed"


class InternalError(PipelineError):
    status_code = 500
    error = "Internal server error"


def classify_upstream_error(
    service: str, message: str, upstream_status: int | None = None
) -> UpstreamError:
    """Pick the error kind from the upstream status, then from its message."""
    lowered = message.lower()
    if upstream_status == 401 or "api key" in lowered:
        return InvalidApiKey(service, message, upstream_status)
    if upstream_status == 429 or "rate limit" in lowered or "quota" in lowered:
        return RateLimitExceeded(service, message, upstream_status)
    if service == "tts":
        return TtsGenerationFailed(message, upstream_status)
    if service == "stt" and upstream_status == 413:
        return AudioPayloadTooLarge(service, message, upstream_status)
    if service == "stt" and (
        upstream_status in (400, 415)
        or (upstream_status is None and ("audio" in lowered or "format" in lowered))
    ):
        return InvalidAudioFormat(service, message, upstream_status)
    return UpstreamError(service, message, upstream_status)


def error_to_http_response(error: Exception) -> tuple[int, dict]:
    """Map any exception raised by the pipeline to (status, JSON body)."""
    if not isinstance(error, PipelineError):
        return InternalError.status_code, {"error": InternalError.error}
    body = {"error": error.error}
    if error.details and not isinstance(error, InternalError):
        body["details"] = error.details
    return error.status_code, body
