import json
from typing import Sequence

import pydantic

from live_translator.errors import AUDIO_TOO_LARGE, ValidationError
from live_translator.schemas.ptt import PttRequest, PttRequestBody
from live_translator.services.audio import (
    SUPPORTED_AUDIO_FORMATS,
    AudioTooLargeError,
    AudioValidationError,
    decode_base64_audio,
)

MISSING_FIELDS = "Audio data, source language, and target language are required"
MALFORMED_BODY = "Malformed request body"
INVALID_BODY = "Invalid request body"


def parse_ptt_request(raw: bytes, max_audio_bytes: int | None = None) -> PttRequest:
    """Parse and check a raw PTT request body. No side effects."""
    try:
        payload = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError(MALFORMED_BODY, details=str(e))
    if not isinstance(payload, dict):
        raise ValidationError(MALFORMED_BODY, details="Expected a JSON object")

    try:
        body = PttRequestBody.model_validate(payload)
    except pydantic.ValidationError:
        raise ValidationError(MISSING_FIELDS)

    audio_format = body.audio_format.lower()
    if audio_format not in SUPPORTED_AUDIO_FORMATS:
        raise ValidationError(
            "Unsupported audio format",
            details=f"Supported formats: {', '.join(sorted(SUPPORTED_AUDIO_FORMATS))}",
        )

    try:
        audio = decode_base64_audio(body.audio, max_audio_bytes)
    except AudioTooLargeError as e:
        raise ValidationError(AUDIO_TOO_LARGE, details=str(e))
    except AudioValidationError as e:
        raise ValidationError("Invalid audio format", details=str(e))
    if not audio:
        raise ValidationError(MISSING_FIELDS)

    return PttRequest(
        audio=audio,
        audio_format=audio_format,
        source_language=body.source_language,
        target_language=body.target_language,
        voice_id=body.voice_id,
        model_id=body.model_id,
        output_format=body.output_format,
    )


def request_validation_error(errors: Sequence[dict]) -> ValidationError:
    """Convert FastAPI body validation errors into a 400 ValidationError."""
    if any(e.get("type") == "json_invalid" for e in errors):
        return ValidationError(MALFORMED_BODY, details="Body is not valid JSON")

    problems = []
    for e in errors:
        # Drop the leading "body" segment
        field = ".".join(str(part) for part in e.get("loc", ())[1:]) or "body"
        problems.append(f"{field}: {e.get('msg', 'invalid')}")
    return ValidationError(INVALID_BODY, details="; ".join(problems))
