import base64
import binascii
import logging

from live_translator.config import settings as default_settings

logger = logging.getLogger("live_translator")

# Container formats accepted by the Whisper transcription endpoint, plus raw PCM
SUPPORTED_AUDIO_FORMATS = {
    "flac", "m4a", "mp3", "mp4", "mpeg", "mpga", "ogg", "pcm", "wav", "webm",
}

_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


class AudioValidationError(Exception):
    pass


class AudioTooLargeError(AudioValidationError):
    pass


def decode_base64_audio(data: str, max_bytes: int | None = None) -> bytes:
    """Decode base64-encoded audio, rejecting invalid or oversized payloads."""
    if max_bytes is None:
        max_bytes = default_settings.upload_max_bytes

    # Browsers may send a data URL
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]

    # Accept line-wrapped, URL-safe and unpadded encodings
    data = "".join(data.split()).translate(_URLSAFE_TO_STANDARD)
    data += "=" * (-len(data) % 4)

    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AudioValidationError(f"Invalid base64: {e}")

    if len(raw) > max_bytes:
        raise AudioTooLargeError(
            f"Audio exceeds {max_bytes // (1024*1024)} MB limit"
        )
    return raw


def audio_filename(audio_format: str) -> str:
    return f"audio.{audio_format}"


def audio_mime_type(audio_format: str) -> str:
    """MIME type for an audio format name.

    ElevenLabs output formats carry codec parameters ("mp3_44100_128"); only
    the codec part names the media type.
    """
    return f"audio/{audio_format.split('_', 1)[0]}"
