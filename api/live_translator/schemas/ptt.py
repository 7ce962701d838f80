from pydantic import BaseModel, ConfigDict, Field


class PttRequestBody(BaseModel):
    """Wire format of a push-to-talk request."""

    model_config = ConfigDict(populate_by_name=True)

    audio: str = Field(..., min_length=1, description="Base64-encoded audio clip")
    source_language: str = Field(
        ..., min_length=1, alias="sourceLanguage", description="Language code or 'auto'"
    )
    target_language: str = Field(
        ..., min_length=1, alias="targetLanguage", description="Language code"
    )
    audio_format: str = Field(default="mp3", alias="audioFormat")
    voice_id: str | None = Field(default=None, alias="voiceId")
    model_id: str | None = Field(default=None, alias="modelId")
    output_format: str | None = Field(default=None, alias="outputFormat")


class PttRequest(BaseModel):
    """Validated request with the audio already decoded."""

    audio: bytes
    audio_format: str = "mp3"
    source_language: str
    target_language: str
    voice_id: str | None = None
    model_id: str | None = None
    output_format: str | None = None


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
    message: str | None = None
