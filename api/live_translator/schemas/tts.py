from pydantic import BaseModel, ConfigDict, Field


class TTSRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(default="", description="Text to synthesize")
    voice_id: str | None = Field(default=None, alias="voiceId")
    model_id: str | None = Field(default=None, alias="modelId")
    output_format: str | None = Field(default=None, alias="outputFormat")
    optimize_streaming_latency: int | None = Field(
        default=None, ge=0, le=4, description="ElevenLabs latency tier (default 2)"
    )
