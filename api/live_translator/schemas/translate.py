from pydantic import BaseModel, Field


class TranslateRequest(BaseModel):
    text: str = Field(..., description="Text to translate")
    source: str = Field(default="auto", description="Source language code or 'auto'")
    target: str = Field(..., description="Target language code")


class TranslateResponse(BaseModel):
    translation: str
    source: str
    target: str
    processing_ms: float
