import logging
import time

from fastapi import APIRouter

from live_translator.dependencies import TranslatorDep
from live_translator.errors import TranslationFailed, ValidationError
from live_translator.schemas.translate import TranslateRequest, TranslateResponse

logger = logging.getLogger("live_translator")
router = APIRouter()


@router.post("/translate", response_model=TranslateResponse, summary="Text translation")
async def translate(req: TranslateRequest, translator: TranslatorDep):
    """Translate text with the configured LLM, without audio.

    **Example:** `{"text": "Hello", "source": "en", "target": "es"}`
    """
    if not req.text.strip():
        raise ValidationError("Text is required")
    if not req.target or req.target == "auto":
        raise ValidationError("Target language is required")
    if req.source == req.target:
        raise ValidationError("Source and target must differ")

    start = time.perf_counter()
    translation = await translator.translate(req.text.strip(), req.source, req.target)
    processing_ms = (time.perf_counter() - start) * 1000
    if not translation:
        raise TranslationFailed()

    return TranslateResponse(
        translation=translation,
        source=req.source,
        target=req.target,
        processing_ms=round(processing_ms),
    )
