from fastapi import APIRouter

from live_translator.languages import LANGUAGE_NAMES, voice_for_language
from live_translator.schemas.languages import LanguageInfo, LanguagesResponse

router = APIRouter()


@router.get("/languages", response_model=LanguagesResponse, summary="Supported languages")
async def languages():
    """Languages with display names, and the suggested voice where one exists.

    `auto` may also be used as a source language.
    """
    return LanguagesResponse(
        languages=[
            LanguageInfo(code=code, name=name, voice=voice_for_language(code))
            for code, name in LANGUAGE_NAMES.items()
        ]
    )
