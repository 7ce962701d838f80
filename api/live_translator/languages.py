"""Static language tables.

Display names feed the translation instruction, Whisper codes feed the STT
language hint, and the voice table backs the `/languages` listing.
"""

from typing import NamedTuple

AUTO = "auto"
AUTO_DISPLAY_NAME = "Auto-detected"

LANGUAGE_NAMES = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "ar": "Arabic",
    "hi": "Hindi",
    "nl": "Dutch",
    "sv": "Swedish",
    "no": "Norwegian",
    "da": "Danish",
    "fi": "Finnish",
    "pl": "Polish",
    "tr": "Turkish",
}

# Premade ElevenLabs voices (multilingual model)
VOICES = {
    "en": {"id": "21m00Tcm4TlvDq8ikWAM", "name": "Rachel", "gender": "female"},
    "es": {"id": "VR6AewLTigWG4xSOukaG", "name": "Arnold", "gender": "male"},
    "fr": {"id": "TxGEqnHWrfWFTfGW9XjX", "name": "Josh", "gender": "male"},
    "de": {"id": "pNInz6obpgDQGcFmaJgB", "name": "Adam", "gender": "male"},
    "it": {"id": "AZnzlk1XvdvUeBnXmlld", "name": "Domi", "gender": "female"},
    "pt": {"id": "CYw3kZ02Hs0563khs1Fj", "name": "Dave", "gender": "male"},
    "ja": {"id": "bVMeCyTHy58xNoL34h3p", "name": "Jeremy", "gender": "male"},
    "ko": {"id": "N2lVS1w4EtoT3dr4eOWO", "name": "Callum", "gender": "male"},
}


class LanguagePair(NamedTuple):
    source: str
    target: str
    source_name: str
    target_name: str


def language_name(code: str) -> str:
    if code == AUTO:
        return AUTO_DISPLAY_NAME
    return LANGUAGE_NAMES.get(code, code.upper())


def resolve_language_pair(source: str, target: str) -> LanguagePair:
    return LanguagePair(source, target, language_name(source), language_name(target))


def whisper_language(code: str) -> str | None:
    """Language hint for Whisper, or None to let it detect the language."""
    if code == AUTO:
        return None
    return code


def voice_for_language(code: str) -> dict | None:
    return VOICES.get(code)
