from pydantic import BaseModel


class Voice(BaseModel):
    id: str
    name: str
    gender: str


class LanguageInfo(BaseModel):
    code: str
    name: str
    voice: Voice | None = None


class LanguagesResponse(BaseModel):
    languages: list[LanguageInfo]
