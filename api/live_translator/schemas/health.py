from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str
    translation_provider: str
    services: dict[str, bool]
    redis_connected: bool
