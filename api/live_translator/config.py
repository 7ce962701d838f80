from pydantic_settings import BaseSettings
from typing import List, Literal


class Settings(BaseSettings):
    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "info"

    # Auth
    api_key: str = "change-me-in-production"

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # OpenAI: STT credential, also used for translation with the openai provider
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_stt_model: str = "whisper-1"
    openai_translation_model: str = "gpt-4o"

    # Translation backend: "openai" or "anthropic"
    translation_provider: Literal["openai", "anthropic"] = "openai"

    # Claude API
    anthropic_api_key: str = ""
    claude_model: str = "claude-3-5-haiku-20241022"

    # ElevenLabs: empty voice/model fall back to the adapter defaults
    elevenlabs_api_key: str = ""
    elevenlabs_base_url: str = "https://api.elevenlabs.io/v1"
    elevenlabs_default_voice_id: str = ""
    elevenlabs_model_id: str = ""

    # Upstream timeouts
    stt_timeout_s: float = 30.0
    translation_timeout_s: float = 20.0
    tts_timeout_s: float = 30.0

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_per_hour: int = 100

    # Monitoring
    prometheus_enabled: bool = True

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:80",
    ]

    # Limits
    tts_max_chars: int = 5000
    upload_max_bytes: int = 25 * 1024 * 1024  # Whisper upload limit

    model_config = {
        "env_file": ["../.env", ".env"],
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "frozen": True,
    }

    @property
    def stt_configured(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def translation_configured(self) -> bool:
        if self.translation_provider == "anthropic":
            return bool(self.anthropic_api_key)
        return bool(self.openai_api_key)

    @property
    def tts_configured(self) -> bool:
        return bool(self.elevenlabs_api_key)


settings = Settings()
