import asyncio
import logging

import anthropic
import httpx

from live_translator.config import Settings
from live_translator.errors import ServiceUnavailable, classify_upstream_error
from live_translator.languages import LanguagePair, resolve_language_pair
from live_translator.middleware.metrics import UPSTREAM_ERRORS
from live_translator.models.upstream import response_error, transport_error

logger = logging.getLogger("live_translator")

TRANSLATION_TEMPERATURE = 0.3
TRANSLATION_MAX_TOKENS = 1000


def build_translation_prompt(text: str, pair: LanguagePair) -> str:
    return (
        "You are a professional simultaneous interpreter. "
        f"Translate the following {pair.source_name} text to {pair.target_name}.\n"
        "\n"
        "Rules:\n"
        "1. Provide ONLY the translation, no explanations or additional text\n"
        "2. Maintain the original tone and context\n"
        "3. Keep cultural nuances when possible\n"
        "4. If the text is incomplete, translate what you can understand\n"
        "5. If you cannot determine the source language, detect it first then translate\n"
        "\n"
        f'Text to translate: "{text}"\n'
        "\n"
        "Translation:"
    )


class OpenAITranslator:
    """Translation through OpenAI chat completions. Shares the STT credential."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.settings.openai_api_key)

    async def translate(self, text: str, source: str, target: str) -> str:
        """Translate text. Returns the stripped translation, possibly empty."""
        if not self.configured:
            raise ServiceUnavailable("translation")

        prompt = build_translation_prompt(text, resolve_language_pair(source, target))
        payload = {
            "model": self.settings.openai_translation_model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": TRANSLATION_TEMPERATURE,
            "max_tokens": TRANSLATION_MAX_TOKENS,
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.settings.openai_base_url,
                timeout=self.settings.translation_timeout_s,
                transport=self.transport,
            ) as client:
                response = await client.post(
                    "/chat/completions",
                    headers={"Authorization": f"Bearer {self.settings.openai_api_key}"},
                    json=payload,
                )
        except httpx.HTTPError as e:
            raise transport_error("translation", e) from e

        if not response.is_success:
            raise response_error("translation", response)

        choices = response.json().get("choices") or []
        if not choices:
            return ""
        content = (choices[0].get("message") or {}).get("content")
        return (content or "").strip()


class ClaudeTranslator:
    """Translation through the Anthropic messages API."""

    def __init__(self, settings: Settings, client: anthropic.AsyncAnthropic | None = None):
        self.settings = settings
        self.client = client

    @property
    def configured(self) -> bool:
        return bool(self.settings.anthropic_api_key)

    async def translate(self, text: str, source: str, target: str) -> str:
        if not self.configured:
            raise ServiceUnavailable("translation")

        prompt = build_translation_prompt(text, resolve_language_pair(source, target))
        try:
            if self.client is not None:
                return await self._generate(self.client, prompt)
            # One client per call, no SDK retries
            async with anthropic.AsyncAnthropic(
                api_key=self.settings.anthropic_api_key, max_retries=0
            ) as client:
                return await self._generate(client, prompt)
        except anthropic.APIStatusError as e:
            UPSTREAM_ERRORS.labels(service="translation", status=str(e.status_code)).inc()
            logger.error("Claude API error: %d - %s", e.status_code, e.message)
            raise classify_upstream_error("translation", e.message, e.status_code) from e
        except (anthropic.APIConnectionError, asyncio.TimeoutError) as e:
            raise transport_error("translation", e) from e

    async def _generate(self, client: anthropic.AsyncAnthropic, prompt: str) -> str:
        response = await asyncio.wait_for(
            client.messages.create(
                model=self.settings.claude_model,
                max_tokens=TRANSLATION_MAX_TOKENS,
                temperature=TRANSLATION_TEMPERATURE,
                messages=[{"role": "user", "content": prompt}],
            ),
            timeout=self.settings.translation_timeout_s,
        )
        text = "".join(
            block.text for block in response.content if getattr(block, "type", "text") == "text"
        )
        return text.strip()


def load_translator(
    settings: Settings, transport: httpx.AsyncBaseTransport | None = None
) -> OpenAITranslator | ClaudeTranslator:
    if settings.translation_provider == "anthropic":
        return ClaudeTranslator(settings)
    return OpenAITranslator(settings, transport)
