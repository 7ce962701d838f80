import enum
import logging
import math
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import httpx

from live_translator.config import Settings
from live_translator.errors import (
    InternalError,
    NoSpeechDetected,
    PipelineError,
    ServiceUnavailable,
    TranslationFailed,
    TtsGenerationFailed,
    UpstreamError,
)
from live_translator.middleware.metrics import (
    PIPELINE_FAILURES,
    PIPELINE_STAGE_DURATION,
    PIPELINE_TOTAL_DURATION,
    PTT_REQUESTS,
)
from live_translator.models.stt import WhisperSTT
from live_translator.models.translator import load_translator
from live_translator.models.tts import AudioStream, ElevenLabsTTS
from live_translator.schemas.ptt import PttRequest
from live_translator.services.validation import parse_ptt_request

logger = logging.getLogger("live_translator")


class PipelineState(str, enum.Enum):
    VALIDATING = "validating"
    TRANSCRIBING = "transcribing"
    TRANSLATING = "translating"
    SYNTHESIZING = "synthesizing"
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"


STAGE_STATES = {
    "stt": PipelineState.TRANSCRIBING,
    "translation": PipelineState.TRANSLATING,
    "tts": PipelineState.SYNTHESIZING,
}


def _ms(seconds: float) -> int:
    return math.ceil(seconds * 1000)


@dataclass
class PipelineResult:
    started_at: float
    state: PipelineState = PipelineState.VALIDATING
    source_text: str = ""
    target_text: str = ""
    audio_stream: AudioStream | None = None
    stage_latencies_ms: dict[str, int] = field(default_factory=dict)
    failed_stage: str | None = None

    async def close(self):
        """Release the audio stream once the response is sent."""
        if self.audio_stream is not None:
            await self.audio_stream.aclose()
        if self.state == PipelineState.STREAMING:
            self.state = PipelineState.DONE


class PttPipeline:
    """Push-to-talk pipeline: validate -> STT -> translation -> TTS.

    Stages run strictly in sequence, each gated on the previous output.
    Every failure is raised as a PipelineError tagged with its stage; nothing
    is retried.
    """

    def __init__(
        self,
        stt,
        translator,
        tts,
        max_audio_bytes: int | None = None,
        clock=time.perf_counter,
    ):
        self.stt = stt
        self.translator = translator
        self.tts = tts
        self.max_audio_bytes = max_audio_bytes
        self._clock = clock

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "PttPipeline":
        return cls(
            stt=WhisperSTT(settings, transport),
            translator=load_translator(settings, transport),
            tts=ElevenLabsTTS(settings, transport),
            max_audio_bytes=settings.upload_max_bytes,
        )

    async def run(self, body: bytes, started_at: float | None = None) -> PipelineResult:
        """Run the whole pipeline on a raw request body.

        `started_at` is the request entry time on this pipeline's clock; the
        total latency is measured from it.
        """
        result = PipelineResult(
            started_at=self._clock() if started_at is None else started_at
        )
        try:
            request = self._validate(body)
            logger.info(
                "[PTT] %s -> %s, %d bytes of %s",
                request.source_language, request.target_language,
                len(request.audio), request.audio_format,
            )
            self._check_configured()
            await self._execute(request, result)
        except PipelineError as e:
            self._fail(result, e)
            e.pipeline_result = result
            raise

        result.state = PipelineState.STREAMING
        self._finish(result)
        PTT_REQUESTS.labels(outcome="success").inc()
        logger.info("[PTT] Pipeline latencies: %s", result.stage_latencies_ms)
        return result

    def _validate(self, body: bytes) -> PttRequest:
        try:
            return parse_ptt_request(body, self.max_audio_bytes)
        except PipelineError as e:
            e.stage = "validation"
            raise
        except Exception as e:
            logger.exception("[PTT] Unexpected error during validation")
            error = InternalError()
            error.stage = "validation"
            raise error from e

    def _check_configured(self):
        """Fail before any upstream call when a credential is missing."""
        for stage, adapter in (
            ("stt", self.stt),
            ("translation", self.translator),
            ("tts", self.tts),
        ):
            if not adapter.configured:
                error = ServiceUnavailable(stage)
                error.stage = stage
                raise error

    async def _execute(self, request: PttRequest, result: PipelineResult):
        async with self._stage(result, "stt"):
            result.source_text = await self.stt.transcribe(
                request.audio, request.audio_format, request.source_language
            )
            if not result.source_text:
                raise NoSpeechDetected()
        logger.info(
            "[PTT] STT: '%s' (%dms)", result.source_text, result.stage_latencies_ms["stt"]
        )

        async with self._stage(result, "translation"):
            result.target_text = await self.translator.translate(
                result.source_text, request.source_language, request.target_language
            )
            if not result.target_text:
                raise TranslationFailed()
        logger.info(
            "[PTT] Translation: '%s' (%dms)",
            result.target_text, result.stage_latencies_ms["translation"],
        )

        async with self._stage(result, "tts"):
            try:
                result.audio_stream = await self.tts.synthesize(
                    result.target_text,
                    voice_id=request.voice_id,
                    model_id=request.model_id,
                    output_format=request.output_format,
                )
            except TtsGenerationFailed:
                raise
            except UpstreamError as e:
                # PTT reports every TTS upstream failure under one label
                raise TtsGenerationFailed(e.message, e.upstream_status) from e
        logger.info("[PTT] TTS stream opened (%dms)", result.stage_latencies_ms["tts"])

    @asynccontextmanager
    async def _stage(self, result: PipelineResult, stage: str):
        result.state = STAGE_STATES[stage]
        start = self._clock()
        try:
            yield
        except PipelineError as e:
            e.stage = e.stage or stage
            raise
        except Exception as e:
            logger.exception("[PTT] Unexpected error during %s", stage)
            error = InternalError()
            error.stage = stage
            raise error from e
        finally:
            elapsed = self._clock() - start
            result.stage_latencies_ms[stage] = _ms(elapsed)
            PIPELINE_STAGE_DURATION.labels(stage=stage).observe(elapsed)

    def _finish(self, result: PipelineResult):
        elapsed = self._clock() - result.started_at
        result.stage_latencies_ms["total"] = _ms(elapsed)
        PIPELINE_TOTAL_DURATION.observe(elapsed)

    def _fail(self, result: PipelineResult, error: PipelineError):
        result.state = PipelineState.FAILED
        result.failed_stage = error.stage
        self._finish(result)
        PTT_REQUESTS.labels(outcome="failed").inc()
        PIPELINE_FAILURES.labels(
            stage=error.stage or "unknown", error=type(error).__name__
        ).inc()
        logger.warning(
            "[PTT] Failed at %s: %s (%s) after %dms",
            error.stage, error.error, error.details or "-",
            result.stage_latencies_ms["total"],
        )
