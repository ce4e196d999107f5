"""Translation pipeline: recognize -> translate -> synthesize for one job."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, TypeVar

import structlog

from src.speech_translator.errors import InternalError, PipelineError, StageTimeout, ValidationError
from src.speech_translator.models.pipeline import (
    PipelineFailure,
    PipelineResult,
    PipelineSuccess,
    Stage,
    TranslationJob,
)

if TYPE_CHECKING:
    from src.speech_translator.config import Settings
    from src.speech_translator.services.pool import SynthesizerPool
    from src.speech_translator.services.recognition import RecognitionService
    from src.speech_translator.services.synthesis import SynthesisService
    from src.speech_translator.services.translation import TranslationService

logger = structlog.get_logger()

T = TypeVar("T")


class TranslationPipeline:
    """Runs the three stages strictly in order and stops at the first failure.

    Nothing is retried and nothing outlives the job. Failures come back as
    ``PipelineFailure`` values carrying the stage and cause; audio and text
    never reach the logs.
    """

    def __init__(
        self,
        settings: Settings,
        recognition: RecognitionService,
        translation: TranslationService,
        synthesis: SynthesisService,
        pool: SynthesizerPool[Any],
    ) -> None:
        self.recognition = recognition
        self.translation = translation
        self.synthesis = synthesis
        self.pool = pool
        self.default_target_lang = settings.default_target_lang
        self.recognition_timeout = settings.recognition_timeout
        self.translation_timeout = settings.translation_timeout
        self.synthesis_timeout = settings.synthesis_timeout

    async def run(self, job: TranslationJob) -> PipelineResult:
        started = time.monotonic()
        try:
            audio = await self._run_stages(job)
        except PipelineError as e:
            return self._failure(job, e, started)
        except Exception as e:
            logger.exception("Job crashed", job_id=job.job_id)
            return self._failure(job, InternalError(f"internal error: {e}"), started)

        logger.info(
            "Job completed",
            job_id=job.job_id,
            audio_bytes=len(audio),
            duration=round(time.monotonic() - started, 3),
        )
        return PipelineSuccess(job_id=job.job_id, audio=audio)

    async def _run_stages(self, job: TranslationJob) -> bytes:
        if not job.audio:
            raise ValidationError("No audio file uploaded")

        transcript = await self._with_deadline(
            self.recognition.recognize(job.audio), Stage.recognition, self.recognition_timeout
        )
        logger.debug("Speech recognized", job_id=job.job_id, language=transcript.language)

        target_lang = job.target_lang or self.default_target_lang
        translated = await self._with_deadline(
            self.translation.translate(transcript.text, target_lang),
            Stage.translation,
            self.translation_timeout,
        )
        logger.debug("Text translated", job_id=job.job_id, target_lang=target_lang)

        return await self._with_deadline(
            self._synthesize(translated), Stage.synthesis, self.synthesis_timeout
        )

    async def _synthesize(self, text: str) -> bytes:
        synthesizer = await self.pool.acquire()
        call = asyncio.ensure_future(self.synthesis.synthesize(text, synthesizer))
        # hand the synthesizer back only when the SDK call is really over,
        # a deadline firing first must not free it for another job
        call.add_done_callback(lambda fut: self._return_synthesizer(synthesizer, fut))
        return await asyncio.shield(call)

    def _return_synthesizer(self, synthesizer: Any, fut: asyncio.Future[bytes]) -> None:
        if not fut.cancelled():
            fut.exception()
        # the pool was closed while this call was in flight
        if not self.pool.ready:
            return
        self.pool.release(synthesizer)

    @staticmethod
    async def _with_deadline(aw: Awaitable[T], stage: Stage, timeout: float) -> T:
        if not timeout:
            return await aw
        try:
            return await asyncio.wait_for(aw, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise StageTimeout(stage, timeout) from e

    @staticmethod
    def _failure(job: TranslationJob, error: PipelineError, started: float) -> PipelineFailure:
        logger.warning(
            "Job failed",
            job_id=job.job_id,
            stage=error.stage.value,
            error=error.kind,
            reason=error.reason,
            duration=round(time.monotonic() - started, 3),
        )
        return PipelineFailure(
            job_id=job.job_id, stage=error.stage, error=error.kind, reason=error.reason
        )
