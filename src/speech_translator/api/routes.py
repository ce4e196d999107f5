"""FastAPI route handlers for the Speech Translator API."""

from typing import Any

import structlog
from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from src.speech_translator.errors import QueueFull, StageTimeout
from src.speech_translator.models.pipeline import PipelineFailure, Stage, TranslationJob

logger = structlog.get_logger()

_STATUS_BY_STAGE = {
    Stage.validation: 400,
    Stage.admission: 503,
}


def _status_for(failure: PipelineFailure) -> int:
    if failure.error == StageTimeout.__name__:
        return 504
    return _STATUS_BY_STAGE.get(failure.stage, 500)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_router() -> APIRouter:
    """Create the API router with all endpoints."""
    router = APIRouter()

    @router.post("/translate", response_model=None)
    async def translate(
        request: Request,
        audio_file: UploadFile | None = File(default=None, alias="audioFile"),
        target_lang: str | None = Form(default=None, alias="targetLang"),
    ) -> Response:
        """Speech in, translated speech out (16 kHz mono WAV)."""
        if audio_file is None:
            return error_response(400, "No audio file uploaded")

        job = TranslationJob(audio=await audio_file.read(), target_lang=target_lang or None)
        logger.info(
            "Translation requested",
            job_id=job.job_id,
            audio_bytes=len(job.audio),
            target_lang=job.target_lang,
        )

        try:
            result = await request.app.state.queue.submit(job)
        except QueueFull as e:
            return error_response(503, e.reason)

        if isinstance(result, PipelineFailure):
            return error_response(_status_for(result), result.reason)
        return Response(content=result.audio, media_type="audio/wav")

    @router.get("/health")
    async def health_check(request: Request) -> dict[str, Any]:
        queue = request.app.state.queue
        pool = request.app.state.pool
        return {
            "status": "healthy" if pool.ready else "starting",
            "queue": {
                "concurrency": queue.concurrency,
                "running": queue.running,
                "waiting": queue.waiting,
                "max_waiting": queue.max_waiting,
            },
            "synthesizer_pool": {
                "size": pool.size,
                "mode": pool.mode.value,
                "available": pool.available,
            },
        }

    @router.get("/")
    async def root(request: Request) -> dict[str, Any]:
        settings = request.app.state.settings
        return {
            "service": "Speech Translator",
            "version": request.app.version,
            "description": "Speech recognition -> translation -> speech synthesis",
            "default_target_lang": settings.default_target_lang,
            "endpoints": {
                "translate": "/translate",
                "health": "/health",
            },
        }

    return router
