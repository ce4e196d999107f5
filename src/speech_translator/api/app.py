"""FastAPI application factory."""

from collections.abc import Callable
from contextlib import asynccontextmanager
from functools import partial
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.speech_translator.api.routes import create_router, error_response
from src.speech_translator.config import Settings
from src.speech_translator.services.admission import AdmissionQueue
from src.speech_translator.services.pipeline import TranslationPipeline
from src.speech_translator.services.pool import SynthesizerPool
from src.speech_translator.services.recognition import RecognitionService
from src.speech_translator.services.synthesis import SynthesisService, create_synthesizer
from src.speech_translator.services.translation import TranslationService

logger = structlog.get_logger()


def create_app(
    settings: Settings | None = None,
    synthesizer_factory: Callable[[], Any] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()
    if synthesizer_factory is None:
        synthesizer_factory = partial(create_synthesizer, settings)

    pool = SynthesizerPool(
        synthesizer_factory, size=settings.synth_pool_size, mode=settings.synth_pool_mode
    )
    pipeline = TranslationPipeline(
        settings,
        recognition=RecognitionService(settings),
        translation=TranslationService(settings),
        synthesis=SynthesisService(),
        pool=pool,
    )
    queue = AdmissionQueue(
        pipeline.run,
        concurrency=settings.queue_concurrency,
        max_waiting=settings.max_queue_depth,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        """Build the synthesizer pool before accepting requests."""
        logger.info("Starting Speech Translator service")

        try:
            pool.prepare()
        except Exception as e:
            logger.error("Synthesizer pool initialization failed", error=str(e))
            raise RuntimeError("Synthesizer pool initialization failed") from e

        logger.info(
            "All services initialized successfully",
            concurrency=queue.concurrency,
            pool_size=pool.size,
            pool_mode=pool.mode.value,
        )
        yield
        pool.close()
        pipeline.recognition.close()
        logger.info("Shutting down Speech Translator")

    app = FastAPI(
        title="Speech Translator",
        description="Speech recognition -> translation -> speech synthesis",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        fields = {str(err["loc"][-1]) for err in exc.errors() if err.get("loc")}
        logger.info("Request rejected", fields=sorted(fields))
        if "audioFile" in fields:
            return error_response(400, "No audio file uploaded")
        return error_response(400, "Invalid request: " + ", ".join(sorted(fields)))

    app.state.settings = settings
    app.state.pool = pool
    app.state.pipeline = pipeline
    app.state.queue = queue
    app.include_router(create_router())

    return app
