"""Entry point for `python -m src.speech_translator`."""

import logging

import structlog
import uvicorn

from src.speech_translator.api.app import create_app
from src.speech_translator.config import Settings

logger = structlog.get_logger()


def configure_logging(level_name: str) -> int:
    """Apply LOG_LEVEL to both stdlib logging (uvicorn) and structlog events."""
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")

    logging.basicConfig(level=level)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
    return level


def main() -> None:
    settings = Settings()
    configure_logging(settings.log_level)
    logger.info("Starting Speech Translator", host=settings.host, port=settings.port)
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, reload=False, workers=1)


if __name__ == "__main__":
    main()
