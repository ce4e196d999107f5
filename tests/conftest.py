"""Shared test fixtures for speech-translator."""

import struct
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.speech_translator.models.pipeline import Transcript

TEST_ENV = {
    "HOST": "127.0.0.1",
    "PORT": "3000",
    "AZURE_SPEECH_KEY": "speech-key",
    "AZURE_SPEECH_REGION": "westeurope",
    "AZURE_TRANSLATOR_KEY": "translator-key",
    "AZURE_TRANSLATOR_REGION": "westeurope",
    "DEFAULT_TARGET_LANG": "en-US",
    "QUEUE_CONCURRENCY": "2",
    "MAX_QUEUE_DEPTH": "0",
    "SYNTH_POOL_SIZE": "3",
    "SYNTH_POOL_MODE": "lease",
}


@pytest.fixture
def mock_settings():
    """Settings with fake Azure credentials and a small queue and pool."""
    with patch.dict("os.environ", TEST_ENV):
        from src.speech_translator.config import Settings

        yield Settings(_env_file=None)


@pytest.fixture
def sample_wav_bytes():
    """Minimal valid WAV file (44 bytes header + 2 bytes of silence)."""
    # WAV header for 16-bit mono PCM at 16000 Hz, 1 sample
    data_size = 2
    header = struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + data_size,  # file size - 8
        b"WAVE",
        b"fmt ",
        16,  # chunk size
        1,  # PCM format
        1,  # mono
        16000,  # sample rate
        32000,  # byte rate
        2,  # block align
        16,  # bits per sample
        b"data",
        data_size,
    )
    return header + b"\x00\x00"


@pytest.fixture
def fake_recognition():
    """Recognition adapter that always hears 'hello'."""
    service = MagicMock()
    service.recognize = AsyncMock(return_value=Transcript(text="hello", language="en-US"))
    return service


@pytest.fixture
def fake_translation():
    """Translation adapter that uppercases its input."""
    service = MagicMock()
    service.translate = AsyncMock(side_effect=lambda text, target_lang: text.upper())
    return service


@pytest.fixture
def fake_synthesis():
    """Synthesis adapter that returns the UTF-8 bytes of its input."""
    service = MagicMock()
    service.synthesize = AsyncMock(side_effect=lambda text, synthesizer: text.encode("utf-8"))
    return service


@pytest.fixture
def prepared_pool(mock_settings):
    from src.speech_translator.services.pool import SynthesizerPool

    pool = SynthesizerPool(MagicMock, size=mock_settings.synth_pool_size)
    pool.prepare()
    return pool


@pytest.fixture
def pipeline(mock_settings, fake_recognition, fake_translation, fake_synthesis, prepared_pool):
    """TranslationPipeline wired to fake adapters and a real pool."""
    from src.speech_translator.services.pipeline import TranslationPipeline

    return TranslationPipeline(
        mock_settings,
        recognition=fake_recognition,
        translation=fake_translation,
        synthesis=fake_synthesis,
        pool=prepared_pool,
    )


@pytest.fixture
def app(mock_settings, fake_recognition, fake_translation, fake_synthesis):
    """FastAPI test app with every external service faked."""
    from src.speech_translator.api.app import create_app

    app = create_app(mock_settings, synthesizer_factory=MagicMock)
    pipeline = app.state.pipeline
    pipeline.recognition = fake_recognition
    pipeline.translation = fake_translation
    pipeline.synthesis = fake_synthesis
    return app


@pytest.fixture
def client(app):
    """TestClient with the lifespan running, so the synthesizer pool is prepared."""
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client
