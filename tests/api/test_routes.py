"""Tests for API routes."""

from unittest.mock import AsyncMock

from src.speech_translator.errors import QueueFull, RecognitionFailed, StageTimeout
from src.speech_translator.models.pipeline import Stage


class TestTranslateEndpoint:
    def test_returns_wav_audio(self, client, sample_wav_bytes):
        response = client.post(
            "/translate",
            files={"audioFile": ("clip.wav", sample_wav_bytes, "audio/wav")},
            data={"targetLang": "xx"},
        )
        assert response.status_code == 200
        assert response.headers["content-type"] == "audio/wav"
        assert response.content == b"HELLO"

        pipeline = client.app.state.pipeline
        pipeline.recognition.recognize.assert_awaited_once_with(sample_wav_bytes)
        pipeline.translation.translate.assert_awaited_once_with("hello", "xx")

    def test_default_target_language(self, client, sample_wav_bytes):
        response = client.post(
            "/translate",
            files={"audioFile": ("clip.wav", sample_wav_bytes, "audio/wav")},
        )
        assert response.status_code == 200
        client.app.state.pipeline.translation.translate.assert_awaited_once_with("hello", "en-US")

    def test_missing_file_is_400(self, client):
        response = client.post("/translate", data={"targetLang": "fr"})
        assert response.status_code == 400
        assert response.json() == {"error": "No audio file uploaded"}
        client.app.state.pipeline.recognition.recognize.assert_not_called()

    def test_non_file_audio_field_is_400(self, client):
        response = client.post("/translate", data={"audioFile": "not-a-file"})
        assert response.status_code == 400
        assert set(response.json()) == {"error"}
        assert response.json()["error"] == "No audio file uploaded"
        client.app.state.pipeline.recognition.recognize.assert_not_called()

    def test_empty_file_is_400(self, client):
        response = client.post(
            "/translate",
            files={"audioFile": ("clip.wav", b"", "audio/wav")},
        )
        assert response.status_code == 400
        assert "error" in response.json()
        client.app.state.pipeline.recognition.recognize.assert_not_called()

    def test_recognition_failure_is_500(self, client, sample_wav_bytes):
        pipeline = client.app.state.pipeline
        pipeline.recognition.recognize = AsyncMock(
            side_effect=RecognitionFailed("no speech could be recognized")
        )

        response = client.post(
            "/translate",
            files={"audioFile": ("clip.wav", sample_wav_bytes, "audio/wav")},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "no speech could be recognized"}

    def test_stage_timeout_is_504(self, client, sample_wav_bytes):
        pipeline = client.app.state.pipeline
        pipeline.translation.translate = AsyncMock(
            side_effect=StageTimeout(Stage.translation, 15)
        )

        response = client.post(
            "/translate",
            files={"audioFile": ("clip.wav", sample_wav_bytes, "audio/wav")},
        )
        assert response.status_code == 504
        assert "translation" in response.json()["error"]

    def test_queue_full_is_503(self, client, sample_wav_bytes):
        client.app.state.queue.submit = AsyncMock(side_effect=QueueFull("try again later"))

        response = client.post(
            "/translate",
            files={"audioFile": ("clip.wav", sample_wav_bytes, "audio/wav")},
        )
        assert response.status_code == 503
        assert response.json() == {"error": "try again later"}


class TestHealthEndpoint:
    def test_health_reports_queue_and_pool(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["queue"] == {
            "concurrency": 2,
            "running": 0,
            "waiting": 0,
            "max_waiting": 0,
        }
        assert data["synthesizer_pool"] == {"size": 3, "mode": "lease", "available": 3}


class TestRootEndpoint:
    def test_root_returns_service_info(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "Speech Translator"
        assert data["version"] == "1.0.0"
        assert data["endpoints"]["translate"] == "/translate"
