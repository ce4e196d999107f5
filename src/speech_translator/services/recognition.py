"""One-shot Azure speech recognition with automatic source-language detection."""

import asyncio
from concurrent.futures import ThreadPoolExecutor

import azure.cognitiveservices.speech as speechsdk
import structlog

from src.speech_translator.config import Settings
from src.speech_translator.errors import RecognitionFailed
from src.speech_translator.models.pipeline import Transcript
from src.speech_translator.services.audio import TARGET_SAMPLE_RATE, AudioDecodeError, to_pcm16

logger = structlog.get_logger()


class RecognitionService:
    """Wraps ``SpeechRecognizer.recognize_once_async`` behind an async call.

    Calls run on a private executor with one worker per admission slot: hung
    SDK calls never outnumber the queue concurrency and never hold the threads
    synthesis runs on. A call whose deadline passes before a worker picks it
    up never starts.
    """

    def __init__(self, settings: Settings) -> None:
        self.key = settings.azure_speech_key
        self.region = settings.azure_speech_region
        self.default_language = settings.recognition_language
        self.candidate_languages = settings.candidate_languages
        self.workers = settings.queue_concurrency
        self._executor = ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="recognition"
        )

        logger.info(
            "RecognitionService initialized",
            region=self.region,
            language=self.default_language,
            candidates=self.candidate_languages,
            workers=self.workers,
        )

    async def recognize(self, audio_data: bytes, language: str | None = None) -> Transcript:
        """Recognize a complete clip. Raises RecognitionFailed on any non-recognized outcome."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor, self._recognize_blocking, audio_data, language or self.default_language
        )

    def close(self) -> None:
        """Drop queued calls and stop accepting new ones; running SDK calls finish on their own."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _recognize_blocking(self, audio_data: bytes, language: str) -> Transcript:
        try:
            pcm = to_pcm16(audio_data)
        except AudioDecodeError as e:
            raise RecognitionFailed(f"audio malformed: {e}") from e

        try:
            recognizer = self._create_recognizer(pcm, language)
            result = recognizer.recognize_once_async().get()
        except Exception as e:
            raise RecognitionFailed(f"speech service error: {e}") from e

        if result.reason == speechsdk.ResultReason.RecognizedSpeech:
            if not result.text.strip():
                raise RecognitionFailed("no speech could be recognized")
            detected = None
            if language == "auto":
                detected = speechsdk.AutoDetectSourceLanguageResult(result).language
            return Transcript(text=result.text, language=detected or None)

        if result.reason == speechsdk.ResultReason.NoMatch:
            raise RecognitionFailed("no speech could be recognized")

        if result.reason == speechsdk.ResultReason.Canceled:
            details = result.cancellation_details
            raise RecognitionFailed(
                f"recognition canceled: {details.reason} {details.error_details or ''}".strip()
            )

        raise RecognitionFailed(f"unexpected recognition outcome: {result.reason}")

    def _create_recognizer(self, pcm: bytes, language: str) -> speechsdk.SpeechRecognizer:
        speech_config = speechsdk.SpeechConfig(subscription=self.key, region=self.region)

        stream_format = speechsdk.audio.AudioStreamFormat(
            samples_per_second=TARGET_SAMPLE_RATE, bits_per_sample=16, channels=1
        )
        push_stream = speechsdk.audio.PushAudioInputStream(stream_format=stream_format)
        push_stream.write(pcm)
        push_stream.close()
        audio_config = speechsdk.audio.AudioConfig(stream=push_stream)

        if language == "auto":
            auto_detect = speechsdk.languageconfig.AutoDetectSourceLanguageConfig(
                languages=self.candidate_languages
            )
            return speechsdk.SpeechRecognizer(
                speech_config=speech_config,
                auto_detect_source_language_config=auto_detect,
                audio_config=audio_config,
            )

        speech_config.speech_recognition_language = language
        return speechsdk.SpeechRecognizer(speech_config=speech_config, audio_config=audio_config)
