"""Azure text-to-speech producing 16 kHz 16-bit mono RIFF/WAV."""

import asyncio

import azure.cognitiveservices.speech as speechsdk
import structlog

from src.speech_translator.config import Settings
from src.speech_translator.errors import SynthesisFailed

logger = structlog.get_logger()

OUTPUT_FORMAT = speechsdk.SpeechSynthesisOutputFormat.Riff16Khz16BitMonoPcm


def create_synthesizer(settings: Settings) -> speechsdk.SpeechSynthesizer:
    """Build one in-memory synthesizer. Used as the pool factory."""
    speech_config = speechsdk.SpeechConfig(
        subscription=settings.azure_speech_key, region=settings.azure_speech_region
    )
    speech_config.speech_synthesis_voice_name = settings.synthesis_voice
    speech_config.set_speech_synthesis_output_format(OUTPUT_FORMAT)
    # audio_config=None keeps the audio in the result instead of playing it
    return speechsdk.SpeechSynthesizer(speech_config=speech_config, audio_config=None)


class SynthesisService:
    async def synthesize(self, text: str, synthesizer: speechsdk.SpeechSynthesizer) -> bytes:
        """Speak ``text`` with a pooled synthesizer. Raises SynthesisFailed."""
        return await asyncio.to_thread(self._synthesize_blocking, text, synthesizer)

    @staticmethod
    def _synthesize_blocking(text: str, synthesizer: speechsdk.SpeechSynthesizer) -> bytes:
        try:
            result = synthesizer.speak_text_async(text).get()
        except Exception as e:
            raise SynthesisFailed(f"speech service error: {e}") from e

        if result.reason == speechsdk.ResultReason.Canceled:
            details = result.cancellation_details
            raise SynthesisFailed(
                f"synthesis canceled: {details.reason} {details.error_details or ''}".strip()
            )

        if not result.audio_data:
            raise SynthesisFailed("synthesis returned no audio data")

        return bytes(result.audio_data)
