"""Azure Translator text translation over HTTP."""

import httpx
import structlog

from src.speech_translator.config import Settings
from src.speech_translator.errors import StageTimeout, TranslationFailed
from src.speech_translator.models.pipeline import Stage

logger = structlog.get_logger()

API_VERSION = "3.0"


class TranslationService:
    """Translates a single text through the Translator ``/translate`` endpoint."""

    def __init__(self, settings: Settings) -> None:
        self.endpoint = settings.translator_endpoint
        self.key = settings.azure_translator_key
        self.region = settings.azure_translator_region
        self.timeout_seconds = settings.translation_timeout
        self.timeout = httpx.Timeout(timeout=settings.translation_timeout or None)

        logger.info("TranslationService initialized", endpoint=self.endpoint)

    async def translate(self, text: str, target_lang: str) -> str:
        """Translate ``text`` into ``target_lang``. Raises TranslationFailed or StageTimeout."""
        headers = {
            "Ocp-Apim-Subscription-Key": self.key,
            "Ocp-Apim-Subscription-Region": self.region,
            "Content-Type": "application/json",
        }
        params = {"api-version": API_VERSION, "to": target_lang}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    f"{self.endpoint}/translate",
                    params=params,
                    headers=headers,
                    json=[{"Text": text}],
                )
        except httpx.TimeoutException as e:
            raise StageTimeout(Stage.translation, self.timeout_seconds) from e
        except httpx.HTTPError as e:
            raise TranslationFailed(f"translator unreachable: {e}") from e

        if not resp.is_success:
            raise TranslationFailed(f"translator returned HTTP {resp.status_code}")

        try:
            translations = resp.json()[0]["translations"]
        except (ValueError, LookupError, TypeError) as e:
            raise TranslationFailed("malformed translator response") from e

        if not translations:
            raise TranslationFailed("translator returned no translations")

        translated = translations[0].get("text") if isinstance(translations[0], dict) else None
        if not translated:
            raise TranslationFailed("translator returned empty text")
        return translated
