"""Handles sentence translation using an Azure OpenAI chat deployment."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import httpx

from .exceptions import TranslationError
from .models import TranslationCredentials

logger = logging.getLogger(__name__)

DEFAULT_TARGET_LANGUAGE = "Simplified Chinese"

class Translator(ABC):
    """Abstract base class for translation services."""

    @abstractmethod
    async def translate(self, text: str) -> str:
        """
        Translates one sentence into the translator's target language.

        Args:
            text: The text to translate.

        Returns:
            The translated text.

        Raises:
            TranslationError: If translation fails.
        """
        pass

class AzureOpenAITranslator(Translator):
    """Implements translation through the Azure OpenAI chat completions endpoint."""

    def __init__(
        self,
        credentials: TranslationCredentials,
        target_language: str = DEFAULT_TARGET_LANGUAGE,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initializes the AzureOpenAITranslator.

        Args:
            credentials: Endpoint, key and deployment of the Azure OpenAI resource.
            target_language: Language named in the system prompt.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self.credentials = credentials
        self.target_language = target_language
        self.timeout = timeout
        self.transport = transport
        logger.info(
            f"Initializing AzureOpenAITranslator for deployment '{credentials.deployment}' "
            f"(target: {target_language})"
        )

    @property
    def url(self) -> str:
        endpoint = self.credentials.endpoint.rstrip("/")
        return (
            f"{endpoint}/openai/deployments/{self.credentials.deployment}"
            f"/chat/completions?api-version={self.credentials.api_version}"
        )

    def _payload(self, text: str) -> dict:
        return {
            "messages": [
                {
                    "role": "system",
                    "content": (
                        f"You are a professional translator. Translate the given text to {self.target_language}. "
                        "Only output the translation, nothing else. Maintain the same tone and style."
                    ),
                },
                {"role": "user", "content": text},
            ],
            "max_tokens": 1000,
            "temperature": 0.3,
        }

    async def translate(self, text: str) -> str:
        if not text:
            return "" # Handle empty input gracefully

        logger.debug(f"Translating: '{text[:50]}'")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.url,
                    json=self._payload(text),
                    headers={"api-key": self.credentials.api_key},
                )
        except httpx.HTTPError as e:
            logger.error(f"Translation request failed: {e}")
            raise TranslationError(f"Translation request failed: {e}") from e

        if response.is_error:
            logger.error(f"Translation API error {response.status_code}: {response.text[:200]}")
            raise TranslationError(f"API error: {response.status_code} - {response.text}", status=response.status_code)

        try:
            data = response.json()
            translation = (data["choices"][0]["message"]["content"] or "").strip()
        except (ValueError, KeyError, IndexError, TypeError):
            translation = ""
        if not translation:
            raise TranslationError("No translation returned from API", status=response.status_code)

        logger.debug(f"Translation result: '{translation[:50]}'")
        return translation

async def translate_sentences(translator: Translator, sentences: Sequence[str]) -> List[str]:
    """
    Translates every sentence concurrently.

    Args:
        translator: Translator used for each sentence.
        sentences: Sentences in index order.

    Returns:
        Translations aligned with `sentences` by position.

    Raises:
        TranslationError: The error of the lowest-index sentence that failed.
    """
    logger.info(f"Translating {len(sentences)} sentence(s)...")
    results = await asyncio.gather(
        *(translator.translate(sentence) for sentence in sentences),
        return_exceptions=True,
    )

    for index, result in enumerate(results, start=1):
        if isinstance(result, TranslationError):
            result.index = index
            logger.error(f"Translation of sentence {index} failed: {result}")
            raise result
        if isinstance(result, Exception):
            logger.error(f"Unexpected error translating sentence {index}: {result}", exc_info=result)
            raise TranslationError(f"Unexpected translation error: {result}", index=index) from result
        if isinstance(result, BaseException):
            raise result

    logger.info(f"Translation completed for {len(results)} sentence(s)")
    return list(results)
