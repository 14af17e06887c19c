"""
Third-party translation providers

Every provider turns (text, source_lang, target_lang) into a translated
string or raises ProviderUnavailable. Network errors, non-success statuses,
empty bodies and malformed JSON are all reported the same way.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote

import httpx
from openai import AsyncOpenAI, OpenAIError

from .config import Settings
from .exceptions import ProviderUnavailable
from .languages import LANGUAGES

logger = logging.getLogger(__name__)


class TranslationProvider(ABC):
    """A single external translation service"""

    name: str = "provider"

    @abstractmethod
    async def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        """
        Translate text

        Raises:
            ProviderUnavailable: if no translation could be obtained
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class HttpTranslationProvider(TranslationProvider):
    """Provider reached over HTTP with httpx"""

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 5.0):
        self.client = client
        self.timeout = timeout

    async def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        try:
            if self.client is not None:
                response = await self._send(self.client, text, source_lang, target_lang)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await self._send(client, text, source_lang, target_lang)

            response.raise_for_status()
            if not response.content:
                raise ProviderUnavailable(self.name, "empty response body")
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderUnavailable(
                self.name, f"HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise ProviderUnavailable(self.name, f"request error: {type(e).__name__}") from e
        except ValueError as e:
            raise ProviderUnavailable(self.name, f"malformed JSON: {e}") from e

        if not isinstance(data, dict):
            raise ProviderUnavailable(self.name, f"unexpected payload type {type(data).__name__}")

        translation = self._extract(data)
        if not translation or not isinstance(translation, str):
            raise ProviderUnavailable(self.name, "no translation in response")
        return translation

    @abstractmethod
    async def _send(
        self, client: httpx.AsyncClient, text: str, source_lang: str, target_lang: str
    ) -> httpx.Response:
        """Issue the HTTP request"""

    @abstractmethod
    def _extract(self, data: dict[str, Any]) -> str | None:
        """Pull the translated text out of the JSON payload"""


class LingvaProvider(HttpTranslationProvider):
    """Lingva Translate (Google Translate front end)"""

    name = "lingva"

    def __init__(self, base_url: str, client: httpx.AsyncClient | None = None, timeout: float = 5.0):
        super().__init__(client, timeout)
        self.base_url = base_url.rstrip("/")

    async def _send(self, client, text, source_lang, target_lang):
        url = f"{self.base_url}/{source_lang}/{target_lang}/{quote(text, safe='')}"
        return await client.get(url)

    def _extract(self, data):
        return data.get("translation")


class MyMemoryProvider(HttpTranslationProvider):
    """MyMemory translation memory API"""

    name = "mymemory"

    def __init__(
        self,
        url: str,
        email: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5.0,
    ):
        super().__init__(client, timeout)
        self.url = url
        self.email = email

    async def _send(self, client, text, source_lang, target_lang):
        params = {"q": text, "langpair": f"{source_lang}|{target_lang}"}
        if self.email:
            params["de"] = self.email
        return await client.get(self.url, params=params)

    def _extract(self, data):
        # MyMemory reports errors in the body with HTTP 200
        if data.get("responseStatus") not in (200, "200"):
            logger.warning(f"MyMemory returned status {data.get('responseStatus')}")
            return None
        response_data = data.get("responseData") or {}
        return response_data.get("translatedText")


class LibreTranslateProvider(HttpTranslationProvider):
    """LibreTranslate instance"""

    name = "libretranslate"

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5.0,
    ):
        super().__init__(client, timeout)
        self.url = url
        self.api_key = api_key

    async def _send(self, client, text, source_lang, target_lang):
        payload = {"q": text, "source": source_lang, "target": target_lang, "format": "text"}
        if self.api_key:
            payload["api_key"] = self.api_key
        return await client.post(self.url, json=payload)

    def _extract(self, data):
        return data.get("translatedText")


class OpenAITranslationProvider(TranslationProvider):
    """Translates single words and short phrases with an OpenAI chat model"""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        max_tokens: int = 200,
        temperature: float = 1.0,
        timeout: float = 5.0,
    ):
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.request_count = 0

    async def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self._get_system_prompt()},
                    {"role": "user", "content": self._create_prompt(text, source_lang, target_lang)},
                ],
                max_completion_tokens=self.max_tokens,
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            raise ProviderUnavailable(self.name, f"API error: {e}") from e

        self.request_count += 1

        if not response.choices:
            raise ProviderUnavailable(self.name, "no response choices")

        content = response.choices[0].message.content
        if not content:
            logger.debug(f"Finish reason: {response.choices[0].finish_reason}")
            raise ProviderUnavailable(self.name, "empty response content")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.debug(f"Response content: {content}")
            raise ProviderUnavailable(self.name, f"malformed JSON: {e}") from e

        translation = data.get("translation") if isinstance(data, dict) else None
        if not translation or not isinstance(translation, str):
            raise ProviderUnavailable(self.name, "no translation in response")
        return translation.strip()

    def _get_system_prompt(self) -> str:
        return """You are a translation engine for language learners.
Translate the given word or short phrase and respond with valid JSON only,
using exactly one key:
- "translation": the most common translation, written in the target language's native script

Do not add explanations, readings or alternatives."""

    def _create_prompt(self, text: str, source_lang: str, target_lang: str) -> str:
        source = LANGUAGES[source_lang].name if source_lang in LANGUAGES else source_lang
        target = LANGUAGES[target_lang].name if target_lang in LANGUAGES else target_lang
        return f"Translate from {source} to {target}: '{text}'"


def build_providers(
    settings: Settings, client: httpx.AsyncClient | None = None
) -> list[TranslationProvider]:
    """Instantiate providers in the configured priority order"""
    providers: list[TranslationProvider] = []
    timeout = settings.provider_timeout

    for name in settings.translation_provider_list:
        if name == "lingva":
            providers.append(LingvaProvider(settings.lingva_url, client=client, timeout=timeout))
        elif name == "mymemory":
            providers.append(
                MyMemoryProvider(
                    settings.mymemory_url,
                    email=settings.mymemory_email,
                    client=client,
                    timeout=timeout,
                )
            )
        elif name == "libretranslate":
            providers.append(
                LibreTranslateProvider(
                    settings.libretranslate_url,
                    api_key=settings.libretranslate_api_key,
                    client=client,
                    timeout=timeout,
                )
            )
        elif name == "openai":
            if not settings.openai_api_key:
                logger.info("OpenAI provider skipped: no API key configured")
                continue
            providers.append(
                OpenAITranslationProvider(
                    api_key=settings.openai_api_key,
                    model=settings.openai_model,
                    max_tokens=settings.openai_max_tokens,
                    temperature=settings.openai_temperature,
                    timeout=timeout,
                )
            )
        else:
            raise ValueError(f"Unknown translation provider: {name!r}")

    logger.info(f"Translation providers: {[p.name for p in providers]}")
    return providers
