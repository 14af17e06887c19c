"""
Translation with caching, provider fallback and request coalescing
"""

import asyncio
import logging
import unicodedata
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import httpx

from .config import Settings, get_settings
from .exceptions import ProviderUnavailable, TranslationExhausted
from .translation_cache import (
    CacheKey,
    InMemoryTranslationCache,
    TranslationCache,
    TranslationCacheEntry,
    make_cache_key,
)
from .translation_providers import TranslationProvider, build_providers
from .utils import log_execution_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranslationResult:
    """Outcome of a translation request"""

    original: str
    translation: str | None
    ok: bool
    provider: str | None = None
    cached: bool = False

    def __iter__(self) -> Iterator:
        # Allows `translation, ok = await orchestrator.translate(...)`
        return iter((self.translation, self.ok))

    def unwrap(self) -> str:
        """Return the translation or raise TranslationExhausted"""
        if not self.ok or self.translation is None:
            raise TranslationExhausted(f"No provider could translate {self.original!r}")
        return self.translation


def is_acceptable_translation(candidate: str | None, original: str) -> bool:
    """
    Reject low-confidence pass-through results

    A candidate must be non-empty, longer than one character, differ from
    the input and contain something other than punctuation.
    """
    if not candidate or not isinstance(candidate, str):
        return False

    cleaned = candidate.strip()
    if len(cleaned) <= 1:
        return False

    if cleaned == original.strip():
        return False

    if all(unicodedata.category(char).startswith("P") or char.isspace() for char in cleaned):
        return False

    return True


class TranslationOrchestrator:
    """
    Resolves translations through an ordered provider chain.

    One instance is meant to be shared per event loop: concurrent requests for
    the same (text, source, target) key wait on a single in-flight resolution.
    """

    def __init__(
        self,
        providers: Sequence[TranslationProvider],
        cache: TranslationCache | None = None,
        provider_timeout: float = 5.0,
    ):
        self.providers = list(providers)
        self.cache = cache if cache is not None else InMemoryTranslationCache()
        self.provider_timeout = provider_timeout
        self._in_flight: dict[CacheKey, asyncio.Task] = {}

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, client: httpx.AsyncClient | None = None
    ) -> "TranslationOrchestrator":
        """Build an orchestrator with the configured providers and cache bound"""
        settings = settings or get_settings()
        return cls(
            providers=build_providers(settings, client=client),
            cache=InMemoryTranslationCache(max_entries=settings.translation_cache_max_entries),
            provider_timeout=settings.provider_timeout,
        )

    async def translate(
        self, text: str, source_lang: str = "en", target_lang: str = "ja"
    ) -> TranslationResult:
        """
        Translate text between languages

        Args:
            text: Word or phrase to translate
            source_lang: Source language code
            target_lang: Target language code

        Returns:
            TranslationResult; ok is False when every provider failed
        """
        text = (text or "").strip()
        if not text:
            return TranslationResult(original=text, translation=None, ok=False)

        key = make_cache_key(text, source_lang, target_lang)

        entry = self.cache.get(key)
        if entry is not None:
            logger.debug(f"Cache hit for: {text}")
            return TranslationResult(
                original=text,
                translation=entry.translation,
                ok=True,
                provider=entry.provider,
                cached=True,
            )

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.create_task(self._resolve(key))
            self._in_flight[key] = task
            task.add_done_callback(lambda done, k=key: self._forget(k, done))
        else:
            logger.debug(f"Joining in-flight translation for: {text}")

        # Shielded so a cancelled caller does not cancel the shared resolution
        entry = await asyncio.shield(task)

        if entry is None:
            return TranslationResult(original=text, translation=None, ok=False)

        return TranslationResult(
            original=text,
            translation=entry.translation,
            ok=True,
            provider=entry.provider,
        )

    async def translate_batch(
        self, texts: Sequence[str], source_lang: str = "en", target_lang: str = "ja"
    ) -> list[TranslationResult]:
        """Translate several texts concurrently, preserving input order"""
        return list(
            await asyncio.gather(
                *(self.translate(text, source_lang, target_lang) for text in texts)
            )
        )

    def in_flight_count(self) -> int:
        """Number of keys currently being resolved"""
        return len(self._in_flight)

    def _forget(self, key: CacheKey, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    @log_execution_time
    async def _resolve(self, key: CacheKey) -> TranslationCacheEntry | None:
        text, source_lang, target_lang = key

        for provider in self.providers:
            try:
                candidate = await asyncio.wait_for(
                    provider.translate(text, source_lang, target_lang),
                    timeout=self.provider_timeout,
                )
            except ProviderUnavailable as e:
                logger.warning(f"Provider {provider.name} unavailable for '{text}': {e.reason}")
                continue
            except asyncio.TimeoutError:
                logger.warning(
                    f"Provider {provider.name} timed out after {self.provider_timeout}s for '{text}'"
                )
                continue
            except Exception as e:
                logger.error(
                    f"Unexpected error from provider {provider.name} for '{text}': {e}",
                    exc_info=True,
                )
                continue

            if not is_acceptable_translation(candidate, text):
                logger.warning(
                    f"Rejected translation from {provider.name} for '{text}': {candidate!r}"
                )
                continue

            entry = self.cache.put_if_absent(
                key, TranslationCacheEntry(translation=candidate.strip(), provider=provider.name)
            )
            logger.info(f"Translated '{text}' ({source_lang}->{target_lang}) via {entry.provider}")
            return entry

        logger.warning(
            f"All {len(self.providers)} providers failed for '{text}' ({source_lang}->{target_lang})"
        )
        return None
