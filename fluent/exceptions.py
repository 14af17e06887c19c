"""
Exception hierarchy for the Fluent learning pipeline
"""


class FluentError(Exception):
    """Base class for pipeline errors"""


class ProviderUnavailable(FluentError):
    """A single translation provider produced no usable result"""

    def __init__(self, provider: str, reason: str):
        super().__init__(f"{provider}: {reason}")
        self.provider = provider
        self.reason = reason


class TranslationExhausted(FluentError):
    """Every provider in the fallback chain failed for a text"""


class TaggingError(FluentError):
    """Part-of-speech tagging could not be performed"""


class InvalidRatingError(FluentError, ValueError):
    """Review rating outside of again/hard/good/easy"""


class EntryNotFoundError(FluentError, KeyError):
    """Dictionary entry does not exist for the learner"""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "entry not found"
