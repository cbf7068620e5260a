"""Exceptions raised inside the generation pipeline and the upstream error classifier."""

import math
import re
from typing import Callable, List, Optional, Pattern, Tuple

from .models import FailureKind, GenerationFailure

DEFAULT_QUOTA_WAIT_SECONDS = 60

_RETRY_DELAY = re.compile(r"retry in (\d+(?:\.\d+)?)s")


class GenerationError(Exception):
    """Base class for failures that map onto the stable failure taxonomy."""

    kind: FailureKind = FailureKind.UNKNOWN

    def __init__(self, message: str, retry_after: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.retry_after = retry_after

    def to_failure(self) -> GenerationFailure:
        return GenerationFailure(
            kind=self.kind, message=self.message, retry_after=self.retry_after
        )


class NotConfiguredError(GenerationError):
    """No generation backend is available (missing credential or client)."""

    kind = FailureKind.NOT_CONFIGURED

    def __init__(
        self,
        message: str = "Generative AI service not configured. Please check your API key.",
    ):
        super().__init__(message)


class RateLimitedError(GenerationError):
    kind = FailureKind.RATE_LIMITED

    def __init__(self, message: str, wait_seconds: Optional[int] = None):
        super().__init__(message, retry_after=wait_seconds)

    @property
    def wait_seconds(self) -> Optional[int]:
        return self.retry_after


class QuotaExceededError(GenerationError):
    kind = FailureKind.QUOTA_EXCEEDED

    def __init__(self, wait_seconds: int = DEFAULT_QUOTA_WAIT_SECONDS):
        super().__init__(
            f"API quota exceeded. Please wait {wait_seconds} seconds and try again. "
            "Consider using shorter messages to reduce token usage.",
            retry_after=wait_seconds,
        )

    @property
    def wait_seconds(self) -> int:
        return self.retry_after


class EmptyResponseError(GenerationError):
    kind = FailureKind.EMPTY

    def __init__(self, message: str = "No text response from Generative AI"):
        super().__init__(message)


class UnknownGenerationError(GenerationError):
    kind = FailureKind.UNKNOWN


def parse_retry_delay(text: str) -> int:
    """Returns the provider's ``retry in <n>s`` hint rounded up, or the default."""
    match = _RETRY_DELAY.search(text)
    if not match:
        return DEFAULT_QUOTA_WAIT_SECONDS
    return math.ceil(float(match.group(1)))


def _quota_exceeded(text: str) -> GenerationError:
    return QuotaExceededError(parse_retry_delay(text))


def _rate_limited(text: str) -> GenerationError:
    return RateLimitedError("Too many requests. Please wait a moment and try again.")


ClassifierRule = Tuple[Pattern[str], Callable[[str], GenerationError]]

ERROR_RULES: List[ClassifierRule] = [
    (re.compile(r"Quota exceeded"), _quota_exceeded),
    (re.compile(r"RESOURCE_EXHAUSTED"), _quota_exceeded),
    (re.compile(r"Rate limit"), _rate_limited),
]


def classify_backend_error(
    exc: BaseException, rules: Optional[List[ClassifierRule]] = None
) -> GenerationError:
    """Maps an arbitrary upstream exception onto the failure taxonomy.

    Errors that are already ``GenerationError`` instances pass through
    unchanged. Otherwise the first matching rule wins; unmatched errors
    collapse to ``UnknownGenerationError`` carrying the original text.
    """
    if isinstance(exc, GenerationError):
        return exc

    text = str(exc)
    for pattern, build in rules if rules is not None else ERROR_RULES:
        if pattern.search(text):
            return build(text)
    return UnknownGenerationError(f"Failed to generate response: {text}")
