"""The message-generation pipeline shared by every transport."""

import logging
from typing import Iterable, Optional

from .context import ContextBuilder
from .errors import (
    EmptyResponseError,
    GenerationError,
    NotConfiguredError,
    classify_backend_error,
)
from .extract import ResponseExtractor
from .llm import LLM
from .models import (
    ConversationTurn,
    GenerationFailure,
    GenerationRequest,
    GenerationResult,
    GenerationSuccess,
)
from .rate_limit import RateLimiter

logger = logging.getLogger(__name__)


class GenerationService:
    """Orchestrates admission, context assembly, the backend call and extraction.

    Every failure is translated here, once, into a ``GenerationFailure`` so
    that all transports report the same failure kinds.
    """

    def __init__(
        self,
        llm: Optional[LLM] = None,
        limiter: Optional[RateLimiter] = None,
        context_builder: Optional[ContextBuilder] = None,
        extractor: Optional[ResponseExtractor] = None,
    ):
        self.llm = llm
        self.limiter = limiter if limiter is not None else RateLimiter()
        self.context_builder = (
            context_builder if context_builder is not None else ContextBuilder()
        )
        self.extractor = extractor if extractor is not None else ResponseExtractor()

    @property
    def is_configured(self) -> bool:
        return self.llm is not None

    def generate(self, request: GenerationRequest) -> GenerationResult:
        try:
            text = self._generate_text(request.user_message, request.history)
        except GenerationError as e:
            return e.to_failure()
        return GenerationSuccess(text=text)

    def reply(
        self, user_message: str, history: Iterable[ConversationTurn] = ()
    ) -> GenerationResult:
        """Convenience wrapper for callers holding an unwrapped message."""
        return self.generate(
            GenerationRequest(user_message=user_message, history=list(history))
        )

    def _generate_text(self, user_message: str, history) -> str:
        if self.llm is None:
            raise NotConfiguredError()

        self.limiter.admit()
        prompt = self.context_builder.build(history, user_message)

        try:
            raw = self.llm.complete(prompt)
        except Exception as e:
            error = classify_backend_error(e)
            logger.error(
                "Generation error (%s): %s", error.kind.value, e, exc_info=True
            )
            raise error from e

        text = self.extractor.extract(raw)
        if text is None:
            logger.error("No text in generation result: %r", raw)
            raise EmptyResponseError()
        return text.strip()


def failure_for(exc: BaseException) -> GenerationFailure:
    """Classifies an exception raised outside ``generate`` into a failure."""
    return classify_backend_error(exc).to_failure()
