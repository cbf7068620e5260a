"""Generation backends: one ``complete(prompt)`` capability per provider."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from .errors import UnknownGenerationError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-1.5-flash"
PROVIDERS = ("gemini", "openai", "anthropic", "ollama", "echo")


class LLM(ABC):
    """Abstract Base Class for all generation backends."""

    model: str

    @abstractmethod
    def complete(self, prompt: str) -> Any:
        """Sends one prompt string to the provider.

        This method should return the provider's native, rich response object
        directly from their SDK. Turning it into text is the job of
        ``extract.ResponseExtractor``.

        Parameters
        ----------
        prompt : str
            The fully assembled context, ending with the assistant marker.

        Returns
        -------
        Any
            The provider's native response object.
        """
        pass


class Gemini(LLM):
    def __init__(
        self,
        api_key: str,
        default_model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        top_k: int = 40,
        top_p: float = 0.95,
        max_output_tokens: int = 2048,
    ):
        from google import genai
        from google.genai import types

        self.client = genai.Client(api_key=api_key)
        self.model = default_model
        self.config = types.GenerateContentConfig(
            temperature=temperature,
            top_k=top_k,
            top_p=top_p,
            max_output_tokens=max_output_tokens,
        )

    def complete(self, prompt: str) -> Any:
        return self.client.models.generate_content(
            model=self.model, contents=prompt, config=self.config
        )


class OpenAI(LLM):
    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_output_tokens: int = 2048,
    ):
        from openai import OpenAI

        self.client = OpenAI(api_key=api_key) if api_key else OpenAI()
        self.model = default_model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    def complete(self, prompt: str) -> Any:
        return self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
            max_tokens=self.max_output_tokens,
        )


class Anthropic(LLM):
    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "claude-3-5-sonnet-20241022",
        temperature: float = 0.7,
        max_output_tokens: int = 2048,
    ):
        from anthropic import Anthropic

        self.client = Anthropic(api_key=api_key) if api_key else Anthropic()
        self.model = default_model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    def complete(self, prompt: str) -> Any:
        return self.client.messages.create(
            model=self.model,
            max_tokens=self.max_output_tokens,
            temperature=self.temperature,
            messages=[{"role": "user", "content": prompt}],
        )


class Ollama(LLM):
    def __init__(self, default_model: str = "llama3.1", temperature: float = 0.7):
        from ollama import Client

        self.client = Client()
        self.model = default_model
        self.temperature = temperature

    def complete(self, prompt: str) -> Any:
        return self.client.chat(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            options={"temperature": self.temperature},
        )


class Echo(LLM):
    """Offline backend that answers with the tail of the prompt. Useful in tests."""

    def __init__(self, default_model: str = "echo-v1"):
        self.model = default_model

    def complete(self, prompt: str) -> Any:
        question = prompt.rsplit("User: ", 1)[-1].split("\n", 1)[0]
        return {
            "content": f"**Echo LLM - static response for testing**\n\n_Your prompt:_\n\n{question}",
            "raw_response": "Echo LLM - static response for testing",
        }


class ClientBackend(LLM):
    """Adapts an arbitrary SDK client whose generation method is not known upfront.

    The capability is resolved once, at construction, in this order:
    ``generate_content`` / ``generateContent`` on the client, ``generate`` on
    the client, ``create`` on the client, ``generate`` on the fallback client.
    """

    def __init__(
        self,
        client: Any,
        fallback: Any = None,
        default_model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
    ):
        self.client = client
        self.fallback = fallback
        self.model = default_model
        self.temperature = temperature
        self.method_name, self._call = self._resolve()

    def _resolve(self):
        for name in ("generate_content", "generateContent"):
            method = _capability(self.client, name)
            if method is not None:
                return name, method

        generate = _capability(self.client, "generate")
        if generate is not None:
            return "generate", lambda prompt: generate(
                model=self.model, input=prompt, temperature=self.temperature
            )

        create = _capability(self.client, "create")
        if create is not None:
            return "create", lambda prompt: create(
                model=self.model, prompt=prompt, temperature=self.temperature
            )

        fallback_generate = _capability(self.fallback, "generate")
        if fallback_generate is not None:
            return "fallback.generate", fallback_generate

        return None, None

    def complete(self, prompt: str) -> Any:
        if self._call is None:
            raise UnknownGenerationError(
                "No supported generation method available on the AI client"
            )
        return self._call(prompt)


def _capability(target: Any, name: str) -> Optional[Callable[..., Any]]:
    if target is None:
        return None
    method = getattr(target, name, None)
    return method if callable(method) else None


def from_settings(settings) -> Optional[LLM]:
    """Builds the configured backend, or returns ``None`` when it cannot be.

    A missing credential or an SDK that fails to load leaves the service
    unconfigured rather than stopping the server.
    """
    provider = settings.provider
    if provider not in PROVIDERS:
        raise ValueError(f"Unknown provider: {provider}")

    try:
        if provider == "echo":
            backend: LLM = Echo()
        elif provider == "ollama":
            backend = Ollama(
                default_model=settings.model, temperature=settings.temperature
            )
        elif not settings.api_key and provider == "gemini":
            logger.warning(
                "GEMINI_API_KEY / GENAI_API_KEY / GOOGLE_API_KEY not set; "
                "the AI service is not configured"
            )
            return None
        elif provider == "gemini":
            backend = Gemini(
                api_key=settings.api_key,
                default_model=settings.model,
                temperature=settings.temperature,
                max_output_tokens=settings.max_output_tokens,
            )
        elif provider == "openai":
            backend = OpenAI(
                default_model=settings.model,
                temperature=settings.temperature,
                max_output_tokens=settings.max_output_tokens,
            )
        else:
            backend = Anthropic(
                default_model=settings.model,
                temperature=settings.temperature,
                max_output_tokens=settings.max_output_tokens,
            )
    except Exception as e:
        logger.warning("Generative AI client for %r failed to load: %s", provider, e)
        return None

    logger.info("Generative AI client initialized (%s, model=%s)", provider, backend.model)
    return backend
