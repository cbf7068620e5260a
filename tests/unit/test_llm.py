"""Tests for the generation backends."""

from unittest.mock import MagicMock, Mock, patch

import pytest
from gena import llm
from gena.config import Settings
from gena.errors import UnknownGenerationError


class TestLLMInterface:
    def test_llm_is_abstract(self):
        with pytest.raises(TypeError, match="Can't instantiate abstract class"):
            llm.LLM()

    def test_echo_answers_with_question(self):
        result = llm.Echo().complete("SYSTEM\n\nUser: old\n\n**Current Question:**\nUser: hello there\n\nAssistant: ")
        assert "hello there" in result["content"]
        assert "old" not in result["content"]


class TestClientBackend:
    """Capability resolution happens once, in a fixed priority order."""

    def test_generate_content_first(self):
        client = MagicMock()
        backend = llm.ClientBackend(client)

        backend.complete("prompt")

        assert backend.method_name == "generate_content"
        client.generate_content.assert_called_once_with("prompt")
        client.generate.assert_not_called()

    def test_camel_case_generate_content(self):
        client = Mock(spec=["generateContent"])
        backend = llm.ClientBackend(client)
        backend.complete("prompt")
        client.generateContent.assert_called_once_with("prompt")

    def test_generate_on_client(self):
        client = Mock(spec=["generate", "create"])
        backend = llm.ClientBackend(client, default_model="m")

        backend.complete("prompt")

        assert backend.method_name == "generate"
        client.generate.assert_called_once_with(model="m", input="prompt", temperature=0.7)
        client.create.assert_not_called()

    def test_create_on_client(self):
        client = Mock(spec=["create"])
        backend = llm.ClientBackend(client, default_model="m")

        backend.complete("prompt")

        client.create.assert_called_once_with(model="m", prompt="prompt", temperature=0.7)

    def test_generate_on_fallback(self):
        fallback = Mock(spec=["generate"])
        backend = llm.ClientBackend(Mock(spec=[]), fallback=fallback)

        backend.complete("prompt")

        assert backend.method_name == "fallback.generate"
        fallback.generate.assert_called_once_with("prompt")

    def test_no_capability(self):
        backend = llm.ClientBackend(Mock(spec=[]))

        assert backend.method_name is None
        with pytest.raises(UnknownGenerationError, match="No supported generation method"):
            backend.complete("prompt")

    def test_non_callable_attribute_is_ignored(self):
        client = Mock(spec=["generate_content", "generate"])
        client.generate_content = "not callable"
        backend = llm.ClientBackend(client)
        assert backend.method_name == "generate"


class TestFromSettings:
    def test_echo(self):
        backend = llm.from_settings(Settings(provider="echo"))
        assert isinstance(backend, llm.Echo)

    def test_gemini_without_key_is_not_configured(self):
        assert llm.from_settings(Settings(provider="gemini", api_key="")) is None

    def test_gemini_with_key(self):
        with patch("gena.llm.Gemini") as gemini:
            backend = llm.from_settings(
                Settings(provider="gemini", api_key="k", model="gemini-1.5-flash")
            )

        assert backend is gemini.return_value
        gemini.assert_called_once_with(
            api_key="k",
            default_model="gemini-1.5-flash",
            temperature=0.7,
            max_output_tokens=2048,
        )

    @pytest.mark.parametrize("provider, adapter", [("openai", "OpenAI"), ("anthropic", "Anthropic")])
    def test_google_key_is_not_passed_to_other_providers(self, provider, adapter):
        with patch(f"gena.llm.{adapter}") as backend_class:
            llm.from_settings(
                Settings(provider=provider, api_key="AIza-gemini-key", model="m")
            )

        backend_class.assert_called_once_with(
            default_model="m", temperature=0.7, max_output_tokens=2048
        )

    def test_client_failure_leaves_service_unconfigured(self):
        with patch("gena.llm.OpenAI", side_effect=ImportError("no openai")):
            assert llm.from_settings(Settings(provider="openai")) is None

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            llm.from_settings(Settings(provider="palm"))
