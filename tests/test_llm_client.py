"""Tests for the LiteLLM gateway and error classification."""

import asyncio
from types import SimpleNamespace

import pytest

from vibedocs.llm import client as llm_client
from vibedocs.llm.client import LLMGateway, classify_error, compose_prompt
from vibedocs.llm.errors import (
    AuthError,
    NotFoundError,
    PermissionDeniedError,
    ProviderError,
    RateLimitError,
)


def _response(text, finish_reason="stop"):
    message = SimpleNamespace(content=text)
    return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason=finish_reason)])


class TestClassifyError:
    @pytest.mark.parametrize(
        "message, expected",
        [
            ("429 Too Many Requests", RateLimitError),
            ("RESOURCE_EXHAUSTED: quota exceeded", RateLimitError),
            ("API_KEY_INVALID", AuthError),
            ("API key not valid. Please pass a valid API key.", AuthError),
            ("403 PERMISSION_DENIED", PermissionDeniedError),
            ("404 models/gemini-x is not found", NotFoundError),
            ("internal server error", ProviderError),
        ],
    )
    def test_text_markers(self, message, expected):
        assert isinstance(classify_error(Exception(message)), expected)

    def test_rate_limit_checked_before_permission(self):
        assert isinstance(classify_error(Exception("403 quota exhausted")), RateLimitError)

    def test_app_errors_pass_through(self):
        err = AuthError("bad")
        assert classify_error(err) is err

    def test_cause_is_kept(self):
        original = Exception("quota")
        assert classify_error(original).cause is original


class TestComposePrompt:
    def test_with_system_prompt(self):
        assert compose_prompt("body", "system") == "system\n\nbody"

    def test_without_system_prompt(self):
        assert compose_prompt("body") == "body"


class TestGateway:
    def test_passes_key_and_model(self, monkeypatch):
        captured = {}

        async def fake_acompletion(**kwargs):
            captured.update(kwargs)
            return _response("OK")

        monkeypatch.setattr(llm_client, "acompletion", fake_acompletion)
        gateway = LLMGateway(provider_prefix="gemini")

        text = asyncio.run(gateway.generate("AIzaKey", "hello", system_prompt="sys", model="gemini-2.5-pro"))

        assert text == "OK"
        assert captured["model"] == "gemini/gemini-2.5-pro"
        assert captured["api_key"] == "AIzaKey"
        assert captured["messages"] == [{"role": "user", "content": "sys\n\nhello"}]

    def test_empty_choice_returns_empty_text(self, monkeypatch):
        async def fake_acompletion(**kwargs):
            return SimpleNamespace(choices=[])

        monkeypatch.setattr(llm_client, "acompletion", fake_acompletion)
        assert asyncio.run(LLMGateway().generate("AIzaKey", "hi", model="gemini-2.5-flash")) == ""

    def test_provider_failure_is_mapped(self, monkeypatch):
        async def fake_acompletion(**kwargs):
            raise Exception("429 RESOURCE_EXHAUSTED")

        monkeypatch.setattr(llm_client, "acompletion", fake_acompletion)
        with pytest.raises(RateLimitError):
            asyncio.run(LLMGateway().generate("AIzaKey", "hi", model="gemini-2.5-flash"))

    def test_qualified_model_not_prefixed(self):
        assert LLMGateway(provider_prefix="gemini")._litellm_model("openai/gpt-4o") == "openai/gpt-4o"
