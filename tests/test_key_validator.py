"""Tests for multi-model API key validation."""

import asyncio

import pytest
from conftest import RecordingSleep, StubGateway

from vibedocs.llm.errors import AuthError, InvalidInputError, PermissionDeniedError, ProviderError, RateLimitError
from vibedocs.llm.key_validator import ALL_FAILED_CODE, KeyValidator, check_key_format

MODELS = ["model-a", "model-b", "model-c"]
KEY = "AIzaValidLookingKey"


def _validator(handler):
    gateway = StubGateway(handler)
    sleep = RecordingSleep()
    return KeyValidator(gateway, models=MODELS, retry_delay=0.3, sleep=sleep), gateway, sleep


def _fail_with(errors):
    """errors: model -> exception (or None for success)"""

    def handler(prompt, model):
        error = errors.get(model)
        if error is not None:
            raise error
        return "OK"

    return handler


class TestKeyFormat:
    def test_prefix_required(self):
        with pytest.raises(InvalidInputError) as exc_info:
            check_key_format("sk-123", prefix="AIza")
        assert exc_info.value.field == "apiKey"

    def test_blank_rejected(self):
        with pytest.raises(InvalidInputError):
            check_key_format("   ", prefix="AIza")

    def test_strips_whitespace(self):
        assert check_key_format("  AIzaX  ", prefix="AIza") == "AIzaX"

    def test_bad_format_makes_no_call(self):
        validator, gateway, _ = _validator(_fail_with({}))
        with pytest.raises(InvalidInputError):
            asyncio.run(validator.validate("not-a-key"))
        assert gateway.calls == []


class TestValidate:
    def test_first_model_succeeds(self):
        validator, gateway, sleep = _validator(_fail_with({}))
        result = asyncio.run(validator.validate(KEY))
        assert result.valid is True
        assert result.model == "model-a"
        assert len(gateway.calls) == 1
        assert gateway.calls[0]["purpose"] == "validate"
        assert sleep.delays == []

    def test_rate_limit_means_valid(self):
        validator, gateway, _ = _validator(_fail_with({"model-a": RateLimitError("429")}))
        result = asyncio.run(validator.validate(KEY))
        assert result.valid is True
        assert result.rate_limited is True
        assert result.model == "model-a"
        assert result.warning
        assert len(gateway.calls) == 1

    def test_auth_error_aborts(self):
        validator, gateway, _ = _validator(_fail_with({"model-a": AuthError("bad key")}))
        result = asyncio.run(validator.validate(KEY))
        assert result.valid is False
        assert result.error_code == "auth_error"
        assert result.hint
        assert len(gateway.calls) == 1

    def test_permission_denied_aborts(self):
        validator, gateway, _ = _validator(
            _fail_with({"model-a": ProviderError("x"), "model-b": PermissionDeniedError("no api")})
        )
        result = asyncio.run(validator.validate(KEY))
        assert result.error_code == "permission_denied"
        assert len(gateway.calls) == 2

    def test_falls_through_to_next_model(self):
        validator, gateway, sleep = _validator(_fail_with({"model-a": ProviderError("unavailable")}))
        result = asyncio.run(validator.validate(KEY))
        assert result.valid is True
        assert result.model == "model-b"
        assert sleep.delays == [0.3]

    def test_empty_response_tries_next(self):
        validator, _, _ = _validator(lambda prompt, model: "" if model == "model-a" else "OK")
        result = asyncio.run(validator.validate(KEY))
        assert result.model == "model-b"

    def test_all_models_fail(self):
        errors = {m: ProviderError(f"{m} down") for m in MODELS}
        validator, gateway, sleep = _validator(_fail_with(errors))
        result = asyncio.run(validator.validate(KEY))
        assert result.valid is False
        assert result.error_code == ALL_FAILED_CODE
        assert [(d.model, d.error) for d in result.details] == [(m, f"{m} down") for m in MODELS]
        assert sleep.delays == [0.3, 0.3]
        assert len(gateway.calls) == 3
