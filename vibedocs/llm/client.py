"""
LLM 网关：对 Gemini 生成接口的轻量封装（经 LiteLLM 调用）

每次调用都使用调用方提供的 API Key 和模型 ID，网关自身不保存任何"当前模型"状态。
服务商不保证返回结构化错误码，错误分类先看 LiteLLM 异常类型，再看错误文本特征。
"""

import time

import structlog
from litellm import acompletion
from litellm.exceptions import (
    APIConnectionError,
    AuthenticationError,
    NotFoundError as LiteLLMNotFoundError,
    PermissionDeniedError as LiteLLMPermissionDeniedError,
    RateLimitError as LiteLLMRateLimitError,
    Timeout,
)

from vibedocs.config import get_settings
from vibedocs.llm.errors import (
    AuthError,
    LLMError,
    NotFoundError,
    PermissionDeniedError,
    ProviderError,
    RateLimitError,
)
from vibedocs.observability.metrics import ERROR_TOTAL, LLM_CALL_DURATION, LLM_CALL_TOTAL

log = structlog.get_logger()
settings = get_settings()

# 错误文本特征（按优先级匹配，统一转小写比较）
_RATE_LIMIT_MARKERS = ("429", "quota", "rate_limit", "rate limit", "resource_exhausted")
_AUTH_MARKERS = ("api_key_invalid", "api key not valid", "invalid api key", "401")
_PERMISSION_MARKERS = ("403", "permission_denied", "permission")
_NOT_FOUND_MARKERS = ("404", "not found", "not_found")

_ERROR_TYPE_LABELS = {
    AuthError: "auth",
    PermissionDeniedError: "permission",
    RateLimitError: "rate_limit",
    NotFoundError: "not_found",
    ProviderError: "provider",
}


def classify_error(error: Exception) -> LLMError:
    """把服务商异常映射到应用级错误分类"""
    if isinstance(error, LLMError):
        return error

    message = str(error)
    lowered = message.lower()

    if isinstance(error, LiteLLMRateLimitError) or any(m in lowered for m in _RATE_LIMIT_MARKERS):
        return RateLimitError(f"할당량 초과 - 잠시 후 다시 시도하세요: {message[:200]}", cause=error)
    if isinstance(error, AuthenticationError) or any(m in lowered for m in _AUTH_MARKERS):
        return AuthError(f"API 키가 유효하지 않습니다: {message[:200]}", cause=error)
    if isinstance(error, LiteLLMPermissionDeniedError) or any(m in lowered for m in _PERMISSION_MARKERS):
        return PermissionDeniedError(
            "API 접근 권한이 없습니다. Google Cloud Console에서 "
            "Generative Language API를 활성화하세요.",
            cause=error,
        )
    if isinstance(error, LiteLLMNotFoundError) or any(m in lowered for m in _NOT_FOUND_MARKERS):
        return NotFoundError(f"모델을 찾을 수 없습니다: {message[:200]}", cause=error)
    if isinstance(error, Timeout):
        return ProviderError(f"LLM 호출 시간 초과（{settings.LLM_TIMEOUT}s）", cause=error)
    if isinstance(error, APIConnectionError):
        return ProviderError(f"LLM 서비스 연결 실패: {message[:200]}", cause=error)
    return ProviderError(message[:200] or error.__class__.__name__, cause=error)


def compose_prompt(prompt: str, system_prompt: str | None = None) -> str:
    """系统前导 + 主提示词，以空行分隔"""
    if system_prompt:
        return f"{system_prompt}\n\n{prompt}"
    return prompt


class LLMGateway:
    """统一 LLM 调用入口"""

    def __init__(
        self,
        provider_prefix: str | None = None,
        timeout: int | None = None,
        max_tokens: int | None = None,
    ):
        self.provider_prefix = provider_prefix or settings.LLM_PROVIDER_PREFIX
        self.timeout = timeout or settings.LLM_TIMEOUT
        self.max_tokens = max_tokens or settings.LLM_MAX_TOKENS

    def _litellm_model(self, model: str) -> str:
        if "/" in model:
            return model
        return f"{self.provider_prefix}/{model}"

    async def generate(
        self,
        api_key: str,
        prompt: str,
        system_prompt: str | None = None,
        model: str | None = None,
        purpose: str = "generate",
        temperature: float = 0.7,
    ) -> str:
        """
        发起一次生成调用，返回原始文本。

        Args:
            api_key: 调用方的服务商 API Key
            prompt: 主提示词
            system_prompt: 可选系统前导，拼接在主提示词之前
            model: 模型 ID（如 gemini-2.5-flash），不传用默认模型
            purpose: 指标标签（validate/document/extension/analysis/generate）

        Raises:
            AuthError / PermissionDeniedError / RateLimitError / NotFoundError / ProviderError
        """
        use_model = model or settings.LLM_DEFAULT_MODEL
        full_prompt = compose_prompt(prompt, system_prompt)

        LLM_CALL_TOTAL.labels(model=use_model, purpose=purpose).inc()
        log.debug("LLM 调用开始", model=use_model, purpose=purpose, prompt_chars=len(full_prompt))

        start = time.monotonic()
        try:
            response = await acompletion(
                model=self._litellm_model(use_model),
                messages=[{"role": "user", "content": full_prompt}],
                api_key=api_key,
                temperature=temperature,
                max_tokens=self.max_tokens,
                timeout=self.timeout,
            )
        except Exception as e:
            mapped = classify_error(e)
            ERROR_TOTAL.labels(error_type=_ERROR_TYPE_LABELS.get(type(mapped), "provider")).inc()
            log.warning(
                "LLM 调用失败",
                model=use_model,
                purpose=purpose,
                error_type=type(mapped).__name__,
                error=str(e)[:300],
            )
            raise mapped from e
        finally:
            LLM_CALL_DURATION.labels(model=use_model, purpose=purpose).observe(
                (time.monotonic() - start) * 1000
            )

        choice = response.choices[0] if response.choices else None
        text = (choice.message.content if choice and choice.message else None) or ""

        log.debug(
            "LLM 调用完成",
            model=use_model,
            purpose=purpose,
            chars=len(text),
            finish_reason=choice.finish_reason if choice else None,
        )
        return text
