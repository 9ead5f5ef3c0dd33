"""
API Key 校验：按优先级依次尝试候选模型

判定规则：
- 某模型返回非空文本            → 有效，记录该模型
- 某模型限流（RateLimitError）  → Key 有效（能通过认证才会被限流），仅该模型暂不可用
- AuthError / PermissionDenied → Key 级问题，换模型也无济于事，立即终止
- 其他错误                      → 记录后稍等片刻，尝试下一个模型

选中的模型通过返回值交给调用方，后续生成请求显式携带，不写入任何全局状态。
"""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from vibedocs.config import get_settings
from vibedocs.llm.client import LLMGateway
from vibedocs.llm.errors import (
    AuthError,
    InvalidInputError,
    LLMError,
    PermissionDeniedError,
    RateLimitError,
)
from vibedocs.schemas import CamelModel

log = structlog.get_logger()
settings = get_settings()

KEY_ISSUE_HINT = "https://aistudio.google.com/apikey 에서 새 API 키를 발급받으세요."
ALL_FAILED_HINT = (
    "API 키가 올바른지, Google Cloud Console에서 Generative Language API가 "
    "활성화되어 있는지 확인하세요."
)
RATE_LIMITED_WARNING = "할당량 초과로 잠시 후 사용 가능합니다. API 키는 유효합니다."

_PING_PROMPT = 'Say "OK"'
ALL_FAILED_CODE = "all_models_failed"


class ModelAttempt(CamelModel):
    """单个模型的失败记录"""

    model: str
    error: str


class ValidationResult(CamelModel):
    """Key 校验结果"""

    valid: bool
    model: str | None = None
    warning: str | None = None
    rate_limited: bool = False
    error: str | None = None
    error_code: str | None = None
    hint: str | None = None
    details: list[ModelAttempt] | None = None


def check_key_format(api_key: str | None, prefix: str | None = None) -> str:
    """格式预检：不合规的 Key 在发起任何网络请求前就拒绝"""
    prefix = prefix or settings.API_KEY_PREFIX
    if not api_key or not isinstance(api_key, str) or not api_key.strip():
        raise InvalidInputError("API key is required", field="apiKey")
    api_key = api_key.strip()
    if not api_key.startswith(prefix):
        raise InvalidInputError(
            f'Invalid API key format. Google AI API keys start with "{prefix}"',
            field="apiKey",
        )
    return api_key


class KeyValidator:
    """按模型优先级列表校验 API Key"""

    def __init__(
        self,
        gateway: LLMGateway,
        models: list[str] | None = None,
        retry_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.gateway = gateway
        self.models = list(models or settings.LLM_MODELS)
        self.retry_delay = settings.VALIDATE_RETRY_DELAY if retry_delay is None else retry_delay
        self._sleep = sleep

    async def validate(self, api_key: str) -> ValidationResult:
        """
        校验 API Key。

        Raises:
            InvalidInputError: Key 格式不合法（未发起任何调用）
        """
        api_key = check_key_format(api_key)
        attempts: list[ModelAttempt] = []

        for index, model in enumerate(self.models):
            log.info("尝试校验模型", model=model, step=f"{index + 1}/{len(self.models)}")
            try:
                text = await self.gateway.generate(
                    api_key, _PING_PROMPT, model=model, purpose="validate", temperature=0.0
                )
            except RateLimitError as e:
                log.warning("模型限流，但 Key 有效", model=model, error=str(e))
                return ValidationResult(
                    valid=True,
                    model=model,
                    warning=RATE_LIMITED_WARNING,
                    rate_limited=True,
                )
            except (AuthError, PermissionDeniedError) as e:
                log.warning("Key 级错误，终止校验", model=model, error_type=type(e).__name__)
                return ValidationResult(valid=False, error=str(e), error_code=e.code, hint=KEY_ISSUE_HINT)
            except LLMError as e:
                attempts.append(ModelAttempt(model=model, error=str(e)))
            else:
                if text:
                    log.info("Key 校验通过", model=model)
                    return ValidationResult(valid=True, model=model)
                attempts.append(ModelAttempt(model=model, error="empty response"))

            if index < len(self.models) - 1:
                await self._sleep(self.retry_delay)

        log.error("所有模型均校验失败", attempts=[a.model_dump() for a in attempts])
        return ValidationResult(
            valid=False,
            error="모든 모델 시도 실패",
            error_code=ALL_FAILED_CODE,
            details=attempts,
            hint=ALL_FAILED_HINT,
        )
