"""
错误分类：LLM 网关及上层服务共用的异常体系

| 异常                  | 含义                                   | HTTP |
|-----------------------|----------------------------------------|------|
| InvalidInputError     | 必填字段缺失/格式错误，调用外部服务前拒绝 | 400  |
| AuthError             | API Key 被服务商拒绝                    | 401  |
| PermissionDeniedError | Key 有效但未开通 API 权限                | 403  |
| NotFoundError         | 请求的模型不可用                        | 404  |
| RateLimitError        | 配额耗尽/限流（说明 Key 本身有效）        | 429  |
| ProviderError         | 其他服务商侧错误                        | 502  |
| ParseError            | LLM 输出中没有期望的 JSON 结构           | 502  |
"""


class InvalidInputError(ValueError):
    """请求参数不合法，不做任何外部调用直接拒绝"""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class LLMError(Exception):
    """LLM 调用失败的应用级异常"""

    code = "provider_error"
    status_code = 502

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class AuthError(LLMError):
    code = "auth_error"
    status_code = 401


class PermissionDeniedError(LLMError):
    code = "permission_denied"
    status_code = 403


class NotFoundError(LLMError):
    code = "model_not_found"
    status_code = 404


class RateLimitError(LLMError):
    code = "rate_limited"
    status_code = 429


class ProviderError(LLMError):
    code = "provider_error"
    status_code = 502


class ParseError(LLMError):
    """LLM 返回文本无法解析为期望结构"""

    code = "parse_error"
    status_code = 502
