"""
请求上下文：trace_id / client_id 绑定到 structlog 的 contextvars，随协程传播
"""

import uuid

import structlog

ANONYMOUS_CLIENT = "anonymous"


def bind_request_context(trace_id: str | None, client_id: str | None) -> tuple[str, str]:
    """
    为当前请求建立上下文，返回实际使用的 (trace_id, client_id)。

    trace_id 缺失时新生成；先清空上下文，避免上一个请求的字段残留。
    """
    trace_id = trace_id or uuid.uuid4().hex
    client_id = (client_id or "").strip() or ANONYMOUS_CLIENT

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(trace_id=trace_id, client_id=client_id)
    return trace_id, client_id
