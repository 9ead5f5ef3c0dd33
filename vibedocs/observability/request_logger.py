"""
请求日志中间件：每个请求一条开始 / 一条结束日志，响应头回写 trace_id 与耗时
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from vibedocs.observability.context import bind_request_context

log = structlog.get_logger()

# 探活与指标抓取太频繁，不记日志
_QUIET_PATHS = ("/health", "/metrics")


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id, _ = bind_request_context(
            request.headers.get("X-Trace-ID"),
            request.headers.get("X-Client-ID"),
        )
        path = request.url.path
        quiet = path.startswith(_QUIET_PATHS)

        started = time.monotonic()
        if not quiet:
            log.info("请求开始", method=request.method, path=path)

        response = await call_next(request)
        elapsed_ms = int((time.monotonic() - started) * 1000)

        if not quiet:
            # 生成批次可能持续数十秒，5xx 单独提级便于检索
            emit = log.warning if response.status_code >= 500 else log.info
            emit("请求结束", method=request.method, path=path, status_code=response.status_code, duration_ms=elapsed_ms)

        response.headers["X-Trace-ID"] = trace_id
        response.headers["X-Duration-Ms"] = str(elapsed_ms)
        return response
