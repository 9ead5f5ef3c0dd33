"""
HTTP 指标中间件：按路由模板统计请求数与耗时
"""

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from vibedocs.observability.metrics import REQUEST_DURATION, REQUEST_TOTAL

_UNTRACKED = ("/metrics", "/health")


def route_template(request: Request) -> str:
    """/api/projects/{project_id}/load 这类模板做 label，未匹配路由统一归为 unmatched"""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path.startswith(_UNTRACKED):
            return await call_next(request)

        started = time.monotonic()
        response = await call_next(request)
        endpoint = route_template(request)

        REQUEST_TOTAL.labels(
            method=request.method, endpoint=endpoint, status_code=str(response.status_code)
        ).inc()
        REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(
            (time.monotonic() - started) * 1000
        )
        return response
