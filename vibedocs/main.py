"""
VibeDocs HTTP 服务入口

    uvicorn vibedocs.main:app --port 8000
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from vibedocs.api import design, generation, health, keys, llm, progress, projects, state, workflow
from vibedocs.api.errors import register_exception_handlers
from vibedocs.cache.redis_client import ping_redis, redis_client
from vibedocs.config import get_settings
from vibedocs.observability.logging_config import setup_logging
from vibedocs.observability.metrics_middleware import MetricsMiddleware
from vibedocs.observability.request_logger import RequestLoggerMiddleware

settings = get_settings()
setup_logging(env=settings.ENV)
log = structlog.get_logger()

_ROUTERS = (health, keys, llm, generation, progress, design, projects, state, workflow)


@asynccontextmanager
async def lifespan(application: FastAPI):
    log.info("服务启动", env=settings.ENV, models=settings.LLM_MODELS, default_model=settings.LLM_DEFAULT_MODEL)
    # 文档生成不依赖 Redis，连不上只告警
    if await ping_redis(redis_client) is None:
        log.info("Redis 连接正常", url=settings.REDIS_URL)
    yield
    await redis_client.aclose()
    log.info("服务关闭")


def create_app() -> FastAPI:
    application = FastAPI(title=settings.APP_NAME, version="0.1.0", lifespan=lifespan)

    # 后注册的先执行：请求日志包在指标外层，trace_id 对指标阶段也可见
    application.add_middleware(MetricsMiddleware)
    application.add_middleware(RequestLoggerMiddleware)

    register_exception_handlers(application)
    application.mount("/metrics", make_asgi_app())
    for module in _ROUTERS:
        application.include_router(module.router)
    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("vibedocs.main:app", host="0.0.0.0", port=settings.APP_PORT, reload=settings.ENV != "production")
