"""
FastAPI 依赖注入：无状态单例 + 按请求构造的客户端状态仓库

测试通过 app.dependency_overrides 替换网关、采样器与 Redis。
"""

import redis.asyncio as aioredis
from fastapi import Depends, Header

from vibedocs.cache.redis_client import get_redis
from vibedocs.design.sampler import HttpStyleSampler, PageStyleSampler
from vibedocs.generation.orchestrator import DocumentOrchestrator
from vibedocs.generation.pacing import PacingPolicy
from vibedocs.llm.client import LLMGateway
from vibedocs.llm.errors import InvalidInputError
from vibedocs.llm.key_validator import KeyValidator
from vibedocs.state.repository import ClientStateRepository
from vibedocs.todo.matcher import ProgressAnalyzer

# ── 单例组件（无状态，可复用） ──
_gateway = LLMGateway()
_sampler = HttpStyleSampler()


def get_gateway() -> LLMGateway:
    return _gateway


def get_pacing() -> PacingPolicy:
    return PacingPolicy()


def get_key_validator(gateway: LLMGateway = Depends(get_gateway)) -> KeyValidator:
    return KeyValidator(gateway)


def get_orchestrator(
    gateway: LLMGateway = Depends(get_gateway),
    pacing: PacingPolicy = Depends(get_pacing),
) -> DocumentOrchestrator:
    return DocumentOrchestrator(gateway, pacing)


def get_analyzer(gateway: LLMGateway = Depends(get_gateway)) -> ProgressAnalyzer:
    return ProgressAnalyzer(gateway)


def get_style_sampler() -> PageStyleSampler:
    return _sampler


def get_client_id(x_client_id: str | None = Header(default=None)) -> str:
    """客户端状态按 X-Client-ID 隔离，缺失时拒绝"""
    if not x_client_id or not x_client_id.strip():
        raise InvalidInputError("X-Client-ID header is required", field="X-Client-ID")
    return x_client_id.strip()


def get_state_repository(
    client_id: str = Depends(get_client_id),
    redis: aioredis.Redis = Depends(get_redis),
) -> ClientStateRepository:
    return ClientStateRepository(redis, client_id)
