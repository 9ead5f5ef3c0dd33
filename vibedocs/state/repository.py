"""
客户端状态仓库：按客户端 ID 把三个持久化记录存进 Redis

每个记录是一个整体 JSON 字符串（vd:state:{client_id}:{record}），读命中和写入都刷新 TTL。
这是会话缓存而非数据库：记录过期即视为全新客户端。
"""

import json
from collections.abc import Callable
from typing import TypeVar

import redis.asyncio as aioredis
import structlog
from pydantic import ValidationError

from vibedocs.cache.redis_client import RedisKeys
from vibedocs.config import get_settings
from vibedocs.state.schemas import (
    PROJECT_RECORD,
    SETTINGS_RECORD,
    WORKFLOW_RECORD,
    ProjectsBundle,
    UserSettings,
    WorkflowState,
)
from vibedocs.state.serializer import (
    bundle_from_persisted,
    bundle_to_persisted,
    settings_from_persisted,
    settings_to_persisted,
    workflow_from_persisted,
    workflow_to_persisted,
)

log = structlog.get_logger()
settings = get_settings()

T = TypeVar("T")


class ClientStateRepository:
    """单个客户端的持久化记录读写"""

    def __init__(self, redis: aioredis.Redis, client_id: str, ttl: int | None = None):
        self.redis = redis
        self.client_id = client_id
        self.ttl = ttl or settings.CLIENT_STATE_TTL

    def _key(self, record: str) -> str:
        return RedisKeys.client_state(self.client_id, record)

    # ── 原始记录 ──

    async def read_raw(self, record: str) -> dict | None:
        key = self._key(record)
        raw = await self.redis.get(key)
        if not raw:
            return None
        await self.redis.expire(key, self.ttl)
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            # 损坏的记录按不存在处理，下次写入时覆盖
            log.warning("持久化记录解析失败", record=record, client_id=self.client_id, error=str(e))
            return None
        return data if isinstance(data, dict) else None

    async def write_raw(self, record: str, payload: dict) -> None:
        await self.redis.set(
            self._key(record),
            json.dumps(payload, ensure_ascii=False),
            ex=self.ttl,
        )

    async def delete(self, record: str) -> None:
        await self.redis.delete(self._key(record))

    async def _load(self, record: str, restore: Callable[[dict | None], T]) -> T:
        payload = await self.read_raw(record)
        try:
            return restore(payload)
        except ValidationError as e:
            # 结构不符（如旧版状态值）与 JSON 损坏同样按空记录处理
            log.warning(
                "持久化记录校验失败",
                record=record,
                client_id=self.client_id,
                errors=e.error_count(),
            )
            return restore(None)

    # ── 项目 ──

    async def load_projects(self) -> ProjectsBundle:
        return await self._load(PROJECT_RECORD, bundle_from_persisted)

    async def save_projects(self, bundle: ProjectsBundle) -> None:
        await self.write_raw(PROJECT_RECORD, bundle_to_persisted(bundle))

    # ── 设置 ──

    async def load_settings(self) -> UserSettings:
        return await self._load(SETTINGS_RECORD, settings_from_persisted)

    async def save_settings(self, user_settings: UserSettings) -> None:
        await self.write_raw(SETTINGS_RECORD, settings_to_persisted(user_settings))

    # ── 工作流 ──

    async def load_workflow(self) -> WorkflowState:
        return await self._load(WORKFLOW_RECORD, workflow_from_persisted)

    async def save_workflow(self, state: WorkflowState) -> None:
        await self.write_raw(WORKFLOW_RECORD, workflow_to_persisted(state))
