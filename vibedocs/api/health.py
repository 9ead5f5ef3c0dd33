"""
探活：Redis 只影响客户端状态接口，不可用时标记 degraded 而非失败
"""

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends

from vibedocs.cache.redis_client import get_redis, ping_redis

router = APIRouter(tags=["健康检查"])


@router.get("/health")
async def health_check(redis: aioredis.Redis = Depends(get_redis)):
    error = await ping_redis(redis)
    if error:
        return {"status": "degraded", "redis": f"error: {error}"}
    return {"status": "ok", "redis": "ok"}
