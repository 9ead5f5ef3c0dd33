"""
Redis 连接：客户端状态记录的唯一存储

模块导入时只建连接池，不发起连接；不可用时由 ping_redis 报告，文档生成照常工作。
"""

import redis.asyncio as aioredis
import structlog

from vibedocs.config import get_settings

log = structlog.get_logger()
settings = get_settings()

KEY_PREFIX = "vd"


class RedisKeys:
    """{前缀}:{资源}:{客户端}:{记录名}"""

    @staticmethod
    def client_state(client_id: str, record: str) -> str:
        return f"{KEY_PREFIX}:state:{client_id}:{record}"


def build_client(url: str | None = None) -> aioredis.Redis:
    pool = aioredis.ConnectionPool.from_url(
        url or settings.REDIS_URL,
        max_connections=settings.REDIS_MAX_CONNECTIONS,
        decode_responses=True,
        socket_timeout=5,
        socket_connect_timeout=5,
    )
    return aioredis.Redis(connection_pool=pool)


redis_client = build_client()


async def get_redis() -> aioredis.Redis:
    return redis_client


async def ping_redis(client: aioredis.Redis) -> str | None:
    """连通返回 None，否则返回错误描述"""
    try:
        await client.ping()
    except Exception as e:
        log.warning("Redis 不可用", error=str(e))
        return str(e) or type(e).__name__
    return None
