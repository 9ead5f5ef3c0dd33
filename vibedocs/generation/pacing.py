"""
调度节奏策略：用显式参数代替散落在循环里的 sleep

- 成功后等待 min_interval，避免连续请求触发服务商限流
- 限流失败后等待 rate_limit_backoff，给配额恢复时间
- sleep 可注入，测试中用假时钟记录等待而不真正阻塞
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from vibedocs.config import get_settings
from vibedocs.llm.errors import RateLimitError

settings = get_settings()


@dataclass
class PacingPolicy:
    """批次内串行调用的间隔策略"""

    min_interval: float = field(default_factory=lambda: settings.GENERATION_PACING_DELAY)
    rate_limit_backoff: float = field(default_factory=lambda: settings.GENERATION_RATE_LIMIT_DELAY)
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    async def after_success(self) -> None:
        if self.min_interval > 0:
            await self.sleep(self.min_interval)

    async def after_failure(self, error: Exception) -> None:
        # 非限流错误立即进入下一个文档
        if isinstance(error, RateLimitError) and self.rate_limit_backoff > 0:
            await self.sleep(self.rate_limit_backoff)
