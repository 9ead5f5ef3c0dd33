"""
全局配置模块：通过 pydantic-settings 读取 .env 环境变量
"""

from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用全局配置，从 .env 文件加载"""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Redis（客户端状态快照） ──
    REDIS_URL: str = "redis://127.0.0.1:6379/0"
    REDIS_MAX_CONNECTIONS: int = 10
    CLIENT_STATE_TTL: int = 86400 * 30  # 客户端状态保留 30 天

    # ── LLM（Gemini，经 LiteLLM 调用） ──
    # 按优先级排列，Key 校验时依次尝试
    LLM_MODELS: list[str] = [
        "gemini-2.5-flash",
        "gemini-2.0-flash-exp",
        "gemini-1.5-flash",
        "gemini-pro",
    ]
    LLM_DEFAULT_MODEL: str = "gemini-2.5-flash"
    LLM_PROVIDER_PREFIX: str = "gemini"  # LiteLLM 格式：gemini/{model}
    LLM_TIMEOUT: int = 60  # 单次调用超时（秒）
    LLM_MAX_TOKENS: int = 8192
    API_KEY_PREFIX: str = "AIza"  # Google AI Studio Key 固定前缀

    # ── 调度节奏 ──
    VALIDATE_RETRY_DELAY: float = 0.3  # Key 校验时切换模型前的等待（秒）
    GENERATION_PACING_DELAY: float = 0.5  # 文档逐个生成的间隔（秒）
    GENERATION_RATE_LIMIT_DELAY: float = 2.0  # 命中限流后的恢复等待（秒）

    # ── 进度匹配 ──
    MATCH_MIN_CONFIDENCE: int = 50  # LLM 匹配结果的最低置信度
    MATCH_AUTO_SELECT_THRESHOLD: int = 70  # 前端预勾选阈值

    # ── 设计提取 ──
    DESIGN_FETCH_TIMEOUT: int = 30
    DESIGN_MAX_STYLESHEETS: int = 5

    # ── 应用 ──
    ENV: str = "development"  # development | production
    APP_NAME: str = "vibedocs"
    APP_PORT: int = 8000

    @model_validator(mode="after")
    def _check_default_model(self) -> "Settings":
        """默认模型必须在候选模型列表内，否则校验与生成会用到不同模型"""
        if not self.LLM_MODELS:
            raise ValueError("LLM_MODELS 不能为空")
        if self.LLM_DEFAULT_MODEL not in self.LLM_MODELS:
            raise ValueError(
                f"LLM_DEFAULT_MODEL={self.LLM_DEFAULT_MODEL} 不在 LLM_MODELS 中，"
                "请检查 .env 配置。"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """单例获取配置（带缓存）"""
    return Settings()
