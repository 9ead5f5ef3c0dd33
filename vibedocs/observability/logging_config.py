"""
structlog 配置

development：彩色控制台，DEBUG（能看到逐个文档的生成过程）
production：单行 JSON，INFO
"""

import logging
import sys

import structlog

# 第三方库的标准库 logger，只保留告警以上
_NOISY_LOGGERS = ("LiteLLM", "httpx", "httpcore")


def _renderer(env: str):
    if env == "production":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging(env: str = "development") -> None:
    production = env == "production"
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if production:
        processors.append(structlog.processors.format_exc_info)
    processors.append(_renderer(env))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO if production else logging.DEBUG),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(name)s %(levelname)s %(message)s", stream=sys.stdout, level=logging.INFO)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
