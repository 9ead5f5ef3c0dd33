"""
设计提取入口：URL 校验 → 样式采样 → 组装 DesignSystem
"""

from urllib.parse import urlparse

import structlog

from vibedocs.design.builder import build_design_system
from vibedocs.design.sampler import HttpStyleSampler, PageStyleSampler
from vibedocs.design.schemas import DesignSystem, ExtractOptions
from vibedocs.llm.errors import InvalidInputError

log = structlog.get_logger()


def validate_url(url: str | None) -> str:
    if not url or not isinstance(url, str):
        raise InvalidInputError("URL is required", field="url")
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidInputError("Invalid URL format", field="url")
    return url.strip()


async def extract_design(
    url: str,
    options: ExtractOptions | None = None,
    sampler: PageStyleSampler | None = None,
) -> DesignSystem:
    """
    Raises:
        InvalidInputError: URL 缺失或格式错误
        DesignExtractionError: 页面无法访问
    """
    url = validate_url(url)
    options = options or ExtractOptions()
    sampler = sampler or HttpStyleSampler()

    log.info("开始提取设计系统", url=url, components=options.components)
    samples = await sampler.sample(url)
    design = build_design_system(url, samples, include_components=options.components)
    log.info("设计系统提取完成", url=url, primary=design.colors.primary)
    return design
