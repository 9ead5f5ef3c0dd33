"""
设计系统数据结构：从网页样式采样推断出的设计令牌

对项目核心来说这是一个不透明值，只负责挂到 Project 上。
"""

from datetime import datetime
from typing import Literal

from pydantic import Field

from vibedocs.schemas import CamelModel

ComponentType = Literal["button", "card", "input", "badge", "link"]


class TextColors(CamelModel):
    primary: str
    secondary: str
    muted: str


class ColorPalette(CamelModel):
    primary: str
    secondary: str
    accent: str
    background: str
    surface: str
    text: TextColors
    border: str
    error: str
    success: str
    warning: str


class FontFamilies(CamelModel):
    heading: str
    body: str
    mono: str


class Typography(CamelModel):
    font_family: FontFamilies
    # 键名是 xs / 2xl 之类的刻度名，不做 camelCase 转换
    font_size: dict[str, str]
    font_weight: dict[str, int]
    line_height: dict[str, str]


class SpacingSystem(CamelModel):
    base: int
    scale: list[int]
    container: dict[str, str]


class EffectSystem(CamelModel):
    border_radius: dict[str, str]
    shadow: dict[str, str]
    transition: dict[str, str]


class ComponentStyles(CamelModel):
    background_color: str | None = None
    color: str | None = None
    border_radius: str | None = None
    padding: str | None = None
    font_size: str | None = None
    font_weight: str | None = None
    border: str | None = None
    box_shadow: str | None = None


class ExtractedComponent(CamelModel):
    type: ComponentType
    count: int
    styles: ComponentStyles
    variants: list[str] = Field(default_factory=list)


class DesignSystem(CamelModel):
    source_url: str
    extracted_at: datetime
    colors: ColorPalette
    typography: Typography
    spacing: SpacingSystem
    effects: EffectSystem
    components: list[ExtractedComponent] | None = None


class ExtractOptions(CamelModel):
    """提取选项：components=True 时附带组件样式样本"""

    components: bool = False
