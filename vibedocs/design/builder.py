"""
设计系统组装：把样式样本整理成调色板 / 字体 / 间距 / 效果 / 组件

样本缺失时一律回退到固定默认值，保证返回的 DesignSystem 字段齐全。
语义色（error / success / warning）是固定常量，不从页面推断。
"""

import colorsys
import re
from datetime import datetime, timezone

from vibedocs.design.sampler import ComponentSample, StyleSamples
from vibedocs.design.schemas import (
    ColorPalette,
    ComponentStyles,
    DesignSystem,
    EffectSystem,
    ExtractedComponent,
    FontFamilies,
    SpacingSystem,
    TextColors,
    Typography,
)

DEFAULT_PRIMARY = "#3b82f6"
ERROR_COLOR = "#ef4444"
SUCCESS_COLOR = "#22c55e"
WARNING_COLOR = "#f59e0b"

SIZE_NAMES = ("xs", "sm", "base", "lg", "xl", "2xl", "3xl", "4xl")
DEFAULT_FONT_SIZES = {
    "xs": "12px",
    "sm": "14px",
    "base": "16px",
    "lg": "18px",
    "xl": "20px",
    "2xl": "24px",
    "3xl": "30px",
    "4xl": "36px",
}
DEFAULT_RADII = ("0px", "2px", "4px", "8px", "12px")
MAX_VARIANTS = 5

_HEX6_RE = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)


# ── 颜色工具 ──


def hex_to_rgb(value: str) -> tuple[int, int, int] | None:
    m = _HEX6_RE.match(value or "")
    if not m:
        return None
    return tuple(int(m.group(i), 16) for i in (1, 2, 3))


def is_neutral(value: str) -> bool:
    """低饱和度（RGB 通道差 < 30）视为灰阶"""
    rgb = hex_to_rgb(value)
    if rgb is None:
        return False
    return max(rgb) - min(rgb) < 30


def is_light(value: str) -> bool:
    rgb = hex_to_rgb(value)
    if rgb is None:
        return True
    r, g, b = rgb
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255 > 0.5


def adjust_hue(value: str, degrees: float) -> str:
    """HSL 色相旋转，亮度与饱和度不变"""
    rgb = hex_to_rgb(value)
    if rgb is None:
        return value
    h, l, s = colorsys.rgb_to_hls(*(c / 255 for c in rgb))
    h = (h + degrees / 360) % 1
    r, g, b = (int(round(c * 255)) for c in colorsys.hls_to_rgb(h, l, s))
    return f"#{r:02x}{g:02x}{b:02x}"


# ── 各部分组装 ──


def build_palette(samples: StyleSamples) -> ColorPalette:
    candidates = [
        c for c in samples.bg_colors
        if not is_neutral(c) and c not in ("#ffffff", "#000000")
    ]
    primary = candidates[0] if candidates else DEFAULT_PRIMARY
    secondary = candidates[1] if len(candidates) > 1 else adjust_hue(primary, 30)
    accent = candidates[2] if len(candidates) > 2 else adjust_hue(primary, 180)

    background = samples.body_bg_color or (samples.bg_colors[0] if samples.bg_colors else "#ffffff")
    surface = next((c for c in samples.bg_colors if c != background and is_light(c)), "#f8f9fa")
    border = samples.border_colors[0] if samples.border_colors else "#e5e7eb"

    text_primary = samples.body_text_color or (samples.text_colors[0] if samples.text_colors else "#1a1a1a")
    text_secondary = next(
        (c for c in samples.text_colors if c != text_primary and not is_light(c)), "#4a4a4a"
    )
    text_muted = next(
        (c for c in samples.text_colors if c not in (text_primary, text_secondary)), "#8a8a8a"
    )

    return ColorPalette(
        primary=primary,
        secondary=secondary,
        accent=accent,
        background=background,
        surface=surface,
        text=TextColors(primary=text_primary, secondary=text_secondary, muted=text_muted),
        border=border,
        error=ERROR_COLOR,
        success=SUCCESS_COLOR,
        warning=WARNING_COLOR,
    )


def _px(value: str) -> float | None:
    try:
        return float(value.lower().removesuffix("px"))
    except ValueError:
        return None


def build_typography(samples: StyleSamples) -> Typography:
    fallback_family = samples.font_families[0] if samples.font_families else "Inter"
    heading = samples.heading_font_family or fallback_family
    body = samples.body_font_family or fallback_family

    sizes = sorted(s for s in (_px(v) for v in samples.font_sizes) if s is not None)
    font_size = {name: f"{size:g}px" for name, size in zip(SIZE_NAMES, sizes)}
    for name, default in DEFAULT_FONT_SIZES.items():
        font_size.setdefault(name, default)

    return Typography(
        font_family=FontFamilies(
            heading=f"{heading}, sans-serif",
            body=f"{body}, sans-serif",
            mono="JetBrains Mono, Consolas, monospace",
        ),
        font_size={name: font_size[name] for name in SIZE_NAMES},
        font_weight={"normal": 400, "medium": 500, "semibold": 600, "bold": 700},
        line_height={"tight": "1.25", "normal": "1.5", "relaxed": "1.75"},
    )


def build_spacing() -> SpacingSystem:
    return SpacingSystem(
        base=4,
        scale=[0, 4, 8, 12, 16, 20, 24, 32, 40, 48, 64],
        container={"sm": "640px", "md": "768px", "lg": "1024px", "xl": "1280px"},
    )


def build_effects(samples: StyleSamples) -> EffectSystem:
    radii = list(samples.border_radii) or list(DEFAULT_RADII)

    def pick(index: int, default: str) -> str:
        return radii[index] if index < len(radii) else default

    return EffectSystem(
        border_radius={
            "none": "0",
            "sm": pick(0, "2px"),
            "md": pick(1, "4px"),
            "lg": pick(2, "8px"),
            "xl": pick(3, "12px"),
            "full": "9999px",
        },
        shadow={
            "sm": "0 1px 2px 0 rgb(0 0 0 / 0.05)",
            "md": "0 4px 6px -1px rgb(0 0 0 / 0.1)",
            "lg": "0 10px 15px -3px rgb(0 0 0 / 0.1)",
        },
        transition={"fast": "150ms ease", "normal": "300ms ease", "slow": "500ms ease"},
    )


# 每种组件保留的样式字段
_COMPONENT_FIELDS: dict[str, tuple[str, ...]] = {
    "button": ("background_color", "color", "border_radius", "padding", "font_size", "font_weight", "border", "box_shadow"),
    "card": ("background_color", "border_radius", "padding", "border", "box_shadow"),
    "input": ("background_color", "color", "border_radius", "padding", "font_size", "border"),
    "badge": ("background_color", "color", "border_radius", "padding", "font_size", "font_weight"),
    "link": ("color", "font_size", "font_weight"),
}
# 按背景色区分变体的组件
_VARIANT_TYPES = ("button", "badge")


def _component(ctype: str, sample: ComponentSample) -> ExtractedComponent:
    styles = ComponentStyles()
    if sample.styles:
        first = sample.styles[0]
        styles = ComponentStyles(**{f: getattr(first, f) for f in _COMPONENT_FIELDS[ctype]})

    variants: list[str] = []
    if ctype in _VARIANT_TYPES:
        for s in sample.styles:
            if s.background_color and s.background_color not in variants:
                variants.append(s.background_color)

    return ExtractedComponent(
        type=ctype,
        count=sample.count,
        styles=styles,
        variants=variants[:MAX_VARIANTS],
    )


def build_components(samples: StyleSamples) -> list[ExtractedComponent]:
    """页面上出现过的组件类型才输出，顺序固定"""
    components = []
    for ctype in _COMPONENT_FIELDS:
        sample = samples.components.get(ctype)
        if sample and sample.count > 0:
            components.append(_component(ctype, sample))
    return components


def build_design_system(
    url: str,
    samples: StyleSamples,
    include_components: bool = False,
    now: datetime | None = None,
) -> DesignSystem:
    return DesignSystem(
        source_url=url,
        extracted_at=now or datetime.now(timezone.utc),
        colors=build_palette(samples),
        typography=build_typography(samples),
        spacing=build_spacing(),
        effects=build_effects(samples),
        components=build_components(samples) if include_components else None,
    )
