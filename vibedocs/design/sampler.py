"""
页面样式采样：抓取 HTML 及其外链样式表，统计声明过的样式值

不执行 JS、不计算层叠，只统计源码里写出来的值：
- <style> 块与外链 CSS 中的规则
- 元素上的 style="..." 内联样式

颜色统一归一化为 #rrggbb，按出现次数降序排列。
"""

import re
from collections import Counter
from typing import Protocol

import httpx
import structlog
from pydantic import BaseModel, Field

from vibedocs.config import get_settings
from vibedocs.design.schemas import ComponentStyles, ComponentType

log = structlog.get_logger()
settings = get_settings()

_TOP_N = 10
_TOP_FONT_SIZES = 15
_COMPONENT_SAMPLES = 10

_STYLE_BLOCK_RE = re.compile(r"<style[^>]*>(.*?)</style>", re.DOTALL | re.IGNORECASE)
_LINK_TAG_RE = re.compile(r"<link\b[^>]*>", re.IGNORECASE)
_HREF_RE = re.compile(r'href\s*=\s*["\']([^"\']+)["\']', re.IGNORECASE)
_INLINE_STYLE_RE = re.compile(r'<([a-zA-Z][\w-]*)([^>]*?)\sstyle\s*=\s*"([^"]*)"', re.IGNORECASE)
_CLASS_ATTR_RE = re.compile(r'class\s*=\s*["\']([^"\']*)["\']', re.IGNORECASE)
_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_RULE_RE = re.compile(r"([^{}]+)\{([^{}]*)\}")
_DECL_RE = re.compile(r"([a-zA-Z-]+)\s*:\s*([^;]+)")
_HEX_RE = re.compile(r"#([0-9a-fA-F]{8}|[0-9a-fA-F]{6}|[0-9a-fA-F]{3,4})\b")
_RGB_RE = re.compile(r"rgba?\(\s*(\d+)[\s,]+(\d+)[\s,]+(\d+)(?:\s*[,/]\s*([\d.]+%?))?\s*\)", re.IGNORECASE)
_SIZE_RE = re.compile(r"^([\d.]+)(px|rem|em)$", re.IGNORECASE)

_NAMED_COLORS = {"white": "#ffffff", "black": "#000000"}

# 组件类型 → (选择器匹配, HTML 元素匹配)
_COMPONENT_PATTERNS: dict[ComponentType, tuple[re.Pattern, re.Pattern]] = {
    "button": (
        re.compile(r"(^|[\s,>+~])button\b|\.btn\b|\.button\b|role=.?button|type=.?(submit|button)", re.IGNORECASE),
        re.compile(r'<button\b|role=["\']button|<input[^>]+type=["\'](submit|button)|class=["\'][^"\']*\b(btn|button)\b', re.IGNORECASE),
    ),
    "card": (
        re.compile(r"card|(^|[\s,>+~])article\b|\.panel\b", re.IGNORECASE),
        re.compile(r'<article\b|class=["\'][^"\']*(card|Card|\bpanel\b)', re.IGNORECASE),
    ),
    "input": (
        re.compile(r"(^|[\s,>+~])(input|textarea|select)\b", re.IGNORECASE),
        re.compile(r'<input[^>]+type=["\'](text|email|password)|<textarea\b|<select\b', re.IGNORECASE),
    ),
    "badge": (
        re.compile(r"badge|\.tag\b|\.chip\b|\.label\b", re.IGNORECASE),
        re.compile(r'class=["\'][^"\']*(badge|Badge|\btag\b|\bchip\b|\blabel\b)', re.IGNORECASE),
    ),
    "link": (
        re.compile(r"(^|[\s,>+~])a(\b|:)", re.IGNORECASE),
        re.compile(r"<a\b(?![^>]*class=[\"'][^\"']*\b(btn|button)\b)", re.IGNORECASE),
    ),
}


class DesignExtractionError(Exception):
    """页面无法访问或加载超时"""

    code = "extraction_failed"
    status_code = 502
    hint = "웹사이트 접근이 불가능하거나 로딩 시간이 초과되었습니다."


class ComponentSample(BaseModel):
    count: int = 0
    styles: list[ComponentStyles] = Field(default_factory=list)


class StyleSamples(BaseModel):
    """按出现频率降序排列的样式样本"""

    bg_colors: list[str] = Field(default_factory=list)
    text_colors: list[str] = Field(default_factory=list)
    border_colors: list[str] = Field(default_factory=list)
    font_families: list[str] = Field(default_factory=list)
    font_sizes: list[str] = Field(default_factory=list)
    border_radii: list[str] = Field(default_factory=list)
    body_font_family: str = ""
    heading_font_family: str = ""
    body_bg_color: str = ""
    body_text_color: str = ""
    components: dict[ComponentType, ComponentSample] = Field(default_factory=dict)


class PageStyleSampler(Protocol):
    async def sample(self, url: str) -> StyleSamples: ...


# ── CSS 值归一化 ──


def normalize_color(value: str) -> str | None:
    """十六进制 / rgb() / rgba() / white / black → #rrggbb；透明色返回 None"""
    value = value.strip().lower()
    if not value or value == "transparent":
        return None
    if value in _NAMED_COLORS:
        return _NAMED_COLORS[value]

    m = _RGB_RE.search(value)
    if m:
        alpha = m.group(4)
        if alpha is not None and float(alpha.rstrip("%")) == 0:
            return None
        r, g, b = (min(255, int(m.group(i))) for i in (1, 2, 3))
        return f"#{r:02x}{g:02x}{b:02x}"

    m = _HEX_RE.search(value)
    if m:
        digits = m.group(1)
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits[:3])
        return f"#{digits[:6]}"
    return None


def first_font_family(value: str) -> str:
    return value.split(",")[0].strip().strip("'\"")


def normalize_font_size(value: str) -> str | None:
    """px 原样保留，rem / em 按 16px 换算"""
    m = _SIZE_RE.match(value.strip())
    if not m:
        return None
    number = float(m.group(1))
    if m.group(2).lower() != "px":
        number *= 16
    return f"{number:g}px"


def parse_declarations(block: str) -> dict[str, str]:
    decls: dict[str, str] = {}
    for m in _DECL_RE.finditer(block):
        decls[m.group(1).strip().lower()] = m.group(2).replace("!important", "").strip()
    return decls


def parse_rules(css: str) -> list[tuple[str, dict[str, str]]]:
    """(选择器, 声明) 列表；@media 等嵌套块只取内层规则"""
    css = _COMMENT_RE.sub("", css)
    rules = []
    for m in _RULE_RE.finditer(css):
        selector = m.group(1).strip()
        if selector.startswith("@"):
            continue
        # 同一段里可能残留 @import / @charset 语句，只取最后一个分号之后
        selector = selector.rsplit(";", 1)[-1].strip()
        if not selector:
            continue
        rules.append((selector, parse_declarations(m.group(2))))
    return rules


def _ranked(counter: Counter, limit: int = _TOP_N) -> list[str]:
    return [value for value, _ in counter.most_common(limit)]


def _component_styles(decls: dict[str, str]) -> ComponentStyles:
    bg = decls.get("background-color") or decls.get("background")
    color = decls.get("color")
    return ComponentStyles(
        background_color=normalize_color(bg) if bg else None,
        color=normalize_color(color) if color else None,
        border_radius=decls.get("border-radius"),
        padding=decls.get("padding"),
        font_size=decls.get("font-size"),
        font_weight=decls.get("font-weight"),
        border=decls.get("border"),
        box_shadow=decls.get("box-shadow"),
    )


def collect_samples(html: str, stylesheets: list[str] | None = None) -> StyleSamples:
    """
    从 HTML 源码 + 外链 CSS 文本统计样式样本。

    纯函数，不做任何网络访问，便于离线测试。
    """
    css_text = "\n".join(_STYLE_BLOCK_RE.findall(html) + list(stylesheets or []))
    rules = parse_rules(css_text)
    for m in _INLINE_STYLE_RE.finditer(html):
        tag, attrs, style = m.group(1), m.group(2), m.group(3)
        classes = _CLASS_ATTR_RE.search(attrs)
        selector = tag + "".join(f".{c}" for c in (classes.group(1).split() if classes else []))
        rules.append((selector, parse_declarations(style)))

    bg_colors: Counter = Counter()
    text_colors: Counter = Counter()
    border_colors: Counter = Counter()
    font_families: Counter = Counter()
    font_sizes: Counter = Counter()
    border_radii: Counter = Counter()
    body: dict[str, str] = {}
    heading_font = ""

    for selector, decls in rules:
        bg = decls.get("background-color") or decls.get("background")
        if bg and (color := normalize_color(bg)):
            bg_colors[color] += 1
        if "color" in decls and (color := normalize_color(decls["color"])):
            text_colors[color] += 1
        border = decls.get("border-color") or decls.get("border")
        if border and (color := normalize_color(border)):
            border_colors[color] += 1
        if "font-family" in decls and (family := first_font_family(decls["font-family"])):
            font_families[family] += 1
        if "font-size" in decls and (size := normalize_font_size(decls["font-size"])):
            font_sizes[size] += 1
        radius = decls.get("border-radius", "").strip()
        if radius and radius not in ("0", "0px"):
            border_radii[radius] += 1

        names = {s.strip().lower() for s in selector.split(",")}
        if names & {"body", "html", ":root"}:
            body.update(decls)
        if not heading_font and "h1" in names and "font-family" in decls:
            heading_font = first_font_family(decls["font-family"])

    components: dict[ComponentType, ComponentSample] = {}
    for ctype, (selector_re, element_re) in _COMPONENT_PATTERNS.items():
        styles = [
            _component_styles(decls)
            for selector, decls in rules
            if selector_re.search(selector) and decls
        ][:_COMPONENT_SAMPLES]
        count = len(element_re.findall(html))
        components[ctype] = ComponentSample(count=max(count, len(styles)), styles=styles)

    body_font = first_font_family(body["font-family"]) if "font-family" in body else ""
    body_bg = body.get("background-color") or body.get("background") or ""
    return StyleSamples(
        bg_colors=_ranked(bg_colors),
        text_colors=_ranked(text_colors),
        border_colors=_ranked(border_colors),
        font_families=_ranked(font_families),
        font_sizes=_ranked(font_sizes, _TOP_FONT_SIZES),
        border_radii=_ranked(border_radii),
        body_font_family=body_font,
        heading_font_family=heading_font or body_font,
        body_bg_color=normalize_color(body_bg) or "",
        body_text_color=normalize_color(body.get("color", "")) or "",
        components=components,
    )


def stylesheet_links(html: str, limit: int) -> list[str]:
    hrefs = []
    for tag in _LINK_TAG_RE.findall(html):
        if "stylesheet" not in tag.lower():
            continue
        m = _HREF_RE.search(tag)
        if m:
            hrefs.append(m.group(1))
    return hrefs[:limit]


class HttpStyleSampler:
    """httpx 抓取页面与外链样式表后交给 collect_samples 统计"""

    def __init__(self, timeout: float | None = None, max_stylesheets: int | None = None):
        self.timeout = timeout or settings.DESIGN_FETCH_TIMEOUT
        self.max_stylesheets = max_stylesheets or settings.DESIGN_MAX_STYLESHEETS

    async def sample(self, url: str) -> StyleSamples:
        """
        Raises:
            DesignExtractionError: 页面请求超时或返回非 2xx
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": "Mozilla/5.0 (compatible; VibeDocs/1.0)"},
            ) as client:
                resp = await client.get(url)
                resp.raise_for_status()
                html = resp.text

                stylesheets: list[str] = []
                for href in stylesheet_links(html, self.max_stylesheets):
                    css_url = resp.url.join(href)
                    try:
                        css_resp = await client.get(css_url)
                        css_resp.raise_for_status()
                    except httpx.HTTPError as e:
                        # 单个样式表失败不影响整体
                        log.warning("样式表抓取失败", url=str(css_url), error=str(e))
                        continue
                    stylesheets.append(css_resp.text)
        except httpx.TimeoutException as e:
            log.warning("页面抓取超时", url=url, timeout=self.timeout)
            raise DesignExtractionError(f"추출 실패: 요청 시간 초과 ({self.timeout}s)") from e
        except httpx.HTTPStatusError as e:
            log.warning("页面返回错误状态", url=url, status=e.response.status_code)
            raise DesignExtractionError(f"추출 실패: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            log.warning("页面抓取失败", url=url, error=str(e))
            raise DesignExtractionError(f"추출 실패: {e}") from e

        samples = collect_samples(html, stylesheets)
        log.info(
            "页面样式采样完成",
            url=url,
            stylesheets=len(stylesheets),
            bg_colors=len(samples.bg_colors),
            font_families=len(samples.font_families),
        )
        return samples
