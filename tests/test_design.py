"""Tests for style sampling and design system assembly."""

import asyncio

import pytest
from conftest import NOW

from vibedocs.design.builder import DEFAULT_PRIMARY, adjust_hue, build_design_system, is_neutral
from vibedocs.design.extractor import extract_design, validate_url
from vibedocs.design.sampler import (
    StyleSamples,
    collect_samples,
    normalize_color,
    normalize_font_size,
    parse_rules,
    stylesheet_links,
)
from vibedocs.design.schemas import ExtractOptions
from vibedocs.llm.errors import InvalidInputError

PAGE = """<html><head>
<link rel="stylesheet" href="/css/main.css">
<link rel="icon" href="/favicon.ico">
<style>
body { background-color: #ffffff; color: #222222; font-family: 'Noto Sans KR', sans-serif; font-size: 16px; }
h1 { font-family: Poppins, sans-serif; font-size: 2rem; }
.btn { background-color: #ff5722; color: white; border-radius: 6px; padding: 8px 16px; }
.btn-secondary { background: rgb(33, 150, 243); }
.card { background-color: #f5f5f5; border: 1px solid #dddddd; border-radius: 12px; }
</style></head>
<body><button class="btn">시작</button><div class="card" style="padding: 4px">카드</div></body></html>
"""


class FakeSampler:
    def __init__(self, samples):
        self.samples = samples
        self.urls = []

    async def sample(self, url):
        self.urls.append(url)
        return self.samples


class TestNormalization:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("#FFF", "#ffffff"),
            ("#12345678", "#123456"),
            ("rgb(255, 0, 10)", "#ff000a"),
            ("rgba(0, 0, 0, 0)", None),
            ("transparent", None),
            ("white", "#ffffff"),
            ("inherit", None),
        ],
    )
    def test_colors(self, raw, expected):
        assert normalize_color(raw) == expected

    def test_font_sizes(self):
        assert normalize_font_size("1.5rem") == "24px"
        assert normalize_font_size("14px") == "14px"
        assert normalize_font_size("large") is None

    def test_media_queries_keep_inner_rules(self):
        rules = parse_rules("/* c */ @media (max-width: 600px) { .a { color: red; } }")
        assert rules == [(".a", {"color": "red"})]

    def test_stylesheet_links(self):
        assert stylesheet_links(PAGE, limit=5) == ["/css/main.css"]


class TestCollectSamples:
    def test_counts_declared_values(self):
        samples = collect_samples(PAGE)
        assert samples.bg_colors[:3] == ["#ffffff", "#ff5722", "#2196f3"]
        assert samples.text_colors[0] == "#222222"
        assert samples.border_colors == ["#dddddd"]
        assert set(samples.font_sizes) == {"16px", "32px"}
        assert samples.body_font_family == "Noto Sans KR"
        assert samples.heading_font_family == "Poppins"
        assert samples.body_bg_color == "#ffffff"

    def test_external_stylesheets_are_included(self):
        samples = collect_samples("<html></html>", [".x { border-radius: 3px; }"])
        assert samples.border_radii == ["3px"]

    def test_component_samples(self):
        samples = collect_samples(PAGE)
        assert samples.components["button"].count >= 1
        assert samples.components["card"].count >= 1
        assert samples.components["input"].count == 0


class TestBuildDesignSystem:
    def test_palette_and_typography_from_samples(self):
        design = build_design_system("https://example.com", collect_samples(PAGE), now=NOW)
        assert design.colors.primary == "#ff5722"
        assert design.colors.secondary == "#2196f3"
        assert design.colors.accent == adjust_hue("#ff5722", 180)
        assert design.colors.background == "#ffffff"
        assert design.colors.border == "#dddddd"
        assert design.colors.text.primary == "#222222"
        assert design.typography.font_family.heading == "Poppins, sans-serif"
        assert design.typography.font_family.body == "Noto Sans KR, sans-serif"
        assert design.effects.border_radius["sm"] == "6px"
        assert design.components is None

    def test_components_on_request(self):
        design = build_design_system(
            "https://example.com", collect_samples(PAGE), include_components=True, now=NOW
        )
        by_type = {c.type: c for c in design.components}
        assert list(by_type) == ["button", "card"]
        assert by_type["button"].variants == ["#ff5722", "#2196f3"]
        assert by_type["card"].variants == []

    def test_defaults_when_nothing_sampled(self):
        design = build_design_system("https://example.com", StyleSamples(), now=NOW)
        assert design.colors.primary == DEFAULT_PRIMARY
        assert design.colors.background == "#ffffff"
        assert design.colors.error == "#ef4444"
        assert design.typography.font_family.heading == "Inter, sans-serif"
        assert design.typography.font_size["base"] == "16px"
        assert design.spacing.base == 4
        assert design.extracted_at == NOW

    def test_serialized_shape(self):
        data = build_design_system("https://example.com", StyleSamples(), now=NOW).to_json_dict()
        assert data["sourceUrl"] == "https://example.com"
        assert set(data["typography"]) == {"fontFamily", "fontSize", "fontWeight", "lineHeight"}
        assert "components" not in data

    def test_neutral_detection(self):
        assert is_neutral("#f5f5f5")
        assert not is_neutral("#ff5722")


class TestExtractDesign:
    @pytest.mark.parametrize("url", [None, "", "example.com", "ftp://example.com", "https://"])
    def test_rejects_bad_urls(self, url):
        with pytest.raises(InvalidInputError):
            validate_url(url)

    def test_uses_sampler(self):
        sampler = FakeSampler(collect_samples(PAGE))
        design = asyncio.run(
            extract_design(" https://example.com ", ExtractOptions(components=True), sampler=sampler)
        )
        assert sampler.urls == ["https://example.com"]
        assert design.source_url == "https://example.com"
        assert design.components

    def test_bad_url_never_samples(self):
        sampler = FakeSampler(StyleSamples())
        with pytest.raises(InvalidInputError):
            asyncio.run(extract_design("not a url", sampler=sampler))
        assert sampler.urls == []
