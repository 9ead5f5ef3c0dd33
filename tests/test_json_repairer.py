"""Tests for extracting JSON objects from LLM replies."""

import pytest

from vibedocs.guardrails.json_repairer import JsonRepairer, extract_first_object
from vibedocs.llm.errors import ParseError


@pytest.fixture
def repairer():
    return JsonRepairer()


class TestExtractFirstObject:
    def test_balanced(self):
        assert extract_first_object('앞 {"a": {"b": 1}} 뒤 {"c": 2}') == '{"a": {"b": 1}}'

    def test_braces_inside_strings(self):
        assert extract_first_object('{"a": "}{"} x') == '{"a": "}{"}'

    def test_none_when_no_brace(self):
        assert extract_first_object("plain text") is None

    def test_unbalanced_returns_tail(self):
        assert extract_first_object('x {"a": 1') == '{"a": 1'


class TestJsonRepairer:
    def test_code_fence(self, repairer):
        raw = '```json\n{"matches": [], "summary": "ok"}\n```'
        assert repairer.repair(raw) == {"matches": [], "summary": "ok"}

    def test_leading_prose(self, repairer):
        assert repairer.repair('분석 결과입니다: {"summary": "완료"}') == {"summary": "완료"}

    def test_trailing_comma(self, repairer):
        assert repairer.repair('{"matches": [1, 2,],}') == {"matches": [1, 2]}

    def test_missing_closing_brace(self, repairer):
        assert repairer.repair('{"summary": "부분"') == {"summary": "부분"}

    @pytest.mark.parametrize("raw", ["", "응답 없음", "[1, 2, 3]"])
    def test_no_object_raises(self, repairer, raw):
        with pytest.raises(ParseError):
            repairer.repair(raw)
