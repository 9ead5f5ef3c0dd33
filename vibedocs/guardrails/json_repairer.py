"""
JSON 修复器：从 LLM 输出中提取并解析第一个 JSON 对象

处理常见问题：
- Markdown 代码块包裹 (```json ... ```)
- 多余文字说明 ("분석 결과입니다: {...}")
- 尾部多余逗号、缺失引号、单引号等（严格解析失败时交给 json-repair）

找不到任何 JSON 对象、或修复后仍不是对象时抛 ParseError，由调用方走降级路径。
"""

import json

import structlog
from json_repair import repair_json

from vibedocs.llm.errors import ParseError
from vibedocs.observability.metrics import ERROR_TOTAL

log = structlog.get_logger()


def extract_first_object(text: str) -> str | None:
    """
    提取第一个花括号配平的子串。

    字符串字面量内的花括号不计入深度；若直到结尾都未配平，返回从首个 "{" 起的剩余文本，
    交给 json-repair 尝试补全。
    """
    start = text.find("{")
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return text[start:]


class JsonRepairer:
    """修复 LLM 输出的畸形 JSON"""

    def repair(self, raw: str) -> dict:
        """
        修复流程：
        1. 去除 Markdown 代码块标记
        2. 提取第一个配平的 JSON 对象
        3. json.loads 严格解析，失败再用 json-repair 修复

        Raises:
            ParseError: 没有 JSON 对象，或修复后仍然无法解析为 dict
        """
        cleaned = self._strip_markdown(raw or "")
        candidate = extract_first_object(cleaned)
        if candidate is None:
            ERROR_TOTAL.labels(error_type="parse").inc()
            log.warning("LLM 输出中未找到 JSON 对象", raw_preview=(raw or "")[:200])
            raise ParseError("No JSON found in response")

        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            repaired = repair_json(candidate, return_objects=False)
            try:
                data = json.loads(repaired)
            except json.JSONDecodeError as e:
                ERROR_TOTAL.labels(error_type="parse").inc()
                log.warning("JSON 修复后仍然解析失败", raw_preview=raw[:200], error=str(e))
                raise ParseError(f"JSON 修复失败: {e}", cause=e) from e

        if not isinstance(data, dict):
            ERROR_TOTAL.labels(error_type="parse").inc()
            raise ParseError(f"期望 JSON 对象，实际得到 {type(data).__name__}")

        return data

    def _strip_markdown(self, raw: str) -> str:
        """去除 Markdown 代码块标记"""
        cleaned = raw.strip()
        if "```" in cleaned:
            lines = [line for line in cleaned.split("\n") if not line.strip().startswith("```")]
            cleaned = "\n".join(lines)
        return cleaned
