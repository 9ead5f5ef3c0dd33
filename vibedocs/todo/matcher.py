"""
进度匹配：把用户描述的已完成工作匹配到候选 Todo

两种可互换策略，契约一致：match(work_description, todos, code) -> MatchReport
- LLMProgressMatcher：LLM 返回严格 JSON，解析失败抛 ParseError
- KeywordProgressMatcher：无 Key 或 LLM 失败时的确定性关键词匹配

匹配本身没有副作用，把建议状态写回项目是调用方显式确认后的独立步骤。
"""

from typing import Literal

import structlog

from vibedocs.config import get_settings
from vibedocs.guardrails.json_repairer import JsonRepairer
from vibedocs.llm.client import LLMGateway
from vibedocs.llm.errors import LLMError
from vibedocs.observability.metrics import MATCH_STRATEGY_TOTAL
from vibedocs.prompts.documents import PROGRESS_ANALYSIS_PROMPT
from vibedocs.schemas import CamelModel
from vibedocs.todo.schemas import TodoItem

log = structlog.get_logger()
settings = get_settings()

ALL_DONE_SUMMARY = "모든 TODO가 이미 완료되었습니다."

# 中英双语通用动作/领域关键词，同时出现在 Todo 与输入中时额外 +2
MATCH_KEYWORDS: tuple[str, ...] = (
    "설정", "설치", "구현", "완료", "추가", "생성", "작성",
    "setup", "install", "implement", "complete", "add", "create", "write",
    "api", "ui", "component", "컴포넌트", "page", "페이지", "test", "테스트",
)

_KEYWORD_TOP_K = 5
_KEYWORD_DONE_THRESHOLD = 70


class MatchResult(CamelModel):
    todo_id: str
    title: str = ""
    confidence: int
    reason: str
    suggested_status: Literal["in-progress", "done"]


class MatchReport(CamelModel):
    matches: list[MatchResult]
    summary: str
    strategy: Literal["llm", "keyword"] = "keyword"


def open_todos(todos: list[TodoItem]) -> list[TodoItem]:
    """候选范围：未完成的 Todo"""
    return [t for t in todos if t.status != "done"]


def _bounded(value: object) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return min(100.0, max(0.0, number))


def clamp_confidence(value: object) -> int:
    return int(round(_bounded(value)))


def _text(value: object, default: str) -> str:
    """模型返回的文本字段只接受字符串或数字，其余一律回退默认值"""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return default
    return str(value) or default


def auto_selected(matches: list[MatchResult], threshold: int | None = None) -> list[str]:
    """置信度达到阈值的条目默认勾选，仍需用户确认后才会应用"""
    threshold = settings.MATCH_AUTO_SELECT_THRESHOLD if threshold is None else threshold
    return [m.todo_id for m in matches if m.confidence >= threshold]


class KeywordProgressMatcher:
    """关键词重叠启发式，离线可用"""

    def match(
        self,
        work_description: str,
        todos: list[TodoItem],
        code: str | None = None,
    ) -> MatchReport:
        text = work_description if not code else f"{work_description}\n{code}"
        work_lower = text.lower()
        scored: list[MatchResult] = []

        for todo in open_todos(todos):
            title_lower = todo.title.lower()
            desc_lower = (todo.description or "").lower()
            words = title_lower.split() + desc_lower.split()

            count = sum(1 for w in words if len(w) > 2 and w in work_lower)
            for keyword in MATCH_KEYWORDS:
                if keyword in work_lower and (keyword in title_lower or keyword in desc_lower):
                    count += 2

            if count > 0:
                confidence = min(95, 40 + count * 15)
                scored.append(
                    MatchResult(
                        todo_id=todo.id,
                        title=todo.title,
                        confidence=confidence,
                        reason=f"키워드 매칭 ({count}개 일치)",
                        suggested_status="done" if confidence >= _KEYWORD_DONE_THRESHOLD else "in-progress",
                    )
                )

        scored.sort(key=lambda m: m.confidence, reverse=True)
        top = scored[:_KEYWORD_TOP_K]
        return MatchReport(
            matches=top,
            summary=f"{len(top)}개의 관련 TODO 항목을 발견했습니다.",
            strategy="keyword",
        )


class LLMProgressMatcher:
    """LLM 结构化 JSON 匹配"""

    def __init__(
        self,
        gateway: LLMGateway,
        api_key: str,
        model: str | None = None,
        min_confidence: int | None = None,
    ):
        self.gateway = gateway
        self.api_key = api_key
        self.model = model
        self.min_confidence = (
            settings.MATCH_MIN_CONFIDENCE if min_confidence is None else min_confidence
        )
        self.repairer = JsonRepairer()

    def build_prompt(self, work_description: str, candidates: list[TodoItem], code: str | None) -> str:
        todos_text = "\n".join(
            f"- [{t.id}] {t.title} (Phase: {t.phase}, Priority: {t.priority})" for t in candidates
        )
        code_section = f"## 구현된 코드\n```\n{code}\n```" if code else ""
        return PROGRESS_ANALYSIS_PROMPT.format(
            todos=todos_text,
            work_description=work_description,
            code_section=code_section,
        )

    async def match(
        self,
        work_description: str,
        todos: list[TodoItem],
        code: str | None = None,
    ) -> MatchReport:
        """
        Raises:
            ParseError: 响应中没有可解析的 JSON 对象
            LLMError: 网关调用失败
        """
        candidates = open_todos(todos)
        if not candidates:
            return MatchReport(matches=[], summary=ALL_DONE_SUMMARY, strategy="llm")

        prompt = self.build_prompt(work_description, candidates, code)
        text = await self.gateway.generate(
            self.api_key, prompt, model=self.model, purpose="analysis", temperature=0.2
        )
        data = self.repairer.repair(text)

        by_id = {t.id: t for t in candidates}
        matches: list[MatchResult] = []
        raw_matches = data.get("matches") or []
        if not isinstance(raw_matches, list):
            raw_matches = []

        for raw in raw_matches:
            if not isinstance(raw, dict):
                continue
            todo_id = str(raw.get("todoId") or raw.get("todo_id") or "")
            todo = by_id.get(todo_id)
            if todo is None:
                log.debug("忽略未知 Todo ID", todo_id=todo_id)
                continue
            # 阈值比较用未取整的值，49.6 不算达标
            if _bounded(raw.get("confidence")) < self.min_confidence:
                continue
            confidence = clamp_confidence(raw.get("confidence"))
            matches.append(
                MatchResult(
                    todo_id=todo_id,
                    title=_text(raw.get("title"), todo.title),
                    confidence=confidence,
                    reason=_text(raw.get("reason"), "관련성 감지됨"),
                    suggested_status="done" if raw.get("suggestedStatus") == "done" else "in-progress",
                )
            )

        matches.sort(key=lambda m: m.confidence, reverse=True)
        summary = data.get("summary") or f"{len(matches)}개의 관련 TODO 항목을 발견했습니다."
        return MatchReport(matches=matches, summary=str(summary), strategy="llm")


class ProgressAnalyzer:
    """策略选择：有 Key 走 LLM，LLM 任何失败自动降级到关键词匹配"""

    def __init__(self, gateway: LLMGateway):
        self.gateway = gateway
        self.keyword = KeywordProgressMatcher()

    async def analyze(
        self,
        work_description: str,
        todos: list[TodoItem],
        code: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
    ) -> MatchReport:
        if not api_key:
            MATCH_STRATEGY_TOTAL.labels(strategy="keyword").inc()
            return self.keyword.match(work_description, todos, code)

        matcher = LLMProgressMatcher(self.gateway, api_key, model)
        try:
            report = await matcher.match(work_description, todos, code)
        except LLMError as e:
            # ParseError 同属 LLMError
            log.warning(
                "LLM 进度分析失败，降级为关键词匹配",
                error_type=type(e).__name__,
                error=str(e),
            )
            MATCH_STRATEGY_TOTAL.labels(strategy="keyword_fallback").inc()
            return self.keyword.match(work_description, todos, code)

        MATCH_STRATEGY_TOTAL.labels(strategy="llm").inc()
        return report
