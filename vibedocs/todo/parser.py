"""
TODO 解析器：从 LLM 生成的 Markdown 中逐行提取任务

核心文档（TODO_MASTER）：
- "## / ### Phase N: ..." 标题切换当前阶段，其他标题不影响
- 只有在已出现阶段标题之后，复选框行才被接受

扩展文档（todo）：
- 复选框行无条件接受，阶段固定为 "EXT: {功能名}"

两种模式解析结果为空时都会生成一组确定性的默认任务，保证项目不会没有 Todo。
"""

import re
import time
from datetime import datetime, timezone

from vibedocs.todo.schemas import Priority, ProtoTodo, TodoItem, TodoSource

DEFAULT_HOURS = 2.0

_PHASE_HEADING_RE = re.compile(r"#+\s*(Phase\s*\d+[:\s]*.+)", re.IGNORECASE)
_CHECKBOX_RE = re.compile(r"^[-*]\s*\[[ x]\]\s*(.+)", re.IGNORECASE)
_HOURS_RE = re.compile(r"\((\d+(?:\.\d+)?)\s*(?:시간|h|hr|hours?)\)", re.IGNORECASE)
_PAREN_GROUP_RE = re.compile(r"\(.*?\)")

_DEFAULT_CORE_PHASES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Phase 1: 프로젝트 설정", ("프로젝트 초기화", "기본 설정", "의존성 설치")),
    ("Phase 2: 핵심 기능", ("메인 기능 구현", "UI 개발", "API 연동")),
    ("Phase 3: 테스트 및 배포", ("테스트 작성", "버그 수정", "배포")),
)

# (标题后缀, 预估小时, 优先级)
_DEFAULT_EXTENSION_ITEMS: tuple[tuple[str, float, Priority], ...] = (
    ("데이터 모델 정의", 2, "high"),
    ("API 엔드포인트 구현", 4, "high"),
    ("UI 컴포넌트 구현", 6, "medium"),
    ("테스트 작성", 3, "medium"),
)


def extract_hours(raw_title: str) -> float:
    """提取 "(4시간)" / "(2h)" / "(1.5 hours)" 形式的工时提示，缺省 2 小时"""
    m = _HOURS_RE.search(raw_title)
    return float(m.group(1)) if m else DEFAULT_HOURS


def clean_title(raw_title: str) -> str:
    """去掉所有括号注释（不只是工时），避免注释噪声出现在标题里"""
    return _PAREN_GROUP_RE.sub("", raw_title).strip()


def infer_priority(raw_title: str, phase: str = "") -> Priority:
    """
    优先级推断，按固定顺序首个命中生效：
    标题含 critical → 阶段含 phase 1 → 标题含 high → 阶段含 phase 2 → 标题含 low → medium
    """
    title = raw_title.lower()
    phase = phase.lower()
    if "critical" in title or "phase 1" in phase:
        return "critical"
    if "high" in title or "phase 2" in phase:
        return "high"
    if "low" in title:
        return "low"
    return "medium"


def _phase_from_heading(line: str) -> str | None:
    if not (line.startswith("## ") or line.startswith("### ")):
        return None
    m = _PHASE_HEADING_RE.search(line)
    return m.group(1).strip() if m else None


def _checkbox_title(line: str) -> str | None:
    m = _CHECKBOX_RE.match(line)
    return m.group(1).strip() if m else None


def parse_core_todos(markdown: str | None) -> list[ProtoTodo]:
    """解析 TODO_MASTER 文档，ID 形如 TODO-001"""
    todos: list[ProtoTodo] = []
    current_phase = ""
    seq = 1

    for line in (markdown or "").split("\n"):
        phase = _phase_from_heading(line)
        if phase:
            current_phase = phase

        raw_title = _checkbox_title(line)
        if raw_title is None or not current_phase:
            continue

        todos.append(
            ProtoTodo(
                id=f"TODO-{seq:03d}",
                title=clean_title(raw_title),
                description=f"{current_phase}: {raw_title}",
                phase=current_phase,
                source="core",
                priority=infer_priority(raw_title, current_phase),
                estimated_hours=extract_hours(raw_title),
            )
        )
        seq += 1

    if todos:
        return todos

    for phase_name, items in _DEFAULT_CORE_PHASES:
        for item in items:
            todos.append(
                ProtoTodo(
                    id=f"TODO-{seq:03d}",
                    title=item,
                    description=f"{phase_name}: {item}",
                    phase=phase_name,
                    source="core",
                    priority="critical" if "1" in phase_name else "high",
                    estimated_hours=DEFAULT_HOURS,
                )
            )
            seq += 1
    return todos


def parse_extension_todos(
    markdown: str | None,
    feature_name: str,
    batch_ts: int | None = None,
) -> list[ProtoTodo]:
    """
    解析扩展 todo 文档，ID 形如 TODO-EXT-{毫秒时间戳}-{n}。

    batch_ts 区分同一会话内多次扩展生成的批次，不传则取当前时间。
    """
    batch_ts = batch_ts if batch_ts is not None else int(time.time() * 1000)
    phase = f"EXT: {feature_name}"
    todos: list[ProtoTodo] = []
    seq = 1

    for line in (markdown or "").split("\n"):
        raw_title = _checkbox_title(line)
        if raw_title is None:
            continue

        todos.append(
            ProtoTodo(
                id=f"TODO-EXT-{batch_ts}-{seq}",
                title=clean_title(raw_title),
                description=f"{phase}: {raw_title}",
                phase=phase,
                source="extension",
                # 扩展阶段名不含 Phase 编号，只看标题关键词
                priority=infer_priority(raw_title),
                estimated_hours=extract_hours(raw_title),
            )
        )
        seq += 1

    if todos:
        return todos

    for suffix, hours, priority in _DEFAULT_EXTENSION_ITEMS:
        todos.append(
            ProtoTodo(
                id=f"TODO-EXT-{batch_ts}-{seq}",
                title=f"{feature_name} {suffix}",
                description=f"{phase}: {suffix}",
                phase=phase,
                source="extension",
                priority=priority,
                estimated_hours=hours,
            )
        )
        seq += 1
    return todos


def decorate(proto: ProtoTodo, now: datetime | None = None) -> TodoItem:
    """补全 Todo：默认 AI 提示词、测试标准、时间戳，状态归属 manual"""
    now = now or datetime.now(timezone.utc)
    return TodoItem(
        id=proto.id,
        title=proto.title,
        description=proto.description,
        phase=proto.phase,
        source=proto.source,
        status="pending",
        status_updated_by="manual",
        priority=proto.priority,
        estimated_hours=proto.estimated_hours,
        dependencies=[],
        prompt=f"{proto.title}을(를) 구현해주세요.",
        test_criteria=[f"{proto.title}이(가) 정상 작동하는지 확인"],
        created_at=now,
        updated_at=now,
    )


def decorate_all(
    protos: list[ProtoTodo],
    source: TodoSource | None = None,
    now: datetime | None = None,
) -> list[TodoItem]:
    now = now or datetime.now(timezone.utc)
    items = [decorate(p, now) for p in protos]
    if source:
        items = [item.model_copy(update={"source": source}) for item in items]
    return items
