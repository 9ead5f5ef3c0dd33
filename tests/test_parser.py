"""Tests for TODO extraction from generated Markdown."""

from conftest import NOW

from vibedocs.todo.parser import (
    clean_title,
    decorate,
    decorate_all,
    extract_hours,
    infer_priority,
    parse_core_todos,
    parse_extension_todos,
)

TODO_MASTER = """# TODO 마스터

일반 소개 문단
- [ ] 페이즈 이전 항목은 무시

## Phase 1: Setup
- [ ] Build login API (4시간)
- [x] Configure CI (1.5h)

### 참고 사항
- [ ] 참고 섹션도 현재 페이즈에 속함

## Phase 2: Features
* [ ] critical payment flow
- [ ] Dashboard UI (6 hours) (optional)
- [ ] low priority polish
- [ ] 일반 작업

## Phase 3: Launch
- [ ] high availability setup
- [ ] release notes
"""


class TestCoreParsing:
    def test_duration_title_and_phase_one_priority(self):
        todos = parse_core_todos("## Phase 1: Setup\n- [ ] Build login API (4시간)")
        assert len(todos) == 1
        todo = todos[0]
        assert todo.phase == "Phase 1: Setup"
        assert todo.estimated_hours == 4
        assert todo.title == "Build login API"
        assert todo.priority == "critical"
        assert todo.description == "Phase 1: Setup: Build login API (4시간)"
        assert todo.status == "pending"

    def test_checkboxes_before_first_phase_are_ignored(self):
        todos = parse_core_todos(TODO_MASTER)
        assert all("페이즈 이전" not in t.title for t in todos)

    def test_sequential_zero_padded_ids(self):
        todos = parse_core_todos(TODO_MASTER)
        assert [t.id for t in todos] == [f"TODO-{i:03d}" for i in range(1, len(todos) + 1)]
        assert len(todos) == 9

    def test_non_phase_heading_keeps_current_phase(self):
        todos = parse_core_todos(TODO_MASTER)
        ref = next(t for t in todos if "참고 섹션" in t.title)
        assert ref.phase == "Phase 1: Setup"

    def test_checked_and_star_markers_accepted(self):
        todos = parse_core_todos(TODO_MASTER)
        titles = [t.title for t in todos]
        assert "Configure CI" in titles
        assert "critical payment flow" in titles

    def test_fractional_hours(self):
        todos = parse_core_todos(TODO_MASTER)
        ci = next(t for t in todos if t.title == "Configure CI")
        assert ci.estimated_hours == 1.5

    def test_all_parenthesized_groups_are_stripped(self):
        todos = parse_core_todos(TODO_MASTER)
        dash = next(t for t in todos if t.title.startswith("Dashboard"))
        assert dash.title == "Dashboard UI"
        assert dash.estimated_hours == 6

    def test_title_critical_beats_phase_two(self):
        todos = parse_core_todos(TODO_MASTER)
        payment = next(t for t in todos if "payment" in t.title)
        assert payment.phase == "Phase 2: Features"
        assert payment.priority == "critical"

    def test_phase_two_beats_title_low(self):
        todos = parse_core_todos(TODO_MASTER)
        polish = next(t for t in todos if "polish" in t.title)
        assert polish.priority == "high"

    def test_phase_three_uses_title_rules(self):
        todos = parse_core_todos(TODO_MASTER)
        by_title = {t.title: t for t in todos}
        assert by_title["high availability setup"].priority == "high"
        assert by_title["release notes"].priority == "medium"

    def test_default_hours(self):
        todos = parse_core_todos(TODO_MASTER)
        notes = next(t for t in todos if t.title == "release notes")
        assert notes.estimated_hours == 2


class TestCoreDefaults:
    def test_empty_input_yields_defaults(self):
        todos = parse_core_todos("")
        assert len(todos) == 9
        assert {t.phase for t in todos} == {
            "Phase 1: 프로젝트 설정",
            "Phase 2: 핵심 기능",
            "Phase 3: 테스트 및 배포",
        }

    def test_none_input_yields_defaults(self):
        assert len(parse_core_todos(None)) == 9

    def test_text_without_checkboxes_yields_defaults(self):
        todos = parse_core_todos("## Phase 1: Setup\n그냥 문단입니다.")
        assert len(todos) == 9

    def test_default_priorities(self):
        todos = parse_core_todos("")
        for todo in todos:
            expected = "critical" if "1" in todo.phase else "high"
            assert todo.priority == expected
            assert todo.estimated_hours == 2

    def test_defaults_are_deterministic(self):
        assert parse_core_todos("") == parse_core_todos("")


class TestExtensionParsing:
    def test_checkboxes_accepted_without_phase(self):
        md = "# 결제 TODO\n- [ ] 결제 API 구현 (3h)\n- [ ] critical 보안 점검"
        todos = parse_extension_todos(md, "결제", batch_ts=1700000000000)
        assert [t.id for t in todos] == ["TODO-EXT-1700000000000-1", "TODO-EXT-1700000000000-2"]
        assert all(t.phase == "EXT: 결제" for t in todos)
        assert all(t.source == "extension" for t in todos)
        assert todos[0].estimated_hours == 3
        assert todos[0].title == "결제 API 구현"
        assert todos[1].priority == "critical"

    def test_phase_headings_do_not_affect_priority(self):
        md = "## Phase 1: Setup\n- [ ] 설정 작업"
        todos = parse_extension_todos(md, "알림", batch_ts=1)
        assert todos[0].priority == "medium"
        assert todos[0].phase == "EXT: 알림"

    def test_empty_input_yields_four_defaults(self):
        todos = parse_extension_todos("", "알림", batch_ts=42)
        assert [(t.title, t.estimated_hours, t.priority) for t in todos] == [
            ("알림 데이터 모델 정의", 2, "high"),
            ("알림 API 엔드포인트 구현", 4, "high"),
            ("알림 UI 컴포넌트 구현", 6, "medium"),
            ("알림 테스트 작성", 3, "medium"),
        ]
        assert todos[0].id == "TODO-EXT-42-1"

    def test_batches_are_distinguishable(self):
        first = parse_extension_todos("- [ ] a", "x", batch_ts=1)
        second = parse_extension_todos("- [ ] a", "x", batch_ts=2)
        assert first[0].id != second[0].id


class TestHelpers:
    def test_extract_hours_variants(self):
        assert extract_hours("작업 (3시간)") == 3
        assert extract_hours("task (2H)") == 2
        assert extract_hours("task (1 hour)") == 1
        assert extract_hours("task (2.5 hrs)") == 2
        assert extract_hours("task") == 2

    def test_clean_title(self):
        assert clean_title("API (2h) 연동 (필수)") == "API  연동"

    def test_priority_order(self):
        assert infer_priority("CRITICAL fix", "Phase 2") == "critical"
        assert infer_priority("anything", "phase 1: x") == "critical"
        assert infer_priority("High load", "") == "high"
        assert infer_priority("low", "Phase 2") == "high"
        assert infer_priority("low", "") == "low"
        assert infer_priority("plain", "") == "medium"


class TestDecorate:
    def test_decorate_fills_defaults(self):
        proto = parse_core_todos("## Phase 1: A\n- [ ] 로그인")[0]
        item = decorate(proto, NOW)
        assert item.status == "pending"
        assert item.status_updated_by == "manual"
        assert item.status_confidence is None
        assert item.dependencies == []
        assert item.prompt == "로그인을(를) 구현해주세요."
        assert item.test_criteria == ["로그인이(가) 정상 작동하는지 확인"]
        assert item.created_at == NOW == item.updated_at
        assert item.started_at is None and item.completed_at is None

    def test_decorate_all_overrides_source(self):
        protos = parse_core_todos("")
        items = decorate_all(protos, source="extension", now=NOW)
        assert len(items) == len(protos)
        assert all(i.source == "extension" for i in items)
