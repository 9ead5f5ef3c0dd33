"""Tests for the derived project progress snapshot."""

from datetime import timedelta

from conftest import NOW, make_todo

from vibedocs.todo.progress import calculate_progress


def _todos():
    return [
        make_todo("TODO-001", status="done", estimated_hours=4, actual_hours=3),
        make_todo("TODO-002", status="done", estimated_hours=2),
        make_todo("TODO-003", status="in-progress", estimated_hours=2),
        make_todo("TODO-004", phase="Phase 2: Build", estimated_hours=6),
        make_todo("TODO-005", phase="Phase 2: Build", status="done", estimated_hours=1),
        make_todo("TODO-006", phase="Phase 3: Ship", estimated_hours=1),
    ]


class TestCalculateProgress:
    def test_counts(self):
        p = calculate_progress(_todos(), NOW)
        assert (p.total, p.pending, p.in_progress, p.done) == (6, 2, 1, 3)
        assert p.percentage == 50

    def test_hours_prefer_actual_for_done(self):
        p = calculate_progress(_todos(), NOW)
        assert p.estimated_total_hours == 16
        assert p.completed_hours == 3 + 2 + 1
        assert p.remaining_hours == 10
        assert p.start_date == NOW
        assert p.estimated_end_date == NOW + timedelta(hours=10)

    def test_phase_breakdown_in_first_seen_order(self):
        p = calculate_progress(_todos(), NOW)
        assert [(pp.phase, pp.total, pp.done, pp.percentage) for pp in p.phase_progress] == [
            ("Phase 1: Setup", 3, 2, 67),
            ("Phase 2: Build", 2, 1, 50),
            ("Phase 3: Ship", 1, 0, 0),
        ]

    def test_current_phase_is_first_unfinished(self):
        p = calculate_progress(_todos(), NOW)
        assert p.current_phase == "Phase 1: Setup"

        todos = [make_todo("A", status="done"), make_todo("B", phase="Phase 2: Build")]
        assert calculate_progress(todos, NOW).current_phase == "Phase 2: Build"

    def test_all_done_falls_back_to_first_phase(self):
        todos = [make_todo("A", status="done"), make_todo("B", phase="Phase 2", status="done")]
        p = calculate_progress(todos, NOW)
        assert p.percentage == 100
        assert p.current_phase == "Phase 1: Setup"

    def test_empty_list(self):
        p = calculate_progress([], NOW)
        assert p.total == 0
        assert p.percentage == 0
        assert p.current_phase == ""
        assert p.phase_progress == []

    def test_idempotent_with_fixed_clock(self):
        todos = _todos()
        assert calculate_progress(todos, NOW) == calculate_progress(todos, NOW)

    def test_half_rounds_up(self):
        todos = [make_todo(str(i), status="done" if i == 0 else "pending") for i in range(8)]
        # 1/8 = 12.5%
        assert calculate_progress(todos, NOW).percentage == 13

    def test_serializes_camel_case(self):
        data = calculate_progress(_todos(), NOW).to_json_dict()
        assert data["inProgress"] == 1
        assert data["currentPhase"] == "Phase 1: Setup"
        assert data["phaseProgress"][0]["percentage"] == 67
