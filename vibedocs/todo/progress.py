"""
项目进度计算：ProjectProgress 是 Todo 列表的纯函数

任何修改 Todo 列表的操作之后都同步重算，不单独存储、不缓存。
now 可注入，保证同一输入两次计算结果完全一致。
"""

from datetime import datetime, timedelta, timezone

from vibedocs.schemas import CamelModel
from vibedocs.todo.schemas import TodoItem


class PhaseProgress(CamelModel):
    phase: str
    total: int
    done: int
    percentage: int


class ProjectProgress(CamelModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    done: int = 0
    percentage: int = 0
    estimated_total_hours: float = 0
    completed_hours: float = 0
    remaining_hours: float = 0
    start_date: datetime
    estimated_end_date: datetime
    current_phase: str = ""
    phase_progress: list[PhaseProgress] = []


def _percent(done: int, total: int) -> int:
    # 四舍五入到整数（0.5 进位），与前端展示一致
    return int(done * 100 / total + 0.5) if total else 0


def calculate_progress(todos: list[TodoItem], now: datetime | None = None) -> ProjectProgress:
    """由 Todo 列表派生进度快照"""
    now = now or datetime.now(timezone.utc)

    total = len(todos)
    pending = sum(1 for t in todos if t.status == "pending")
    in_progress = sum(1 for t in todos if t.status == "in-progress")
    done = sum(1 for t in todos if t.status == "done")

    estimated_total = sum(t.estimated_hours for t in todos)
    completed_hours = sum(
        t.actual_hours if t.actual_hours else t.estimated_hours
        for t in todos
        if t.status == "done"
    )
    remaining = estimated_total - completed_hours

    # 阶段按首次出现顺序排列
    phases: list[str] = list(dict.fromkeys(t.phase for t in todos))
    phase_progress: list[PhaseProgress] = []
    current_phase = ""
    for phase in phases:
        phase_todos = [t for t in todos if t.phase == phase]
        phase_done = sum(1 for t in phase_todos if t.status == "done")
        phase_progress.append(
            PhaseProgress(
                phase=phase,
                total=len(phase_todos),
                done=phase_done,
                percentage=_percent(phase_done, len(phase_todos)),
            )
        )
        if not current_phase and phase_done < len(phase_todos):
            current_phase = phase
    if not current_phase and phases:
        current_phase = phases[0]

    return ProjectProgress(
        total=total,
        pending=pending,
        in_progress=in_progress,
        done=done,
        percentage=_percent(done, total),
        estimated_total_hours=estimated_total,
        completed_hours=completed_hours,
        remaining_hours=remaining,
        start_date=now,
        estimated_end_date=now + timedelta(hours=remaining),
        current_phase=current_phase,
        phase_progress=phase_progress,
    )
