"""
控制台交互脚本：不经 HTTP，直接驱动完整的文档生成 / 进度分析链路

运行方式：
    python scripts/generate_console.py

支持命令：
    /key <API_KEY> : 校验并设置 API Key（选中的模型用于后续生成）
    /new           : 输入想法，生成 10 份文档并创建项目
    /show <kind>   : 查看文档（如 /show todoMaster）
    /todos         : 查看 Todo 列表与进度
    /done <id>     : 手动把 Todo 标记为完成
    /progress      : 描述已完成的工作，匹配 Todo 并确认应用
    /extend        : 为当前项目生成扩展功能文档
    /quit          : 退出

项目状态只保存在本进程内存中。
"""

import asyncio
import sys
import time
from pathlib import Path

from prompt_toolkit import PromptSession

# 确保项目根目录在 sys.path 中
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from vibedocs.config import get_settings
from vibedocs.generation.orchestrator import DocumentOrchestrator
from vibedocs.llm.client import LLMGateway
from vibedocs.llm.errors import InvalidInputError, LLMError
from vibedocs.llm.key_validator import KeyValidator
from vibedocs.observability.logging_config import setup_logging
from vibedocs.projects.schemas import TodoStatusUpdate
from vibedocs.projects.store import NoActiveProjectError, ProjectStore, TodoNotFoundError, document_field
from vibedocs.prompts.documents import APP_TYPES, DOCUMENT_ORDER
from vibedocs.todo.matcher import ProgressAnalyzer, auto_selected

settings = get_settings()

# ── 组件初始化 ──
gateway = LLMGateway()
validator = KeyValidator(gateway)
orchestrator = DocumentOrchestrator(gateway)
analyzer = ProgressAnalyzer(gateway)
store = ProjectStore()


def _gray(text: str) -> str:
    return f"\033[90m{text}\033[0m"


def _print_progress() -> None:
    project = store.require_active()
    p = project.progress
    print(f"\n  {project.name}  {p.done}/{p.total} 완료 ({p.percentage}%) | 남은 시간 {p.remaining_hours:g}h")
    print(_gray(f"  현재 단계: {p.current_phase}"))
    for todo in project.todos:
        mark = {"pending": " ", "in-progress": "~", "done": "x"}[todo.status]
        print(f"  [{mark}] {todo.id:<24} {todo.title} ({todo.priority}, {todo.estimated_hours:g}h)")
    print()


async def cmd_key(session: PromptSession, arg: str, state: dict) -> None:
    result = await validator.validate(arg)
    if result.valid:
        state["api_key"] = arg.strip()
        state["model"] = result.model
        print(f"  API 키 확인됨 (model={result.model})")
        if result.warning:
            print(f"\033[93m  ⚠ {result.warning}\033[0m")
    else:
        print(f"\033[31m  {result.error}\033[0m")
        if result.hint:
            print(_gray(f"  {result.hint}"))


async def cmd_new(session: PromptSession, state: dict) -> None:
    if not state.get("api_key"):
        print("  먼저 /key 로 API 키를 설정하세요.")
        return
    idea = (await session.prompt_async("아이디어: ")).strip()
    app_type = (await session.prompt_async(f"앱 유형 ({'/'.join(APP_TYPES)}): ")).strip() or "web"

    start = time.time()
    result = await orchestrator.generate_core(state["api_key"], idea, app_type, model=state.get("model"))
    duration = int((time.time() - start) * 1000)

    store.create_project(
        description=idea,
        app_type=app_type,
        core_docs=result.documents,
        todos=result.todos,
    )
    print(_gray(f"  ── 문서 {len(DOCUMENT_ORDER)}개 | TODO {len(result.todos)}개 | {duration}ms ──"))
    for warning in result.warnings:
        print(f"\033[93m  ⚠ {warning}\033[0m")
    _print_progress()


def cmd_show(arg: str) -> None:
    project = store.require_active()
    field = document_field(arg or "ideaBrief")
    print(getattr(project.core_docs, field))


async def cmd_progress(session: PromptSession, state: dict) -> None:
    project = store.require_active()
    work = (await session.prompt_async("완료한 작업: ")).strip()
    report = await analyzer.analyze(
        work, project.todos, api_key=state.get("api_key"), model=state.get("model")
    )
    print(_gray(f"  ── strategy={report.strategy} ──"))
    print(f"  {report.summary}")
    for m in report.matches:
        print(f"  {m.todo_id:<24} {m.confidence:>3}% → {m.suggested_status}  {m.reason}")

    selected = auto_selected(report.matches)
    if not selected:
        return
    answer = (await session.prompt_async(f"적용할까요? {', '.join(selected)} [y/N]: ")).strip().lower()
    if answer != "y":
        return
    by_id = {m.todo_id: m for m in report.matches}
    store.update_todos_batch(
        [
            TodoStatusUpdate(id=i, status=by_id[i].suggested_status, confidence=by_id[i].confidence)
            for i in selected
        ]
    )
    _print_progress()


async def cmd_extend(session: PromptSession, state: dict) -> None:
    project = store.require_active()
    if not state.get("api_key"):
        print("  먼저 /key 로 API 키를 설정하세요.")
        return
    name = (await session.prompt_async("기능 이름: ")).strip()
    description = (await session.prompt_async("기능 설명: ")).strip()
    result = await orchestrator.generate_extension(
        state["api_key"],
        name,
        description,
        project_context=project.core_docs.prd[:2000] or project.description,
        model=state.get("model"),
    )
    extension = store.add_extension(name, description, result.documents, result.todos)
    print(_gray(f"  ── 확장 {extension.id[:8]} | TODO {len(result.todos)}개 ──"))
    for warning in result.warnings:
        print(f"\033[93m  ⚠ {warning}\033[0m")
    _print_progress()


async def main():
    """交互主循环"""
    setup_logging(env=settings.ENV)
    print("=" * 60)
    print("  VibeDocs 控制台")
    print("  /key /new /show /todos /done /progress /extend /quit")
    print("=" * 60)

    session = PromptSession()
    state: dict = {}

    while True:
        try:
            line = (await session.prompt_async("> ")).strip()
        except (EOFError, KeyboardInterrupt):
            print("\n안녕히 가세요!")
            break

        if not line:
            continue
        command, _, arg = line.partition(" ")
        arg = arg.strip()

        try:
            if command == "/quit":
                print("안녕히 가세요!")
                break
            elif command == "/key":
                await cmd_key(session, arg, state)
            elif command == "/new":
                await cmd_new(session, state)
            elif command == "/show":
                cmd_show(arg)
            elif command == "/todos":
                _print_progress()
            elif command == "/done":
                store.update_todo_status(arg, "done")
                _print_progress()
            elif command == "/progress":
                await cmd_progress(session, state)
            elif command == "/extend":
                await cmd_extend(session, state)
            else:
                print(_gray("  알 수 없는 명령입니다."))
        except NoActiveProjectError:
            print("  먼저 /new 로 프로젝트를 만드세요.")
        except (InvalidInputError, TodoNotFoundError, LLMError) as e:
            print(f"\n\033[31m오류: {e}\033[0m\n")


if __name__ == "__main__":
    asyncio.run(main())
