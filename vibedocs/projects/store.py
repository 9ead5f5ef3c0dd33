"""
项目 / Todo 状态仓库：对 ProjectsBundle 的纯内存变更

每个操作先在副本上完成全部修改，再整体替换进 bundle，调用方不会看到半更新状态。
凡是改动 Todo 列表的操作都同步重算 progress。

状态时间戳规则：
- completed_at 有值 ⇔ status == "done"
- started_at 在首次进入 in-progress 时写入，之后永不清除
- status_confidence 只在 updated_by == "ai" 时保留
"""

import uuid
from collections.abc import Callable
from datetime import datetime, timezone

import structlog

from vibedocs.design.schemas import DesignSystem
from vibedocs.llm.errors import InvalidInputError
from vibedocs.projects.schemas import (
    CoreDocuments,
    Extension,
    ExtensionDocuments,
    Project,
    TodoStatusUpdate,
)
from vibedocs.state.schemas import ProjectsBundle
from vibedocs.todo.progress import calculate_progress
from vibedocs.todo.schemas import TodoItem, TodoStatus, UpdatedBy

log = structlog.get_logger()

PROJECT_NAME_MAX = 50


class ProjectNotFoundError(LookupError):
    code = "project_not_found"
    status_code = 404

    def __init__(self, project_id: str):
        super().__init__(f"project not found: {project_id}")
        self.project_id = project_id


class TodoNotFoundError(LookupError):
    code = "todo_not_found"
    status_code = 404

    def __init__(self, todo_id: str):
        super().__init__(f"todo not found: {todo_id}")
        self.todo_id = todo_id


class NoActiveProjectError(RuntimeError):
    code = "no_active_project"
    status_code = 409

    def __init__(self):
        super().__init__("no active project")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def apply_status(
    todo: TodoItem,
    status: TodoStatus,
    updated_by: UpdatedBy,
    confidence: int | None,
    now: datetime,
) -> TodoItem:
    """单条 Todo 的状态迁移，任何迁移都允许"""
    started_at = todo.started_at
    if status == "in-progress" and started_at is None:
        started_at = now
    return todo.model_copy(
        update={
            "status": status,
            "status_updated_by": updated_by,
            "status_confidence": confidence if updated_by == "ai" else None,
            "updated_at": now,
            "started_at": started_at,
            "completed_at": now if status == "done" else None,
        }
    )


def document_field(key: str) -> str:
    """文档键既接受 camelCase（todoMaster）也接受 snake_case（todo_master）"""
    for name, field in CoreDocuments.model_fields.items():
        if key in (name, field.alias):
            return name
    raise InvalidInputError(f"unknown document key: {key}", field="key")


class ProjectStore:
    """项目聚合的变更入口，持有一个 ProjectsBundle"""

    def __init__(
        self,
        bundle: ProjectsBundle | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.bundle = bundle or ProjectsBundle()
        self.clock = clock

    # ── 查询 ──

    @property
    def active(self) -> Project | None:
        return self.bundle.active

    def require_active(self) -> Project:
        project = self.bundle.active
        if project is None:
            raise NoActiveProjectError()
        return project

    def get_project(self, project_id: str) -> Project:
        for project in self.bundle.projects:
            if project.id == project_id:
                return project
        raise ProjectNotFoundError(project_id)

    # ── 内部 ──

    def _replace(self, project: Project) -> Project:
        self.bundle = self.bundle.model_copy(
            update={
                "projects": [project if p.id == project.id else p for p in self.bundle.projects],
            }
        )
        return project

    def _with_todos(self, project: Project, todos: list[TodoItem], now: datetime, **updates) -> Project:
        return project.model_copy(
            update={
                **updates,
                "todos": todos,
                "progress": calculate_progress(todos, now),
                "updated_at": now,
            }
        )

    # ── 项目 ──

    def create_project(
        self,
        description: str,
        app_type: str,
        core_docs: CoreDocuments,
        todos: list[TodoItem],
        name: str | None = None,
        template: str | None = None,
        design_system: DesignSystem | None = None,
    ) -> Project:
        """新建项目并设为激活项目；名称缺省取想法原文前 50 字"""
        now = self.clock()
        project = Project(
            id=str(uuid.uuid4()),
            name=(name or description[:PROJECT_NAME_MAX]).strip(),
            description=description,
            app_type=app_type,
            template=template,
            core_docs=core_docs,
            extensions=[],
            todos=list(todos),
            progress=calculate_progress(todos, now),
            design_system=design_system,
            created_at=now,
            updated_at=now,
        )
        self.bundle = self.bundle.model_copy(
            update={
                "active_project_id": project.id,
                "projects": [*self.bundle.projects, project],
            }
        )
        log.info("项目已创建", project_id=project.id, todos=len(todos))
        return project

    def update_project(
        self,
        name: str | None = None,
        description: str | None = None,
        design_system: DesignSystem | None = None,
    ) -> Project:
        project = self.require_active()
        updates: dict = {"updated_at": self.clock()}
        if name is not None:
            updates["name"] = name
        if description is not None:
            updates["description"] = description
        if design_system is not None:
            updates["design_system"] = design_system
        return self._replace(project.model_copy(update=updates))

    def delete_project(self, project_id: str) -> None:
        self.get_project(project_id)
        active_id = self.bundle.active_project_id
        self.bundle = self.bundle.model_copy(
            update={
                "active_project_id": None if active_id == project_id else active_id,
                "projects": [p for p in self.bundle.projects if p.id != project_id],
            }
        )
        log.info("项目已删除", project_id=project_id)

    def load_project(self, project_id: str) -> Project:
        """切换激活项目，不修改任何项目内容"""
        project = self.get_project(project_id)
        self.bundle = self.bundle.model_copy(update={"active_project_id": project_id})
        return project

    def clear_active(self) -> None:
        self.bundle = self.bundle.model_copy(update={"active_project_id": None})

    # ── 文档 ──

    def update_document(self, key: str, content: str) -> Project:
        project = self.require_active()
        field = document_field(key)
        docs = project.core_docs.model_copy(update={field: content})
        return self._replace(
            project.model_copy(update={"core_docs": docs, "updated_at": self.clock()})
        )

    def attach_design_system(self, design_system: DesignSystem) -> Project:
        return self.update_project(design_system=design_system)

    # ── Todo ──

    def update_todo_status(
        self,
        todo_id: str,
        status: TodoStatus,
        updated_by: UpdatedBy = "manual",
        confidence: int | None = None,
    ) -> Project:
        project = self.require_active()
        if not any(t.id == todo_id for t in project.todos):
            raise TodoNotFoundError(todo_id)

        now = self.clock()
        todos = [
            apply_status(t, status, updated_by, confidence, now) if t.id == todo_id else t
            for t in project.todos
        ]
        return self._replace(self._with_todos(project, todos, now))

    def update_todos_batch(self, updates: list[TodoStatusUpdate]) -> Project:
        """
        批量更新（进度分析结果确认后应用），统一记为 ai 更新。

        任一 ID 不存在则整批拒绝，不做部分应用。
        """
        project = self.require_active()
        known = {t.id for t in project.todos}
        for update in updates:
            if update.id not in known:
                raise TodoNotFoundError(update.id)

        now = self.clock()
        by_id = {u.id: u for u in updates}
        todos = []
        for todo in project.todos:
            update = by_id.get(todo.id)
            if update is None:
                todos.append(todo)
            else:
                todos.append(apply_status(todo, update.status, "ai", update.confidence, now))

        log.info("批量更新 Todo 状态", project_id=project.id, count=len(by_id))
        return self._replace(self._with_todos(project, todos, now))

    # ── 扩展 ──

    def add_extension(
        self,
        name: str,
        description: str,
        docs: ExtensionDocuments,
        todos: list[TodoItem] | None = None,
    ) -> Extension:
        """追加扩展：新 Todo 打上扩展 ID 后拼接到项目 Todo 列表末尾，原有 Todo 不变"""
        project = self.require_active()
        now = self.clock()
        extension = Extension(
            id=str(uuid.uuid4()),
            project_id=project.id,
            name=name,
            description=description,
            docs=docs,
            created_at=now,
        )
        tagged = [t.model_copy(update={"extension_id": extension.id}) for t in todos or []]
        all_todos = [*project.todos, *tagged]
        self._replace(
            self._with_todos(
                project,
                all_todos,
                now,
                extensions=[*project.extensions, extension],
            )
        )
        log.info("扩展已添加", project_id=project.id, extension_id=extension.id, todos=len(tagged))
        return extension
