"""
持久化边界：完整内存状态 ⇄ 持久化子集

- to_persisted：派生字段（progress）不落盘，瞬态字段（loading / error / Key 校验缓存）本就不在模型里
- from_persisted：未知字段忽略、缺失字段取默认值，progress 按 todos 重新计算

不做版本迁移。
"""

from datetime import datetime, timezone

from vibedocs.projects.schemas import Project
from vibedocs.state.schemas import ProjectsBundle, UserSettings, WorkflowState
from vibedocs.state.workflow import default_workflow
from vibedocs.todo.progress import calculate_progress
from vibedocs.todo.schemas import TodoItem


def project_to_persisted(project: Project) -> dict:
    data = project.to_json_dict()
    data.pop("progress", None)
    return data


def project_from_persisted(payload: dict, now: datetime | None = None) -> Project:
    data = {k: v for k, v in payload.items() if k != "progress"}
    todos = [TodoItem.model_validate(t) for t in data.get("todos") or []]
    data["todos"] = todos
    # 旧记录的扩展没有 projectId，按所属项目补齐
    data["extensions"] = [
        {**e, "projectId": e.get("projectId") or data.get("id")}
        for e in data.get("extensions") or []
        if isinstance(e, dict)
    ]
    data["progress"] = calculate_progress(todos, now or datetime.now(timezone.utc))
    return Project.model_validate(data)


def bundle_to_persisted(bundle: ProjectsBundle) -> dict:
    return {
        "activeProjectId": bundle.active_project_id,
        "projects": [project_to_persisted(p) for p in bundle.projects],
    }


def bundle_from_persisted(payload: dict | None, now: datetime | None = None) -> ProjectsBundle:
    """
    还原项目 bundle。

    兼容把激活项目整体存为 "project" 字段的旧格式：
    若它不在 projects 列表里则补进去，并作为激活项目。
    """
    payload = payload or {}
    projects = [project_from_persisted(p, now) for p in payload.get("projects") or []]
    active_id = payload.get("activeProjectId")

    legacy = payload.get("project")
    if isinstance(legacy, dict):
        active = project_from_persisted(legacy, now)
        if all(p.id != active.id for p in projects):
            projects.append(active)
        active_id = active_id or active.id

    if active_id and all(p.id != active_id for p in projects):
        active_id = None
    return ProjectsBundle(active_project_id=active_id, projects=projects)


def settings_to_persisted(settings: UserSettings) -> dict:
    return settings.to_json_dict()


def settings_from_persisted(payload: dict | None) -> UserSettings:
    return UserSettings.model_validate(payload or {})


def workflow_to_persisted(state: WorkflowState) -> dict:
    return state.to_json_dict()


def workflow_from_persisted(payload: dict | None) -> WorkflowState:
    if not payload:
        return default_workflow()
    state = WorkflowState.model_validate(payload)
    if not state.steps:
        state = state.model_copy(update={"steps": default_workflow().steps})
    if not state.deployment_checklist:
        state = state.model_copy(update={"deployment_checklist": default_workflow().deployment_checklist})
    return state
