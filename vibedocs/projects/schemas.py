"""
项目聚合根及其拥有的文档 / 扩展

Project 独占其 Documents、Extensions、TodoItems，不在项目间共享；
progress 永远由 todos 派生，见 vibedocs.todo.progress。
"""

from datetime import datetime

from pydantic import Field

from vibedocs.design.schemas import DesignSystem
from vibedocs.prompts.documents import AppType, TemplateTag
from vibedocs.schemas import CamelModel
from vibedocs.todo.progress import ProjectProgress
from vibedocs.todo.schemas import TodoItem, TodoStatus, UpdatedBy


class CoreDocuments(CamelModel):
    """10 份核心文档，生成失败时为占位文本（可为空串，但键始终存在）"""

    idea_brief: str = ""
    user_stories: str = ""
    screen_flow: str = ""
    prd: str = ""
    tech_stack: str = ""
    data_model: str = ""
    api_spec: str = ""
    test_scenarios: str = ""
    todo_master: str = ""
    prompt_guide: str = ""


class ExtensionDocuments(CamelModel):
    prd: str = ""
    data_model: str = ""
    test_scenarios: str = ""
    todo: str = ""


class Extension(CamelModel):
    id: str
    project_id: str | None = None
    name: str
    description: str
    docs: ExtensionDocuments
    created_at: datetime


class Project(CamelModel):
    id: str
    name: str
    description: str  # 用户输入的想法原文
    app_type: AppType
    template: TemplateTag | None = None
    core_docs: CoreDocuments
    extensions: list[Extension] = Field(default_factory=list)
    todos: list[TodoItem] = Field(default_factory=list)
    progress: ProjectProgress
    design_system: DesignSystem | None = None
    created_at: datetime
    updated_at: datetime


class TodoStatusUpdate(CamelModel):
    """批量状态更新中的单条记录"""

    id: str
    status: TodoStatus
    confidence: int | None = Field(default=None, ge=0, le=100)


class SingleStatusUpdate(CamelModel):
    status: TodoStatus
    updated_by: UpdatedBy = "manual"
    confidence: int | None = Field(default=None, ge=0, le=100)
