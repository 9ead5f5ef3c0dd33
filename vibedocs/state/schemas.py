"""
客户端持久化记录：三个互相独立的命名记录，各自整体序列化为 JSON

| 记录名              | 模型           | 内容                         |
|---------------------|----------------|------------------------------|
| vibedocs-project    | ProjectsBundle | 当前激活项目 + 全部项目列表     |
| vibedocs-settings   | UserSettings   | API Key、主题、语言、自动保存   |
| vibedocs-workflow   | WorkflowState  | 工作流清单进度                 |
"""

from datetime import datetime
from typing import Literal

from pydantic import Field

from vibedocs.projects.schemas import Project
from vibedocs.schemas import CamelModel

RecordName = Literal["vibedocs-project", "vibedocs-settings", "vibedocs-workflow"]

PROJECT_RECORD: RecordName = "vibedocs-project"
SETTINGS_RECORD: RecordName = "vibedocs-settings"
WORKFLOW_RECORD: RecordName = "vibedocs-workflow"

WorkflowStepId = Literal["idea", "generate", "ai-tool", "develop", "extend", "deploy", "maintain"]
StepStatus = Literal["locked", "available", "in-progress", "completed"]


class ProjectsBundle(CamelModel):
    active_project_id: str | None = None
    projects: list[Project] = Field(default_factory=list)

    @property
    def active(self) -> Project | None:
        if self.active_project_id is None:
            return None
        return next((p for p in self.projects if p.id == self.active_project_id), None)


class UserSettings(CamelModel):
    api_key: str | None = None
    theme: Literal["light", "dark", "system"] = "system"
    language: Literal["ko", "en"] = "ko"
    auto_save: bool = True
    auto_save_interval: int = 500  # 毫秒，防抖间隔


class ChecklistItem(CamelModel):
    id: str
    title: str
    description: str = ""
    checked: bool = False


class WorkflowStep(CamelModel):
    id: WorkflowStepId
    name: str
    description: str = ""
    status: StepStatus = "locked"
    linked_page: str | None = None
    estimated_time: str = ""
    checklist: list[ChecklistItem] = Field(default_factory=list)


class DeploymentItem(ChecklistItem):
    is_required: bool = False


class DeploymentCategory(CamelModel):
    category: str
    items: list[DeploymentItem] = Field(default_factory=list)


class WorkflowState(CamelModel):
    current_step: WorkflowStepId = "idea"
    steps: list[WorkflowStep] = Field(default_factory=list)
    selected_scenario: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    deployment_checklist: list[DeploymentCategory] = Field(default_factory=list)
