"""
Todo 数据模型

ProtoTodo 是解析器的直接产物（尚未补全 prompt / 时间戳），
TodoItem 是进入项目状态后的完整实体。
"""

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from vibedocs.schemas import CamelModel

TodoStatus = Literal["pending", "in-progress", "done"]
Priority = Literal["critical", "high", "medium", "low"]
TodoSource = Literal["core", "extension"]
UpdatedBy = Literal["manual", "ai"]


class ProtoTodo(CamelModel):
    """解析器输出的 Todo 雏形"""

    id: str
    title: str
    description: str
    phase: str
    source: TodoSource = "core"
    status: Literal["pending"] = "pending"
    priority: Priority = "medium"
    estimated_hours: float = 2


class TodoItem(CamelModel):
    """单个 Todo 条目"""

    id: str
    title: str
    description: str = ""
    phase: str
    source: TodoSource = "core"
    extension_id: str | None = None

    status: TodoStatus = "pending"
    status_updated_by: UpdatedBy = "manual"
    status_confidence: int | None = Field(default=None, ge=0, le=100)

    priority: Priority = "medium"
    estimated_hours: float = 2
    actual_hours: float | None = None
    # 预留字段：当前生成流程不解析依赖关系，始终为空
    dependencies: list[str] = Field(default_factory=list)
    prompt: str = ""
    test_criteria: list[str] = Field(default_factory=list)

    created_at: datetime
    updated_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id_to_str(cls, v: object) -> str:
        """客户端回传时偶尔是整数 id，统一转为字符串"""
        return str(v)
