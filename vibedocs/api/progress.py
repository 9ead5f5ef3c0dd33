"""
进度分析接口：把已完成工作的描述匹配到 Todo

不带 apiKey 时直接走关键词匹配；匹配结果只是建议，
应用到项目需客户端确认后调用 /api/projects/active/todos/batch。
"""

from fastapi import APIRouter, Depends

from vibedocs.api.deps import get_analyzer
from vibedocs.llm.errors import InvalidInputError
from vibedocs.schemas import CamelModel
from vibedocs.todo.matcher import ProgressAnalyzer, auto_selected
from vibedocs.todo.schemas import TodoItem

router = APIRouter(prefix="/api/progress", tags=["进度分析"])


class AnalyzeProgressRequest(CamelModel):
    api_key: str | None = None
    work_description: str = ""
    todos: list[TodoItem] | None = None
    code: str | None = None
    model: str | None = None


@router.post("/analyze")
async def analyze_progress(
    req: AnalyzeProgressRequest,
    analyzer: ProgressAnalyzer = Depends(get_analyzer),
):
    if not req.work_description.strip():
        raise InvalidInputError("Work description is required", field="workDescription")
    if req.todos is None:
        raise InvalidInputError("TODO list is required", field="todos")

    report = await analyzer.analyze(
        req.work_description,
        req.todos,
        code=req.code,
        api_key=req.api_key,
        model=req.model,
    )
    body = report.to_json_dict()
    body["autoSelected"] = auto_selected(report.matches)
    return body
