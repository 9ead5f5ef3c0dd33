"""
项目状态接口：对客户端项目 bundle 执行 ProjectStore 操作

每个请求：读取 vibedocs-project 记录 → 执行一次变更 → 整体写回。
同一客户端只有一个写入方，不做乐观锁。
"""

from fastapi import APIRouter, Depends
from pydantic import Field

from vibedocs.api.deps import get_state_repository
from vibedocs.design.schemas import DesignSystem
from vibedocs.projects.schemas import (
    CoreDocuments,
    ExtensionDocuments,
    SingleStatusUpdate,
    TodoStatusUpdate,
)
from vibedocs.projects.store import ProjectStore
from vibedocs.schemas import CamelModel
from vibedocs.state.repository import ClientStateRepository
from vibedocs.todo.schemas import TodoItem

router = APIRouter(prefix="/api/projects", tags=["项目"])


class CreateProjectRequest(CamelModel):
    name: str | None = None
    description: str
    app_type: str
    template: str | None = None
    core_docs: CoreDocuments = Field(default_factory=CoreDocuments)
    todos: list[TodoItem] = Field(default_factory=list)
    design_system: DesignSystem | None = None


class UpdateProjectRequest(CamelModel):
    name: str | None = None
    description: str | None = None
    design_system: DesignSystem | None = None


class UpdateDocumentRequest(CamelModel):
    content: str


class BatchUpdateRequest(CamelModel):
    updates: list[TodoStatusUpdate]


class AddExtensionRequest(CamelModel):
    name: str
    description: str = ""
    docs: ExtensionDocuments = Field(default_factory=ExtensionDocuments)
    todos: list[TodoItem] = Field(default_factory=list)


async def _open(repo: ClientStateRepository) -> ProjectStore:
    return ProjectStore(await repo.load_projects())


@router.get("")
async def list_projects(repo: ClientStateRepository = Depends(get_state_repository)):
    bundle = await repo.load_projects()
    return bundle.to_json_dict()


@router.post("")
async def create_project(
    req: CreateProjectRequest,
    repo: ClientStateRepository = Depends(get_state_repository),
):
    store = await _open(repo)
    project = store.create_project(
        description=req.description,
        app_type=req.app_type,
        core_docs=req.core_docs,
        todos=req.todos,
        name=req.name,
        template=req.template,
        design_system=req.design_system,
    )
    await repo.save_projects(store.bundle)
    return project.to_json_dict()


@router.get("/active")
async def get_active(repo: ClientStateRepository = Depends(get_state_repository)):
    store = await _open(repo)
    return store.require_active().to_json_dict()


@router.patch("/active")
async def update_active(
    req: UpdateProjectRequest,
    repo: ClientStateRepository = Depends(get_state_repository),
):
    store = await _open(repo)
    project = store.update_project(
        name=req.name, description=req.description, design_system=req.design_system
    )
    await repo.save_projects(store.bundle)
    return project.to_json_dict()


@router.post("/{project_id}/load")
async def load_project(
    project_id: str,
    repo: ClientStateRepository = Depends(get_state_repository),
):
    store = await _open(repo)
    project = store.load_project(project_id)
    await repo.save_projects(store.bundle)
    return project.to_json_dict()


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    repo: ClientStateRepository = Depends(get_state_repository),
):
    store = await _open(repo)
    store.delete_project(project_id)
    await repo.save_projects(store.bundle)
    return {"deleted": project_id}


@router.put("/active/documents/{key}")
async def update_document(
    key: str,
    req: UpdateDocumentRequest,
    repo: ClientStateRepository = Depends(get_state_repository),
):
    store = await _open(repo)
    project = store.update_document(key, req.content)
    await repo.save_projects(store.bundle)
    return project.to_json_dict()


@router.patch("/active/todos/{todo_id}")
async def update_todo_status(
    todo_id: str,
    req: SingleStatusUpdate,
    repo: ClientStateRepository = Depends(get_state_repository),
):
    store = await _open(repo)
    project = store.update_todo_status(todo_id, req.status, req.updated_by, req.confidence)
    await repo.save_projects(store.bundle)
    return project.to_json_dict()


@router.post("/active/todos/batch")
async def update_todos_batch(
    req: BatchUpdateRequest,
    repo: ClientStateRepository = Depends(get_state_repository),
):
    store = await _open(repo)
    project = store.update_todos_batch(req.updates)
    await repo.save_projects(store.bundle)
    return project.to_json_dict()


@router.post("/active/extensions")
async def add_extension(
    req: AddExtensionRequest,
    repo: ClientStateRepository = Depends(get_state_repository),
):
    store = await _open(repo)
    extension = store.add_extension(req.name, req.description, req.docs, req.todos)
    await repo.save_projects(store.bundle)
    return {
        "extension": extension.to_json_dict(),
        "project": store.require_active().to_json_dict(),
    }


@router.put("/active/design-system")
async def attach_design_system(
    req: DesignSystem,
    repo: ClientStateRepository = Depends(get_state_repository),
):
    store = await _open(repo)
    project = store.attach_design_system(req)
    await repo.save_projects(store.bundle)
    return project.to_json_dict()
