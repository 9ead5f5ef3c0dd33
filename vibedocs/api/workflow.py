"""
工作流清单接口：读取 / 勾选 / 推进步骤，响应附带进度汇总
"""

from fastapi import APIRouter, Depends

from vibedocs.api.deps import get_state_repository
from vibedocs.schemas import CamelModel
from vibedocs.state import workflow
from vibedocs.state.repository import ClientStateRepository
from vibedocs.state.schemas import StepStatus, WorkflowState, WorkflowStepId

router = APIRouter(prefix="/api/workflow", tags=["工作流"])


class ToggleItemRequest(CamelModel):
    step_id: WorkflowStepId
    item_id: str


class StepStatusRequest(CamelModel):
    status: StepStatus


class CurrentStepRequest(CamelModel):
    step_id: WorkflowStepId


class DeploymentToggleRequest(CamelModel):
    category_index: int
    item_id: str


class ScenarioRequest(CamelModel):
    scenario_id: str


def _view(state: WorkflowState) -> dict:
    body = state.to_json_dict()
    body["overallProgress"] = workflow.overall_progress(state)
    body["stepProgress"] = {s.id: workflow.step_progress(state, s.id) for s in state.steps}
    body["nextAvailableStep"] = workflow.next_available_step(state)
    return body


async def _save(repo: ClientStateRepository, state: WorkflowState) -> dict:
    await repo.save_workflow(state)
    return _view(state)


@router.get("")
async def get_workflow(repo: ClientStateRepository = Depends(get_state_repository)):
    return _view(await repo.load_workflow())


@router.post("/start")
async def start_workflow(repo: ClientStateRepository = Depends(get_state_repository)):
    return await _save(repo, workflow.start(await repo.load_workflow()))


@router.post("/complete")
async def complete_workflow(repo: ClientStateRepository = Depends(get_state_repository)):
    return await _save(repo, workflow.complete(await repo.load_workflow()))


@router.post("/reset")
async def reset_workflow(repo: ClientStateRepository = Depends(get_state_repository)):
    return await _save(repo, workflow.reset())


@router.post("/toggle")
async def toggle_item(
    req: ToggleItemRequest,
    repo: ClientStateRepository = Depends(get_state_repository),
):
    state = workflow.toggle_item(await repo.load_workflow(), req.step_id, req.item_id)
    return await _save(repo, state)


@router.post("/steps/{step_id}/status")
async def update_step_status(
    step_id: WorkflowStepId,
    req: StepStatusRequest,
    repo: ClientStateRepository = Depends(get_state_repository),
):
    state = workflow.update_step_status(await repo.load_workflow(), step_id, req.status)
    return await _save(repo, state)


@router.post("/current-step")
async def set_current_step(
    req: CurrentStepRequest,
    repo: ClientStateRepository = Depends(get_state_repository),
):
    state = workflow.set_current_step(await repo.load_workflow(), req.step_id)
    return await _save(repo, state)


@router.post("/scenario")
async def select_scenario(
    req: ScenarioRequest,
    repo: ClientStateRepository = Depends(get_state_repository),
):
    state = workflow.select_scenario(await repo.load_workflow(), req.scenario_id)
    return await _save(repo, state)


@router.post("/deployment/toggle")
async def toggle_deployment_item(
    req: DeploymentToggleRequest,
    repo: ClientStateRepository = Depends(get_state_repository),
):
    state = workflow.toggle_deployment_item(
        await repo.load_workflow(), req.category_index, req.item_id
    )
    return await _save(repo, state)
