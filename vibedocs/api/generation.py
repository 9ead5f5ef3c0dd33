"""
文档批量生成接口

- POST /api/documents/generate : 10 份核心文档 + Todo
- POST /api/extensions/generate: 4 份扩展文档 + Todo

单个文档失败不会让请求失败，失败信息体现在 warnings 中。
"""

from fastapi import APIRouter, Depends

from vibedocs.api.deps import get_orchestrator
from vibedocs.generation.orchestrator import DocumentOrchestrator
from vibedocs.schemas import CamelModel

router = APIRouter(prefix="/api", tags=["文档生成"])


class GenerateDocumentsRequest(CamelModel):
    api_key: str = ""
    idea: str = ""
    app_type: str = ""
    template: str | None = None
    model: str | None = None


class GenerateExtensionRequest(CamelModel):
    api_key: str = ""
    feature_name: str = ""
    feature_description: str = ""
    project_context: str | None = None
    model: str | None = None


@router.post("/documents/generate")
async def generate_documents(
    req: GenerateDocumentsRequest,
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
):
    result = await orchestrator.generate_core(
        req.api_key, req.idea, req.app_type, template=req.template, model=req.model
    )
    return result.to_json_dict()


@router.post("/extensions/generate")
async def generate_extension(
    req: GenerateExtensionRequest,
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
):
    result = await orchestrator.generate_extension(
        req.api_key,
        req.feature_name,
        req.feature_description,
        project_context=req.project_context,
        model=req.model,
    )
    return result.to_json_dict()
