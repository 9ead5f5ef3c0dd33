"""
设计提取接口：从参考网站推断设计系统
"""

from fastapi import APIRouter, Depends

from vibedocs.api.deps import get_style_sampler
from vibedocs.design.extractor import extract_design
from vibedocs.design.sampler import PageStyleSampler
from vibedocs.design.schemas import ExtractOptions
from vibedocs.schemas import CamelModel

router = APIRouter(prefix="/api/design", tags=["设计提取"])


class ExtractDesignRequest(CamelModel):
    url: str = ""
    options: ExtractOptions | None = None


@router.post("/extract")
async def extract(
    req: ExtractDesignRequest,
    sampler: PageStyleSampler = Depends(get_style_sampler),
):
    design = await extract_design(req.url, req.options, sampler=sampler)
    return {"success": True, "design": design.to_json_dict()}
