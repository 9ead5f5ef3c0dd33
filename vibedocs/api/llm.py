"""
单次生成接口：网关直通，供客户端按需重新生成单个文档
"""

from fastapi import APIRouter, Depends

from vibedocs.api.deps import get_gateway
from vibedocs.config import get_settings
from vibedocs.llm.client import LLMGateway
from vibedocs.llm.errors import InvalidInputError
from vibedocs.schemas import CamelModel

router = APIRouter(prefix="/api/llm", tags=["LLM"])
settings = get_settings()


class GenerateRequest(CamelModel):
    api_key: str = ""
    prompt: str = ""
    system_prompt: str | None = None
    model: str | None = None


class GenerateResponse(CamelModel):
    text: str
    model: str


@router.post("/generate")
async def generate(req: GenerateRequest, gateway: LLMGateway = Depends(get_gateway)):
    if not req.api_key.strip():
        raise InvalidInputError("API key is required", field="apiKey")
    if not req.prompt.strip():
        raise InvalidInputError("Prompt is required", field="prompt")

    model = req.model or settings.LLM_DEFAULT_MODEL
    text = await gateway.generate(
        req.api_key.strip(), req.prompt, system_prompt=req.system_prompt, model=model
    )
    return GenerateResponse(text=text, model=model).to_json_dict()
