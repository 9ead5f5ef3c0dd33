"""
API Key 校验接口

- 有效（含限流但有效）→ 200
- Key 被拒绝 → 401 / 403；所有模型都失败 → 400
响应体始终是 ValidationResult。
"""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from vibedocs.api.deps import get_key_validator
from vibedocs.llm.errors import AuthError, PermissionDeniedError
from vibedocs.llm.key_validator import KeyValidator
from vibedocs.schemas import CamelModel

router = APIRouter(prefix="/api/keys", tags=["API Key"])
log = structlog.get_logger()

_FAILURE_STATUS = {
    AuthError.code: AuthError.status_code,
    PermissionDeniedError.code: PermissionDeniedError.status_code,
}


class ValidateKeyRequest(CamelModel):
    api_key: str = ""


@router.post("/validate")
async def validate_key(
    req: ValidateKeyRequest,
    validator: KeyValidator = Depends(get_key_validator),
):
    result = await validator.validate(req.api_key)
    status_code = 200 if result.valid else _FAILURE_STATUS.get(result.error_code, 400)
    return JSONResponse(status_code=status_code, content=result.to_json_dict())
