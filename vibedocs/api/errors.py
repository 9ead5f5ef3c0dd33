"""
异常 → HTTP 响应映射，仅在 API 层做转换

统一响应体：{"error": {"code": ..., "message": ..., "details": ...}}
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from vibedocs.design.sampler import DesignExtractionError
from vibedocs.llm.errors import InvalidInputError, LLMError
from vibedocs.observability.metrics import ERROR_TOTAL
from vibedocs.projects.store import NoActiveProjectError, ProjectNotFoundError, TodoNotFoundError

log = structlog.get_logger()


def error_body(code: str, message: str, details: object = None) -> dict:
    return {"error": {"code": code, "message": message, "details": details}}


async def _invalid_input(request: Request, exc: InvalidInputError) -> JSONResponse:
    details = {"field": exc.field} if exc.field else None
    return JSONResponse(status_code=400, content=error_body("invalid_input", str(exc), details))


async def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_body("invalid_input", "요청 형식이 올바르지 않습니다.", errors),
    )


async def _model_validation(request: Request, exc: ValidationError) -> JSONResponse:
    errors = [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]
    return JSONResponse(
        status_code=400,
        content=error_body("invalid_input", "저장 데이터 형식이 올바르지 않습니다.", errors),
    )


async def _llm_error(request: Request, exc: LLMError) -> JSONResponse:
    log.warning("LLM 错误返回客户端", path=request.url.path, code=exc.code, error=str(exc))
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, str(exc)))


async def _state_error(
    request: Request,
    exc: ProjectNotFoundError | TodoNotFoundError | NoActiveProjectError,
) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, str(exc)))


async def _design_error(request: Request, exc: DesignExtractionError) -> JSONResponse:
    ERROR_TOTAL.labels(error_type="design_extraction").inc()
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, str(exc), {"hint": exc.hint}),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidInputError, _invalid_input)
    app.add_exception_handler(RequestValidationError, _request_validation)
    app.add_exception_handler(ValidationError, _model_validation)
    app.add_exception_handler(LLMError, _llm_error)
    app.add_exception_handler(ProjectNotFoundError, _state_error)
    app.add_exception_handler(TodoNotFoundError, _state_error)
    app.add_exception_handler(NoActiveProjectError, _state_error)
    app.add_exception_handler(DesignExtractionError, _design_error)
