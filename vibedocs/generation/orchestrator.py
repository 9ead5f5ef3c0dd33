"""
文档生成编排器：按固定顺序逐个生成文档，单个失败不影响整批

流程（每个文档类型）：
1. 类型模板 + 共享上下文 → 完整 Prompt
2. 调用 LLM 网关
3. 成功 → 存入结果；失败 → 存入占位文本 + 记录 "{kind}: {错误}" 警告
4. 按 PacingPolicy 等待后继续下一个

整批永不因单个文档失败而中止，返回尽力而为的结果 + 警告列表；
最后把 todoMaster / todo 文档交给解析器生成 Todo 列表。
"""

import structlog

from vibedocs.generation.pacing import PacingPolicy
from vibedocs.llm.client import LLMGateway, classify_error
from vibedocs.llm.errors import InvalidInputError
from vibedocs.observability.metrics import DOCUMENT_TOTAL
from vibedocs.projects.schemas import CoreDocuments, ExtensionDocuments
from vibedocs.prompts.documents import (
    APP_TYPES,
    DOCUMENT_ORDER,
    EXTENSION_ORDER,
    TEMPLATE_TAGS,
    build_core_context,
    build_extension_context,
    compose_document_prompt,
    extension_template_for,
    template_for,
)
from vibedocs.schemas import CamelModel
from vibedocs.todo.parser import decorate_all, parse_core_todos, parse_extension_todos
from vibedocs.todo.schemas import TodoItem

log = structlog.get_logger()


class CoreGenerationResult(CamelModel):
    documents: CoreDocuments
    todos: list[TodoItem]
    warnings: list[str]


class ExtensionGenerationResult(CamelModel):
    documents: ExtensionDocuments
    todos: list[TodoItem]
    warnings: list[str]


def fallback_document(kind: str, error_message: str) -> str:
    """生成失败时的占位文档，保证键始终存在"""
    return f"# {kind}\n\n문서 생성에 실패했습니다. 다시 시도해주세요.\n\n오류: {error_message}"


def _require(value: str | None, field: str) -> str:
    if not value or not str(value).strip():
        raise InvalidInputError(f"{field} is required", field=field)
    return str(value).strip()


class DocumentOrchestrator:
    """单批次串行生成，不做并发扇出"""

    def __init__(self, gateway: LLMGateway, pacing: PacingPolicy | None = None):
        self.gateway = gateway
        self.pacing = pacing or PacingPolicy()

    async def _run_batch(
        self,
        api_key: str,
        kinds: tuple[str, ...],
        templates: dict[str, str],
        context: str,
        model: str | None,
        purpose: str,
    ) -> tuple[dict[str, str], list[str]]:
        documents: dict[str, str] = {}
        warnings: list[str] = []

        for index, kind in enumerate(kinds):
            prompt = compose_document_prompt(templates[kind], context)
            log.info("生成文档", kind=kind, step=f"{index + 1}/{len(kinds)}", purpose=purpose)
            try:
                text = await self.gateway.generate(api_key, prompt, model=model, purpose=purpose)
            except Exception as e:
                error = classify_error(e)
                message = str(error)
                log.warning("文档生成失败，使用占位文本", kind=kind, error_type=type(error).__name__, error=message)
                documents[kind] = fallback_document(kind, message)
                warnings.append(f"{kind}: {message}")
                DOCUMENT_TOTAL.labels(kind=kind, status="fallback").inc()
                if index < len(kinds) - 1:
                    await self.pacing.after_failure(error)
                continue

            documents[kind] = text
            DOCUMENT_TOTAL.labels(kind=kind, status="success").inc()
            log.debug("文档生成完成", kind=kind, chars=len(text))
            # 间隔只出现在两次调用之间
            if index < len(kinds) - 1:
                await self.pacing.after_success()

        return documents, warnings

    async def generate_core(
        self,
        api_key: str,
        idea: str,
        app_type: str,
        template: str | None = None,
        model: str | None = None,
    ) -> CoreGenerationResult:
        """
        生成 10 份核心文档 + 解析 Todo。

        Raises:
            InvalidInputError: 必填字段缺失或取值非法（未发起任何调用）
        """
        api_key = _require(api_key, "apiKey")
        idea = _require(idea, "idea")
        if app_type not in APP_TYPES:
            raise InvalidInputError(f"appType must be one of {', '.join(APP_TYPES)}", field="appType")
        if template and template not in TEMPLATE_TAGS:
            raise InvalidInputError(f"unknown template: {template}", field="template")

        context = build_core_context(idea, app_type, template)
        templates = {kind: template_for(kind) for kind in DOCUMENT_ORDER}
        documents, warnings = await self._run_batch(
            api_key, DOCUMENT_ORDER, templates, context, model, purpose="document"
        )

        todos = decorate_all(parse_core_todos(documents.get("todoMaster", "")), source="core")
        log.info("核心文档批次完成", todos=len(todos), warnings=len(warnings))
        return CoreGenerationResult(
            documents=CoreDocuments.model_validate(documents),
            todos=todos,
            warnings=warnings,
        )

    async def generate_extension(
        self,
        api_key: str,
        feature_name: str,
        feature_description: str,
        project_context: str | None = None,
        model: str | None = None,
    ) -> ExtensionGenerationResult:
        """
        生成 4 份扩展文档 + 解析扩展 Todo。

        Raises:
            InvalidInputError: 必填字段缺失（未发起任何调用）
        """
        api_key = _require(api_key, "apiKey")
        feature_name = _require(feature_name, "featureName")
        feature_description = _require(feature_description, "featureDescription")

        context = build_extension_context(feature_name, feature_description, project_context)
        templates = {kind: extension_template_for(kind) for kind in EXTENSION_ORDER}
        documents, warnings = await self._run_batch(
            api_key, EXTENSION_ORDER, templates, context, model, purpose="extension"
        )

        todos = decorate_all(
            parse_extension_todos(documents.get("todo", ""), feature_name),
            source="extension",
        )
        log.info("扩展文档批次完成", feature=feature_name, todos=len(todos), warnings=len(warnings))
        return ExtensionGenerationResult(
            documents=ExtensionDocuments.model_validate(documents),
            todos=todos,
            warnings=warnings,
        )
