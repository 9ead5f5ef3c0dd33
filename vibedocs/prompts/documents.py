"""
文档 Prompt 模板注册表

- 10 种核心文档 + 4 种扩展文档，按固定顺序生成
- 模板内容为韩文（产品面向韩语用户），结构与生成顺序在此集中维护
- 进度分析 Prompt 同时约定了 LLM 必须返回的 JSON 结构
"""

from typing import Literal, get_args

DocumentKind = Literal[
    "ideaBrief",
    "userStories",
    "screenFlow",
    "prd",
    "techStack",
    "dataModel",
    "apiSpec",
    "testScenarios",
    "todoMaster",
    "promptGuide",
]

ExtensionKind = Literal["prd", "dataModel", "testScenarios", "todo"]

AppType = Literal["web", "mobile", "both"]

TemplateTag = Literal[
    "shopping", "booking", "community", "blog", "dashboard",
    "inventory", "hr", "webpage", "custom",
]

# 生成顺序即声明顺序
DOCUMENT_ORDER: tuple[DocumentKind, ...] = get_args(DocumentKind)
EXTENSION_ORDER: tuple[ExtensionKind, ...] = get_args(ExtensionKind)
APP_TYPES: tuple[AppType, ...] = get_args(AppType)
TEMPLATE_TAGS: tuple[TemplateTag, ...] = get_args(TemplateTag)

DOCUMENT_FILENAMES: dict[DocumentKind, str] = {
    "ideaBrief": "IDEA_BRIEF.md",
    "userStories": "USER_STORIES.md",
    "screenFlow": "SCREEN_FLOW.md",
    "prd": "PRD_CORE.md",
    "techStack": "TECH_STACK.md",
    "dataModel": "DATA_MODEL.md",
    "apiSpec": "API_SPEC.md",
    "testScenarios": "TEST_SCENARIOS.md",
    "todoMaster": "TODO_MASTER.md",
    "promptGuide": "PROMPT_GUIDE.md",
}

DOCUMENT_TITLES: dict[DocumentKind, str] = {
    "ideaBrief": "아이디어 개요",
    "userStories": "사용자 스토리",
    "screenFlow": "화면 흐름도",
    "prd": "PRD 핵심 문서",
    "techStack": "기술 스택",
    "dataModel": "데이터 모델",
    "apiSpec": "API 명세서",
    "testScenarios": "테스트 시나리오",
    "todoMaster": "TODO 마스터",
    "promptGuide": "프롬프트 가이드",
}

_APP_TYPE_LABELS: dict[str, str] = {
    "web": "웹앱",
    "mobile": "모바일앱",
    "both": "웹/모바일앱",
}

# ── 核心文档模板 ──

_DOCUMENT_PROMPTS: dict[DocumentKind, str] = {
    "ideaBrief": """당신은 프로젝트 기획 전문가입니다.
사용자의 아이디어를 분석하여 IDEA_BRIEF.md 문서를 작성해주세요.
마크다운 형식으로 작성하고, 다음 섹션을 포함해주세요:
- 프로젝트 개요
- 핵심 가치 제안
- 목표 사용자
- 주요 기능 요약
- 성공 지표""",
    "userStories": """당신은 UX 전문가입니다.
사용자 스토리를 "~로서, ~하고 싶다, 왜냐하면 ~" 형식으로 작성해주세요.
마크다운 형식으로 작성하고, 사용자 유형별로 그룹화해주세요.
최소 5개 이상의 사용자 스토리를 작성해주세요.""",
    "screenFlow": """당신은 UI/UX 설계 전문가입니다.
화면 흐름도를 마크다운으로 작성해주세요.
- 전체 사이트맵을 트리 구조로 보여주세요
- 각 화면의 목적과 주요 요소를 설명해주세요
- 화면 간 전환 흐름을 설명해주세요""",
    "prd": """당신은 프로덕트 매니저입니다.
PRD(Product Requirements Document)를 마크다운으로 작성해주세요.
다음 섹션을 포함해주세요:
- 프로젝트 개요
- 기능적 요구사항 (테이블 형태로)
- 비기능적 요구사항
- 제약사항 및 가정""",
    "techStack": """당신은 시니어 풀스택 개발자입니다.
프로젝트에 적합한 기술 스택을 마크다운으로 추천해주세요.
테이블 형태로 정리하고, 각 기술의 선택 이유를 설명해주세요.
- 프론트엔드
- 백엔드
- 데이터베이스
- 개발 도구
- 배포""",
    "dataModel": """당신은 데이터베이스 설계 전문가입니다.
프로젝트의 데이터 모델을 마크다운으로 작성해주세요.
- TypeScript 인터페이스 형태로 정의
- 각 엔티티의 필드와 타입 설명
- 엔티티 간의 관계도 설명""",
    "apiSpec": """당신은 백엔드 API 설계 전문가입니다.
RESTful API 명세를 마크다운으로 작성해주세요.
- 각 엔드포인트의 메소드, 경로
- 요청/응답 JSON 형식 예시
- 에러 응답 형식""",
    "testScenarios": """당신은 QA 전문가입니다.
테스트 시나리오를 마크다운으로 작성해주세요.
- Given-When-Then 형식
- 각 시나리오에 TC ID 부여
- 주요 기능별로 최소 3개 이상의 테스트 케이스""",
    "todoMaster": """당신은 프로젝트 매니저입니다.
개발 TODO 목록을 Phase별로 구성해주세요.
- 각 Phase는 "## Phase N: 이름" 형식의 제목으로 시작
- 각 Phase에 적절한 태스크 포함
- 예상 소요시간(시간 단위) 명시, 예: (4시간)
- 우선순위(Critical/High/Medium/Low) 표시
- 체크박스 형태로 작성, 예: - [ ] 로그인 API 구현 (4시간)""",
    "promptGuide": """당신은 AI 코딩 전문가입니다.
이 프로젝트의 문서들을 AI 도구(Claude, Cursor, Bolt 등)와 함께 사용하는 방법을 안내해주세요.
- 각 문서의 활용법
- 추천 프롬프트 예시
- AI 도구별 팁""",
}

# ── 扩展文档模板 ──

_EXTENSION_PROMPTS: dict[ExtensionKind, str] = {
    "prd": """당신은 프로덕트 매니저입니다.
기존 프로젝트에 추가되는 새 기능의 PRD 확장 문서를 작성해주세요.
다음 섹션을 포함해주세요:
- 기능 개요
- 기능 요구사항 (필수/선택 구분)
- 비기능 요구사항
- 사용자 스토리""",
    "dataModel": """당신은 데이터베이스 설계 전문가입니다.
새 기능에 필요한 데이터 모델 확장을 작성해주세요.
- TypeScript 인터페이스로 정의
- 기존 모델과의 관계 설명
- 인덱스 추천""",
    "testScenarios": """당신은 QA 전문가입니다.
새 기능에 대한 테스트 시나리오를 작성해주세요.
- Given-When-Then 형식
- TC-EXT-XXX 형태로 ID 부여
- 단위/통합/E2E 테스트 구분""",
    "todo": """당신은 프로젝트 매니저입니다.
새 기능 구현을 위한 TODO 목록을 작성해주세요.
- Phase EXT로 구분
- 각 항목에 예상 시간(시간 단위) 명시
- 우선순위(Critical/High/Medium/Low) 표시
- 체크박스 형태로 작성""",
}

# ── 进度分析模板（{todos} / {work_description} / {code_section} 运行时注入） ──

PROGRESS_ANALYSIS_PROMPT = """당신은 소프트웨어 개발 진행도를 분석하는 전문가입니다.

사용자가 제공한 작업 내용을 분석하여, 완료되었거나 진행 중인 TODO 항목을 식별해주세요.

## 규칙
1. 각 TODO 항목에 대해 작업 내용과의 관련성을 0-100% 신뢰도로 평가
2. 신뢰도 50% 이상인 항목만 반환
3. 작업 내용이 해당 TODO를 완전히 완료했다면 suggestedStatus는 "done"
4. 작업 내용이 해당 TODO를 부분적으로 진행했다면 suggestedStatus는 "in-progress"
5. 각 매칭에 대해 간단한 이유 설명 제공

## 응답 형식 (JSON)
{{
  "matches": [
    {{
      "todoId": "TODO-001",
      "title": "TODO 제목",
      "confidence": 85,
      "reason": "로그인 API 구현이 작업 내용에 포함됨",
      "suggestedStatus": "done"
    }}
  ],
  "summary": "전체 분석 요약 (1-2문장)"
}}

## TODO 목록
{todos}

## 사용자 작업 내용
{work_description}

{code_section}

JSON 형식으로만 응답해주세요. 마크다운 코드 블록 없이 순수 JSON만 반환하세요."""


def template_for(kind: DocumentKind) -> str:
    """核心文档模板（闭集，全覆盖）"""
    return _DOCUMENT_PROMPTS[kind]


def extension_template_for(kind: ExtensionKind) -> str:
    """扩展文档模板（闭集，全覆盖）"""
    return _EXTENSION_PROMPTS[kind]


def app_type_label(app_type: str) -> str:
    return _APP_TYPE_LABELS.get(app_type, _APP_TYPE_LABELS["both"])


def build_core_context(idea: str, app_type: str, template: str | None = None) -> str:
    """构建核心批次共享的上下文块（每批只构建一次）"""
    template_info = f"템플릿: {template}" if template else ""
    return f"""
프로젝트 아이디어: {idea}
앱 유형: {app_type_label(app_type)}
{template_info}

위 프로젝트에 대해 다음 문서를 작성해주세요.
한국어로 작성해주세요.
마크다운 형식으로만 응답해주세요 (코드 블록 없이).
"""


def build_extension_context(
    feature_name: str,
    feature_description: str,
    project_context: str | None = None,
) -> str:
    """构建扩展批次共享的上下文块"""
    context_line = f"프로젝트 컨텍스트: {project_context}" if project_context else ""
    return f"""
기능명: {feature_name}
기능 설명: {feature_description}
{context_line}

위 기능에 대해 다음 문서를 작성해주세요.
한국어로 작성해주세요.
마크다운 형식으로만 응답해주세요.
"""


def compose_document_prompt(template: str, context: str) -> str:
    """完整 Prompt = 类型模板 + 共享上下文"""
    return f"{template}\n\n{context}"
