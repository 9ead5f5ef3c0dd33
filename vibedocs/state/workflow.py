"""
工作流清单：从想法到上线维护的 7 个固定步骤

步骤状态 locked → available → in-progress → completed；
完成一个步骤会解锁下一个步骤。所有函数返回新的 WorkflowState，不修改入参。
"""

from datetime import datetime, timezone

from vibedocs.state.schemas import (
    ChecklistItem,
    DeploymentCategory,
    DeploymentItem,
    StepStatus,
    WorkflowState,
    WorkflowStep,
    WorkflowStepId,
)

STEP_ORDER: tuple[WorkflowStepId, ...] = (
    "idea", "generate", "ai-tool", "develop", "extend", "deploy", "maintain",
)

# (id, 名称, 说明, 关联页面, 预估时间, [(条目 id, 标题, 说明), ...])
_DEFAULT_STEPS = (
    ("idea", "아이디어 정리", "프로젝트의 핵심 아이디어를 구체화합니다", None, "30분", (
        ("idea-1", "해결하려는 문제 정의", "이 앱이 해결하려는 핵심 문제가 무엇인가요?"),
        ("idea-2", "타겟 사용자 정의", "주요 사용자는 누구인가요?"),
        ("idea-3", "핵심 기능 3가지 선정", "MVP에 포함될 핵심 기능은 무엇인가요?"),
        ("idea-4", "경쟁 서비스 조사", "비슷한 서비스가 있다면 어떤 점이 다른가요?"),
    )),
    ("generate", "문서 생성", "AI가 프로젝트에 필요한 10개 문서를 자동 생성합니다", "/new", "5분", (
        ("gen-1", "아이디어 입력 (50자 이상)", "프로젝트 아이디어를 상세하게 입력하세요"),
        ("gen-2", "앱 유형 선택", "웹, 모바일, 또는 둘 다 선택하세요"),
        ("gen-3", "API 키 설정", "Google AI Studio API 키를 입력하세요"),
        ("gen-4", "문서 생성 완료", "10개 문서가 모두 생성되었는지 확인하세요"),
    )),
    ("ai-tool", "AI 도구 선택", "개발에 사용할 AI 도구를 선택하고 설정합니다", "/guide", "15분", (
        ("ai-1", "VS Code 설치", "VS Code를 설치하세요 (code.visualstudio.com)"),
        ("ai-2", "AI 도구 비교 검토", "사용할 AI 코딩 도구를 비교하고 선택하세요"),
        ("ai-3", "선택한 도구 설치", "npm install -g 명령어로 CLI 도구를 설치하세요"),
        ("ai-4", "API 키 설정", "선택한 도구의 API 키를 환경변수로 설정하세요"),
        ("ai-5", "첫 번째 테스트", "생성된 문서를 활용해 AI와 첫 대화를 시도해보세요"),
    )),
    ("develop", "개발 진행", "TODO 목록을 따라 단계별로 개발을 진행합니다", "/dashboard", "프로젝트에 따라 다름", (
        ("dev-1", "프로젝트 초기 설정", "개발 환경 및 프로젝트 구조 설정"),
        ("dev-2", "Phase 1 완료", "첫 번째 개발 단계 완료"),
        ("dev-3", "중간 점검", "진행률 분석으로 진행 상황 확인"),
        ("dev-4", "핵심 기능 구현", "MVP 핵심 기능 개발 완료"),
    )),
    ("extend", "기능 확장", "필요에 따라 새로운 기능을 추가합니다", "/extend", "기능당 1-2시간", (
        ("ext-1", "추가 기능 목록 작성", "MVP 이후 추가할 기능 정리"),
        ("ext-2", "기능 우선순위 결정", "가장 중요한 기능부터 순서 정하기"),
        ("ext-3", "확장 문서 생성", "새 기능에 대한 문서 자동 생성"),
        ("ext-4", "확장 기능 구현", "새 기능 개발 완료"),
    )),
    ("deploy", "배포 준비", "프로젝트를 배포하기 위한 최종 점검을 합니다", None, "1-2시간", (
        ("dep-1", "코드 품질 검사", "린트, 타입 체크, 빌드 테스트"),
        ("dep-2", "테스트 실행", "모든 테스트가 통과하는지 확인"),
        ("dep-3", "환경 변수 설정", "프로덕션 환경 변수 준비"),
        ("dep-4", "배포 플랫폼 선택", "Vercel, Netlify 등 플랫폼 선택"),
        ("dep-5", "배포 완료", "성공적으로 배포 완료"),
    )),
    ("maintain", "배포 후 관리", "배포된 서비스를 모니터링하고 관리합니다", None, "지속적", (
        ("main-1", "모니터링 설정", "에러 트래킹, 성능 모니터링 설정"),
        ("main-2", "사용자 피드백 수집", "초기 사용자 의견 수렴"),
        ("main-3", "버그 수정", "발견된 버그 해결"),
        ("main-4", "다음 버전 계획", "v2 기능 목록 작성"),
    )),
)

# (分类, [(条目 id, 标题, 说明, 是否必需), ...])
_DEPLOYMENT_CHECKLIST = (
    ("코드 품질", (
        ("lint", "린트 검사 통과", "린트 에러 및 경고 해결", True),
        ("type-check", "타입 검사 통과", "타입 체크 에러 없음", True),
        ("build", "프로덕션 빌드 성공", "빌드 명령 성공", True),
        ("console", "콘솔 에러 제거", "브라우저 콘솔에 에러 없음", False),
    )),
    ("테스트", (
        ("unit-test", "단위 테스트 통과", "모든 유닛 테스트 통과", False),
        ("e2e-test", "E2E 테스트 통과", "주요 사용자 흐름 테스트", False),
        ("manual-test", "수동 테스트 완료", "주요 기능 직접 테스트", True),
    )),
    ("환경 설정", (
        ("env-vars", "환경 변수 설정", "프로덕션 환경 변수 준비", True),
        ("secrets", "API 키 보안 확인", "API 키가 코드에 노출되지 않음", True),
        ("domain", "도메인 설정", "커스텀 도메인 연결 (선택)", False),
    )),
    ("성능", (
        ("lighthouse", "Lighthouse 점수 확인", "성능 점수 70점 이상", False),
        ("images", "이미지 최적화", "이미지 크기 및 포맷 최적화", False),
        ("bundle", "번들 크기 확인", "불필요한 종속성 제거", False),
    )),
    ("보안", (
        ("https", "HTTPS 활성화", "SSL 인증서 적용", True),
        ("headers", "보안 헤더 설정", "CSP, CORS 등 보안 헤더", False),
        ("dependencies", "의존성 취약점 검사", "의존성 감사로 취약점 확인", False),
    )),
)


def default_workflow() -> WorkflowState:
    """全新的工作流：仅第一步可用，其余锁定"""
    steps = [
        WorkflowStep(
            id=step_id,
            name=name,
            description=description,
            status="available" if index == 0 else "locked",
            linked_page=linked_page,
            estimated_time=estimated_time,
            checklist=[ChecklistItem(id=i, title=t, description=d) for i, t, d in items],
        )
        for index, (step_id, name, description, linked_page, estimated_time, items) in enumerate(_DEFAULT_STEPS)
    ]
    deployment = [
        DeploymentCategory(
            category=category,
            items=[DeploymentItem(id=i, title=t, description=d, is_required=r) for i, t, d, r in items],
        )
        for category, items in _DEPLOYMENT_CHECKLIST
    ]
    return WorkflowState(steps=steps, deployment_checklist=deployment)


def _find_step(state: WorkflowState, step_id: str) -> WorkflowStep | None:
    return next((s for s in state.steps if s.id == step_id), None)


def _unlock_next(steps: list[WorkflowStep], step_id: str) -> list[WorkflowStep]:
    if step_id not in STEP_ORDER:
        return steps
    index = STEP_ORDER.index(step_id)
    if index + 1 >= len(STEP_ORDER):
        return steps
    next_id = STEP_ORDER[index + 1]
    return [
        s.model_copy(update={"status": "available"}) if s.id == next_id and s.status == "locked" else s
        for s in steps
    ]


def step_progress(state: WorkflowState, step_id: str) -> int:
    step = _find_step(state, step_id)
    if step is None or not step.checklist:
        return 0
    checked = sum(1 for item in step.checklist if item.checked)
    return int(checked * 100 / len(step.checklist) + 0.5)


def overall_progress(state: WorkflowState) -> int:
    total = sum(len(s.checklist) for s in state.steps)
    checked = sum(1 for s in state.steps for item in s.checklist if item.checked)
    return int(checked * 100 / total + 0.5) if total else 0


def can_proceed_to(state: WorkflowState, step_id: str) -> bool:
    step = _find_step(state, step_id)
    return step is not None and step.status != "locked"


def next_available_step(state: WorkflowState) -> WorkflowStepId | None:
    """当前步骤之后第一个未锁定的步骤"""
    index = STEP_ORDER.index(state.current_step)
    for step_id in STEP_ORDER[index + 1 :]:
        if can_proceed_to(state, step_id):
            return step_id
    return None


def set_current_step(state: WorkflowState, step_id: WorkflowStepId) -> WorkflowState:
    """锁定的步骤不能进入，原样返回"""
    if not can_proceed_to(state, step_id):
        return state
    return state.model_copy(update={"current_step": step_id})


def update_step_status(state: WorkflowState, step_id: WorkflowStepId, status: StepStatus) -> WorkflowState:
    steps = [s.model_copy(update={"status": status}) if s.id == step_id else s for s in state.steps]
    if status == "completed":
        steps = _unlock_next(steps, step_id)
    return state.model_copy(update={"steps": steps})


def toggle_item(state: WorkflowState, step_id: WorkflowStepId, item_id: str) -> WorkflowState:
    """
    切换清单条目的勾选状态。

    全部勾选 → completed（并解锁下一步）；available 步骤出现勾选 → in-progress。
    """
    steps: list[WorkflowStep] = []
    for step in state.steps:
        if step.id != step_id:
            steps.append(step)
            continue
        checklist = [
            item.model_copy(update={"checked": not item.checked}) if item.id == item_id else item
            for item in step.checklist
        ]
        status = step.status
        if checklist and all(item.checked for item in checklist):
            status = "completed"
        elif step.status == "available" and any(item.checked for item in checklist):
            status = "in-progress"
        steps.append(step.model_copy(update={"checklist": checklist, "status": status}))

    current = next((s for s in steps if s.id == step_id), None)
    if current is not None and current.status == "completed":
        steps = _unlock_next(steps, step_id)
    return state.model_copy(update={"steps": steps})


def toggle_deployment_item(state: WorkflowState, category_index: int, item_id: str) -> WorkflowState:
    categories = []
    for index, category in enumerate(state.deployment_checklist):
        if index == category_index:
            category = category.model_copy(
                update={
                    "items": [
                        item.model_copy(update={"checked": not item.checked}) if item.id == item_id else item
                        for item in category.items
                    ]
                }
            )
        categories.append(category)
    return state.model_copy(update={"deployment_checklist": categories})


def select_scenario(state: WorkflowState, scenario_id: str) -> WorkflowState:
    return state.model_copy(update={"selected_scenario": scenario_id})


def start(state: WorkflowState, now: datetime | None = None) -> WorkflowState:
    steps = [
        s.model_copy(update={"status": "in-progress"}) if index == 0 else s
        for index, s in enumerate(state.steps)
    ]
    return state.model_copy(update={"steps": steps, "started_at": now or datetime.now(timezone.utc)})


def complete(state: WorkflowState, now: datetime | None = None) -> WorkflowState:
    return state.model_copy(update={"completed_at": now or datetime.now(timezone.utc)})


def reset() -> WorkflowState:
    return default_workflow()
