"""
客户端持久化记录的整体读写

GET 返回规范化后的记录（缺失字段补默认值）；PUT 先按模型校验再整体覆盖。
"""

from fastapi import APIRouter, Depends

from vibedocs.api.deps import get_state_repository
from vibedocs.llm.errors import InvalidInputError
from vibedocs.state import serializer
from vibedocs.state.repository import ClientStateRepository
from vibedocs.state.schemas import PROJECT_RECORD, SETTINGS_RECORD, WORKFLOW_RECORD

router = APIRouter(prefix="/api/state", tags=["客户端状态"])

# 记录名 → (反序列化, 序列化)
_CODECS = {
    PROJECT_RECORD: (serializer.bundle_from_persisted, serializer.bundle_to_persisted),
    SETTINGS_RECORD: (serializer.settings_from_persisted, serializer.settings_to_persisted),
    WORKFLOW_RECORD: (serializer.workflow_from_persisted, serializer.workflow_to_persisted),
}


def _codec(record: str):
    if record not in _CODECS:
        raise InvalidInputError(
            f"unknown record: {record} (expected one of {', '.join(_CODECS)})",
            field="record",
        )
    return _CODECS[record]


@router.get("/{record}")
async def read_record(record: str, repo: ClientStateRepository = Depends(get_state_repository)):
    load, dump = _codec(record)
    return dump(load(await repo.read_raw(record)))


@router.put("/{record}")
async def replace_record(
    record: str,
    payload: dict,
    repo: ClientStateRepository = Depends(get_state_repository),
):
    load, dump = _codec(record)
    normalized = dump(load(payload))
    await repo.write_raw(record, normalized)
    return normalized


@router.delete("/{record}")
async def delete_record(record: str, repo: ClientStateRepository = Depends(get_state_repository)):
    _codec(record)
    await repo.delete(record)
    return {"deleted": record}
