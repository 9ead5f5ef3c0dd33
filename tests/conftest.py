"""Shared fixtures: stub LLM gateway, in-memory async Redis, recording sleep."""

from datetime import datetime, timezone

import pytest

from vibedocs.todo.schemas import TodoItem

NOW = datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)


class StubGateway:
    """Stands in for LLMGateway. `handler(prompt, model)` returns text or raises."""

    def __init__(self, handler=None):
        self.handler = handler or (lambda prompt, model: "# OK")
        self.calls: list[dict] = []

    async def generate(
        self,
        api_key,
        prompt,
        system_prompt=None,
        model=None,
        purpose="generate",
        temperature=0.7,
    ):
        self.calls.append({"api_key": api_key, "prompt": prompt, "model": model, "purpose": purpose})
        return self.handler(prompt, model)


class InMemoryRedis:
    """Subset of redis.asyncio.Redis used by the state repository and health check."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.fail_ping = False

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        if ex is not None:
            self.ttls[key] = ex
        return True

    async def expire(self, key, seconds):
        if key not in self.data:
            return False
        self.ttls[key] = seconds
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def ping(self):
        if self.fail_ping:
            raise ConnectionError("redis down")
        return True


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def make_todo(todo_id, phase="Phase 1: Setup", status="pending", **overrides) -> TodoItem:
    fields = {
        "id": todo_id,
        "title": f"Task {todo_id}",
        "description": "",
        "phase": phase,
        "status": status,
        "estimated_hours": 2,
        "created_at": NOW,
        "updated_at": NOW,
    }
    fields.update(overrides)
    return TodoItem(**fields)


@pytest.fixture
def stub_gateway():
    return StubGateway()


@pytest.fixture
def fake_redis():
    return InMemoryRedis()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()
