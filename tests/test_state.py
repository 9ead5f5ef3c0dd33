"""Tests for persisted client state: serializer, workflow reducer, Redis repository."""

import asyncio
import json

from conftest import NOW, InMemoryRedis, make_todo

from vibedocs.projects.schemas import CoreDocuments, ExtensionDocuments
from vibedocs.projects.store import ProjectStore
from vibedocs.state import workflow as wf
from vibedocs.state.repository import ClientStateRepository
from vibedocs.state.schemas import PROJECT_RECORD, UserSettings
from vibedocs.state.serializer import (
    bundle_from_persisted,
    bundle_to_persisted,
    project_to_persisted,
    settings_from_persisted,
    workflow_from_persisted,
)


def _bundle():
    store = ProjectStore(clock=lambda: NOW)
    store.create_project(
        "할 일 공유 앱",
        "web",
        CoreDocuments(prd="# PRD"),
        [make_todo("TODO-001", status="done"), make_todo("TODO-002")],
    )
    return store.bundle


class TestSerializer:
    def test_progress_not_persisted(self):
        data = bundle_to_persisted(_bundle())
        assert "progress" not in data["projects"][0]
        assert data["activeProjectId"] == data["projects"][0]["id"]
        assert data["projects"][0]["coreDocs"]["prd"] == "# PRD"

    def test_progress_recomputed_on_load(self):
        data = bundle_to_persisted(_bundle())
        restored = bundle_from_persisted(data, NOW)
        assert restored.active.progress.done == 1
        assert restored.active.progress.percentage == 50

    def test_stale_progress_ignored(self):
        project = _bundle().active
        payload = project_to_persisted(project)
        payload["progress"] = {"total": 99}
        restored = bundle_from_persisted({"projects": [payload], "activeProjectId": project.id}, NOW)
        assert restored.active.progress.total == 2

    def test_legacy_single_project_key(self):
        project = _bundle().active
        restored = bundle_from_persisted({"project": project_to_persisted(project)}, NOW)
        assert restored.active_project_id == project.id
        assert [p.id for p in restored.projects] == [project.id]

    def test_extension_owner_backfilled(self):
        store = ProjectStore(bundle=_bundle(), clock=lambda: NOW)
        store.add_extension("알림", "푸시 알림", ExtensionDocuments())
        payload = project_to_persisted(store.active)
        del payload["extensions"][0]["projectId"]

        restored = bundle_from_persisted({"projects": [payload]}, NOW)

        assert restored.projects[0].extensions[0].project_id == store.active.id

    def test_dangling_active_id_dropped(self):
        restored = bundle_from_persisted({"activeProjectId": "gone", "projects": []})
        assert restored.active_project_id is None
        assert restored.active is None

    def test_unknown_fields_ignored_and_defaults_filled(self):
        user_settings = settings_from_persisted({"theme": "dark", "isValidating": True})
        assert user_settings.theme == "dark"
        assert user_settings.language == "ko"
        assert user_settings.auto_save_interval == 500

    def test_empty_workflow_gets_defaults(self):
        state = workflow_from_persisted(None)
        assert state.current_step == "idea"
        assert [s.id for s in state.steps] == list(wf.STEP_ORDER)


class TestWorkflow:
    def test_default_only_first_available(self):
        state = wf.default_workflow()
        assert [s.status for s in state.steps][:2] == ["available", "locked"]
        assert all(s.status == "locked" for s in state.steps[1:])
        assert wf.overall_progress(state) == 0

    def test_checking_item_marks_in_progress(self):
        state = wf.toggle_item(wf.default_workflow(), "idea", "idea-1")
        idea = state.steps[0]
        assert idea.status == "in-progress"
        assert wf.step_progress(state, "idea") == 25
        assert state.steps[1].status == "locked"

    def test_completing_checklist_unlocks_next(self):
        state = wf.default_workflow()
        for item in state.steps[0].checklist:
            state = wf.toggle_item(state, "idea", item.id)
        assert state.steps[0].status == "completed"
        assert state.steps[1].status == "available"
        assert wf.next_available_step(state) == "generate"

    def test_locked_step_cannot_become_current(self):
        state = wf.default_workflow()
        assert wf.set_current_step(state, "deploy").current_step == "idea"

    def test_update_status_completed_unlocks(self):
        state = wf.update_step_status(wf.default_workflow(), "idea", "completed")
        state = wf.set_current_step(state, "generate")
        assert state.current_step == "generate"

    def test_deployment_toggle(self):
        state = wf.toggle_deployment_item(wf.default_workflow(), 0, "lint")
        assert state.deployment_checklist[0].items[0].checked is True
        assert state.deployment_checklist[1].items[0].checked is False

    def test_start_and_reset(self):
        state = wf.start(wf.default_workflow(), NOW)
        assert state.started_at == NOW
        assert state.steps[0].status == "in-progress"
        assert wf.reset() == wf.default_workflow()


class TestRepository:
    def test_round_trip_through_redis(self):
        redis = InMemoryRedis()
        repo = ClientStateRepository(redis, "client-1", ttl=60)
        bundle = _bundle()

        asyncio.run(repo.save_projects(bundle))
        key = f"vd:state:client-1:{PROJECT_RECORD}"
        assert redis.ttls[key] == 60
        assert "할 일 공유 앱" in redis.data[key]

        restored = asyncio.run(repo.load_projects())
        assert restored.active.id == bundle.active.id
        assert restored.active.todos == bundle.active.todos

    def test_clients_are_isolated(self):
        redis = InMemoryRedis()
        asyncio.run(ClientStateRepository(redis, "a").save_settings(UserSettings(theme="dark")))
        other = asyncio.run(ClientStateRepository(redis, "b").load_settings())
        assert other.theme == "system"

    def test_corrupt_record_reads_as_empty(self):
        redis = InMemoryRedis()
        redis.data[f"vd:state:c:{PROJECT_RECORD}"] = "{not json"
        bundle = asyncio.run(ClientStateRepository(redis, "c").load_projects())
        assert bundle.projects == []

    def test_read_hit_refreshes_ttl(self):
        redis = InMemoryRedis()
        repo = ClientStateRepository(redis, "c", ttl=60)
        key = f"vd:state:c:{PROJECT_RECORD}"
        redis.data[key] = json.dumps({"projects": []})
        redis.ttls[key] = 5

        asyncio.run(repo.load_projects())

        assert redis.ttls[key] == 60

    def test_schema_mismatch_reads_as_empty(self):
        redis = InMemoryRedis()
        repo = ClientStateRepository(redis, "c")
        payload = bundle_to_persisted(_bundle())
        payload["projects"][0]["todos"][0]["status"] = "blocked"
        redis.data[f"vd:state:c:{PROJECT_RECORD}"] = json.dumps(payload)
        redis.data["vd:state:c:vibedocs-settings"] = json.dumps({"theme": "neon"})

        assert asyncio.run(repo.load_projects()).projects == []
        assert asyncio.run(repo.load_settings()).theme == "system"

    def test_delete(self):
        redis = InMemoryRedis()
        repo = ClientStateRepository(redis, "c")
        asyncio.run(repo.write_raw("vibedocs-settings", {"theme": "light"}))
        asyncio.run(repo.delete("vibedocs-settings"))
        assert asyncio.run(repo.read_raw("vibedocs-settings")) is None
