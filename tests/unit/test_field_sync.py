"""Unit tests for FieldSyncService and RegistrationConfigService."""

from unittest.mock import AsyncMock

import pytest
from pydantic import TypeAdapter

from errors import ValidationError
from repositories.dynamic_field_repository import DynamicFieldRepository
from repositories.registration_config_repository import RegistrationConfigRepository
from schemas.dto.responses.registration_config import SyncResult
from services.field_sync_service import FieldSyncService
from services.registration_config_service import RegistrationConfigService


def _fields(*names, type=None):
    return [{"name": n, "type": type} if type else {"name": n} for n in names]


def _indexes(mongo_db, collection):
    return {
        name for name in mongo_db[collection].sync.index_information() if name.startswith("dyn_")
    }


async def _tracked(repo, collection):
    return sorted(d.field_name for d in await repo.list_tracked(collection))


@pytest.fixture
def repo(mongo_db):
    return DynamicFieldRepository(mongo_db)


@pytest.fixture
def sync_service(repo):
    return FieldSyncService(repo)


# ── FieldSyncService ──────────────────────────────────────────────────────────


class TestNormalize:
    def test_delegates_to_safe_field_name(self):
        assert FieldSyncService.normalize("  My Field-Name! ") == "my_field_name"
        assert FieldSyncService.normalize("123abc") == "f_123abc"
        assert FieldSyncService.normalize("   ") is None


class TestSync:
    async def test_adds_tracking_and_indexes(self, sync_service, repo, mongo_db):
        result = await sync_service.sync("visitors", _fields("Company Name", "123abc"))
        assert sorted(result.added) == ["company_name", "f_123abc"]
        assert result.removed == []
        assert result.errors == []
        assert await _tracked(repo, "visitors") == ["company_name", "f_123abc"]
        assert _indexes(mongo_db, "visitors") == {"dyn_company_name_idx", "dyn_f_123abc_idx"}

    async def test_tracking_metadata(self, sync_service, repo):
        await sync_service.sync("visitors", _fields("Country", type="select"))
        (doc,) = await repo.list_tracked("visitors")
        assert doc.orig_name == "Country"
        assert doc.field_type == "select"

    async def test_field_type_defaults_to_text(self, sync_service, repo):
        await sync_service.sync("visitors", _fields("Country"))
        (doc,) = await repo.list_tracked("visitors")
        assert doc.field_type == "text"

    async def test_skips_blank_and_unnormalizable_names(self, sync_service, repo):
        fields = [{"name": ""}, {"name": "   "}, {"label": "no name"}, {"name": "!!!"}, {"name": "ok"}]
        result = await sync_service.sync("visitors", fields)
        assert result.added == ["ok"]

    async def test_duplicate_normalized_names_collapse(self, sync_service, repo):
        result = await sync_service.sync("visitors", _fields("Company Name", "company-name"))
        assert result.added == ["company_name"]
        assert await _tracked(repo, "visitors") == ["company_name"]

    async def test_idempotent(self, sync_service):
        fields = _fields("a", "b")
        await sync_service.sync("visitors", fields)
        again = await sync_service.sync("visitors", fields)
        assert again == SyncResult()

    async def test_converges_to_latest_field_set(self, sync_service, repo, mongo_db):
        await sync_service.sync("visitors", _fields("a", "b", "c"))
        result = await sync_service.sync("visitors", _fields("b", "d"))
        assert sorted(result.added) == ["d"]
        assert sorted(result.removed) == ["a", "c"]
        assert await _tracked(repo, "visitors") == ["b", "d"]
        assert _indexes(mongo_db, "visitors") == {"dyn_b_idx", "dyn_d_idx"}

    async def test_round_trip_to_empty(self, sync_service, repo, mongo_db):
        await sync_service.sync("visitors", _fields("a", "b"))
        result = await sync_service.sync("visitors", [])
        assert sorted(result.removed) == ["a", "b"]
        assert await _tracked(repo, "visitors") == []
        assert _indexes(mongo_db, "visitors") == set()

    async def test_collections_are_independent(self, sync_service, repo):
        await sync_service.sync("visitors", _fields("a"))
        await sync_service.sync("speakers", _fields("b"))
        assert await _tracked(repo, "visitors") == ["a"]
        assert await _tracked(repo, "speakers") == ["b"]

    async def test_unchanged_name_keeps_metadata(self, sync_service, repo):
        await sync_service.sync("visitors", _fields("Company Name"))
        await sync_service.sync("visitors", _fields("company-name", type="select"))
        (doc,) = await repo.list_tracked("visitors")
        assert doc.orig_name == "Company Name"
        assert doc.field_type == "text"

    async def test_removes_tracking_without_index(self, sync_service, repo, mongo_db):
        await sync_service.sync("visitors", _fields("a"))
        mongo_db["visitors"].sync.drop_index("dyn_a_idx")
        result = await sync_service.sync("visitors", [])
        assert result.removed == ["a"]
        assert result.errors == []

    async def test_empty_collection_name(self, sync_service):
        with pytest.raises(ValueError):
            await sync_service.sync("", _fields("a"))

    async def test_accepts_model_fields(self, sync_service):
        from schemas.models.registration_config import FormField

        result = await sync_service.sync("visitors", [FormField(name="Badge Name")])
        assert result.added == ["badge_name"]


class TestSyncErrors:
    async def test_index_failure_still_counts_as_added(self, sync_service, repo, mocker):
        mocker.patch.object(repo, "create_sparse_index", side_effect=Exception("index quota"))
        result = await sync_service.sync("visitors", _fields("a"))
        assert result.added == ["a"]
        assert [(e.action, e.field) for e in result.errors] == [("createIndex", "a")]
        assert await _tracked(repo, "visitors") == ["a"]

    async def test_tracker_failure_recorded(self, sync_service, repo, mocker):
        mocker.patch.object(repo, "track", side_effect=Exception("write failed"))
        result = await sync_service.sync("visitors", _fields("a"))
        assert result.added == []
        assert result.errors[0].action == "trackAdd"
        assert result.errors[0].error == "write failed"

    async def test_remove_failure_recorded_and_retried(self, sync_service, repo, mocker):
        await sync_service.sync("visitors", _fields("a"))
        mocker.patch.object(repo, "untrack", side_effect=Exception("delete failed"))
        result = await sync_service.sync("visitors", [])
        assert result.removed == []
        assert result.errors[0].action == "remove"

        mocker.stopall()
        result = await sync_service.sync("visitors", [])
        assert result.removed == ["a"]
        assert await _tracked(repo, "visitors") == []

    async def test_drop_index_failure_swallowed(self, sync_service, repo, mocker):
        await sync_service.sync("visitors", _fields("a"))
        mocker.patch.object(repo, "drop_index_if_exists", side_effect=Exception("busy"))
        result = await sync_service.sync("visitors", [])
        assert result.removed == ["a"]
        assert result.errors == []


# ── RegistrationConfigService ─────────────────────────────────────────────────


@pytest.fixture
def config_service(mongo_db, sync_service):
    return RegistrationConfigService(RegistrationConfigRepository(mongo_db), sync_service)


class TestRegistrationConfigService:
    async def test_get_defaults_to_empty_config(self, config_service):
        assert await config_service.get("visitor") == {
            "fields": [],
            "images": [],
            "eventDetails": {},
        }

    async def test_save_canonicalizes_stores_and_syncs(self, config_service, repo, mongo_db):
        payload = {
            "fields": [
                {"name": " Company Name ", "label": ""},
                {"name": "", "label": "dropped"},
            ],
            "termsUrl": "https://x.test/terms",
        }
        resp = await config_service.save("Exhibitors", payload)

        assert resp.success is True
        assert [f["name"] for f in resp.config["fields"]] == ["Company Name"]
        assert resp.config["fields"][0]["label"] == "Company Name"
        assert resp.config["termsUrl"] == "https://x.test/terms"
        assert resp.sync.added == ["company_name"]
        assert await _tracked(repo, "exhibitors") == ["company_name"]
        assert (await config_service.get("exhibitor"))["fields"][0]["name"] == "Company Name"

    async def test_loose_field_flags_are_saved(self, config_service):
        resp = await config_service.save(
            "visitor", {"fields": [{"name": "y", "visible": None, "required": "on"}]}
        )
        assert resp.config["fields"][0]["visible"] is True
        assert resp.config["fields"][0]["required"] is True

    async def test_unreadable_config_is_400(self, config_service, mocker):
        bad = TypeAdapter(int).validate_python
        mocker.patch(
            "services.registration_config_service.RegistrationConfig.from_document",
            side_effect=lambda _payload: bad("x"),
        )
        with pytest.raises(ValidationError) as exc:
            await config_service.save("visitor", {"fields": []})
        assert exc.value.status_code == 400
        assert exc.value.error_code == "invalid_config"
        assert exc.value.details[0]["type"] == "int_parsing"

    async def test_sync_failure_does_not_fail_save(self, mongo_db):
        field_sync = AsyncMock()
        field_sync.sync.side_effect = RuntimeError("boom")
        service = RegistrationConfigService(RegistrationConfigRepository(mongo_db), field_sync)
        resp = await service.save("speaker", {"fields": [{"name": "Topic"}]})
        assert resp.success is True
        assert resp.sync is None
        assert (await service.get("speaker"))["fields"][0]["name"] == "Topic"

    async def test_delete(self, config_service):
        await config_service.save("partner", {"fields": []})
        assert await config_service.delete("partner") is True
        assert await config_service.delete("partner") is False

    async def test_unknown_type(self, config_service):
        with pytest.raises(ValidationError) as exc:
            await config_service.save("sponsor", {"fields": []})
        assert exc.value.error_code == "unknown_registration_type"

    async def test_non_object_payload(self, config_service):
        with pytest.raises(ValidationError):
            await config_service.save("visitor", ["not", "a", "dict"])
