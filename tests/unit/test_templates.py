"""Tests for the JSON-backed template store."""

import json
import logging
from datetime import datetime

from scribe.templates import TemplateStore, TextTemplate


class TestAdd:
    def test_trims_name_and_prepends(self, tmp_path):
        store = TemplateStore(tmp_path / "templates.json")

        store.add("First", "one")
        second = store.add("  Second \n", "two")

        assert second.name == "Second"
        assert [t.name for t in store.templates] == ["Second", "First"]

    def test_rejects_blank_names(self, tmp_path):
        store = TemplateStore(tmp_path / "templates.json")

        assert store.add("", "body") is None
        assert store.add(" \t\n", "body") is None
        assert len(store) == 0
        assert not (tmp_path / "templates.json").exists()

    def test_body_is_kept_verbatim(self, tmp_path):
        store = TemplateStore(tmp_path / "templates.json")
        template = store.add("Sig", "  Regards,\n  Sam\n")
        assert template.body == "  Regards,\n  Sam\n"


class TestDelete:
    def test_indices_refer_to_original_positions(self, tmp_path):
        store = TemplateStore(tmp_path / "templates.json")
        for name in ("d", "c", "b", "a"):
            store.add(name, name)

        store.delete([0, 2])

        assert [t.name for t in store.templates] == ["b", "d"]

    def test_out_of_range_and_duplicate_indices(self, tmp_path):
        store = TemplateStore(tmp_path / "templates.json")
        store.add("only", "x")

        store.delete([5, 0, 0, -1])

        assert store.templates == []


class TestMarkUsed:
    def test_sets_last_used(self, tmp_path):
        store = TemplateStore(tmp_path / "templates.json")
        template = store.add("T", "body")
        assert template.last_used_at is None

        updated = store.mark_used(template.id)

        assert isinstance(updated.last_used_at, datetime)
        assert store.get(template.id).last_used_at == updated.last_used_at

    def test_unknown_id(self, tmp_path):
        import uuid

        store = TemplateStore(tmp_path / "templates.json")
        assert store.mark_used(uuid.uuid4()) is None


class TestPersistence:
    def test_round_trip_through_disk(self, tmp_path):
        path = tmp_path / "templates.json"
        store = TemplateStore(path)
        template = store.add("Greeting", "Hello")
        store.mark_used(template.id)

        reloaded = TemplateStore(path)

        assert reloaded.templates == store.templates

    def test_file_uses_iso8601_timestamps(self, tmp_path):
        path = tmp_path / "templates.json"
        store = TemplateStore(path)
        store.add("Greeting", "Hello")

        data = json.loads(path.read_text())

        assert data[0]["name"] == "Greeting"
        assert data[0]["lastUsedAt"] is None
        datetime.fromisoformat(data[0]["createdAt"].replace("Z", "+00:00"))

    def test_missing_file_is_empty(self, tmp_path):
        assert TemplateStore(tmp_path / "nope" / "templates.json").templates == []

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "app" / "support" / "templates.json"
        TemplateStore(path).add("T", "x")
        assert path.exists()

    def test_corrupt_file_logs_and_starts_empty(self, tmp_path, caplog):
        path = tmp_path / "templates.json"
        path.write_text("{not json")

        with caplog.at_level(logging.WARNING, logger="scribe.templates"):
            store = TemplateStore(path)

        assert store.templates == []
        assert "Failed to load templates" in caplog.text

    def test_loads_handwritten_file(self, tmp_path):
        path = tmp_path / "templates.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "id": "5b0f6f38-7a53-4c38-9a0e-4a3b8e2f5d11",
                        "name": "Memo",
                        "body": "To: ",
                        "created_at": "2024-03-01T09:30:00Z",
                        "last_used_at": None,
                    }
                ]
            )
        )

        store = TemplateStore(path)

        assert store.templates[0] == TextTemplate(
            id="5b0f6f38-7a53-4c38-9a0e-4a3b8e2f5d11",
            name="Memo",
            body="To: ",
            created_at="2024-03-01T09:30:00Z",
        )

    def test_no_temp_files_left_behind(self, tmp_path):
        store = TemplateStore(tmp_path / "templates.json")
        store.add("A", "a")
        store.add("B", "b")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["templates.json"]

    def test_loads_file_written_by_mobile_app(self, tmp_path):
        """camelCase timestamps from the iOS app keep their values."""
        path = tmp_path / "templates.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "id": "E621E1F8-C36C-495A-93FC-0C247A3E6E5F",
                        "name": "Weekly update",
                        "body": "This week:",
                        "createdAt": "2024-05-06T08:00:00Z",
                        "lastUsedAt": "2024-05-10T17:30:00Z",
                    }
                ]
            )
        )

        template = TemplateStore(path).templates[0]

        assert template.created_at == datetime.fromisoformat("2024-05-06T08:00:00+00:00")
        assert template.last_used_at == datetime.fromisoformat("2024-05-10T17:30:00+00:00")

    def test_saved_file_keeps_camel_case_keys(self, tmp_path):
        path = tmp_path / "templates.json"
        store = TemplateStore(path)
        template = store.add("Memo", "To: ")
        store.mark_used(template.id)

        data = json.loads(path.read_text())

        assert set(data[0]) == {"id", "name", "body", "createdAt", "lastUsedAt"}
        assert data[0]["lastUsedAt"] is not None
