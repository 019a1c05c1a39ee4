import json
from unittest.mock import MagicMock, patch

import pytest
from pydantic import ValidationError

from wordstreak.db import JsonSettingsStore, SupabaseSettingsStore, get_store
from wordstreak.errors import SettingsStoreError
from wordstreak.models import StreakState


class TestStreakState:
    def test_defaults(self):
        state = StreakState()
        assert state.streak_count == 0
        assert state.last_checked_date == ""

    def test_negative_streak_rejected(self):
        with pytest.raises(ValidationError):
            StreakState(streak_count=-1)

    def test_bad_date_rejected(self):
        with pytest.raises(ValidationError):
            StreakState(last_checked_date="yesterday")

    def test_storage_keys(self):
        state = StreakState(streak_count=2, last_checked_date="2024-01-02")
        assert state.to_storage() == {"streak": 2, "lastCheckedDate": "2024-01-02"}


class TestJsonSettingsStore:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert JsonSettingsStore(tmp_path / "data.json").load() == StreakState()

    def test_missing_fields_merged_with_defaults(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"streak": 4}))
        state = JsonSettingsStore(path).load()
        assert state.streak_count == 4
        assert state.last_checked_date == ""

    def test_unknown_fields_ignored(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"streak": 1, "lastCheckedDate": "2024-01-01", "theme": "dark"}))
        assert JsonSettingsStore(path).load() == StreakState(streak_count=1, last_checked_date="2024-01-01")

    def test_save_then_load(self, tmp_path):
        store = JsonSettingsStore(tmp_path / "nested" / "data.json")
        store.save(StreakState(streak_count=7, last_checked_date="2024-03-05"))
        assert json.loads((tmp_path / "nested" / "data.json").read_text()) == {
            "streak": 7, "lastCheckedDate": "2024-03-05",
        }
        assert store.load().streak_count == 7

    def test_interrupted_save_keeps_old_file(self, tmp_path):
        path = tmp_path / "data.json"
        store = JsonSettingsStore(path)
        store.save(StreakState(streak_count=3, last_checked_date="2024-01-01"))

        def partial_dump(obj, f):
            f.write('{"streak": 4, "lastChe')
            raise OSError("No space left on device")

        with patch("wordstreak.db.json.dump", side_effect=partial_dump):
            with pytest.raises(SettingsStoreError):
                store.save(StreakState(streak_count=4, last_checked_date="2024-01-02"))

        assert store.load() == StreakState(streak_count=3, last_checked_date="2024-01-01")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["data.json"]

    def test_save_replaces_whole_file(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"streak": 12, "lastCheckedDate": "2023-12-31", "theme": "dark"}))
        JsonSettingsStore(path).save(StreakState(streak_count=1, last_checked_date="2024-01-01"))
        assert json.loads(path.read_text()) == {"streak": 1, "lastCheckedDate": "2024-01-01"}
        assert not (tmp_path / "data.json.tmp").exists()

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{not json")
        with pytest.raises(SettingsStoreError):
            JsonSettingsStore(path).load()

    def test_invalid_values_raise(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"streak": -3}))
        with pytest.raises(SettingsStoreError):
            JsonSettingsStore(path).load()


class TestSupabaseSettingsStore:
    def _db(self, rows):
        db = MagicMock()
        db.table.return_value.select.return_value.eq.return_value.execute.return_value = MagicMock(data=rows)
        return db

    def test_no_row_gives_defaults(self):
        assert SupabaseSettingsStore(self._db([])).load() == StreakState()

    def test_loads_row(self):
        db = self._db([{"settings_key": "default", "streak": 3, "last_checked_date": "2024-01-01"}])
        state = SupabaseSettingsStore(db).load()
        assert state == StreakState(streak_count=3, last_checked_date="2024-01-01")
        db.table.assert_called_with("streak_settings")

    def test_save_upserts_row(self):
        db = MagicMock()
        SupabaseSettingsStore(db, key="me").save(StreakState(streak_count=2, last_checked_date="2024-01-02"))
        db.table.return_value.upsert.assert_called_once_with({
            "settings_key": "me", "streak": 2, "last_checked_date": "2024-01-02",
        })

    def test_load_failure_raises_store_error(self):
        db = MagicMock()
        db.table.side_effect = RuntimeError("connection refused")
        with pytest.raises(SettingsStoreError):
            SupabaseSettingsStore(db).load()

    def test_save_failure_raises_store_error(self):
        db = MagicMock()
        db.table.return_value.upsert.return_value.execute.side_effect = RuntimeError("timeout")
        with pytest.raises(SettingsStoreError):
            SupabaseSettingsStore(db).save(StreakState())


class TestGetStore:
    def test_json_is_default(self, monkeypatch, tmp_path):
        monkeypatch.delenv("WORDSTREAK_STORE", raising=False)
        monkeypatch.setenv("WORDSTREAK_DATA_FILE", str(tmp_path / "d.json"))
        store = get_store()
        assert isinstance(store, JsonSettingsStore)
        assert store.path == tmp_path / "d.json"

    def test_supabase(self, monkeypatch):
        monkeypatch.setenv("WORDSTREAK_STORE", "supabase")
        with patch("wordstreak.db.get_client") as get_client:
            store = get_store()
        assert isinstance(store, SupabaseSettingsStore)
        assert store.db is get_client.return_value

    def test_unknown_store_rejected(self, monkeypatch):
        monkeypatch.setenv("WORDSTREAK_STORE", "redis")
        with pytest.raises(ValueError):
            get_store()
