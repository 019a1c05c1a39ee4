import json
import os
import logging
from functools import lru_cache
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError
from supabase import create_client, Client

from .errors import SettingsStoreError
from .models import StreakState

logger = logging.getLogger(__name__)

SETTINGS_TABLE = "streak_settings"


class SettingsStore(Protocol):
    def load(self) -> StreakState:
        ...

    def save(self, state: StreakState) -> None:
        ...


class JsonSettingsStore:
    """Settings kept in a single JSON file, merged over defaults on load."""

    def __init__(self, path: str | Path = "data.json"):
        self.path = Path(path)

    def load(self) -> StreakState:
        if not self.path.exists():
            return StreakState()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
            return StreakState.model_validate(data or {})
        except (OSError, ValueError, ValidationError) as e:
            raise SettingsStoreError(f"Could not load settings from {self.path}: {e}") from e

    def save(self, state: StreakState) -> None:
        # Write beside the target and rename, so data.json is never half-written.
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(state.to_storage(), f)
            os.replace(tmp, self.path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise SettingsStoreError(f"Could not save settings to {self.path}: {e}") from e


@lru_cache(maxsize=1)
def get_client() -> Client:
    url = os.environ["SUPABASE_URL"]
    key = os.environ["SUPABASE_SERVICE_KEY"]
    return create_client(url, key)


class SupabaseSettingsStore:
    """Settings kept as one row of the streak_settings table."""

    def __init__(self, db: Client, key: str = "default"):
        self.db = db
        self.key = key

    def load(self) -> StreakState:
        try:
            res = self.db.table(SETTINGS_TABLE).select("*").eq("settings_key", self.key).execute()
        except Exception as e:
            logger.error("Settings load failed for key=%s: %s", self.key, e)
            raise SettingsStoreError(f"Could not load settings: {e}") from e
        if not res.data:
            return StreakState()
        row = res.data[0]
        try:
            return StreakState(
                streak_count=row.get("streak") or 0,
                last_checked_date=row.get("last_checked_date") or "",
            )
        except ValidationError as e:
            raise SettingsStoreError(f"Invalid settings row for key={self.key}: {e}") from e

    def save(self, state: StreakState) -> None:
        try:
            self.db.table(SETTINGS_TABLE).upsert({
                "settings_key": self.key,
                "streak": state.streak_count,
                "last_checked_date": state.last_checked_date,
            }).execute()
        except Exception as e:
            logger.error("Settings save failed for key=%s: %s", self.key, e)
            raise SettingsStoreError(f"Could not save settings: {e}") from e


def get_store() -> SettingsStore:
    kind = os.environ.get("WORDSTREAK_STORE", "json").lower()
    if kind == "json":
        return JsonSettingsStore(os.environ.get("WORDSTREAK_DATA_FILE", "data.json"))
    if kind == "supabase":
        return SupabaseSettingsStore(get_client(), os.environ.get("WORDSTREAK_SETTINGS_KEY", "default"))
    raise ValueError(f"Unknown WORDSTREAK_STORE: {kind!r}")
