"""
Streak tracker — wires the evaluator to note storage, settings persistence
and user notifications.
"""
import logging
import os
import threading
from datetime import date
from typing import Callable, Protocol

from .db import SettingsStore, get_store
from .engine.streak import evaluate_streak
from .models import StreakState
from .notes import DEFAULT_NOTE_FORMAT, NoteLookup, VaultNoteLookup

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, message: str) -> None:
        ...


class LogNotifier:
    def notify(self, message: str) -> None:
        logger.info(message)


class StreakTracker:
    def __init__(
        self,
        store: SettingsStore,
        lookup: NoteLookup,
        notifier: Notifier | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.lookup = lookup
        self.notifier = notifier or LogNotifier()
        self.today = today
        self._state: StreakState | None = None
        self._lock = threading.RLock()

    def current(self) -> StreakState:
        with self._lock:
            if self._state is None:
                self._state = self.store.load()
            return self._state

    def check(self) -> StreakState:
        """
        Evaluate today's note once. Serialised so overlapping triggers on the
        same day cannot both see "not yet checked" and double-increment.
        Lookup and store errors propagate with the current state untouched.
        """
        with self._lock:
            previous = self.current()
            state = evaluate_streak(self.today(), previous, self.lookup.read)
            if state is previous:
                return previous
            self.store.save(state)
            self._state = state
            logger.info("Streak checked for %s: %d -> %d",
                        state.last_checked_date, previous.streak_count, state.streak_count)
            return state

    def trigger(self) -> str:
        """Manual check; reports the resulting streak to the user."""
        state = self.check()
        message = f"Your current streak is {state.streak_count} days!"
        self.notifier.notify(message)
        return message

    def status_text(self) -> str:
        return f"Streak: {self.current().streak_count} days"

    def settings_view(self) -> list[dict]:
        state = self.current()
        return [
            {
                "name": "Current Streak",
                "description": "Your current writing streak in days.",
                "value": str(state.streak_count),
                "editable": False,
            },
            {
                "name": "Last Checked Date",
                "description": "The last date the streak was checked.",
                "value": state.last_checked_date,
                "editable": False,
            },
        ]


def build_tracker() -> StreakTracker:
    lookup = VaultNoteLookup(
        os.environ.get("WORDSTREAK_VAULT_DIR", "."),
        os.environ.get("WORDSTREAK_NOTE_FORMAT", DEFAULT_NOTE_FORMAT),
    )
    return StreakTracker(get_store(), lookup)
