"""
Streak evaluation — pure functions, no storage access.
"""
from datetime import date
from typing import Callable

from ..models import StreakState

WORD_GOAL = 750


def count_words(text: str) -> int:
    """Count whitespace-separated tokens. Whitespace-only text has 0 words."""
    return len(text.split())


def meets_goal(word_count: int) -> bool:
    return word_count >= WORD_GOAL


def evaluate_streak(
    today: date,
    previous: StreakState,
    lookup_note: Callable[[date], str | None],
) -> StreakState:
    """
    Returns the streak state after checking today's note.
    At most one evaluation per calendar day: if `previous` was already
    checked today it is returned as-is and `lookup_note` is not called.
    Errors raised by `lookup_note` propagate; no new state is produced.
    """
    today_str = today.isoformat()
    if previous.last_checked_date == today_str:
        return previous

    text = lookup_note(today)
    if text is not None and meets_goal(count_words(text)):
        new_streak = previous.streak_count + 1
    else:
        new_streak = 0

    return previous.model_copy(update={
        "streak_count": new_streak,
        "last_checked_date": today_str,
    })
