"""Point and duration rules shared by both task families."""

from datetime import datetime, timedelta, timezone
from typing import Optional

DIFFICULTY_POINTS = {
    "easy": 25,
    "medium": 50,
    "hard": 75,
}
DEFAULT_DIFFICULTY = "medium"

# Assignments only: proof attached on submission, and reviewer approval
PROOF_BONUS = 25
APPROVAL_BONUS = 25


def points_for_difficulty(difficulty: Optional[str]) -> int:
    """Base points for a difficulty; anything outside the table is worth 0."""
    if not difficulty:
        return 0
    return DIFFICULTY_POINTS.get(difficulty.strip().lower(), 0)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def elapsed_minutes(created_at: datetime, completed_at: datetime) -> int:
    """Whole minutes between creation and the completing action (floored, never negative)."""
    delta = _as_utc(completed_at) - _as_utc(created_at)
    return max(0, delta // timedelta(minutes=1))


def format_duration(created_at: datetime, completed_at: datetime) -> str:
    return f"{elapsed_minutes(created_at, completed_at)} minutes"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
