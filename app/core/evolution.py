"""Entity evolution summaries from append-only history records."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from dateutil.relativedelta import relativedelta

from app.core.exceptions import ValidationError
from app.core.profile_store import ProfileStore
from app.core.schemas_entities import EvolutionSummary, HistoryRecord, Milestone, utc_now

MAX_KEY_CHANGES = 5
MAX_MILESTONES = 10

_TIMEFRAME = re.compile(r"^\s*(\d+)\s*([dwmy])\s*$", re.IGNORECASE)
_UNITS = {"d": "days", "w": "weeks", "m": "months", "y": "years"}


def parse_timeframe(timeframe: str) -> relativedelta:
    """Parse "30d", "6m", "1y" style windows."""
    match = _TIMEFRAME.match(timeframe)
    if not match:
        raise ValidationError(
            f"Invalid timeframe {timeframe!r}; expected a number followed by d, w, m or y"
        )
    amount, unit = match.groups()
    return relativedelta(**{_UNITS[unit.lower()]: int(amount)})


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def analyze_trends(history: list[HistoryRecord]) -> dict:
    """Fixed heuristic. Callers rely on the output shape only."""
    if not history:
        return {"trend": "stable"}
    return {
        "trend": "evolving",
        "direction": "positive",
        "velocity": "moderate",
        "key_changes": [h.change_type for h in history[:MAX_KEY_CHANGES]],
    }


def identify_milestones(history: list[HistoryRecord]) -> list[Milestone]:
    return [
        Milestone(date=h.timestamp, event=h.description, impact=h.impact_score)
        for h in history
        if h.significance == "high"
    ][:MAX_MILESTONES]


class EvolutionTracker:
    """Summarizes how an entity changed over a time window."""

    def __init__(self, store: ProfileStore):
        self.store = store

    def evolution(
        self,
        entity_id: str,
        timeframe: str | None = None,
        now: datetime | None = None,
        timeout: float | None = None,
    ) -> EvolutionSummary:
        window = parse_timeframe(timeframe) if timeframe else None

        history = self.store.query_history(entity_id, timeout=timeout)
        history = sorted(history, key=lambda h: _aware(h.timestamp), reverse=True)

        if window is not None:
            cutoff = _aware(now or utc_now()) - window
            history = [h for h in history if _aware(h.timestamp) >= cutoff]

        return EvolutionSummary(
            entity_id=entity_id,
            timeframe=timeframe,
            changes=history,
            trend_analysis=analyze_trends(history),
            key_milestones=identify_milestones(history),
        )
