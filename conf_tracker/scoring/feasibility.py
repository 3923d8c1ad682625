"""Time feasibility: how comfortably a deadline falls after the work budget."""

from datetime import datetime
from typing import Optional

from conf_tracker.normalizers.deadlines import days_until, is_expired
from conf_tracker.scoring.policy import (
    FEASIBILITY_BANDS,
    FEASIBILITY_NO_BUDGET,
    FEASIBILITY_NO_DEADLINE,
    FEASIBILITY_PAST,
    FEASIBILITY_SHORTFALL_BASE,
    FEASIBILITY_SHORTFALL_PER_DAY,
)


def feasibility_from_buffer(buffer_days: int) -> int:
    """Score for a buffer of (days until deadline - budget)."""
    if buffer_days < 0:
        return max(0, FEASIBILITY_SHORTFALL_BASE + buffer_days * FEASIBILITY_SHORTFALL_PER_DAY)
    for lower_bound, score in FEASIBILITY_BANDS:
        if buffer_days >= lower_bound:
            return score
    return FEASIBILITY_BANDS[-1][1]


def score_feasibility(
    deadline_at: Optional[datetime],
    budget_days: Optional[int],
    now: datetime,
) -> int:
    """Feasibility score in [0, 100].

    No budget -> 70. Past deadline -> 0. Otherwise banded on the buffer.
    Conferences without any resolvable deadline get 70 without a budget
    and 50 with one.
    """
    if budget_days is None:
        return FEASIBILITY_NO_BUDGET
    if deadline_at is None:
        return FEASIBILITY_NO_DEADLINE
    if is_expired(deadline_at, now):
        return FEASIBILITY_PAST
    return feasibility_from_buffer(days_until(deadline_at, now) - budget_days)
