"""Difficulty score: inverse competitiveness (higher = easier to get in)."""

from conf_tracker.models import Conference
from conf_tracker.scoring.policy import (
    ACCEPTANCE_PIVOT_RATE,
    ACCEPTANCE_RATE_FACTOR,
    DIFFICULTY_MAX,
    DIFFICULTY_MIN,
    TIER_BASE_DIFFICULTY,
    UNRANKED_DIFFICULTY,
    clamp,
    round_half_up,
)


def base_difficulty(tier) -> int:
    return TIER_BASE_DIFFICULTY.get(tier, UNRANKED_DIFFICULTY)


def score_difficulty(conference: Conference) -> int:
    """Tier base (A 30, B 50, C 70, else 50), nudged by the latest acceptance rate."""
    base = base_difficulty(conference.rank_tier)
    latest = conference.latest_acceptance_rate
    if latest is None:
        return base

    adjustment = (latest.rate - ACCEPTANCE_PIVOT_RATE) * ACCEPTANCE_RATE_FACTOR
    return round_half_up(clamp(base + adjustment, DIFFICULTY_MIN, DIFFICULTY_MAX))
