"""Fixed scoring policy: weights, thresholds and bands.

These numbers are product policy and are asserted on literally in tests.
"""

import math

# Overall = content * 0.4 + feasibility * 0.35 + difficulty * 0.25
CONTENT_WEIGHT = 0.4
FEASIBILITY_WEIGHT = 0.35
DIFFICULTY_WEIGHT = 0.25

# Content match
EMBEDDING_CONFIDENCE_THRESHOLD = 60
KEYWORD_NEUTRAL_SCORE = 50
TAG_MATCH_CREDIT = 1.0
TEXT_MATCH_CREDIT = 0.8
CATEGORY_MATCH_CREDIT = 0.6

# Time feasibility
FEASIBILITY_NO_BUDGET = 70
FEASIBILITY_NO_DEADLINE = 50
FEASIBILITY_PAST = 0
FEASIBILITY_SHORTFALL_BASE = 50
FEASIBILITY_SHORTFALL_PER_DAY = 2
# (lower bound of buffer in days, score), checked from the top
FEASIBILITY_BANDS = [
    (30, 100),
    (14, 95),
    (7, 85),
    (0, 75),
]

# Difficulty (higher = easier)
TIER_BASE_DIFFICULTY = {"A": 30, "B": 50, "C": 70}
UNRANKED_DIFFICULTY = 50
ACCEPTANCE_PIVOT_RATE = 25.0
ACCEPTANCE_RATE_FACTOR = 0.5
DIFFICULTY_MIN = 20
DIFFICULTY_MAX = 90


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive scores (round() is banker's)."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def combine_scores(content: float, feasibility: float, difficulty: float) -> int:
    """Fixed-weight overall score."""
    return round_half_up(
        content * CONTENT_WEIGHT
        + feasibility * FEASIBILITY_WEIGHT
        + difficulty * DIFFICULTY_WEIGHT
    )
