"""Per-conference scoring on three independent axes."""

from conf_tracker.scoring.difficulty import score_difficulty
from conf_tracker.scoring.feasibility import score_feasibility
from conf_tracker.scoring.policy import combine_scores, round_half_up
from conf_tracker.scoring.relevance import (
    ContentDecision,
    ContentScore,
    ContentStrategy,
    cosine_similarity,
    keyword_score,
    score_content,
    select_strategy,
)

__all__ = [
    "ContentDecision",
    "ContentScore",
    "ContentStrategy",
    "combine_scores",
    "cosine_similarity",
    "keyword_score",
    "round_half_up",
    "score_content",
    "score_difficulty",
    "score_feasibility",
    "select_strategy",
]
