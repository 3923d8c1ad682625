"""Data models for the conference tracker."""

from conf_tracker.models.conference import (
    CATEGORY_CODES,
    RANK_TIERS,
    UNRANKED,
    AcceptanceRate,
    Conference,
    Instance,
    Rank,
    TimelineItem,
)
from conf_tracker.models.ranking import (
    DeadlineStatus,
    MatchScore,
    RankedConference,
    RankingResult,
    ResolvedDeadline,
    UserIntent,
)

__all__ = [
    "CATEGORY_CODES",
    "RANK_TIERS",
    "UNRANKED",
    "AcceptanceRate",
    "Conference",
    "Instance",
    "Rank",
    "TimelineItem",
    "DeadlineStatus",
    "MatchScore",
    "RankedConference",
    "RankingResult",
    "ResolvedDeadline",
    "UserIntent",
]
