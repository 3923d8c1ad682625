"""Per-query derived records: resolved deadlines, intents and scores.

None of these are persisted; they are rebuilt for every request.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from conf_tracker.models.conference import Conference, Instance, TimelineItem


@dataclass(frozen=True)
class ResolvedDeadline:
    """Absolute instant of a timeline deadline after applying its timezone."""

    at: datetime  # Timezone-aware, carrying the instance's own offset
    offset_hours: int
    instance: Instance
    item: TimelineItem

    @property
    def local_text(self) -> str:
        return self.at.strftime("%Y-%m-%d %H:%M:%S")

    @property
    def formatted(self) -> str:
        """Local timestamp with its offset, e.g. '2026-03-01 23:59:59 (UTC-12)'."""
        return f"{self.local_text} (UTC{self.offset_hours:+d})"


@dataclass(frozen=True)
class DeadlineStatus:
    """Countdown state for display."""

    expired: bool
    text: str
    days: int = 0
    hours: int = 0
    minutes: int = 0

    @property
    def label(self) -> str:
        return "Expired" if self.expired else "Active"


@dataclass
class UserIntent:
    """Structured request extracted from free text."""

    rank_preference: Optional[str] = None  # "A" / "B" / "C" / "N" (unranked)
    time_budget_days: Optional[int] = None
    keywords: list[str] = field(default_factory=list)

    # Hard filters read off the raw query
    category: Optional[str] = None
    location: Optional[str] = None
    year: Optional[int] = None
    wants_past: bool = False

    # Trimmed request text, for the title/description lookup
    query: str = ""

    # Human-readable filter descriptions, in application order
    conditions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "rankPreference": self.rank_preference,
            "timeBudgetDays": self.time_budget_days,
            "keywords": list(self.keywords),
            "category": self.category,
            "location": self.location,
            "year": self.year,
            "wantsPast": self.wants_past,
            "conditions": list(self.conditions),
        }


@dataclass(frozen=True)
class MatchScore:
    """Three independent sub-scores plus their weighted combination."""

    content_match: int
    time_feasibility: int
    difficulty_score: int
    overall_score: int
    content_strategy: str = "keyword"

    def to_dict(self) -> dict:
        return {
            "contentMatch": self.content_match,
            "timeFeasibility": self.time_feasibility,
            "difficultyScore": self.difficulty_score,
            "overallScore": self.overall_score,
            "contentStrategy": self.content_strategy,
        }


@dataclass
class RankedConference:
    conference: Conference
    score: MatchScore
    deadline: Optional[ResolvedDeadline] = None
    status: Optional[DeadlineStatus] = None

    def to_dict(self) -> dict:
        record = self.conference.to_summary()
        record["matchScore"] = self.score.to_dict()
        if self.deadline:
            record["nextDeadline"] = {
                "local": self.deadline.local_text,
                "formatted": self.deadline.formatted,
                "offsetHours": self.deadline.offset_hours,
                "iso": self.deadline.at.isoformat(),
                "year": self.deadline.instance.year,
                "comment": self.deadline.item.comment,
            }
        if self.status:
            record["status"] = self.status.label
            record["countdown"] = self.status.text
        return record


@dataclass
class RankingResult:
    """Ordered ranking for one query."""

    intent: UserIntent
    ranked: list[RankedConference] = field(default_factory=list)
    candidates_considered: int = 0

    def top(self, n: int = 10) -> list[RankedConference]:
        return self.ranked[:n]

    def __len__(self) -> int:
        return len(self.ranked)
