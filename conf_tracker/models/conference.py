"""Catalog models for conference deadline tracking."""

import json
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from conf_tracker.normalizers.topics import normalize_keywords

# CCF tiers that act as rank filters; anything else counts as unranked
RANK_TIERS = ("A", "B", "C")
UNRANKED = "N"

# Category codes used by the deadline catalog
CATEGORY_CODES = ("DS", "NW", "SC", "SE", "DB", "CT", "CG", "AI", "HI", "MX")

SEARCH_TEXT_LIMIT = 500


def _stringify_timestamp(value):
    """YAML loaders turn unquoted timestamps into datetime/date objects."""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    return value


class TimelineItem(BaseModel):
    """One submission deadline of a conference edition."""

    deadline: str = "TBD"  # Local timestamp or "TBD"
    abstract_deadline: Optional[str] = None
    comment: Optional[str] = None

    class Config:
        extra = "ignore"

    @field_validator("deadline", mode="before")
    @classmethod
    def _coerce_deadline(cls, value):
        if value is None:
            return "TBD"
        return str(_stringify_timestamp(value))

    @field_validator("abstract_deadline", mode="before")
    @classmethod
    def _coerce_abstract(cls, value):
        if value is None:
            return None
        return str(_stringify_timestamp(value))


class Instance(BaseModel):
    """A single yearly edition of a conference."""

    year: int
    id: Optional[str] = None  # e.g. "cvpr2026"
    date: Optional[str] = None  # Free text, "June 3-7, 2026"
    place: str = ""  # Free text, "Nashville, USA"
    timezone: Optional[str] = None  # "UTC-8", "AoE", ...
    link: Optional[str] = None
    timeline: list[TimelineItem] = Field(default_factory=list)

    class Config:
        extra = "ignore"

    @field_validator("place", mode="before")
    @classmethod
    def _coerce_place(cls, value):
        return value or ""

    @field_validator("date", "timezone", "id", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        if value is None:
            return None
        return str(_stringify_timestamp(value))

    @field_validator("timeline", mode="before")
    @classmethod
    def _coerce_timeline(cls, value):
        return value or []


class Rank(BaseModel):
    """Ranking tiers from the CCF, CORE and THCPL lists."""

    ccf: Optional[str] = None
    core: Optional[str] = None
    thcpl: Optional[str] = None

    class Config:
        extra = "ignore"


class AcceptanceRate(BaseModel):
    """Historical acceptance rate for one year (rate is a percentage)."""

    year: int
    rate: float
    accepted: Optional[int] = None
    total: Optional[int] = None

    class Config:
        extra = "ignore"


class Conference(BaseModel):
    """A conference series with its yearly editions."""

    # Identity
    id: str
    title: str
    description: str = ""
    category: Optional[str] = Field(default=None, alias="sub")  # One of CATEGORY_CODES

    # Quality signals
    rank: Rank = Field(default_factory=Rank)
    acceptance_rates: list[AcceptanceRate] = Field(default_factory=list)

    # Topical profile
    keywords: list[str] = Field(default_factory=list)  # Short topic tags
    embedding: Optional[list[float]] = None  # Precomputed search vector

    # Editions
    instances: list[Instance] = Field(default_factory=list, alias="confs")

    class Config:
        extra = "ignore"
        populate_by_name = True

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, value):
        return value or ""

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value):
        if not value:
            return None
        return str(value).strip().upper()

    @field_validator("rank", mode="before")
    @classmethod
    def _coerce_rank(cls, value):
        if value is None:
            return {}
        # PostgREST returns one-to-one relations as a list on some schemas
        if isinstance(value, list):
            return value[0] if value else {}
        return value

    @field_validator("keywords", mode="before")
    @classmethod
    def _coerce_keywords(cls, value):
        if not isinstance(value, list):
            return value or []
        return normalize_keywords([str(k) for k in value if k is not None])

    @field_validator("acceptance_rates", "instances", mode="before")
    @classmethod
    def _coerce_list(cls, value):
        return value or []

    @field_validator("embedding", mode="before")
    @classmethod
    def _coerce_embedding(cls, value):
        if value is None or value == "":
            return None
        # pgvector columns come back as the text literal "[0.1,0.2,...]"
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                return None
        return value or None

    @property
    def rank_tier(self) -> Optional[str]:
        """CCF tier if it is one of A/B/C, else None (unranked)."""
        tier = (self.rank.ccf or "").strip().upper()
        return tier if tier in RANK_TIERS else None

    @property
    def latest_acceptance_rate(self) -> Optional[AcceptanceRate]:
        """Most recent acceptance-rate entry, if any."""
        if not self.acceptance_rates:
            return None
        return max(self.acceptance_rates, key=lambda r: r.year)

    def search_text(self) -> str:
        """Text used to embed the conference for semantic search."""
        parts = [
            self.title,
            self.description,
            self.category or "",
            " ".join(self.keywords),
        ]
        return " ".join(p for p in parts if p)[:SEARCH_TEXT_LIMIT]

    def to_summary(self) -> dict:
        """Compact dict for API responses (no embedding vector)."""
        record = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "sub": self.category,
            "rank": self.rank.model_dump(),
            "keywords": self.keywords,
            "acceptanceRates": [r.model_dump() for r in self.acceptance_rates],
            "confs": [i.model_dump() for i in self.instances],
        }
        return {k: v for k, v in record.items() if v is not None and v != [] and v != ""}
