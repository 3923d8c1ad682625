"""Content relevance: embedding similarity with a keyword-overlap fallback.

Two strategies exist. `select_strategy` is the single decision point: it picks
the embedding score when both vectors exist and the similarity is confident,
otherwise it defers to keyword overlap.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from conf_tracker.models import Conference, UserIntent
from conf_tracker.normalizers.topics import category_terms, contains_term
from conf_tracker.scoring.policy import (
    CATEGORY_MATCH_CREDIT,
    EMBEDDING_CONFIDENCE_THRESHOLD,
    KEYWORD_NEUTRAL_SCORE,
    TAG_MATCH_CREDIT,
    TEXT_MATCH_CREDIT,
    round_half_up,
)

Vector = list[float]
EmbeddingResolver = Callable[[Conference], Awaitable[Optional[Vector]]]


class ContentStrategy(str, Enum):
    EMBEDDING = "embedding"
    KEYWORD = "keyword"


@dataclass(frozen=True)
class ContentDecision:
    """Which strategy applies, and the embedding score when it does."""

    strategy: ContentStrategy
    score: Optional[int] = None


@dataclass(frozen=True)
class ContentScore:
    score: int
    strategy: ContentStrategy


def cosine_similarity(a: Vector, b: Vector) -> float:
    """Cosine of two vectors; 0.0 for mismatched lengths or a zero vector."""
    if not a or not b or len(a) != len(b):
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


def similarity_percent(query_vec: Vector, conf_vec: Vector) -> float:
    """Map cosine in [-1, 1] onto [0, 100], unrounded."""
    return (cosine_similarity(query_vec, conf_vec) + 1) * 50


def embedding_score(query_vec: Vector, conf_vec: Vector) -> int:
    return round_half_up(similarity_percent(query_vec, conf_vec))


def select_strategy(query_vec: Optional[Vector], conf_vec: Optional[Vector]) -> ContentDecision:
    if not query_vec or not conf_vec:
        return ContentDecision(ContentStrategy.KEYWORD)
    # Threshold applies before rounding: 60.2 is confident, 59.9 is not
    mapped = similarity_percent(query_vec, conf_vec)
    if mapped > EMBEDDING_CONFIDENCE_THRESHOLD:
        return ContentDecision(ContentStrategy.EMBEDDING, round_half_up(mapped))
    return ContentDecision(ContentStrategy.KEYWORD)


def keyword_credit(conference: Conference, keyword: str) -> float:
    """Best tier a single keyword reaches for this conference."""
    # Either direction counts: "learning" hits "deep learning" and vice versa
    if any(contains_term(tag, keyword) or contains_term(keyword, tag) for tag in conference.keywords):
        return TAG_MATCH_CREDIT
    if contains_term(conference.title, keyword) or contains_term(conference.description, keyword):
        return TEXT_MATCH_CREDIT
    if any(contains_term(term, keyword) for term in category_terms(conference.category)):
        return CATEGORY_MATCH_CREDIT
    return 0.0


def keyword_score(conference: Conference, keywords: list[str]) -> int:
    """Average best-tier credit over the request keywords, 0-100."""
    if not keywords:
        return KEYWORD_NEUTRAL_SCORE
    total = sum(keyword_credit(conference, k) for k in keywords)
    return round_half_up(total / len(keywords) * 100)


async def score_content(
    conference: Conference,
    intent: UserIntent,
    query_embedding: Optional[Vector] = None,
    resolve_embedding: Optional[EmbeddingResolver] = None,
) -> ContentScore:
    """Content match for one conference.

    When the conference has no stored vector and a resolver is given, its
    vector is computed lazily and the decision is retried once.
    """
    decision = select_strategy(query_embedding, conference.embedding)

    if (
        decision.strategy is ContentStrategy.KEYWORD
        and query_embedding
        and not conference.embedding
        and resolve_embedding is not None
    ):
        lazy_vec = await resolve_embedding(conference)
        decision = select_strategy(query_embedding, lazy_vec)

    if decision.strategy is ContentStrategy.EMBEDDING:
        return ContentScore(decision.score, ContentStrategy.EMBEDDING)
    return ContentScore(keyword_score(conference, intent.keywords), ContentStrategy.KEYWORD)
