"""Query-to-ranking pipeline and report rendering.

1. Extract intent from the request
2. Apply hard filters (rank, category, location, year, then name lookup or expired)
3. Score each candidate on content, feasibility and difficulty
4. Sort by the weighted overall score
"""

import asyncio
import re
from datetime import datetime, timezone
from functools import partial
from typing import Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

from rich.console import Console
from rich.table import Table

from conf_tracker.enrichers.embedding import Embedder
from conf_tracker.errors import EmptyQueryError
from conf_tracker.extractors.intent import extract_intent
from conf_tracker.models import (
    UNRANKED,
    Conference,
    MatchScore,
    RankedConference,
    RankingResult,
    ResolvedDeadline,
    UserIntent,
)
from conf_tracker.normalizers.deadlines import deadline_status, is_expired, next_deadline
from conf_tracker.normalizers.location import place_in_location
from conf_tracker.normalizers.topics import category_label
from conf_tracker.scoring import (
    combine_scores,
    score_content,
    score_difficulty,
    score_feasibility,
)
from conf_tracker.scoring.relevance import EmbeddingResolver
from conf_tracker.sources.cache import CatalogCache

console = Console()

EmbeddingPrefetcher = Callable[[list[Conference]], Awaitable[None]]

_CJK_RE = re.compile(r"[一-鿿]")


def detect_language(text: str) -> str:
    """'zh' if the text contains any CJK ideograph, else 'en'."""
    return "zh" if _CJK_RE.search(text or "") else "en"


# ----------------------------------------------------------------------------
# Filtering
# ----------------------------------------------------------------------------


def matches_rank(conference: Conference, preference: Optional[str]) -> bool:
    if not preference:
        return True
    if preference == UNRANKED:
        return conference.rank_tier is None
    return conference.rank_tier == preference


def matches_location(conference: Conference, location: Optional[str]) -> bool:
    if not location:
        return True
    return any(place_in_location(i.place, location) for i in conference.instances)


def matches_year(conference: Conference, year: Optional[int]) -> bool:
    if not year:
        return True
    return any(i.year == year for i in conference.instances)


def matches_name(conference: Conference, query: str) -> bool:
    """Whole request found in the title or description ("NDSS")."""
    text = query.lower()
    return bool(text) and (text in conference.title.lower() or text in conference.description.lower())


def filter_candidates(
    conferences: list[Conference],
    intent: UserIntent,
    now: datetime,
) -> list[tuple[Conference, Optional[ResolvedDeadline]]]:
    """Apply the hard filters in order, keeping catalog order.

    When no category matched and the request names some (not all) of the
    remaining conferences, only those are kept, expired or not, and a
    condition is added to the intent. Otherwise expired conferences are
    dropped unless past ones were asked for. Conferences without any
    resolvable deadline survive the expired filter.
    """
    candidates = [c for c in conferences if matches_rank(c, intent.rank_preference)]
    if intent.category:
        candidates = [c for c in candidates if c.category == intent.category]
    candidates = [c for c in candidates if matches_location(c, intent.location)]
    candidates = [c for c in candidates if matches_year(c, intent.year)]

    named = [c for c in candidates if matches_name(c, intent.query)]
    if not intent.category and 0 < len(named) < len(candidates):
        intent.conditions.append(f'matches "{intent.query}"')
        return [(c, next_deadline(c, now)) for c in named]

    with_deadlines = [(c, next_deadline(c, now)) for c in candidates]
    if not intent.wants_past:
        with_deadlines = [
            (c, d) for c, d in with_deadlines
            if d is None or not is_expired(d.at, now)
        ]
    return with_deadlines


# ----------------------------------------------------------------------------
# Ranking
# ----------------------------------------------------------------------------


async def rank_conferences(
    conferences: list[Conference],
    intent: UserIntent,
    now: datetime,
    query_embedding: Optional[list[float]] = None,
    resolve_embedding: Optional[EmbeddingResolver] = None,
    lang: str = "en",
    prefetch_embeddings: Optional[EmbeddingPrefetcher] = None,
) -> RankingResult:
    """Filter, score and sort the catalog for one intent.

    `prefetch_embeddings` gets the candidates once, before scoring, so missing
    conference vectors are fetched in batches instead of one call each.
    """
    now = now if now.tzinfo else now.replace(tzinfo=timezone.utc)
    candidates = filter_candidates(conferences, intent, now)

    if query_embedding and prefetch_embeddings is not None:
        await prefetch_embeddings([conf for conf, _ in candidates])

    contents = await asyncio.gather(*[
        score_content(conf, intent, query_embedding, resolve_embedding)
        for conf, _ in candidates
    ])

    ranked = []
    for (conf, deadline), content in zip(candidates, contents):
        feasibility = score_feasibility(
            deadline.at if deadline else None,
            intent.time_budget_days,
            now,
        )
        difficulty = score_difficulty(conf)
        score = MatchScore(
            content_match=content.score,
            time_feasibility=feasibility,
            difficulty_score=difficulty,
            overall_score=combine_scores(content.score, feasibility, difficulty),
            content_strategy=content.strategy.value,
        )
        ranked.append(
            RankedConference(
                conference=conf,
                score=score,
                deadline=deadline,
                status=deadline_status(deadline.at, now, lang) if deadline else None,
            )
        )

    # sorted() is stable: equal scores keep catalog order
    ranked = sorted(ranked, key=lambda r: r.score.overall_score, reverse=True)
    return RankingResult(intent=intent, ranked=ranked, candidates_considered=len(candidates))


async def run_query(
    query: str,
    cache: CatalogCache,
    embedder: Optional[Embedder] = None,
    now: Optional[datetime] = None,
) -> RankingResult:
    """Rank the cached catalog against a free-text request."""
    if not query or not query.strip():
        raise EmptyQueryError()

    now = now or datetime.now(timezone.utc)
    intent = extract_intent(query)
    conferences = await cache.get_conferences()

    query_embedding = None
    resolve_embedding = None
    prefetch_embeddings = None
    if embedder is not None and embedder.available:
        query_embedding = await embedder.embed_one(query.strip())
        if query_embedding:
            resolve_embedding = partial(cache.conference_embedding, embedder=embedder)
            prefetch_embeddings = partial(cache.prefetch_embeddings, embedder=embedder)
        else:
            console.print("[dim]No query embedding, scoring content by keywords[/dim]")

    result = await rank_conferences(
        conferences,
        intent,
        now,
        query_embedding=query_embedding,
        resolve_embedding=resolve_embedding,
        lang=detect_language(query),
        prefetch_embeddings=prefetch_embeddings,
    )
    console.print(
        f"[dim]Ranked {len(result)} of {len(conferences)} conferences "
        f"({', '.join(intent.conditions) or 'no filters'})[/dim]"
    )
    return result


# ----------------------------------------------------------------------------
# Rendering
# ----------------------------------------------------------------------------

REPORT_TEXT = {
    "zh": {
        "found": "(Fallback) 为您找到 {count} 个符合条件的会议（筛选条件：{conditions}）。",
        "recommend": "(Fallback) 为您推荐以下会议：",
        "rank": "会议等级",
        "status": "当前状态",
        "active": "🟢 进行中",
        "expired": "🔴 已截止",
        "upcoming": "⚪ 未开始",
        "countdown": "截稿倒计时",
        "undetermined": "时间待定",
        "deadline": "截止时间",
        "scores": "匹配度",
        "footer": "时间基准：服务器时间",
    },
    "en": {
        "found": "(Fallback) Found {count} matching conferences (filters: {conditions}).",
        "recommend": "(Fallback) Recommended conferences:",
        "rank": "Rank",
        "status": "Status",
        "active": "🟢 Active",
        "expired": "🔴 Expired",
        "upcoming": "⚪ Upcoming",
        "countdown": "Countdown",
        "undetermined": "TBD",
        "deadline": "Deadline",
        "scores": "Match",
        "footer": "Server time:",
    },
}


def _display_name(conference: Conference) -> str:
    if conference.description:
        return f"{conference.title} ({conference.description})"
    return conference.title


def build_context_table(ranked: list[RankedConference]) -> str:
    """Plain-text table of conferences for the model prompt."""
    if not ranked:
        return "No matching conferences found."

    lines = []
    for item in ranked:
        conf = item.conference
        status = item.status.label if item.status else "Upcoming"
        status_zh = "已截止" if item.status and item.status.expired else "进行中"
        countdown = item.status.text if item.status else "待定"
        deadline = item.deadline.formatted if item.deadline else "TBD"

        lines.append(f"Name: {_display_name(conf)}")
        lines.append(f"Rank: CCF {conf.rank_tier or UNRANKED}")
        lines.append(f"Status: {status} ({status_zh})")
        lines.append(f"Countdown: {countdown}")
        lines.append(f"Deadline: {deadline}")
        lines.append("-------------------")
    return "\n".join(lines) + "\n"


def _offset_label(moment: datetime) -> str:
    offset = moment.utcoffset()
    hours = int(offset.total_seconds() // 3600) if offset else 0
    return f"UTC{hours:+d}"


def build_fallback_report(
    result: RankingResult,
    now: datetime,
    tz_name: str = "Asia/Shanghai",
    limit: int = 5,
    lang: str = "zh",
) -> str:
    """Deterministic markdown answer used when no model reply is available."""
    text = REPORT_TEXT.get(lang, REPORT_TEXT["zh"])
    sep = "：" if lang == "zh" else ": "
    conditions = result.intent.conditions

    if conditions:
        header = text["found"].format(count=len(result), conditions=" + ".join(conditions))
    else:
        header = text["recommend"]
    parts = [header, ""]

    for item in result.top(limit):
        conf = item.conference
        if item.status is None:
            status, countdown = text["upcoming"], text["undetermined"]
        else:
            status = text["expired"] if item.status.expired else text["active"]
            countdown = item.status.text

        score = item.score
        parts.append(f"### {_display_name(conf)}")
        parts.append(f"- {text['rank']}{sep}CCF {conf.rank_tier or UNRANKED}")
        parts.append(f"- {text['status']}{sep}{status}")
        parts.append(f"- {text['countdown']}{sep}**{countdown}**")
        if item.deadline:
            parts.append(f"- {text['deadline']}{sep}{item.deadline.formatted}")
        parts.append(
            f"- {text['scores']}{sep}{score.overall_score} "
            f"(content {score.content_match} / time {score.time_feasibility} / "
            f"difficulty {score.difficulty_score})"
        )
        parts.append("")

    server_now = now.astimezone(ZoneInfo(tz_name))
    parts.append(
        f"> {text['footer']} {server_now.strftime('%Y-%m-%d %H:%M:%S')} "
        f"({_offset_label(server_now)})"
    )
    return "\n".join(parts)


def print_ranking(result: RankingResult, limit: int = 10) -> None:
    """Print a summary table of ranked conferences."""
    shown = result.top(limit)
    table = Table(title=f"Ranking (showing {len(shown)} of {len(result)})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Conference", style="cyan", max_width=40)
    table.add_column("CCF", style="yellow")
    table.add_column("Category", style="blue", max_width=24)
    table.add_column("Deadline", style="red")
    table.add_column("Countdown", style="magenta")
    table.add_column("Content", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Difficulty", justify="right")
    table.add_column("Overall", justify="right", style="bold green")

    for position, item in enumerate(shown, start=1):
        score = item.score
        table.add_row(
            str(position),
            item.conference.title[:40],
            item.conference.rank_tier or "-",
            category_label(item.conference.category),
            item.deadline.formatted if item.deadline else "TBD",
            item.status.text if item.status else "-",
            str(score.content_match),
            str(score.time_feasibility),
            str(score.difficulty_score),
            str(score.overall_score),
        )

    console.print(table)
    if result.intent.conditions:
        console.print(f"[dim]Filters: {' + '.join(result.intent.conditions)}[/dim]")
