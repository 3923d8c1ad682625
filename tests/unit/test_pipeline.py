"""Tests for filtering, ranking and report rendering."""

import asyncio
import json

import httpx
import pytest
from conf_tracker.enrichers.embedding import JinaEmbedder
from conf_tracker.errors import EmptyQueryError
from conf_tracker.extractors import extract_intent
from conf_tracker.pipeline import (
    build_context_table,
    build_fallback_report,
    detect_language,
    filter_candidates,
    rank_conferences,
    run_query,
)
from conf_tracker.sources import CatalogCache


class StaticStore:
    name = "static"

    def __init__(self, conferences):
        self.conferences = conferences

    async def fetch_all(self):
        return list(self.conferences)


class KeyedEmbedder:
    """Returns a fixed vector per text prefix, counting calls."""

    available = True

    def __init__(self, vectors: dict, default=None):
        self.vectors = vectors
        self.default = default
        self.calls = []

    async def embed(self, texts):
        return [await self.embed_one(t) for t in texts]

    async def embed_one(self, text):
        self.calls.append(text)
        for prefix, vector in self.vectors.items():
            if text.startswith(prefix):
                return vector
        return self.default


def rank(catalog, query, now, **kwargs):
    return asyncio.run(rank_conferences(catalog, extract_intent(query), now, **kwargs))


@pytest.fixture
def tiered_ai_catalog(make_conference):
    """One A-tier AI conference 70 days out, one B-tier 40 days out."""
    return [
        make_conference(id="a-tier", title="ATIER", sub="AI", ccf="A", keywords=["ai"],
                        deadlines=["2026-05-10 12:00:00"]),
        make_conference(id="b-tier", title="BTIER", sub="AI", ccf="B", keywords=["ai"],
                        deadlines=["2026-04-10 12:00:00"]),
    ]


class TestFilters:
    def test_expired_excluded_tbd_kept(self, sample_catalog, now):
        candidates = filter_candidates(sample_catalog, extract_intent("recommend conferences"), now)
        ids = [c.id for c, _ in candidates]
        assert ids == ["aaai", "ijcnn", "icde", "apsec"]
        assert dict((c.id, d) for c, d in candidates)["apsec"] is None

    def test_wants_past_keeps_expired(self, sample_catalog, now):
        result = rank(sample_catalog, "past conferences", now)
        assert "ndss" in [r.conference.id for r in result.ranked]
        assert len(result) == 5

    def test_rank_is_hard_filter(self, tiered_ai_catalog, now):
        result = rank(tiered_ai_catalog, "CCF A AI conference, 2 months", now)
        assert [r.conference.id for r in result.ranked] == ["a-tier"]
        score = result.ranked[0].score
        assert (score.content_match, score.time_feasibility, score.difficulty_score) == (100, 85, 30)
        assert score.overall_score == 77

    def test_unranked_preference(self, sample_catalog, make_conference, now):
        catalog = sample_catalog + [
            make_conference(id="workshop", title="WS", deadlines=["2026-06-01"]),
        ]
        result = rank(catalog, "unranked workshop", now)
        assert [r.conference.id for r in result.ranked] == ["workshop"]

    def test_category(self, sample_catalog, now):
        result = rank(sample_catalog, "database conference", now)
        assert [r.conference.id for r in result.ranked] == ["icde"]
        assert result.ranked[0].score.content_match == 100

    def test_location(self, sample_catalog, now):
        result = rank(sample_catalog, "conference in china", now)
        assert {r.conference.id for r in result.ranked} == {"icde", "apsec"}

    def test_continent(self, sample_catalog, now):
        result = rank(sample_catalog, "conference in europe", now)
        assert [r.conference.id for r in result.ranked] == ["ijcnn"]

    def test_year(self, sample_catalog, now):
        result = rank(sample_catalog, "conferences in 2027", now)
        assert [r.conference.id for r in result.ranked] == ["icde"]

    def test_named_conference_kept_even_if_expired(self, sample_catalog, now):
        result = rank(sample_catalog, "NDSS", now)
        assert [r.conference.id for r in result.ranked] == ["ndss"]
        assert result.ranked[0].status.expired
        assert result.intent.conditions == ['matches "NDSS"']

    def test_name_lookup_in_description(self, sample_catalog, now):
        result = rank(sample_catalog, "data engineering", now)
        assert [r.conference.id for r in result.ranked] == ["icde"]

    def test_name_lookup_skipped_when_category_matched(self, sample_catalog, now):
        # "software engineering" selects category SE, so the lookup does not apply
        result = rank(sample_catalog, "software engineering", now)
        assert [r.conference.id for r in result.ranked] == ["apsec"]
        assert result.intent.conditions == ["category SE"]

    def test_name_lookup_narrows_to_matches(self, sample_catalog, now):
        result = rank(sample_catalog, "conference on", now)
        assert {r.conference.id for r in result.ranked} == {"aaai", "ijcnn", "icde"}

    def test_name_lookup_skipped_when_every_candidate_matches(self, sample_catalog, now):
        catalog = [c for c in sample_catalog if c.id in ("aaai", "ijcnn")]
        result = rank(catalog, "conference", now)
        assert {r.conference.id for r in result.ranked} == {"aaai", "ijcnn"}
        assert result.intent.conditions == []

    def test_zero_candidates_is_normal(self, sample_catalog, now):
        result = rank(sample_catalog, "CCF B conference", now)
        assert result.ranked == []
        assert result.candidates_considered == 0


class TestRanking:
    def test_neutral_query_orders_by_tier(self, sample_catalog, now):
        """No keywords, no budget: content 50, feasibility 70, difficulty by tier."""
        result = rank(sample_catalog, "recommend conferences", now)
        for item in result.ranked:
            assert item.score.content_match == 50
            assert item.score.time_feasibility == 70
        # Ties keep catalog order
        assert [r.conference.id for r in result.ranked] == ["ijcnn", "apsec", "aaai", "icde"]
        assert [r.score.overall_score for r in result.ranked] == [62, 62, 52, 52]

    @pytest.mark.parametrize("query", [
        "machine learning security, 3 weeks",
        "recommend conferences",
        "past conferences, almost done",
        "database 10 days",
    ])
    def test_scores_non_increasing(self, sample_catalog, now, query):
        scores = [r.score.overall_score for r in rank(sample_catalog, query, now).ranked]
        assert scores == sorted(scores, reverse=True)

    def test_status_attached(self, sample_catalog, now):
        result = rank(sample_catalog, "recommend conferences", now, lang="zh")
        by_id = {r.conference.id: r for r in result.ranked}
        assert by_id["aaai"].status.text == "还剩70天"
        assert by_id["apsec"].status is None
        assert by_id["aaai"].deadline.formatted == "2026-05-10 23:59:59 (UTC-12)"

    def test_top_slices(self, sample_catalog, now):
        result = rank(sample_catalog, "recommend conferences", now)
        assert len(result.top(2)) == 2
        assert len(result.top()) == 4

    def test_to_dict(self, sample_catalog, now):
        item = rank(sample_catalog, "database conference", now).ranked[0]
        record = item.to_dict()
        assert record["title"] == "ICDE"
        assert record["matchScore"]["overallScore"] == item.score.overall_score
        assert record["nextDeadline"]["formatted"] == "2026-07-01 23:59:59 (UTC+8)"
        assert record["status"] == "Active"
        assert "embedding" not in record


class TestRunQuery:
    def test_empty_query_rejected(self, sample_catalog, now):
        cache = CatalogCache(StaticStore(sample_catalog))
        with pytest.raises(EmptyQueryError):
            asyncio.run(run_query("   ", cache, now=now))

    def test_embedding_path_with_lazy_vectors(self, sample_catalog, now):
        cache = CatalogCache(StaticStore(sample_catalog))
        embedder = KeyedEmbedder({"recommend": [1.0, 0.0], "AAAI": [1.0, 0.0]}, default=[0.0, 1.0])

        async def scenario():
            first = await run_query("recommend conferences", cache, embedder, now)
            second = await run_query("recommend conferences", cache, embedder, now)
            return first, second

        first, second = asyncio.run(scenario())
        by_id = {r.conference.id: r.score for r in first.ranked}
        assert by_id["aaai"].content_strategy == "embedding"
        assert by_id["aaai"].content_match == 100
        assert by_id["icde"].content_strategy == "keyword"
        assert first.ranked[0].conference.id == "aaai"

        # Conference vectors are memoised in the cache: second run only embeds the query
        conference_calls = [c for c in embedder.calls if not c.startswith("recommend")]
        assert len(conference_calls) == 4
        assert [r.conference.id for r in second.ranked] == [r.conference.id for r in first.ranked]

    def test_no_query_vector_falls_back(self, sample_catalog, now):
        cache = CatalogCache(StaticStore(sample_catalog))
        embedder = KeyedEmbedder({}, default=None)
        result = asyncio.run(run_query("recommend conferences", cache, embedder, now))
        assert all(r.score.content_strategy == "keyword" for r in result.ranked)
        assert embedder.calls == ["recommend conferences"]

    def test_cold_cache_embeds_in_batches(self, make_conference, now, monkeypatch):
        monkeypatch.setattr("conf_tracker.enrichers.embedding.BATCH_PAUSE_SECONDS", 0)
        catalog = [make_conference(id=f"c{i}", title=f"C{i}", deadlines=["2026-06-01"]) for i in range(60)]
        stats = {"in_flight": 0, "max": 0, "requests": 0}

        async def handler(request: httpx.Request) -> httpx.Response:
            stats["requests"] += 1
            stats["in_flight"] += 1
            stats["max"] = max(stats["max"], stats["in_flight"])
            await asyncio.sleep(0)
            stats["in_flight"] -= 1
            texts = json.loads(request.content)["input"]
            data = [{"index": i, "embedding": [1.0, 0.0]} for i in range(len(texts))]
            return httpx.Response(200, json={"data": data})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        embedder = JinaEmbedder(api_key="jina-key", client=client)
        cache = CatalogCache(StaticStore(catalog))
        result = asyncio.run(run_query("recommend conferences", cache, embedder, now))

        # One query request, then six sequential batches of ten
        assert stats["requests"] == 7
        assert stats["max"] == 1
        assert len(result) == 60
        assert all(r.score.content_strategy == "embedding" for r in result.ranked)


class TestReports:
    def test_empty_context(self):
        assert build_context_table([]) == "No matching conferences found."

    def test_context_table(self, sample_catalog, now):
        result = rank(sample_catalog, "recommend conferences", now)
        table = build_context_table(result.top())
        assert "Name: AAAI (Conference on Artificial Intelligence)" in table
        assert "Rank: CCF A" in table
        assert "Status: Active (进行中)" in table
        assert "Deadline: 2026-05-10 23:59:59 (UTC-12)" in table
        assert "Rank: CCF C" in table
        assert "Deadline: TBD" in table

    def test_fallback_without_conditions(self, sample_catalog, now):
        result = rank(sample_catalog, "推荐会议", now, lang="zh")
        report = build_fallback_report(result, now)
        assert report.startswith("(Fallback) 为您推荐以下会议：")
        assert "### APSEC (Asia-Pacific Software Engineering)" in report
        assert "⚪ 未开始" in report
        assert "**时间待定**" in report
        assert "🟢 进行中" in report
        assert report.endswith("> 时间基准：服务器时间 2026-03-01 20:00:00 (UTC+8)")

    def test_fallback_with_conditions(self, tiered_ai_catalog, now):
        result = rank(tiered_ai_catalog, "CCF A AI conference, 2 months", now)
        report = build_fallback_report(result, now)
        assert report.startswith(
            "(Fallback) 为您找到 1 个符合条件的会议（筛选条件：CCF A + category AI + ready in 60 days）。"
        )
        assert "- 截止时间：2026-05-10 12:00:00 (UTC+0)" in report

    def test_english_report(self, sample_catalog, now):
        result = rank(sample_catalog, "recommend conferences", now)
        report = build_fallback_report(result, now, tz_name="UTC", lang="en")
        assert report.startswith("(Fallback) Recommended conferences:")
        assert report.endswith("> Server time: 2026-03-01 12:00:00 (UTC+0)")

    def test_report_limited_to_five(self, make_conference, now):
        catalog = [make_conference(id=f"c{i}", title=f"C{i}", deadlines=["2026-06-01"]) for i in range(8)]
        result = rank(catalog, "recommend conferences", now)
        assert build_fallback_report(result, now).count("### ") == 5

    @pytest.mark.parametrize("text,expected", [
        ("推荐会议", "zh"), ("CCF A类", "zh"), ("AI conference", "en"), ("", "en"),
    ])
    def test_detect_language(self, text, expected):
        assert detect_language(text) == expected
