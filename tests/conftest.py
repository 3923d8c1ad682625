"""Shared test fixtures and configuration."""

from datetime import datetime, timezone

import pytest
from conf_tracker.models import Conference

# Fixed reference instant for every deadline computation in the tests
NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def build_conference(
    id: str = "conf",
    title: str = "CONF",
    description: str = "",
    sub: str = None,
    ccf: str = None,
    keywords: list = None,
    acceptance_rates: list = None,
    embedding: list = None,
    deadlines: list = None,
    timezone_notation: str = "UTC+0",
    year: int = 2026,
    place: str = "",
) -> Conference:
    """Conference with a single instance holding the given deadlines."""
    return Conference.model_validate({
        "id": id,
        "title": title,
        "description": description,
        "sub": sub,
        "rank": {"ccf": ccf},
        "keywords": keywords or [],
        "acceptance_rates": acceptance_rates or [],
        "embedding": embedding,
        "confs": [
            {
                "year": year,
                "place": place,
                "timezone": timezone_notation,
                "timeline": [{"deadline": d} for d in (deadlines or [])],
            }
        ],
    })


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_conference():
    """Factory fixture for catalog conferences."""
    return build_conference


@pytest.fixture
def sample_catalog() -> list[Conference]:
    """Small catalog spanning tiers, categories and deadline states."""
    return [
        build_conference(
            id="aaai", title="AAAI", description="Conference on Artificial Intelligence",
            sub="AI", ccf="A", keywords=["artificial intelligence", "machine learning"],
            deadlines=["2026-05-10 23:59:59"], timezone_notation="AoE",
            year=2026, place="Montreal, Canada",
        ),
        build_conference(
            id="ijcnn", title="IJCNN", description="Joint Conference on Neural Networks",
            sub="AI", ccf="C", keywords=["neural network"],
            deadlines=["2026-04-10 23:59:59"], timezone_notation="UTC-8",
            year=2026, place="Rome, Italy",
        ),
        build_conference(
            id="icde", title="ICDE", description="Conference on Data Engineering",
            sub="DB", ccf="A", keywords=["database"],
            deadlines=["2026-07-01 23:59:59"], timezone_notation="UTC+8",
            year=2027, place="Shanghai, China",
        ),
        build_conference(
            id="ndss", title="NDSS", description="Network and Distributed System Security",
            sub="SC", ccf="A", keywords=["security"],
            deadlines=["2025-07-10 23:59:59"], timezone_notation="AoE",
            year=2026, place="San Diego, USA",
        ),
        build_conference(
            id="apsec", title="APSEC", description="Asia-Pacific Software Engineering",
            sub="SE", ccf="C", keywords=["software engineering"],
            deadlines=["TBD"], year=2026, place="Hong Kong, China",
        ),
    ]
