"""Pattern-based intent extraction from free-text requests.

Each field of the intent has its own ordered list of rules. A rule is a pure
function from the lower-cased query to a value or None; the first rule that
returns something wins and later rules are never consulted for that field.
"""

import re
from typing import Callable, Optional, TypeVar

from conf_tracker.models import UNRANKED, UserIntent
from conf_tracker.normalizers.location import match_location
from conf_tracker.normalizers.topics import TOPIC_VOCABULARY, contains_term, match_category
from conf_tracker.scoring.policy import round_half_up

T = TypeVar("T")
Rule = Callable[[str], Optional[T]]

# ----------------------------------------------------------------------------
# Rank preference
# ----------------------------------------------------------------------------


def _rank_pattern(tier: str) -> re.Pattern:
    t = tier.lower()
    return re.compile(
        rf"ccf\s*-?\s*{t}(?![a-z])"
        rf"|(?<![a-z]){t}\s*类"
        rf"|(?<![a-z]){t}\s*-\s*class"
        rf"|rank\s*-?\s*{t}(?![a-z])"
        rf"|class\s*{t}(?![a-z])",
        re.IGNORECASE,
    )


RANK_PATTERNS: list[tuple[re.Pattern, str]] = [
    (_rank_pattern("A"), "A"),
    (_rank_pattern("B"), "B"),
    (_rank_pattern("C"), "C"),
    (re.compile(r"unranked|non\s*-?\s*ccf|非\s*ccf|ccf\s*-?\s*n(?![a-z])|无等级", re.IGNORECASE), UNRANKED),
]


def _pattern_rule(pattern: re.Pattern, value: T) -> Rule:
    def rule(text: str) -> Optional[T]:
        return value if pattern.search(text) else None
    return rule


RANK_RULES: list[Rule] = [_pattern_rule(p, tier) for p, tier in RANK_PATTERNS]

# ----------------------------------------------------------------------------
# Time budget (days until submission-ready)
# ----------------------------------------------------------------------------

CN_NUMERALS = {
    "一": 1, "两": 2, "二": 2, "三": 3, "四": 4, "五": 5,
    "六": 6, "七": 7, "八": 8, "九": 9,
}
CN_TEN = "十"

# Whole number only: "1.5 months" must not read as "5 months"
_NUMBER = r"(?<![\d.])(\d+(?:\.\d+)?|[一两二三四五六七八九十]+)"

# Months, weeks, days; English and Chinese for each. Scanned in this order.
BUDGET_UNIT_PATTERNS: list[tuple[re.Pattern, int]] = [
    (re.compile(rf"{_NUMBER}\s*months?\b"), 30),
    (re.compile(rf"{_NUMBER}\s*个\s*月"), 30),
    (re.compile(rf"{_NUMBER}\s*weeks?\b"), 7),
    (re.compile(rf"{_NUMBER}\s*个?\s*(?:周|星期|礼拜)"), 7),
    (re.compile(rf"{_NUMBER}\s*days?\b"), 1),
    (re.compile(rf"{_NUMBER}\s*天"), 1),
]

# Qualitative progress phrases, strongest first
PROGRESS_PATTERNS: list[tuple[re.Pattern, int]] = [
    (re.compile(r"just started|刚开始|刚起步|half done|halfway|一半|(?<!\d)60\s*%"), 60),
    (re.compile(r"almost done|nearly done|nearly finished|快写完|快完成|基本完成|(?<!\d)[89]0\s*%|80\s*[-–~到]\s*90"), 30),
    (re.compile(r"progress|draft|进度|草稿|在写|写了"), 90),
]


def _cn_to_int(token: str) -> int:
    """Chinese numerals up to 99: 十二 -> 12, 二十 -> 20, 二十五 -> 25."""
    if CN_TEN in token:
        tens, _, units = token.partition(CN_TEN)
        return CN_NUMERALS.get(tens[-1:], 1) * 10 + CN_NUMERALS.get(units[-1:], 0)
    # "一两个月" (one or two months) takes the larger figure
    return CN_NUMERALS.get(token[-1], 0)


def _to_number(token: str) -> float:
    if token[0].isdigit():
        return float(token)
    return _cn_to_int(token)


def _unit_rule(pattern: re.Pattern, multiplier: int) -> Rule:
    def rule(text: str) -> Optional[int]:
        match = pattern.search(text)
        if not match:
            return None
        days = round_half_up(_to_number(match.group(1)) * multiplier)
        return days if days > 0 else None
    return rule


BUDGET_RULES: list[Rule] = [
    *[_unit_rule(p, m) for p, m in BUDGET_UNIT_PATTERNS],
    *[_pattern_rule(p, days) for p, days in PROGRESS_PATTERNS],
]

# ----------------------------------------------------------------------------
# Topic keywords
# ----------------------------------------------------------------------------

# Generic request words that never count as topics
STOPWORDS = {
    "recommend", "recommendation", "recommendations", "conference", "conferences",
    "please", "help", "me", "my", "the", "and", "for", "some", "any", "with", "want",
    "in", "on", "of", "to", "is", "are", "an", "ccf", "rank", "class",
    "deadline", "deadlines", "month", "months", "week", "weeks", "day", "days",
    "推荐", "会议", "请", "帮我", "帮忙", "一下", "一些", "有哪些", "什么",
}

_SPLIT_RE = re.compile(r"[\s,.;:!?，。；：！？、/()（）\[\]\"'“”‘’]+")

MIN_TOKEN_LEN = 2
MAX_TOKEN_LEN = 10


def vocabulary_keywords(text: str) -> Optional[list[str]]:
    """Every vocabulary term found in the query, in vocabulary order."""
    found = [term for term in TOPIC_VOCABULARY if contains_term(text, term)]
    return _dedupe(found) or None


def fallback_keywords(text: str) -> Optional[list[str]]:
    """Split the query and keep mid-length tokens that are not stopwords."""
    tokens = [t for t in _SPLIT_RE.split(text) if t]
    kept = [
        t for t in tokens
        if MIN_TOKEN_LEN <= len(t) <= MAX_TOKEN_LEN
        and t not in STOPWORDS
        and not t.isdigit()
    ]
    return _dedupe(kept) or None


KEYWORD_RULES: list[Rule] = [vocabulary_keywords, fallback_keywords]

# ----------------------------------------------------------------------------
# Query filters
# ----------------------------------------------------------------------------

PAST_KEYWORDS = [
    "past", "history", "expired", "previous",
    "往届", "过期", "历史",
    "2020", "2021", "2022", "2023", "2024",
]

_YEAR_RE = re.compile(r"(?<!\d)(20\d{2})(?!\d)")


def extract_year(text: str) -> Optional[int]:
    match = _YEAR_RE.search(text)
    return int(match.group(1)) if match else None


def wants_past(text: str) -> bool:
    return any(k in text for k in PAST_KEYWORDS)


# ----------------------------------------------------------------------------


def _dedupe(items: list[str]) -> list[str]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def first_match(rules: list[Rule], text: str) -> Optional[T]:
    """Apply rules in order and return the first non-empty result."""
    for rule in rules:
        value = rule(text)
        if value:
            return value
    return None


def extract_intent(query: str) -> UserIntent:
    """Turn a free-text request into a structured UserIntent."""
    text = query.lower().strip()

    intent = UserIntent(
        rank_preference=first_match(RANK_RULES, text),
        time_budget_days=first_match(BUDGET_RULES, text),
        keywords=first_match(KEYWORD_RULES, text) or [],
        category=match_category(text),
        location=match_location(text),
        year=extract_year(text),
        wants_past=wants_past(text),
        query=query.strip(),
    )

    if intent.rank_preference:
        intent.conditions.append(f"CCF {intent.rank_preference}")
    if intent.category:
        intent.conditions.append(f"category {intent.category}")
    if intent.location:
        intent.conditions.append(f"held in {intent.location}")
    if intent.year:
        intent.conditions.append(f"year {intent.year}")
    if intent.time_budget_days:
        intent.conditions.append(f"ready in {intent.time_budget_days} days")

    return intent
