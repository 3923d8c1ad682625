"""Topic vocabulary and category taxonomy.

Categories follow the CCF recommendation list. Two lookup tables hang off
them: the query filter keywords (what a user types to ask for a field) and the
broader topic terms used when scoring keyword overlap.
"""

import re
from typing import Optional

# Category code -> display name
CATEGORY_NAMES = {
    "DS": "Computer Architecture/Parallel Programming/Storage Technology",
    "NW": "Network System",
    "SC": "Network and System Security",
    "SE": "Software Engineering/Operating System/Programming Language Design",
    "DB": "Database/Data Mining/Information Retrieval",
    "CT": "Computing Theory",
    "CG": "Graphics",
    "AI": "Artificial Intelligence",
    "HI": "Computer-Human Interaction",
    "MX": "Interdiscipline/Mixture/Emerging",
}

# Query words that select a category filter. Order matters: first hit wins.
CATEGORY_FILTER_KEYWORDS: dict[str, list[str]] = {
    "AI": ["ai", "artificial intelligence", "人工智能", "machine learning", "深度学习"],
    "SE": ["se", "software engineering", "软件工程", "system software", "系统软件"],
    "DB": ["db", "database", "数据库", "data mining", "数据挖掘"],
    "SC": ["security", "network security", "安全", "信息安全", "网络安全"],
    "CG": ["graphics", "multimedia", "图形学", "多媒体", "cv", "vision"],
    "NW": ["network", "computer network", "网络", "计算机网络"],
    "DS": ["architecture", "system", "体系结构", "存储", "storage", "distributed"],
    "HI": ["hci", "human", "交互", "人机"],
    "CT": ["theory", "theoretical", "理论"],
}

# Category -> topic terms a conference in that field plausibly covers
CATEGORY_TOPICS: dict[str, list[str]] = {
    "AI": [
        "ai", "artificial intelligence", "machine learning", "deep learning",
        "neural network", "nlp", "natural language", "computer vision", "vision",
        "reinforcement learning", "llm", "large language model",
        "人工智能", "机器学习", "深度学习", "神经网络", "自然语言", "计算机视觉",
        "强化学习", "大模型",
    ],
    "DS": [
        "architecture", "parallel", "storage", "distributed", "hpc",
        "high performance", "cloud", "system", "systems",
        "体系结构", "并行", "存储", "分布式", "高性能", "云计算",
    ],
    "NW": [
        "network", "networking", "wireless", "mobile computing", "internet",
        "网络", "计算机网络", "无线", "移动计算",
    ],
    "SC": [
        "security", "privacy", "cryptography", "crypto", "attack",
        "安全", "隐私", "密码", "信息安全", "网络安全",
    ],
    "SE": [
        "software engineering", "software", "operating system", "programming language",
        "compiler", "program analysis", "testing", "verification",
        "软件工程", "软件", "操作系统", "编程语言", "编译", "程序分析",
    ],
    "DB": [
        "database", "data mining", "information retrieval", "data management",
        "knowledge graph", "recommendation", "web",
        "数据库", "数据挖掘", "信息检索", "知识图谱", "推荐系统",
    ],
    "CT": [
        "theory", "algorithm", "algorithms", "complexity", "logic", "formal methods",
        "理论", "算法", "复杂性", "逻辑",
    ],
    "CG": [
        "graphics", "multimedia", "visualization", "rendering", "image", "video",
        "图形", "图形学", "多媒体", "可视化", "渲染", "图像",
    ],
    "HI": [
        "hci", "human-computer", "human computer", "interaction", "ubiquitous",
        "user interface", "人机交互", "交互", "人机", "普适计算",
    ],
    "MX": [
        "interdisciplinary", "bioinformatics", "emerging", "blockchain",
        "交叉", "综合", "新兴", "生物信息",
    ],
}

# Curated request vocabulary, scanned in order when extracting intent keywords
TOPIC_VOCABULARY: list[str] = [
    # AI / ML
    "ai", "artificial intelligence", "machine learning", "deep learning",
    "neural network", "nlp", "natural language", "computer vision", "cv",
    "reinforcement learning", "llm", "large language model", "multimodal",
    "人工智能", "机器学习", "深度学习", "神经网络", "自然语言", "计算机视觉",
    "强化学习", "大模型", "多模态",
    # Systems
    "operating system", "distributed", "storage", "architecture", "parallel",
    "cloud", "database", "data mining", "software engineering", "compiler",
    "操作系统", "分布式", "存储", "体系结构", "并行", "云计算", "数据库",
    "数据挖掘", "软件工程", "编译",
    # Security
    "security", "privacy", "cryptography", "安全", "隐私", "密码",
    # Networking
    "network", "wireless", "网络", "无线",
    # Graphics
    "graphics", "multimedia", "visualization", "图形", "多媒体", "可视化",
    # HCI
    "hci", "human-computer", "interaction", "人机交互", "交互",
    # Theory
    "theory", "algorithm", "complexity", "理论", "算法",
]

# ASCII terms this short only match as whole words ("ai" is not in "email")
SHORT_TERM_MAX_LEN = 3

_ASCII_WORD_RE = re.compile(r"^[a-z0-9]+$")


def normalize_tag(tag: str) -> str:
    """Normalize a single tag to lowercase, trimmed."""
    return tag.lower().strip()


def contains_term(text: str, term: str) -> bool:
    """Case-insensitive substring test with word boundaries for short ASCII terms."""
    text = text.lower()
    term = normalize_tag(term)
    if not term:
        return False
    if len(term) <= SHORT_TERM_MAX_LEN and _ASCII_WORD_RE.match(term):
        return re.search(rf"(?<![a-z0-9]){re.escape(term)}(?![a-z0-9])", text) is not None
    return term in text


def match_category(query: str) -> Optional[str]:
    """Category code whose filter keywords appear in the query (first wins)."""
    for code, keywords in CATEGORY_FILTER_KEYWORDS.items():
        if any(contains_term(query, k) for k in keywords):
            return code
    return None


def category_label(code: Optional[str]) -> str:
    """Display name for a category code ("-" when absent)."""
    if not code:
        return "-"
    return CATEGORY_NAMES.get(code.upper(), code)


def category_terms(code: Optional[str]) -> list[str]:
    """Topic terms for a category code (empty for unknown codes)."""
    if not code:
        return []
    return CATEGORY_TOPICS.get(code.upper(), [])


def normalize_keywords(raw_tags: list[str]) -> list[str]:
    """Clean a tag list: trim, drop empties, de-duplicate case-insensitively."""
    seen = set()
    cleaned = []
    for tag in raw_tags:
        value = tag.strip()
        key = value.lower()
        if not value or key in seen:
            continue
        seen.add(key)
        cleaned.append(value)
    return cleaned
