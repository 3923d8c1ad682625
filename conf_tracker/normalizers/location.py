"""Location matching for free-text venue places.

Places in the catalog look like "Vancouver, Canada" or "Seoul, South Korea".
Queries name a country or continent in English or Chinese.
"""

from typing import Optional

from conf_tracker.normalizers.topics import contains_term

# Alias (lowercase) -> canonical country name
COUNTRY_ALIASES = {
    "china": "China", "中国": "China", "prc": "China",
    "usa": "USA", "us": "USA", "u.s.a.": "USA", "united states": "USA",
    "united states of america": "USA", "america": "USA", "美国": "USA",
    "canada": "Canada", "加拿大": "Canada",
    "mexico": "Mexico", "墨西哥": "Mexico",
    "uk": "United Kingdom", "united kingdom": "United Kingdom", "england": "United Kingdom",
    "scotland": "United Kingdom", "wales": "United Kingdom", "英国": "United Kingdom",
    "germany": "Germany", "德国": "Germany",
    "france": "France", "法国": "France",
    "italy": "Italy", "意大利": "Italy",
    "spain": "Spain", "西班牙": "Spain",
    "portugal": "Portugal", "葡萄牙": "Portugal",
    "netherlands": "Netherlands", "holland": "Netherlands", "荷兰": "Netherlands",
    "belgium": "Belgium", "比利时": "Belgium",
    "austria": "Austria", "奥地利": "Austria",
    "switzerland": "Switzerland", "瑞士": "Switzerland",
    "sweden": "Sweden", "瑞典": "Sweden",
    "norway": "Norway", "挪威": "Norway",
    "denmark": "Denmark", "丹麦": "Denmark",
    "finland": "Finland", "芬兰": "Finland",
    "ireland": "Ireland", "爱尔兰": "Ireland",
    "greece": "Greece", "希腊": "Greece",
    "poland": "Poland", "波兰": "Poland",
    "czech republic": "Czech Republic", "czechia": "Czech Republic", "捷克": "Czech Republic",
    "japan": "Japan", "日本": "Japan",
    "south korea": "South Korea", "korea": "South Korea", "韩国": "South Korea",
    "singapore": "Singapore", "新加坡": "Singapore",
    "india": "India", "印度": "India",
    "thailand": "Thailand", "泰国": "Thailand",
    "vietnam": "Vietnam", "越南": "Vietnam",
    "malaysia": "Malaysia", "马来西亚": "Malaysia",
    "indonesia": "Indonesia", "印度尼西亚": "Indonesia",
    "israel": "Israel", "以色列": "Israel",
    "uae": "United Arab Emirates", "united arab emirates": "United Arab Emirates",
    "阿联酋": "United Arab Emirates",
    "australia": "Australia", "澳大利亚": "Australia",
    "new zealand": "New Zealand", "新西兰": "New Zealand",
    "brazil": "Brazil", "巴西": "Brazil",
    "chile": "Chile", "智利": "Chile",
    "south africa": "South Africa", "南非": "South Africa",
    "egypt": "Egypt", "埃及": "Egypt",
}

# Regions we treat as part of China for venue matching
CHINA_REGIONS = {
    "hong kong": "China", "香港": "China",
    "macau": "China", "macao": "China", "澳门": "China",
    "taiwan": "China", "台湾": "China",
}

COUNTRY_CONTINENTS = {
    "China": "Asia", "Japan": "Asia", "South Korea": "Asia", "Singapore": "Asia",
    "India": "Asia", "Thailand": "Asia", "Vietnam": "Asia", "Malaysia": "Asia",
    "Indonesia": "Asia", "Israel": "Asia", "United Arab Emirates": "Asia",
    "USA": "North America", "Canada": "North America", "Mexico": "North America",
    "United Kingdom": "Europe", "Germany": "Europe", "France": "Europe",
    "Italy": "Europe", "Spain": "Europe", "Portugal": "Europe",
    "Netherlands": "Europe", "Belgium": "Europe", "Austria": "Europe",
    "Switzerland": "Europe", "Sweden": "Europe", "Norway": "Europe",
    "Denmark": "Europe", "Finland": "Europe", "Ireland": "Europe",
    "Greece": "Europe", "Poland": "Europe", "Czech Republic": "Europe",
    "Australia": "Oceania", "New Zealand": "Oceania",
    "Brazil": "South America", "Chile": "South America",
    "South Africa": "Africa", "Egypt": "Africa",
}

CONTINENT_ALIASES = {
    "asia": "Asia", "亚洲": "Asia",
    "europe": "Europe", "欧洲": "Europe",
    "north america": "North America", "北美": "North America",
    "oceania": "Oceania", "大洋洲": "Oceania",
    "south america": "South America", "南美": "South America",
    "africa": "Africa", "非洲": "Africa",
}

# English words that double as country aliases ("help us find ...")
QUERY_AMBIGUOUS_ALIASES = {"us", "america"}


def normalize_country(country_str: str) -> Optional[str]:
    """Canonical country name for an alias, or None if unknown."""
    key = country_str.strip().lower()
    return COUNTRY_ALIASES.get(key) or CHINA_REGIONS.get(key)


def place_country(place: str) -> Optional[str]:
    """Country of a free-text place ("City, State, Country")."""
    if not place:
        return None
    parts = [p.strip() for p in place.split(",") if p.strip()]
    # Usually the country is last; fall back to scanning every part
    for part in reversed(parts):
        country = normalize_country(part)
        if country:
            return country
    return None


def match_location(query: str) -> Optional[str]:
    """Country or continent named in a query (longest alias wins)."""
    for table in (CONTINENT_ALIASES, COUNTRY_ALIASES):
        hits = [
            alias for alias in table
            if alias not in QUERY_AMBIGUOUS_ALIASES and contains_term(query, alias)
        ]
        if hits:
            return table[max(hits, key=len)]
    return None


def place_in_location(place: str, location: str) -> bool:
    """Whether a venue place lies in the given country or continent."""
    if not place:
        return False
    country = place_country(place)
    if location in CONTINENT_ALIASES.values():
        return country is not None and COUNTRY_CONTINENTS.get(country) == location
    if country == location:
        return True
    # Plain substring as a last resort ("Beijing, China" style places with odd suffixes)
    aliases = [a for a, c in COUNTRY_ALIASES.items() if c == location]
    return any(contains_term(place, alias) for alias in aliases)
