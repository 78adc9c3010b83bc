# src/contributor_health/engine/geo.py

"""Best-effort country and timezone resolution from free-text profile locations."""

from typing import List, NamedTuple, Optional, Tuple

# Ordered (pattern, country) pairs: first match wins, so longer or more
# specific synonyms must come before the short ones they contain
# ("uk" is inside "ukraine", "us" inside "austria" and "brussels").
COUNTRY_PATTERNS: List[Tuple[str, str]] = [
    ("united states", "United States"),
    ("usa", "United States"),
    ("america", "United States"),
    ("san francisco", "United States"),
    ("new york", "United States"),
    ("seattle", "United States"),
    ("united kingdom", "United Kingdom"),
    ("england", "United Kingdom"),
    ("london", "United Kingdom"),
    ("ukraine", "Ukraine"),
    ("kyiv", "Ukraine"),
    ("austria", "Austria"),
    ("vienna", "Austria"),
    ("belgium", "Belgium"),
    ("brussels", "Belgium"),
    ("belarus", "Belarus"),
    ("minsk", "Belarus"),
    ("uk", "United Kingdom"),
    ("canada", "Canada"),
    ("toronto", "Canada"),
    ("vancouver", "Canada"),
    ("germany", "Germany"),
    ("deutschland", "Germany"),
    ("berlin", "Germany"),
    ("france", "France"),
    ("paris", "France"),
    ("netherlands", "Netherlands"),
    ("amsterdam", "Netherlands"),
    ("spain", "Spain"),
    ("madrid", "Spain"),
    ("japan", "Japan"),
    ("tokyo", "Japan"),
    ("china", "China"),
    ("beijing", "China"),
    ("shanghai", "China"),
    ("india", "India"),
    ("bangalore", "India"),
    ("bengaluru", "India"),
    ("australia", "Australia"),
    ("sydney", "Australia"),
    ("brazil", "Brazil"),
    ("brasil", "Brazil"),
    ("russia", "Russia"),
    ("moscow", "Russia"),
    ("us", "United States"),
]

# Independent table mapping the same synonyms to a representative timezone.
TIMEZONE_PATTERNS: List[Tuple[str, str]] = [
    ("united states", "America/New_York"),
    ("usa", "America/New_York"),
    ("america", "America/New_York"),
    ("san francisco", "America/Los_Angeles"),
    ("new york", "America/New_York"),
    ("seattle", "America/Los_Angeles"),
    ("united kingdom", "Europe/London"),
    ("england", "Europe/London"),
    ("london", "Europe/London"),
    ("ukraine", "Europe/Kyiv"),
    ("kyiv", "Europe/Kyiv"),
    ("austria", "Europe/Vienna"),
    ("vienna", "Europe/Vienna"),
    ("belgium", "Europe/Brussels"),
    ("brussels", "Europe/Brussels"),
    ("belarus", "Europe/Minsk"),
    ("minsk", "Europe/Minsk"),
    ("uk", "Europe/London"),
    ("canada", "America/Toronto"),
    ("toronto", "America/Toronto"),
    ("vancouver", "America/Vancouver"),
    ("germany", "Europe/Berlin"),
    ("deutschland", "Europe/Berlin"),
    ("berlin", "Europe/Berlin"),
    ("france", "Europe/Paris"),
    ("paris", "Europe/Paris"),
    ("netherlands", "Europe/Amsterdam"),
    ("amsterdam", "Europe/Amsterdam"),
    ("spain", "Europe/Madrid"),
    ("madrid", "Europe/Madrid"),
    ("japan", "Asia/Tokyo"),
    ("tokyo", "Asia/Tokyo"),
    ("china", "Asia/Shanghai"),
    ("beijing", "Asia/Shanghai"),
    ("shanghai", "Asia/Shanghai"),
    ("india", "Asia/Kolkata"),
    ("bangalore", "Asia/Kolkata"),
    ("bengaluru", "Asia/Kolkata"),
    ("australia", "Australia/Sydney"),
    ("sydney", "Australia/Sydney"),
    ("brazil", "America/Sao_Paulo"),
    ("brasil", "America/Sao_Paulo"),
    ("russia", "Europe/Moscow"),
    ("moscow", "Europe/Moscow"),
    ("us", "America/New_York"),
]


class ResolvedLocation(NamedTuple):
    country: Optional[str]
    timezone: Optional[str]


def _first_match(text: str, table: List[Tuple[str, str]]) -> Optional[str]:
    for pattern, value in table:
        if pattern in text:
            return value
    return None


def resolve_location(location: Optional[str]) -> ResolvedLocation:
    """Maps a free-text location to a canonical country and timezone.

    Matching is a case-insensitive substring search in table order. When no
    country pattern matches, the raw text is returned as the country so it
    can still be displayed, and the timezone is None. Never raises.
    """
    if not location or not location.strip():
        return ResolvedLocation(None, None)

    text = location.lower()
    country = _first_match(text, COUNTRY_PATTERNS)
    timezone = _first_match(text, TIMEZONE_PATTERNS)

    if country is None:
        return ResolvedLocation(location, None)
    return ResolvedLocation(country, timezone)
