"""
Title and artist normalization for raw catalog entries.

Provider titles look like "BTS (방탄소년단) 'Dynamite' Official MV" or
"YOASOBI「夜に駆ける」Official Music Video". This module turns them into a
canonical song title ("Dynamite") and a best-effort artist name ("BTS").

Both functions are pure: no I/O, no randomness, and they never raise.

Title Cleaning:
    1. Strip bracketed segments: [..], (..), 「..」, 『..』, 【..】, @mentions
    2. Strip "| ..." tails, "- Official ..." tails, MV and M/V markers,
       trailing Official/Audio/Lyrics markers, CJK and Thai lyric markers
    3. Strip quotes wrapped around the whole string
    4. Try TITLE_RULES in order; the first rule yielding a usable title wins
    5. Otherwise keep the cleaned string

    The pass is repeated until the title stops changing, so cleaning an
    already-clean title is a no-op.

Usage:
    from tunequiz.catalog.normalizer import clean_title, extract_artist

    clean_title("BTS - Dynamite (Official MV)")                      # "Dynamite"
    extract_artist("BTS - Dynamite (Official MV)", "HYBE LABELS")   # "BTS"
"""

import re
from typing import Callable, NamedTuple

from tunequiz.catalog.models import UNKNOWN_ARTIST


class TitleRule(NamedTuple):
    """
    One extraction heuristic: a predicate pattern and a transform.

    Attributes:
        name: Short identifier, used in tests and debug output.
        pattern: Compiled regex; the rule applies when it matches.
        extract: Builds the candidate string from the match.
    """
    name: str
    pattern: re.Pattern
    extract: Callable[[re.Match], str]


QUOTE_CHARS = "\"'`‘’“”"

# Words that can never be a song title on their own
GENERIC_MARKERS = frozenset({
    "official", "video", "mv", "m/v", "music", "lyrics", "lyric", "audio",
    "music video", "official video", "official audio", "lyric video",
})

# Words that can never be an artist name on their own
ARTIST_STOPWORDS = frozenset({
    "official", "video", "audio", "music", "lyrics", "lyric", "mv", "m/v",
    "live", "performance", "cover", "the", "and", "or", "but",
})

# Stop words skipped when guessing an artist from capitalized words
CAPITALIZED_STOPWORDS = ARTIST_STOPWORDS | frozenset({
    "in", "on", "at", "to", "for", "of", "with", "by", "ft", "feat", "a", "an",
})

MAX_ARTIST_LENGTH = 50

KNOWN_ARTIST_PREFIXES = (
    "BTS", "BLACKPINK", "IU", "TWICE", "Red Velvet", "aespa", "NewJeans",
    "IVE", "ITZY", "SEVENTEEN", "Stray Kids", "ENHYPEN", "TXT", "NMIXX",
    "LE SSERAFIM", "GIDLE", "I-DLE", "ATEEZ", "NCT", "EXO", "SNSD",
    "Girls Generation", "Girls' Generation", "SHINee", "BIGBANG",
    "방탄소년단", "블랙핑크", "아이유", "트와이스", "레드벨벳", "에스파", "뉴진스",
    "아이브", "있지", "세븐틴", "스트레이키즈", "엔하이픈", "투모로우바이투게더",
    "엔믹스", "르세라핌", "아이들", "에이티즈", "엔시티", "엑소", "소녀시대",
    "샤이니", "빅뱅",
)

PROMO_PREFIXES = (
    "SM STATION", "STATION", "Special Clip", "Special Video",
    "Coke Studio", "Pepsi x Starship", "Pepsi",
)


def _alternation(names: tuple[str, ...]) -> str:
    # Longest first so "SM STATION" wins over "STATION"
    return "|".join(re.escape(n) for n in sorted(names, key=len, reverse=True))


# Step 1: bracketed segments
_BRACKET_PATTERNS = (
    re.compile(r"\s*\[[^\]]*\]\s*"),
    re.compile(r"\s*\([^)]*\)\s*"),
    re.compile(r"\s*「[^」]*」\s*"),
    re.compile(r"\s*『[^』]*』\s*"),
    re.compile(r"\s*【[^】]*】\s*"),
    re.compile(r"\s*@\w+"),
)

# Step 2: suffix markers
_SUFFIX_PATTERNS = (
    re.compile(r"\s*\|.*$"),
    re.compile(r"\s*[-–—]\s*(?:official|music\s*video|lyrics?|audio)\b.*$", re.IGNORECASE),
    re.compile(r"(?<!\w)(?:M/V|MV)(?!\w)", re.IGNORECASE),
    re.compile(
        r"\s*\b(?:official(?:\s+(?:music\s+)?(?:video|audio))?|music\s+video"
        r"|lyrics?(?:\s+video)?|audio|visualizer)\s*$",
        re.IGNORECASE,
    ),
    re.compile(r"\s*(?:가사|歌詞|เนื้อเพลง)\s*$"),
)

_WHITESPACE = re.compile(r"\s+")

_TRAILING_BY_ARTIST = re.compile(r"\s+by\s+.+$", re.IGNORECASE)
_TRAILING_LYRICS = re.compile(r"\s*\blyrics?$", re.IGNORECASE)

_LIGHT_CLEAN_PATTERNS = _BRACKET_PATTERNS[:5] + (_SUFFIX_PATTERNS[0],)

_ARTIST_NOISE = re.compile(
    r"\s*\b(?:official|vevo|records?|music|entertainment|lyrics?|audio|video|mv|m/v)\b\s*",
    re.IGNORECASE,
)

_CHANNEL_NOISE = (
    re.compile(r"\s*-\s*topic$", re.IGNORECASE),
    re.compile(r"vevo$", re.IGNORECASE),
    re.compile(
        r"\s*\b(?:official|vevo|records?|music|entertainment|labels?|channel|tv)\b\s*",
        re.IGNORECASE,
    ),
)


def _normalize_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _strip_quotes(text: str) -> str:
    """Remove quote pairs wrapping the whole string."""
    text = text.strip()
    while len(text) >= 2 and text[0] in QUOTE_CHARS and text[-1] in QUOTE_CHARS:
        text = text[1:-1].strip()
    return text


def _strip_edge_quotes(text: str) -> str:
    return text.strip().strip(QUOTE_CHARS).strip()


def _is_usable_title(candidate: str) -> bool:
    return len(candidate) >= 2 and candidate.lower() not in GENERIC_MARKERS


def _song_after_dash(match: re.Match) -> str:
    song = _strip_edge_quotes(match.group("song"))
    song = _TRAILING_BY_ARTIST.sub("", song)
    song = _TRAILING_LYRICS.sub("", song)
    return _strip_edge_quotes(song)


def _song_before_paren(match: re.Match) -> str:
    if len(match.group("artist").strip()) < 2:
        return ""
    return _strip_edge_quotes(match.group("song"))


TITLE_RULES: tuple[TitleRule, ...] = (
    TitleRule(
        name="artist-dash-song",
        pattern=re.compile(r"^(?P<artist>.+?)(?:\s+[-–—]\s*|\s*[-–—]\s+)(?P<song>.+)$"),
        extract=_song_after_dash,
    ),
    TitleRule(
        name="song-by-artist",
        pattern=re.compile(r"^(?P<song>.+?)\s+by\s+(?P<artist>.+)$", re.IGNORECASE),
        extract=lambda m: _strip_edge_quotes(m.group("song")),
    ),
    TitleRule(
        name="song-paren-artist",
        pattern=re.compile(r"^(?P<song>.+?)\s*[(（]\s*(?P<artist>[^()（）]+?)\s*[)）]$"),
        extract=_song_before_paren,
    ),
    TitleRule(
        name="known-prefix",
        pattern=re.compile(
            rf"^(?:{_alternation(KNOWN_ARTIST_PREFIXES + PROMO_PREFIXES)})"
            r"(?=[\s\-:_])[\s\-:_]*(?P<rest>.+)$",
        ),
        extract=lambda m: _strip_edge_quotes(m.group("rest")),
    ),
)

ARTIST_RULES: tuple[TitleRule, ...] = (
    TitleRule(
        name="artist-dash-song",
        pattern=re.compile(r"^(?P<artist>.+?)(?:\s+[-–—]\s*|\s*[-–—]\s+)(?P<song>.+)$"),
        extract=lambda m: m.group("artist") if len(m.group("song").strip()) >= 2 else "",
    ),
    TitleRule(
        name="song-by-artist",
        pattern=re.compile(r"^(?P<song>.+?)\s+by\s+(?P<artist>.+)$", re.IGNORECASE),
        extract=lambda m: m.group("artist"),
    ),
)


def _strip_markers(text: str) -> str:
    """Steps 1-3 of title cleaning."""
    for pattern in _BRACKET_PATTERNS:
        text = pattern.sub(" ", text)
    for pattern in _SUFFIX_PATTERNS:
        text = pattern.sub(" ", text)
    return _strip_quotes(_normalize_whitespace(text))


def _clean_once(text: str) -> str:
    cleaned = _strip_markers(text)
    if not cleaned:
        return ""

    for rule in TITLE_RULES:
        match = rule.pattern.search(cleaned)
        if match is None:
            continue
        candidate = _normalize_whitespace(rule.extract(match))
        if _is_usable_title(candidate):
            return candidate

    return cleaned


def clean_title(raw_title: str) -> str:
    """
    Reduce a raw provider title to the song name.

    Args:
        raw_title: Title as uploaded, e.g. "BTS - Dynamite (Official MV)".

    Returns:
        The canonical title ("Dynamite"). If cleaning would leave nothing
        (e.g. "[MV]"), the last non-empty form is returned instead, so
        only an empty or blank input yields "".

    Behavior:
        Runs the cleaning pass until the output stops changing. Every pass
        only removes characters, so this terminates, and the result is a
        fixed point: clean_title(clean_title(s)) == clean_title(s).
    """
    current = _normalize_whitespace(raw_title or "")
    while True:
        candidate = _clean_once(current)
        if not candidate or candidate == current:
            return current
        current = candidate


def _light_clean(raw_title: str) -> str:
    text = raw_title or ""
    for pattern in _LIGHT_CLEAN_PATTERNS:
        text = pattern.sub(" ", text)
    return _normalize_whitespace(text)


def _is_artist_like(candidate: str) -> bool:
    return (
        bool(candidate)
        and len(candidate) <= MAX_ARTIST_LENGTH
        and candidate.lower() not in ARTIST_STOPWORDS
    )


def _clean_artist(text: str) -> str:
    return _strip_edge_quotes(_normalize_whitespace(_ARTIST_NOISE.sub(" ", text)))


def _clean_channel(channel_name: str) -> str:
    text = channel_name or ""
    for pattern in _CHANNEL_NOISE:
        text = pattern.sub(" ", text)
    return _strip_edge_quotes(_normalize_whitespace(text))


def _leading_capitalized(title: str) -> str:
    """Join up to two leading capitalized words, skipping stop words before them."""
    picked: list[str] = []
    for token in re.split(r"[\s\-_]+", title):
        token = _strip_edge_quotes(token)
        if len(token) < 2 or token.lower() in CAPITALIZED_STOPWORDS:
            if picked:
                break
            continue
        if not token[0].isupper():
            break
        picked.append(token)
        if len(picked) == 2:
            break
    return " ".join(picked)


def extract_artist(raw_title: str, channel_name: str = "") -> str:
    """
    Best-effort artist name for a raw provider entry.

    Args:
        raw_title: Title as uploaded.
        channel_name: Uploader channel, e.g. "BLACKPINK" or "HYBE LABELS".

    Returns:
        Artist name, or "Unknown Artist" when nothing plausible is found.

    Order:
        1. "Artist - Song" / "Song by Artist" on the lightly cleaned title
        2. Channel name without noise words (Official, VEVO, - Topic, ...)
        3. One or two leading capitalized words of the title
        4. "Unknown Artist"
    """
    title = _light_clean(raw_title)

    for rule in ARTIST_RULES:
        match = rule.pattern.search(title)
        if match is None:
            continue
        candidate = _clean_artist(rule.extract(match))
        if _is_artist_like(candidate):
            return candidate

    channel = _clean_channel(channel_name)
    if _is_artist_like(channel):
        return channel

    return _leading_capitalized(title) or UNKNOWN_ARTIST
