"""
Playback window heuristics.

Chooses where in a track the quiz clip starts, from the raw title alone.
The guess is not guaranteed to land on the chorus; it only has to be a
valid window (start >= 0, end > start) and stable for the same title.

Classification (first match wins):
    1. Lyrics video       -> start 5
    2. Ballad / slow song -> start 45  (30 with SIMPLE_PROFILE)
    3. Regional pop       -> start 40  (Hangul script, "kpop", "korean")
    4. Anything else      -> start 30

Usage:
    from tunequiz.catalog.timing import select_window

    window = select_window("IU - Love wins all (Lyrics)", 30)
    # PlaybackWindow(start=5, end=35)
"""

import random
import re
from dataclasses import dataclass

from tunequiz.catalog.models import PlaybackWindow


LYRICS_PATTERN = re.compile(r"lyrics?|가사|歌詞|เนื้อเพลง", re.IGNORECASE)
BALLAD_PATTERN = re.compile(r"ballad|slow|acoustic|piano|love|heart|sad|감성|느린", re.IGNORECASE)
REGIONAL_PATTERN = re.compile(r"[ㄱ-㆏가-힣]|k-?pop|korean", re.IGNORECASE)

# Randomized start ranges (inclusive) used by jittered_window
JITTER_RANGES = {
    "lyrics": (5, 40),
    "ballad": (30, 90),
    "regional": (25, 80),
    "default": (20, 70),
}
JITTER_VARIATION = 9


@dataclass(frozen=True)
class WindowProfile:
    """
    Start offsets, in seconds, for each title class.

    Attributes:
        lyrics_start: Start for lyrics videos.
        ballad_start: Start for ballads and slow songs.
        regional_start: Start for regional pop.
        default_start: Start for everything else.
    """
    lyrics_start: int = 5
    ballad_start: int = 45
    regional_start: int = 40
    default_start: int = 30


DEFAULT_PROFILE = WindowProfile()

# Earlier ballad start
SIMPLE_PROFILE = WindowProfile(ballad_start=30)


def is_lyrics_video(title: str) -> bool:
    """Return True if the raw title marks a lyrics video."""
    return bool(LYRICS_PATTERN.search(title))


def classify_title(title: str) -> str:
    """
    Return the title class: 'lyrics', 'ballad', 'regional' or 'default'.
    """
    if LYRICS_PATTERN.search(title):
        return "lyrics"
    if BALLAD_PATTERN.search(title):
        return "ballad"
    if REGIONAL_PATTERN.search(title):
        return "regional"
    return "default"


def select_window(
    title: str,
    clip_duration_seconds: int,
    profile: WindowProfile = DEFAULT_PROFILE
) -> PlaybackWindow:
    """
    Pick a deterministic playback window for a title.

    Args:
        title: Raw or cleaned track title. The raw title carries more
               signal ("Lyrics", "Acoustic ver.") than the cleaned one.
        clip_duration_seconds: Clip length. Must be positive.
        profile: Start offsets per title class.

    Returns:
        PlaybackWindow with end - start == clip_duration_seconds.

    Raises:
        ValueError: If clip_duration_seconds is not positive.
    """
    if clip_duration_seconds <= 0:
        raise ValueError(f"Clip duration must be positive, got {clip_duration_seconds}")

    start = {
        "lyrics": profile.lyrics_start,
        "ballad": profile.ballad_start,
        "regional": profile.regional_start,
        "default": profile.default_start,
    }[classify_title(title)]

    return PlaybackWindow(start=start, end=start + clip_duration_seconds)


def jittered_window(
    title: str,
    duration: int,
    rng: random.Random,
    floor: int = 5
) -> PlaybackWindow:
    """
    Pick a randomized playback window for a title.

    The start is drawn from the title class's range, then shifted by
    0-9 seconds. It never drops below floor.

    Raises:
        ValueError: If duration is not positive or floor is negative.
    """
    if duration <= 0:
        raise ValueError(f"Clip duration must be positive, got {duration}")
    if floor < 0:
        raise ValueError(f"Window floor must be >= 0, got {floor}")

    low, high = JITTER_RANGES[classify_title(title)]
    start = rng.randint(low, high) + rng.randint(0, JITTER_VARIATION)
    start = max(floor, start)

    return PlaybackWindow(start=start, end=start + duration)
