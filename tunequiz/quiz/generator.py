"""
Quiz question generation.

Selection:
    The pool is shuffled once, then sampled at a fixed stride from a
    random offset: step = max(1, P // C), indices (offset + k*step) % P.
    Every track has the same chance of being picked, and picks spread
    across the whole shuffled pool instead of bunching at its start.

Distractors (3 per question):
    1. One title per other artist, artists in random order
    2. Any other title from the shuffled title pool
    3. "Option 1", "Option 2", ... when the pool is too small

Usage:
    generator = QuestionGenerator(rng=random.Random(42))
    questions = generator.generate(result.tracks, 10)
"""

import random
from collections import defaultdict
from typing import Sequence

from tunequiz.catalog.models import Track
from tunequiz.core.exceptions import InsufficientContentError
from tunequiz.core.logger import get_logger
from tunequiz.quiz.models import CHOICES_PER_QUESTION, QuizQuestion

logger = get_logger(__name__)


DISTRACTOR_COUNT = CHOICES_PER_QUESTION - 1


def stride_indices(pool_size: int, count: int, offset: int) -> list[int]:
    """Indices picked from a pool of pool_size for a given offset."""
    step = max(1, pool_size // count)
    return [(offset + k * step) % pool_size for k in range(count)]


class QuestionGenerator:
    """
    Builds multiple-choice questions from a track pool.

    Each instance owns its random source; pass a seeded random.Random
    to make the output reproducible.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def generate(self, tracks: Sequence[Track], count: int) -> list[QuizQuestion]:
        """
        Generate count questions from tracks.

        Args:
            tracks: Pool of tracks. Not modified.
            count: Number of questions.

        Returns:
            count questions, each with 4 choices.

        Raises:
            ValueError: If count is less than 1.
            InsufficientContentError: If the pool has fewer than count tracks.
        """
        if count < 1:
            raise ValueError(f"Question count must be >= 1, got {count}")
        if len(tracks) < count:
            raise InsufficientContentError(
                f"Only {len(tracks)} tracks available, {count} questions requested",
                available=len(tracks),
                requested=count
            )

        pool = list(tracks)
        self._rng.shuffle(pool)

        step = max(1, len(pool) // count)
        offset = self._rng.randrange(step)
        selected = [pool[i] for i in stride_indices(len(pool), count, offset)]

        titles_by_artist: dict[str, list[str]] = defaultdict(list)
        all_titles: list[str] = []
        for track in pool:
            artist_titles = titles_by_artist[track.artist.lower()]
            if track.title not in artist_titles:
                artist_titles.append(track.title)
            if track.title not in all_titles:
                all_titles.append(track.title)

        questions = [self._build_question(t, titles_by_artist, all_titles) for t in selected]
        logger.debug(f"Generated {len(questions)} questions from a pool of {len(pool)}")
        return questions

    def _build_question(
        self,
        track: Track,
        titles_by_artist: dict[str, list[str]],
        all_titles: list[str]
    ) -> QuizQuestion:
        distractors = self._pick_distractors(track, titles_by_artist, all_titles)

        choices = [track.title] + distractors
        self._rng.shuffle(choices)

        if track.title in choices:
            correct_index = choices.index(track.title)
        else:
            correct_index = 0
            choices[0] = track.title

        return QuizQuestion(
            track_id=track.id,
            title=track.title,
            artist=track.artist,
            playback_window=track.playback_window,
            choices=tuple(choices),
            correct_answer_index=correct_index,
            thumbnail_url=track.thumbnail_url,
        )

    def _pick_distractors(
        self,
        track: Track,
        titles_by_artist: dict[str, list[str]],
        all_titles: list[str]
    ) -> list[str]:
        chosen: list[str] = []
        own_artist = track.artist.lower()

        # Other artists first, one title each
        artists = [a for a in titles_by_artist if a != own_artist]
        self._rng.shuffle(artists)
        for artist in artists:
            if len(chosen) == DISTRACTOR_COUNT:
                break
            candidates = [
                t for t in titles_by_artist[artist]
                if t != track.title and t not in chosen
            ]
            if candidates:
                chosen.append(self._rng.choice(candidates))

        if len(chosen) < DISTRACTOR_COUNT:
            remaining = [t for t in all_titles if t != track.title and t not in chosen]
            self._rng.shuffle(remaining)
            chosen.extend(remaining[:DISTRACTOR_COUNT - len(chosen)])

        n = 1
        while len(chosen) < DISTRACTOR_COUNT:
            placeholder = f"Option {n}"
            n += 1
            if placeholder != track.title and placeholder not in chosen:
                chosen.append(placeholder)

        return chosen
