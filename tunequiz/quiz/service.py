"""
Quiz consumer API and admin operations.

QuizService is the surface a web handler or the CLI talks to. It ties
the fetcher and the question generator together and turns every
pipeline error into a structured QuizError, so a caller never receives
an empty response that claims success.

Error Mapping:
    ConfigurationError        -> "configuration_error"   (try another category)
    NoContentError            -> "no_content"            (try another category)
    InsufficientContentError  -> "insufficient_content"  (ask for fewer questions)
    FetchCancelledError       -> "cancelled"
    ValueError                -> "invalid_request"

Usage:
    service = QuizService.from_config(load_config())
    response = service.build_quiz("kpop", difficulty="medium")
    if response.success:
        for q in response.questions:
            print(q.title, q.choices)
    else:
        print(response.error.message, response.error.retry_hint)
"""

import random
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from tqdm import tqdm

from tunequiz.catalog.cache import CacheStats, CacheStore
from tunequiz.catalog.fallback import load_fallback_bundle
from tunequiz.catalog.fetcher import CatalogFetcher
from tunequiz.catalog.models import FetchResult, Provenance
from tunequiz.catalog.provider import YouTubePlaylistProvider
from tunequiz.core.config import CATEGORY_INFO, PLACEHOLDER_COLLECTION_ID, Config
from tunequiz.core.exceptions import (
    ConfigurationError,
    FetchCancelledError,
    InsufficientContentError,
    NoContentError,
    TuneQuizError,
)
from tunequiz.core.logger import format_provenance_message, get_logger
from tunequiz.quiz.generator import QuestionGenerator
from tunequiz.quiz.models import QuizQuestion

logger = get_logger(__name__)


DIFFICULTY_QUESTION_COUNTS = {
    "casual": 5,
    "medium": 10,
    "hard": 15,
}
DEFAULT_DIFFICULTY = "casual"


@dataclass(frozen=True)
class QuizError:
    """
    User-facing description of a failed quiz request.

    Attributes:
        code: Stable machine-readable error code.
        message: Human-readable explanation.
        retry_hint: What the player can try instead, if anything.
    """
    code: str
    message: str
    retry_hint: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "retry_hint": self.retry_hint}


@dataclass(frozen=True)
class QuizResponse:
    """
    Result of build_quiz().

    On success, questions is non-empty and error is None. On failure,
    questions is empty and error is set. notice carries the reason
    fallback data was served, if it was.
    """
    category: str
    questions: tuple[QuizQuestion, ...] = ()
    provenance: Provenance | None = None
    success: bool = False
    error: QuizError | None = None
    notice: str | None = None

    @property
    def total(self) -> int:
        return len(self.questions)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "success": self.success,
            "category": self.category,
            "provenance": self.provenance.value if self.provenance else None,
            "total": self.total,
            "questions": [q.to_dict() for q in self.questions],
            "error": self.error.to_dict() if self.error else None,
            "notice": self.notice,
        }


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validate_collection_id()."""
    valid: bool
    error: str | None = None


@dataclass(frozen=True)
class CategorySummary:
    """Display metadata for one configured category."""
    key: str
    name: str
    emoji: str
    description: str
    collection_id: str
    configured: bool


@dataclass(frozen=True)
class CategoryStats:
    """
    Cache view of one category.

    Attributes:
        category: Category key.
        cached: True if a live cache entry exists.
        track_count: Tracks in the cache entry (0 when not cached).
        artist_count: Distinct artists in the cache entry.
        lyrics_videos: Tracks whose raw title marks a lyrics video.
        expires_at: When the cache entry expires (UTC), if cached.
        collection_id: Playlist id of the category.
    """
    category: str
    cached: bool
    track_count: int = 0
    artist_count: int = 0
    lyrics_videos: int = 0
    expires_at: datetime | None = None
    collection_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "cached": self.cached,
            "track_count": self.track_count,
            "artist_count": self.artist_count,
            "lyrics_videos": self.lyrics_videos,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "collection_id": self.collection_id,
        }


def resolve_question_count(question_count: int | None, difficulty: str | None) -> int:
    """
    Decide how many questions to generate.

    An explicit question_count wins. Otherwise the difficulty maps to a
    count; unknown or missing difficulties count as casual.
    """
    if question_count is not None:
        return question_count
    key = (difficulty or DEFAULT_DIFFICULTY).strip().lower()
    return DIFFICULTY_QUESTION_COUNTS.get(key, DIFFICULTY_QUESTION_COUNTS[DEFAULT_DIFFICULTY])


class QuizService:
    """
    Entry point for quiz requests and cache administration.

    Attributes:
        fetcher: Catalog fetcher (owns the cache and the provider).
        generator: Question generator.
    """

    def __init__(self, fetcher: CatalogFetcher, generator: QuestionGenerator | None = None) -> None:
        self.fetcher = fetcher
        self.generator = generator or QuestionGenerator()

    @classmethod
    def from_config(cls, config: Config, rng: random.Random | None = None) -> "QuizService":
        """
        Wire up provider, cache, fallback bundle, fetcher and generator.

        Raises:
            ConfigurationError: If the fallback bundle cannot be loaded.
        """
        provider = YouTubePlaylistProvider.from_config(config.provider)
        fallback = load_fallback_bundle(config.catalog.fallback_file)
        fetcher = CatalogFetcher(provider, CacheStore(), config, fallback=fallback, rng=rng)
        return cls(fetcher, QuestionGenerator(rng=rng))

    @property
    def cache(self) -> CacheStore:
        return self.fetcher.cache

    def build_quiz(
        self,
        category: str,
        question_count: int | None = None,
        difficulty: str | None = None,
        refresh: bool = False,
        cancel_event: threading.Event | None = None
    ) -> QuizResponse:
        """
        Fetch a category and generate a quiz from it.

        Args:
            category: Category key.
            question_count: Number of questions; overrides difficulty.
            difficulty: casual (5), medium (10) or hard (15).
            refresh: Bypass the cache and fetch from the provider.
            cancel_event: Set by the caller to abandon the request.

        Returns:
            QuizResponse. Never raises for pipeline errors.
        """
        category = category.strip().lower()

        count = resolve_question_count(question_count, difficulty)
        if count < 1:
            return self._failure(
                category, "invalid_request", f"Question count must be >= 1, got {count}"
            )

        try:
            result = self.fetcher.fetch_category(
                category,
                use_cache=not refresh,
                cancel_event=cancel_event
            )
            questions = self.generator.generate(result.tracks, count)
        except ConfigurationError as e:
            logger.error(f"Quiz for {category}: {e.message}")
            return self._failure(category, "configuration_error", e.message, "Try another category")
        except NoContentError as e:
            logger.error(f"Quiz for {category}: {e.message}")
            return self._failure(category, "no_content", e.message, "Try another category")
        except InsufficientContentError as e:
            logger.warning(f"Quiz for {category}: {e.message}")
            hint = (
                f"Try {e.available} questions or fewer" if e.available > 0
                else "Try another category"
            )
            return self._failure(category, "insufficient_content", e.message, hint)
        except FetchCancelledError as e:
            logger.info(f"Quiz for {category}: {e.message}")
            return self._failure(category, "cancelled", e.message)
        except ValueError as e:
            return self._failure(category, "invalid_request", str(e))

        logger.info(format_provenance_message(category, result.provenance.value, len(result.tracks)))

        return QuizResponse(
            category=category,
            questions=tuple(questions),
            provenance=result.provenance,
            success=True,
            notice=result.error,
        )

    @staticmethod
    def _failure(category: str, code: str, message: str, retry_hint: str | None = None) -> QuizResponse:
        return QuizResponse(
            category=category,
            success=False,
            error=QuizError(code=code, message=message, retry_hint=retry_hint),
        )

    # =========================================================================
    # ADMIN / DIAGNOSTICS
    # =========================================================================

    def clear_cache(self) -> None:
        """Drop every cached category."""
        self.cache.clear()

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def validate_collection_id(self, collection_id: str) -> ValidationResult:
        """
        Check that a playlist id exists and is readable.

        The placeholder id and empty ids are rejected without a network call.
        """
        collection_id = collection_id.strip()
        if not collection_id:
            return ValidationResult(valid=False, error="Playlist id is empty")
        if PLACEHOLDER_COLLECTION_ID in collection_id:
            return ValidationResult(valid=False, error="Playlist id is the placeholder value")

        valid, error = self.fetcher.provider.playlist_exists(collection_id)
        return ValidationResult(valid=valid, error=error)

    def list_categories(self) -> list[CategorySummary]:
        """Configured categories with their display metadata, in config order."""
        summaries = []
        for key, collection_id in self.fetcher.config.categories.items():
            info = CATEGORY_INFO.get(key, {})
            summaries.append(CategorySummary(
                key=key,
                name=info.get("name", key),
                emoji=info.get("emoji", "🎵"),
                description=info.get("description", ""),
                collection_id=collection_id,
                configured=PLACEHOLDER_COLLECTION_ID not in collection_id,
            ))
        return summaries

    def category_stats(self, category: str) -> CategoryStats:
        """
        Describe what the cache holds for a category.

        Raises:
            ConfigurationError: If the category is not configured.
        """
        category = category.strip().lower()
        collection_id = self.fetcher.config.categories.get(category)
        if collection_id is None:
            raise ConfigurationError(
                f"Category '{category}' not found",
                details={"category": category}
            )

        entry = self.cache.get(category)
        if entry is None:
            return CategoryStats(category=category, cached=False, collection_id=collection_id)

        return CategoryStats(
            category=category,
            cached=True,
            track_count=len(entry.data),
            artist_count=len({t.artist.lower() for t in entry.data}),
            lyrics_videos=sum(1 for t in entry.data if t.is_lyrics_video),
            expires_at=datetime.fromtimestamp(entry.expires_at, timezone.utc),
            collection_id=entry.collection_id or collection_id,
        )

    def warm_cache(self, show_progress: bool = True) -> dict[str, FetchResult | TuneQuizError]:
        """
        Clear the cache and refetch every configured category.

        Failures do not stop the run; each category maps to its
        FetchResult or to the error it raised.
        """
        self.clear_cache()
        categories = list(self.fetcher.config.categories)
        results: dict[str, FetchResult | TuneQuizError] = {}

        with tqdm(
            total=len(categories),
            desc="Warming cache",
            bar_format="{desc} {n}/{total} {bar} {percentage:3.0f}%",
            ncols=100,
            colour="cyan",
            disable=not show_progress
        ) as progress:
            for key in categories:
                progress.set_postfix_str(key)
                try:
                    results[key] = self.fetcher.refresh_category(key)
                except TuneQuizError as e:
                    logger.error(f"Could not warm {key}: {e.message}")
                    results[key] = e
                progress.update(1)

        return results
