"""
Static fallback tracks for when the provider cannot deliver.

The bundle is a YAML file of pre-normalized tracks keyed by category.
A 'default' list covers every category without its own entry. The
package ships a small bundle in tunequiz/data/fallback_tracks.yaml; a
different file can be set with catalog.fallback_file.

Usage:
    bundle = load_fallback_bundle()
    tracks = bundle.tracks_for("kpop")
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from tunequiz.catalog.models import Track
from tunequiz.core.exceptions import ConfigurationError
from tunequiz.core.logger import get_logger

logger = get_logger(__name__)


BUNDLED_FALLBACK_FILE = Path(__file__).resolve().parent.parent / "data" / "fallback_tracks.yaml"

DEFAULT_KEY = "default"


@dataclass(frozen=True)
class FallbackBundle:
    """
    Fallback tracks per category.

    Attributes:
        tracks: Category key -> tracks. The 'default' key applies to any
                category without its own list.
    """
    tracks: Mapping[str, tuple[Track, ...]] = field(default_factory=dict)

    def tracks_for(self, category: str) -> tuple[Track, ...]:
        """
        Return the fallback tracks for a category.

        Default entries are re-tagged with the requested category so the
        tracks look like any other track of that category downstream.
        """
        own = self.tracks.get(category)
        if own:
            return own

        return tuple(
            Track(
                id=t.id,
                title=t.title,
                artist=t.artist,
                category_key=category,
                playback_window=t.playback_window,
                thumbnail_url=t.thumbnail_url,
                original_title=t.original_title,
                is_lyrics_video=t.is_lyrics_video,
                position=t.position,
            )
            for t in self.tracks.get(DEFAULT_KEY, ())
        )

    def __len__(self) -> int:
        return sum(len(v) for v in self.tracks.values())


def load_fallback_bundle(path: Path | None = None) -> FallbackBundle:
    """
    Load a fallback bundle from YAML.

    Args:
        path: Bundle file, or None for the file shipped with the package.

    Returns:
        FallbackBundle with every valid entry. Invalid entries are logged
        and skipped.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid YAML,
                            or its root is not a mapping of lists.
    """
    path = path or BUNDLED_FALLBACK_FILE

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in fallback file {path}: {e}",
            details={"file_path": str(path), "original_error": str(e)}
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read fallback file {path}: {e}",
            details={"file_path": str(path)}
        ) from e

    if raw is None:
        return FallbackBundle()
    if not isinstance(raw, dict):
        raise ConfigurationError(
            "Fallback file root must be a mapping of category -> tracks",
            details={"file_path": str(path)}
        )

    tracks: dict[str, tuple[Track, ...]] = {}
    for category, entries in raw.items():
        if not isinstance(entries, list):
            raise ConfigurationError(
                f"Fallback entry '{category}' must be a list",
                details={"file_path": str(path), "category": category}
            )
        key = str(category).strip().lower()
        tracks[key] = tuple(_parse_entries(entries, key))

    bundle = FallbackBundle(tracks=tracks)
    logger.debug(f"Loaded {len(bundle)} fallback tracks from {path}")
    return bundle


def _parse_entries(entries: list[Any], category: str) -> list[Track]:
    parsed = []
    for entry in entries:
        if not isinstance(entry, dict):
            logger.warning(f"Skipping fallback entry for {category}: not a mapping")
            continue
        try:
            parsed.append(Track.from_dict(entry, category))
        except (ValueError, TypeError) as e:
            logger.warning(f"Skipping fallback entry for {category}: {e}")
    return parsed
