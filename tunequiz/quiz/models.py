"""
Data models for generated quiz content.
"""

from dataclasses import dataclass
from typing import Any

from tunequiz.catalog.models import PlaybackWindow


CHOICES_PER_QUESTION = 4


@dataclass(frozen=True)
class QuizQuestion:
    """
    One multiple-choice question: play a clip, pick the title.

    Attributes:
        track_id: Id of the track being played.
        title: Correct answer.
        artist: Artist of the track, shown after answering.
        playback_window: Clip to play, copied from the track.
        choices: Exactly four distinct strings, one of them title.
        correct_answer_index: Index of title within choices.
        thumbnail_url: Preview image, if the track has one.

    Raises:
        ValueError: On construction with a malformed choice list.
    """
    track_id: str
    title: str
    artist: str
    playback_window: PlaybackWindow
    choices: tuple[str, ...]
    correct_answer_index: int
    thumbnail_url: str | None = None

    def __post_init__(self) -> None:
        if len(self.choices) != CHOICES_PER_QUESTION:
            raise ValueError(
                f"Question for {self.track_id} needs {CHOICES_PER_QUESTION} choices, "
                f"got {len(self.choices)}"
            )
        if not 0 <= self.correct_answer_index < len(self.choices):
            raise ValueError(f"Correct answer index out of range: {self.correct_answer_index}")
        if self.choices[self.correct_answer_index] != self.title:
            raise ValueError(f"Correct answer index does not point at '{self.title}'")

    @property
    def correct_answer(self) -> str:
        return self.choices[self.correct_answer_index]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "track_id": self.track_id,
            "title": self.title,
            "artist": self.artist,
            "playback_window": self.playback_window.to_dict(),
            "choices": list(self.choices),
            "correct_answer_index": self.correct_answer_index,
            "thumbnail_url": self.thumbnail_url,
        }
