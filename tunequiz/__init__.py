"""
tunequiz: Quiz content for a music-guessing game.

Players hear a short clip of a song and pick its title out of four
choices. This package produces those questions from YouTube playlists,
one playlist per category (K-Pop, J-Pop, ...).

Architecture:
    catalog/: Fetch a category's playlist, clean titles and artists,
              choose playback windows, cache the result, and fall back
              to bundled tracks when YouTube is unavailable
    quiz/:    Sample tracks fairly, pick distractors, and serve quizzes
              with structured errors
    core/:    Configuration, logging, exceptions
    cli.py:   Command-line interface

Usage:
    Command Line:
        tunequiz quiz --category kpop --difficulty medium
        tunequiz categories
        tunequiz validate PLxQODuHe4E5MPk6anBwqCgyfIa00KhK0c

    Python API:
        from tunequiz import QuizService, load_config

        service = QuizService.from_config(load_config())
        response = service.build_quiz("kpop", difficulty="hard")

Dependencies:
    - requests: YouTube Data API calls
    - click / rich-click: CLI
    - pyyaml: Configuration and fallback bundle parsing
    - python-dotenv: API key from .env
    - tqdm: Progress bar and log output
"""

__version__ = "0.1.0"
__author__ = "tunequiz"
__license__ = "MIT"

# Convenience imports for common usage
from tunequiz.core import (
    Config,
    ConfigurationError,
    InsufficientContentError,
    NoContentError,
    ProviderError,
    TuneQuizError,
    get_logger,
    load_config,
    setup_logging,
)
from tunequiz.catalog import CatalogFetcher, FetchResult, Provenance, Track
from tunequiz.quiz import QuestionGenerator, QuizQuestion, QuizService

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    # Exceptions
    "TuneQuizError",
    "ConfigurationError",
    "ProviderError",
    "NoContentError",
    "InsufficientContentError",
    # Catalog
    "CatalogFetcher",
    "FetchResult",
    "Provenance",
    "Track",
    # Quiz
    "QuestionGenerator",
    "QuizQuestion",
    "QuizService",
]
