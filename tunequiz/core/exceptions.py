"""
Exception classes for tunequiz.

This module defines all custom exceptions used by the quiz pipeline.
Each exception carries a human-readable message and an optional
dictionary of details for logging.

Exception Hierarchy:
    TuneQuizError (base)
        ConfigurationError - Config file issues, unmapped/placeholder categories
        ProviderError - Catalog provider (YouTube) failures
        NoContentError - Provider and fallback both produced nothing
        InsufficientContentError - Track pool smaller than requested count
        FetchCancelledError - Caller cancelled an in-flight fetch
"""


class TuneQuizError(Exception):
    """
    Base exception for all tunequiz errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch every pipeline error with a single
    except clause if desired.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context
                 (e.g., category key, collection id, HTTP status).

    Example:
        try:
            result = fetcher.fetch_category("kpop")
        except TuneQuizError as e:
            logger.error(f"Fetch failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional context.
                     Common keys include:
                     - 'category': Category key involved in the error
                     - 'collection_id': Provider playlist id
                     - 'original_error': The underlying exception text
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigurationError(TuneQuizError):
    """
    Raised when the pipeline is set up incorrectly.

    This is never retried: it points at a setup problem that must be
    fixed by whoever owns the configuration.

    Common causes:
        - Category key not present in the categories mapping
        - Category mapped to the placeholder playlist id
        - config.yaml missing (when given explicitly) or invalid YAML
        - Invalid tunable values (e.g., negative cache TTL)

    Example:
        raise ConfigurationError(
            "Category 'rock' is not configured",
            details={'category': 'rock'}
        )
    """
    pass


class ProviderError(TuneQuizError):
    """
    Raised when the catalog provider cannot deliver a usable listing.

    CatalogFetcher absorbs this error and switches to fallback data.
    It only reaches the caller (wrapped in NoContentError) when no
    fallback data exists.

    Common causes:
        - Network connectivity issues or timeout
        - Non-2xx response (quota exceeded, playlist private)
        - Malformed JSON payload
        - API key not configured

    Attributes:
        status_code: HTTP status code, if a response was received.
        is_timeout: True if the request timed out.
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        status_code: int | None = None,
        is_timeout: bool = False
    ) -> None:
        """
        Initialize provider error with transport information.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
            status_code: HTTP status code returned by the provider, or None.
            is_timeout: Set to True when the request exceeded its timeout.
        """
        super().__init__(message, details)
        self.status_code = status_code
        self.is_timeout = is_timeout


class NoContentError(TuneQuizError):
    """
    Raised when neither the provider nor the fallback bundle yields tracks.

    Surfaced to the player as "no quiz available for this category".
    """
    pass


class InsufficientContentError(TuneQuizError):
    """
    Raised when the track pool is smaller than the requested question count.

    The caller may retry with a smaller count.

    Attributes:
        available: Number of tracks in the pool.
        requested: Number of questions requested.
    """

    def __init__(self, message: str, available: int, requested: int) -> None:
        super().__init__(
            message,
            details={"available": available, "requested": requested}
        )
        self.available = available
        self.requested = requested


class FetchCancelledError(TuneQuizError):
    """
    Raised when the caller cancelled a fetch while it was in flight.

    No cache write happens for a cancelled fetch.
    """
    pass
