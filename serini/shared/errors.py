"""Error taxonomy for the Serini engine.

Propagation policy:
- ScoringError subclasses are caller misuse and always propagate.
- ExternalServiceError subclasses and SchemaValidationError are absorbed by
  the orchestrator, logged, and converted into a degraded-but-safe result.
- The crisis classifier never raises.
"""
from typing import Iterable, Optional


class SeriniError(Exception):
    """Base exception for engine errors."""
    pass


class ScoringError(SeriniError):
    """Base exception for scoring engine misuse."""
    pass


class UnknownInstrumentError(ScoringError):
    """Requested instrument type is not in the catalog."""

    def __init__(self, instrument_type: str):
        self.instrument_type = instrument_type
        super().__init__(f"Unknown instrument type: {instrument_type!r}")


class IncompleteAnswersError(ScoringError):
    """One or more questions of the instrument were not answered."""

    def __init__(self, instrument_type: str, missing_ids: Iterable[str]):
        self.instrument_type = instrument_type
        self.missing_ids = sorted(missing_ids)
        super().__init__(
            f"Incomplete answers for {instrument_type}: missing {', '.join(self.missing_ids)}"
        )


class InvalidAnswerError(ScoringError):
    """An answer references an unknown question or is outside the scale."""
    pass


class ScoringRangeError(ScoringError):
    """Score did not match any severity band of the instrument."""

    def __init__(self, instrument_type: str, score: int):
        self.instrument_type = instrument_type
        self.score = score
        super().__init__(f"No scoring range for {instrument_type} matches score {score}")


class ExternalServiceError(SeriniError):
    """Base exception for external dependency failures."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class EmbeddingServiceError(ExternalServiceError):
    """Embedding endpoint failed, timed out or returned an unusable payload."""
    pass


class RetrievalServiceError(ExternalServiceError):
    """Vector store unavailable or query failed."""
    pass


class GenerationError(ExternalServiceError):
    """Generative model call failed, timed out or returned non-2xx."""
    pass


class SchemaValidationError(SeriniError):
    """Model output was not valid JSON or did not match StructuredInsight."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)
