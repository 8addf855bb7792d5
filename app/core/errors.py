"""Error taxonomy for hypothesis history, ranking and draft generation.

Every error keeps the underlying store/LLM exception as ``__cause__`` so the
API layer can log the full chain before mapping it to an HTTP status.
"""


class HypothesisTrackerError(Exception):
    """Base class for errors raised by the hypothesis tracker core."""


class ReadFailure(HypothesisTrackerError):
    """The latest version number could not be read from the store."""


class ConflictError(HypothesisTrackerError):
    """A version insert collided with an existing (hypothesis_id, version_number)."""

    def __init__(self, hypothesis_id: str, version_number: int):
        super().__init__(
            f"Version {version_number} of hypothesis {hypothesis_id} was recorded concurrently"
        )
        self.hypothesis_id = hypothesis_id
        self.version_number = version_number


class InsertFailure(HypothesisTrackerError):
    """A version insert failed for a reason other than a version conflict."""


class InvalidInput(HypothesisTrackerError):
    """The caller passed a hypothesis the core cannot work with."""


class DraftGenerationError(HypothesisTrackerError):
    """The AI draft endpoint failed or returned something unusable."""
