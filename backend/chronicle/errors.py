from typing import Optional


class ChronicleError(Exception):
    """Base class for sync pipeline failures."""


class ProviderError(ChronicleError):
    """Listing or detail call to the voice-call provider failed."""

    def __init__(self, message: str, call_id: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.call_id = call_id
        self.status_code = status_code


class StorageError(ChronicleError):
    """Reading from or writing to the entry store failed."""


class GenerationError(ChronicleError):
    """The text-generation backend could not produce a narrative."""


class ValidationError(ChronicleError):
    """Input to a pipeline operation was malformed (e.g. an empty ID batch)."""
