"""Custom exceptions for the reconciler package."""
from __future__ import annotations

from typing import List, Sequence


class ReconcilerError(RuntimeError):
    """Base error for chunked statement reconciliation."""


class MalformedDocument(ReconcilerError):
    """Raised when a paginated document cannot be opened to find its pages."""


class ExtractionUnavailable(ReconcilerError):
    """Raised when the extraction client cannot be constructed."""


class ResponseDecodeError(ReconcilerError):
    """Raised when an extraction response does not contain a JSON object."""


class PartialResultMalformed(ReconcilerError):
    """A chunk returned JSON without the expected report fields."""


class ChunkSubmissionFailed(ReconcilerError):
    def __init__(self, chunk_index: int, reason: str) -> None:
        super().__init__(f"Chunk {chunk_index + 1} failed: {reason}")
        self.chunk_index = chunk_index
        self.reason = reason


class NoUsableResults(ReconcilerError):
    def __init__(self, attempted: int, failures: Sequence[ChunkSubmissionFailed] = ()) -> None:
        if attempted == 0:
            message = "No chunks were submitted for extraction"
        else:
            message = f"No chunks processed successfully ({attempted} attempted)"
        super().__init__(message)
        self.attempted = attempted
        self.failures: List[ChunkSubmissionFailed] = list(failures)
