"""Sequential, rate-limited submission of chunks to the extraction service."""
from __future__ import annotations

import logging
import time
from typing import Callable, Iterator, List, Sequence

from .constants import DEFAULT_CHUNK_DELAY_SECONDS
from .exceptions import ChunkSubmissionFailed, NoUsableResults
from .models import Chunk, ChunkOutcome, PartialResult

logger = logging.getLogger(__name__)

SubmitFn = Callable[[Chunk], PartialResult]


class ChunkScheduler:
    """Submits chunks one at a time, waiting ``delay`` seconds between calls.

    Calls are never issued concurrently and no delay follows the last chunk.
    Pass ``delay=0`` (or a recording ``sleep``) in tests.
    """

    def __init__(
        self,
        submit: SubmitFn,
        delay: float = DEFAULT_CHUNK_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if delay < 0:
            raise ValueError(f"delay must not be negative, got {delay}")
        self.submit = submit
        self.delay = delay
        self.sleep = sleep

    def iter_outcomes(self, chunks: Sequence[Chunk]) -> Iterator[ChunkOutcome]:
        total = len(chunks)
        for position, chunk in enumerate(chunks):
            logger.info("Processing chunk %d/%d", position + 1, total)
            yield self._submit_one(chunk)
            if position < total - 1 and self.delay:
                logger.info("Waiting %.0f seconds before next chunk...", self.delay)
                self.sleep(self.delay)

    def run(self, chunks: Sequence[Chunk]) -> List[PartialResult]:
        """Submit every chunk and return the usable partial results in order."""
        if not chunks:
            raise NoUsableResults(0)

        results: List[PartialResult] = []
        failures: List[ChunkSubmissionFailed] = []
        for outcome in self.iter_outcomes(chunks):
            if outcome.result is not None:
                results.append(outcome.result)
            elif isinstance(outcome.error, ChunkSubmissionFailed):
                failures.append(outcome.error)

        if len(chunks) == 1 and failures:
            raise failures[0]
        if not results:
            raise NoUsableResults(len(chunks), failures)
        if failures:
            logger.warning(
                "%d of %d chunk(s) failed: %s",
                len(failures),
                len(chunks),
                ", ".join(str(failure.chunk_index + 1) for failure in failures),
            )
        return results

    def _submit_one(self, chunk: Chunk) -> ChunkOutcome:
        try:
            result = self.submit(chunk)
        except ChunkSubmissionFailed as exc:
            error = exc
        except Exception as exc:
            error = ChunkSubmissionFailed(chunk.index, f"{type(exc).__name__}: {exc}")
            error.__cause__ = exc
        else:
            if result is not None:
                return ChunkOutcome(index=chunk.index, result=result)
            error = ChunkSubmissionFailed(chunk.index, "extraction returned no result")
        logger.error("Error processing chunk %d: %s", chunk.index + 1, error.reason)
        logger.debug("Chunk %d failure detail", chunk.index + 1, exc_info=error)
        return ChunkOutcome(index=chunk.index, error=error)
