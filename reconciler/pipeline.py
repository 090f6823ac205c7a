"""High-level statement analysis: split, submit, reconcile."""
from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Protocol, Sequence

from .constants import DEFAULT_CHUNK_DELAY_SECONDS
from .exceptions import ReconcilerError
from .merger import ResultMerger
from .models import AnalysisOutcome, Chunk, Document, PartialResult
from .parsing import parse_partial_result
from .prompts import CHUNK_INSTRUCTION, DIRECT_INSTRUCTION
from .scheduler import ChunkScheduler
from .splitter import PageSplitter

logger = logging.getLogger(__name__)


class Extractor(Protocol):
    def extract(self, document: Document, instruction: str) -> str:
        ...


class StatementAnalyzer:
    """Coordinates splitting, rate-limited extraction and merging for one document at a time."""

    def __init__(
        self,
        extractor: Extractor,
        splitter: Optional[PageSplitter] = None,
        delay: float = DEFAULT_CHUNK_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        merger: Optional[ResultMerger] = None,
    ) -> None:
        self.extractor = extractor
        self.splitter = splitter or PageSplitter()
        self.delay = delay
        self.sleep = sleep
        self.merger = merger or ResultMerger()

    def analyze(self, document: Document) -> AnalysisOutcome:
        """Single extraction call for documents known to be small."""
        chunks = [Chunk(index=0, document=document)]
        return self._run(document, chunks, DIRECT_INSTRUCTION)

    def analyze_chunked(self, document: Document) -> AnalysisOutcome:
        try:
            chunks = self.splitter.split(document)
        except ReconcilerError as exc:
            logger.error("Error in chunked processing of %s: %s", document.name, exc)
            return AnalysisOutcome(success=False, chunks_processed=0, error=str(exc))

        if len(chunks) == 1:
            logger.info("Small file detected - processing without chunking")
            instruction = DIRECT_INSTRUCTION
        else:
            logger.info("Large file detected - processing %d chunks", len(chunks))
            instruction = CHUNK_INSTRUCTION
        return self._run(document, chunks, instruction)

    # --- helpers ---
    def _run(self, document: Document, chunks: Sequence[Chunk], instruction: str) -> AnalysisOutcome:
        scheduler = ChunkScheduler(self._submitter(instruction), delay=self.delay, sleep=self.sleep)
        try:
            partials: List[PartialResult] = scheduler.run(chunks)
        except ReconcilerError as exc:
            logger.error("Failed to analyze %s: %s", document.name, exc)
            return AnalysisOutcome(success=False, chunks_processed=len(chunks), error=str(exc))

        result = self.merger.merge(partials)
        logger.info(
            "%s: %d month(s), %d transaction(s), total income %.2f",
            document.name,
            len(result.months),
            result.total_transactions,
            result.total_income,
        )
        return AnalysisOutcome(success=True, result=result, chunks_processed=len(chunks))

    def _submitter(self, instruction: str) -> Callable[[Chunk], PartialResult]:
        def submit(chunk: Chunk) -> PartialResult:
            text = self.extractor.extract(chunk.document, instruction)
            return parse_partial_result(text, chunk_label=chunk.document.name)

        return submit
