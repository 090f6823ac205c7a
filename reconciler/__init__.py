"""Chunked extraction and reconciliation of bank statement income reports."""

from .categories import normalize_category, normalize_description
from .dedup import transaction_key
from .exceptions import (
    ChunkSubmissionFailed,
    MalformedDocument,
    NoUsableResults,
    PartialResultMalformed,
    ReconcilerError,
)
from .merger import ResultMerger, merge_reports
from .models import (
    AnalysisOutcome,
    AnalysisResult,
    Chunk,
    Document,
    MonthBucket,
    PartialResult,
    Transaction,
)
from .pipeline import StatementAnalyzer
from .scheduler import ChunkScheduler
from .splitter import PageSplitter

__all__ = [
    "AnalysisOutcome",
    "AnalysisResult",
    "Chunk",
    "ChunkScheduler",
    "ChunkSubmissionFailed",
    "Document",
    "MalformedDocument",
    "MonthBucket",
    "NoUsableResults",
    "PageSplitter",
    "PartialResult",
    "PartialResultMalformed",
    "ReconcilerError",
    "ResultMerger",
    "StatementAnalyzer",
    "Transaction",
    "merge_reports",
    "normalize_category",
    "normalize_description",
    "transaction_key",
]
