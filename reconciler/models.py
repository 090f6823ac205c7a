"""Data models for chunked statement reconciliation."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .constants import (
    ACCOUNT_NUMBER_SENTINEL,
    PAGINATED_MEDIA_TYPES,
    PDF_MEDIA_TYPE,
    SUFFIX_MEDIA_TYPES,
)


def guess_media_type(name: str) -> str:
    return SUFFIX_MEDIA_TYPES.get(Path(name).suffix.lower(), PDF_MEDIA_TYPE)


@dataclass(slots=True)
class Document:
    data: bytes
    media_type: str
    name: str = "document"

    @classmethod
    def from_path(cls, path: Path, media_type: str | None = None) -> "Document":
        return cls(
            data=path.read_bytes(),
            media_type=media_type or guess_media_type(path.name),
            name=path.name,
        )

    @property
    def is_paginated(self) -> bool:
        return self.media_type in PAGINATED_MEDIA_TYPES


@dataclass(slots=True)
class Chunk:
    index: int
    document: Document
    start_page: Optional[int] = None
    end_page: Optional[int] = None
    total_chunks: int = 1

    @property
    def page_range(self) -> Optional[Tuple[int, int]]:
        if self.start_page is None or self.end_page is None:
            return None
        return (self.start_page, self.end_page)


@dataclass(frozen=True, slots=True)
class Transaction:
    date: str
    type: str
    source: str
    amount: float
    description: str

    def with_type(self, label: str) -> "Transaction":
        return replace(self, type=label)


@dataclass(slots=True)
class CategoryTotal:
    amount: float = 0.0
    count: int = 0


@dataclass(slots=True)
class MonthBucket:
    """Deduplicated transactions for one reported month plus their aggregates.

    ``total`` and ``categories`` are kept in step with ``transactions`` by
    ``append``; ``recompute`` rebuilds both from the transaction list.
    """

    month: str
    total: float = 0.0
    categories: Dict[str, CategoryTotal] = field(default_factory=dict)
    transactions: List[Transaction] = field(default_factory=list)

    def append(self, transaction: Transaction) -> None:
        self.transactions.append(transaction)
        self.total += transaction.amount
        bucket = self.categories.setdefault(transaction.type, CategoryTotal())
        bucket.amount += transaction.amount
        bucket.count += 1

    def recompute(self) -> None:
        total = 0.0
        categories: Dict[str, CategoryTotal] = {}
        for transaction in self.transactions:
            total += transaction.amount
            bucket = categories.setdefault(transaction.type, CategoryTotal())
            bucket.amount += transaction.amount
            bucket.count += 1
        self.total = total
        self.categories = categories


@dataclass(slots=True)
class AnalysisResult:
    account_number: str = ACCOUNT_NUMBER_SENTINEL
    total_income: float = 0.0
    total_transactions: int = 0
    months: List[MonthBucket] = field(default_factory=list)

    def recompute_totals(self) -> None:
        total = 0.0
        count = 0
        for month in self.months:
            total += month.total
            count += len(month.transactions)
        self.total_income = total
        self.total_transactions = count

    def get_month(self, label: str) -> Optional[MonthBucket]:
        for month in self.months:
            if month.month == label:
                return month
        return None


@dataclass(slots=True)
class PartialMonth:
    month: str
    transactions: List[Transaction] = field(default_factory=list)
    reported_total: Optional[float] = None


@dataclass(slots=True)
class PartialResult:
    """One chunk's extraction output, untrusted and possibly duplicative."""

    account_number: Optional[str] = None
    months: List[PartialMonth] = field(default_factory=list)
    reported_total_income: Optional[float] = None
    reported_total_transactions: Optional[int] = None


@dataclass(slots=True)
class ChunkOutcome:
    index: int
    result: Optional[PartialResult] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.result is not None and self.error is None


@dataclass(slots=True)
class AnalysisOutcome:
    success: bool
    result: Optional[AnalysisResult] = None
    chunks_processed: int = 0
    error: Optional[str] = None
