"""Reconciliation of per-chunk partial results into one report."""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from .categories import normalize_category
from .constants import ACCOUNT_NUMBER_SENTINEL, MONTH_LABEL_FORMATS
from .dedup import key_set, transaction_key
from .models import AnalysisResult, MonthBucket, PartialMonth, PartialResult
from .parsing import has_account_number

logger = logging.getLogger(__name__)


def parse_month_label(label: str) -> Optional[date]:
    if not label:
        return None
    normalized = " ".join(label.split())
    for candidate in (normalized, " ".join(normalized.replace(",", " ").split())):
        for fmt in MONTH_LABEL_FORMATS:
            try:
                return datetime.strptime(candidate, fmt).date()
            except ValueError:
                continue
    return None


def order_months(buckets: Iterable[MonthBucket]) -> List[MonthBucket]:
    """Most recent month first; labels that are not dates go last in first-seen order."""
    dated = []
    undated = []
    for bucket in buckets:
        parsed = parse_month_label(bucket.month)
        if parsed is None:
            undated.append(bucket)
        else:
            dated.append((parsed, bucket))
    dated.sort(key=lambda item: item[0], reverse=True)
    return [bucket for _, bucket in dated] + undated


class ResultMerger:
    """Folds partial results, in chunk order, into a single AnalysisResult."""

    def merge(self, partials: Sequence[PartialResult]) -> AnalysisResult:
        buckets: Dict[str, MonthBucket] = {}
        for position, partial in enumerate(partials):
            for month in partial.months:
                existing = buckets.get(month.month)
                if existing is None:
                    buckets[month.month] = self._register_month(month)
                else:
                    dropped = self._fold_month(existing, month)
                    if dropped:
                        logger.info(
                            "Dropped %d duplicate transaction(s) from partial %d in %s",
                            dropped,
                            position + 1,
                            month.month,
                        )

        for bucket in buckets.values():
            bucket.recompute()

        result = AnalysisResult(
            account_number=self._pick_account_number(partials),
            months=order_months(buckets.values()),
        )
        result.recompute_totals()
        return result

    @staticmethod
    def _pick_account_number(partials: Sequence[PartialResult]) -> str:
        for partial in partials:
            if has_account_number(partial.account_number):
                return str(partial.account_number)
        return ACCOUNT_NUMBER_SENTINEL

    @staticmethod
    def _register_month(month: PartialMonth) -> MonthBucket:
        # The first partial to report a month is stored whole, repeats included.
        bucket = MonthBucket(month=month.month)
        for transaction in month.transactions:
            bucket.append(transaction.with_type(normalize_category(transaction.type)))
        return bucket

    @staticmethod
    def _fold_month(bucket: MonthBucket, month: PartialMonth) -> int:
        # The stored record is never overwritten, so the first-seen type wins.
        seen = key_set(bucket.transactions)
        dropped = 0
        for transaction in month.transactions:
            normalized = transaction.with_type(normalize_category(transaction.type))
            key = transaction_key(normalized)
            if key in seen:
                dropped += 1
                continue
            bucket.append(normalized)
            seen.add(key)
        return dropped


def result_to_partial(result: AnalysisResult) -> PartialResult:
    return PartialResult(
        account_number=result.account_number,
        months=[
            PartialMonth(month=bucket.month, transactions=list(bucket.transactions), reported_total=bucket.total)
            for bucket in result.months
        ],
        reported_total_income=result.total_income,
        reported_total_transactions=result.total_transactions,
    )


def merge_reports(results: Iterable[AnalysisResult]) -> AnalysisResult:
    """Merge already reconciled reports, e.g. several statements of one account."""
    return ResultMerger().merge([result_to_partial(result) for result in results])
