"""Identity keys used to collapse transactions reported by more than one chunk."""
from __future__ import annotations

from typing import Iterable, Set

from .categories import normalize_description
from .models import Transaction


def transaction_key(transaction: Transaction) -> str:
    # date literal | amount to 2dp | comparison form of the description
    return "|".join(
        (
            str(transaction.date),
            f"{float(transaction.amount):.2f}",
            normalize_description(transaction.description),
        )
    )


def key_set(transactions: Iterable[Transaction]) -> Set[str]:
    return {transaction_key(transaction) for transaction in transactions}
