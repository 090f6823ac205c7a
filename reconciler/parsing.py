"""Decoding of extraction responses into partial results."""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

from .constants import ACCOUNT_NUMBER_SENTINEL, FALLBACK_CATEGORY
from .exceptions import PartialResultMalformed, ResponseDecodeError
from .models import PartialMonth, PartialResult, Transaction

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```[A-Za-z]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```\s*$")


def strip_code_fences(text: str) -> str:
    content = (text or "").strip()
    if not content.startswith("```"):
        return content
    content = _LEADING_FENCE.sub("", content, count=1)
    content = _TRAILING_FENCE.sub("", content, count=1)
    return content.strip()


def decode_response(text: str) -> Any:
    content = strip_code_fences(text)
    if not content:
        raise ResponseDecodeError("Empty response content.")
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        fragment = _first_json_fragment(content)
        if fragment is None:
            raise ResponseDecodeError(f"Response is not valid JSON: {exc}") from exc
        try:
            return json.loads(fragment)
        except json.JSONDecodeError as inner:
            raise ResponseDecodeError(f"Response is not valid JSON: {inner}") from inner


def _first_json_fragment(text: str) -> Optional[str]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or start >= end:
        return None
    return text[start : end + 1]


def coerce_amount(value: object) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and value != value:
            return None
        return float(value)
    text = str(value).strip()
    if not text:
        return None
    cleaned = text.replace(",", "").replace("$", "").strip()
    if cleaned.startswith("(") and cleaned.endswith(")"):
        cleaned = f"-{cleaned[1:-1]}"
    try:
        return float(cleaned)
    except ValueError:
        return None


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def coerce_transaction(payload: object) -> Optional[Transaction]:
    if not isinstance(payload, dict):
        return None
    amount = coerce_amount(payload.get("amount"))
    if amount is None:
        return None
    label = _as_text(payload.get("type")).strip()
    return Transaction(
        date=_as_text(payload.get("date")).strip(),
        type=label or FALLBACK_CATEGORY,
        source=_as_text(payload.get("source")).strip(),
        amount=amount,
        description=_as_text(payload.get("description")),
    )


def _coerce_month(payload: Dict[str, Any], chunk_label: str) -> Optional[PartialMonth]:
    label = _as_text(payload.get("month")).strip()
    if not label:
        logger.warning("%s: skipping month entry without a label", chunk_label)
        return None
    transactions: List[Transaction] = []
    raw_transactions = payload.get("transactions")
    if not isinstance(raw_transactions, list):
        raw_transactions = []
    for raw in raw_transactions:
        transaction = coerce_transaction(raw)
        if transaction is None:
            logger.warning("%s: skipping unreadable transaction in %s: %r", chunk_label, label, raw)
            continue
        transactions.append(transaction)
    return PartialMonth(
        month=label,
        transactions=transactions,
        reported_total=coerce_amount(payload.get("total")),
    )


def coerce_partial_result(payload: Any, chunk_label: str = "response", strict: bool = False) -> PartialResult:
    """Turn decoded response JSON into a PartialResult.

    A payload without a ``months`` list is a valid but empty contribution
    unless ``strict`` is set, in which case PartialResultMalformed is raised.
    """
    if not isinstance(payload, dict):
        error = PartialResultMalformed(f"{chunk_label}: expected a JSON object, got {type(payload).__name__}")
        if strict:
            raise error
        logger.warning("%s", error)
        return PartialResult()

    account = _as_text(payload.get("accountNumber")).strip() or None
    raw_months = payload.get("months")
    months: List[PartialMonth] = []
    if not isinstance(raw_months, list):
        error = PartialResultMalformed(f"{chunk_label}: response has no 'months' list")
        if strict:
            raise error
        logger.warning("%s; treating as zero months", error)
    else:
        for raw in raw_months:
            if not isinstance(raw, dict):
                continue
            month = _coerce_month(raw, chunk_label)
            if month is not None:
                months.append(month)

    reported_count = payload.get("totalTransactions")
    return PartialResult(
        account_number=account,
        months=months,
        reported_total_income=coerce_amount(payload.get("totalIncome")),
        reported_total_transactions=reported_count if isinstance(reported_count, int) else None,
    )


def parse_partial_result(text: str, chunk_label: str = "response") -> PartialResult:
    return coerce_partial_result(decode_response(text), chunk_label)


def has_account_number(value: Optional[str]) -> bool:
    return bool(value) and value != ACCOUNT_NUMBER_SENTINEL
