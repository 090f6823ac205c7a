from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from .merger import ResultMerger
from .models import AnalysisResult, MonthBucket
from .parsing import coerce_partial_result

MONTH_COLUMNS = ["Month", "Total", "Transactions"]
CATEGORY_COLUMNS = ["Month", "Category", "Amount", "Count"]
TRANSACTION_COLUMNS = ["Month", "Date", "Type", "Source", "Amount", "Description"]


def month_to_dict(bucket: MonthBucket) -> Dict[str, Any]:
    return {
        "month": bucket.month,
        "total": bucket.total,
        "categories": {
            label: {"amount": totals.amount, "count": totals.count}
            for label, totals in bucket.categories.items()
        },
        "transactions": [
            {
                "date": tx.date,
                "type": tx.type,
                "source": tx.source,
                "amount": tx.amount,
                "description": tx.description,
            }
            for tx in bucket.transactions
        ],
    }


def report_to_dict(result: AnalysisResult) -> Dict[str, Any]:
    return {
        "accountNumber": result.account_number,
        "totalIncome": result.total_income,
        "totalTransactions": result.total_transactions,
        "months": [month_to_dict(bucket) for bucket in result.months],
    }


def report_from_dict(payload: Dict[str, Any]) -> AnalysisResult:
    """Rebuild a report from its JSON form; aggregates are recomputed, not read."""
    return ResultMerger().merge([coerce_partial_result(payload, chunk_label="report", strict=True)])


def build_frames(result: AnalysisResult) -> Dict[str, pd.DataFrame]:
    months: List[Dict[str, object]] = []
    categories: List[Dict[str, object]] = []
    transactions: List[Dict[str, object]] = []
    for bucket in result.months:
        months.append(
            {"Month": bucket.month, "Total": bucket.total, "Transactions": len(bucket.transactions)}
        )
        for label, totals in bucket.categories.items():
            categories.append(
                {"Month": bucket.month, "Category": label, "Amount": totals.amount, "Count": totals.count}
            )
        for tx in bucket.transactions:
            transactions.append(
                {
                    "Month": bucket.month,
                    "Date": tx.date,
                    "Type": tx.type,
                    "Source": tx.source,
                    "Amount": tx.amount,
                    "Description": tx.description,
                }
            )
    return {
        "Months": pd.DataFrame(months, columns=MONTH_COLUMNS),
        "Categories": pd.DataFrame(categories, columns=CATEGORY_COLUMNS),
        "Transactions": pd.DataFrame(transactions, columns=TRANSACTION_COLUMNS),
    }


def write_report_workbook(result: AnalysisResult, output_path: Path) -> None:
    frames = build_frames(result)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_path, engine="xlsxwriter") as writer:
        summary = writer.book.add_worksheet("Summary")
        header = {
            "Account Number": result.account_number,
            "Total Income": result.total_income,
            "Total Transactions": result.total_transactions,
        }
        for row_idx, (key, value) in enumerate(header.items()):
            summary.write(row_idx, 0, key)
            summary.write(row_idx, 1, value)
        for sheet_name, frame in frames.items():
            frame.to_excel(writer, sheet_name=sheet_name, index=False)
