import json
from io import BytesIO
from typing import Callable, List, Sequence, Tuple, Union

import pytest
from PyPDF2 import PdfReader, PdfWriter

from reconciler.models import Document, PartialMonth, PartialResult, Transaction

BASE_WIDTH = 100


def build_pdf(page_count: int) -> bytes:
    """PDF whose page ``i`` is ``BASE_WIDTH + i`` points wide, so order can be checked."""
    writer = PdfWriter()
    for idx in range(page_count):
        writer.add_blank_page(width=BASE_WIDTH + idx, height=200)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def page_widths(data: bytes) -> List[int]:
    reader = PdfReader(BytesIO(data))
    return [int(round(float(page.mediabox.width))) for page in reader.pages]


@pytest.fixture
def make_pdf() -> Callable[[int], Document]:
    def factory(page_count: int, name: str = "statement.pdf") -> Document:
        return Document(data=build_pdf(page_count), media_type="application/pdf", name=name)

    return factory


class ScriptedExtractor:
    """Returns canned responses in order; exceptions in the script are raised."""

    def __init__(self, responses: Sequence[Union[str, Exception]]) -> None:
        self.responses = list(responses)
        self.calls: List[Tuple[Document, str]] = []

    def extract(self, document: Document, instruction: str) -> str:
        self.calls.append((document, instruction))
        response = self.responses[len(self.calls) - 1]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def scripted_extractor() -> Callable[[Sequence[Union[str, Exception]]], ScriptedExtractor]:
    return ScriptedExtractor


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


def tx(
    date: str = "2024-01-15",
    amount: float = 1000.0,
    description: str = "ACH DEPOSIT PPD HYCITE",
    type: str = "ACH Deposit",
    source: str = "HYCITE",
) -> Transaction:
    return Transaction(date=date, type=type, source=source, amount=amount, description=description)


def partial(months: dict, account_number: str | None = None) -> PartialResult:
    return PartialResult(
        account_number=account_number,
        months=[PartialMonth(month=label, transactions=list(items)) for label, items in months.items()],
    )


def response_json(months: dict, account_number: str = "1514") -> str:
    return json.dumps(
        {
            "accountNumber": account_number,
            "totalIncome": 0,
            "totalTransactions": 0,
            "months": [
                {
                    "month": label,
                    "total": 0,
                    "categories": {},
                    "transactions": [
                        {
                            "date": item.date,
                            "type": item.type,
                            "source": item.source,
                            "amount": item.amount,
                            "description": item.description,
                        }
                        for item in items
                    ],
                }
                for label, items in months.items()
            ],
        }
    )


def assert_consistent(result) -> None:
    income = 0.0
    count = 0
    for bucket in result.months:
        assert bucket.total == pytest.approx(sum(item.amount for item in bucket.transactions))
        by_type = {}
        for item in bucket.transactions:
            amount, seen = by_type.get(item.type, (0.0, 0))
            by_type[item.type] = (amount + item.amount, seen + 1)
        assert set(bucket.categories) == set(by_type)
        for label, (amount, seen) in by_type.items():
            assert bucket.categories[label].amount == pytest.approx(amount)
            assert bucket.categories[label].count == seen
        income += bucket.total
        count += len(bucket.transactions)
    assert result.total_income == pytest.approx(income)
    assert result.total_transactions == count
