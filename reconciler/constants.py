"""Static configuration for chunked statement reconciliation."""
from __future__ import annotations

from typing import Tuple

MAX_PAGES_PER_CHUNK = 12
DEFAULT_CHUNK_DELAY_SECONDS = 90.0

ACCOUNT_NUMBER_SENTINEL = "N/A"
FALLBACK_CATEGORY = "Other"

PDF_MEDIA_TYPE = "application/pdf"
PAGINATED_MEDIA_TYPES = frozenset({PDF_MEDIA_TYPE})

SUFFIX_MEDIA_TYPES = {
    ".pdf": PDF_MEDIA_TYPE,
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
}

CATEGORY_TAXONOMY: Tuple[str, ...] = (
    "ACH Deposit",
    "Wire Transfer",
    "Zelle Transfer",
    "Venmo",
    "Cash App",
    "PayPal",
    "Bank Deposit",
    "Check Deposit",
    "Mobile Deposit",
    "Direct Deposit",
    "Transfer In",
    FALLBACK_CATEGORY,
)

# Evaluated top to bottom against the lower-cased label; first hit wins.
CATEGORY_RULES: Tuple[Tuple[str, str], ...] = (
    ("transfer in", "Transfer In"),
    ("zelle", "Zelle Transfer"),
    ("ach", "ACH Deposit"),
    ("wire", "Wire Transfer"),
    ("venmo", "Venmo"),
    ("cash app", "Cash App"),
    ("paypal", "PayPal"),
    ("bank deposit", "Bank Deposit"),
    ("atm", "Bank Deposit"),
    ("check", "Check Deposit"),
    ("mobile", "Mobile Deposit"),
    ("direct deposit", "Direct Deposit"),
)

MONTH_LABEL_FORMATS = (
    "%B %Y",
    "%b %Y",
    "%Y-%m",
    "%m/%Y",
    "%Y-%m-%d",
    "%B %d, %Y",
)

DEFAULT_EXTRACTION_MODEL = "gpt-4.1-mini"
