"""Extraction instructions sent alongside each document or chunk."""
from __future__ import annotations

from .constants import CATEGORY_TAXONOMY

_CATEGORY_LIST = ", ".join(f'"{label}"' for label in CATEGORY_TAXONOMY)

RESPONSE_SHAPE = """{
  "accountNumber": "1514",
  "totalIncome": 0.00,
  "totalTransactions": 0,
  "months": [
    {
      "month": "January 2026",
      "total": 0.00,
      "categories": {
        "ACH Deposit": {"amount": 0.00, "count": 0}
      },
      "transactions": [
        {
          "date": "2026-01-15",
          "type": "ACH Deposit",
          "source": "HYCITE",
          "amount": 1000.00,
          "description": "ACH DEPOSIT PPD HYCITE"
        }
      ]
    }
  ]
}"""

DIRECT_INSTRUCTION = f"""You are a financial analyst extracting income data from bank statements,
credit card statements and other financial documents.

The document may contain several statements covering different months. Extract
transactions from every month present and report each month separately.

First find the bank account number and return only its last 4 digits
(or "N/A" if it is not shown).

Then extract every INCOME transaction (money coming into the account). For each one give:
1. date: the transaction date as YYYY-MM-DD
2. type: one of {_CATEGORY_LIST}
3. source: the person or company that sent the money
4. amount: the dollar amount as a positive number without symbols
5. description: the original description line from the statement

Rules:
- Only include incoming money: deposits, credits, transfers in.
- Exclude payments, withdrawals, debits, fees and purchases.
- "CR", "CREDIT" or amounts in a deposit column are income.
- Process every page of the document.

Return ONLY a JSON object with this structure and no other text:
{RESPONSE_SHAPE}
"""

CHUNK_INSTRUCTION = f"""You are a financial analyst extracting ONLY INCOMING INCOME from a section
of a bank statement. This section is one part of a longer document; report only
what appears on these pages.

Include: ACH deposits from employers or payroll companies, wires received,
Zelle/Venmo/Cash App/PayPal received FROM someone, direct deposits, check deposits,
mobile deposits, bank or ATM deposits, transfers in, and any credit that increases
the balance.

Exclude: payments TO someone, withdrawals, debits, bills, ATM withdrawals,
purchases, fees, transfers out, and anything containing "PMT", "PAYMENT",
"WITHDRAWAL", "FEE", "CHARGE", "DEBIT" or "TO <name>".

Category rules:
- Employer payroll (for example "PPD HYCITE") is "ACH Deposit", never "Other".
- "Zelle FROM <name>" is "Zelle Transfer"; "Zelle TO <name>" is excluded.
- "Transfer IN" is "Transfer In"; ATM deposits are "Bank Deposit"; mobile checks are "Mobile Deposit".
- Allowed types: {_CATEGORY_LIST}.

Find the account number and return only its last 4 digits (or "N/A").
Group transactions by the month and year printed on the statement.

Return ONLY a JSON object with this structure and no other text:
{RESPONSE_SHAPE}
"""
