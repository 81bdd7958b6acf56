"""Free-text transaction extraction.

``extract("spent 12.50 on lunch")`` yields an expense of 12.5 described as
``lunch`` in the ``Food`` category. Text without a whitespace-delimited amount
yields ``None``. The routine is pure apart from the generated identity and
timestamp, and it never raises for string input.
"""

from __future__ import annotations

import math
import re
import uuid
from datetime import datetime
from functools import lru_cache

from finance_chat.extraction.keywords import (
    DEFAULT_TABLES,
    FALLBACK_CATEGORY,
    INCOME_CATEGORY,
    KeywordTables,
)
from finance_chat.logger import get_logger
from finance_chat.models import ParsedTransaction, TransactionKind

logger = get_logger(__name__)

INCOME_DESCRIPTION = "Income"
EXPENSE_DESCRIPTION = "Expense"

BARE_AMOUNT_PATTERN = re.compile(r"-?\d+(?:\.\d{2})?")


@lru_cache(maxsize=8)
def _amount_patterns(currency_symbols: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    symbols = re.escape(currency_symbols)
    token = rf"-?[{symbols}]?\d+(?:,\d{{3}})*(?:\.\d{{2}})?"
    # Whitespace or string edges on both sides; "abc123abc" is not an amount.
    search = re.compile(rf"(?<!\S)({token})(?!\S)")
    return search, re.compile(token)


def _first_occurrence(text: str, markers: tuple[str, ...]) -> int | None:
    positions = [text.find(marker) for marker in markers]
    return min((pos for pos in positions if pos != -1), default=None)


def classify_kind(text: str, tables: KeywordTables = DEFAULT_TABLES) -> TransactionKind:
    """
    Decide income vs expense from marker wording alone.

    One-sided wording decides directly. When both sides appear, the marker that
    starts earliest wins, with ties going to expense. No wording means income.
    """
    income_at = _first_occurrence(text, tables.income_markers)
    expense_at = _first_occurrence(text, tables.expense_markers)

    if income_at is None and expense_at is None:
        return TransactionKind.INCOME
    if expense_at is None:
        return TransactionKind.INCOME
    if income_at is None:
        return TransactionKind.EXPENSE
    return TransactionKind.INCOME if income_at < expense_at else TransactionKind.EXPENSE


def extract_description(text: str, tables: KeywordTables = DEFAULT_TABLES) -> str:
    """Words left after dropping markers, amounts, single characters and filler."""
    _, amount_token = _amount_patterns(tables.currency_symbols)
    words = [
        word
        for word in text.split()
        if not tables.is_marker(word)
        and not amount_token.fullmatch(word)
        and len(word) > 1
        and word not in tables.filler_words
    ]
    return " ".join(words).strip()


def _parse_amount(token: str, currency_symbols: str) -> float | None:
    cleaned = token.replace(",", "")
    for symbol in currency_symbols:
        cleaned = cleaned.replace(symbol, "")
    try:
        value = float(cleaned)
    except ValueError:
        return None
    # Digit runs past the float range overflow to inf
    return value if math.isfinite(value) else None


def _build(kind: TransactionKind, amount: float, category: str, description: str) -> ParsedTransaction:
    return ParsedTransaction(
        identity=uuid.uuid4().hex,
        kind=kind,
        amount=abs(amount),
        category=category,
        description=description,
        occurred_at=datetime.now(),
    )


class TransactionExtractor:
    def __init__(self, tables: KeywordTables = DEFAULT_TABLES):
        self.tables = tables

    def extract(self, text: str) -> ParsedTransaction | None:
        return extract(text, self.tables)


def extract(text: str, tables: KeywordTables | None = None) -> ParsedTransaction | None:
    tables = tables or DEFAULT_TABLES
    if not text:
        return None

    clean = text.strip().lower()
    amount_search, _ = _amount_patterns(tables.currency_symbols)
    match = amount_search.search(clean)
    if not match:
        return None

    amount = _parse_amount(match.group(1), tables.currency_symbols)
    if amount is None:
        logger.debug(f"Unparseable amount token: '{match.group(1)}'")
        return None

    has_income = _first_occurrence(clean, tables.income_markers) is not None
    has_expense = _first_occurrence(clean, tables.expense_markers) is not None
    negative = amount < 0 or clean.startswith("-")

    if (
        not negative
        and not has_income
        and not has_expense
        and BARE_AMOUNT_PATTERN.fullmatch(clean)
    ):
        return _build(TransactionKind.INCOME, amount, INCOME_CATEGORY, INCOME_DESCRIPTION)

    # An explicit sign outranks any wording
    if negative:
        return _build(TransactionKind.EXPENSE, amount, FALLBACK_CATEGORY, EXPENSE_DESCRIPTION)

    kind = classify_kind(clean, tables)
    description = extract_description(clean, tables)
    if kind is TransactionKind.INCOME:
        return _build(kind, amount, INCOME_CATEGORY, description or INCOME_DESCRIPTION)
    description = description or EXPENSE_DESCRIPTION
    return _build(kind, amount, tables.categorize(description), description)
