"""Keyword tables driving transaction extraction.

Every vocabulary the extractor consults lives here as data. Order matters for
``categories``: the first group with a matching substring wins.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace

INCOME_CATEGORY = "Income"
FALLBACK_CATEGORY = "Other"


@dataclass(frozen=True)
class CategoryRule:
    name: str
    keywords: tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


DEFAULT_INCOME_MARKERS: tuple[str, ...] = (
    "income",
    "earned",
    "made",
    "received",
    "got",
    "deposited",
    "added",
    "salary",
    "wage",
    "bonus",
    "payment",
    "refund",
    "rebate",
    "plus",
    "positive",
    "gain",
)

DEFAULT_EXPENSE_MARKERS: tuple[str, ...] = (
    "spent",
    "expense",
    "bought",
    "paid",
    "cost",
    "withdrew",
    "deducted",
    "bill",
    "charge",
    "purchase",
    "minus",
    "negative",
    "loss",
    "debt",
    "owe",
)

DEFAULT_CATEGORIES: tuple[CategoryRule, ...] = (
    CategoryRule("Food", ("food", "restaurant", "grocery", "groceries", "dining", "lunch", "dinner")),
    CategoryRule("Transport", ("gas", "transport", "uber", "taxi", "fuel", "parking")),
    CategoryRule("Housing", ("rent", "housing", "mortgage", "utilities", "electric", "water")),
    CategoryRule("Entertainment", ("entertainment", "movie", "game", "netflix", "spotify", "subscription")),
    CategoryRule("Healthcare", ("health", "medical", "doctor", "pharmacy", "insurance")),
    CategoryRule("Shopping", ("shopping", "clothes", "clothing", "amazon", "store")),
    CategoryRule("Education", ("education", "school", "course", "book", "tuition")),
)

# Connectives that carry no meaning as a transaction label.
DEFAULT_FILLER_WORDS: frozenset[str] = frozenset({
    "an",
    "and",
    "at",
    "but",
    "by",
    "for",
    "from",
    "in",
    "my",
    "of",
    "on",
    "the",
    "to",
    "with",
})

DEFAULT_CURRENCY_SYMBOLS = "$€£¥"


@dataclass(frozen=True)
class KeywordTables:
    income_markers: tuple[str, ...] = DEFAULT_INCOME_MARKERS
    expense_markers: tuple[str, ...] = DEFAULT_EXPENSE_MARKERS
    categories: tuple[CategoryRule, ...] = DEFAULT_CATEGORIES
    filler_words: frozenset[str] = DEFAULT_FILLER_WORDS
    currency_symbols: str = DEFAULT_CURRENCY_SYMBOLS
    # Exact-token lookups for description cleanup
    _marker_tokens: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "_marker_tokens",
            frozenset(self.income_markers) | frozenset(self.expense_markers),
        )

    def is_marker(self, token: str) -> bool:
        return token in self._marker_tokens

    def categorize(self, description: str) -> str:
        text = description.lower()
        for rule in self.categories:
            if rule.matches(text):
                return rule.name
        return FALLBACK_CATEGORY

    def category_names(self) -> list[str]:
        return [rule.name for rule in self.categories] + [FALLBACK_CATEGORY]

    def with_category(self, name: str, keywords: list[str] | tuple[str, ...]) -> KeywordTables:
        """
        Return tables where ``keywords`` extend the group called ``name``.

        Unknown names become a new group tested after the existing ones.
        """
        cleaned = tuple(keyword.strip().lower() for keyword in keywords if keyword.strip())
        rules: list[CategoryRule] = []
        found = False
        for rule in self.categories:
            if rule.name == name:
                merged = rule.keywords + tuple(k for k in cleaned if k not in rule.keywords)
                rules.append(CategoryRule(rule.name, merged))
                found = True
            else:
                rules.append(rule)
        if not found and cleaned:
            rules.append(CategoryRule(name, cleaned))
        return replace(self, categories=tuple(rules))


DEFAULT_TABLES = KeywordTables()


def build_tables(
    known_keywords: Mapping[str, Iterable[str]] | None = None,
    base: KeywordTables = DEFAULT_TABLES,
) -> KeywordTables:
    """Fold previously known ``{category: keywords}`` into ``base``, in mapping order."""
    tables = base
    for name, keywords in (known_keywords or {}).items():
        tables = tables.with_category(name, tuple(keywords))
    return tables
