from finance_chat.extraction.keywords import (
    DEFAULT_TABLES,
    FALLBACK_CATEGORY,
    CategoryRule,
    KeywordTables,
    build_tables,
)


def test_default_vocabularies() -> None:
    assert DEFAULT_TABLES.income_markers[0] == "income"
    assert "gain" in DEFAULT_TABLES.income_markers
    assert "owe" in DEFAULT_TABLES.expense_markers
    assert len(DEFAULT_TABLES.income_markers) == 16
    assert len(DEFAULT_TABLES.expense_markers) == 15


def test_category_order() -> None:
    assert DEFAULT_TABLES.category_names() == [
        "Food",
        "Transport",
        "Housing",
        "Entertainment",
        "Healthcare",
        "Shopping",
        "Education",
        "Other",
    ]


def test_categorize_first_match_wins() -> None:
    assert DEFAULT_TABLES.categorize("Grocery run") == "Food"
    assert DEFAULT_TABLES.categorize("gas and movie") == "Transport"
    assert DEFAULT_TABLES.categorize("water bill") == "Housing"
    assert DEFAULT_TABLES.categorize("doctor") == "Healthcare"
    assert DEFAULT_TABLES.categorize("amazon order") == "Shopping"
    assert DEFAULT_TABLES.categorize("tuition") == "Education"
    assert DEFAULT_TABLES.categorize("something else") == FALLBACK_CATEGORY


def test_is_marker_exact_token() -> None:
    assert DEFAULT_TABLES.is_marker("spent")
    assert DEFAULT_TABLES.is_marker("salary")
    assert not DEFAULT_TABLES.is_marker("salaryman")


def test_with_category_extends_existing_group() -> None:
    tables = DEFAULT_TABLES.with_category("Food", ["Pizza", " ", "food"])
    food = tables.categories[0]
    assert food.name == "Food"
    assert food.keywords[-1] == "pizza"
    assert food.keywords.count("food") == 1
    assert tables.categorize("pizza night") == "Food"
    assert DEFAULT_TABLES.categorize("pizza night") == FALLBACK_CATEGORY


def test_with_category_appends_new_group_last() -> None:
    tables = DEFAULT_TABLES.with_category("Travel", ["flight", "hotel"])
    assert tables.categories[-1] == CategoryRule("Travel", ("flight", "hotel"))
    assert tables.category_names()[-2:] == ["Travel", "Other"]
    assert tables.is_marker("spent")


def test_custom_tables_rebuild_marker_lookup() -> None:
    tables = KeywordTables(income_markers=("won",), expense_markers=("lost",))
    assert tables.is_marker("won")
    assert not tables.is_marker("spent")


def test_build_tables_folds_known_keywords() -> None:
    tables = build_tables({"Pets": ["vet", "kibble"], "Food": ["ramen"]})
    assert tables.categorize("kibble refill") == "Pets"
    assert tables.categorize("ramen") == "Food"
    assert tables.category_names()[-2:] == ["Pets", "Other"]
    assert build_tables(None) is DEFAULT_TABLES
    assert build_tables({}, base=tables) is tables
