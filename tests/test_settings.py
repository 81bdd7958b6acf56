from pathlib import Path

import pytest

from finance_chat.core import settings


def test_read_config_file(tmp_path: Path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text(
        "# comment\n"
        "OPENAI_MODEL: gpt-4o-mini # inline comment\n"
        "SUPABASE_TABLE: \"chat#data\"\n"
        "EMPTY:\n"
        "not a pair\n",
        encoding="utf-8",
    )
    values = settings.read_config_file(str(config))
    assert values == {"OPENAI_MODEL": "gpt-4o-mini", "SUPABASE_TABLE": "chat#data"}


def test_read_missing_config_file(tmp_path: Path) -> None:
    assert settings.read_config_file(str(tmp_path / "missing.yaml")) == {}
    assert settings.read_config_file(None) == {}


def test_env_numbers_fall_back_on_bad_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_MAX_TOKENS", "lots")
    assert settings.get_env_int("OPENAI_MAX_TOKENS", 500, min_value=1) == 500
    monkeypatch.setenv("OPENAI_MAX_TOKENS", "0")
    assert settings.get_env_int("OPENAI_MAX_TOKENS", 500, min_value=1) == 500
    monkeypatch.setenv("OPENAI_MAX_TOKENS", "250")
    assert settings.get_env_int("OPENAI_MAX_TOKENS", 500, min_value=1) == 250

    monkeypatch.setenv("OPENAI_TEMPERATURE", "warm")
    assert settings.get_env_float("OPENAI_TEMPERATURE", 0.7) == 0.7
    monkeypatch.setenv("MEMORY_THRESHOLD", "85")
    assert settings.get_env_float("MEMORY_THRESHOLD", 90.0) == 85.0


def test_mask_env_value() -> None:
    assert settings.mask_env_value("SUPABASE_KEY", "abcdefgh") == "ab...gh"
    assert settings.mask_env_value("OPENAI_MODEL", "sk-secret-value") == "sk...ue"
    assert settings.mask_env_value("OPENAI_MODEL", "gpt-4") == "gpt-4"
    assert settings.mask_env_value("SUPABASE_KEY", "abc") == "****"


def test_account_and_table_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DEFAULT_ACCOUNT_ID", raising=False)
    monkeypatch.delenv("SUPABASE_TABLE", raising=False)
    assert settings.get_account_id() == "default-user"
    assert settings.get_table_name() == "finance_chat_data"

    monkeypatch.setenv("DEFAULT_ACCOUNT_ID", "alice")
    assert settings.get_account_id() == "alice"


def test_category_keywords(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATEGORY_KEYWORDS", "Pets=vet, kibble; broken ;Gifts=present;Pets=leash")
    assert settings.get_category_keywords() == {
        "Pets": ["vet", "kibble", "leash"],
        "Gifts": ["present"],
    }
    assert settings.mask_env_value("CATEGORY_KEYWORDS", "Pets=vet") == "Pets=vet"

    monkeypatch.delenv("CATEGORY_KEYWORDS")
    assert settings.get_category_keywords() == {}
