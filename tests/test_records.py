from datetime import datetime, timedelta
from pathlib import Path

import pytest

from finance_chat.extraction.extractor import extract
from finance_chat.models import Message, TransactionKind
from finance_chat.services.records import RecordRepository, row_to_transaction
from finance_chat.storage import JsonRowStore, PersonalityStore


@pytest.fixture
def repository(tmp_path: Path) -> RecordRepository:
    store = JsonRowStore(data_path=str(tmp_path / "records.json"))
    return RecordRepository(store=store, table="finance_chat_data")


@pytest.mark.anyio
async def test_messages_and_transactions_are_split(repository: RecordRepository) -> None:
    now = datetime.now()
    first = Message(id="m1", text="spent 12.50 on lunch", sender="user", timestamp=now)
    second = Message(id="m2", text="Noted!", sender="assistant", timestamp=now + timedelta(seconds=1))
    transaction = extract("spent 12.50 on lunch")

    # Saved out of order; reads come back sorted by created_at
    await repository.save_message("alice", second)
    await repository.save_message("alice", first)
    await repository.save_transaction("alice", transaction)

    messages = await repository.get_messages("alice")
    assert [m.id for m in messages] == ["m1", "m2"]
    assert messages[1].sender == "assistant"

    transactions = await repository.get_transactions("alice")
    assert len(transactions) == 1
    stored = transactions[0]
    assert stored.identity == transaction.identity
    assert stored.kind == TransactionKind.EXPENSE
    assert stored.amount == pytest.approx(12.5)
    assert stored.category == "Food"
    assert stored.description == "lunch"

    everything = await repository.get_all("alice")
    assert len(everything["messages"]) == 2
    assert len(everything["transactions"]) == 1


@pytest.mark.anyio
async def test_accounts_are_isolated_and_clear(repository: RecordRepository) -> None:
    await repository.save_transaction("alice", extract("salary 100"))
    await repository.save_transaction("bob", extract("spent 5 on taxi"))

    await repository.clear("alice")

    assert await repository.get_transactions("alice") == []
    bob = await repository.get_transactions("bob")
    assert [t.category for t in bob] == ["Transport"]


def test_row_defaults_for_sparse_rows() -> None:
    t = row_to_transaction({"id": "r1", "created_at": "2024-03-01T10:00:00Z"})
    assert t.identity == "r1"
    assert t.kind == TransactionKind.INCOME
    assert t.amount == 0
    assert t.category == "Other"
    assert t.description == "Income"
    assert t.occurred_at.year == 2024


def test_json_store_survives_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "records.json"
    path.write_text("[broken")
    store = JsonRowStore(data_path=str(path))
    assert store._load() == {}


def test_personality_store_update_and_reload(tmp_path: Path) -> None:
    path = tmp_path / "personality.json"
    store = PersonalityStore(data_path=str(path))
    assert store.get().name == "ANITA"

    updated = store.update({"tone": "professional", "emoji_style": "minimal"})
    assert updated.tone == "professional"
    assert updated.name == "ANITA"

    reloaded = PersonalityStore(data_path=str(path))
    assert reloaded.get().tone == "professional"
    assert reloaded.get().emoji_style == "minimal"


def test_personality_store_rejects_bad_values(tmp_path: Path) -> None:
    store = PersonalityStore(data_path=str(tmp_path / "personality.json"))
    with pytest.raises(ValueError):
        store.update({"tone": "grumpy"})
    assert store.get().tone == "sassy"


@pytest.mark.anyio
async def test_unreadable_transaction_rows_are_skipped(repository: RecordRepository) -> None:
    await repository.save_transaction("alice", extract("salary 100"))
    await repository.store.insert(
        "finance_chat_data",
        [
            {
                "account_id": "alice",
                "data_type": "transaction",
                "message_id": "bad",
                "transaction_amount": "inf",
                "created_at": datetime.now().isoformat(),
            }
        ],
    )

    transactions = await repository.get_transactions("alice")
    assert [t.category for t in transactions] == ["Income"]
    everything = await repository.get_all("alice")
    assert len(everything["transactions"]) == 1
