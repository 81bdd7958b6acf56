import random
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from finance_chat.extraction.extractor import TransactionExtractor
from finance_chat.manager import CategorizerService
from finance_chat.models import Personality, TransactionKind
from finance_chat.services.assistant import ChatAssistant
from finance_chat.services.chat import ChatPipeline
from finance_chat.services.records import RecordRepository
from finance_chat.storage import JsonRowStore


@pytest.fixture
def pipeline(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ChatPipeline:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    records = RecordRepository(
        store=JsonRowStore(data_path=str(tmp_path / "records.json")),
        table="finance_chat_data",
    )
    return ChatPipeline(
        extractor=TransactionExtractor(),
        service=CategorizerService(data_dir=str(tmp_path)),
        assistant=ChatAssistant(rng=random.Random(0)),
        records=records,
    )


@pytest.mark.anyio
async def test_chat_turn_records_transaction(pipeline: ChatPipeline) -> None:
    exchange = await pipeline.handle_message("alice", "spent 12.50 on lunch", Personality())

    assert exchange.transaction is not None
    assert exchange.transaction.kind == TransactionKind.EXPENSE
    assert exchange.message.transaction == exchange.transaction
    assert exchange.reply.sender == "assistant"
    assert "lunch" in exchange.reply.text

    messages = await pipeline.records.get_messages("alice")
    assert [m.sender for m in messages] == ["user", "assistant"]
    transactions = await pipeline.records.get_transactions("alice")
    assert [t.category for t in transactions] == ["Food"]


@pytest.mark.anyio
async def test_chat_turn_without_transaction(pipeline: ChatPipeline) -> None:
    exchange = await pipeline.handle_message("alice", "how are you?", Personality())

    assert exchange.transaction is None
    assert await pipeline.records.get_transactions("alice") == []


@pytest.mark.anyio
async def test_learned_category_applies_to_next_turn(pipeline: ChatPipeline) -> None:
    pipeline.service.learn("vet visit", "Healthcare")

    exchange = await pipeline.handle_message("alice", "paid 80 for vet visit", Personality())

    assert exchange.transaction is not None
    assert exchange.transaction.category == "Healthcare"


@pytest.mark.anyio
async def test_reply_gets_prior_history_and_transactions(pipeline: ChatPipeline) -> None:
    await pipeline.handle_message("alice", "salary 1000", Personality())

    pipeline.assistant = MagicMock()
    pipeline.assistant.generate_reply.return_value = "ok"
    await pipeline.handle_message("alice", "spent 5 on taxi", Personality(tone="friendly"))

    args = pipeline.assistant.generate_reply.call_args.args
    text, personality, transactions, history, detected = args
    assert text == "spent 5 on taxi"
    assert personality.tone == "friendly"
    assert [t.amount for t in transactions] == [1000, 5]
    assert [m.text for m in history][0] == "salary 1000"
    assert len(history) == 2
    assert detected.category == "Transport"


@pytest.mark.anyio
async def test_blank_text_is_rejected(pipeline: ChatPipeline) -> None:
    with pytest.raises(ValueError):
        await pipeline.handle_message("alice", "   ", Personality())
