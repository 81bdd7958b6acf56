from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import ValidationError

from finance_chat.extraction.keywords import FALLBACK_CATEGORY
from finance_chat.logger import get_logger
from finance_chat.models import Message, ParsedTransaction, TransactionKind
from finance_chat.storage import Row, RowStore

logger = get_logger(__name__)

MESSAGE = "message"
TRANSACTION = "transaction"


def parse_timestamp(value: str | datetime | None) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return datetime.now()
    return datetime.now()


def message_to_row(account_id: str, message: Message) -> Row:
    return {
        "account_id": account_id,
        "data_type": MESSAGE,
        "message_id": message.id,
        "message_text": message.text,
        "sender": message.sender,
        "created_at": message.timestamp.isoformat(),
    }


def transaction_to_row(account_id: str, transaction: ParsedTransaction) -> Row:
    return {
        "account_id": account_id,
        "data_type": TRANSACTION,
        "message_id": transaction.identity,
        "message_text": transaction.description,
        "transaction_type": transaction.kind.value,
        "transaction_amount": transaction.amount,
        "transaction_category": transaction.category,
        "transaction_description": transaction.description,
        "created_at": transaction.occurred_at.isoformat(),
    }


def row_to_message(row: Row) -> Message:
    sender = row.get("sender")
    return Message(
        id=str(row.get("message_id") or row.get("id") or ""),
        text=row.get("message_text") or "",
        sender=sender if sender in ("user", "assistant") else "user",
        timestamp=parse_timestamp(row.get("created_at")),
    )


def row_to_transaction(row: Row) -> ParsedTransaction:
    kind_value = row.get("transaction_type") or TransactionKind.INCOME.value
    try:
        kind = TransactionKind(kind_value)
    except ValueError:
        kind = TransactionKind.INCOME
    description = row.get("transaction_description") or ""
    return ParsedTransaction(
        identity=str(row.get("message_id") or row.get("id") or ""),
        kind=kind,
        amount=abs(float(row.get("transaction_amount") or 0)),
        category=row.get("transaction_category") or FALLBACK_CATEGORY,
        # Stored rows predate the non-empty rule
        description=description or kind.value.capitalize(),
        occurred_at=parse_timestamp(row.get("created_at")),
    )


def _load_transaction(row: Row) -> ParsedTransaction | None:
    try:
        return row_to_transaction(row)
    except (ValidationError, TypeError, ValueError) as exc:
        logger.warning("[STORE] Skipping malformed transaction row %s: %s", row.get("id"), exc)
        return None


class RecordRepository:
    """Messages and transactions of one table, keyed by account id."""

    def __init__(self, store: RowStore, table: str):
        self.store = store
        self.table = table

    async def save_message(self, account_id: str, message: Message) -> None:
        await self.store.insert(self.table, [message_to_row(account_id, message)])

    async def save_transaction(self, account_id: str, transaction: ParsedTransaction) -> None:
        await self.store.insert(self.table, [transaction_to_row(account_id, transaction)])

    async def _rows(self, account_id: str, data_type: str | None = None) -> list[Row]:
        filters = {"account_id": account_id}
        if data_type:
            filters["data_type"] = data_type
        return await self.store.select(self.table, filters, order_by="created_at")

    async def get_messages(self, account_id: str) -> list[Message]:
        return [row_to_message(row) for row in await self._rows(account_id, MESSAGE)]

    async def get_transactions(self, account_id: str) -> list[ParsedTransaction]:
        rows = await self._rows(account_id, TRANSACTION)
        return [t for t in map(_load_transaction, rows) if t is not None]

    async def get_all(self, account_id: str) -> dict[str, Any]:
        messages: list[Message] = []
        transactions: list[ParsedTransaction] = []
        for row in await self._rows(account_id):
            data_type = row.get("data_type")
            if data_type == MESSAGE:
                messages.append(row_to_message(row))
            elif data_type == TRANSACTION:
                transaction = _load_transaction(row)
                if transaction is not None:
                    transactions.append(transaction)
        return {"messages": messages, "transactions": transactions}

    async def clear(self, account_id: str) -> None:
        await self.store.delete(self.table, {"account_id": account_id})
        logger.info("[STORE] Cleared all records for account '%s'.", account_id)
