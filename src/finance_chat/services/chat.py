import asyncio
import uuid
from datetime import datetime

from finance_chat.extraction.extractor import TransactionExtractor
from finance_chat.logger import get_logger
from finance_chat.manager import CategorizerService
from finance_chat.models import ChatExchange, Message, ParsedTransaction, Personality
from finance_chat.services.assistant import ChatAssistant
from finance_chat.services.records import RecordRepository

logger = get_logger(__name__)


def _new_message(text: str, sender: str, transaction: ParsedTransaction | None = None) -> Message:
    return Message(
        id=uuid.uuid4().hex,
        text=text,
        sender=sender,
        timestamp=datetime.now(),
        transaction=transaction,
    )


class ChatPipeline:
    def __init__(
        self,
        extractor: TransactionExtractor,
        service: CategorizerService,
        assistant: ChatAssistant,
        records: RecordRepository,
    ) -> None:
        self.extractor = extractor
        self.service = service
        self.assistant = assistant
        self.records = records

    async def detect(self, text: str) -> ParsedTransaction | None:
        transaction = self.extractor.extract(text)
        if transaction is None:
            return None
        return await asyncio.to_thread(self.service.refine, transaction)

    async def handle_message(
        self,
        account_id: str,
        text: str,
        personality: Personality,
    ) -> ChatExchange:
        if not text or not text.strip():
            raise ValueError("Message text is empty.")

        # History is read before this turn is stored
        history = await self.records.get_messages(account_id)

        transaction = await self.detect(text)
        message = _new_message(text, "user", transaction)
        await self.records.save_message(account_id, message)

        if transaction:
            logger.info(
                "[CHAT] Recorded %s of %.2f (%s) for account '%s'.",
                transaction.kind.value,
                transaction.amount,
                transaction.category,
                account_id,
            )
            await self.records.save_transaction(account_id, transaction)

        transactions = await self.records.get_transactions(account_id)
        reply_text = await asyncio.to_thread(
            self.assistant.generate_reply,
            text,
            personality,
            transactions,
            history,
            transaction,
        )
        reply = _new_message(reply_text, "assistant")
        await self.records.save_message(account_id, reply)

        return ChatExchange(message=message, reply=reply, transaction=transaction)
