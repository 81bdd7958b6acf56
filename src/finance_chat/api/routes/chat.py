from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from finance_chat.api.dependencies import get_personality_store, get_pipeline, get_records
from finance_chat.api.schemas import AccountData, ChatRequest
from finance_chat.core import settings
from finance_chat.models import ChatExchange, Message
from finance_chat.services.chat import ChatPipeline
from finance_chat.services.records import RecordRepository
from finance_chat.storage import PersonalityStore

router = APIRouter()


@router.post("/api/chat", response_model=ChatExchange)
async def chat(
    req: ChatRequest,
    pipeline: Annotated[ChatPipeline, Depends(get_pipeline)],
    personality: Annotated[PersonalityStore, Depends(get_personality_store)],
) -> ChatExchange:
    if not req.text.strip():
        raise HTTPException(status_code=400, detail="Message text is empty")
    account_id = req.account_id or settings.get_account_id()
    return await pipeline.handle_message(account_id, req.text, personality.get())


@router.get("/api/messages", response_model=list[Message])
async def get_messages(
    records: Annotated[RecordRepository, Depends(get_records)],
    account_id: str | None = None,
) -> list[Message]:
    return await records.get_messages(account_id or settings.get_account_id())


@router.get("/api/data", response_model=AccountData)
async def get_data(
    records: Annotated[RecordRepository, Depends(get_records)],
    account_id: str | None = None,
) -> AccountData:
    data = await records.get_all(account_id or settings.get_account_id())
    return AccountData(**data)


@router.delete("/api/data")
async def clear_data(
    records: Annotated[RecordRepository, Depends(get_records)],
    account_id: str | None = None,
) -> dict[str, str]:
    account = account_id or settings.get_account_id()
    await records.clear(account)
    return {"status": "cleared", "account_id": account}
