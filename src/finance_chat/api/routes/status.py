import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends

from finance_chat.api.dependencies import get_assistant
from finance_chat.api.schemas import AssistantStatus
from finance_chat.services.assistant import ChatAssistant

router = APIRouter()


@router.get("/api/assistant/status", response_model=AssistantStatus)
async def assistant_status(
    assistant: Annotated[ChatAssistant, Depends(get_assistant)],
) -> AssistantStatus:
    connected = await asyncio.to_thread(assistant.test_connection)
    return AssistantStatus(enabled=assistant.enabled, model=assistant.model, connected=connected)
