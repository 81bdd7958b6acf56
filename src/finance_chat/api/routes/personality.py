import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends

from finance_chat.api.dependencies import get_personality_store
from finance_chat.api.schemas import PersonalityUpdate
from finance_chat.models import Personality
from finance_chat.storage import PersonalityStore

router = APIRouter()


@router.get("/api/personality", response_model=Personality)
async def get_personality(
    store: Annotated[PersonalityStore, Depends(get_personality_store)],
) -> Personality:
    return store.get()


@router.put("/api/personality", response_model=Personality)
async def update_personality(
    update: PersonalityUpdate,
    store: Annotated[PersonalityStore, Depends(get_personality_store)],
) -> Personality:
    return await asyncio.to_thread(store.update, update.model_dump(exclude_none=True))
