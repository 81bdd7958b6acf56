from fastapi import HTTPException, Request

from finance_chat.extraction.extractor import TransactionExtractor
from finance_chat.manager import CategorizerService
from finance_chat.services.assistant import ChatAssistant
from finance_chat.services.chat import ChatPipeline
from finance_chat.services.records import RecordRepository
from finance_chat.storage import PersonalityStore


def _require(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if not value:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return value


def get_extractor(request: Request) -> TransactionExtractor:
    return _require(request, "extractor")


def get_service(request: Request) -> CategorizerService:
    return _require(request, "service")


def get_records(request: Request) -> RecordRepository:
    return _require(request, "records")


def get_pipeline(request: Request) -> ChatPipeline:
    return _require(request, "pipeline")


def get_personality_store(request: Request) -> PersonalityStore:
    return _require(request, "personality")


def get_assistant(request: Request) -> ChatAssistant:
    return _require(request, "assistant")
