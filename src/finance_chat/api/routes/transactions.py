import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from finance_chat.api.dependencies import get_extractor, get_records, get_service
from finance_chat.api.schemas import LearnRequest, ParseRequest
from finance_chat.core import settings
from finance_chat.domain.summary import build_summary
from finance_chat.extraction.extractor import TransactionExtractor
from finance_chat.extraction.keywords import build_tables
from finance_chat.manager import CategorizerService
from finance_chat.models import FinancialSummary, ParsedTransaction
from finance_chat.services.records import RecordRepository

router = APIRouter()


@router.post("/api/parse", response_model=ParsedTransaction | None)
async def parse_text(
    req: ParseRequest,
    extractor: Annotated[TransactionExtractor, Depends(get_extractor)],
) -> ParsedTransaction | None:
    if req.categories:
        extractor = TransactionExtractor(build_tables(req.categories, extractor.tables))
    return extractor.extract(req.text)


@router.get("/api/transactions", response_model=list[ParsedTransaction])
async def get_transactions(
    records: Annotated[RecordRepository, Depends(get_records)],
    account_id: str | None = None,
) -> list[ParsedTransaction]:
    return await records.get_transactions(account_id or settings.get_account_id())


@router.get("/api/summary", response_model=FinancialSummary)
async def get_summary(
    records: Annotated[RecordRepository, Depends(get_records)],
    account_id: str | None = None,
) -> FinancialSummary:
    transactions = await records.get_transactions(account_id or settings.get_account_id())
    return build_summary(transactions)


@router.get("/api/categories")
async def get_categories(
    service: Annotated[CategorizerService, Depends(get_service)],
) -> list[str]:
    return service.valid_categories()


@router.post("/api/learn")
async def learn(
    req: LearnRequest,
    service: Annotated[CategorizerService, Depends(get_service)],
) -> dict[str, str]:
    try:
        await asyncio.to_thread(service.learn, req.description, req.category)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"status": "learned", "description": req.description, "category": req.category}
