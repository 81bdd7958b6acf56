import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from finance_chat.api.routes import chat, personality, status, transactions
from finance_chat.core import settings
from finance_chat.extraction.extractor import TransactionExtractor
from finance_chat.extraction.keywords import build_tables
from finance_chat.integration.supabase import SupabaseClient
from finance_chat.logger import get_logger, setup_logging
from finance_chat.manager import CategorizerService
from finance_chat.services.assistant import ChatAssistant
from finance_chat.services.chat import ChatPipeline
from finance_chat.services.records import RecordRepository
from finance_chat.storage import JsonRowStore, PersonalityStore, RowStore

logger = get_logger(__name__)


def build_row_store() -> RowStore:
    supabase = SupabaseClient()
    if supabase.is_configured:
        logger.info("[STORE] Using Supabase at %s.", supabase.base_url)
        return supabase
    logger.info("[STORE] SUPABASE_URL or SUPABASE_KEY not set. Using local JSON records.")
    return JsonRowStore(data_path=os.path.join(settings.DATA_DIR, "records.json"))


def create_app() -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing services...")
        settings.log_environment()

        extractor = TransactionExtractor(build_tables(settings.get_category_keywords()))
        service = CategorizerService(
            memory_threshold=settings.get_env_float(
                "MEMORY_THRESHOLD", settings.DEFAULT_MEMORY_THRESHOLD
            ),
            data_dir=settings.DATA_DIR,
            tables=extractor.tables,
        )
        assistant = ChatAssistant()
        store = build_row_store()
        records = RecordRepository(store=store, table=settings.get_table_name())

        app.state.extractor = extractor
        app.state.service = service
        app.state.assistant = assistant
        app.state.records = records
        app.state.personality = PersonalityStore(
            data_path=os.path.join(settings.DATA_DIR, "personality.json")
        )
        app.state.pipeline = ChatPipeline(
            extractor=extractor,
            service=service,
            assistant=assistant,
            records=records,
        )

        logger.info("Services initialized.")
        yield
        await store.aclose()
        logger.info("Service shutting down.")

    app = FastAPI(title="Finance Chat", lifespan=lifespan)

    app.include_router(chat.router)
    app.include_router(transactions.router)
    app.include_router(personality.router)
    app.include_router(status.router)

    return app


app = create_app()
