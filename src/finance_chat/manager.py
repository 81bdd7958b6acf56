import os

from finance_chat.classifiers.base import Classifier
from finance_chat.classifiers.llm import LLMClassifier
from finance_chat.classifiers.memory import MemoryMatcher
from finance_chat.core import settings
from finance_chat.extraction.extractor import EXPENSE_DESCRIPTION
from finance_chat.extraction.keywords import DEFAULT_TABLES, FALLBACK_CATEGORY, KeywordTables
from finance_chat.logger import get_logger
from finance_chat.models import CategorizationResult, ParsedTransaction, TransactionKind

logger = get_logger(__name__)


class CategorizerService:
    """
    Second opinion for expenses the keyword tables leave in ``Other``.

    Classifiers run in priority order: learned memory first, then the LLM when
    an API key is configured. Answers are restricted to the closed category set.
    """

    def __init__(self,
                 memory_threshold: float = 90.0,
                 data_dir: str = ".",
                 tables: KeywordTables = DEFAULT_TABLES):

        self.tables = tables
        self.classifiers: list[Classifier] = []

        # 1. Memory Matcher (Highest priority)
        self.memory = MemoryMatcher(
            data_path=os.path.join(data_dir, "memory.json"),
            threshold=memory_threshold
        )
        self.classifiers.append(self.memory)

        # 2. LLM Classifier (Fallback)
        self.llm: LLMClassifier | None = None
        self._configure_llm()

    def _configure_llm(self) -> None:
        api_key = os.getenv("OPENAI_API_KEY")
        if api_key:
            model = os.getenv("OPENAI_MODEL", settings.DEFAULT_OPENAI_MODEL)
            base_url = os.getenv("OPENAI_BASE_URL")
            self.llm = LLMClassifier(api_key=api_key, model=model, base_url=base_url)
            self.classifiers.append(self.llm)
            logger.info(f"LLM Classifier enabled: model={model}, base_url={base_url or 'default'}")
        else:
            self.llm = None
            logger.warning("OPENAI_API_KEY not found. LLM classifier disabled.")

    def valid_categories(self) -> list[str]:
        return self.tables.category_names()

    def categorize(self, description: str) -> CategorizationResult | None:
        valid_categories = self.valid_categories()
        for classifier in self.classifiers:
            classifier_name = classifier.__class__.__name__
            logger.debug(f"Trying {classifier_name} for: '{description[:50]}...'")

            result = classifier.classify(description, valid_categories=valid_categories)

            if result:
                logger.debug(
                    f"{classifier_name} returned: '{result.category}' "
                    f"(confidence: {result.confidence:.2f})"
                )
                return result
            else:
                logger.debug(f"{classifier_name} returned: None")

        logger.debug(f"No classifier matched for: '{description[:50]}...'")
        return None

    def refine(self, transaction: ParsedTransaction) -> ParsedTransaction:
        """
        Return ``transaction`` with a better category when one can be found.

        Only expenses still in ``Other`` with a real description are touched.
        """
        if transaction.kind is not TransactionKind.EXPENSE:
            return transaction
        if transaction.category != FALLBACK_CATEGORY:
            return transaction
        if transaction.description == EXPENSE_DESCRIPTION:
            return transaction

        result = self.categorize(transaction.description)
        if not result or result.category == FALLBACK_CATEGORY:
            return transaction

        logger.info(
            f"Refined '{transaction.description}' to {result.category} via {result.source}"
        )
        return transaction.model_copy(update={"category": result.category})

    def learn(self, description: str, category: str) -> None:
        if category not in self.valid_categories():
            raise ValueError(f"Unknown category '{category}'")
        self.memory.learn(description, category)

    def clear_models(self) -> None:
        """
        Clear all local training data.
        """
        self.memory.clear()
        logger.info("All models cleared.")
