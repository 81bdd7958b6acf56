from abc import ABC, abstractmethod

from finance_chat.models import CategorizationResult


class Classifier(ABC):
    @abstractmethod
    def classify(
        self, description: str, valid_categories: list[str] | None = None
    ) -> CategorizationResult | None:
        """Attempt to pick a category for a transaction description."""
        pass

    @abstractmethod
    def learn(self, description: str, category: str) -> None:
        """Learn from a new description-category pair."""
        pass
