import json
import os
from typing import Dict, List, Optional

from rapidfuzz import fuzz, process

from finance_chat.logger import get_logger
from finance_chat.models import CategorizationResult

from .base import Classifier

logger = get_logger(__name__)


class MemoryMatcher(Classifier):
    def __init__(self, data_path: str = "memory.json", threshold: float = 90.0):
        self.data_path = data_path
        self.threshold = threshold
        self.memory: Dict[str, str] = {} # normalized description -> category name
        self.load()

    @staticmethod
    def _key(description: str) -> str:
        return " ".join(description.lower().split())

    def load(self):
        if os.path.exists(self.data_path):
            try:
                with open(self.data_path, "r", encoding="utf-8") as f:
                    self.memory = json.load(f)
            except json.JSONDecodeError:
                logger.warning(f"Corrupt memory file {self.data_path}, starting empty.")
                self.memory = {}

    def save(self):
        with open(self.data_path, "w", encoding="utf-8") as f:
            json.dump(self.memory, f, indent=2)

    def classify(self, description: str, valid_categories: Optional[List[str]] = None) -> Optional[CategorizationResult]:
        if not self.memory or not description.strip():
            return None

        def is_valid(cat_name):
            if valid_categories is None:
                return True
            return cat_name in valid_categories

        key = self._key(description)

        # 1. Exact match
        if key in self.memory:
            category_name = self.memory[key]
            if is_valid(category_name):
                return CategorizationResult(
                    category=category_name,
                    confidence=1.0,
                    source="memory_exact"
                )

        # 2. Fuzzy match
        result = process.extractOne(
            key,
            self.memory.keys(),
            scorer=fuzz.token_sort_ratio
        )

        if result:
            match_description, score, _ = result
            if score >= self.threshold:
                category_name = self.memory[match_description]
                if is_valid(category_name):
                    return CategorizationResult(
                        category=category_name,
                        confidence=score / 100.0,
                        source="memory_fuzzy"
                    )

        return None

    def learn(self, description: str, category: str):
        self.memory[self._key(description)] = category
        self.save()

    def clear(self):
        self.memory = {}
        self.save()
