import os

from openai import OpenAI

from finance_chat.logger import get_logger
from finance_chat.models import CategorizationResult

from .base import Classifier

logger = get_logger(__name__)


def extract_output_text(response: object) -> str | None:
    output_text = getattr(response, "output_text", None)
    if output_text:
        return output_text

    output = getattr(response, "output", None)
    if not output:
        return None

    parts: list[str] = []
    for item in output:
        content = getattr(item, "content", None)
        if not content:
            continue
        for block in content:
            block_type = getattr(block, "type", None)
            if block_type in {"output_text", "text"}:
                text = getattr(block, "text", None)
                if text:
                    parts.append(text)

    if parts:
        return "".join(parts)
    return None


class LLMClassifier(Classifier):
    def __init__(self, api_key: str | None = None, model: str = "gpt-3.5-turbo", base_url: str | None = None):
        self.client = OpenAI(
            api_key=api_key or os.getenv("OPENAI_API_KEY"),
            base_url=base_url or os.getenv("OPENAI_BASE_URL") or None
        )
        self.model = model

    def classify(
        self, description: str, valid_categories: list[str] | None = None
    ) -> CategorizationResult | None:
        try:
            prompt_categories = ""
            if valid_categories:
                cats_str = ", ".join(valid_categories)
                prompt_categories = f"\nUse ONLY one of the following categories: {cats_str}"

            prompt = f"""
            Categorize this personal expense into a spending category.
            Expense: {description}
            {prompt_categories}

            Return ONLY the category name. If unsure, return 'Other'.
            """

            response = self.client.responses.create(
                model=self.model,
                instructions="You are a helpful financial assistant.",
                input=prompt,
                temperature=0.0
            )

            category_name = extract_output_text(response)
            if category_name is None:
                return None
            category_name = category_name.strip().strip(".")

            if valid_categories and category_name not in valid_categories:
                logger.debug(f"LLM answered '{category_name}', outside the allowed categories.")
                return None

            return CategorizationResult(
                category=category_name,
                confidence=0.9,
                source="llm"
            )
        except Exception as e:
            logger.error(f"LLM Error: {e}")
            return None

    def learn(self, description: str, category: str) -> None:
        # Corrections go to the memory matcher; the model is not tuned.
        pass
