import os
import random
from typing import Any

from openai import OpenAI

from finance_chat.classifiers.llm import extract_output_text
from finance_chat.core import settings
from finance_chat.logger import get_logger
from finance_chat.models import Message, ParsedTransaction, Personality, TransactionKind

logger = get_logger(__name__)

HISTORY_LIMIT = 10
RECENT_TRANSACTIONS = 5

EMOJI_USAGE = {
    "heavy": "frequently",
    "moderate": "moderately",
    "minimal": "sparingly",
}

INCOME_REPLIES = (
    'Nice! 💰 I\'ve added ${amount} income for "{description}" to your records. Keep that money flowing! 💅',
    'Awesome! 💚 ${amount} income from "{description}" has been recorded. You\'re doing great! ✨',
    'Perfect! 💸 I\'ve logged your ${amount} income for "{description}". Keep up the good work! 💪',
    'Excellent! 💰 Your ${amount} income from "{description}" is now tracked. Money moves! 🚀',
)

EXPENSE_REPLIES = (
    'Got it! 💸 I\'ve recorded ${amount} expense for "{description}". Let\'s keep track of those spending habits! 😉',
    'Noted! 💳 ${amount} spent on "{description}" has been logged. Stay mindful of your budget! 💭',
    'Recorded! 📝 I\'ve added your ${amount} expense for "{description}". Keep tracking! 📊',
    'Done! ✅ ${amount} expense for "{description}" is now in your records. Stay on top of it! 🎯',
)

GENERIC_REPLIES = (
    "Hey there! 💅 What's on your mind today? I can chat about anything or help track your money moves!",
    "What's the tea? ☕ Tell me about your day, ask me anything, or share your financial updates!",
    "Spill it! 💅 I'm here to chat about whatever you want - life, money, or just random thoughts!",
    "What's up? 💸 I can help with advice, answer questions, or track your transactions!",
    "Hey bestie! 💳 What's happening? I'm here for whatever you need!",
    "What's going on? 💰 I'm your AI friend who's great with money but loves all kinds of conversations!",
    "Let's chat! 📊 Tell me about your day, ask me anything, or share your money moves!",
    "What's new? 💅 I'm here to help with anything - from life advice to tracking your finances!",
)


def _format_amount(amount: float) -> str:
    return str(int(amount)) if amount.is_integer() else f"{amount:.2f}"


def build_system_prompt(personality: Personality, transactions: list[ParsedTransaction]) -> str:
    total_income = sum(t.amount for t in transactions if t.kind is TransactionKind.INCOME)
    total_expenses = sum(t.amount for t in transactions if t.kind is TransactionKind.EXPENSE)
    net_balance = total_income - total_expenses

    recent = ", ".join(
        f"{t.kind.value}: ${_format_amount(t.amount)} - {t.description} ({t.category})"
        for t in transactions[-RECENT_TRANSACTIONS:]
    )

    return f"""You are {personality.name}, a knowledgeable AI assistant with a special focus on personal finance. You're like a best friend who happens to be really good with money! Here's your personality and context:

PERSONALITY:
- Name: {personality.name}
- Tone: {personality.tone}
- Expertise: {", ".join(personality.expertise)} + general knowledge, life advice, and casual conversation
- Catchphrases: {", ".join(personality.catchphrases)}
- Emoji Style: {personality.emoji_style}
- Response Length: {personality.response_length}
- Financial Advice Style: {personality.financial_advice_style}

CURRENT FINANCIAL CONTEXT:
- Total Income: ${total_income:.2f}
- Total Expenses: ${total_expenses:.2f}
- Net Balance: ${net_balance:.2f}
- Recent Transactions: {recent or "None"}

RESPONSE GUIDELINES:
1. You can talk about anything, not just finance.
2. Keep your {personality.tone} personality in every reply.
3. When users mention financial transactions, they are tracked automatically; give insights on them.
4. Use your catchphrases naturally.
5. Keep responses {personality.response_length} and engaging.
6. Use emojis {EMOJI_USAGE[personality.emoji_style]}.
7. Be supportive and give practical advice when possible."""


class ChatAssistant:
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        rng: random.Random | None = None,
    ):
        self.rng = rng or random.Random()
        self.client: OpenAI | None = None
        self.configure(api_key, model, base_url, max_tokens, temperature)

    def configure(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> None:
        api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.model = model or os.getenv("OPENAI_MODEL") or settings.DEFAULT_OPENAI_MODEL
        self.max_tokens = max_tokens or settings.get_env_int(
            "OPENAI_MAX_TOKENS", settings.DEFAULT_MAX_TOKENS, min_value=1
        )
        self.temperature = (
            temperature
            if temperature is not None
            else settings.get_env_float("OPENAI_TEMPERATURE", settings.DEFAULT_TEMPERATURE)
        )
        if api_key:
            self.client = OpenAI(
                api_key=api_key,
                base_url=base_url or os.getenv("OPENAI_BASE_URL") or None,
            )
            logger.info(f"[CHAT] Assistant enabled: model={self.model}")
        else:
            self.client = None
            logger.warning("[CHAT] OPENAI_API_KEY not found. Assistant uses canned replies.")

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def test_connection(self) -> bool:
        if not self.client:
            return False
        try:
            response = self.client.responses.create(
                model=self.model,
                input="Hello! Just testing the connection.",
                max_output_tokens=50,
            )
        except Exception as e:
            logger.error(f"[CHAT] Connection test failed: {e}")
            return False
        return extract_output_text(response) is not None

    def fallback_reply(self, transaction: ParsedTransaction | None = None) -> str:
        if transaction is None:
            return self.rng.choice(GENERIC_REPLIES)
        templates = INCOME_REPLIES if transaction.kind is TransactionKind.INCOME else EXPENSE_REPLIES
        return self.rng.choice(templates).format(
            amount=_format_amount(transaction.amount),
            description=transaction.description,
        )

    def generate_reply(
        self,
        text: str,
        personality: Personality,
        transactions: list[ParsedTransaction],
        history: list[Message],
        detected: ParsedTransaction | None = None,
    ) -> str:
        if not self.client:
            return self.fallback_reply(detected)

        conversation: list[dict[str, Any]] = [
            {
                "role": "user" if message.sender == "user" else "assistant",
                "content": message.text,
            }
            for message in history[-HISTORY_LIMIT:]
        ]
        conversation.append({"role": "user", "content": text})

        try:
            response = self.client.responses.create(
                model=self.model,
                instructions=build_system_prompt(personality, transactions),
                input=conversation,
                max_output_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            logger.error(f"[CHAT] OpenAI error: {e}")
            return self.fallback_reply(detected)

        reply = extract_output_text(response)
        if not reply or not reply.strip():
            logger.warning("[CHAT] Empty completion, using fallback reply.")
            return self.fallback_reply(detected)
        return reply.strip()
