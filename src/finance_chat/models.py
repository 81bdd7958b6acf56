from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class ParsedTransaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    identity: str
    kind: TransactionKind
    amount: float = Field(ge=0, allow_inf_nan=False)
    category: str
    description: str = Field(min_length=1)
    occurred_at: datetime


class Message(BaseModel):
    id: str
    text: str
    sender: Literal["user", "assistant"]
    timestamp: datetime
    transaction: Optional[ParsedTransaction] = None


class CategorizationResult(BaseModel):
    category: str
    confidence: float # 0.0 to 1.0
    source: str # "memory_exact", "memory_fuzzy", "llm"


class Personality(BaseModel):
    name: str = "ANITA"
    tone: Literal["sassy", "professional", "friendly", "motivational"] = "sassy"
    expertise: list[str] = Field(
        default_factory=lambda: [
            "personal finance",
            "budgeting",
            "expense tracking",
            "financial planning",
        ]
    )
    catchphrases: list[str] = Field(
        default_factory=lambda: [
            "💅",
            "Periodt!",
            "Let's get financial!",
            "Money moves!",
            "Spill the tea!",
        ]
    )
    emoji_style: Literal["heavy", "moderate", "minimal"] = "heavy"
    response_length: Literal["short", "medium", "long"] = "medium"
    financial_advice_style: Literal["conservative", "balanced", "aggressive"] = "balanced"


class MonthlyTotals(BaseModel):
    month: str
    income: float
    expenses: float


class FinancialSummary(BaseModel):
    total_income: float
    total_expenses: float
    net_balance: float
    month_income: float
    month_expenses: float
    savings_rate: int
    expense_by_category: dict[str, float]
    monthly: list[MonthlyTotals]


class ChatExchange(BaseModel):
    message: Message
    reply: Message
    transaction: Optional[ParsedTransaction] = None
