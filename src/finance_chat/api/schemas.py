from typing import Literal

from pydantic import BaseModel, Field

from finance_chat.models import Message, ParsedTransaction


class ChatRequest(BaseModel):
    text: str
    account_id: str | None = None


class ParseRequest(BaseModel):
    text: str
    # Known category keywords for this call, e.g. {"Pets": ["vet"]}
    categories: dict[str, list[str]] | None = None


class LearnRequest(BaseModel):
    description: str = Field(min_length=1)
    category: str


class PersonalityUpdate(BaseModel):
    name: str | None = None
    tone: Literal["sassy", "professional", "friendly", "motivational"] | None = None
    expertise: list[str] | None = None
    catchphrases: list[str] | None = None
    emoji_style: Literal["heavy", "moderate", "minimal"] | None = None
    response_length: Literal["short", "medium", "long"] | None = None
    financial_advice_style: Literal["conservative", "balanced", "aggressive"] | None = None


class AccountData(BaseModel):
    messages: list[Message]
    transactions: list[ParsedTransaction]


class AssistantStatus(BaseModel):
    enabled: bool
    model: str
    connected: bool
