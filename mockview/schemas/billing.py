from datetime import datetime
from typing import Optional

from pydantic import Field

from mockview.schemas.base import CamelModel


class AddCreditsRequest(CamelModel):
    credits: int = Field(gt=0)
    source: str = "manual_topup"


class CreditAdjustmentRequest(CamelModel):
    amount: int = Field(gt=0)
    interview_id: Optional[str] = None


class CreditsResponse(CamelModel):
    credits: int


class TransactionResponse(CamelModel):
    id: int
    user_id: str
    type: str
    amount: int
    description: Optional[str]
    created_at: datetime


class CheckoutRequest(CamelModel):
    credits: int = Field(ge=1, le=1000)


class TestWebhookRequest(CamelModel):
    user_id: str = Field(min_length=1)
    credits: int = Field(gt=0)
