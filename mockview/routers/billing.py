import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from mockview.database import get_db
from mockview.dependencies import CurrentUser, get_current_user
from mockview.responses import ApiError, success
from mockview.schemas.billing import (
    AddCreditsRequest,
    CreditAdjustmentRequest,
    CreditsResponse,
    TransactionResponse,
)
from mockview.services import credits as credit_service
from mockview.services.credits import CreditError, InsufficientCreditsError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/billing", tags=["billing"])


@router.get("/credits")
async def get_credits(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success(CreditsResponse(credits=credit_service.get_balance(db, current_user.id)))


@router.post("/credits")
async def add_credits(
    payload: AddCreditsRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        balance = credit_service.add_credits(db, current_user.id, payload.credits, payload.source)
    except CreditError as e:
        logger.error("Add credits error: %s", e)
        raise ApiError("Failed to add credits")
    return success(CreditsResponse(credits=balance))


@router.post("/deduct")
async def deduct_credits(
    payload: CreditAdjustmentRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Charge credits when an interview call starts."""
    try:
        balance = credit_service.deduct_credits(db, current_user.id, payload.amount, payload.interview_id)
    except InsufficientCreditsError:
        raise ApiError("Insufficient credits", "INSUFFICIENT", status.HTTP_402_PAYMENT_REQUIRED)
    except CreditError as e:
        logger.error("Deduction error: %s", e)
        raise ApiError("Failed to deduct credits")
    return success(CreditsResponse(credits=balance))


@router.post("/refund")
async def refund_credits(
    payload: CreditAdjustmentRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        balance = credit_service.refund_credits(db, current_user.id, payload.amount, payload.interview_id)
    except CreditError as e:
        logger.error("Refund error: %s", e)
        raise ApiError("Failed to refund credits")
    return success(CreditsResponse(credits=balance))


@router.get("/transactions")
async def list_transactions(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    transactions = credit_service.list_transactions(db, current_user.id)
    return success([
        TransactionResponse(
            id=t.id,
            user_id=t.user_id,
            type=t.transaction_type,
            amount=t.amount,
            description=t.description,
            created_at=t.created_at,
        )
        for t in transactions
    ])
