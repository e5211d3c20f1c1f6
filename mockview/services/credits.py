"""Credit balance and ledger updates.

Each operation updates ``users.credits`` and writes a ``transactions`` row in
the same commit, so the balance always matches the ledger.
"""

import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from mockview.models.billing import Transaction
from mockview.models.user import User

logger = logging.getLogger(__name__)

_DESCRIPTIONS = {
    "stripe_payment": "Credits purchased",
    "manual_topup": "Manual top-up",
    "test_webhook": "Test credits",
}


class CreditError(Exception):
    pass


class InsufficientCreditsError(CreditError):
    def __init__(self, balance: int, requested: int):
        super().__init__("Insufficient credits")
        self.balance = balance
        self.requested = requested


class UnknownUserError(CreditError):
    pass


def _check_amount(amount: int) -> None:
    if not isinstance(amount, int) or amount <= 0:
        raise CreditError("Amount must be a positive integer")


def get_balance(db: Session, user_id: str) -> int:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UnknownUserError(f"User {user_id} not found")
    return user.credits or 0


def _record(db: Session, user_id: str, kind: str, amount: int, description: str,
            source: Optional[str], interview_id: Optional[str]) -> int:
    db.add(
        Transaction(
            user_id=user_id,
            transaction_type=kind,
            amount=amount,
            description=description,
            source=source,
            interview_id=interview_id,
        )
    )
    db.commit()
    return get_balance(db, user_id)


def add_credits(db: Session, user_id: str, amount: int, source: str = "manual_topup") -> int:
    """Add credits and return the new balance."""
    _check_amount(amount)
    result = db.execute(
        update(User)
        .where(User.id == user_id)
        .values(credits=User.credits + amount)
    )
    if result.rowcount == 0:
        db.rollback()
        raise UnknownUserError(f"User {user_id} not found")

    balance = _record(
        db, user_id, "CREDIT", amount,
        _DESCRIPTIONS.get(source, f"Credits added ({source})"), source, None,
    )
    logger.info("Added %d credits to %s from %s (balance %d)", amount, user_id, source, balance)
    return balance


def deduct_credits(db: Session, user_id: str, amount: int, interview_id: Optional[str] = None) -> int:
    """Take credits for an interview and return the new balance.

    The balance check and decrement happen in one UPDATE, so concurrent
    deductions cannot overdraw the account.
    """
    _check_amount(amount)
    result = db.execute(
        update(User)
        .where(User.id == user_id, User.credits >= amount)
        .values(credits=User.credits - amount)
    )
    if result.rowcount == 0:
        db.rollback()
        balance = get_balance(db, user_id)
        raise InsufficientCreditsError(balance, amount)

    return _record(db, user_id, "DEBIT", amount, "Interview started", "interview", interview_id)


def refund_credits(db: Session, user_id: str, amount: int, interview_id: Optional[str] = None) -> int:
    """Return credits for an interview that did not go ahead."""
    _check_amount(amount)
    result = db.execute(
        update(User)
        .where(User.id == user_id)
        .values(credits=User.credits + amount)
    )
    if result.rowcount == 0:
        db.rollback()
        raise UnknownUserError(f"User {user_id} not found")

    return _record(db, user_id, "CREDIT", amount, "Interview refund", "refund", interview_id)


def list_transactions(db: Session, user_id: str) -> list[Transaction]:
    return (
        db.query(Transaction)
        .filter(Transaction.user_id == user_id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .all()
    )
