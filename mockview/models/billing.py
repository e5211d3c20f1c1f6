from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from mockview.database import Base


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    transaction_type = Column(String(10), nullable=False)  # CREDIT, DEBIT
    amount = Column(Integer, nullable=False)
    description = Column(String(255), nullable=True)
    source = Column(String(50), nullable=True)  # stripe_payment, manual_topup, interview, refund, ...
    interview_id = Column(String(36), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="transactions")
