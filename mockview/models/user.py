from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from mockview.database import Base


class User(Base):
    __tablename__ = "users"

    # Matches the Supabase auth user id
    id = Column(String(36), primary_key=True, index=True)
    # Phone and anonymous Supabase sign-ins carry no email
    email = Column(String(255), unique=True, index=True, nullable=True)
    full_name = Column(String(255), nullable=False)

    # Billing
    credits = Column(Integer, default=0, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    interviews = relationship(
        "UserInterview", back_populates="user", cascade="all, delete-orphan"
    )
    custom_interviewers = relationship(
        "CustomInterviewer", back_populates="user", cascade="all, delete-orphan"
    )
    transactions = relationship(
        "Transaction", back_populates="user", cascade="all, delete-orphan"
    )
