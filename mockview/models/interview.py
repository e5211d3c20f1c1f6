import uuid
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from mockview.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class InterviewKV(Base):
    """Generated question sets shared between users, keyed by content hash."""

    __tablename__ = "interviews_kv"

    key = Column(String(512), primary_key=True)
    # {jobTitle, jobDescription, type, experienceLevel, questions, companyName?}
    value = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user_interviews = relationship("UserInterview", back_populates="kv")


class UserInterview(Base):
    __tablename__ = "user_interviews"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    interview_kv_key = Column(String(512), ForeignKey("interviews_kv.key"), nullable=False)

    status = Column(String(20), default="generated", nullable=False)  # generated, completed
    score = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="interviews")
    kv = relationship("InterviewKV", back_populates="user_interviews")
    feedback = relationship(
        "Feedback", back_populates="interview", cascade="all, delete-orphan"
    )
    sessions = relationship(
        "InterviewSession", back_populates="interview", cascade="all, delete-orphan"
    )


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True)
    interview_id = Column(String(36), ForeignKey("user_interviews.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    interview_kv_key = Column(String(512), nullable=True)
    attempt_number = Column(Integer, default=1, nullable=False)

    total_score = Column(Integer, nullable=False)
    question_analysis = Column(JSON, nullable=True)
    strengths = Column(JSON, nullable=True)
    areas_for_improvement = Column(JSON, nullable=True)
    final_assessment = Column(Text, nullable=True)

    interview_title = Column(String(255), nullable=True)
    type = Column(String(50), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    interview = relationship("UserInterview", back_populates="feedback")


class InterviewSession(Base):
    """A voice call started for an interview."""

    __tablename__ = "interview_sessions"

    id = Column(Integer, primary_key=True, index=True)
    interview_id = Column(String(36), ForeignKey("user_interviews.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    vapi_call_id = Column(String(255), nullable=False, index=True)
    started_at = Column(DateTime, default=datetime.utcnow)

    interview = relationship("UserInterview", back_populates="sessions")


class UserFeedbackRating(Base):
    """Ratings users leave about the product after an interview."""

    __tablename__ = "users_feedback_and_ratings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    user_email = Column(String(255), nullable=True)
    interview_id = Column(String(255), nullable=False)
    rating = Column(Integer, nullable=False)
    feedback = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
