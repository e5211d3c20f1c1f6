from mockview.models.user import User
from mockview.models.interview import (
    InterviewKV,
    UserInterview,
    Feedback,
    InterviewSession,
    UserFeedbackRating,
)
from mockview.models.interviewer import CustomInterviewer
from mockview.models.billing import Transaction

__all__ = [
    "User",
    "InterviewKV",
    "UserInterview",
    "Feedback",
    "InterviewSession",
    "UserFeedbackRating",
    "CustomInterviewer",
    "Transaction",
]
