from mockview.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    RefreshTokenRequest,
    UserResponse,
    SessionResponse,
    AuthResponse,
)
from mockview.schemas.interview import (
    CreateInterviewRequest,
    QuickCreateRequest,
    GeneratedInterview,
    InterviewCard,
    FeedbackRequest,
    FeedbackResponse,
)
from mockview.schemas.billing import TransactionResponse, CreditsResponse
from mockview.schemas.interviewer import CustomInterviewerResponse

__all__ = [
    "LoginRequest",
    "RegisterRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "RefreshTokenRequest",
    "UserResponse",
    "SessionResponse",
    "AuthResponse",
    "CreateInterviewRequest",
    "QuickCreateRequest",
    "GeneratedInterview",
    "InterviewCard",
    "FeedbackRequest",
    "FeedbackResponse",
    "TransactionResponse",
    "CreditsResponse",
    "CustomInterviewerResponse",
]
