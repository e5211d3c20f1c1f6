from mockview.routers.auth import router as auth_router
from mockview.routers.interviews import router as interviews_router
from mockview.routers.feedback import router as feedback_router
from mockview.routers.billing import router as billing_router
from mockview.routers.stripe_billing import router as stripe_router
from mockview.routers.interviewers import router as interviewers_router
from mockview.routers.transcripts import router as transcripts_router
from mockview.routers.resume import router as resume_router

__all__ = [
    "auth_router",
    "interviews_router",
    "feedback_router",
    "billing_router",
    "stripe_router",
    "interviewers_router",
    "transcripts_router",
    "resume_router",
]
