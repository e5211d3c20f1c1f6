import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from mockview.config import FRONTEND_URL, LOG_LEVEL, SESSION_SECRET_KEY
from mockview.database import init_db
from mockview.responses import (
    ApiError,
    api_error_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from mockview.routers import (
    auth_router,
    billing_router,
    feedback_router,
    interviewers_router,
    interviews_router,
    resume_router,
    stripe_router,
    transcripts_router,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="MockView API")

init_db()

app.add_exception_handler(ApiError, api_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(auth_router)
app.include_router(interviews_router)
app.include_router(feedback_router)
app.include_router(billing_router)
app.include_router(stripe_router)
app.include_router(interviewers_router)
app.include_router(transcripts_router)
app.include_router(resume_router)


def _strip_trailing_slash(value: str) -> str:
    return value[:-1] if value.endswith("/") else value


allowed_origins = [
    _strip_trailing_slash(FRONTEND_URL),
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# OAuth state for the Google login round trip
app.add_middleware(SessionMiddleware, secret_key=SESSION_SECRET_KEY)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "MockView API is running"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
