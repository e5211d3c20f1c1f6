import asyncio
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from mockview.database import get_db
from mockview.dependencies import CurrentUser, get_current_user
from mockview.models.interview import InterviewSession
from mockview.responses import ApiError
from mockview.services import vapi
from mockview.services.transcript_pdf import render_transcript_pdf
from mockview.services.vapi import VapiError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/transcript", tags=["transcripts"])


@router.get("/{call_id}")
async def download_transcript(
    call_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Download a call transcript as a PDF."""
    owned = db.query(InterviewSession).filter(
        InterviewSession.user_id == current_user.id,
        InterviewSession.vapi_call_id == call_id,
    ).first()
    if not owned:
        raise ApiError.forbidden("Forbidden: Call ID does not belong to this user")

    try:
        call = await vapi.fetch_call(call_id)
    except VapiError as e:
        logger.error("Error fetching transcript for %s: %s", call_id, e)
        raise ApiError(str(e), "TRANSCRIPT_FETCH_ERROR", e.status_code, e.body)

    pdf_bytes = await asyncio.to_thread(render_transcript_pdf, call.get("transcript"))

    return Response(
        content=pdf_bytes,
        status_code=status.HTTP_200_OK,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="transcript-{call_id}.pdf"'},
    )
