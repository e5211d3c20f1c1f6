import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import JSONResponse

from mockview.dependencies import CurrentUser, get_current_user_optional
from mockview.services import llm
from mockview.services.resume_text import extract_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["resume"])

ROAST_FAILURE = "Failed to roast resume. Our AI critic is having a bad day!"


def roast_prompt(resume_text: str) -> str:
    return f"""You are a comedian and funny resume critic. In less than 60 words, roast this resume with humor. Be witty, sarcastic, but ultimately helpful. Point out obvious flaws, clichés, and areas for improvement in an entertaining way.
Resume content:
{resume_text}"""


@router.post("/resume-roaster")
async def roast_resume(
    resume: Optional[UploadFile] = File(None),
    current_user: Optional[CurrentUser] = Depends(get_current_user_optional),
):
    """Roast an uploaded resume (PDF, DOCX or plain text)."""
    if resume is None:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "No resume file provided"})

    try:
        content = await resume.read()
        resume_text = extract_text(content, resume.content_type or "", resume.filename or "")
    except Exception as e:
        logger.error("Could not read resume %s: %s", resume.filename, e)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Could not read resume file"})

    if not resume_text.strip():
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "File does not have any content"})

    try:
        roast = await llm.generate_text(roast_prompt(resume_text))
    except llm.LLMError as e:
        logger.error("Error roasting resume for %s: %s", current_user.id if current_user else "anonymous", e)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": ROAST_FAILURE})

    return {"roast": roast.strip()}
