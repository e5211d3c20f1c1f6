"""Transcript PDF download tests with Vapi patched out."""
import pytest

from mockview.models import InterviewSession
from mockview.services import vapi
from mockview.services.transcript_pdf import render_transcript_pdf, transcript_lines
from mockview.services.vapi import VapiError

from tests.conftest import USER_ID
from tests.test_interviews import make_interview


@pytest.fixture
def owned_call(db):
    interview = make_interview(db)
    db.add(InterviewSession(interview_id=interview.id, user_id=USER_ID, vapi_call_id="call-1"))
    db.commit()
    return "call-1"


def test_transcript_lines_from_entries():
    transcript = {"entries": [{"speaker": "AI", "text": "Hello"}, {"text": "Hi"}, "junk"]}

    assert transcript_lines(transcript) == ["[AI] Hello", "[unknown] Hi"]


def test_transcript_lines_from_text():
    assert transcript_lines("AI: Hello\nUser: Hi") == ["AI: Hello", "User: Hi"]


@pytest.mark.parametrize("transcript", [None, "", "   ", {"entries": "nope"}])
def test_transcript_lines_fallback(transcript):
    assert transcript_lines(transcript) == ["No transcript available."]


def test_render_long_transcript_spans_pages():
    pdf = render_transcript_pdf("\n".join(f"User: answer number {i}" for i in range(200)))

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > len(render_transcript_pdf(None))


def test_download_transcript(client, owned_call, monkeypatch):
    async def fetch_call(call_id):
        assert call_id == "call-1"
        return {"id": call_id, "transcript": "AI: Welcome\nUser: Thanks"}

    monkeypatch.setattr(vapi, "fetch_call", fetch_call)

    response = client.get("/api/transcript/call-1")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == 'attachment; filename="transcript-call-1.pdf"'
    assert response.content.startswith(b"%PDF")


def test_download_transcript_of_unowned_call(client, monkeypatch):
    async def fetch_call(call_id):
        raise AssertionError("Vapi should not be called")

    monkeypatch.setattr(vapi, "fetch_call", fetch_call)

    response = client.get("/api/transcript/someone-elses-call")

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


def test_download_transcript_vapi_error(client, owned_call, monkeypatch):
    async def fetch_call(call_id):
        raise VapiError("Failed to fetch transcript from Vapi", 404, '{"message":"Not Found"}')

    monkeypatch.setattr(vapi, "fetch_call", fetch_call)

    response = client.get("/api/transcript/call-1")

    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == "TRANSCRIPT_FETCH_ERROR"
    assert error["details"] == '{"message":"Not Found"}'
