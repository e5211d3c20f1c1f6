"""Resume roaster tests."""
from mockview.services import resume_text
from mockview.services.llm import LLMError

RESUME = b"Jane Doe\nSynergy-driven ninja rockstar.\nReferences available upon request."


def test_extract_text_plain():
    assert resume_text.extract_text(RESUME, "text/plain", "cv.txt").startswith("Jane Doe")


def test_extract_text_dispatches_on_extension(monkeypatch):
    monkeypatch.setattr(resume_text, "extract_text_from_pdf", lambda content: "pdf text")
    monkeypatch.setattr(resume_text, "extract_text_from_docx", lambda content: "docx text")

    assert resume_text.extract_text(b"", "application/octet-stream", "CV.PDF") == "pdf text"
    assert resume_text.extract_text(b"", "", "cv.docx") == "docx text"
    assert resume_text.extract_text(b"", resume_text.PDF_TYPE) == "pdf text"


def test_roast_resume(anon_client, fake_llm):
    fake_llm.queue("  Your resume has more buzzwords than a startup pitch.  ")

    response = anon_client.post(
        "/api/resume-roaster",
        files={"resume": ("cv.txt", RESUME, "text/plain")},
    )

    assert response.status_code == 200
    assert response.json() == {"roast": "Your resume has more buzzwords than a startup pitch."}
    assert "Synergy-driven ninja rockstar." in fake_llm.prompts[0]


def test_roast_requires_file(anon_client):
    response = anon_client.post("/api/resume-roaster")

    assert response.status_code == 400
    assert response.json() == {"error": "No resume file provided"}


def test_roast_empty_file(anon_client, fake_llm):
    response = anon_client.post(
        "/api/resume-roaster",
        files={"resume": ("cv.txt", b"   \n", "text/plain")},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "File does not have any content"}
    assert fake_llm.prompts == []


def test_roast_unreadable_pdf(anon_client, fake_llm):
    response = anon_client.post(
        "/api/resume-roaster",
        files={"resume": ("cv.pdf", b"definitely not a pdf", "application/pdf")},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Could not read resume file"}


def test_roast_model_failure(anon_client, fake_llm):
    fake_llm.queue(LLMError("Service temporarily unavailable"))

    response = anon_client.post(
        "/api/resume-roaster",
        files={"resume": ("cv.txt", RESUME, "text/plain")},
    )

    assert response.status_code == 500
    assert "bad day" in response.json()["error"]
