"""Custom interviewer tests with ElevenLabs patched out."""
import json

import pytest
from sqlalchemy.exc import SQLAlchemyError

from mockview.models import CustomInterviewer
from mockview.services import elevenlabs
from mockview.services.elevenlabs import VoiceServiceError

from tests.conftest import OTHER_USER_ID, USER_ID

FORM = {
    "name": "Ada",
    "title": "Staff Engineer",
    "description": "Asks about distributed systems.",
    "specialties": json.dumps(["technical", "system design"]),
    "experience": "15 years",
}


def voice_files(count=4):
    return {f"voicePrompt{i}": (f"prompt{i}.webm", b"RIFF....", "audio/webm") for i in range(count)}


@pytest.fixture
def voices(monkeypatch):
    state = {"created": [], "deleted": [], "fail": False}

    async def create_voice(name, samples):
        if state["fail"]:
            raise VoiceServiceError("ElevenLabs returned 500")
        state["created"].append((name, samples))
        return f"voice-{len(state['created'])}"

    async def delete_voice(voice_id):
        state["deleted"].append(voice_id)
        return True

    monkeypatch.setattr(elevenlabs, "create_voice", create_voice)
    monkeypatch.setattr(elevenlabs, "delete_voice", delete_voice)
    return state


def add_interviewer(db, user_id=USER_ID, name="Grace"):
    interviewer = CustomInterviewer(
        user_id=user_id,
        name=name,
        title="Manager",
        specialties=["behavioral"],
        experience="8 years",
        voice_id=f"voice-{name.lower()}",
    )
    db.add(interviewer)
    db.commit()
    db.refresh(interviewer)
    return interviewer


def test_create_interviewer(client, db, voices):
    response = client.post("/api/interviewers", data=FORM, files=voice_files())

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Ada"
    assert data["voice_id"] == "voice-1"
    assert data["specialties"] == ["technical", "system design"]
    name, samples = voices["created"][0]
    assert name == "Ada"
    assert len(samples) == 4
    assert samples[0][2] == "audio/webm"
    assert db.query(CustomInterviewer).count() == 1


def test_create_interviewer_needs_all_prompts(client, db, voices):
    response = client.post("/api/interviewers", data=FORM, files=voice_files(3))

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "All 4 voice prompts are required"
    assert voices["created"] == []


def test_create_interviewer_invalid_specialties(client, voices):
    response = client.post(
        "/api/interviewers",
        data={**FORM, "specialties": "technical"},
        files=voice_files(),
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Invalid specialties format"


def test_create_interviewer_missing_fields(client, voices):
    response = client.post("/api/interviewers", data={"name": "Ada"}, files=voice_files())

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Invalid form data"


def test_create_interviewer_limit(client, db, voices):
    add_interviewer(db, name="Grace")
    add_interviewer(db, name="Linus")

    response = client.post("/api/interviewers", data=FORM, files=voice_files())

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "LIMIT_REACHED"
    assert voices["created"] == []


def test_create_interviewer_voice_failure(client, db, voices):
    voices["fail"] = True

    response = client.post("/api/interviewers", data=FORM, files=voice_files())

    assert response.status_code == 500
    assert db.query(CustomInterviewer).count() == 0


def test_create_interviewer_db_failure_deletes_voice(client, db, voices, monkeypatch):
    def commit():
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(db, "commit", commit)

    response = client.post("/api/interviewers", data=FORM, files=voice_files())

    assert response.status_code == 500
    assert response.json()["error"]["message"] == "Failed to save interviewer"
    assert voices["deleted"] == ["voice-1"]


def test_list_interviewers_only_own(client, db, other_user):
    add_interviewer(db)
    add_interviewer(db, user_id=OTHER_USER_ID, name="Hidden")

    response = client.get("/api/interviewers")

    assert [i["name"] for i in response.json()["data"]] == ["Grace"]


def test_default_interviewers(client):
    response = client.get("/api/interviewers/defaults")

    assert response.status_code == 200
    defaults = response.json()["data"]
    assert [d["id"] for d in defaults] == ["lulu", "joseph"]
    assert all(d["isDefault"] for d in defaults)
    assert "voice" not in defaults[0]


def test_get_interviewer_of_another_user(client, db, other_user):
    interviewer = add_interviewer(db, user_id=OTHER_USER_ID)

    response = client.get(f"/api/interviewers/{interviewer.id}")

    assert response.status_code == 404


def test_update_interviewer(client, db):
    interviewer = add_interviewer(db)

    response = client.put(
        f"/api/interviewers/{interviewer.id}",
        json={"title": "Director", "specialties": json.dumps(["leadership"])},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["title"] == "Director"
    assert data["name"] == "Grace"
    assert data["specialties"] == ["leadership"]


def test_update_interviewer_clears_description(client, db):
    interviewer = add_interviewer(db)
    interviewer.description = "Asks about teamwork."
    db.commit()

    response = client.put(f"/api/interviewers/{interviewer.id}", json={"description": ""})

    assert response.status_code == 200
    assert response.json()["data"]["description"] is None
    assert response.json()["data"]["title"] == "Manager"


def test_delete_interviewer_removes_voice(client, db, voices):
    interviewer = add_interviewer(db)

    response = client.delete(f"/api/interviewers/{interviewer.id}")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Interviewer deleted successfully!"}
    assert voices["deleted"] == ["voice-grace"]
    assert db.query(CustomInterviewer).count() == 0


def test_assistant_with_custom_interviewer(client, db):
    from tests.test_interviews import make_interview

    interview = make_interview(db)
    interviewer = add_interviewer(db)

    response = client.get(
        f"/api/interviews/{interview.id}/assistant",
        params={"interviewer": interviewer.id},
    )

    assert response.status_code == 200
    assistant = response.json()["data"]
    assert assistant["voice"] == {"provider": "11labs", "voiceId": "voice-grace"}
    assert "My name is Grace" in assistant["firstMessage"]
