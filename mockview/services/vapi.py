"""Vapi call lookups and assistant configuration for voice interviews."""

import asyncio
import logging
from typing import Any, Optional

import requests

from mockview.config import VAPI_API_KEY, VAPI_BASE_URL

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


class VapiError(Exception):
    def __init__(self, message: str, status_code: int = 502, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def fetch_call_sync(call_id: str) -> dict:
    if not VAPI_API_KEY:
        raise VapiError("Vapi API key not configured", 500)
    try:
        response = requests.get(
            f"{VAPI_BASE_URL}/call/{call_id}",
            headers={
                "Authorization": f"Bearer {VAPI_API_KEY}",
                "Content-Type": "application/json",
            },
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error("Error fetching Vapi call %s: %s", call_id, e)
        raise VapiError("Could not reach Vapi", 502) from e

    if not response.ok:
        raise VapiError("Failed to fetch transcript from Vapi", response.status_code, response.text)
    return response.json()


async def fetch_call(call_id: str) -> dict:
    return await asyncio.to_thread(fetch_call_sync, call_id)


INTERVIEWER_SYSTEM_PROMPT = """You are a professional job interviewer conducting a real-time voice interview with a candidate. Your goal is to assess their qualifications, motivation, and fit for the role.

Interview Guidelines:
Follow the structured question flow:
{questions}

Engage naturally & react appropriately:
Listen actively to responses and acknowledge them before moving forward.
Ask brief follow-up questions if a response is vague or requires more detail.
Keep the conversation flowing smoothly while maintaining control.

Be professional, yet warm and welcoming:
Use official yet friendly language.
Keep responses concise and to the point (like in a real voice interview).
Avoid robotic phrasing, sound natural and conversational.

Answer the candidate's questions professionally:
If asked about the role, company, or expectations, provide a clear and relevant answer.
If unsure, redirect the candidate to HR for more details.

Conclude the interview properly:
Thank the candidate for their time.
Inform them that the company will reach out soon with feedback.
End the conversation on a polite and positive note.

- Be sure to be professional and polite.
- Keep all your responses short and simple. Use official language, but be kind and welcoming.
- This is a voice conversation, so keep your responses short, like in a real conversation. Don't ramble for too long.
- At the end of the interview questions or when the user says bye, prompt the user to click the end interview button
"""

# Built-in interviewers: (voice provider, voice id, first name)
DEFAULT_INTERVIEWERS: dict[str, dict[str, Any]] = {
    "lulu": {
        "id": "lulu",
        "name": "Lulu",
        "avatar": "/professional-woman-glasses.png",
        "title": "HR Manager",
        "description": "Specializes in behavioral interviews and HR-related questions with a friendly approach.",
        "specialties": ["behavioral", "situational"],
        "experience": "10+ years in talent acquisition",
        "voice": {"provider": "vapi", "voiceId": "Paige", "speed": 0.9},
    },
    "joseph": {
        "id": "joseph",
        "name": "Joe",
        "avatar": "/professional-man.png",
        "title": "Engineering Manager",
        "description": "Runs technical and problem-solving interviews with a calm, structured style.",
        "specialties": ["technical", "problem-solving", "case-study"],
        "experience": "12+ years leading engineering teams",
        "voice": {"provider": "playht", "voiceId": "z0FeJKecUNrpkaHkBfCw", "speed": 0.9},
    },
}


def format_questions(questions: list[str]) -> str:
    return "\n".join(f"- {question}" for question in questions)


def build_assistant(name: str, voice: dict, questions: list[str]) -> dict:
    """Vapi assistant definition with the interview's questions in the system prompt."""
    return {
        "name": "Interviewer",
        "firstMessage": f"Hello! My name is {name} and I will be taking your interview today, are you ready?",
        "transcriber": {"provider": "deepgram", "model": "nova-2", "language": "en"},
        "voice": voice,
        "model": {
            "provider": "openai",
            "model": "gpt-4",
            "messages": [
                {
                    "role": "system",
                    "content": INTERVIEWER_SYSTEM_PROMPT.format(questions=format_questions(questions)),
                }
            ],
        },
        "maxDurationSeconds": 1800,
        "startSpeakingPlan": {
            "waitSeconds": 2.0,
            "smartEndpointingPlan": {
                "provider": "livekit",
                "waitFunction": "2000 / (1 + exp(-10 * (x - 0.5)))",
            },
        },
        "stopSpeakingPlan": {"numWords": 0, "voiceSeconds": 0.2, "backoffSeconds": 1.0},
    }


def custom_voice(voice_id: str) -> dict:
    return {"provider": "11labs", "voiceId": voice_id}
