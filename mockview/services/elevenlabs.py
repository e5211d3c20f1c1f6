"""ElevenLabs voice cloning for custom interviewers."""

import asyncio
import json
import logging
from typing import Optional

import requests

from mockview.config import ELEVENLABS_API_KEY, ELEVENLABS_BASE_URL

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 60


class VoiceServiceError(Exception):
    pass


def _headers() -> dict:
    if not ELEVENLABS_API_KEY:
        raise VoiceServiceError("ElevenLabs API key not configured")
    return {"xi-api-key": ELEVENLABS_API_KEY}


def create_voice_sync(name: str, samples: list[tuple[str, bytes, str]]) -> str:
    """Clone a voice from audio samples and return its voice id.

    ``samples`` holds ``(filename, content, content_type)`` tuples.
    """
    headers = _headers()
    data = {
        "name": name,
        "description": f"Custom voice for interviewer {name}",
        "labels": json.dumps([f"Sample {index + 1}" for index in range(len(samples))]),
    }
    files = [
        ("files", (f"sample_{index}.wav", content, content_type or "audio/wav"))
        for index, (_filename, content, content_type) in enumerate(samples)
    ]

    try:
        response = requests.post(
            f"{ELEVENLABS_BASE_URL}/voices/add",
            headers=headers,
            data=data,
            files=files,
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error("Error creating voice with ElevenLabs: %s", e)
        raise VoiceServiceError("Could not reach ElevenLabs") from e

    if not response.ok:
        logger.error("ElevenLabs API error: %s %s", response.status_code, response.text[:500])
        raise VoiceServiceError(f"ElevenLabs returned {response.status_code}")

    voice_id: Optional[str] = response.json().get("voice_id")
    if not voice_id:
        raise VoiceServiceError("ElevenLabs response did not include a voice id")
    return voice_id


def delete_voice_sync(voice_id: str) -> bool:
    """Delete a cloned voice. Returns False instead of raising on failure."""
    try:
        response = requests.delete(
            f"{ELEVENLABS_BASE_URL}/voices/{voice_id}",
            headers=_headers(),
            timeout=REQUEST_TIMEOUT,
        )
    except (requests.RequestException, VoiceServiceError) as e:
        logger.error("Error deleting voice %s from ElevenLabs: %s", voice_id, e)
        return False
    return response.ok


async def create_voice(name: str, samples: list[tuple[str, bytes, str]]) -> str:
    return await asyncio.to_thread(create_voice_sync, name, samples)


async def delete_voice(voice_id: str) -> bool:
    return await asyncio.to_thread(delete_voice_sync, voice_id)
