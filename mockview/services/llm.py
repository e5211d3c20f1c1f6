"""Gemini calls used for interview generation, feedback and resume roasts."""

import asyncio
import json
import logging
import time
from typing import Optional, Type, TypeVar

from google import genai
from pydantic import BaseModel, ValidationError

from mockview.config import GEMINI_API_KEY, GEMINI_MODEL

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_client: Optional[genai.Client] = None


class LLMError(Exception):
    """The model could not be reached or returned unusable output."""


def get_client() -> genai.Client:
    global _client
    if _client is None:
        if not GEMINI_API_KEY:
            raise LLMError("GEMINI_API_KEY is not configured")
        _client = genai.Client(api_key=GEMINI_API_KEY)
    return _client


def _is_rate_limit(e: Exception) -> bool:
    error_str = str(e).lower()
    code = getattr(e, "status_code", None) or getattr(e, "code", None)
    return (
        code == 429
        or "429" in error_str
        or "resource exhausted" in error_str
        or "quota" in error_str
        or "rate limit" in error_str
    )


def _is_unavailable(e: Exception) -> bool:
    error_str = str(e).lower()
    code = getattr(e, "status_code", None) or getattr(e, "code", None)
    return code == 503 or "503" in error_str or "unavailable" in error_str or "overloaded" in error_str


def call_gemini_with_retry(prompt: str, model: str = GEMINI_MODEL, max_retries: int = 3,
                           initial_delay: float = 1, timeout: float = 60) -> str:
    """
    Call Gemini with retries for 503/429 errors and an overall timeout.

    Rate limits back off twice as long as plain unavailability; every delay
    is capped at 10 seconds.

    Returns:
        The response text.

    Raises:
        LLMError: if all retries fail, the timeout is exceeded, or the error is not retryable
    """
    client = get_client()
    start_time = time.time()

    for attempt in range(max_retries + 1):
        if time.time() - start_time > timeout:
            raise LLMError("Request timed out. The server is experiencing high load. Please try again in a few moments.")

        try:
            response = client.models.generate_content(model=model, contents=prompt)
        except Exception as e:
            rate_limited = _is_rate_limit(e)
            retryable = rate_limited or _is_unavailable(e)

            if not retryable:
                raise LLMError(f"Model request failed: {e}") from e

            if attempt >= max_retries:
                if rate_limited:
                    raise LLMError("Server is currently busy due to high demand. Please try again in a few moments.") from e
                raise LLMError("Service temporarily unavailable. Please try again in a few moments.") from e

            base_delay = initial_delay * 2 if rate_limited else initial_delay
            delay = min(base_delay * (2 ** attempt), 10)
            if time.time() - start_time + delay > timeout:
                raise LLMError("Request timed out. The server is experiencing high load. Please try again in a few moments.") from e

            logger.warning("[Gemini] Retrying in %ss (attempt %d/%d) - %s", delay, attempt + 1, max_retries, str(e)[:100])
            time.sleep(delay)
            continue

        text = getattr(response, "text", None)
        if not text:
            raise LLMError("Model returned an empty response")
        return text

    raise LLMError("Service temporarily unavailable. Please try again in a few moments.")


async def generate_text(prompt: str) -> str:
    """Run a completion without blocking the event loop."""
    return await asyncio.to_thread(call_gemini_with_retry, prompt)


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.split("\n", 1)[1] if "\n" in stripped else ""
        if stripped.rstrip().endswith("```"):
            stripped = stripped.rstrip()[:-3]
    return stripped.strip()


def extract_first_json_object(text: str) -> dict:
    """Extract the first JSON object from a model response."""
    if not isinstance(text, str):
        raise ValueError("Model response was not text")
    text = _strip_code_fence(text)
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end < 0 or end <= start:
        raise ValueError("No JSON object found in model response")
    return json.loads(text[start : end + 1])


def parse_string_list(text: str) -> list[str]:
    """Parse a JSON array of strings, tolerating surrounding chatter."""
    if not isinstance(text, str):
        raise ValueError("Model response was not text")
    text = _strip_code_fence(text)
    start = text.find("[")
    end = text.rfind("]")
    if start < 0 or end < 0 or end <= start:
        raise ValueError("No JSON array found in model response")
    items = json.loads(text[start : end + 1])
    if not isinstance(items, list):
        raise ValueError("Response not array")
    return [str(item).strip() for item in items if str(item).strip()]


async def generate_object(prompt: str, schema: Type[T]) -> T:
    """Ask the model for JSON matching ``schema`` and validate it."""
    fields = json.dumps(schema.model_json_schema(by_alias=True), indent=2)
    full_prompt = (
        f"{prompt.strip()}\n\n"
        "Respond ONLY with a single JSON object matching this JSON schema, "
        "without markdown or any other text:\n"
        f"{fields}"
    )
    text = await generate_text(full_prompt)
    try:
        return schema.model_validate(extract_first_json_object(text))
    except (ValueError, ValidationError) as e:
        logger.error("Failed to parse structured model output: %s", e)
        raise LLMError("Model returned malformed output") from e
