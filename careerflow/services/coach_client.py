"""
AI Coach Model Client

The hosted model is reached through its OpenAI-compatible chat API, so we use
the openai library. Gemini is the default endpoint (see Settings.ai_base_url).

The client is built once at startup, kept on app.state and injected into
routes with get_coach_client(). Nothing here caches, retries or rate-limits.
"""
import json
from typing import List, Optional

from fastapi import Request
from openai import OpenAI

from careerflow.core.config import Settings
from careerflow.core.exceptions import ServiceUnavailable
from careerflow.core.logging_config import get_logger

logger = get_logger(__name__)

SYSTEM_INSTRUCTION = """You are CareerFlow AI Coach - a world-class career counselor and HR expert.

Guidelines:
- Be encouraging but honest.
- Keep answers concise (max ~400 words) unless the user asks for detail.
- When you list items, use numbered or bulleted lists.
- When you recommend courses or resources, explain why in one sentence.
- Never make up statistics - say "estimated" when uncertain.
- If you don't have enough information to answer, ask a follow-up question."""

# chat history uses the Gemini role names; the chat API wants these
HISTORY_ROLES = {"user": "user", "model": "assistant"}


def extract_json(text: str):
    """
    Extract JSON from a model response.
    Handles cases where the model wraps JSON in markdown code blocks.
    Raises ValueError when the remaining text is not JSON.
    """
    text = (text or "").strip()
    if text.lower().startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]

    return json.loads(text.strip())


class CoachClient:
    """
    Thin wrapper around the chat completions API.
    """

    def __init__(self, api_key: str, base_url: str, model: str, timeout: Optional[float] = None):
        self.client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "CoachClient":
        return cls(
            api_key=settings.ai_api_key,
            base_url=settings.ai_base_url,
            model=settings.ai_model,
            timeout=settings.ai_timeout_seconds,
        )

    def _call_api(self, messages: List[dict], max_tokens: int = 2000, temperature: float = 0.4) -> str:
        """
        Internal method to call the model.
        Returns raw text response.
        """
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "system", "content": SYSTEM_INSTRUCTION}] + messages,
            max_tokens=max_tokens,
            temperature=temperature
        )
        return response.choices[0].message.content or ""

    def chat(self, prompt: str, history: Optional[List[dict]] = None) -> str:
        """Continue a conversation. history items are {"role": "user"|"model", "text": str}."""
        messages = [
            {"role": HISTORY_ROLES[turn["role"]], "content": turn["text"]}
            for turn in (history or [])
        ]
        messages.append({"role": "user", "content": prompt})
        return self._call_api(messages)

    def generate_json(self, prompt: str, max_tokens: int = 2000):
        """Single-shot prompt whose answer must be JSON. Low temperature for stable structure."""
        response = self._call_api([{"role": "user", "content": prompt}], max_tokens=max_tokens, temperature=0.2)
        return extract_json(response)

    def test_connection(self) -> bool:
        """Test if the model endpoint is reachable"""
        try:
            response = self._call_api(
                [{"role": "user", "content": "Reply with exactly: OK"}],
                max_tokens=10
            )
            return "OK" in response.upper()
        except Exception as e:
            logger.warning("AI model connection failed: %s", e)
            return False

    def close(self) -> None:
        self.client.close()


def get_coach_client(request: Request) -> CoachClient:
    """
    Dependency - the client created at startup.
    Missing when no API key is configured.
    """
    client = getattr(request.app.state, "coach_client", None)
    if client is None:
        raise ServiceUnavailable(
            "AI service is temporarily unavailable. Please try again.",
            detail="AI client is not configured (AI_API_KEY is empty)"
        )
    return client
