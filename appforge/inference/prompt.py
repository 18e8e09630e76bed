"""Free-text prompt -> ``AppSpec`` inference through an LLM.

Wraps an OpenAI-compatible ``/chat/completions`` endpoint with proper timeout
handling and structured responses.  The model is asked to answer with a JSON
object shaped like an ``AppSpec``; that object is parsed as-is.  A malformed
answer is surfaced to the caller unmodified, never repaired.

Typical usage::

    inferrer = SpecInferrer(CompletionClient(base_url, api_key))
    spec = await inferrer.infer("A recipe sharing site with comments")
"""

from __future__ import annotations

import json
import time
from typing import Any

import httpx
from pydantic import BaseModel, Field

from appforge.models import AppSpec


class CompletionError(Exception):
    """Raised when the completion API could not produce an answer."""


class CompletionResponse(BaseModel):
    """Structured response from a chat completion call."""

    text: str = Field(default="", description="Content of the first choice")
    model: str = Field(default="", description="Model that produced the response")
    duration_ms: float = Field(default=0.0, description="Client-side round trip in ms")
    success: bool = Field(default=True, description="Whether the request succeeded")
    error: str | None = Field(default=None, description="Error message on failure")


class CompletionClient:
    """Async client for an OpenAI-compatible chat completion API."""

    def __init__(
        self,
        base_url: str = "https://api.openai.com/v1",
        api_key: str = "",
        timeout: int = 60,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with our base URL and timeout."""
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
        )

    @staticmethod
    def _extract_text(data: dict) -> str:
        """Pull the first choice's message content out of a completion response."""
        choices = data.get("choices") or []
        if not choices:
            return ""
        return (choices[0].get("message") or {}).get("content") or ""

    async def complete(self, system: str, prompt: str, model: str) -> CompletionResponse:
        """Send one system + user message pair and return the answer.

        Args:
            system: System prompt.
            prompt: User prompt.
            model: Model identifier understood by the provider.

        Returns:
            A ``CompletionResponse`` with the generated text or an error.
        """
        payload: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "stream": False,
        }
        started = time.monotonic()

        try:
            async with self._client() as client:
                response = await client.post("/chat/completions", json=payload)
                response.raise_for_status()
                data = response.json()
                return CompletionResponse(
                    text=self._extract_text(data),
                    model=data.get("model", model),
                    duration_ms=(time.monotonic() - started) * 1000.0,
                    success=True,
                )
        except httpx.ConnectError:
            return CompletionResponse(
                model=model,
                success=False,
                error=f"Cannot connect to completion API at {self.base_url}.",
            )
        except httpx.TimeoutException:
            return CompletionResponse(
                model=model,
                success=False,
                error=f"Completion request timed out after {self.timeout}s.",
            )
        except httpx.HTTPStatusError as exc:
            return CompletionResponse(
                model=model,
                success=False,
                error=f"Completion API returned HTTP {exc.response.status_code}: {exc.response.text[:500]}",
            )


# ---------------------------------------------------------------------------
# Spec inference
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = """You are an AI app architect. Analyze the user's description and create an app specification.

Output JSON format:
{
  "type": "saas|blog|ecommerce|dashboard|portfolio|crm|chat|cms|landing|admin|custom",
  "name": "App Name",
  "description": "Brief description",
  "features": ["feature1", "feature2", ...],
  "pages": ["page1", "page2", ...],
  "database": "postgresql|mysql|mongodb|supabase|sqlite|none",
  "auth": true|false,
  "ui": "tailwind|shadcn|material|chakra|daisyui",
  "deployment": "vercel|netlify|railway|render|none",
  "mode": "fullstack|frontend|backend-only"
}

Answer with the JSON object only."""

_DEFAULTS: dict[str, Any] = {
    "name": "My App",
    "type": "custom",
    "description": "",
    "features": [],
    "pages": ["Home", "About"],
    "database": "postgresql",
    "ui": "tailwind",
    "deployment": "vercel",
    "mode": "fullstack",
}


def spec_from_payload(content: dict[str, Any]) -> AppSpec:
    """Build an ``AppSpec`` from a parsed model answer, filling missing keys.

    Empty values fall back to defaults and a missing ``auth`` means on.  A
    present ``auth`` goes through pydantic's bool parsing, so ``"false"``
    and ``0`` turn it off.  Out-of-range enum values and non-boolean ``auth``
    values raise ``pydantic.ValidationError``.
    """
    data = {key: content.get(key) or default for key, default in _DEFAULTS.items()}
    auth = content.get("auth")
    data["auth"] = True if auth is None else auth
    return AppSpec.model_validate(data)


class SpecInferrer:
    """Turns a free-text prompt into an ``AppSpec`` with one completion call."""

    def __init__(self, client: CompletionClient, model: str = "gpt-4o-mini") -> None:
        self.client = client
        self.model = model

    async def infer(self, prompt: str) -> AppSpec:
        """Ask the model for a spec and parse its answer.

        Raises:
            CompletionError: The API call failed.
            json.JSONDecodeError: The answer was not JSON.
            pydantic.ValidationError: The JSON did not describe a valid spec.
        """
        response = await self.client.complete(SYSTEM_PROMPT, prompt, model=self.model)
        if not response.success:
            raise CompletionError(response.error or "Completion failed")

        content = json.loads(response.text)
        if not isinstance(content, dict):
            raise json.JSONDecodeError("Expected a JSON object", response.text, 0)
        return spec_from_payload(content)
