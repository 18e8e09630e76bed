"""Unit tests for prompt -> AppSpec inference (appforge.inference.prompt).

Tests cover:
- CompletionResponse defaults
- CompletionClient.complete (success, connect error, timeout, HTTP error)
- CompletionClient._extract_text
- spec_from_payload default filling
- SpecInferrer.infer (success, failed call, malformed JSON, invalid values)
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from pydantic import ValidationError

from appforge.inference.prompt import (
    SYSTEM_PROMPT,
    CompletionClient,
    CompletionError,
    CompletionResponse,
    SpecInferrer,
    spec_from_payload,
)
from appforge.models import AppType, Database, DeploymentTarget, UiKit

pytestmark = pytest.mark.unit


def completion_payload(content: str, model: str = "gpt-4o-mini") -> dict:
    return {
        "model": model,
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }


class TestCompletionResponse:
    def test_defaults(self):
        resp = CompletionResponse()
        assert resp.text == ""
        assert resp.success is True
        assert resp.error is None


class TestCompletionClient:
    def test_init_strips_trailing_slash(self):
        client = CompletionClient(base_url="http://localhost:8080/v1/", api_key="k")
        assert client.base_url == "http://localhost:8080/v1"

    async def test_complete_success(self, mock_http_client):
        mock_client = mock_http_client(json_body=completion_payload('{"name": "X"}', model="m1"))
        with patch("httpx.AsyncClient", return_value=mock_client) as factory:
            resp = await CompletionClient(api_key="sk-1").complete("sys", "build me a blog", model="m1")

        assert resp.success is True
        assert resp.text == '{"name": "X"}'
        assert resp.model == "m1"

        payload = mock_client.post.call_args.kwargs["json"]
        assert mock_client.post.call_args.args[0] == "/chat/completions"
        assert payload["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "build me a blog"},
        ]
        assert payload["stream"] is False
        assert factory.call_args.kwargs["headers"]["Authorization"] == "Bearer sk-1"

    async def test_complete_without_key_sends_no_auth_header(self, mock_http_client):
        mock_client = mock_http_client(json_body=completion_payload("{}"))
        with patch("httpx.AsyncClient", return_value=mock_client) as factory:
            await CompletionClient().complete("sys", "p", model="m")
        assert "Authorization" not in factory.call_args.kwargs["headers"]

    async def test_connect_error(self, mock_http_client):
        mock_client = mock_http_client(side_effect=httpx.ConnectError("Connection refused"))
        with patch("httpx.AsyncClient", return_value=mock_client):
            resp = await CompletionClient().complete("sys", "p", model="m")
        assert resp.success is False
        assert "Cannot connect" in resp.error

    async def test_timeout(self, mock_http_client):
        mock_client = mock_http_client(side_effect=httpx.TimeoutException("timed out"))
        with patch("httpx.AsyncClient", return_value=mock_client):
            resp = await CompletionClient(timeout=7).complete("sys", "p", model="m")
        assert resp.success is False
        assert "7s" in resp.error

    async def test_http_error(self, mock_http_client):
        request = httpx.Request("POST", "https://api.example/chat/completions")
        error_response = httpx.Response(429, text="rate limited", request=request)
        mock_client = mock_http_client(
            side_effect=httpx.HTTPStatusError("429", request=request, response=error_response)
        )
        with patch("httpx.AsyncClient", return_value=mock_client):
            resp = await CompletionClient().complete("sys", "p", model="m")
        assert resp.success is False
        assert "HTTP 429" in resp.error

    def test_extract_text(self):
        assert CompletionClient._extract_text(completion_payload("hi")) == "hi"
        assert CompletionClient._extract_text({"choices": []}) == ""
        assert CompletionClient._extract_text({}) == ""


class TestSpecFromPayload:
    def test_fills_defaults(self):
        spec = spec_from_payload({"name": "Tiny"})
        assert spec.name == "Tiny"
        assert spec.type is AppType.CUSTOM
        assert spec.pages == ("Home", "About")
        assert spec.database is Database.POSTGRESQL
        assert spec.deployment is DeploymentTarget.VERCEL
        assert spec.auth is True

    def test_auth_defaults_on_when_missing(self):
        assert spec_from_payload({"auth": False}).auth is False
        assert spec_from_payload({"auth": None}).auth is True

    @pytest.mark.parametrize("value", ["false", "False", "no", 0])
    def test_auth_string_false_turns_auth_off(self, value):
        assert spec_from_payload({"auth": value}).auth is False

    def test_auth_non_boolean_is_rejected(self):
        with pytest.raises(ValidationError):
            spec_from_payload({"auth": "maybe"})

    def test_empty_values_fall_back(self):
        spec = spec_from_payload({"name": "", "pages": []})
        assert spec.name == "My App"
        assert spec.pages == ("Home", "About")

    def test_invalid_enum_raises(self):
        with pytest.raises(ValidationError):
            spec_from_payload({"ui": "bootstrap"})


class TestSpecInferrer:
    def _client(self, response: CompletionResponse) -> CompletionClient:
        client = MagicMock(spec=CompletionClient)
        client.complete = AsyncMock(return_value=response)
        return client

    async def test_infer(self, spec_json):
        client = self._client(CompletionResponse(text=spec_json))
        spec = await SpecInferrer(client, model="m").infer("a recipe site")

        assert spec.name == "Recipe Share"
        assert spec.type is AppType.BLOG
        assert spec.database is Database.SQLITE
        assert spec.ui is UiKit.TAILWIND
        assert spec.auth is False
        client.complete.assert_awaited_once_with(SYSTEM_PROMPT, "a recipe site", model="m")

    async def test_failed_call_raises(self):
        client = self._client(CompletionResponse(success=False, error="boom"))
        with pytest.raises(CompletionError, match="boom"):
            await SpecInferrer(client).infer("x")

    async def test_malformed_json_propagates(self):
        client = self._client(CompletionResponse(text="Sure! Here is your app: {"))
        with pytest.raises(json.JSONDecodeError):
            await SpecInferrer(client).infer("x")

    async def test_non_object_json_rejected(self):
        client = self._client(CompletionResponse(text="[1, 2]"))
        with pytest.raises(json.JSONDecodeError):
            await SpecInferrer(client).infer("x")

    async def test_invalid_values_propagate(self):
        client = self._client(CompletionResponse(text=json.dumps({"database": "oracle"})))
        with pytest.raises(ValidationError):
            await SpecInferrer(client).infer("x")
