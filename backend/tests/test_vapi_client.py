"""Tests for the Vapi adapter using a mocked HTTP transport."""

import json

import httpx
import pytest

from chronicle.errors import ProviderError
from chronicle.services.vapi_client import VapiClient


def make_client(settings, handler) -> VapiClient:
    settings.vapi_api_key = "test-key"
    settings.vapi_phone_number_id = "phone-123"
    return VapiClient(settings, transport=httpx.MockTransport(handler))


class TestVapiClient:
    @pytest.mark.asyncio
    async def test_list_calls_parses_records(self, settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/call"
            assert request.headers["Authorization"] == "Bearer test-key"
            return httpx.Response(
                200,
                json=[
                    {"id": "a", "createdAt": "2024-03-01T09:15:00.000Z", "transcript": "hello", "name": "Morning"},
                    {"id": "b", "startedAt": "2024-03-02T10:00:00.000Z", "artifact": {"transcript": "nested"}},
                    {"status": "orphan"},
                ],
            )

        calls = await make_client(settings, handler).list_calls()

        assert [c.id for c in calls] == ["a", "b"]
        assert calls[0].transcript == "hello"
        assert calls[0].title == "Morning"
        assert calls[1].transcript == "nested"
        assert calls[1].date_hints() == [None, "2024-03-02T10:00:00.000Z", None]

    @pytest.mark.asyncio
    async def test_list_calls_http_error_raises_provider_error(self, settings) -> None:
        client = make_client(settings, lambda request: httpx.Response(401, json={"message": "Unauthorized"}))
        with pytest.raises(ProviderError) as exc:
            await client.list_calls()
        assert exc.value.status_code == 401

    @pytest.mark.asyncio
    async def test_get_call_reads_detail(self, settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/call/abc"
            return httpx.Response(200, json={"id": "abc", "artifact": {"transcript": "AI: hi"}, "endedAt": "2024-01-01T00:00:00Z"})

        call = await make_client(settings, handler).get_call("abc")
        assert call.id == "abc"
        assert call.transcript == "AI: hi"
        assert call.endedAt == "2024-01-01T00:00:00Z"

    @pytest.mark.asyncio
    async def test_get_call_not_found(self, settings) -> None:
        client = make_client(settings, lambda request: httpx.Response(404, text="not found"))
        with pytest.raises(ProviderError) as exc:
            await client.get_call("missing")
        assert exc.value.call_id == "missing"

    @pytest.mark.asyncio
    async def test_initiate_call_selects_assistant_by_mode(self, settings) -> None:
        sent = {}

        def handler(request: httpx.Request) -> httpx.Response:
            sent.update(json.loads(request.content))
            return httpx.Response(201, json={"id": "call-1", "status": "queued"})

        result = await make_client(settings, handler).initiate_call("+15550100", mode="Severance")

        assert result["id"] == "call-1"
        assert sent["assistantId"] == settings.vapi_severance_assistant_id
        assert sent["phoneNumberId"] == "phone-123"
        assert sent["customer"] == {"number": "+15550100"}

    @pytest.mark.asyncio
    async def test_initiate_call_requires_a_number(self, settings) -> None:
        client = make_client(settings, lambda request: httpx.Response(500))
        with pytest.raises(ValueError):
            await client.initiate_call(None)

    @pytest.mark.asyncio
    async def test_simulation_mode_without_api_key(self, settings) -> None:
        client = VapiClient(settings)
        assert client.simulated is True
        assert await client.list_calls() == []
        assert (await client.get_call("x")).id == "x"

    @pytest.mark.asyncio
    async def test_malformed_listing_item_raises_provider_error(self, settings) -> None:
        client = make_client(settings, lambda request: httpx.Response(200, json=[{"id": "a", "name": 123}]))
        with pytest.raises(ProviderError):
            await client.list_calls()

    @pytest.mark.asyncio
    async def test_malformed_detail_raises_provider_error(self, settings) -> None:
        client = make_client(settings, lambda request: httpx.Response(200, json={"id": "a", "startedAt": None, "name": ["x"]}))
        with pytest.raises(ProviderError) as exc:
            await client.get_call("a")
        assert exc.value.call_id == "a"
