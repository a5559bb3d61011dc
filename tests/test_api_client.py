"""Tests for the onboarding API client (mocked transport)."""

import json

import httpx
import pytest

from onboarding_bot.services.api_client import ApiError, OnboardingApiClient


def _client(handler):
    return OnboardingApiClient("http://api.test/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_ensure_user_posts_telegram_identity():
    """ensure_user should POST the Telegram identity to the users endpoint."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "u-1", "telegram_id": 42})

    user = await _client(handler).ensure_user(42, "Ada Lovelace", "ada")
    assert user["id"] == "u-1"
    assert seen == {
        "method": "POST",
        "path": "/api/users/",
        "body": {"telegram_id": 42, "full_name": "Ada Lovelace", "telegram_username": "ada"},
    }


@pytest.mark.asyncio
async def test_update_business_uses_patch():
    """update_business should PATCH the business by id."""
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PATCH"
        assert request.url.path == "/api/businesses/biz-1"
        return httpx.Response(200, json={"id": "biz-1", **json.loads(request.content)})

    result = await _client(handler).update_business("biz-1", {"city": "Austin"})
    assert result["city"] == "Austin"


@pytest.mark.asyncio
async def test_created_status_is_success():
    """201 responses are returned like 200s."""
    client = _client(lambda request: httpx.Response(201, json={"id": "biz-2"}))
    assert (await client.save_basic_info({"business_name": "Acme"}))["id"] == "biz-2"


@pytest.mark.asyncio
async def test_error_detail_is_raised():
    """Non-success responses raise ApiError with the server's detail."""
    client = _client(lambda request: httpx.Response(404, json={"detail": "Business not found"}))
    with pytest.raises(ApiError) as exc_info:
        await client.get_business("missing")
    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Business not found"


@pytest.mark.asyncio
async def test_error_without_json_body():
    """Plain-text error bodies are used as the detail."""
    client = _client(lambda request: httpx.Response(502, text="Bad Gateway"))
    with pytest.raises(ApiError) as exc_info:
        await client.get_business("biz-1")
    assert exc_info.value.detail == "Bad Gateway"


@pytest.mark.asyncio
async def test_transport_errors_propagate():
    """Connection failures surface as httpx errors for the caller to handle."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(httpx.HTTPError):
        await _client(handler).get_business("biz-1")
