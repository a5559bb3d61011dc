"""HTTP client for the onboarding persistence API."""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """The API answered with a non-success status."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class OnboardingApiClient:
    """
    Thin async wrapper over the business/user endpoints.

    Non-2xx responses raise ApiError; transport failures propagate as
    httpx.HTTPError. Callers decide whether a failure is fatal.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _request(self, method: str, endpoint: str, json: dict | None = None) -> Any:
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport,
        ) as client:
            resp = await client.request(method, endpoint, json=json)

        if resp.status_code in (200, 201):
            return resp.json()

        try:
            detail = resp.json().get("detail", resp.text)
        except ValueError:
            detail = resp.text
        logger.warning("API error: %s %s → %s %s", method, endpoint, resp.status_code, detail)
        raise ApiError(resp.status_code, str(detail))

    # ── Users ──────────────────────────────────────────────

    async def ensure_user(self, telegram_id: int, full_name: str, username: str | None = None) -> dict:
        """Create the owner record, or return the existing one."""
        return await self._request("POST", "/api/users/", json={
            "telegram_id": telegram_id,
            "full_name": full_name,
            "telegram_username": username,
        })

    # ── Businesses ─────────────────────────────────────────

    async def save_basic_info(self, payload: dict) -> dict:
        """Create the business, or update it when ``payload["id"]`` is set."""
        return await self._request("POST", "/api/businesses/basic-info", json=payload)

    async def update_business(self, business_id: str, changes: dict) -> dict:
        return await self._request("PATCH", f"/api/businesses/{business_id}", json=changes)

    async def get_business(self, business_id: str) -> dict:
        return await self._request("GET", f"/api/businesses/{business_id}")
