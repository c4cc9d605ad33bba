from __future__ import annotations

import logging
from typing import Any, Literal, Mapping

import httpx

from hotelhub.core.config import settings
from hotelhub.core.errors import (
    ConflictError,
    HubError,
    InvalidTransition,
    NotFound,
    PermissionDenied,
    TransientIOError,
    ValidationError,
)


log = logging.getLogger(__name__)

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

TRANSIENT_STATUSES = (502, 503, 504)

_ERRORS_BY_STATUS: dict[int, type[HubError]] = {
    401: PermissionDenied,
    403: PermissionDenied,
    404: NotFound,
    422: ValidationError,
}


def _is_json_response(resp: httpx.Response) -> bool:
    ct = (resp.headers.get("content-type") or "").lower()
    return "application/json" in ct or ct.endswith("+json")


def _error_from_envelope(resp: httpx.Response) -> HubError:
    body: dict[str, Any] = {}
    if _is_json_response(resp):
        try:
            parsed = resp.json()
            body = parsed if isinstance(parsed, dict) else {}
        except ValueError:
            body = {}
    message = body.get("message") or f"HTTP {resp.status_code}"
    details = body.get("details") or {}

    if resp.status_code == 409:
        if body.get("code") == "invalid_transition":
            return InvalidTransition(
                message,
                current_status=details.get("current_status"),
                action=details.get("action"),
            )
        return ConflictError(message, details=details)

    err_cls = _ERRORS_BY_STATUS.get(resp.status_code, HubError)
    err = err_cls(message, details=details)
    if err_cls is HubError:
        err.status_code = resp.status_code
    return err


class ModerationClient:
    """
    Async client for the hotel moderation API, used by the merchant and admin consoles.

    - One AsyncClient per instance (connection pooling), bounded by a timeout.
    - Timeouts, connection failures and 502/503/504 raise TransientIOError;
      the listing is unchanged unless a later read says otherwise.
    - Error envelopes raise the matching domain error carrying the server message.
    - Successful calls return the decoded envelope (success, message, payload).
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.api_base_url).rstrip("/") + "/api",
            timeout=httpx.Timeout(timeout_seconds or settings.client_timeout_seconds),
            headers={"X-API-Key": api_key},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ModerationClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(
        self,
        method: HttpMethod,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            resp = await self._client.request(method, path, json=json_body, headers=dict(headers or {}))
        except httpx.TimeoutException as e:
            log.warning("%s %s timed out: %s", method, path, e)
            raise TransientIOError("The request timed out, please retry") from e
        except httpx.RequestError as e:
            # DNS errors, connection refused, TLS, etc.
            log.warning("%s %s failed: %s", method, path, e)
            raise TransientIOError("Could not reach the server, please retry") from e

        if resp.status_code in TRANSIENT_STATUSES:
            raise TransientIOError(f"Server unavailable (HTTP {resp.status_code}), please retry")
        if not 200 <= resp.status_code < 300:
            raise _error_from_envelope(resp)

        try:
            payload = resp.json()
        except ValueError as e:
            raise HubError(f"Unexpected non-JSON response (HTTP {resp.status_code})") from e
        if not payload.get("success", False):
            raise HubError(payload.get("message") or "Request failed")
        return payload

    # session

    async def health(self) -> dict[str, Any]:
        return await self._request("GET", "/health")

    async def me(self) -> dict[str, Any]:
        return await self._request("GET", "/me")

    # merchant

    async def my_hotels(self) -> list[dict[str, Any]]:
        return (await self._request("GET", "/hotels/my"))["hotels"]

    async def submit_hotel(self, content: dict[str, Any], *, idempotency_key: str | None = None) -> dict[str, Any]:
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None
        return (await self._request("POST", "/hotels", json_body=content, headers=headers))["hotel"]

    async def get_hotel(self, hotel_id: int) -> dict[str, Any]:
        return (await self._request("GET", f"/hotels/{hotel_id}"))["hotel"]

    async def edit_hotel(self, hotel_id: int, content: dict[str, Any]) -> dict[str, Any]:
        return (await self._request("PUT", f"/hotels/{hotel_id}", json_body=content))["hotel"]

    async def withdraw_hotel(self, hotel_id: int) -> int:
        # status 2 is how the console asks for a withdrawal
        payload = await self._request("PATCH", f"/hotels/{hotel_id}/status", json_body={"status": 2})
        return payload["hotelId"]

    async def delete_hotel(self, hotel_id: int) -> int:
        return (await self._request("DELETE", f"/hotels/{hotel_id}"))["hotelId"]

    # admin

    async def published_hotels(self) -> list[dict[str, Any]]:
        return (await self._request("GET", "/admin/hotels/published"))["hotels"]

    async def pending_hotels(self) -> list[dict[str, Any]]:
        return (await self._request("GET", "/admin/hotels/pending"))["hotels"]

    async def admin_get_hotel(self, hotel_id: int) -> dict[str, Any]:
        return (await self._request("GET", f"/admin/hotels/{hotel_id}"))["hotel"]

    async def approve_hotel(self, hotel_id: int) -> dict[str, Any]:
        return (await self._request("POST", f"/admin/hotels/{hotel_id}/approve"))["hotel"]

    async def reject_hotel(self, hotel_id: int, reason: str | None = None) -> dict[str, Any]:
        payload = await self._request("POST", f"/admin/hotels/{hotel_id}/reject", json_body={"reason": reason})
        return payload["hotel"]

    async def offline_hotel(self, hotel_id: int, reason: str | None = None) -> dict[str, Any]:
        payload = await self._request("POST", f"/admin/hotels/{hotel_id}/offline", json_body={"reason": reason})
        return payload["hotel"]

    async def admin_delete_hotel(self, hotel_id: int) -> int:
        return (await self._request("DELETE", f"/admin/hotels/{hotel_id}"))["hotelId"]
