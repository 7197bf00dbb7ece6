"""
Async REST client for the HomeHub backend.

Wraps an ``httpx.AsyncClient``: attaches the Bearer token from the
session store, applies per-call timeouts, and converts transport errors
and HTTP error statuses into the ``homehub.api.errors`` taxonomy so
callers never see raw httpx exceptions.
"""

import logging
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from homehub.api.errors import (
    BookingTimeoutError,
    UnknownApiError,
    error_for_status,
)
from homehub.config import settings
from homehub.schemas.booking_schema import (
    Booking,
    BookingCreateRequest,
    BookingUpdateRequest,
    PaymentMethod,
    PaymentStatus,
)
from homehub.schemas.customer_schema import UserProfile
from homehub.schemas.invoice_schema import Invoice
from homehub.schemas.service_schema import Service, SpecialOffer
from homehub.session import SessionStore

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _server_message(response: httpx.Response) -> Optional[str]:
    """Pull ``message`` out of a JSON error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        return str(message) if message else None
    return None


def _parse(model: type[M], payload: Any) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        logger.error("Unexpected %s payload from server: %s", model.__name__, exc)
        raise UnknownApiError("Unexpected response from server") from exc


def _unwrap(payload: Any, key: str) -> Any:
    """Some routes wrap the entity (``{"user": {...}}``), others return it bare."""
    if isinstance(payload, dict) and isinstance(payload.get(key), dict):
        return payload[key]
    return payload


class HomeHubClient:
    """Thin typed wrapper over the booking-related REST endpoints."""

    def __init__(
        self,
        store: SessionStore,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.store = store
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.api.base_url,
            timeout=timeout if timeout is not None else settings.api.default_timeout_sec,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "HomeHubClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _auth_headers(self) -> dict[str, str]:
        token = self.store.get_token()
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        logger.debug("%s %s", method, path)
        try:
            response = await self._http.request(
                method,
                path,
                json=json,
                headers=self._auth_headers(),
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out", method, path)
            raise BookingTimeoutError() from exc
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise UnknownApiError(f"Network error: {exc}") from exc

        if response.status_code >= 400:
            message = _server_message(response)
            logger.warning(
                "%s %s returned %d: %s", method, path, response.status_code, message
            )
            raise error_for_status(response.status_code, message)

        logger.debug("%s %s returned %d", method, path, response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise UnknownApiError("Unexpected response from server") from exc

    def _parse_bookings(self, payload: Any) -> list[Booking]:
        """Parse a listing, skipping records that break the identity invariant."""
        bookings: list[Booking] = []
        for raw in payload or []:
            try:
                bookings.append(Booking.model_validate(raw))
            except ValidationError as exc:
                ref = raw.get("_id") if isinstance(raw, dict) else raw
                logger.warning("Skipping malformed booking %s: %s", ref, exc)
        return bookings

    # --- Bookings ---

    async def create_booking(
        self, request: BookingCreateRequest, timeout: Optional[float] = None
    ) -> dict[str, Any]:
        """POST /bookings; returns the raw server record for merging."""
        payload = await self._request(
            "POST",
            "/bookings",
            json=request.to_payload(),
            timeout=timeout if timeout is not None else settings.api.booking_timeout_sec,
        )
        if not isinstance(payload, dict):
            raise UnknownApiError("Unexpected response from server")
        return payload

    async def update_booking(self, booking_id: str, update: BookingUpdateRequest) -> Booking:
        payload = await self._request("PUT", f"/bookings/{booking_id}", json=update.to_payload())
        return _parse(Booking, payload)

    async def update_payment(
        self,
        booking_id: str,
        payment_status: PaymentStatus,
        payment_method: Optional[PaymentMethod] = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"paymentStatus": payment_status.value}
        if payment_method is not None:
            body["paymentMethod"] = payment_method.value
        payload = await self._request("PATCH", f"/bookings/{booking_id}/payment", json=body)
        return payload or {}

    async def delete_booking(self, booking_id: str) -> None:
        await self._request("DELETE", f"/bookings/{booking_id}")

    async def list_my_bookings(self) -> list[Booking]:
        return self._parse_bookings(await self._request("GET", "/bookings/my"))

    async def list_all_bookings(self) -> list[Booking]:
        return self._parse_bookings(await self._request("GET", "/bookings/all"))

    async def list_provider_bookings(self) -> list[Booking]:
        return self._parse_bookings(await self._request("GET", "/provider/bookings"))

    # --- Services & offers ---

    async def get_service(self, service_id: str) -> Service:
        payload = await self._request("GET", f"/services/{service_id}")
        return _parse(Service, _unwrap(payload, "service"))

    async def get_service_offers(self, service_id: str) -> list[SpecialOffer]:
        payload = await self._request("GET", f"/special-offers/service/{service_id}")
        offers = payload.get("offers", []) if isinstance(payload, dict) else []
        return [_parse(SpecialOffer, raw) for raw in offers]

    # --- Profiles ---

    async def get_user_me(self) -> UserProfile:
        payload = await self._request("GET", "/user/me")
        return _parse(UserProfile, _unwrap(payload, "user"))

    async def get_auth_me(self) -> UserProfile:
        payload = await self._request("GET", "/auth/me")
        return _parse(UserProfile, _unwrap(payload, "user"))

    # --- Memberships ---

    async def get_membership_invoice(self, membership_id: str) -> Invoice:
        payload = await self._request("GET", f"/premium-memberships/{membership_id}/invoice")
        return _parse(Invoice, _unwrap(payload, "invoice"))
