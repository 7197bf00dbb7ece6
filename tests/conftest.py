"""Shared test fixtures and helpers."""

import json
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from homehub.api.client import HomeHubClient
from homehub.booking.request_builder import BookingForm
from homehub.schemas.booking_schema import Booking
from homehub.schemas.customer_schema import ContactDetails, UserProfile
from homehub.schemas.service_schema import Service, SpecialOffer
from homehub.session import InMemorySessionStore

BASE_URL = "http://homehub.test/api"

# Tuesday morning; earliest bookable day is 2026-03-11.
NOW = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)

SERVICE_PAYLOAD = {
    "_id": "svc-1",
    "title": "Deep Cleaning",
    "price": 1000,
    "category": {"_id": "cat-1", "name": "Cleaning"},
    "provider": {"_id": "prov-1", "name": "Sparkle Co"},
    "location": "Bole, Addis Ababa",
}

GUEST_PAYLOAD = {
    "fullName": "Abebe Kebede",
    "email": "abebe@example.com",
    "phone": "0911000000",
    "address": "Bole, Addis Ababa",
}

PROFILE_PAYLOAD = {
    "_id": "user-1",
    "name": "Tigist Alemu",
    "email": "tigist@example.com",
    "phone": "0922000000",
    "address": "Piassa, Addis Ababa",
    "role": "user",
}

Handler = Callable[[httpx.Request], httpx.Response]


def fixed_clock() -> datetime:
    return NOW


class FakeBackend:
    """Route table for ``httpx.MockTransport`` that records every request."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Union[Handler, tuple[int, Any]]] = {}
        self.requests: list[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body: Any = None,
        handler: Optional[Handler] = None,
    ) -> None:
        self.routes[(method, path)] = handler or (status, json_body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"message": "Route not found"})
        if callable(route):
            return route(request)
        status, body = route
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path.removeprefix("/api") == path
        ]


def request_json(request: httpx.Request) -> dict[str, Any]:
    return json.loads(request.content)


def echo_booking(request: httpx.Request) -> httpx.Response:
    """Mimics POST /bookings: stores the body, drops paymentMethod like the real schema."""
    body = request_json(request)
    record: dict[str, Any] = {
        "_id": "bk-1",
        "service": body["service"],
        "date": body["date"],
        "note": body.get("note", ""),
        "status": "pending",
        "paymentStatus": "pending",
        "createdAt": "2026-03-10T09:00:00.000Z",
    }
    if "guestInfo" in body:
        record["guestInfo"] = body["guestInfo"]
        record["user"] = None
    else:
        record["user"] = "user-1"
        record["guestInfo"] = {"fullName": "", "email": "", "phone": "", "address": ""}
    if "referralCode" in body:
        record["referralCode"] = body["referralCode"]
    return httpx.Response(201, json=record)


def make_booking(**overrides: Any) -> Booking:
    data: dict[str, Any] = {
        "_id": "bk-1",
        "service": "svc-1",
        "guestInfo": dict(GUEST_PAYLOAD),
        "date": "2026-03-12T10:00:00.000Z",
        "status": "pending",
        "paymentMethod": "cash",
        "paymentStatus": "pending",
    }
    data.update(overrides)
    return Booking.model_validate(data)


def make_offer(**overrides: Any) -> SpecialOffer:
    data: dict[str, Any] = {
        "_id": "off-1",
        "service": "svc-1",
        "title": "Spring sale",
        "discountType": "percentage",
        "discountValue": 20,
        "startDate": "2026-03-01T00:00:00Z",
        "endDate": "2026-03-31T00:00:00Z",
        "isActive": True,
    }
    data.update(overrides)
    return SpecialOffer.model_validate(data)


def make_form(**overrides: Any) -> BookingForm:
    values: dict[str, Any] = {
        "service_id": "svc-1",
        "date": "2026-03-12",
        "time": "10:00",
        "payment_method": "cash",
    }
    values.update(overrides)
    return BookingForm(**values)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def auth_store():
    return InMemorySessionStore(
        token="token-abc", profile=UserProfile.model_validate(PROFILE_PAYLOAD)
    )


@pytest.fixture
def make_client(backend):
    def _make(session_store) -> HomeHubClient:
        return HomeHubClient(
            session_store, base_url=BASE_URL, transport=httpx.MockTransport(backend)
        )

    return _make


@pytest.fixture
def client(make_client, store):
    return make_client(store)


@pytest.fixture
def service():
    return Service.model_validate(SERVICE_PAYLOAD)


@pytest.fixture
def guest():
    return ContactDetails.model_validate(GUEST_PAYLOAD)


@pytest.fixture
def booking():
    return make_booking()
