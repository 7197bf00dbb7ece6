"""
Booking lifecycle: an explicit transition table over ``BookingStatus``.

Defines which status changes are legal and which roles may perform them.
Every change is checked locally before any request is sent, and the
booking's service must still resolve on the server before its status
may change.

Usage:
    manager = BookingLifecycleManager(client)
    booking = await manager.transition(booking, BookingStatus.CONFIRMED, ActorRole.PROVIDER)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from homehub.api.client import HomeHubClient
from homehub.api.errors import InvalidTransitionError, NotFoundError, OrphanedBookingError
from homehub.schemas.booking_schema import (
    Booking,
    BookingStatus,
    BookingUpdateRequest,
    PaymentStatus,
)
from homehub.schemas.service_schema import Service

logger = logging.getLogger(__name__)


class ActorRole(str, Enum):
    """Who is asking for the change."""

    SEEKER = "seeker"
    PROVIDER = "provider"
    ADMIN = "admin"


ADMIN_ROLE_NAMES = frozenset({"admin", "superadmin", "support"})

_STAFF = frozenset({ActorRole.PROVIDER, ActorRole.ADMIN})
_ANYONE = frozenset(ActorRole)

# (from, to) -> roles allowed to perform it. Anything absent is illegal.
TRANSITIONS: dict[tuple[BookingStatus, BookingStatus], frozenset[ActorRole]] = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED): _STAFF,
    (BookingStatus.PENDING, BookingStatus.CANCELLED): _ANYONE,
    (BookingStatus.CONFIRMED, BookingStatus.COMPLETED): _STAFF,
}

TERMINAL_STATES = frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED})


def role_from_name(name: Optional[str]) -> ActorRole:
    """Map a profile role string (``superadmin``, ``provider``, ...) to an ActorRole."""
    normalized = (name or "").lower().strip()
    if normalized in ADMIN_ROLE_NAMES:
        return ActorRole.ADMIN
    if normalized == ActorRole.PROVIDER.value:
        return ActorRole.PROVIDER
    return ActorRole.SEEKER


def can_transition(from_status: BookingStatus, to_status: BookingStatus) -> bool:
    return (from_status, to_status) in TRANSITIONS


def is_terminal(status: BookingStatus) -> bool:
    return status in TERMINAL_STATES


def available_actions(status: BookingStatus, role: ActorRole) -> list[BookingStatus]:
    """Target statuses ``role`` may move a booking to from ``status``."""
    return [
        to_status
        for (from_status, to_status), roles in TRANSITIONS.items()
        if from_status == status and role in roles
    ]


class BookingLifecycleManager:
    """Applies status transitions and hard deletes through the REST API."""

    def __init__(self, client: HomeHubClient) -> None:
        self.client = client

    def check_transition(
        self, booking: Booking, new_status: BookingStatus, role: ActorRole
    ) -> None:
        """
        Reject illegal or unauthorized transitions.

        Raises:
            InvalidTransitionError: With the valid targets listed.
        """
        allowed_roles = TRANSITIONS.get((booking.status, new_status))
        if allowed_roles is None:
            valid = [s.value for s in available_actions(booking.status, role)]
            raise InvalidTransitionError(
                f"Cannot change booking from '{booking.status.value}' to "
                f"'{new_status.value}'. Valid changes: {valid}"
            )
        if role not in allowed_roles:
            raise InvalidTransitionError(
                f"A {role.value} cannot mark a booking as '{new_status.value}'"
            )

    async def _ensure_service(self, service_id: str) -> Service:
        try:
            return await self.client.get_service(service_id)
        except NotFoundError as exc:
            raise OrphanedBookingError() from exc

    async def transition(
        self, booking: Booking, new_status: BookingStatus, role: ActorRole
    ) -> Booking:
        """
        Move ``booking`` to ``new_status``.

        Concurrent changes by other sessions are last-write-wins at the
        server; no version token is sent.

        Raises:
            InvalidTransitionError: Illegal or unauthorized change.
            OrphanedBookingError: The booking's service no longer exists.
            ApiError: The update call failed.
        """
        self.check_transition(booking, new_status, role)
        await self._ensure_service(booking.service_id)

        updated = await self.client.update_booking(
            booking.id, BookingUpdateRequest(service=booking.service_id, status=new_status)
        )
        if updated.amount is None and booking.amount is not None:
            updated = updated.model_copy(update={"amount": booking.amount})

        logger.info(
            "Booking %s: %s -> %s by %s",
            booking.id, booking.status.value, updated.status.value, role.value,
        )
        return updated

    async def confirm(self, booking: Booking, role: ActorRole = ActorRole.PROVIDER) -> Booking:
        return await self.transition(booking, BookingStatus.CONFIRMED, role)

    async def cancel(self, booking: Booking, role: ActorRole = ActorRole.SEEKER) -> Booking:
        return await self.transition(booking, BookingStatus.CANCELLED, role)

    async def complete(self, booking: Booking, role: ActorRole = ActorRole.PROVIDER) -> Booking:
        return await self.transition(booking, BookingStatus.COMPLETED, role)

    async def delete(self, booking_id: str) -> None:
        """Hard removal; independent of status."""
        await self.client.delete_booking(booking_id)
        logger.info("Booking %s deleted", booking_id)

    async def list_for_role(self, role: ActorRole) -> list[Booking]:
        """Role-scoped listing: seekers see their own, providers their services', admins all."""
        if role == ActorRole.ADMIN:
            return await self.client.list_all_bookings()
        if role == ActorRole.PROVIDER:
            return await self.client.list_provider_bookings()
        return await self.client.list_my_bookings()

    async def find(self, booking_id: str, role: ActorRole) -> Optional[Booking]:
        for booking in await self.list_for_role(role):
            if booking.id == booking_id:
                return booking
        return None


@dataclass
class BookingStats:
    """Per-status counts plus earnings from completed, paid bookings."""

    total: int = 0
    pending: int = 0
    confirmed: int = 0
    cancelled: int = 0
    completed: int = 0
    total_earnings: float = 0.0


def _booking_price(booking: Booking) -> float:
    if booking.amount is not None:
        return booking.amount
    if isinstance(booking.service, Service):
        return booking.service.price
    return 0.0


def summarize_bookings(bookings: Iterable[Booking]) -> BookingStats:
    stats = BookingStats()
    for booking in bookings:
        stats.total += 1
        setattr(stats, booking.status.value, getattr(stats, booking.status.value) + 1)
        if (
            booking.status == BookingStatus.COMPLETED
            and booking.payment_status == PaymentStatus.PAID
        ):
            stats.total_earnings += _booking_price(booking)
    return stats
