"""
Booking request builder: Validate -> Build -> Submit -> Merge.

Validation runs in a fixed order and stops at the first failure, so the
caller gets exactly one message and nothing is sent. Submission uses the
extended booking timeout, and the server's record is merged with locally
known identity so the next step always has complete contact data.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Optional

from pydantic import ValidationError

from homehub.api.client import HomeHubClient
from homehub.api.errors import AuthError, BookingValidationError, NotFoundError, UnknownApiError
from homehub.config import settings
from homehub.logging_context import get_attempt_logger
from homehub.schemas.booking_schema import Booking, BookingCreateRequest, PaymentMethod
from homehub.schemas.customer_schema import ResolvedIdentity
from homehub.utils import Clock, is_blank, normalize_referral_code, utc_now

logger = get_attempt_logger(__name__)


def local_timezone() -> tzinfo:
    return datetime.now().astimezone().tzinfo or timezone.utc


def to_iso_utc(moment: datetime) -> str:
    """Render like a browser's ``Date.toISOString()``."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class BookingForm:
    """Raw booking form input, as typed by the user."""

    service_id: str = ""
    date: str = ""
    time: str = ""
    payment_method: str = PaymentMethod.CASH.value
    note: Optional[str] = None
    referral_code: Optional[str] = None


class BookingRequestBuilder:
    """Validates booking forms and submits them to ``POST /bookings``."""

    def __init__(
        self,
        client: HomeHubClient,
        clock: Clock = utc_now,
        tz: Optional[tzinfo] = None,
        time_slots: Optional[tuple[str, ...]] = None,
        min_lead_days: Optional[int] = None,
    ) -> None:
        self.client = client
        self.clock = clock
        self.tz = tz or local_timezone()
        self.time_slots = time_slots or settings.booking.time_slots
        self.min_lead_days = min_lead_days or settings.booking.min_lead_days

    def earliest_date(self) -> date:
        """First calendar day a booking may be scheduled on."""
        today = self.clock().astimezone(self.tz).date()
        return today + timedelta(days=self.min_lead_days)

    def scheduled_at(self, date_str: str, time_str: str) -> datetime:
        """Combine a date and a time slot into an aware, future datetime."""
        try:
            day = date.fromisoformat(date_str.strip())
        except ValueError:
            raise BookingValidationError("Please choose a valid date") from None

        slot = time_str.strip()
        if slot not in self.time_slots:
            raise BookingValidationError("Please choose one of the available time slots")
        hour, minute = (int(part) for part in slot.split(":"))

        if day < self.earliest_date():
            raise BookingValidationError(
                f"Bookings must be made at least {self.min_lead_days} day(s) in advance"
            )

        moment = datetime.combine(day, time(hour, minute), tzinfo=self.tz)
        if moment <= self.clock():
            raise BookingValidationError("Please choose a date and time in the future")
        return moment

    def build(self, form: BookingForm, identity: ResolvedIdentity) -> BookingCreateRequest:
        """
        Validate the form and assemble the creation request.

        Order: guest fields -> date/time presence -> date/time validity ->
        service id -> payment method.

        Raises:
            BookingValidationError: On the first failing check.
        """
        if not identity.is_authenticated:
            missing = identity.contact.missing_fields()
            if missing:
                logger.debug("Guest booking missing fields: %s", missing)
                raise BookingValidationError("Please fill in all required fields")

        if is_blank(form.date) or is_blank(form.time):
            raise BookingValidationError("Please select a date and time")

        moment = self.scheduled_at(form.date, form.time)

        if is_blank(form.service_id):
            raise BookingValidationError("Service is missing. Please refresh and try again.")

        try:
            method = PaymentMethod(form.payment_method or PaymentMethod.CASH.value)
        except ValueError:
            raise BookingValidationError(
                f"Unknown payment method: {form.payment_method}"
            ) from None

        return BookingCreateRequest(
            service=form.service_id.strip(),
            date=to_iso_utc(moment),
            note=form.note or "",
            payment_method=method,
            referral_code=normalize_referral_code(form.referral_code),
            guest_info=None if identity.is_authenticated else identity.contact.stripped(),
        )

    async def submit(
        self,
        request: BookingCreateRequest,
        identity: ResolvedIdentity,
        amount: Optional[float] = None,
    ) -> Booking:
        """
        Create the booking remotely and return the merged view model.

        Raises:
            ApiError: One of the taxonomy errors, with a booking-specific
                message for auth and not-found failures.
        """
        logger.info(
            "Submitting booking for service %s at %s (%s, %s)",
            request.service,
            request.date,
            request.payment_method.value,
            "user" if identity.is_authenticated else "guest",
        )
        try:
            payload = await self.client.create_booking(
                request, timeout=settings.api.booking_timeout_sec
            )
        except AuthError as exc:
            raise AuthError("Please log in to book a service", status_code=exc.status_code) from exc
        except NotFoundError as exc:
            raise NotFoundError(
                "Service not found. Please refresh and try again.", status_code=exc.status_code
            ) from exc

        booking = self.merge(payload, request, identity, amount)
        logger.info("Booking %s created with status %s", booking.id, booking.status.value)
        return booking

    def merge(
        self,
        payload: dict[str, Any],
        request: BookingCreateRequest,
        identity: ResolvedIdentity,
        amount: Optional[float] = None,
    ) -> Booking:
        """Fill in fields the server did not echo back."""
        data = dict(payload)
        data.setdefault("paymentMethod", request.payment_method.value)
        data.setdefault("note", request.note)
        if request.referral_code:
            data.setdefault("referralCode", request.referral_code)
        if amount is not None:
            data["amount"] = amount

        if identity.is_authenticated and identity.user is not None:
            user = data.get("user")
            if not isinstance(user, dict):
                profile = identity.user.model_dump()
                profile["id"] = user or identity.user.id
                data["user"] = profile
            data.pop("guestInfo", None)
        else:
            guest = data.get("guestInfo")
            if not isinstance(guest, dict) or not any(guest.values()):
                data["guestInfo"] = identity.contact.stripped().model_dump(by_alias=True)
            data["user"] = None

        try:
            return Booking.model_validate(data)
        except ValidationError as exc:
            logger.error("Unexpected booking payload from server: %s", exc)
            raise UnknownApiError("Unexpected response from server") from exc
