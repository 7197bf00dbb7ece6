"""
End-to-end booking attempt: Resolve -> Validate -> Submit -> Route -> Invoice.

Each attempt gets its own correlation id so every log line it produces can
be grouped. Errors from any stage are turned into a failed
``BookingOutcome`` carrying the user-facing message; nothing is retried.
"""

import uuid
from dataclasses import dataclass
from datetime import tzinfo
from typing import Optional

from homehub.api.client import HomeHubClient
from homehub.api.errors import (
    ApiError,
    BookingValidationError,
    DuplicateSubmissionError,
    HomeHubError,
)
from homehub.booking.identity import IdentityResolver
from homehub.booking.invoice import InvoiceGenerator
from homehub.booking.payment import PaymentBranchHandler, PaymentIntent, PaymentRoute
from homehub.booking.pricing import best_offer, quote_price
from homehub.booking.request_builder import BookingForm, BookingRequestBuilder
from homehub.logging_context import get_attempt_logger, set_attempt_id
from homehub.schemas.booking_schema import Booking
from homehub.schemas.customer_schema import ContactDetails, ResolvedIdentity
from homehub.schemas.invoice_schema import Invoice
from homehub.schemas.service_schema import Service, SpecialOffer
from homehub.session import SessionStore
from homehub.utils import Clock, utc_now

logger = get_attempt_logger(__name__)


@dataclass
class BookingOutcome:
    """Result of a booking attempt or a payment confirmation."""

    success: bool
    message: str
    booking: Optional[Booking] = None
    route: Optional[PaymentRoute] = None
    intent: Optional[PaymentIntent] = None
    invoice: Optional[Invoice] = None


def _fingerprint(form: BookingForm, identity: ResolvedIdentity) -> tuple[str, ...]:
    who = (identity.user.id if identity.user else None) or identity.contact.email.strip().lower()
    return (form.service_id.strip(), form.date.strip(), form.time.strip(), who or "")


class BookingWorkflow:
    """Drives one booking from form input to invoice or payment collection."""

    def __init__(
        self,
        client: HomeHubClient,
        store: SessionStore,
        clock: Clock = utc_now,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.client = client
        self.clock = clock
        self.identity = IdentityResolver(client, store)
        self.builder = BookingRequestBuilder(client, clock=clock, tz=tz)
        self.payments = PaymentBranchHandler(client, clock=clock)
        self.invoices = InvoiceGenerator(store=store, clock=clock)
        self._in_flight: set[tuple[str, ...]] = set()

    async def _load_offer(self, service: Service) -> Optional[SpecialOffer]:
        try:
            offers = await self.client.get_service_offers(service.id)
        except ApiError as exc:
            logger.info("No offers for service %s: %s", service.id, exc.user_message)
            return None
        return best_offer(service, offers, self.clock())

    async def book(
        self,
        form: BookingForm,
        guest: Optional[ContactDetails] = None,
        service: Optional[Service] = None,
        offer: Optional[SpecialOffer] = None,
    ) -> BookingOutcome:
        """
        Run a full booking attempt.

        Args:
            form: Date, time slot, service id, payment method and extras.
            guest: Contact details used when there is no valid session.
            service: Already-loaded service; fetched when omitted.
            offer: Offer shown to the user; the best current one is
                looked up when omitted.

        Returns:
            A ``BookingOutcome``. Cash bookings carry an invoice; online
            bookings carry the payment intent to confirm.
        """
        set_attempt_id(f"ATT-{uuid.uuid4().hex[:8]}")
        identity = await self.identity.resolve(guest)
        key = _fingerprint(form, identity)

        try:
            if key in self._in_flight:
                raise DuplicateSubmissionError()
            self._in_flight.add(key)
            try:
                request = self.builder.build(form, identity)
                if service is None:
                    service = await self.client.get_service(request.service)
                elif service.id != request.service:
                    raise BookingValidationError(
                        "Service details are out of date. Please refresh and try again."
                    )
                if offer is None:
                    offer = await self._load_offer(service)
                quote = quote_price(service, offer, self.clock())
                booking = await self.builder.submit(request, identity, amount=quote.amount)
            finally:
                self._in_flight.discard(key)
        except HomeHubError as exc:
            logger.warning("Booking attempt failed: %s", exc.user_message)
            return BookingOutcome(success=False, message=exc.user_message)

        route, intent = self.payments.route(booking, service, offer)
        if route == PaymentRoute.COLLECT_PAYMENT:
            return BookingOutcome(
                success=True,
                message=f"Booking created. Please complete payment of {intent.amount:.2f}.",
                booking=booking,
                route=route,
                intent=intent,
            )

        invoice = self.invoices.from_outcome(self.payments.settle_cash(intent))
        return BookingOutcome(
            success=True,
            message="Booking created. Pay in cash when the service is delivered.",
            booking=booking,
            route=route,
            intent=intent,
            invoice=invoice,
        )

    async def confirm_payment(self, intent: PaymentIntent) -> BookingOutcome:
        """Record the online payment for a booking and issue its invoice."""
        outcome = await self.payments.confirm_online(intent)
        invoice = self.invoices.from_outcome(outcome)
        message = "Payment received."
        if not outcome.server_updated:
            message += " Payment status will sync shortly."
        return BookingOutcome(
            success=True,
            message=message,
            booking=outcome.booking,
            route=PaymentRoute.ISSUE_INVOICE,
            intent=intent,
            invoice=invoice,
        )
