"""
Payment branching after a booking is created.

Cash bookings go straight to invoicing with payment left pending (cash is
reconciled out-of-band). Online bookings go through a payment-collection
step first; confirming it marks the booking paid on the server on a
best-effort basis.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from homehub.api.client import HomeHubClient
from homehub.api.errors import ApiError
from homehub.api.result import Result
from homehub.booking.pricing import quote_price
from homehub.schemas.booking_schema import Booking, PaymentMethod, PaymentStatus
from homehub.schemas.service_schema import Service, SpecialOffer
from homehub.utils import Clock, make_transaction_id, utc_now

logger = logging.getLogger(__name__)

ONLINE_TXN_PREFIX = "TXN"
CASH_TXN_PREFIX = "CASH"


class PaymentRoute(str, Enum):
    """Where the flow goes after booking creation."""

    COLLECT_PAYMENT = "collect_payment"
    ISSUE_INVOICE = "issue_invoice"


@dataclass
class PaymentIntent:
    """Navigation payload for the payment-collection step."""

    booking: Booking
    service: Service
    amount: float
    original_amount: float
    method: PaymentMethod
    type: str = "booking"


@dataclass
class PaymentOutcome:
    """Everything the invoice generator needs once payment is settled."""

    booking: Booking
    service: Service
    amount: float
    method: PaymentMethod
    transaction_id: str
    payment_status: PaymentStatus
    paid_at: datetime
    server_updated: bool = False


class PaymentBranchHandler:
    """Routes bookings by payment method and settles them."""

    def __init__(self, client: HomeHubClient, clock: Clock = utc_now) -> None:
        self.client = client
        self.clock = clock

    def route(
        self, booking: Booking, service: Service, offer: Optional[SpecialOffer] = None
    ) -> tuple[PaymentRoute, PaymentIntent]:
        """Pick the next step; a usable offer's price is the authoritative amount."""
        quote = quote_price(service, offer, self.clock())
        amount = booking.amount if booking.amount is not None else quote.amount
        intent = PaymentIntent(
            booking=booking,
            service=service,
            amount=amount,
            original_amount=quote.original_amount,
            method=booking.payment_method,
        )
        if booking.payment_method == PaymentMethod.ONLINE:
            logger.info("Booking %s routed to payment collection (%.2f)", booking.id, amount)
            return PaymentRoute.COLLECT_PAYMENT, intent
        logger.info("Booking %s is cash; skipping payment collection", booking.id)
        return PaymentRoute.ISSUE_INVOICE, intent

    def settle_cash(self, intent: PaymentIntent) -> PaymentOutcome:
        now = self.clock()
        return PaymentOutcome(
            booking=intent.booking,
            service=intent.service,
            amount=intent.amount,
            method=PaymentMethod.CASH,
            transaction_id=make_transaction_id(CASH_TXN_PREFIX, now),
            payment_status=PaymentStatus.PENDING,
            paid_at=now,
        )

    async def mark_paid(self, booking_id: str) -> Result[dict[str, Any]]:
        """PATCH the booking's payment status. Never raises."""
        try:
            payload = await self.client.update_payment(
                booking_id, PaymentStatus.PAID, PaymentMethod.ONLINE
            )
        except ApiError as exc:
            return Result.failure(exc)
        return Result.success(payload)

    async def confirm_online(self, intent: PaymentIntent) -> PaymentOutcome:
        """
        Record a (simulated) successful online payment.

        The server-side payment patch is best-effort: a failure is logged
        and the user still proceeds to the invoice.
        """
        now = self.clock()
        transaction_id = make_transaction_id(ONLINE_TXN_PREFIX, now)
        result = await self.mark_paid(intent.booking.id)
        if not result.ok:
            # Best-effort; the invoice is issued either way.
            logger.warning(
                "Could not mark booking %s paid: %s",
                intent.booking.id,
                result.error.user_message if result.error else "unknown error",
            )

        booking = intent.booking.model_copy(update={"payment_status": PaymentStatus.PAID})
        logger.info("Online payment %s recorded for booking %s", transaction_id, booking.id)
        return PaymentOutcome(
            booking=booking,
            service=intent.service,
            amount=intent.amount,
            method=PaymentMethod.ONLINE,
            transaction_id=transaction_id,
            payment_status=PaymentStatus.PAID,
            paid_at=now,
            server_updated=result.ok,
        )
