"""
Invoice derivation and plain-text export.

An invoice is recomputed on demand from a booking, its service and the
payment outcome; it is never the source of truth. Invoice numbers are
derived from the booking id so the same booking always reproduces the
same number without asking the server.
"""

import hashlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from homehub.booking.payment import PaymentOutcome
from homehub.config import settings
from homehub.schemas.booking_schema import Booking, PaymentMethod, PaymentStatus
from homehub.schemas.customer_schema import UserProfile
from homehub.schemas.invoice_schema import (
    Invoice,
    InvoiceAmount,
    InvoiceCustomer,
    InvoicePayment,
    InvoiceServiceInfo,
)
from homehub.schemas.service_schema import Service
from homehub.session import SessionStore
from homehub.utils import Clock, utc_now

logger = logging.getLogger(__name__)

GUEST_NAME = "Guest"
NOT_AVAILABLE = "N/A"
LEGACY_MODULUS = 10000
HASH_DIGITS = 8


def legacy_invoice_number(booking_id: str, prefix: str = "INV-BKG-") -> str:
    """Sum of character codes mod 10000, zero-padded to four digits."""
    total = sum(ord(ch) for ch in booking_id)
    return f"{prefix}{total % LEGACY_MODULUS:04d}"


def hashed_invoice_number(booking_id: str, prefix: str = "INV-BKG-") -> str:
    digest = hashlib.sha256(booking_id.encode("utf-8")).hexdigest()
    return f"{prefix}{digest[:HASH_DIGITS].upper()}"


def invoice_number_for(
    booking_id: str, scheme: Optional[str] = None, prefix: Optional[str] = None
) -> str:
    scheme = scheme or settings.invoice.number_scheme
    prefix = prefix if prefix is not None else settings.invoice.number_prefix
    if scheme == "legacy":
        return legacy_invoice_number(booking_id, prefix)
    return hashed_invoice_number(booking_id, prefix)


class InvoiceGenerator:
    """Builds ``Invoice`` views for bookings."""

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        clock: Clock = utc_now,
        currency: Optional[str] = None,
        scheme: Optional[str] = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.currency = currency or settings.invoice.currency
        self.scheme = scheme or settings.invoice.number_scheme

    def _customer(self, booking: Booking) -> InvoiceCustomer:
        """guest info -> populated user -> cached profile -> placeholders."""
        if booking.guest_info is not None and not booking.guest_info.is_empty():
            guest = booking.guest_info
            return InvoiceCustomer(
                name=guest.full_name or GUEST_NAME,
                email=guest.email or NOT_AVAILABLE,
                phone=guest.phone or NOT_AVAILABLE,
                address=guest.address or NOT_AVAILABLE,
            )

        profile: Optional[UserProfile] = None
        if isinstance(booking.user, UserProfile) and (booking.user.name or booking.user.email):
            profile = booking.user
        elif self.store is not None:
            profile = self.store.get_profile()

        if profile is None:
            return InvoiceCustomer(
                name=GUEST_NAME, email=NOT_AVAILABLE, phone=NOT_AVAILABLE, address=NOT_AVAILABLE
            )
        return InvoiceCustomer(
            name=profile.name or GUEST_NAME,
            email=profile.email or NOT_AVAILABLE,
            phone=profile.phone or NOT_AVAILABLE,
            address=profile.address or NOT_AVAILABLE,
        )

    @staticmethod
    def _service(service: Service) -> InvoiceServiceInfo:
        return InvoiceServiceInfo(
            name=service.title or NOT_AVAILABLE,
            category=service.category or NOT_AVAILABLE,
            provider_name=service.provider_name or NOT_AVAILABLE,
            location=service.location or NOT_AVAILABLE,
        )

    def generate(
        self,
        booking: Optional[Booking],
        service: Optional[Service],
        payment_method: Union[PaymentMethod, str],
        transaction_id: Optional[str],
        amount: Optional[float] = None,
        confirmed: bool = False,
        paid_at: Optional[datetime] = None,
    ) -> Optional[Invoice]:
        """
        Derive the invoice for a booking.

        Args:
            amount: Resolved (possibly discounted) price. Defaults to the
                amount captured on the booking, then the service price.
            confirmed: True when an online payment was just confirmed.
            paid_at: Payment time; defaults to now.

        Returns:
            The invoice, or None when booking or service is missing.
        """
        if booking is None or service is None:
            logger.debug("Invoice requested without booking/service; nothing to render")
            return None

        method = PaymentMethod(payment_method)
        if amount is None:
            amount = booking.amount if booking.amount is not None else service.price
        paid = confirmed or booking.payment_status == PaymentStatus.PAID
        now = self.clock()

        return Invoice(
            invoice_number=invoice_number_for(booking.id, self.scheme),
            issued_at=now,
            booking_id=booking.id,
            customer=self._customer(booking),
            service=self._service(service),
            amount=InvoiceAmount(subtotal=amount, tax=0.0, total=amount, currency=self.currency),
            payment=InvoicePayment(
                status=(PaymentStatus.PAID if paid else PaymentStatus.PENDING).value,
                method=method.value,
                transaction_id=transaction_id,
                paid_at=paid_at or now,
            ),
        )

    def from_outcome(self, outcome: PaymentOutcome) -> Optional[Invoice]:
        return self.generate(
            outcome.booking,
            outcome.service,
            outcome.method,
            outcome.transaction_id,
            amount=outcome.amount,
            confirmed=outcome.payment_status == PaymentStatus.PAID,
            paid_at=outcome.paid_at,
        )


def _fmt_date(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else NOT_AVAILABLE


def _fmt_money(value: float, currency: str) -> str:
    return f"{value:,.2f} {currency}"


def _or_na(value: Optional[str]) -> str:
    return value or NOT_AVAILABLE


def render_invoice_text(invoice: Invoice) -> str:
    """Flat, line-delimited key/value document for download."""
    lines = [
        "INVOICE",
        "=======",
        f"Invoice Number: {_or_na(invoice.invoice_number)}",
        f"Issue Date: {_fmt_date(invoice.issued_at)}",
    ]
    if invoice.booking_id:
        lines.append(f"Booking ID: {invoice.booking_id}")
    if invoice.membership_id:
        lines.append(f"Membership ID: {invoice.membership_id}")

    customer = invoice.customer
    lines += [
        "",
        "[Customer]",
        f"Name: {customer.name}",
        f"Email: {_or_na(customer.email)}",
        f"Phone: {_or_na(customer.phone)}",
        f"Address: {_or_na(customer.address)}",
    ]
    if customer.organization:
        lines.append(f"Organization: {customer.organization}")

    if invoice.service is not None:
        lines += [
            "",
            "[Service]",
            f"Name: {invoice.service.name}",
            f"Category: {_or_na(invoice.service.category)}",
            f"Provider: {_or_na(invoice.service.provider_name)}",
            f"Location: {_or_na(invoice.service.location)}",
        ]
    if invoice.plan is not None:
        lines += [
            "",
            "[Plan]",
            f"Name: {_or_na(invoice.plan.name)}",
            f"Type: {_or_na(invoice.plan.type)}",
            f"Period: {_or_na(invoice.plan.period)}",
        ]

    amount = invoice.amount
    lines += [
        "",
        "[Amount]",
        f"Subtotal: {_fmt_money(amount.subtotal, amount.currency)}",
        f"Tax: {_fmt_money(amount.tax, amount.currency)}",
        f"Total: {_fmt_money(amount.total, amount.currency)}",
        "",
        "[Payment]",
        f"Status: {invoice.payment.status.upper()}",
        f"Method: {_or_na(invoice.payment.method)}",
        f"Transaction ID: {_or_na(invoice.payment.transaction_id)}",
        f"Paid At: {_fmt_date(invoice.payment.paid_at)}",
    ]

    if invoice.dates is not None:
        lines += [
            "",
            "[Membership Period]",
            f"Start: {_fmt_date(invoice.dates.start_date)}",
            f"End: {_fmt_date(invoice.dates.end_date)}",
        ]

    return "\n".join(lines) + "\n"


def invoice_filename(invoice: Invoice) -> str:
    return f"invoice-{invoice.reference}.txt"


def save_invoice(invoice: Invoice, directory: Optional[Path] = None) -> Path:
    """Write the text rendering to ``<directory>/invoice-<number>.txt``."""
    target_dir = Path(directory or settings.invoice.output_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / invoice_filename(invoice)
    path.write_text(render_invoice_text(invoice), encoding="utf-8")
    logger.info("Invoice %s written to %s", invoice.reference, path)
    return path
