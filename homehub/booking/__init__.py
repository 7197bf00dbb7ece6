from homehub.booking.identity import IdentityResolver
from homehub.booking.invoice import InvoiceGenerator, render_invoice_text, save_invoice
from homehub.booking.lifecycle import (
    ActorRole,
    BookingLifecycleManager,
    available_actions,
    summarize_bookings,
)
from homehub.booking.payment import PaymentBranchHandler, PaymentIntent, PaymentRoute
from homehub.booking.pricing import PriceQuote, quote_price
from homehub.booking.request_builder import BookingForm, BookingRequestBuilder
from homehub.booking.workflow import BookingOutcome, BookingWorkflow

__all__ = [
    "BookingWorkflow",
    "BookingOutcome",
    "BookingForm",
    "BookingRequestBuilder",
    "IdentityResolver",
    "BookingLifecycleManager",
    "ActorRole",
    "available_actions",
    "summarize_bookings",
    "PaymentBranchHandler",
    "PaymentIntent",
    "PaymentRoute",
    "PriceQuote",
    "quote_price",
    "InvoiceGenerator",
    "render_invoice_text",
    "save_invoice",
]
