"""Tests for invoice numbering, derivation and text export."""

import re

import pytest

from homehub.booking.invoice import (
    InvoiceGenerator,
    hashed_invoice_number,
    invoice_filename,
    invoice_number_for,
    legacy_invoice_number,
    render_invoice_text,
    save_invoice,
)
from homehub.booking.payment import PaymentBranchHandler
from homehub.schemas.invoice_schema import Invoice
from homehub.schemas.customer_schema import UserProfile
from homehub.session import InMemorySessionStore
from tests.conftest import NOW, PROFILE_PAYLOAD, fixed_clock, make_booking


@pytest.fixture
def generator():
    return InvoiceGenerator(clock=fixed_clock, currency="ETB", scheme="hash")


class TestInvoiceNumbers:
    def test_legacy(self):
        # b=98 k=107 -=45 1=49
        assert legacy_invoice_number("bk-1") == "INV-BKG-0299"

    def test_legacy_collides_on_anagrams(self):
        assert legacy_invoice_number("ab") == legacy_invoice_number("ba")

    def test_hashed_format(self):
        assert re.fullmatch(r"INV-BKG-[0-9A-F]{8}", hashed_invoice_number("bk-1"))

    def test_hashed_separates_anagrams(self):
        assert hashed_invoice_number("ab") != hashed_invoice_number("ba")

    def test_scheme_selection(self):
        assert invoice_number_for("bk-1", scheme="legacy") == "INV-BKG-0299"
        assert invoice_number_for("bk-1", scheme="hash") == hashed_invoice_number("bk-1")

    def test_custom_prefix(self):
        assert invoice_number_for("bk-1", scheme="legacy", prefix="HH-") == "HH-0299"


class TestGenerate:
    def test_missing_inputs(self, generator, service, booking):
        assert generator.generate(None, service, "cash", None) is None
        assert generator.generate(booking, None, "cash", None) is None

    def test_guest_cash_invoice(self, generator, service):
        invoice = generator.generate(make_booking(amount=800), service, "cash", "CASH-1-ABC")

        assert invoice.booking_id == "bk-1"
        assert invoice.customer.name == "Abebe Kebede"
        assert invoice.customer.email == "abebe@example.com"
        assert invoice.service.name == "Deep Cleaning"
        assert invoice.service.provider_name == "Sparkle Co"
        assert invoice.amount.subtotal == invoice.amount.total == 800
        assert invoice.amount.tax == 0
        assert invoice.amount.currency == "ETB"
        assert invoice.payment.status == "pending"
        assert invoice.payment.method == "cash"
        assert invoice.issued_at == NOW

    def test_amount_falls_back_to_service_price(self, generator, service, booking):
        assert generator.generate(booking, service, "cash", None).amount.total == 1000

    def test_confirmed_online_is_paid(self, generator, service):
        booking = make_booking(paymentMethod="online")
        invoice = generator.generate(booking, service, "online", "TXN-1", confirmed=True)
        assert invoice.payment.status == "paid"

    def test_already_paid_booking(self, generator, service):
        booking = make_booking(paymentMethod="online", paymentStatus="paid")
        assert generator.generate(booking, service, "online", "TXN-1").payment.status == "paid"

    def test_same_booking_same_number(self, generator, service, booking):
        first = generator.generate(booking, service, "cash", "CASH-1")
        second = generator.generate(booking, service, "cash", "CASH-2")
        assert first.invoice_number == second.invoice_number

    def test_populated_user(self, generator, service):
        booking = make_booking(guestInfo=None, user=PROFILE_PAYLOAD)
        invoice = generator.generate(booking, service, "cash", None)
        assert invoice.customer.name == "Tigist Alemu"
        assert invoice.customer.address == "Piassa, Addis Ababa"

    def test_user_id_falls_back_to_cached_profile(self, service):
        store = InMemorySessionStore(token="t", profile=UserProfile.model_validate(PROFILE_PAYLOAD))
        generator = InvoiceGenerator(store=store, clock=fixed_clock, currency="ETB")
        booking = make_booking(guestInfo=None, user="user-1")

        invoice = generator.generate(booking, service, "cash", None)

        assert invoice.customer.email == "tigist@example.com"

    def test_unknown_customer_placeholders(self, generator, service):
        booking = make_booking(guestInfo=None, user="user-1")
        invoice = generator.generate(booking, service, "cash", None)
        assert invoice.customer.name == "Guest"
        assert invoice.customer.email == "N/A"

    def test_from_outcome(self, generator, client, service):
        payments = PaymentBranchHandler(client, clock=fixed_clock)
        _, intent = payments.route(make_booking(amount=800), service)
        invoice = generator.from_outcome(payments.settle_cash(intent))
        assert invoice.payment.transaction_id.startswith("CASH-")
        assert invoice.amount.total == 800


class TestRenderAndSave:
    def test_booking_text(self, generator, service, booking):
        text = render_invoice_text(generator.generate(booking, service, "cash", "CASH-1"))
        assert text.startswith("INVOICE\n")
        assert "[Customer]" in text
        assert "Name: Abebe Kebede" in text
        assert "[Service]" in text
        assert "Total: 1,000.00 ETB" in text
        assert "Status: PENDING" in text
        assert "Transaction ID: CASH-1" in text
        assert "[Plan]" not in text

    def test_membership_text(self):
        invoice = Invoice.model_validate(
            {
                "invoiceNumber": "INV-MEM-0001",
                "date": "2026-03-01T00:00:00Z",
                "membershipId": "mem-1",
                "customer": {"name": "Tigist Alemu", "organization": "Tigist Cleaning"},
                "plan": {"name": "Gold", "type": "provider", "period": "monthly"},
                "amount": {"subtotal": 500, "total": 500},
                "payment": {"status": "paid"},
                "dates": {"startDate": "2026-03-01T00:00:00Z", "endDate": "2026-04-01T00:00:00Z"},
            }
        )
        text = render_invoice_text(invoice)
        assert "Membership ID: mem-1" in text
        assert "Organization: Tigist Cleaning" in text
        assert "[Plan]" in text
        assert "[Membership Period]" in text
        assert "End: 2026-04-01 00:00" in text
        assert "[Service]" not in text
        assert "Method: N/A" in text

    def test_save(self, tmp_path, service, booking):
        generator = InvoiceGenerator(clock=fixed_clock, currency="ETB", scheme="legacy")
        invoice = generator.generate(booking, service, "cash", "CASH-1")

        path = save_invoice(invoice, tmp_path / "invoices")

        assert path.name == "invoice-INV-BKG-0299.txt"
        assert invoice_filename(invoice) == path.name
        assert path.read_text(encoding="utf-8") == render_invoice_text(invoice)
