"""
Command-line entry point for the HomeHub booking core.

Talks to the REST backend configured by HOMEHUB_API_URL. A login token can
be given with --token; it is kept in HOMEHUB_SESSION_FILE when that is set.

Usage:
    Guest cash booking:
        python main.py book --service 64f... --date 2026-11-02 --time 10:00 \
            --name "Abebe Kebede" --email abebe@example.com --phone 0911000000 \
            --address "Bole, Addis Ababa"
    Online booking with simulated payment:
        python main.py --token $TOKEN book --service 64f... --date 2026-11-02 \
            --time 14:00 --payment online --confirm-payment
    Provider confirms a booking:
        python main.py --token $TOKEN status 65a... confirmed --role provider
    Booking counts for a role:
        python main.py --token $TOKEN list --role admin
    Membership invoice:
        python main.py --token $TOKEN membership-invoice 66b...
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from homehub.api.client import HomeHubClient
from homehub.api.errors import HomeHubError
from homehub.booking.invoice import save_invoice
from homehub.booking.lifecycle import ActorRole, BookingLifecycleManager, summarize_bookings
from homehub.booking.request_builder import BookingForm
from homehub.booking.workflow import BookingWorkflow
from homehub.config import settings
from homehub.schemas.booking_schema import BookingStatus, PaymentMethod
from homehub.schemas.customer_schema import ContactDetails
from homehub.session import SessionStore, open_session_store

logger = logging.getLogger(__name__)


async def _book(args: argparse.Namespace, store: SessionStore) -> int:
    guest = ContactDetails(
        full_name=args.name or "",
        email=args.email or "",
        phone=args.phone or "",
        address=args.address or "",
    )
    form = BookingForm(
        service_id=args.service,
        date=args.date,
        time=args.time,
        payment_method=args.payment,
        note=args.note,
        referral_code=args.referral,
    )
    async with HomeHubClient(store) as client:
        workflow = BookingWorkflow(client, store)
        outcome = await workflow.book(form, guest=guest)
        print(outcome.message)
        if not outcome.success:
            return 1

        if outcome.intent is not None and outcome.invoice is None:
            if not args.confirm_payment:
                print(f"Booking {outcome.booking.id} awaits online payment.")
                return 0
            outcome = await workflow.confirm_payment(outcome.intent)
            print(outcome.message)

    if outcome.invoice is not None:
        path = save_invoice(outcome.invoice, Path(args.output_dir))
        print(f"Invoice {outcome.invoice.reference} saved to {path}")
    return 0


async def _status(args: argparse.Namespace, store: SessionStore) -> int:
    role = ActorRole(args.role)
    async with HomeHubClient(store) as client:
        manager = BookingLifecycleManager(client)
        booking = await manager.find(args.booking_id, role)
        if booking is None:
            print(f"Booking {args.booking_id} not found.")
            return 1
        updated = await manager.transition(booking, BookingStatus(args.new_status), role)
    print(f"Booking {updated.id} is now {updated.status.value}.")
    return 0


async def _delete(args: argparse.Namespace, store: SessionStore) -> int:
    async with HomeHubClient(store) as client:
        await BookingLifecycleManager(client).delete(args.booking_id)
    print(f"Booking {args.booking_id} deleted.")
    return 0


async def _list(args: argparse.Namespace, store: SessionStore) -> int:
    async with HomeHubClient(store) as client:
        bookings = await BookingLifecycleManager(client).list_for_role(ActorRole(args.role))
    for booking in bookings:
        print(
            f"{booking.id}  {booking.status.value:<10} {booking.payment_status.value:<8} "
            f"{booking.date.isoformat() if booking.date else '-'}"
        )
    stats = summarize_bookings(bookings)
    print(
        f"total={stats.total} pending={stats.pending} confirmed={stats.confirmed} "
        f"cancelled={stats.cancelled} completed={stats.completed} "
        f"earnings={stats.total_earnings:.2f} {settings.invoice.currency}"
    )
    return 0


async def _membership_invoice(args: argparse.Namespace, store: SessionStore) -> int:
    async with HomeHubClient(store) as client:
        invoice = await client.get_membership_invoice(args.membership_id)
    path = save_invoice(invoice, Path(args.output_dir))
    print(f"Invoice {invoice.reference} saved to {path}")
    return 0


COMMANDS = {
    "book": _book,
    "status": _status,
    "delete": _delete,
    "list": _list,
    "membership-invoice": _membership_invoice,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="HomeHub booking client.")
    parser.add_argument("--token", default=None, help="Bearer token for an authenticated session.")
    parser.add_argument(
        "--output-dir",
        default=settings.invoice.output_dir,
        help="Directory for invoice text files (default: INVOICE_OUTPUT_DIR).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    book = subparsers.add_parser("book", help="Create a booking.")
    book.add_argument("--service", required=True, help="Service id.")
    book.add_argument("--date", required=True, help="Date as YYYY-MM-DD.")
    book.add_argument("--time", required=True, help="Time slot as HH:MM.")
    book.add_argument(
        "--payment",
        default=PaymentMethod.CASH.value,
        choices=[m.value for m in PaymentMethod],
    )
    book.add_argument("--note", default=None)
    book.add_argument("--referral", default=None, help="Referral code.")
    book.add_argument("--name", default=None, help="Guest full name.")
    book.add_argument("--email", default=None, help="Guest email.")
    book.add_argument("--phone", default=None, help="Guest phone.")
    book.add_argument("--address", default=None, help="Guest address.")
    book.add_argument(
        "--confirm-payment",
        action="store_true",
        help="Simulate a successful online payment and issue the invoice.",
    )

    status = subparsers.add_parser("status", help="Change a booking's status.")
    status.add_argument("booking_id")
    status.add_argument("new_status", choices=[s.value for s in BookingStatus])
    status.add_argument("--role", default=ActorRole.SEEKER.value, choices=[r.value for r in ActorRole])

    delete = subparsers.add_parser("delete", help="Delete a booking.")
    delete.add_argument("booking_id")

    listing = subparsers.add_parser("list", help="List bookings visible to a role.")
    listing.add_argument("--role", default=ActorRole.SEEKER.value, choices=[r.value for r in ActorRole])

    membership = subparsers.add_parser("membership-invoice", help="Download a membership invoice.")
    membership.add_argument("membership_id")

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    store = open_session_store(settings.session_file)
    if args.token and args.token != store.get_token():
        store.clear()
        store.set_token(args.token)

    try:
        return asyncio.run(COMMANDS[args.command](args, store))
    except HomeHubError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(exc.user_message, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
