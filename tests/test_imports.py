"""Smoke tests: every module imports and the CLI parser is wired."""

import importlib

import pytest

MODULES = [
    "homehub.config",
    "homehub.logging_context",
    "homehub.utils",
    "homehub.session",
    "homehub.api",
    "homehub.api.client",
    "homehub.api.errors",
    "homehub.api.result",
    "homehub.schemas.booking_schema",
    "homehub.schemas.customer_schema",
    "homehub.schemas.invoice_schema",
    "homehub.schemas.service_schema",
    "homehub.booking",
    "homehub.booking.identity",
    "homehub.booking.invoice",
    "homehub.booking.lifecycle",
    "homehub.booking.payment",
    "homehub.booking.pricing",
    "homehub.booking.request_builder",
    "homehub.booking.workflow",
]


class TestModuleImports:
    @pytest.mark.parametrize("name", MODULES)
    def test_import(self, name):
        assert importlib.import_module(name) is not None

    def test_booking_package_exports(self):
        import homehub.booking as booking

        for name in booking.__all__:
            assert hasattr(booking, name)

    def test_api_package_exports(self):
        import homehub.api as api

        for name in api.__all__:
            assert hasattr(api, name)


class TestCli:
    def test_book_arguments(self):
        from main import build_parser

        args = build_parser().parse_args(
            ["book", "--service", "svc-1", "--date", "2026-03-12", "--time", "10:00",
             "--payment", "online", "--confirm-payment"]
        )
        assert args.command == "book"
        assert args.payment == "online"
        assert args.confirm_payment

    def test_status_arguments(self):
        from main import build_parser

        args = build_parser().parse_args(["status", "bk-1", "confirmed", "--role", "provider"])
        assert args.new_status == "confirmed"
        assert args.role == "provider"

    def test_rejects_unknown_status(self):
        from main import build_parser

        with pytest.raises(SystemExit):
            build_parser().parse_args(["status", "bk-1", "archived"])

    def test_every_command_has_a_handler(self):
        from main import COMMANDS, build_parser

        parser = build_parser()
        subparsers = next(a for a in parser._actions if a.dest == "command")
        assert set(subparsers.choices) == set(COMMANDS)
