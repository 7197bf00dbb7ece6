"""Tests for configuration loading and validation."""

import pytest

from homehub.config import (
    ApiConfig,
    AppConfig,
    BookingConfig,
    InvoiceConfig,
    _parse_slots,
    _safe_float,
    _safe_int,
    _validate_config,
    settings,
)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    def test_non_http_base_url_rejected(self):
        config = AppConfig(api=ApiConfig(base_url="ftp://homehub.local/api"))
        with pytest.raises(ValueError, match="HOMEHUB_API_URL"):
            _validate_config(config)

    def test_zero_timeout_rejected(self):
        config = AppConfig(api=ApiConfig(default_timeout_sec=0, booking_timeout_sec=60))
        with pytest.raises(ValueError, match="API_TIMEOUT must be > 0"):
            _validate_config(config)

    def test_booking_timeout_shorter_than_default_rejected(self):
        config = AppConfig(api=ApiConfig(default_timeout_sec=30, booking_timeout_sec=10))
        with pytest.raises(ValueError, match="BOOKING_TIMEOUT"):
            _validate_config(config)

    def test_same_day_bookings_rejected(self):
        config = AppConfig(booking=BookingConfig(min_lead_days=0))
        with pytest.raises(ValueError, match="BOOKING_MIN_LEAD_DAYS"):
            _validate_config(config)

    def test_malformed_slot_rejected(self):
        config = AppConfig(booking=BookingConfig(time_slots=("09:00", "25:00")))
        with pytest.raises(ValueError, match="invalid slot"):
            _validate_config(config)

    def test_empty_slot_list_rejected(self):
        config = AppConfig(booking=BookingConfig(time_slots=()))
        with pytest.raises(ValueError, match="at least one slot"):
            _validate_config(config)

    def test_lowercase_currency_rejected(self):
        config = AppConfig(invoice=InvoiceConfig(currency="etb"))
        with pytest.raises(ValueError, match="INVOICE_CURRENCY"):
            _validate_config(config)

    def test_unknown_invoice_scheme_rejected(self):
        config = AppConfig(invoice=InvoiceConfig(number_scheme="random"))
        with pytest.raises(ValueError, match="INVOICE_NUMBER_SCHEME"):
            _validate_config(config)


class TestEnvParsing:
    def test_safe_int_reads_env(self, monkeypatch):
        monkeypatch.setenv("BOOKING_MIN_LEAD_DAYS", "3")
        assert _safe_int("BOOKING_MIN_LEAD_DAYS", "1") == 3

    def test_safe_int_bad_value(self, monkeypatch):
        monkeypatch.setenv("BOOKING_MIN_LEAD_DAYS", "soon")
        with pytest.raises(ValueError, match="Invalid integer for BOOKING_MIN_LEAD_DAYS"):
            _safe_int("BOOKING_MIN_LEAD_DAYS", "1")

    def test_safe_float_bad_value(self, monkeypatch):
        monkeypatch.setenv("API_TIMEOUT", "fast")
        with pytest.raises(ValueError, match="Invalid float for API_TIMEOUT"):
            _safe_float("API_TIMEOUT", "30")

    def test_safe_float_default(self, monkeypatch):
        monkeypatch.delenv("API_TIMEOUT", raising=False)
        assert _safe_float("API_TIMEOUT", "30") == 30.0

    def test_parse_slots_drops_blanks(self, monkeypatch):
        monkeypatch.setenv("BOOKING_TIME_SLOTS", "09:00, ,10:00,")
        assert _parse_slots("BOOKING_TIME_SLOTS", "08:00") == ("09:00", "10:00")


class TestSettingsSingleton:
    def test_settings_loaded(self):
        assert settings.api.base_url.startswith("http")
        assert settings.api.booking_timeout_sec >= settings.api.default_timeout_sec
        assert settings.invoice.number_prefix
