"""Tests for shared helpers."""

import io
import logging
import re

from homehub.config import LOG_FORMAT
from homehub.logging_context import (
    AttemptIdFilter,
    get_attempt_id,
    get_attempt_logger,
    set_attempt_id,
)
from homehub.utils import is_blank, make_transaction_id, normalize_referral_code
from tests.conftest import NOW


class TestNormalizeReferralCode:
    def test_trims_and_uppercases(self):
        assert normalize_referral_code(" save10 ") == "SAVE10"

    def test_already_normalized(self):
        assert normalize_referral_code("WELCOME") == "WELCOME"

    def test_blank_is_none(self):
        assert normalize_referral_code("   ") is None

    def test_empty_is_none(self):
        assert normalize_referral_code("") is None

    def test_none_is_none(self):
        assert normalize_referral_code(None) is None


class TestTransactionId:
    def test_format(self):
        millis = int(NOW.timestamp() * 1000)
        txn = make_transaction_id("TXN", NOW)
        assert re.fullmatch(rf"TXN-{millis}-[A-Z0-9]{{9}}", txn)

    def test_custom_length(self):
        txn = make_transaction_id("CASH", NOW, length=4)
        assert re.fullmatch(r"CASH-\d+-[A-Z0-9]{4}", txn)

    def test_ids_differ(self):
        ids = {make_transaction_id("TXN", NOW) for _ in range(20)}
        assert len(ids) == 20


class TestIsBlank:
    def test_none(self):
        assert is_blank(None)

    def test_whitespace(self):
        assert is_blank(" \t ")

    def test_text(self):
        assert not is_blank(" 10:00 ")


class TestAttemptLogging:
    def test_attempt_id_round_trip(self):
        set_attempt_id("ATT-test01")
        assert get_attempt_id() == "ATT-test01"

    def test_filter_injects_attempt_id(self):
        set_attempt_id("ATT-test02")
        record = logging.LogRecord("homehub", logging.INFO, __file__, 1, "msg", None, None)
        assert AttemptIdFilter().filter(record)
        assert record.attempt_id == "ATT-test02"

    def test_filter_attached_once(self):
        logger = get_attempt_logger("homehub.test.attempt")
        get_attempt_logger("homehub.test.attempt")
        assert sum(isinstance(f, AttemptIdFilter) for f in logger.filters) == 1

    def test_log_format_carries_attempt_id(self):
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(AttemptIdFilter())
        logger = logging.getLogger("homehub.test.format")
        logger.addHandler(handler)
        logger.propagate = False
        try:
            set_attempt_id("ATT-test03")
            logger.warning("Submitting booking")
        finally:
            logger.removeHandler(handler)

        assert "[ATT-test03] WARNING: Submitting booking" in stream.getvalue()

