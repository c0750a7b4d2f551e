# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Unit tests for validators, PIN hashing, the rate limiter, window maths and log format."""
import hashlib
import json
import logging
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from checkin.core.errors import ValidationError
from checkin.core.logging import JSONFormatter, request_id_var
from checkin.core.security import hash_pin, verify_admin_password, verify_pin
from checkin.schemas import DISCIPLINES
from checkin.services.analytics_service import discipline_breakdown, window_starts
from checkin.services.rate_limiter import SlidingWindowRateLimiter
from checkin.services.validation import (
    normalize_email, sanitize_input, validate_disciplines, validate_email,
    validate_name, validate_preferred_name, validate_reason,
)


class TestSanitize:
    @pytest.mark.parametrize("raw,expected", [
        ("  hello  ", "hello"),
        ("<script>alert(1)</script>", "scriptalert(1)/script"),
        ("JavaScript:doEvil()", "doEvil()"),
        ('img onerror=steal()', "img steal()"),
        ("", ""),
        (None, ""),
    ])
    def test_sanitize(self, raw, expected):
        assert sanitize_input(raw) == expected

    def test_normalize_email(self):
        assert normalize_email("  Alice@Example.ORG ") == "alice@example.org"


class TestValidators:
    @pytest.mark.parametrize("email", ["plainaddress", "a@b", "@example.org", ""])
    def test_bad_email(self, email):
        with pytest.raises(ValidationError) as exc:
            validate_email(email)
        assert exc.value.field == "email"

    @pytest.mark.parametrize("name", ["A", "x" * 51, "R2-D2", ""])
    def test_bad_name(self, name):
        with pytest.raises(ValidationError):
            validate_name(name)

    def test_good_name(self):
        assert validate_name("  Mary-Jane O'Neil ") == "Mary-Jane O'Neil"

    def test_preferred_name_optional(self):
        assert validate_preferred_name("") == ""
        assert validate_preferred_name(None) == ""
        with pytest.raises(ValidationError) as exc:
            validate_preferred_name("X")
        assert exc.value.field == "preferred_name"

    def test_disciplines_dedupe_and_order(self):
        assert validate_disciplines(["Art", "Software", "Art"]) == ["Art", "Software"]

    def test_full_enumeration_accepted(self):
        assert validate_disciplines(list(DISCIPLINES)) == list(DISCIPLINES)

    def test_reason_is_sanitized_before_measuring(self):
        # Ten visible characters once the brackets are removed.
        assert validate_reason("<<abcdefghij>>") == "abcdefghij"
        with pytest.raises(ValidationError):
            validate_reason("<<<abcdefghi>>>")


class TestPinHashing:
    def test_verify_round_trip(self):
        stored = hash_pin("1234")
        assert verify_pin("1234", stored)
        assert not verify_pin("1235", stored)

    def test_fresh_salt_each_time(self):
        assert hash_pin("1234") != hash_pin("1234")

    @pytest.mark.parametrize("stored", [None, "", "nocolon", ":abc", "abc:", "$2b$12$truncated"])
    def test_malformed_stored_value(self, stored):
        assert not verify_pin("1234", stored)

    def test_pin_is_bcrypt_hashed(self):
        assert hash_pin("1234").startswith("$2b$")

    def test_legacy_sha256_hash_still_verifies(self):
        # "<salt>:<sha256(pin + salt)>"
        salt = "a1b2c3"
        stored = f"{salt}:{hashlib.sha256(('4321' + salt).encode()).hexdigest()}"
        assert verify_pin("4321", stored)
        assert not verify_pin("4322", stored)

    def test_admin_password(self):
        assert verify_admin_password("s3cret", "s3cret")
        assert not verify_admin_password("nope", "s3cret")
        assert not verify_admin_password("", "")
        assert not verify_admin_password(None, "s3cret")


class TestRateLimiter:
    def test_sliding_window(self):
        now = [100.0]
        limiter = SlidingWindowRateLimiter(2, 60, clock=lambda: now[0])
        assert limiter.is_allowed("ip")[0]
        assert limiter.is_allowed("ip")[0]
        allowed, remaining, retry_after = limiter.is_allowed("ip")
        assert (allowed, remaining) == (False, 0)
        assert 1 <= retry_after <= 61
        assert limiter.is_allowed("other-ip")[0]
        now[0] += 61
        assert limiter.is_allowed("ip")[0]

    def test_idle_clients_are_forgotten(self):
        now = [100.0]
        limiter = SlidingWindowRateLimiter(5, 60, clock=lambda: now[0])
        for ip in ("10.0.0.1", "10.0.0.2", "10.0.0.3"):
            limiter.is_allowed(ip)
        assert len(limiter._hits) == 3
        now[0] += 61
        limiter.is_allowed("10.0.0.9")
        assert set(limiter._hits) == {"10.0.0.9"}

    def test_disabled_when_zero(self):
        assert not SlidingWindowRateLimiter(0).enabled


class TestWindows:
    def test_weeks_start_on_sunday(self):
        monday = datetime(2026, 10, 19, 12, tzinfo=timezone.utc)
        today, week, month = window_starts(monday, ZoneInfo("UTC"))
        assert today == datetime(2026, 10, 19, tzinfo=timezone.utc)
        assert week == datetime(2026, 10, 18, tzinfo=timezone.utc)
        assert month == datetime(2026, 10, 1, tzinfo=timezone.utc)

    def test_sunday_is_its_own_week_start(self):
        sunday = datetime(2026, 10, 18, 8, tzinfo=timezone.utc)
        today, week, _ = window_starts(sunday, ZoneInfo("UTC"))
        assert week == today

    def test_local_midnight(self):
        # 03:00 UTC is still the previous evening in New York.
        now = datetime(2026, 10, 19, 3, tzinfo=timezone.utc)
        today, _, _ = window_starts(now, ZoneInfo("America/New_York"))
        assert today.astimezone(timezone.utc) == datetime(2026, 10, 18, 4, tzinfo=timezone.utc)

    def test_breakdown_ignores_unknown(self):
        rows = discipline_breakdown([["Software", "Creative"], ["Software"]])
        assert rows[0] == {"discipline": "Software", "count": 2}
        assert sum(r["count"] for r in rows) == 2


class TestLogging:
    def _record(self, msg="Visit recorded"):
        return logging.LogRecord("checkin.test", logging.INFO, __file__, 1, msg, None, None)

    def test_request_id_included_while_bound(self):
        formatter = JSONFormatter("checkin-service")
        token = request_id_var.set("req-77")
        try:
            line = json.loads(formatter.format(self._record()))
        finally:
            request_id_var.reset(token)
        assert line["request_id"] == "req-77"
        assert line["service"] == "checkin-service"
        assert line["msg"] == "Visit recorded"

    def test_request_id_omitted_outside_requests(self):
        line = json.loads(JSONFormatter("checkin-service").format(self._record()))
        assert "request_id" not in line
