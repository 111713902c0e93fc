"""
Tests for the WHOIS normalizer.

Tests RDAP decoding, tolerant date parsing, registrar extraction and
expiration-based status.
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from domain_health.models import HealthStatus
from domain_health.normalizer import (
    RdapDomain,
    days_to_expiration,
    isoformat_utc,
    normalize,
    parse_whois_date,
)

from factories import make_response, rdap_payload


class TestParseWhoisDate:
    """Tests for parse_whois_date()."""

    @pytest.mark.parametrize("raw", [
        "2030-06-15T12:30:00Z",
        "2030-06-15T12:30:00z",
        "2030-06-15T12:30:00+00:00",
        "2030-06-15T14:30:00+02:00",
        "2030-06-15T12:30:00.000Z",
        "2030-06-15T12:30:00.1234567Z",
        "2030-06-15 12:30:00 UTC",
        "2030-06-15 12:30:00",
    ])
    def test_equivalent_forms(self, raw):
        parsed = parse_whois_date(raw)

        assert parsed is not None
        assert parsed.tzinfo is not None
        assert parsed.replace(microsecond=0) == datetime(2030, 6, 15, 12, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize("raw", ["2030-06-15", "15-Jun-2030", "2030.06.15", "2030/06/15"])
    def test_date_only_layouts(self, raw):
        assert parse_whois_date(raw) == datetime(2030, 6, 15, tzinfo=timezone.utc)

    @pytest.mark.parametrize("raw", [
        None,
        "",
        "   ",
        "not a date",
        "2030-13-45T00:00:00Z",
        20300615,
        "0001-01-01T00:00:00+01:00",
        "9999-12-31T23:00:00-05:00",
    ])
    def test_unparsable(self, raw):
        assert parse_whois_date(raw) is None


class TestDateHelpers:

    def test_isoformat_utc_has_milliseconds_and_z(self):
        value = datetime(2030, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)

        assert isoformat_utc(value) == "2030-01-02T03:04:05.678Z"

    def test_isoformat_utc_converts_offsets(self):
        value = datetime(2030, 1, 2, 1, 0, tzinfo=timezone(timedelta(hours=2)))

        assert isoformat_utc(value) == "2030-01-01T23:00:00.000Z"

    def test_days_to_expiration_uses_calendar_days(self):
        now = datetime(2030, 1, 1, 23, 59, tzinfo=timezone.utc)

        assert days_to_expiration(datetime(2030, 1, 2, 0, 1, tzinfo=timezone.utc), now) == 1
        assert days_to_expiration(datetime(2030, 1, 1, 0, 0, tzinfo=timezone.utc), now) == 0
        assert days_to_expiration(datetime(2029, 12, 31, tzinfo=timezone.utc), now) == -1

    def test_days_to_expiration_none(self):
        assert days_to_expiration(None) is None


class TestRdapDomain:
    """Tests for the tolerant RDAP partial schema."""

    def test_ignores_mistyped_fields(self):
        record = RdapDomain.from_json({
            "events": [None, {"eventDate": "2030-01-01"}, {"eventAction": "expiration", "eventDate": 5}],
            "entities": "nope",
            "registrar": 12,
        })

        assert len(record.events) == 1
        assert record.events[0].date is None
        assert record.entities == ()
        assert record.registrar is None

    def test_non_object_decodes_empty(self):
        assert RdapDomain.from_json(["not", "an", "object"]) == RdapDomain()

    def test_event_alias_matching_is_substring_and_case_insensitive(self):
        record = RdapDomain.from_json({"events": [
            {"eventAction": "Last Changed", "eventDate": "2024-01-01T00:00:00Z"},
            {"eventAction": "registrar expiration", "eventDate": "2031-01-01T00:00:00Z"},
        ]})

        assert record.event_date(("last changed",)) == "2024-01-01T00:00:00Z"
        assert record.event_date(("expiration", "expiry")) == "2031-01-01T00:00:00Z"
        assert record.event_date(("registration",)) is None

    def test_registrar_from_vcard(self):
        assert RdapDomain.from_json(rdap_payload(registrar="Acme Names")).registrar_display_name() == "Acme Names"

    def test_registrar_falls_back_to_top_level_fields(self):
        assert RdapDomain.from_json({"registrar": "Top Level"}).registrar_display_name() == "Top Level"
        assert RdapDomain.from_json({"registrarName": "Named"}).registrar_display_name() == "Named"

    def test_registrar_entity_without_name_falls_back(self):
        record = RdapDomain.from_json({
            "entities": [{"roles": ["registrar"], "vcardArray": ["vcard", [["version", {}, "text", "4.0"]]]}],
            "registrarName": "Fallback",
        })

        assert record.registrar_display_name() == "Fallback"

    def test_non_registrar_entities_are_ignored(self):
        record = RdapDomain.from_json({"entities": [{
            "roles": ["registrant"],
            "vcardArray": ["vcard", [["fn", {}, "text", "Jane Doe"]]],
        }]})

        assert record.registrar_display_name() is None


class TestNormalize:
    """Tests for normalize()."""

    def test_expires_soon_is_warning(self, now, future):
        response = make_response(200, body=rdap_payload(expiration=future(10)))

        result = normalize(response, now=now)

        assert result.status == HealthStatus.WARNING
        assert result.days_to_expire == 10
        assert result.message == "Expires in 10 days"
        assert result.registrar == "Example Registrar, Inc."
        assert result.expiration_date.endswith(".000Z")

    def test_singular_day(self, now, future):
        result = normalize(make_response(200, body=rdap_payload(expiration=future(1))), now=now)

        assert result.message == "Expires in 1 day"

    def test_threshold_is_inclusive(self, now, future):
        result = normalize(make_response(200, body=rdap_payload(expiration=future(30))), now=now)

        assert result.status == HealthStatus.WARNING
        assert result.message == "Expires in 30 days"

    def test_expired_is_error(self, now, future):
        result = normalize(make_response(200, body=rdap_payload(expiration=future(-3))), now=now)

        assert result.status == HealthStatus.ERROR
        assert result.days_to_expire == -3
        assert result.message == "Domain appears expired"

    def test_far_expiration_is_healthy(self, now, future):
        result = normalize(
            make_response(200, body=rdap_payload(expiration=future(90), registered=future(-3650))),
            now=now,
        )

        assert result.status == HealthStatus.HEALTHY
        assert result.message is None
        assert result.days_to_expire == 90
        assert result.created_date is not None

    def test_custom_warning_window(self, now, future):
        response = make_response(200, body=rdap_payload(expiration=future(45)))

        assert normalize(response, now=now, expiry_warning_days=60).status == HealthStatus.WARNING
        assert normalize(response, now=now, expiry_warning_days=30).status == HealthStatus.HEALTHY

    def test_missing_expiration_is_warning(self, now):
        result = normalize(make_response(200, body=rdap_payload()), now=now)

        assert result.status == HealthStatus.WARNING
        assert result.message == "Expiration date unavailable"
        assert result.days_to_expire is None
        assert result.expiration_date is None
        assert result.registrar == "Example Registrar, Inc."

    def test_alias_events(self, now, future):
        payload = rdap_payload(registrar=None, extra_events=[
            {"eventAction": "expiry", "eventDate": future(100).strftime("%Y-%m-%d")},
            {"eventAction": "last changed", "eventDate": "2024-02-03T04:05:06Z"},
            {"eventAction": "registered", "eventDate": "2001-01-01"},
        ])

        result = normalize(make_response(200, body=payload), now=now)

        assert result.days_to_expire == 100
        assert result.updated_date == "2024-02-03T04:05:06.000Z"
        assert result.created_date == "2001-01-01T00:00:00.000Z"
        assert result.registrar is None

    def test_malformed_date_is_dropped_and_logged(self, now, caplog):
        payload = rdap_payload(extra_events=[{"eventAction": "expiration", "eventDate": "someday soon"}])

        with caplog.at_level(logging.WARNING, logger="domain_health.normalizer"):
            result = normalize(make_response(200, body=payload), now=now)

        assert result.expiration_date is None
        assert result.message == "Expiration date unavailable"
        assert "someday soon" in caplog.text

    @pytest.mark.parametrize("raw", ["0001-01-01T00:00:00+01:00", "9999-12-31T23:00:00-05:00"])
    def test_out_of_range_date_does_not_raise(self, now, caplog, raw):
        payload = rdap_payload(extra_events=[{"eventAction": "expiration", "eventDate": raw}])

        with caplog.at_level(logging.WARNING, logger="domain_health.normalizer"):
            result = normalize(make_response(200, body=payload), now=now)

        assert result.status == HealthStatus.WARNING
        assert result.expiration_date is None
        assert result.message == "Expiration date unavailable"
        assert raw in caplog.text

    @pytest.mark.parametrize("body", ["<html>Bad gateway</html>", "", "[1, 2, 3]", "null"])
    def test_unparsable_body(self, body):
        result = normalize(make_response(200, body=body))

        assert result.status == HealthStatus.WARNING
        assert result.message == "WHOIS data could not be parsed"
        assert result.error == "WHOIS response was not JSON"

    def test_not_found_response(self):
        result = normalize(make_response(404, body={"errorCode": 404}))

        assert result.status == HealthStatus.WARNING
        assert result.message == "WHOIS service unavailable (404 Not Found)"
        assert result.error == "Not Found"

    def test_missing_reason_phrase(self):
        result = normalize(make_response(502, reason=""))

        assert result.message == "WHOIS service unavailable (502 Unknown error)"
