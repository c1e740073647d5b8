"""Unit tests for remote user <-> contact field mapping.

Covers parse_remote_user (absent/null/wrong-type handling, address and
postal code mapping, birth date parsing) and build_push_payload
(placeholder substitution for blank fields).
"""

from __future__ import annotations

import json
from datetime import date

import pytest

from src.contact_sync.contacts.schemas import ContactRead
from src.contact_sync.sync.errors import ParseError
from src.contact_sync.sync.field_mapping import (
    PUSH_PLACEHOLDER,
    build_push_payload,
    parse_remote_user,
)


# ── Helpers ────────────────────────────────────────────────────────────────


def _make_contact(**overrides) -> ContactRead:
    """Create a test ContactRead with sensible defaults."""
    defaults = {
        "id": "C1",
        "external_id": "150",
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "a@b.com",
        "phone": "555",
    }
    defaults.update(overrides)
    return ContactRead(**defaults)


# ── parse_remote_user ─────────────────────────────────────────────────────


class TestParseRemoteUser:
    """Test decoding of remote user bodies into contact patches."""

    def test_maps_full_user(self):
        """All mapped fields land on the patch with local names."""
        body = json.dumps({
            "id": 1,
            "firstName": "Emily",
            "email": "emily.johnson@x.dummyjson.com",
            "phone": "+81 965-431-3024",
            "birthDate": "1996-5-30",
            "address": {
                "address": "626 Main Street",
                "city": "Phoenix",
                "state": "Mississippi",
                "postalCode": "29112",
                "country": "United States",
            },
        })

        patch = parse_remote_user(body)

        assert patch.changes() == {
            "external_id": "1",
            "email": "emily.johnson@x.dummyjson.com",
            "phone": "+81 965-431-3024",
            "birth_date": date(1996, 5, 30),
            "mailing_street": "626 Main Street",
            "mailing_city": "Phoenix",
            "mailing_state": "Mississippi",
            "mailing_postal_code": "29112",
            "mailing_country": "United States",
        }

    def test_names_are_not_pulled(self):
        """firstName/lastName in the remote body are not mapped on pull."""
        patch = parse_remote_user({"id": 3, "firstName": "A", "lastName": "B"})

        assert "first_name" not in patch.changes()
        assert "last_name" not in patch.changes()

    def test_missing_address_leaves_mailing_fields_unset(self):
        """No address object means no mailing field is set and no failure."""
        patch = parse_remote_user('{"id": 7, "email": "x@y.z"}')

        changes = patch.changes()
        assert changes == {"external_id": "7", "email": "x@y.z"}
        assert not any(key.startswith("mailing_") for key in changes)

    def test_null_address_leaves_mailing_fields_unset(self):
        """An explicit null address is treated like a missing one."""
        patch = parse_remote_user({"id": 7, "address": None})

        assert patch.changes() == {"external_id": "7"}

    @pytest.mark.parametrize(
        ("postal_code", "expected"),
        [(20020, "20020"), (2002.5, "2002.5"), ("07030", "07030")],
    )
    def test_postal_code_coerced_to_string(self, postal_code, expected):
        """Numeric postal codes are stored as their string form."""
        patch = parse_remote_user({"id": 2, "address": {"postalCode": postal_code}})

        assert patch.mailing_postal_code == expected

    def test_partial_address_sets_only_present_keys(self):
        """Only address keys present in the body are set."""
        patch = parse_remote_user({"id": 2, "address": {"city": "Austin"}})

        assert patch.changes() == {"external_id": "2", "mailing_city": "Austin"}

    def test_absent_fields_stay_unset(self):
        """Fields missing from the body are not defaulted."""
        patch = parse_remote_user({"id": 9})

        assert patch.changes() == {"external_id": "9"}

    def test_null_fields_are_set_to_none(self):
        """Explicit nulls are kept so they clear the local value."""
        patch = parse_remote_user({"id": 9, "phone": None, "birthDate": None})

        assert patch.changes() == {"external_id": "9", "phone": None, "birth_date": None}

    def test_missing_id_yields_no_external_id(self):
        """A body without id parses, but carries no external id."""
        patch = parse_remote_user({"email": "x@y.z"})

        assert patch.external_id is None
        assert "external_id" not in patch.changes()

    def test_string_id_is_accepted(self):
        """String ids are kept as-is."""
        assert parse_remote_user({"id": "42"}).external_id == "42"

    def test_accepts_bytes_body(self):
        """Raw response bytes decode like text."""
        patch = parse_remote_user(b'{"id": 5, "phone": "1"}')

        assert patch.changes() == {"external_id": "5", "phone": "1"}

    def test_birth_date_with_time_part(self):
        """A datetime-shaped birthDate keeps only the date."""
        patch = parse_remote_user({"id": 1, "birthDate": "1990-01-02T00:00:00Z"})

        assert patch.birth_date == date(1990, 1, 2)

    @pytest.mark.parametrize(
        "body",
        [
            "not json",
            "[1, 2, 3]",
            '"just a string"',
            "42",
            "null",
        ],
    )
    def test_non_object_body_raises(self, body):
        """Bodies that are not a JSON object fail with ParseError."""
        with pytest.raises(ParseError):
            parse_remote_user(body)

    @pytest.mark.parametrize(
        "birth_date",
        [
            "not-a-date",
            "1996-13-01",
            "1996-02-30",
            "1996/05/30",
            19960530,
            "99999999999999999999-1-1",
            "12345-1-1",
            "\u0661\u0669\u0669\u0666-5-30",
        ],
    )
    def test_invalid_birth_date_raises(self, birth_date):
        """A present but invalid birthDate fails with ParseError."""
        with pytest.raises(ParseError, match="birthDate"):
            parse_remote_user({"id": 1, "birthDate": birth_date})

    @pytest.mark.parametrize(
        "body",
        [
            {"id": 1, "email": 123},
            {"id": 1, "phone": ["555"]},
            {"id": True},
            {"id": 1, "address": "Main Street 1"},
            {"id": 1, "address": {"city": 12}},
        ],
    )
    def test_wrong_types_raise(self, body):
        """Fields with the wrong JSON type fail instead of being coerced."""
        with pytest.raises(ParseError):
            parse_remote_user(body)


# ── build_push_payload ────────────────────────────────────────────────────


class TestBuildPushPayload:
    """Test outbound payload construction."""

    def test_payload_shape(self):
        """Payload is keyed by the local id under salesforceId."""
        payload = build_push_payload(_make_contact())

        assert payload == {
            "salesforceId": "C1",
            "firstName": "Jane",
            "lastName": "Doe",
            "email": "a@b.com",
            "phone": "555",
        }

    def test_only_blank_fields_replaced(self):
        """A blank firstName is pinned to the placeholder, others kept."""
        payload = build_push_payload(_make_contact(first_name=""))

        assert payload == {
            "salesforceId": "C1",
            "firstName": "unknown",
            "lastName": "Doe",
            "email": "a@b.com",
            "phone": "555",
        }

    def test_all_blank_fields_replaced(self):
        """None, empty and whitespace-only values all become the placeholder."""
        contact = _make_contact(first_name=None, last_name="", email="   ", phone="\t\n")

        payload = build_push_payload(contact)

        assert payload["salesforceId"] == "C1"
        for key in ("firstName", "lastName", "email", "phone"):
            assert payload[key] == PUSH_PLACEHOLDER

    def test_payload_does_not_mirror_pull_shape(self):
        """Address, birth date and external id are never pushed."""
        contact = _make_contact(
            birth_date=date(2000, 1, 1),
            mailing_city="Austin",
        )

        payload = build_push_payload(contact)

        assert set(payload) == {"salesforceId", "firstName", "lastName", "email", "phone"}
