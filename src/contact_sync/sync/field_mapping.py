"""Field mappings between remote users and local contacts.

Defines:
- REMOTE_USER_FIELD_MAP / REMOTE_ADDRESS_FIELD_MAP: Inbound RemoteUser
  attributes to ContactPatch fields.
- PUSH_FIELD_MAP: Outbound payload keys to ContactRead attributes.
- parse_remote_user(): Decodes a remote user body into a ContactPatch.
- build_push_payload(): Converts a contact into the outbound payload.

The two directions use different shapes: the push payload is smaller and
keyed by the local contact id, it does not mirror the pull response.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from src.contact_sync.contacts.schemas import ContactPatch, ContactRead
from src.contact_sync.sync.errors import ParseError
from src.contact_sync.sync.schemas import RemoteUser


# ── Inbound mappings ───────────────────────────────────────────────────────

REMOTE_USER_FIELD_MAP: dict[str, str] = {
    "email": "email",
    "phone": "phone",
    "birth_date": "birth_date",
}

REMOTE_ADDRESS_FIELD_MAP: dict[str, str] = {
    "street": "mailing_street",
    "city": "mailing_city",
    "state": "mailing_state",
    "postal_code": "mailing_postal_code",
    "country": "mailing_country",
}


# ── Outbound mapping ───────────────────────────────────────────────────────
# Blank values are sent as PUSH_PLACEHOLDER, never omitted.

PUSH_ID_KEY = "salesforceId"
PUSH_PLACEHOLDER = "unknown"

PUSH_FIELD_MAP: dict[str, str] = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "phone": "phone",
}


# ── Conversion Functions ───────────────────────────────────────────────────


def parse_remote_user(body: str | bytes | dict[str, Any]) -> ContactPatch:
    """Decode a remote user body into contact fields.

    Keys absent from the body stay unset on the returned patch, explicit
    nulls are kept as ``None``. A missing or null ``address`` leaves every
    mailing field unset. Numeric postal codes become their string form.

    Args:
        body: Raw JSON text/bytes, or an already decoded mapping.

    Returns:
        ContactPatch whose set fields are exactly those the body provided.

    Raises:
        ParseError: Body is not a JSON object, a field has the wrong type,
            or ``birthDate`` is not a valid date.
    """
    try:
        if isinstance(body, (str, bytes, bytearray)):
            user = RemoteUser.model_validate_json(body)
        else:
            user = RemoteUser.model_validate(body)
    except ValidationError as exc:
        raise ParseError(f"Invalid remote user body: {_summarize(exc)}") from exc

    fields: dict[str, Any] = {}

    if "id" in user.model_fields_set:
        fields["external_id"] = _external_id(user.id)

    for attr, contact_field in REMOTE_USER_FIELD_MAP.items():
        if attr in user.model_fields_set:
            fields[contact_field] = getattr(user, attr)

    address = user.address
    if address is not None:
        for attr, contact_field in REMOTE_ADDRESS_FIELD_MAP.items():
            if attr in address.model_fields_set:
                value = getattr(address, attr)
                fields[contact_field] = None if value is None else str(value)

    return ContactPatch(**fields)


def build_push_payload(contact: ContactRead) -> dict[str, str]:
    """Convert a contact to the outbound create-or-update payload.

    Any of firstName/lastName/email/phone that is missing, empty or only
    whitespace is replaced with ``PUSH_PLACEHOLDER``.
    """
    payload: dict[str, str] = {PUSH_ID_KEY: contact.id}
    for key, attr in PUSH_FIELD_MAP.items():
        value = getattr(contact, attr)
        payload[key] = value if value and value.strip() else PUSH_PLACEHOLDER
    return payload


def _external_id(value: int | str | None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _summarize(exc: ValidationError) -> str:
    """One-line summary of a pydantic ValidationError for logs."""
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error["loc"]) or "body"
        parts.append(f"{loc}: {error['msg']}")
    return "; ".join(parts)
