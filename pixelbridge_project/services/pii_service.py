# pixelbridge_project/services/pii_service.py
"""
Normalisation and hashing of user identifiers.

Every identifier is lowercased, trimmed and SHA-256 hashed before it is placed in
the outbound payload, which is the normalisation the Conversions API matches on.
Malformed emails and phones are dropped from the payload rather than failing the
request.
"""
import hashlib
import re
from typing import Dict, List, Optional, Union

from ..models.event_models import UserData

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NON_DIGITS = re.compile(r"\D")
MIN_PHONE_DIGITS = 10

# Free-text fields that are hashed as long as they are non-empty
_PLAIN_HASHED_FIELDS = (
    ("firstName", "fn"),
    ("lastName", "ln"),
    ("city", "ct"),
    ("state", "st"),
    ("country", "country"),
)


def hash_value(value: str) -> str:
    """SHA-256 hex digest of the lowercased, whitespace-trimmed value."""
    return hashlib.sha256(value.strip().lower().encode("utf-8")).hexdigest()


def digits_only(value: str) -> str:
    return NON_DIGITS.sub("", value)


def is_valid_email(email: Optional[str]) -> bool:
    if not email:
        return False
    return EMAIL_PATTERN.match(email.strip()) is not None


def is_valid_phone(phone: Optional[str]) -> bool:
    if not phone:
        return False
    return len(digits_only(phone)) >= MIN_PHONE_DIGITS


def normalize_user_data(
    user_data: UserData,
    user_agent: Optional[str] = None,
    client_ip: Optional[str] = None,
) -> Dict[str, Union[List[str], str]]:
    """
    Builds the Conversions API `user_data` mapping.

    Hashed keys map to single-element lists. The user agent and IP address are
    passed through un-hashed. Keys are only emitted for values that are present
    and valid.
    """
    processed: Dict[str, Union[List[str], str]] = {}

    if is_valid_email(user_data.email):
        processed["em"] = [hash_value(user_data.email)]

    if is_valid_phone(user_data.phone):
        processed["ph"] = [hash_value(digits_only(user_data.phone))]

    for field_name, key in _PLAIN_HASHED_FIELDS:
        raw = getattr(user_data, field_name)
        if raw and raw.strip():
            processed[key] = [hash_value(raw)]

    if user_data.zipCode:
        zip_digits = digits_only(user_data.zipCode)
        if zip_digits:
            processed["zp"] = [hash_value(zip_digits)]

    if user_agent:
        processed["client_user_agent"] = user_agent

    if client_ip:
        processed["client_ip_address"] = client_ip

    return processed
