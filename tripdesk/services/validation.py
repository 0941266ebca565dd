"""
TripDesk Backend — Registration Validation
============================================

What:  Field-level rules for an inbound registration payload.
How:   validate_registration() runs the rules in a fixed order and returns
       the message of the first rule that fails (or None). The order is part
       of the API contract: clients display the message as-is.
Who:   Called by the create and update routes before any storage access.

Rule order:
    1. fullName     present, length >= 2
    2. sex          one of SEX_OPTIONS
    3. phone        +CCC-123-123-1234 (1-3 digit country code)
    4. email        present, contains "@"
    5. destination  present
    6. city         present, length >= 2
    7. persons      integer in [1, 20] (numeric strings accepted)
    8. travelTime   present

`message` is free text and is never validated.
"""

import math
import re
from typing import Any, Dict, Mapping, Optional

MISSING_PAYLOAD_MESSAGE = "Missing registration data."

SEX_OPTIONS = frozenset({"female", "male", "nonbinary", "prefer-not"})

PERSONS_MIN = 1
PERSONS_MAX = 20

# ASCII digits only; fullmatch so a trailing newline is rejected too.
PHONE_PATTERN = re.compile(r"\+[0-9]{1,3}-[0-9]{3}-[0-9]{3}-[0-9]{4}")


def _text(value: Any) -> str:
    """Text fields must be JSON strings; anything else counts as absent."""
    return value if isinstance(value, str) else ""


def coerce_persons(value: Any) -> Optional[int]:
    """
    Interpret `persons` as a whole number.

    Accepts ints, integral floats (2.0) and numeric strings ("2", " 3 ").
    Returns None for booleans, fractions, non-numeric strings and anything
    else.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value.is_integer() else None
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            number = float(stripped)
        except ValueError:
            return None
        if math.isfinite(number) and number.is_integer():
            return int(number)
    return None


def validate_registration(payload: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Return the first failing rule's message, or None when the payload is valid."""
    if not isinstance(payload, Mapping):
        return MISSING_PAYLOAD_MESSAGE

    full_name = _text(payload.get("fullName"))
    if len(full_name) < 2:
        return "Full name is required."

    if _text(payload.get("sex")) not in SEX_OPTIONS:
        return "Sex is required."

    if not PHONE_PATTERN.fullmatch(_text(payload.get("phone"))):
        return "Phone must match +234-801-234-5678 format."

    email = _text(payload.get("email"))
    if not email or "@" not in email:
        return "Email is required."

    if not _text(payload.get("destination")):
        return "Destination is required."

    if len(_text(payload.get("city"))) < 2:
        return "City is required."

    persons = coerce_persons(payload.get("persons"))
    if persons is None or persons < PERSONS_MIN or persons > PERSONS_MAX:
        return f"Number of persons must be between {PERSONS_MIN} and {PERSONS_MAX}."

    if not _text(payload.get("travelTime")):
        return "Travel time is required."

    return None


def registration_columns(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Map a validated payload to `registrations` column values.

    Only call after validate_registration() returned None. id and created_at
    are never taken from the payload.
    """
    message = payload.get("message")
    return {
        "full_name": payload["fullName"],
        "sex": payload["sex"],
        "phone": payload["phone"],
        "email": payload["email"],
        "destination": payload["destination"],
        "city": payload["city"],
        "persons": coerce_persons(payload["persons"]),
        "travel_time": payload["travelTime"],
        "message": message if isinstance(message, str) else "",
    }
