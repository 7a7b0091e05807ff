"""
Tool: WhatsApp Number Helpers
Purpose: Normalise phone numbers to and from the gateway's whatsapp: format

Usage:
    from coach.messaging.whatsapp import format_whatsapp_number

    format_whatsapp_number("+57 (300) 123-4567")   # 'whatsapp:+573001234567'
"""

import os
import re

WHATSAPP_PREFIX = "whatsapp:"

_SEPARATORS = re.compile(r"[\s\-()]")
_E164 = re.compile(r"^\+[1-9]\d{6,14}$")


def clean_phone_number(phone_number: str) -> str:
    """Strip separators and make sure the number starts with '+'."""
    cleaned = _SEPARATORS.sub("", phone_number or "")
    return cleaned if cleaned.startswith("+") else f"+{cleaned}"


def extract_phone_number(whatsapp_number: str) -> str:
    """Plain phone number from a whatsapp:+<digits> address."""
    return whatsapp_number.replace(WHATSAPP_PREFIX, "")


def format_whatsapp_number(phone_number: str) -> str:
    """Phone number in the gateway's whatsapp:+<digits> format."""
    return f"{WHATSAPP_PREFIX}{clean_phone_number(extract_phone_number(phone_number))}"


def is_valid_phone_number(phone_number: str) -> bool:
    """Check the number has E.164 shape once separators are removed."""
    if not phone_number:
        return False
    return bool(_E164.match(clean_phone_number(extract_phone_number(phone_number))))


def is_gateway_configured() -> bool:
    """Whether messaging gateway credentials are present in the environment."""
    return all(
        os.environ.get(name)
        for name in ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_WHATSAPP_NUMBER")
    )
