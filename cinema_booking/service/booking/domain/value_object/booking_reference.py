"""
Booking reference codes: <PREFIX><YYYYMMDD>-<6 uppercase alphanumerics>, e.g. BK20250114-7QK2ZD.

The reference doubles as a lookup capability for guests, so the suffix is drawn from
`secrets` rather than a predictable sequence.
"""

from datetime import datetime
import re
import secrets
import string


REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
REFERENCE_SUFFIX_LENGTH = 6
REFERENCE_PATTERN = re.compile(r'^[A-Z]+\d{8}-[A-Z0-9]{6}$')


def generate_booking_reference(*, now: datetime, prefix: str = 'BK') -> str:
    suffix = ''.join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_SUFFIX_LENGTH))
    return f'{prefix.upper()}{now.strftime("%Y%m%d")}-{suffix}'


def normalize_booking_reference(code: str) -> str:
    return code.strip().upper()


def is_valid_booking_reference(code: str) -> bool:
    return REFERENCE_PATTERN.match(code) is not None
