import os
import re
import time
import logging
from datetime import datetime, timezone
from typing import Dict, Optional

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
PHONE_PATTERN = re.compile(r'^[0-9+\-\s]{7,20}$')
INT_PREFIX_PATTERN = re.compile(r'^\s*([+-]?\d+)')

APPLICATION_FIELDS = ('name', 'email', 'phone', 'cover')


def now_ms() -> int:
    """Current time in milliseconds since the epoch"""
    return int(time.time() * 1000)


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix"""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def validate_email(email: str) -> bool:
    """Validate email address format"""
    if not email:
        return False
    return bool(EMAIL_PATTERN.match(email))


def validate_phone(phone: str) -> bool:
    """Validate phone number format: 7-20 digits, spaces, '+' or '-'"""
    if not phone:
        return False
    return bool(PHONE_PATTERN.match(phone))


def parse_int_prefix(value, default: int) -> int:
    """Parse the leading integer of a form value ("3 roles" -> 3).

    Returns ``default`` when there is no leading integer or it is zero.
    """
    if value is None:
        return default
    match = INT_PREFIX_PATTERN.match(str(value))
    if not match:
        return default
    return int(match.group(1)) or default


def clamp(value: int, lower: int, upper: Optional[int] = None) -> int:
    value = max(lower, value)
    if upper is not None:
        value = min(upper, value)
    return value


def collapse_whitespace(filename: str) -> str:
    """Replace each run of whitespace in a filename with a single underscore"""
    return re.sub(r'\s+', '_', filename)


def validate_application_form(form: Dict[str, str]) -> Optional[str]:
    """Validate the public application form.

    Returns the first human-readable error, or None when the form is valid.
    """
    if not all(form.get(name) for name in APPLICATION_FIELDS):
        return 'All fields are required'

    if not validate_email(form['email']):
        return 'Please enter a valid email address'

    if not validate_phone(form['phone']):
        return 'Please enter a valid phone number'

    return None


def resolve_resume_path(site_root: str, resume_ref: str) -> Optional[str]:
    """Turn a stored resume reference like ``/uploads/x.pdf`` into a filesystem path.

    Leading slashes are stripped and both separator styles are normalized.
    Returns None for empty references and for references that point outside
    the uploads directory.
    """
    if not resume_ref:
        return None

    relative = str(resume_ref).lstrip('/\\')
    relative = relative.replace('/', os.sep).replace('\\', os.sep)
    full_path = os.path.normpath(os.path.join(site_root, relative))

    uploads_root = os.path.normpath(os.path.join(site_root, 'uploads'))
    if os.path.commonpath([full_path, uploads_root]) != uploads_root:
        logger.warning(f"Refusing resume reference outside uploads directory: {resume_ref}")
        return None

    return full_path


def remove_file_quietly(path: Optional[str], context: str = '') -> bool:
    """Best-effort delete. Logs and returns False when the file could not be removed."""
    if not path:
        return False
    try:
        if os.path.exists(path):
            os.remove(path)
            return True
    except OSError as e:
        logger.error(f"Failed to delete file {path} {context}: {e}")
    return False
