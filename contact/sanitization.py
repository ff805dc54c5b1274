"""
Contact Form Input Sanitization

Extracts, trims, length-caps and HTML-escapes the free-text fields of a
contact form submission, normalizes phone numbers and validates the
submitter's email address.

None of the helpers raise on bad input; `ContactFormSubmitSerializer` turns
their results into field errors.
"""
import logging
import re
from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.core.validators import EmailValidator

security_logger = logging.getLogger('contact.security')


# Field limits (code points)
NAME_MAX_LENGTH = 100
COMPANY_MAX_LENGTH = 100
MESSAGE_MAX_LENGTH = 2000
CATEGORY_MAX_LENGTH = 50
PHONE_MAX_LENGTH = 30
DEFAULT_MAX_LENGTH = 500

MIN_REQUIRED_LENGTH = 2

# Backslashes plus C0 controls other than tab, LF and CR
_INJECTION_CHARS_RE = re.compile(r'[\\\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')

# An ampersand that does not already start a character reference
_BARE_AMPERSAND_RE = re.compile(
    r'&(?!(?:[a-zA-Z][a-zA-Z0-9]*|#[0-9]+|#[xX][0-9a-fA-F]+);)'
)

# Character reference left without its terminating semicolon by truncation
_PARTIAL_REFERENCE_RE = re.compile(r'&[#a-zA-Z0-9]*$')

_MARKUP_ESCAPES = {
    '<': '&lt;',
    '>': '&gt;',
    '"': '&quot;',
    "'": '&#x27;',
}
_MARKUP_RE = re.compile('[<>"\']')

_HEADER_INJECTION_RE = re.compile(r'[\r\n\x00]')

# Everything outside the set of characters allowed in an address
_EMAIL_DISALLOWED_RE = re.compile(r"[^a-zA-Z0-9!#$%&'*+\-=?^_`{|}~@.\[\]]")
_EMAIL_GRAMMAR_RE = re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}')

_PHONE_DISALLOWED_RE = re.compile(r'[^0-9+() \-]')

_email_validator = EmailValidator()


@dataclass(frozen=True)
class SubmissionFields:
    """Validated and sanitized contact form fields."""

    name: str
    company: str
    phone: str
    email: str
    message: str
    category: str


def _escape_markup(value):
    value = _BARE_AMPERSAND_RE.sub('&amp;', value)
    return _MARKUP_RE.sub(lambda match: _MARKUP_ESCAPES[match.group()], value)


def sanitize_text(value, max_length=DEFAULT_MAX_LENGTH):
    """
    Sanitize a free-text form value.

    Strips injection characters and surrounding whitespace, escapes HTML
    markup and truncates to `max_length` code points. Applying it to its own
    output returns the same string.

    Args:
        value: Raw form value
        max_length: Maximum number of code points to keep

    Returns:
        str: Sanitized text, '' for non-string input
    """
    if not isinstance(value, str):
        return ''

    text = _INJECTION_CHARS_RE.sub('', value).strip()
    text = _escape_markup(text)

    if len(text) > max_length:
        text = text[:max_length]
        text = _PARTIAL_REFERENCE_RE.sub('', text).rstrip()

    return text


def contains_header_injection(value):
    """Check for CR, LF or NUL, the markers of an email header injection."""
    return isinstance(value, str) and bool(_HEADER_INJECTION_RE.search(value))


def validate_email(value):
    """
    Validate an email address for use in a message.

    Header injection markers are rejected before any normalization and
    reported on the security logger.

    Args:
        value: Raw form value

    Returns:
        str: Normalized address, or None if the address is invalid
    """
    if not isinstance(value, str):
        return None

    if contains_header_injection(value):
        security_logger.warning(
            f"Email header injection attempt detected: {value[:50]!r}"
        )
        return None

    email = _EMAIL_DISALLOWED_RE.sub('', value.strip())

    try:
        _email_validator(email)
    except ValidationError:
        return None

    if not _EMAIL_GRAMMAR_RE.fullmatch(email):
        return None

    local_part, _, domain = email.rpartition('@')
    return f'{local_part}@{domain.lower()}'


def validate_phone(value):
    """
    Normalize a phone number.

    Keeps digits, '+', parentheses, spaces and hyphens. An empty value means
    the phone was not provided.
    """
    if not isinstance(value, str):
        return ''

    phone = value.strip()
    if not phone:
        return ''

    phone = _PHONE_DISALLOWED_RE.sub('', phone)
    return phone[:PHONE_MAX_LENGTH]

