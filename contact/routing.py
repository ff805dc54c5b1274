"""
Contact Form Routing

Recipient lookup by category and plain-text message composition.
"""
import logging

from .errors import ConfigurationError
from .sanitization import validate_email

logger = logging.getLogger(__name__)


PHONE_PLACEHOLDER = 'Not provided'
MESSAGE_PLACEHOLDER = 'No message provided.'
UNKNOWN_PLACEHOLDER = 'N/A'

LINE_BREAK = '\r\n'


def redact_email(address):
    """Redact an address for logging: jane@acme.com -> j***@acme.com."""
    if not address or '@' not in address:
        return '***'
    local_part, _, domain = address.rpartition('@')
    return f'{local_part[:1]}***@{domain}'


def resolve_recipient(category, directory):
    """
    Resolve the mailbox for a category.

    Unknown categories go to the directory's default address. The resolved
    address is validated again before use.

    Args:
        category: Category code from the form
        directory: CategoryDirectory

    Returns:
        str: Recipient address

    Raises:
        ConfigurationError: If the resolved address is not a valid email
    """
    recipient = directory.get(category)

    validated = validate_email(recipient)
    if validated is None:
        logger.error(f"Invalid recipient for category: {category}")
        raise ConfigurationError(f'invalid recipient for category {category!r}')

    return validated


def compose_message(fields, client_ip, referer, user_agent):
    """
    Build the plain-text email body for a submission.

    Args:
        fields: SubmissionFields
        client_ip: Submitter's IP address
        referer: Referer header of the form post
        user_agent: User-Agent header of the form post

    Returns:
        str: Message body
    """
    sections = [
        ('Name', fields.name),
        ('Company', fields.company),
        ('Phone', fields.phone or PHONE_PLACEHOLDER),
        ('Email', fields.email),
        ('Message', fields.message or MESSAGE_PLACEHOLDER),
        ('Category', fields.category),
        ('IP', client_ip or UNKNOWN_PLACEHOLDER),
        ('Referer', referer or UNKNOWN_PLACEHOLDER),
        ('User Agent', user_agent or UNKNOWN_PLACEHOLDER),
    ]

    return ''.join(
        f'{label}: {value}{LINE_BREAK}{LINE_BREAK}' for label, value in sections
    )
