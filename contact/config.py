"""
Contact Form Configuration

Immutable configuration for the contact form endpoint, built once from
Django settings when the app loads.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from django.core.exceptions import ImproperlyConfigured


CATEGORY_CHOICES = [
    ('administration', 'Administration'),
    ('human-resources', 'Human Resources'),
    ('information', 'Information'),
    ('complains-claims', 'Complaints & Claims'),
    ('sales', 'Sales'),
    ('providers', 'Providers'),
]

CATEGORY_CODES = frozenset(code for code, _ in CATEGORY_CHOICES)


@dataclass(frozen=True)
class CategoryDirectory:
    """
    Mapping from category code to the mailbox that handles it.

    Unknown codes resolve to the default address.
    """

    recipients: Mapping[str, str]
    default: str

    def __post_init__(self):
        object.__setattr__(self, 'recipients', MappingProxyType(dict(self.recipients)))

    def get(self, category: str) -> str:
        return self.recipients.get(category, self.default)


@dataclass(frozen=True)
class ContactFormConfig:
    """Process-wide contact form settings."""

    directory: CategoryDirectory
    success_page: str
    failure_page: str
    email_subject: str
    email_from: str
    min_score: float = 0.5
    timestamp_window: Tuple[int, int] = (1, 86400)
    reject_suspicious_timestamp: bool = False
    captcha_field: str = 'g-recaptcha-response'
    trust_proxy_headers: bool = False

    def __post_init__(self):
        if not self.success_page or not self.failure_page:
            raise ImproperlyConfigured(
                "CONTACT_SUCCESS_PAGE and CONTACT_FAILURE_PAGE must both be set."
            )
        if self.success_page == self.failure_page:
            raise ImproperlyConfigured(
                "CONTACT_SUCCESS_PAGE and CONTACT_FAILURE_PAGE must differ."
            )

    @property
    def outcome_pages(self):
        """Closed set of redirect targets."""
        return frozenset((self.success_page, self.failure_page))

    @classmethod
    def from_settings(cls, settings, overrides: Optional[dict] = None):
        """
        Build the configuration from Django settings.

        Args:
            settings: django.conf.settings (or any object with the same attributes)
            overrides: Optional field values replacing the ones read from settings

        Raises:
            ImproperlyConfigured: If the category directory or outcome pages are invalid
        """
        recipients = dict(getattr(settings, 'CONTACT_CATEGORY_RECIPIENTS', {}))

        missing = CATEGORY_CODES - set(recipients)
        unknown = set(recipients) - CATEGORY_CODES
        if missing or unknown:
            raise ImproperlyConfigured(
                "CONTACT_CATEGORY_RECIPIENTS must map exactly the categories "
                f"{sorted(CATEGORY_CODES)} (missing: {sorted(missing)}, unknown: {sorted(unknown)})"
            )

        values = {
            'directory': CategoryDirectory(
                recipients=recipients,
                default=settings.CONTACT_DEFAULT_RECIPIENT,
            ),
            'success_page': settings.CONTACT_SUCCESS_PAGE,
            'failure_page': settings.CONTACT_FAILURE_PAGE,
            'email_subject': settings.CONTACT_EMAIL_SUBJECT,
            'email_from': getattr(settings, 'CONTACT_EMAIL_FROM', settings.DEFAULT_FROM_EMAIL),
            'min_score': float(getattr(settings, 'CONTACT_CAPTCHA_MIN_SCORE', 0.5)),
            'timestamp_window': (
                int(getattr(settings, 'CONTACT_TIMESTAMP_MIN_AGE', 1)),
                int(getattr(settings, 'CONTACT_TIMESTAMP_MAX_AGE', 86400)),
            ),
            'reject_suspicious_timestamp': getattr(
                settings, 'CONTACT_REJECT_SUSPICIOUS_TIMESTAMP', False
            ),
            'captcha_field': getattr(settings, 'CONTACT_CAPTCHA_FIELD', 'g-recaptcha-response'),
            'trust_proxy_headers': getattr(settings, 'CONTACT_TRUST_PROXY_HEADERS', False),
        }
        values.update(overrides or {})
        return cls(**values)
