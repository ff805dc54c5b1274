"""
Contact Form Serializers

Validates and sanitizes the fields of a public contact form submission.
"""
import logging

from rest_framework import serializers
from django.core.validators import ProhibitNullCharactersValidator

from . import sanitization
from .config import CATEGORY_CHOICES
from .errors import SecurityViolation, ValidationFailed

logger = logging.getLogger(__name__)


def required_messages(message):
    return {
        'required': message,
        'blank': message,
        'null': message,
        'invalid': message,
        'invalid_choice': message,
    }


class FormTextField(serializers.CharField):
    """
    CharField that hands control characters to the sanitizers.

    NUL bytes are stripped from free text and reported as header injection
    in the email field, so they must not fail field validation first.
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.validators = [
            validator for validator in self.validators
            if not isinstance(validator, ProhibitNullCharactersValidator)
        ]


class CategoryField(serializers.ChoiceField):
    """Category code, sanitized before the choice lookup."""

    def to_internal_value(self, data):
        return super().to_internal_value(
            sanitization.sanitize_text(data, sanitization.CATEGORY_MAX_LENGTH)
        )


class ContactFormSubmitSerializer(serializers.Serializer):
    """
    Public contact form submission serializer.

    Honeypot, timestamp and CAPTCHA token are checked by the spam gate
    before this serializer runs.
    """

    name = FormTextField(
        error_messages=required_messages('Name required'),
        help_text="Name of the person contacting us"
    )

    company = FormTextField(
        error_messages=required_messages('Company required'),
        help_text="Company the person writes for"
    )

    phone = FormTextField(
        default='',
        allow_blank=True,
        trim_whitespace=False,
        help_text="Optional phone number"
    )

    email = FormTextField(
        trim_whitespace=False,
        error_messages=required_messages('Valid email required'),
        help_text="Valid email address for follow-up"
    )

    message = FormTextField(
        default='',
        allow_blank=True,
        help_text="Optional message content"
    )

    category = CategoryField(
        choices=CATEGORY_CHOICES,
        error_messages=required_messages('Category required'),
        help_text="Category of the inquiry"
    )

    def _validate_required_text(self, value, max_length, message):
        value = sanitization.sanitize_text(value, max_length)
        if len(value) < sanitization.MIN_REQUIRED_LENGTH:
            raise serializers.ValidationError(message)
        return value

    def validate_name(self, value):
        """Sanitize name field."""
        return self._validate_required_text(value, sanitization.NAME_MAX_LENGTH, 'Name required')

    def validate_company(self, value):
        """Sanitize company field."""
        return self._validate_required_text(value, sanitization.COMPANY_MAX_LENGTH, 'Company required')

    def validate_phone(self, value):
        return sanitization.validate_phone(value)

    def validate_email(self, value):
        """Reject header injection, then normalize the address."""
        email = sanitization.validate_email(value)
        if email is None:
            logger.warning(f"Invalid email submitted: {value[:50]!r}")
            raise serializers.ValidationError('Valid email required')
        return email

    def validate_message(self, value):
        """Sanitize message field."""
        return sanitization.sanitize_text(value, sanitization.MESSAGE_MAX_LENGTH)


def validate_submission(data):
    """
    Validate the contact form fields of a submission.

    Args:
        data: Mapping of raw form values (QueryDict or dict)

    Returns:
        SubmissionFields: Sanitized fields

    Raises:
        SecurityViolation: If the email carries a header injection payload
        ValidationFailed: If any required field is missing or invalid
    """
    serializer = ContactFormSubmitSerializer(data=data)

    if not serializer.is_valid():
        errors = [
            str(error)
            for field_errors in serializer.errors.values()
            for error in field_errors
        ]
        if sanitization.contains_header_injection(data.get('email', '')):
            raise SecurityViolation(errors)
        raise ValidationFailed(errors)

    return sanitization.SubmissionFields(**serializer.validated_data)
