"""
Contact Form Mail Transport

Hands composed contact messages to Django's email backend (SMTP relay,
local MTA or console, depending on EMAIL_BACKEND).
"""
import logging
import smtplib
from typing import Protocol

from django.core.mail import EmailMessage, get_connection

logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    """Anything that can deliver a plain-text message to one recipient."""

    def send(self, recipient: str, subject: str, body: str) -> bool:
        ...


class DjangoMailTransport:
    """
    Mail transport backed by django.core.mail.

    The only address header built from request data is the already
    validated recipient; the sender is fixed by configuration.
    """

    def __init__(self, from_email: str, connection=None):
        self.from_email = from_email
        self.connection = connection

    def send(self, recipient: str, subject: str, body: str) -> bool:
        """
        Send one message.

        Returns:
            bool: True if the backend accepted the message
        """
        message = EmailMessage(
            subject=subject,
            body=body,
            from_email=self.from_email,
            to=[recipient],
            connection=self.connection or get_connection(fail_silently=False),
        )

        try:
            sent = message.send(fail_silently=False)
        except ValueError:
            # BadHeaderError and the email package both raise ValueError
            logger.error("Refused to send contact message with an invalid header")
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Mail transport error: {e}")
            return False

        return sent == 1
