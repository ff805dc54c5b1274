"""
Contact Form Submission Handler

Runs a submission through method gate, spam checks, field validation,
verification, routing and dispatch. Knows nothing about HTTP: the view turns
the returned Outcome into a redirect.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Mapping

from .errors import DispatchFailed, MethodNotAllowed, SecurityViolation, SubmissionError
from .mail_transport import MailTransport
from .routing import compose_message, redact_email, resolve_recipient
from .serializers import validate_submission
from .spam_protection import SpamGate, TokenVerifier

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('contact.security')


class Outcome(enum.Enum):
    SUCCESS = 'success'
    FAILURE = 'failure'


@dataclass(frozen=True)
class SubmissionRequest:
    """Everything the handler needs from an inbound form post."""

    method: str
    data: Mapping = field(default_factory=dict)
    client_ip: str = ''
    referer: str = ''
    user_agent: str = ''


class SubmissionHandler:
    """
    Contact form pipeline.

    Usage:
        handler = SubmissionHandler(config, captcha_service, DjangoMailTransport(config.email_from))
        outcome = handler.handle(SubmissionRequest('POST', request.POST, ip, referer, ua))
    """

    ACCEPTED_METHOD = 'POST'

    def __init__(self, config, verifier: TokenVerifier, transport: MailTransport):
        self.config = config
        self.transport = transport
        self.spam_gate = SpamGate(
            verifier,
            min_score=config.min_score,
            timestamp_window=config.timestamp_window,
            reject_suspicious_timestamp=config.reject_suspicious_timestamp,
        )

    def handle(self, submission: SubmissionRequest) -> Outcome:
        """
        Process one submission.

        Never raises: every failure, expected or not, is logged and mapped to
        Outcome.FAILURE.
        """
        try:
            self.process(submission)
        except SecurityViolation as e:
            security_logger.warning(
                f"Security violation from IP {submission.client_ip}: {e.detail}"
            )
            return Outcome.FAILURE
        except SubmissionError as e:
            logger.info(f"Contact form rejected [{e.code}] for IP {submission.client_ip}: {e.detail}")
            return Outcome.FAILURE
        except Exception:
            logger.exception(f"Unexpected error processing contact form from IP {submission.client_ip}")
            return Outcome.FAILURE

        return Outcome.SUCCESS

    def process(self, submission: SubmissionRequest):
        """Run every stage, raising the first SubmissionError encountered."""
        if submission.method.upper() != self.ACCEPTED_METHOD:
            raise MethodNotAllowed(submission.method)

        data = submission.data
        client_ip = submission.client_ip

        if hasattr(data, 'getlist'):
            honeypot = data.getlist('website')
        else:
            honeypot = data.get('website', '')
        self.spam_gate.check_honeypot(honeypot, client_ip)
        self.spam_gate.check_timestamp(data.get('timestamp', ''), client_ip)

        try:
            fields = validate_submission(data)
        except SubmissionError as e:
            logger.warning(f"Validation errors: {e.detail}")
            raise

        self.spam_gate.verify_token(data.get(self.config.captcha_field, ''), client_ip)

        recipient = resolve_recipient(fields.category, self.config.directory)
        body = compose_message(fields, client_ip, submission.referer, submission.user_agent)

        if not self.transport.send(recipient, self.config.email_subject, body):
            logger.error(
                f"Failed to send email from contact form for {redact_email(fields.email)} "
                f"to {redact_email(recipient)}"
            )
            raise DispatchFailed(redact_email(recipient))

        logger.info(
            f"Contact form submitted successfully by {redact_email(fields.email)} "
            f"to {redact_email(recipient)}"
        )
        return recipient
