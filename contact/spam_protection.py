"""
Contact Form Spam Protection

Honeypot, timestamp plausibility and CAPTCHA verification checks run before
a contact form message is routed.
"""
import logging
import math
import time
from typing import Optional, Protocol, Tuple

from core.captcha_service import CaptchaUnavailableError, VerificationResult

from .errors import BotDetected, UpstreamUnavailable

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('contact.security')


class TokenVerifier(Protocol):
    """Anything that can verify an anti-automation token."""

    def verify(self, token: str, remote_ip: str = None) -> VerificationResult:
        ...


def is_honeypot_tripped(value):
    """
    Any non-empty honeypot value, whitespace included, signals a bot.

    A list holds every value posted for the field; one non-empty value trips.
    """
    if value is None:
        return False
    if isinstance(value, (list, tuple)):
        return any(is_honeypot_tripped(item) for item in value)
    return str(value) != ''


def is_timestamp_plausible(value, now: Optional[float] = None,
                           window: Tuple[int, int] = (1, 86400)):
    """
    Check how long ago the form was rendered.

    Missing or non-numeric timestamps are accepted.

    Args:
        value: Raw timestamp field (unix seconds)
        now: Current unix time, defaults to time.time()
        window: Inclusive (min, max) age in seconds

    Returns:
        bool: False only for a numeric timestamp outside the window
    """
    if value is None or value == '':
        return True

    try:
        submitted_at = float(value)
    except (TypeError, ValueError):
        return True

    if not math.isfinite(submitted_at):
        return True

    if now is None:
        now = time.time()

    age = now - int(submitted_at)
    return window[0] <= age <= window[1]


class SpamGate:
    """
    Anti-automation checks for a single submission.

    Honeypot trips and failed verifications raise BotDetected; an unreachable
    verification service raises UpstreamUnavailable. A suspicious timestamp is
    only logged unless `reject_suspicious_timestamp` is set.
    """

    def __init__(self, verifier: TokenVerifier, min_score: float = 0.5,
                 timestamp_window: Tuple[int, int] = (1, 86400),
                 reject_suspicious_timestamp: bool = False, clock=time.time):
        self.verifier = verifier
        self.min_score = min_score
        self.timestamp_window = timestamp_window
        self.reject_suspicious_timestamp = reject_suspicious_timestamp
        self.clock = clock

    def check_honeypot(self, value, client_ip):
        if is_honeypot_tripped(value):
            security_logger.warning(f"Honeypot triggered for IP: {client_ip} - BLOCKED")
            raise BotDetected('honeypot')

    def check_timestamp(self, value, client_ip):
        if is_timestamp_plausible(value, now=self.clock(), window=self.timestamp_window):
            return

        security_logger.info(f"Suspicious timestamp for IP: {client_ip}")
        if self.reject_suspicious_timestamp:
            raise BotDetected('timestamp')

    def verify_token(self, token, client_ip):
        """
        Verify the anti-automation token. Single attempt, fail closed.

        Raises:
            UpstreamUnavailable: If the verification service cannot be used
            BotDetected: If verification fails or the score is too low
        """
        try:
            result = self.verifier.verify(token, client_ip)
        except CaptchaUnavailableError as e:
            logger.error(f"CAPTCHA connection failed: {e}")
            raise UpstreamUnavailable(str(e)) from e

        if not result.success:
            logger.warning(f"CAPTCHA validation failed for IP: {client_ip}")
            raise BotDetected('captcha rejected')

        if result.score is not None and result.score < self.min_score:
            logger.warning(f"CAPTCHA: Low score {result.score} for IP: {client_ip}")
            raise BotDetected(f'captcha score {result.score}')

        return result
