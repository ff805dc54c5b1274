"""
CAPTCHA Verification Service

Verifies anti-automation tokens from the contact form against the provider's
siteverify API. Google reCAPTCHA (v2 and v3) and Cloudflare Turnstile share
the same protocol: a form-encoded POST of secret, response and remoteip,
answered with JSON {"success": bool, "score"?: float, "error-codes"?: [...]}.

Documentation:
- https://developers.google.com/recaptcha/docs/verify
- https://developers.cloudflare.com/turnstile/get-started/server-side-validation/
"""

import logging
from dataclasses import dataclass, field
from numbers import Real
from typing import List, Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


VERIFY_URLS = {
    'recaptcha': 'https://www.google.com/recaptcha/api/siteverify',
    'turnstile': 'https://challenges.cloudflare.com/turnstile/v0/siteverify',
}


class CaptchaUnavailableError(Exception):
    """Raised when the verification API cannot be reached or answers garbage."""
    pass


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a single token verification."""

    success: bool
    score: Optional[float] = None
    error_codes: List[str] = field(default_factory=list)


class CaptchaService:
    """
    Service for verifying CAPTCHA tokens.

    One attempt per token, no retries. Transport failures raise
    CaptchaUnavailableError so callers can fail closed.

    Usage:
        service = CaptchaService()
        result = service.verify(token, remote_ip='192.168.1.1')
    """

    def __init__(self, secret_key=None, verify_url=None, timeout=None):
        provider = getattr(settings, 'CAPTCHA_PROVIDER', 'recaptcha')

        self.secret_key = secret_key if secret_key is not None else getattr(
            settings, 'CAPTCHA_SECRET_KEY', ''
        )
        self.verify_url = verify_url or getattr(
            settings, 'CAPTCHA_VERIFY_URL', None
        ) or VERIFY_URLS.get(provider, VERIFY_URLS['recaptcha'])
        self.timeout = timeout if timeout is not None else getattr(settings, 'CAPTCHA_TIMEOUT', 10)

        if not self.secret_key:
            logger.warning(
                "CAPTCHA_SECRET_KEY is not set. "
                "Every CAPTCHA verification will fail!"
            )

    def verify(self, token: str, remote_ip: str = None) -> VerificationResult:
        """
        Verify a CAPTCHA token.

        Args:
            token: The response token posted by the form
            remote_ip: Client IP address, forwarded to the provider

        Returns:
            VerificationResult with the provider's verdict

        Raises:
            CaptchaUnavailableError: On timeout, network error, non-200 status
                or a response that is not a valid siteverify payload
        """
        if not token:
            logger.warning("No CAPTCHA token provided")
            return VerificationResult(success=False, error_codes=['missing-input-response'])

        if not self.secret_key:
            logger.error("CAPTCHA_SECRET_KEY not configured")
            return VerificationResult(success=False, error_codes=['missing-input-secret'])

        payload = {
            'secret': self.secret_key,
            'response': token,
        }

        if remote_ip:
            payload['remoteip'] = remote_ip

        try:
            response = requests.post(
                self.verify_url,
                data=payload,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            logger.error("CAPTCHA verification timeout")
            raise CaptchaUnavailableError('timeout') from e
        except requests.exceptions.RequestException as e:
            logger.error(f"CAPTCHA verification network error: {e}")
            raise CaptchaUnavailableError(str(e)) from e

        if response.status_code != 200:
            logger.error(f"CAPTCHA API returned status {response.status_code}")
            raise CaptchaUnavailableError(f"CAPTCHA API error: {response.status_code}")

        try:
            result = response.json()
        except ValueError as e:
            logger.error("CAPTCHA API returned a non-JSON body")
            raise CaptchaUnavailableError('malformed response') from e

        return self._parse_result(result)

    def _parse_result(self, result) -> VerificationResult:
        if not isinstance(result, dict):
            raise CaptchaUnavailableError('malformed response')

        score = result.get('score')
        if score is not None:
            if isinstance(score, bool) or not isinstance(score, Real):
                raise CaptchaUnavailableError(f'malformed score: {score!r}')
            score = float(score)
            # NaN fails every comparison, so the range check also rejects it
            if not 0.0 <= score <= 1.0:
                raise CaptchaUnavailableError(f'score out of range: {score!r}')

        error_codes = result.get('error-codes') or []
        if not isinstance(error_codes, list):
            error_codes = [str(error_codes)]

        verification = VerificationResult(
            success=result.get('success') is True,
            score=score,
            error_codes=[str(code) for code in error_codes],
        )

        if verification.success:
            logger.info(f"CAPTCHA token verified (score: {score})")
        else:
            logger.warning(
                f"CAPTCHA verification failed: {self.get_error_message(verification.error_codes)}"
            )

        return verification

    def get_error_message(self, error_codes: list) -> str:
        """
        Convert provider error codes to human-readable messages.

        Common error codes:
        - missing-input-secret: Secret key missing
        - invalid-input-secret: Secret key invalid
        - missing-input-response: Token missing
        - invalid-input-response: Token invalid or expired
        - timeout-or-duplicate: Token already used or expired
        """
        error_map = {
            'missing-input-secret': 'Server configuration error',
            'invalid-input-secret': 'Server configuration error',
            'missing-input-response': 'CAPTCHA token missing',
            'invalid-input-response': 'CAPTCHA token invalid or expired',
            'timeout-or-duplicate': 'CAPTCHA token expired or already used',
            'bad-request': 'Malformed verification request',
        }

        if not error_codes:
            return 'no error codes returned'

        messages = [error_map.get(code, f'Unknown error: {code}') for code in error_codes]
        return '; '.join(messages)


# Singleton instance
captcha_service = CaptchaService()
