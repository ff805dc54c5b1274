"""
Contact Form Errors

Closed set of failure kinds for a contact form submission.

Every stage raises one of these; the submission handler is the only place
that catches them. All of them end in the same failure redirect, the `code`
only distinguishes them in the server log.
"""


class SubmissionError(Exception):
    """Base class for every terminal contact form failure."""

    code = 'submission_error'

    def __init__(self, detail=''):
        self.detail = detail
        super().__init__(detail or self.code)


class MethodNotAllowed(SubmissionError):
    """Request was not made with the form-post method."""

    code = 'method_not_allowed'


class BotDetected(SubmissionError):
    """Honeypot trip or failed anti-automation verification."""

    code = 'bot_detected'


class ValidationFailed(SubmissionError):
    """One or more required fields are missing or invalid."""

    code = 'validation_failed'

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__(', '.join(self.errors))


class SecurityViolation(ValidationFailed):
    """Header injection attempt in a header-bound field."""

    code = 'security_violation'


class UpstreamUnavailable(SubmissionError):
    """Verification service unreachable or returned a malformed response."""

    code = 'upstream_unavailable'


class ConfigurationError(SubmissionError):
    """Resolved recipient failed its own validation."""

    code = 'configuration_error'


class DispatchFailed(SubmissionError):
    """Email transport reported a failure."""

    code = 'dispatch_failed'
