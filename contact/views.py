"""
Contact Form Views

Public endpoint receiving the website contact form. Every request ends in a
redirect to one of the two configured outcome pages.
"""
import logging

from django.apps import apps
from django.http import HttpResponseRedirect
from rest_framework import exceptions
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from core.captcha_service import captcha_service

from .handler import Outcome, SubmissionHandler, SubmissionRequest
from .mail_transport import DjangoMailTransport

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('contact.security')


def get_client_ip(request, trust_proxy_headers=False):
    """Get client IP address from request."""
    if trust_proxy_headers:
        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if x_forwarded_for:
            return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', '')


def safe_redirect(target, config):
    """Redirect to `target` only if it is one of the configured outcome pages."""
    if target not in config.outcome_pages:
        security_logger.warning(f"Attempted redirect to non-whitelisted page: {target!r}")
        target = config.failure_page
    return HttpResponseRedirect(target)


def outcome_redirect(outcome, config):
    target = config.success_page if outcome is Outcome.SUCCESS else config.failure_page
    return safe_redirect(target, config)


class ContactFormSubmitView(APIView):
    """
    Public endpoint for contact form submissions.

    POST /contact/submit

    Form-encoded fields: name, company, phone, email, message, category,
    website (honeypot), timestamp and the CAPTCHA token. No authentication.
    Any other method, and any failure, redirects to the failure page.
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    parser_classes = [FormParser, MultiPartParser]

    # Injected in tests; built from the app configuration otherwise
    submission_handler = None

    def get_submission_handler(self):
        if self.submission_handler is not None:
            return self.submission_handler

        config = apps.get_app_config('contact').form_config
        return SubmissionHandler(
            config,
            verifier=captcha_service,
            transport=DjangoMailTransport(config.email_from),
        )

    def post(self, request):
        """Submit a contact form."""
        handler = self.get_submission_handler()
        config = handler.config

        submission = SubmissionRequest(
            method=request.method,
            data=request.data,
            client_ip=get_client_ip(request, config.trust_proxy_headers),
            referer=request.META.get('HTTP_REFERER', ''),
            user_agent=request.META.get('HTTP_USER_AGENT', '')[:500],
        )

        return outcome_redirect(handler.handle(submission), config)

    def options(self, request, *args, **kwargs):
        return self.http_method_not_allowed(request, *args, **kwargs)

    def http_method_not_allowed(self, request, *args, **kwargs):
        logger.info(f"Contact form rejected [method_not_allowed]: {request.method}")
        return outcome_redirect(Outcome.FAILURE, self.get_submission_handler().config)

    def handle_exception(self, exc):
        if isinstance(exc, exceptions.APIException):
            logger.warning(f"Contact form request rejected: {exc}")
        else:
            logger.exception("Unexpected error in contact form submission")
        return outcome_redirect(Outcome.FAILURE, self.get_submission_handler().config)
