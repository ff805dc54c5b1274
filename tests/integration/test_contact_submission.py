"""
Integration tests for the contact form endpoint

Tests cover:
1. Valid submission delivered to the category mailbox
2. Honeypot trip blocked before verification
3. Header injection rejected and logged as a security event
4. Verification service timeout failing closed
5. Low verification score rejected
6. Method and media type gate
7. Client IP resolution and redirect whitelist

Run with: pytest tests/integration/test_contact_submission.py -v
"""
import logging
import time
from unittest.mock import Mock, patch

import pytest
import requests
from django.apps import apps
from django.core import mail
from rest_framework.test import APIClient, APIRequestFactory

from contact.config import ContactFormConfig
from contact.handler import Outcome
from contact.views import ContactFormSubmitView, get_client_ip, outcome_redirect, safe_redirect

SUBMIT_URL = '/contact/submit'
SUCCESS_PAGE = '/contact_ok.html'
FAILURE_PAGE = '/contact_no_ok.html'


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def form_data():
    return {
        'name': 'Jane Doe',
        'company': 'Acme',
        'phone': '',
        'email': 'jane@acme.com',
        'message': 'We would like a quote.',
        'category': 'sales',
        'website': '',
        'timestamp': '',
        'g-recaptcha-response': 'valid-token',
    }


def siteverify(payload):
    response = Mock(status_code=200)
    response.json.return_value = payload
    return response


def assert_redirects_to(response, target):
    assert response.status_code == 302
    assert response['Location'] == target


# =============================================================================
# SUBMISSION SCENARIOS
# =============================================================================

class TestContactSubmission:
    """End-to-end submissions through the URL configuration."""

    @patch('core.captcha_service.requests.post')
    def test_valid_submission_is_delivered(self, mock_post, api_client, form_data):
        mock_post.return_value = siteverify({'success': True, 'score': 0.9})

        response = api_client.post(
            SUBMIT_URL,
            form_data,
            HTTP_REFERER='https://www.example.com/contact.html',
            HTTP_USER_AGENT='Mozilla/5.0 (X11; Linux x86_64)',
        )

        assert_redirects_to(response, SUCCESS_PAGE)
        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.to == ['sales@example.com']
        assert message.from_email == 'noreply@example.com'
        assert message.subject == 'Contact from website'
        assert 'Name: Jane Doe\r\n\r\n' in message.body
        assert 'Phone: Not provided' in message.body
        assert 'IP: 127.0.0.1' in message.body
        assert 'Referer: https://www.example.com/contact.html' in message.body
        assert 'User Agent: Mozilla/5.0 (X11; Linux x86_64)' in message.body
        mock_post.assert_called_once_with(
            'https://www.google.com/recaptcha/api/siteverify',
            data={'secret': 'test-captcha-secret', 'response': 'valid-token', 'remoteip': '127.0.0.1'},
            timeout=10,
        )

    @patch('core.captcha_service.requests.post')
    def test_legacy_script_path(self, mock_post, api_client, form_data):
        mock_post.return_value = siteverify({'success': True})
        form_data['category'] = 'human-resources'

        response = api_client.post('/contact.php', form_data)

        assert_redirects_to(response, SUCCESS_PAGE)
        assert mail.outbox[0].to == ['hr@example.com']

    @patch('core.captcha_service.requests.post')
    def test_unknown_category_is_rejected(self, mock_post, api_client, form_data):
        form_data['category'] = 'marketing'

        response = api_client.post(SUBMIT_URL, form_data)

        assert_redirects_to(response, FAILURE_PAGE)
        mock_post.assert_not_called()
        assert mail.outbox == []

    @patch('core.captcha_service.requests.post')
    def test_markup_is_escaped_in_body(self, mock_post, api_client, form_data):
        mock_post.return_value = siteverify({'success': True})
        form_data['message'] = '<script>alert("x")</script>'

        api_client.post(SUBMIT_URL, form_data)

        assert 'Message: &lt;script&gt;alert(&quot;x&quot;)&lt;/script&gt;' in mail.outbox[0].body

    @patch('core.captcha_service.requests.post')
    def test_honeypot_blocks_before_verification(self, mock_post, api_client, form_data, caplog):
        caplog.set_level(logging.INFO)
        form_data['website'] = 'spam-bot-value'

        response = api_client.post(SUBMIT_URL, form_data)

        assert_redirects_to(response, FAILURE_PAGE)
        mock_post.assert_not_called()
        assert mail.outbox == []
        assert 'Honeypot triggered for IP: 127.0.0.1 - BLOCKED' in caplog.text

    @patch('core.captcha_service.requests.post')
    def test_repeated_honeypot_field_blocks(self, mock_post, api_client, form_data):
        form_data['website'] = ['spam-bot-value', '']

        response = api_client.post(SUBMIT_URL, form_data)

        assert_redirects_to(response, FAILURE_PAGE)
        mock_post.assert_not_called()
        assert mail.outbox == []

    @patch('core.captcha_service.requests.post')
    def test_nan_score_fails_closed(self, mock_post, api_client, form_data):
        verification = requests.Response()
        verification.status_code = 200
        verification._content = b'{"success": true, "score": NaN}'
        mock_post.return_value = verification

        response = api_client.post(SUBMIT_URL, form_data)

        assert_redirects_to(response, FAILURE_PAGE)
        assert mail.outbox == []

    @patch('core.captcha_service.requests.post')
    def test_header_injection_is_rejected(self, mock_post, api_client, form_data, caplog):
        caplog.set_level(logging.INFO)
        form_data['email'] = 'attacker@x.com\r\nBcc:victim@y.com'

        response = api_client.post(SUBMIT_URL, form_data)

        assert_redirects_to(response, FAILURE_PAGE)
        mock_post.assert_not_called()
        assert mail.outbox == []
        security_records = [r for r in caplog.records if r.name == 'contact.security']
        assert any('header injection' in r.getMessage() for r in security_records)

    @patch('core.captcha_service.requests.post')
    def test_verification_timeout_fails_closed(self, mock_post, api_client, form_data, caplog):
        caplog.set_level(logging.INFO)
        mock_post.side_effect = requests.exceptions.Timeout()

        response = api_client.post(SUBMIT_URL, form_data)

        assert_redirects_to(response, FAILURE_PAGE)
        assert mock_post.call_count == 1
        assert mail.outbox == []
        assert '[upstream_unavailable]' in caplog.text

    @patch('core.captcha_service.requests.post')
    def test_low_score_is_rejected(self, mock_post, api_client, form_data):
        mock_post.return_value = siteverify({'success': True, 'score': 0.3})

        response = api_client.post(SUBMIT_URL, form_data)

        assert_redirects_to(response, FAILURE_PAGE)
        assert mail.outbox == []

    @patch('core.captcha_service.requests.post')
    def test_missing_token_is_rejected_without_request(self, mock_post, api_client, form_data):
        del form_data['g-recaptcha-response']

        response = api_client.post(SUBMIT_URL, form_data)

        assert_redirects_to(response, FAILURE_PAGE)
        mock_post.assert_not_called()

    @patch('core.captcha_service.requests.post')
    def test_fresh_timestamp_is_only_logged(self, mock_post, api_client, form_data, caplog):
        caplog.set_level(logging.INFO)
        mock_post.return_value = siteverify({'success': True})
        form_data['timestamp'] = str(int(time.time()) + 60)

        response = api_client.post(SUBMIT_URL, form_data)

        assert_redirects_to(response, SUCCESS_PAGE)
        assert 'Suspicious timestamp for IP: 127.0.0.1' in caplog.text

    @patch('core.captcha_service.requests.post')
    def test_forwarded_for_is_ignored_by_default(self, mock_post, api_client, form_data):
        mock_post.return_value = siteverify({'success': True})

        api_client.post(SUBMIT_URL, form_data, HTTP_X_FORWARDED_FOR='198.51.100.23')

        assert mock_post.call_args.kwargs['data']['remoteip'] == '127.0.0.1'
        assert 'IP: 127.0.0.1' in mail.outbox[0].body


class TestMethodGate:
    """Anything but a form POST ends on the failure page."""

    @patch('core.captcha_service.requests.post')
    def test_get(self, mock_post, api_client):
        response = api_client.get(SUBMIT_URL)

        assert_redirects_to(response, FAILURE_PAGE)
        mock_post.assert_not_called()

    @pytest.mark.parametrize('method', ['put', 'patch', 'delete', 'options', 'head'])
    def test_other_methods(self, api_client, method):
        response = getattr(api_client, method)(SUBMIT_URL)

        assert_redirects_to(response, FAILURE_PAGE)
        assert mail.outbox == []

    @patch('core.captcha_service.requests.post')
    def test_json_body_is_rejected(self, mock_post, api_client, form_data):
        response = api_client.post(SUBMIT_URL, form_data, format='json')

        assert_redirects_to(response, FAILURE_PAGE)
        mock_post.assert_not_called()
        assert mail.outbox == []


# =============================================================================
# VIEW HELPERS
# =============================================================================

class TestViewHelpers:
    """Client IP resolution, redirect whitelist and handler injection."""

    @pytest.fixture
    def form_config(self):
        return apps.get_app_config('contact').form_config

    def test_app_builds_configuration_on_load(self, form_config):
        assert isinstance(form_config, ContactFormConfig)
        assert form_config.outcome_pages == {SUCCESS_PAGE, FAILURE_PAGE}

    def test_client_ip_from_remote_addr(self):
        request = APIRequestFactory().post(
            SUBMIT_URL, REMOTE_ADDR='203.0.113.7', HTTP_X_FORWARDED_FOR='198.51.100.23'
        )

        assert get_client_ip(request) == '203.0.113.7'

    def test_client_ip_from_trusted_proxy(self):
        request = APIRequestFactory().post(
            SUBMIT_URL, REMOTE_ADDR='10.0.0.2', HTTP_X_FORWARDED_FOR='198.51.100.23, 10.0.0.1'
        )

        assert get_client_ip(request, trust_proxy_headers=True) == '198.51.100.23'

    def test_outcome_redirect(self, form_config):
        assert outcome_redirect(Outcome.SUCCESS, form_config)['Location'] == SUCCESS_PAGE
        assert outcome_redirect(Outcome.FAILURE, form_config)['Location'] == FAILURE_PAGE

    def test_off_whitelist_redirect_falls_back_to_failure(self, form_config, caplog):
        caplog.set_level(logging.INFO)

        response = safe_redirect('https://evil.example.net/', form_config)

        assert response['Location'] == FAILURE_PAGE
        assert 'non-whitelisted' in caplog.text

    def test_injected_handler(self, form_config, form_data):
        handler = Mock(config=form_config)
        handler.handle.return_value = Outcome.SUCCESS
        view = ContactFormSubmitView.as_view(submission_handler=handler)

        response = view(APIRequestFactory().post(SUBMIT_URL, form_data, REMOTE_ADDR='203.0.113.7'))

        assert_redirects_to(response, SUCCESS_PAGE)
        submission = handler.handle.call_args.args[0]
        assert submission.method == 'POST'
        assert submission.client_ip == '203.0.113.7'
        assert submission.data['name'] == 'Jane Doe'

    def test_unexpected_error_redirects_to_failure(self, form_config, form_data, caplog):
        handler = Mock(config=form_config)
        handler.handle.side_effect = RuntimeError('boom')
        view = ContactFormSubmitView.as_view(submission_handler=handler)

        response = view(APIRequestFactory().post(SUBMIT_URL, form_data))

        assert_redirects_to(response, FAILURE_PAGE)
        assert 'Unexpected error in contact form submission' in caplog.text
