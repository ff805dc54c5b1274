"""
Tests for the contact form pipeline stages
"""
import logging
import smtplib
from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from django.conf import settings
from django.core import mail
from django.core.exceptions import ImproperlyConfigured
from django.http import QueryDict

from core.captcha_service import CaptchaUnavailableError, VerificationResult
from contact.config import CATEGORY_CODES, CategoryDirectory, ContactFormConfig
from contact.errors import (
    BotDetected,
    ConfigurationError,
    SecurityViolation,
    UpstreamUnavailable,
    ValidationFailed,
)
from contact.handler import Outcome, SubmissionHandler, SubmissionRequest
from contact.mail_transport import DjangoMailTransport
from contact.routing import compose_message, redact_email, resolve_recipient
from contact.sanitization import (
    SubmissionFields,
    sanitize_text,
    validate_email,
    validate_phone,
)
from contact.serializers import ContactFormSubmitSerializer, validate_submission
from contact.spam_protection import SpamGate, is_honeypot_tripped, is_timestamp_plausible


class FakeVerifier:
    """Deterministic stand-in for the CAPTCHA service."""

    def __init__(self, result=None, error=None):
        self.result = result or VerificationResult(success=True)
        self.error = error
        self.calls = []

    def verify(self, token, remote_ip=None):
        self.calls.append((token, remote_ip))
        if self.error:
            raise self.error
        return self.result


class FakeTransport:
    """Records messages instead of sending them."""

    def __init__(self, succeed=True):
        self.succeed = succeed
        self.sent = []

    def send(self, recipient, subject, body):
        self.sent.append((recipient, subject, body))
        return self.succeed


@pytest.fixture
def form_config():
    return ContactFormConfig.from_settings(settings)


@pytest.fixture
def valid_form():
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


def make_request(data, method='POST'):
    return SubmissionRequest(
        method=method,
        data=data,
        client_ip='203.0.113.7',
        referer='https://www.example.com/contact.html',
        user_agent='Mozilla/5.0',
    )


def security_messages(caplog):
    return [r.getMessage() for r in caplog.records if r.name == 'contact.security']


class TestSanitizeText:
    """Test free-text sanitization."""

    def test_trims_and_escapes_markup(self):
        value = '  <b>Hi</b> & "you" '
        assert sanitize_text(value, 100) == '&lt;b&gt;Hi&lt;/b&gt; &amp; &quot;you&quot;'

    def test_removes_backslashes_and_control_characters(self):
        assert sanitize_text("O\\'Brien\x00\x07", 100) == 'O&#x27;Brien'

    def test_keeps_line_breaks_inside_text(self):
        assert sanitize_text('line one\r\nline two', 100) == 'line one\r\nline two'

    @pytest.mark.parametrize('value', [None, 42, ['name'], {'name': 'x'}])
    def test_non_string_returns_empty(self, value):
        assert sanitize_text(value, 100) == ''

    def test_truncates_one_past_limit_to_limit(self):
        assert len(sanitize_text('a' * 101, 100)) == 100

    def test_truncation_counts_code_points(self):
        result = sanitize_text('\U0001F600' * 101, 100)

        assert result == '\U0001F600' * 100
        assert result.encode('utf-8').decode('utf-8') == result

    def test_truncation_drops_split_character_reference(self):
        # '&' escapes to '&amp;', which the limit would cut in half
        assert sanitize_text('a' * 98 + '&b', 100) == 'a' * 98

    @pytest.mark.parametrize('value, expected', [
        ('a' * 99 + ' b', 'a' * 99),
        ('a' * 99 + '&', 'a' * 99),
    ])
    def test_truncation_may_end_short_of_limit(self, value, expected):
        # whitespace and partial references at the cut are dropped
        assert sanitize_text(value, 100) == expected

    def test_existing_references_are_not_escaped_twice(self):
        assert sanitize_text('Tom &amp; Jerry', 100) == 'Tom &amp; Jerry'

    @pytest.mark.parametrize('value', [
        'plain text',
        '  <script>alert("x")</script>  ',
        'Tom & Jerry',
        "it's \\ fine",
        'x' * 600,
        'a' * 98 + '&b',
        'abc     def',
        '<<<<<<<<',
        '\U0001F600 café 中文',
    ])
    @pytest.mark.parametrize('max_length', [5, 10, 100, 500])
    def test_sanitizing_twice_changes_nothing(self, value, max_length):
        once = sanitize_text(value, max_length)

        assert len(once) <= max_length
        assert sanitize_text(once, max_length) == once


class TestValidateEmail:
    """Test email validation and header injection detection."""

    def test_valid_address(self):
        assert validate_email('jane@acme.com') == 'jane@acme.com'

    def test_trims_and_lowercases_domain(self):
        assert validate_email('  Jane.Doe@ACME.Com ') == 'Jane.Doe@acme.com'

    def test_strips_characters_not_allowed_in_addresses(self):
        assert validate_email('ja ne@acme.com') == 'jane@acme.com'

    @pytest.mark.parametrize('value', [
        'attacker@x.com\r\nBcc:victim@y.com',
        'attacker@x.com\nBcc:victim@y.com',
        'attacker@x.com\r',
        'attacker@x.com\x00',
        '\njane@acme.com',
    ])
    def test_header_injection_is_rejected_and_logged(self, value, caplog):
        caplog.set_level(logging.INFO)

        assert validate_email(value) is None
        assert any('header injection' in message for message in security_messages(caplog))

    @pytest.mark.parametrize('value', [
        '',
        'not-an-email',
        'jane@acme',
        'jane@acme.c',
        'jane@@acme.com',
        '@acme.com',
        'jane@acme.123',
    ])
    def test_invalid_syntax(self, value):
        assert validate_email(value) is None

    @pytest.mark.parametrize('value', [None, 12, ['jane@acme.com']])
    def test_non_string_is_invalid(self, value):
        assert validate_email(value) is None


class TestValidatePhone:
    """Test phone normalization."""

    @pytest.mark.parametrize('value', ['', '   ', None])
    def test_empty_means_not_provided(self, value):
        assert validate_phone(value) == ''

    def test_strips_disallowed_characters(self):
        assert validate_phone('+1 (555) 123-4567 ext.9') == '+1 (555) 123-4567 9'

    def test_caps_length(self):
        assert validate_phone('1' * 40) == '1' * 30


class TestValidateSubmission:
    """Test the required-field rule."""

    def test_valid_submission(self, valid_form):
        fields = validate_submission(valid_form)

        assert fields == SubmissionFields(
            name='Jane Doe',
            company='Acme',
            phone='',
            email='jane@acme.com',
            message='We would like a quote.',
            category='sales',
        )

    def test_empty_form_collects_every_error(self):
        with pytest.raises(ValidationFailed) as excinfo:
            validate_submission({})

        assert excinfo.value.errors == [
            'Name required',
            'Company required',
            'Valid email required',
            'Category required',
        ]
        assert not isinstance(excinfo.value, SecurityViolation)

    def test_single_character_name_is_rejected(self, valid_form):
        valid_form['name'] = ' J '

        with pytest.raises(ValidationFailed) as excinfo:
            validate_submission(valid_form)

        assert excinfo.value.errors == ['Name required']

    def test_unknown_category_is_rejected(self, valid_form):
        valid_form['category'] = 'marketing'

        with pytest.raises(ValidationFailed) as excinfo:
            validate_submission(valid_form)

        assert excinfo.value.errors == ['Category required']

    @pytest.mark.parametrize('category', sorted(CATEGORY_CODES))
    def test_every_known_category_is_accepted(self, valid_form, category):
        valid_form['category'] = category
        assert validate_submission(valid_form).category == category

    def test_header_injection_raises_security_violation(self, valid_form):
        valid_form['email'] = 'attacker@x.com\r\nBcc:victim@y.com'

        with pytest.raises(SecurityViolation) as excinfo:
            validate_submission(valid_form)

        assert excinfo.value.errors == ['Valid email required']

    def test_message_is_escaped_and_capped(self, valid_form):
        valid_form['message'] = '<a href="x">' + 'm' * 3000

        message = validate_submission(valid_form).message

        assert message.startswith('&lt;a href=&quot;x&quot;&gt;')
        assert len(message) == 2000


class TestContactFormSubmitSerializer:
    """Test the submission serializer."""

    def test_valid_data(self, valid_form):
        serializer = ContactFormSubmitSerializer(data=valid_form)

        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data['email'] == 'jane@acme.com'
        assert serializer.validated_data['phone'] == ''

    def test_optional_fields_default_to_empty(self):
        serializer = ContactFormSubmitSerializer(data={
            'name': 'Jane Doe',
            'company': 'Acme',
            'email': 'jane@acme.com',
            'category': 'sales',
        })

        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data['phone'] == ''
        assert serializer.validated_data['message'] == ''

    def test_error_messages(self):
        serializer = ContactFormSubmitSerializer(data={
            'name': '',
            'company': 'A',
            'email': 'not-an-email',
            'category': 'marketing',
        })

        assert not serializer.is_valid()
        assert serializer.errors == {
            'name': ['Name required'],
            'company': ['Company required'],
            'email': ['Valid email required'],
            'category': ['Category required'],
        }

    def test_control_characters_are_stripped_not_rejected(self, valid_form):
        valid_form['name'] = 'Jane\x00 Doe'
        valid_form['message'] = 'Hello\x00\x07 there'

        serializer = ContactFormSubmitSerializer(data=valid_form)

        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data['name'] == 'Jane Doe'
        assert serializer.validated_data['message'] == 'Hello there'

    def test_nul_in_email_is_header_injection(self, valid_form, caplog):
        caplog.set_level(logging.INFO)
        valid_form['email'] = 'jane@acme.com\x00'

        with pytest.raises(SecurityViolation):
            validate_submission(valid_form)

        assert any('header injection' in message for message in security_messages(caplog))

    def test_category_is_sanitized_before_lookup(self, valid_form):
        valid_form['category'] = '  sales '

        assert validate_submission(valid_form).category == 'sales'

    def test_phone_is_normalized(self, valid_form):
        valid_form['phone'] = ' +1 (555) 123-4567 ext.9 '

        assert validate_submission(valid_form).phone == '+1 (555) 123-4567 9'


class TestHoneypot:
    """Test honeypot detection."""

    @pytest.mark.parametrize('value', ['spam-bot-value', 'x', ' ', '\t'])
    def test_non_empty_value_trips(self, value):
        assert is_honeypot_tripped(value) is True

    @pytest.mark.parametrize('value', ['', None])
    def test_empty_value_does_not_trip(self, value):
        assert is_honeypot_tripped(value) is False

    def test_trip_is_blocked_and_logged(self, caplog):
        caplog.set_level(logging.INFO)
        gate = SpamGate(FakeVerifier())

        with pytest.raises(BotDetected):
            gate.check_honeypot(' ', '203.0.113.7')

        assert 'Honeypot triggered for IP: 203.0.113.7 - BLOCKED' in security_messages(caplog)

    @pytest.mark.parametrize('value', [['spam-bot-value', ''], ['', ' '], ('x',)])
    def test_any_posted_value_trips(self, value):
        assert is_honeypot_tripped(value) is True

    @pytest.mark.parametrize('value', [[], [''], ['', '']])
    def test_all_empty_values_do_not_trip(self, value):
        assert is_honeypot_tripped(value) is False

    def test_empty_honeypot_passes(self):
        SpamGate(FakeVerifier()).check_honeypot('', '203.0.113.7')


class TestTimestamp:
    """Test timestamp plausibility."""

    NOW = 1_700_000_000

    @pytest.mark.parametrize('value, expected', [
        ('', True),
        (None, True),
        ('yesterday', True),
        ('nan', True),
        ('inf', True),
        (str(NOW - 1), True),
        (str(NOW - 600), True),
        (str(NOW - 86400), True),
        (str(NOW), False),
        (str(NOW + 60), False),
        (str(NOW - 86401), False),
        (f'{NOW - 30}.75', True),
    ])
    def test_window(self, value, expected):
        assert is_timestamp_plausible(value, now=self.NOW) is expected

    def test_suspicious_timestamp_is_only_logged_by_default(self, caplog):
        caplog.set_level(logging.INFO)
        gate = SpamGate(FakeVerifier(), clock=lambda: self.NOW)

        gate.check_timestamp(str(self.NOW), '203.0.113.7')

        assert 'Suspicious timestamp for IP: 203.0.113.7' in security_messages(caplog)

    def test_strict_policy_rejects_suspicious_timestamp(self):
        gate = SpamGate(FakeVerifier(), reject_suspicious_timestamp=True, clock=lambda: self.NOW)

        with pytest.raises(BotDetected):
            gate.check_timestamp(str(self.NOW + 5), '203.0.113.7')


class TestVerifyToken:
    """Test the verification gate."""

    def test_success_without_score_passes(self):
        verifier = FakeVerifier(VerificationResult(success=True))

        SpamGate(verifier).verify_token('token', '203.0.113.7')

        assert verifier.calls == [('token', '203.0.113.7')]

    def test_score_at_threshold_passes(self):
        SpamGate(FakeVerifier(VerificationResult(success=True, score=0.5))).verify_token('t', 'ip')

    def test_low_score_is_rejected(self):
        gate = SpamGate(FakeVerifier(VerificationResult(success=True, score=0.3)))

        with pytest.raises(BotDetected):
            gate.verify_token('t', 'ip')

    def test_failed_verification_is_rejected(self):
        gate = SpamGate(FakeVerifier(VerificationResult(success=False, error_codes=['invalid-input-response'])))

        with pytest.raises(BotDetected):
            gate.verify_token('t', 'ip')

    def test_unreachable_service_is_upstream_unavailable(self):
        gate = SpamGate(FakeVerifier(error=CaptchaUnavailableError('timeout')))

        with pytest.raises(UpstreamUnavailable):
            gate.verify_token('t', 'ip')


class TestRouting:
    """Test recipient resolution and message composition."""

    @pytest.mark.parametrize('category', sorted(CATEGORY_CODES))
    def test_known_category_resolves_to_valid_address(self, form_config, category):
        recipient = resolve_recipient(category, form_config.directory)

        assert recipient == settings.CONTACT_CATEGORY_RECIPIENTS[category]
        assert validate_email(recipient) == recipient

    @pytest.mark.parametrize('category', ['marketing', '', 'SALES', '../etc'])
    def test_unknown_category_resolves_to_default(self, form_config, category):
        assert resolve_recipient(category, form_config.directory) == settings.CONTACT_DEFAULT_RECIPIENT

    def test_invalid_recipient_is_configuration_error(self, caplog):
        caplog.set_level(logging.ERROR)
        directory = CategoryDirectory({'sales': 'not-an-address'}, default='info@example.com')

        with pytest.raises(ConfigurationError):
            resolve_recipient('sales', directory)

        assert 'Invalid recipient for category: sales' in caplog.text

    def test_compose_message(self):
        fields = SubmissionFields(
            name='Jane Doe',
            company='Acme',
            phone='',
            email='jane@acme.com',
            message='',
            category='sales',
        )

        body = compose_message(fields, '203.0.113.7', '', 'Mozilla/5.0')

        assert body == (
            'Name: Jane Doe\r\n\r\n'
            'Company: Acme\r\n\r\n'
            'Phone: Not provided\r\n\r\n'
            'Email: jane@acme.com\r\n\r\n'
            'Message: No message provided.\r\n\r\n'
            'Category: sales\r\n\r\n'
            'IP: 203.0.113.7\r\n\r\n'
            'Referer: N/A\r\n\r\n'
            'User Agent: Mozilla/5.0\r\n\r\n'
        )

    @pytest.mark.parametrize('address, expected', [
        ('jane@acme.com', 'j***@acme.com'),
        ('j@acme.com', 'j***@acme.com'),
        ('', '***'),
        ('broken', '***'),
    ])
    def test_redact_email(self, address, expected):
        assert redact_email(address) == expected


class TestContactFormConfig:
    """Test configuration loading."""

    def make_settings(self, **overrides):
        values = {
            'CONTACT_CATEGORY_RECIPIENTS': dict(settings.CONTACT_CATEGORY_RECIPIENTS),
            'CONTACT_DEFAULT_RECIPIENT': 'info@example.com',
            'CONTACT_SUCCESS_PAGE': '/ok.html',
            'CONTACT_FAILURE_PAGE': '/no_ok.html',
            'CONTACT_EMAIL_SUBJECT': 'Subject',
            'DEFAULT_FROM_EMAIL': 'noreply@example.com',
        }
        values.update(overrides)
        return SimpleNamespace(**values)

    def test_defaults(self):
        config = ContactFormConfig.from_settings(self.make_settings())

        assert config.min_score == 0.5
        assert config.timestamp_window == (1, 86400)
        assert config.email_from == 'noreply@example.com'
        assert config.captcha_field == 'g-recaptcha-response'
        assert config.outcome_pages == {'/ok.html', '/no_ok.html'}

    def test_directory_is_read_only(self):
        config = ContactFormConfig.from_settings(self.make_settings())

        with pytest.raises(TypeError):
            config.directory.recipients['sales'] = 'attacker@example.com'

    def test_missing_category_is_rejected(self):
        recipients = dict(settings.CONTACT_CATEGORY_RECIPIENTS)
        del recipients['sales']

        with pytest.raises(ImproperlyConfigured):
            ContactFormConfig.from_settings(self.make_settings(CONTACT_CATEGORY_RECIPIENTS=recipients))

    def test_identical_outcome_pages_are_rejected(self):
        with pytest.raises(ImproperlyConfigured):
            ContactFormConfig.from_settings(self.make_settings(CONTACT_FAILURE_PAGE='/ok.html'))


class TestSubmissionHandler:
    """Test the full pipeline without HTTP."""

    def test_valid_submission_is_dispatched(self, form_config, valid_form):
        verifier = FakeVerifier()
        transport = FakeTransport()
        handler = SubmissionHandler(form_config, verifier, transport)

        outcome = handler.handle(make_request(valid_form))

        assert outcome is Outcome.SUCCESS
        assert verifier.calls == [('valid-token', '203.0.113.7')]
        recipient, subject, body = transport.sent[0]
        assert recipient == 'sales@example.com'
        assert subject == form_config.email_subject
        assert 'Name: Jane Doe' in body
        assert 'Referer: https://www.example.com/contact.html' in body

    @pytest.mark.parametrize('method', ['GET', 'PUT', 'PATCH', 'DELETE', 'HEAD', 'OPTIONS'])
    def test_other_methods_fail_without_processing(self, form_config, valid_form, method):
        verifier = FakeVerifier()
        transport = FakeTransport()

        outcome = SubmissionHandler(form_config, verifier, transport).handle(
            make_request(valid_form, method=method)
        )

        assert outcome is Outcome.FAILURE
        assert verifier.calls == []
        assert transport.sent == []

    def test_honeypot_skips_verification(self, form_config, valid_form):
        valid_form['website'] = 'spam-bot-value'
        verifier = FakeVerifier()
        transport = FakeTransport()

        outcome = SubmissionHandler(form_config, verifier, transport).handle(make_request(valid_form))

        assert outcome is Outcome.FAILURE
        assert verifier.calls == []
        assert transport.sent == []

    def test_invalid_fields_skip_verification(self, form_config, valid_form, caplog):
        caplog.set_level(logging.INFO)
        valid_form['company'] = ''
        verifier = FakeVerifier()

        outcome = SubmissionHandler(form_config, verifier, FakeTransport()).handle(make_request(valid_form))

        assert outcome is Outcome.FAILURE
        assert verifier.calls == []
        assert 'Validation errors: Company required' in caplog.text

    def test_header_injection_is_a_security_violation(self, form_config, valid_form, caplog):
        caplog.set_level(logging.INFO)
        valid_form['email'] = 'attacker@x.com\r\nBcc:victim@y.com'
        transport = FakeTransport()

        outcome = SubmissionHandler(form_config, FakeVerifier(), transport).handle(make_request(valid_form))

        assert outcome is Outcome.FAILURE
        assert transport.sent == []
        messages = security_messages(caplog)
        assert any('header injection' in message for message in messages)
        assert any('Security violation' in message for message in messages)

    def test_unreachable_verifier_fails_closed(self, form_config, valid_form, caplog):
        caplog.set_level(logging.INFO)
        transport = FakeTransport()
        verifier = FakeVerifier(error=CaptchaUnavailableError('timeout'))

        outcome = SubmissionHandler(form_config, verifier, transport).handle(make_request(valid_form))

        assert outcome is Outcome.FAILURE
        assert transport.sent == []
        assert '[upstream_unavailable]' in caplog.text

    def test_low_score_fails(self, form_config, valid_form):
        transport = FakeTransport()
        verifier = FakeVerifier(VerificationResult(success=True, score=0.3))

        outcome = SubmissionHandler(form_config, verifier, transport).handle(make_request(valid_form))

        assert outcome is Outcome.FAILURE
        assert transport.sent == []

    def test_bad_recipient_fails_before_dispatch(self, valid_form, caplog):
        caplog.set_level(logging.INFO)
        config = ContactFormConfig.from_settings(settings, overrides={
            'directory': CategoryDirectory({'sales': 'broken'}, default='info@example.com'),
        })
        transport = FakeTransport()

        outcome = SubmissionHandler(config, FakeVerifier(), transport).handle(make_request(valid_form))

        assert outcome is Outcome.FAILURE
        assert transport.sent == []
        assert '[configuration_error]' in caplog.text

    def test_repeated_honeypot_field_is_checked_in_full(self, form_config):
        data = QueryDict(
            'name=Jane+Doe&company=Acme&email=jane%40acme.com&category=sales'
            '&website=spam-bot-value&website=&g-recaptcha-response=valid-token'
        )
        verifier = FakeVerifier()
        transport = FakeTransport()

        outcome = SubmissionHandler(form_config, verifier, transport).handle(make_request(data))

        assert outcome is Outcome.FAILURE
        assert verifier.calls == []
        assert transport.sent == []

    def test_query_dict_submission_is_dispatched(self, form_config):
        data = QueryDict(
            'name=Jane+Doe&company=Acme&email=jane%40acme.com&category=sales'
            '&website=&g-recaptcha-response=valid-token'
        )
        transport = FakeTransport()

        outcome = SubmissionHandler(form_config, FakeVerifier(), transport).handle(make_request(data))

        assert outcome is Outcome.SUCCESS
        assert transport.sent[0][0] == 'sales@example.com'

    def test_unexpected_transport_error_fails(self, form_config, valid_form, caplog):
        transport = Mock()
        transport.send.side_effect = RuntimeError('backend misconfigured')

        outcome = SubmissionHandler(form_config, FakeVerifier(), transport).handle(make_request(valid_form))

        assert outcome is Outcome.FAILURE
        assert 'Unexpected error processing contact form from IP 203.0.113.7' in caplog.text

    def test_transport_failure_fails(self, form_config, valid_form, caplog):
        caplog.set_level(logging.INFO)

        outcome = SubmissionHandler(form_config, FakeVerifier(), FakeTransport(succeed=False)).handle(
            make_request(valid_form)
        )

        assert outcome is Outcome.FAILURE
        assert 'Failed to send email from contact form for j***@acme.com to s***@example.com' in caplog.text
        assert 'jane@acme.com' not in caplog.text

    def test_success_log_redacts_addresses(self, form_config, valid_form, caplog):
        caplog.set_level(logging.INFO)

        SubmissionHandler(form_config, FakeVerifier(), FakeTransport()).handle(make_request(valid_form))

        assert 'Contact form submitted successfully by j***@acme.com to s***@example.com' in caplog.text

    def test_custom_captcha_field(self, valid_form):
        config = ContactFormConfig.from_settings(settings, overrides={'captcha_field': 'cf-turnstile-response'})
        valid_form['cf-turnstile-response'] = 'turnstile-token'
        verifier = FakeVerifier()

        SubmissionHandler(config, verifier, FakeTransport()).handle(make_request(valid_form))

        assert verifier.calls == [('turnstile-token', '203.0.113.7')]


class TestDjangoMailTransport:
    """Test delivery through Django's mail backend."""

    def test_sends_to_validated_recipient_only(self):
        transport = DjangoMailTransport('noreply@example.com')

        assert transport.send('sales@example.com', 'Contact from website', 'Body') is True

        assert len(mail.outbox) == 1
        sent = mail.outbox[0]
        assert sent.to == ['sales@example.com']
        assert sent.cc == []
        assert sent.bcc == []
        assert sent.reply_to == []
        assert sent.from_email == 'noreply@example.com'
        assert sent.subject == 'Contact from website'
        assert sent.body == 'Body'

    def test_smtp_error_returns_false(self):
        connection = Mock()
        connection.send_messages.side_effect = smtplib.SMTPException('relay refused')

        transport = DjangoMailTransport('noreply@example.com', connection=connection)

        assert transport.send('sales@example.com', 'Subject', 'Body') is False

    def test_connection_error_returns_false(self):
        connection = Mock()
        connection.send_messages.side_effect = ConnectionRefusedError()

        transport = DjangoMailTransport('noreply@example.com', connection=connection)

        assert transport.send('sales@example.com', 'Subject', 'Body') is False

    def test_nothing_sent_returns_false(self):
        connection = Mock()
        connection.send_messages.return_value = 0

        transport = DjangoMailTransport('noreply@example.com', connection=connection)

        assert transport.send('sales@example.com', 'Subject', 'Body') is False

    def test_newline_in_subject_is_refused(self):
        transport = DjangoMailTransport('noreply@example.com')

        assert transport.send('sales@example.com', 'Subject\r\nBcc: victim@y.com', 'Body') is False
        assert mail.outbox == []
