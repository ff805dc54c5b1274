"""
Tests for the CAPTCHA verification service
"""
from unittest.mock import Mock, patch

import pytest
import requests
from django.test import override_settings

from core.captcha_service import VERIFY_URLS, CaptchaService, CaptchaUnavailableError


def siteverify_response(payload=None, status_code=200):
    response = Mock(status_code=status_code)
    response.json.return_value = payload if payload is not None else {'success': True}
    return response


@pytest.fixture
def service():
    return CaptchaService(
        secret_key='test-secret',
        verify_url=VERIFY_URLS['recaptcha'],
        timeout=10,
    )


class TestCaptchaServiceRequest:
    """Test the siteverify request."""

    @patch('core.captcha_service.requests.post')
    def test_posts_secret_token_and_ip(self, mock_post, service):
        mock_post.return_value = siteverify_response({'success': True, 'score': 0.9})

        service.verify('token-123', remote_ip='203.0.113.7')

        mock_post.assert_called_once_with(
            VERIFY_URLS['recaptcha'],
            data={'secret': 'test-secret', 'response': 'token-123', 'remoteip': '203.0.113.7'},
            timeout=10,
        )

    @patch('core.captcha_service.requests.post')
    def test_omits_remote_ip_when_unknown(self, mock_post, service):
        mock_post.return_value = siteverify_response()

        service.verify('token-123')

        assert 'remoteip' not in mock_post.call_args.kwargs['data']

    @patch('core.captcha_service.requests.post')
    def test_missing_token_short_circuits(self, mock_post, service):
        result = service.verify('', remote_ip='203.0.113.7')

        assert result.success is False
        assert result.error_codes == ['missing-input-response']
        mock_post.assert_not_called()

    @patch('core.captcha_service.requests.post')
    def test_missing_secret_short_circuits(self, mock_post):
        service = CaptchaService(secret_key='', verify_url=VERIFY_URLS['recaptcha'])

        result = service.verify('token-123')

        assert result.success is False
        assert result.error_codes == ['missing-input-secret']
        mock_post.assert_not_called()

    @override_settings(CAPTCHA_PROVIDER='turnstile', CAPTCHA_VERIFY_URL='')
    def test_provider_selects_verify_url(self):
        assert CaptchaService(secret_key='s').verify_url == VERIFY_URLS['turnstile']

    @override_settings(CAPTCHA_VERIFY_URL='https://captcha.internal/siteverify')
    def test_explicit_verify_url_wins(self):
        assert CaptchaService(secret_key='s').verify_url == 'https://captcha.internal/siteverify'


class TestCaptchaServiceResult:
    """Test parsing of siteverify responses."""

    @patch('core.captcha_service.requests.post')
    def test_success_with_score(self, mock_post, service):
        mock_post.return_value = siteverify_response({'success': True, 'score': 0.9})

        result = service.verify('token')

        assert result.success is True
        assert result.score == 0.9
        assert result.error_codes == []

    @patch('core.captcha_service.requests.post')
    def test_success_without_score(self, mock_post, service):
        mock_post.return_value = siteverify_response({'success': True})

        result = service.verify('token')

        assert result.success is True
        assert result.score is None

    @patch('core.captcha_service.requests.post')
    def test_rejected_token(self, mock_post, service):
        mock_post.return_value = siteverify_response({
            'success': False,
            'error-codes': ['invalid-input-response'],
        })

        result = service.verify('token')

        assert result.success is False
        assert result.error_codes == ['invalid-input-response']

    @pytest.mark.parametrize('success', ['true', 1, None])
    @patch('core.captcha_service.requests.post')
    def test_only_boolean_true_is_success(self, mock_post, service, success):
        mock_post.return_value = siteverify_response({'success': success})

        assert service.verify('token').success is False

    @pytest.mark.parametrize('score', ['0.9', True, [0.9], float('nan'), float('inf'), 1.5, -0.1])
    @patch('core.captcha_service.requests.post')
    def test_malformed_score_is_unavailable(self, mock_post, service, score):
        mock_post.return_value = siteverify_response({'success': True, 'score': score})

        with pytest.raises(CaptchaUnavailableError):
            service.verify('token')

    @patch('core.captcha_service.requests.post')
    def test_non_object_payload_is_unavailable(self, mock_post, service):
        mock_post.return_value = siteverify_response(['success'])

        with pytest.raises(CaptchaUnavailableError):
            service.verify('token')

    @patch('core.captcha_service.requests.post')
    def test_non_json_body_is_unavailable(self, mock_post, service):
        response = siteverify_response()
        response.json.side_effect = ValueError('Expecting value')
        mock_post.return_value = response

        with pytest.raises(CaptchaUnavailableError, match='malformed response'):
            service.verify('token')

    @patch('core.captcha_service.requests.post')
    def test_nan_literal_in_body_is_unavailable(self, mock_post, service):
        response = requests.Response()
        response.status_code = 200
        response._content = b'{"success": true, "score": NaN}'
        mock_post.return_value = response

        with pytest.raises(CaptchaUnavailableError, match='out of range'):
            service.verify('token')

    @pytest.mark.parametrize('score', [0, 0.0, 1, 1.0])
    @patch('core.captcha_service.requests.post')
    def test_score_bounds_are_accepted(self, mock_post, service, score):
        mock_post.return_value = siteverify_response({'success': True, 'score': score})

        assert service.verify('token').score == float(score)


class TestCaptchaServiceFailures:
    """Test transport failures, which must never count as a pass."""

    @patch('core.captcha_service.requests.post')
    def test_timeout(self, mock_post, service):
        mock_post.side_effect = requests.exceptions.Timeout()

        with pytest.raises(CaptchaUnavailableError, match='timeout'):
            service.verify('token')

    @patch('core.captcha_service.requests.post')
    def test_connection_error(self, mock_post, service):
        mock_post.side_effect = requests.exceptions.ConnectionError('refused')

        with pytest.raises(CaptchaUnavailableError):
            service.verify('token')

    @pytest.mark.parametrize('status_code', [400, 403, 500, 503])
    @patch('core.captcha_service.requests.post')
    def test_non_200_status(self, mock_post, service, status_code):
        mock_post.return_value = siteverify_response(status_code=status_code)

        with pytest.raises(CaptchaUnavailableError):
            service.verify('token')


class TestErrorMessages:
    """Test error code translation."""

    def test_known_codes(self, service):
        message = service.get_error_message(['invalid-input-response', 'timeout-or-duplicate'])

        assert message == 'CAPTCHA token invalid or expired; CAPTCHA token expired or already used'

    def test_unknown_code(self, service):
        assert service.get_error_message(['surprise']) == 'Unknown error: surprise'

    def test_no_codes(self, service):
        assert service.get_error_message([]) == 'no error codes returned'
