"""
Settings for the pytest suite.

Supplies deterministic values before importing the regular settings.
"""
import os

os.environ.setdefault('SECRET_KEY', 'test-secret-key-not-for-production')
os.environ.setdefault('CAPTCHA_SECRET_KEY', 'test-captcha-secret')
os.environ.setdefault('LOG_TO_FILE', 'False')

from core.settings import *  # noqa: E402,F401,F403

DEBUG = False
SECURE_SSL_REDIRECT = False
ALLOWED_HOSTS = ['testserver', 'localhost']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
DEFAULT_FROM_EMAIL = 'noreply@example.com'
CONTACT_EMAIL_FROM = 'noreply@example.com'
CAPTCHA_PROVIDER = 'recaptcha'
CAPTCHA_VERIFY_URL = 'https://www.google.com/recaptcha/api/siteverify'

CONTACT_DEFAULT_RECIPIENT = 'info@example.com'
CONTACT_CATEGORY_RECIPIENTS = {
    'administration': 'administration@example.com',
    'human-resources': 'hr@example.com',
    'information': 'info@example.com',
    'complains-claims': 'management@example.com',
    'sales': 'sales@example.com',
    'providers': 'administration@example.com',
}
CONTACT_SUCCESS_PAGE = '/contact_ok.html'
CONTACT_FAILURE_PAGE = '/contact_no_ok.html'
CONTACT_EMAIL_SUBJECT = 'Contact from website'
CONTACT_REJECT_SUSPICIOUS_TIMESTAMP = False
CONTACT_TRUST_PROXY_HEADERS = False
