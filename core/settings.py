"""
Django settings for the contact form gateway.

For more information on this file, see
https://docs.djangoproject.com/en/5.2/topics/settings/

For the full list of settings and their values, see
https://docs.djangoproject.com/en/5.2/ref/settings/
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# Load environment variables from .env file
env_file = os.path.join(BASE_DIR, '.env.development')
if os.path.exists(env_file):
    load_dotenv(env_file)
else:
    load_dotenv()  # Try default .env


# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv('SECRET_KEY')
if not SECRET_KEY:
    raise ValueError(
        "SECRET_KEY environment variable is not set. "
        "Please add SECRET_KEY to your .env file. "
        "For development, you can generate one with: "
        "python -c 'from django.core.management.utils import get_random_secret_key; print(get_random_secret_key())'"
    )

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.getenv('DEBUG', 'True') == 'True'

ALLOWED_HOSTS = os.getenv('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')


# Application definition

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',

    # Third-party apps
    'rest_framework',

    # Local apps
    'contact',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'core.urls'

WSGI_APPLICATION = 'core.wsgi.application'


# Database
# Submissions are never persisted, so no database is configured.

DATABASES = {}


# Internationalization
# https://docs.djangoproject.com/en/5.2/topics/i18n/

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.getenv('TIME_ZONE', 'UTC')
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# =============================================================================
# REST FRAMEWORK SETTINGS
# =============================================================================

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.AllowAny',
    ),
    'DEFAULT_RENDERER_CLASSES': (
        'rest_framework.renderers.JSONRenderer',
    ),
    'UNAUTHENTICATED_USER': None,
}


# =============================================================================
# EMAIL SETTINGS
# =============================================================================

EMAIL_BACKEND = os.getenv('EMAIL_BACKEND', 'django.core.mail.backends.console.EmailBackend')
EMAIL_HOST = os.getenv('EMAIL_HOST', 'localhost')
EMAIL_PORT = int(os.getenv('EMAIL_PORT', 587))
EMAIL_USE_TLS = os.getenv('EMAIL_USE_TLS', 'True') == 'True'
EMAIL_HOST_USER = os.getenv('EMAIL_HOST_USER', '')
EMAIL_HOST_PASSWORD = os.getenv('EMAIL_HOST_PASSWORD', '')
DEFAULT_FROM_EMAIL = os.getenv('DEFAULT_FROM_EMAIL', 'noreply@example.com')
EMAIL_TIMEOUT = int(os.getenv('EMAIL_TIMEOUT', 60))


# =============================================================================
# CAPTCHA SETTINGS (Google reCAPTCHA / Cloudflare Turnstile)
# =============================================================================

# Options: 'recaptcha', 'turnstile'
CAPTCHA_PROVIDER = os.getenv('CAPTCHA_PROVIDER', 'recaptcha')
CAPTCHA_SECRET_KEY = os.getenv('CAPTCHA_SECRET_KEY', '')
# Overrides the provider's siteverify URL when set
CAPTCHA_VERIFY_URL = os.getenv('CAPTCHA_VERIFY_URL', '')
CAPTCHA_TIMEOUT = int(os.getenv('CAPTCHA_TIMEOUT', 10))


# =============================================================================
# CONTACT FORM SETTINGS
# =============================================================================

# Recipient for each form category; unknown categories go to the default
CONTACT_DEFAULT_RECIPIENT = os.getenv('CONTACT_DEFAULT_RECIPIENT', 'info@example.com')
CONTACT_CATEGORY_RECIPIENTS = {
    'administration': os.getenv('CONTACT_RECIPIENT_ADMINISTRATION', 'administration@example.com'),
    'human-resources': os.getenv('CONTACT_RECIPIENT_HUMAN_RESOURCES', 'hr@example.com'),
    'information': os.getenv('CONTACT_RECIPIENT_INFORMATION', 'info@example.com'),
    'complains-claims': os.getenv('CONTACT_RECIPIENT_COMPLAINS_CLAIMS', 'management@example.com'),
    'sales': os.getenv('CONTACT_RECIPIENT_SALES', 'sales@example.com'),
    'providers': os.getenv('CONTACT_RECIPIENT_PROVIDERS', 'administration@example.com'),
}

# Static result pages (the only redirect targets)
CONTACT_SUCCESS_PAGE = os.getenv('CONTACT_SUCCESS_PAGE', '/contact_ok.html')
CONTACT_FAILURE_PAGE = os.getenv('CONTACT_FAILURE_PAGE', '/contact_no_ok.html')

CONTACT_EMAIL_SUBJECT = os.getenv('CONTACT_EMAIL_SUBJECT', 'Contact from website')
CONTACT_EMAIL_FROM = os.getenv('CONTACT_EMAIL_FROM', DEFAULT_FROM_EMAIL)

# Spam protection
CONTACT_CAPTCHA_FIELD = os.getenv('CONTACT_CAPTCHA_FIELD', 'g-recaptcha-response')
CONTACT_CAPTCHA_MIN_SCORE = float(os.getenv('CONTACT_CAPTCHA_MIN_SCORE', 0.5))
CONTACT_TIMESTAMP_MIN_AGE = int(os.getenv('CONTACT_TIMESTAMP_MIN_AGE', 1))  # seconds
CONTACT_TIMESTAMP_MAX_AGE = int(os.getenv('CONTACT_TIMESTAMP_MAX_AGE', 86400))  # 24 hours
CONTACT_REJECT_SUSPICIOUS_TIMESTAMP = os.getenv('CONTACT_REJECT_SUSPICIOUS_TIMESTAMP', 'False') == 'True'

# Only enable behind a reverse proxy that sets X-Forwarded-For
CONTACT_TRUST_PROXY_HEADERS = os.getenv('CONTACT_TRUST_PROXY_HEADERS', 'False') == 'True'


# =============================================================================
# LOGGING SETTINGS
# =============================================================================

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_TO_FILE = os.getenv('LOG_TO_FILE', 'False') == 'True'
LOG_FILE_PATH = os.getenv('LOG_FILE_PATH', 'logs/django.log')
SECURITY_LOG_FILE_PATH = os.getenv('SECURITY_LOG_FILE_PATH', 'logs/security.log')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
        'file': {
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': LOG_FILE_PATH,
            'maxBytes': 1024 * 1024 * 10,  # 10MB
            'backupCount': 5,
            'formatter': 'verbose',
        } if LOG_TO_FILE else {
            'class': 'logging.NullHandler',
        },
        'security_file': {
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': SECURITY_LOG_FILE_PATH,
            'maxBytes': 1024 * 1024 * 10,  # 10MB
            'backupCount': 5,
            'formatter': 'verbose',
        } if LOG_TO_FILE else {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['console', 'file'] if LOG_TO_FILE else ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django': {
            'handlers': ['console', 'file'] if LOG_TO_FILE else ['console'],
            'level': os.getenv('DJANGO_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
        # Header injection attempts, honeypot trips, suspicious timestamps
        'contact.security': {
            'handlers': ['security_file'],
            'level': 'INFO',
            'propagate': True,
        },
    },
}


# =============================================================================
# SECURITY SETTINGS (Production)
# =============================================================================

if not DEBUG:
    SECURE_SSL_REDIRECT = os.getenv('SECURE_SSL_REDIRECT', 'True') == 'True'
    SECURE_CONTENT_TYPE_NOSNIFF = True
    X_FRAME_OPTIONS = 'DENY'
    SECURE_HSTS_SECONDS = int(os.getenv('SECURE_HSTS_SECONDS', 31536000))
    SECURE_HSTS_INCLUDE_SUBDOMAINS = os.getenv('SECURE_HSTS_INCLUDE_SUBDOMAINS', 'True') == 'True'
    SECURE_HSTS_PRELOAD = os.getenv('SECURE_HSTS_PRELOAD', 'True') == 'True'
