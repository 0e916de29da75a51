"""Base configuration for TruckQR application."""

import os
from datetime import timedelta


def database_url(default=None):
    """Read DATABASE_URL, normalizing the legacy ``postgres://`` scheme."""
    url = os.environ.get('DATABASE_URL') or default
    if url and url.startswith('postgres://'):
        url = 'postgresql://' + url[len('postgres://'):]
    return url


def env_flag(name, default='false'):
    return os.environ.get(name, default).lower() == 'true'


class Config:
    """Base configuration class."""

    # Security
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASS', 'admin-1234')
    ADMIN_PASSWORD_HASH = os.environ.get('ADMIN_PASS_HASH')

    # Database
    SQLALCHEMY_DATABASE_URI = database_url('sqlite:///truckqr.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }
    DB_CONNECT_RETRIES = int(os.environ.get('DB_CONNECT_RETRIES', 10))
    DB_CONNECT_RETRY_DELAY = float(os.environ.get('DB_CONNECT_RETRY_DELAY', 2))

    # Session management
    PERMANENT_SESSION_LIFETIME = timedelta(hours=12)
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # File uploads
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB per request
    MAX_UPLOAD_FILES = 50
    ALLOWED_IMAGE_EXTENSIONS = {'jpg', 'jpeg', 'png', 'webp', 'gif'}
    PHOTO_CACHE_SECONDS = 86400

    # Security headers
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = None

    # Mail configuration
    MAIL_SERVER = os.environ.get('MAIL_SERVER') or os.environ.get('SMTP_HOST')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 587))
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS', 'True').lower() == 'true'
    MAIL_USE_SSL = env_flag('MAIL_USE_SSL')
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER') or MAIL_USERNAME or 'noreply@truckqr.local'
    ALERT_EMAIL_TO = os.environ.get('ALERT_EMAIL_TO')

    # Expiration alerts
    ALERT_TIMEZONE = os.environ.get('TZ', 'America/Costa_Rica')
    ALERT_HOUR = int(os.environ.get('ALERT_HOUR', 9))
    ALERT_MINUTE = int(os.environ.get('ALERT_MINUTE', 0))
    ALERT_DAYS_BEFORE = 22
    EXPIRING_SOON_DAYS = 30
    SCHEDULER_ENABLED = not env_flag('DISABLE_CRON')

    # Public reports
    REPORT_MIN_LENGTH = 3
    REPORTS_LIMIT = 500

    # QR links
    BASE_URL = os.environ.get('BASE_URL')
    PUBLIC_BASE_URL = os.environ.get('PUBLIC_BASE_URL')

    # Caching
    CACHE_TYPE = os.environ.get('CACHE_TYPE', 'SimpleCache')
    CACHE_DEFAULT_TIMEOUT = 3600

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')

    # Rate limiting
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_HEADERS_ENABLED = True
