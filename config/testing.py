"""Testing configuration for TruckQR application."""

from .base import Config
import os
import tempfile


class TestingConfig(Config):
    """Testing configuration."""

    # Debug mode
    DEBUG = True
    TESTING = True

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get('TEST_DATABASE_URL') or 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    DB_CONNECT_RETRIES = 1
    DB_CONNECT_RETRY_DELAY = 0

    # Security
    SECRET_KEY = 'test-secret-key'
    ADMIN_PASSWORD = 'test-admin-pass'
    ADMIN_PASSWORD_HASH = None
    WTF_CSRF_ENABLED = False  # Disable CSRF for testing

    # Mail
    MAIL_SERVER = 'localhost'
    MAIL_DEFAULT_SENDER = 'noreply@truckqr.test'
    MAIL_SUPPRESS_SEND = True
    ALERT_EMAIL_TO = 'fleet-ops@truckqr.test'

    # Scheduler
    SCHEDULER_ENABLED = False
    ALERT_TIMEZONE = 'UTC'

    # QR links
    BASE_URL = 'https://trucks.example.com'

    # Caching
    CACHE_TYPE = 'NullCache'

    # Logging
    LOG_LEVEL = 'DEBUG'
    LOG_DIR = os.path.join(tempfile.gettempdir(), 'truckqr-test-logs')

    # Rate limiting
    RATELIMIT_ENABLED = False

    # Session
    SESSION_COOKIE_SECURE = False
