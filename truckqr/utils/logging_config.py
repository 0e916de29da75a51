"""Logging configuration for TruckQR application.

Three destinations besides the console:

* ``app.log``: everything at the configured level.
* ``security.log``: JSON lines for admin logins (``truckqr.security``).
* ``alerts.log``: JSON lines, one per expiration sweep (``truckqr.alerts``).

Handled errors from the error pages go to ``error.log`` via ``truckqr.errors``.
"""

import logging
import logging.config
import os
from pythonjsonlogger import jsonlogger

SECURITY_LOGGER = 'truckqr.security'
ALERTS_LOGGER = 'truckqr.alerts'
ERRORS_LOGGER = 'truckqr.errors'

LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3

QUIET_LOGGERS = ('werkzeug', 'sqlalchemy.engine', 'apscheduler', 'PIL')


def _rotating(log_dir, filename, formatter, level='INFO'):
    return {
        'class': 'logging.handlers.RotatingFileHandler',
        'filename': os.path.join(log_dir, filename),
        'formatter': formatter,
        'level': level,
        'maxBytes': LOG_MAX_BYTES,
        'backupCount': LOG_BACKUPS,
        'encoding': 'utf-8',
    }


def _audit_logger(handler):
    return {'handlers': [handler], 'level': 'INFO', 'propagate': False}


def setup_logging(log_level='INFO', log_dir='logs'):
    """Install console, rotating file and JSON audit handlers."""
    os.makedirs(log_dir, exist_ok=True)

    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'console': {
                'format': '%(asctime)s %(levelname)-7s %(name)s: %(message)s',
                'datefmt': '%H:%M:%S',
            },
            'file': {
                'format': '%(asctime)s [%(levelname)s] %(name)s:%(lineno)d %(message)s',
            },
            'json': {
                '()': jsonlogger.JsonFormatter,
                'format': '%(asctime)s %(levelname)s %(message)s',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'stream': 'ext://sys.stdout',
                'formatter': 'console',
                'level': log_level,
            },
            'app_file': _rotating(log_dir, 'app.log', 'file', log_level),
            'error_file': _rotating(log_dir, 'error.log', 'file', 'ERROR'),
            'security_file': _rotating(log_dir, 'security.log', 'json'),
            'alerts_file': _rotating(log_dir, 'alerts.log', 'json'),
        },
        'loggers': {
            SECURITY_LOGGER: _audit_logger('security_file'),
            ALERTS_LOGGER: _audit_logger('alerts_file'),
            ERRORS_LOGGER: {
                'handlers': ['error_file', 'console'],
                'level': 'INFO',
                'propagate': False,
            },
        },
        'root': {
            'handlers': ['console', 'app_file'],
            'level': log_level,
        },
    })

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name):
    return logging.getLogger(name)


def log_security_event(event_type, ip_address=None, details=None):
    """Record an admin authentication event in the security log."""
    get_logger(SECURITY_LOGGER).info(event_type, extra={
        'event_type': event_type,
        'ip_address': ip_address,
        'details': details,
    })


def log_sweep_result(today, days_before, result):
    """One JSON line per expiration sweep, whatever its outcome."""
    get_logger(ALERTS_LOGGER).info('expiration_sweep', extra={
        'date': today.isoformat(),
        'days_before': days_before,
        'due': [f'{doc.plate}/{doc.id}' for doc in result.documents],
        'notified': result.notified,
        'skipped_reason': result.skipped_reason,
    })
