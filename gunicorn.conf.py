"""Gunicorn configuration file for TruckQR application.

Run with: gunicorn -c gunicorn.conf.py "truckqr:create_app('production')"
"""

import os

# Server socket
bind = f"0.0.0.0:{os.environ.get('PORT', 5000)}"
backlog = 2048

# Worker processes
# A single worker keeps one expiration sweep scheduler per deployment;
# concurrency comes from threads instead.
workers = 1
worker_class = "gthread"
threads = int(os.environ.get('GUNICORN_THREADS', 8))
max_requests = 1000  # Restart workers after this many requests
max_requests_jitter = 100  # Randomize max_requests by this amount
timeout = 120  # Request timeout in seconds
keepalive = 5  # Number of seconds to keep connections alive

# Security
limit_request_line = 4094  # Maximum size of HTTP request line
limit_request_fields = 100  # Maximum number of HTTP headers
limit_request_field_size = 8190  # Maximum size of HTTP headers

# Logging
accesslog = "-"
errorlog = "-"
loglevel = "info"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = "truckqr"

# Server mechanics
preload_app = False
daemon = False


def post_worker_init(worker):
    """Start the daily expiration sweep inside the worker that serves requests."""
    from truckqr.utils.reminder_scheduler import ReminderScheduler

    worker.reminder_scheduler = ReminderScheduler(worker.wsgi)
    worker.reminder_scheduler.start()


def worker_exit(server, worker):
    scheduler = getattr(worker, 'reminder_scheduler', None)
    if scheduler is not None:
        scheduler.stop()
