"""Security utilities for TruckQR application."""

import hmac
from flask import current_app, jsonify, redirect, request, url_for, flash
from flask_login import UserMixin
from werkzeug.security import check_password_hash

ADMIN_ID = 'admin'


class AdminUser(UserMixin):
    """The single operator account behind the shared admin password."""

    def __init__(self):
        self.id = ADMIN_ID

    @classmethod
    def get(cls, user_id):
        return cls() if user_id == ADMIN_ID else None


def verify_admin_password(candidate):
    """Check a login attempt against the configured hash or plain password."""
    candidate = candidate or ''
    password_hash = current_app.config.get('ADMIN_PASSWORD_HASH')
    if password_hash:
        return check_password_hash(password_hash, candidate)

    expected = current_app.config.get('ADMIN_PASSWORD') or ''
    if not expected:
        return False
    return hmac.compare_digest(candidate.encode(), expected.encode())


def handle_unauthorized():
    """JSON 401 for API calls, login redirect for pages."""
    if request.path.startswith('/api/'):
        return jsonify({'error': 'Unauthorized', 'message': 'Authentication required'}), 401
    flash('Please log in to access the admin panel.', 'error')
    return redirect(url_for('auth.login', next=request.path))
