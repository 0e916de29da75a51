from flask import Blueprint, render_template, request, redirect, url_for, flash
from flask_login import login_user, logout_user, current_user
from truckqr import limiter
from truckqr.utils.logging_config import log_security_event
from truckqr.utils.security import AdminUser, verify_admin_password

auth_bp = Blueprint('auth', __name__)


def _safe_next(target):
    # Only local absolute paths; anything else could redirect off-site
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return url_for('admin.edit')


@auth_bp.route('/login', methods=['GET', 'POST'])
@limiter.limit("5 per minute", methods=['POST'])
def login():
    if current_user.is_authenticated:
        return redirect(url_for('admin.edit'))

    if request.method == 'POST':
        password = (request.form.get('password') or '').strip()

        if not verify_admin_password(password):
            log_security_event('FAILED_ADMIN_LOGIN', ip_address=request.remote_addr)
            flash('Incorrect password', 'error')
            return render_template('admin/login.html'), 401

        login_user(AdminUser())
        log_security_event('ADMIN_LOGIN', ip_address=request.remote_addr)
        return redirect(_safe_next(request.args.get('next')))

    return render_template('admin/login.html')


@auth_bp.route('/logout')
def logout():
    logout_user()
    flash('You have been logged out.', 'info')
    return redirect(url_for('public.index'))
