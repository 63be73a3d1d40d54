"""Sign-in and sign-out routes."""
import logging

from flask import render_template, request, redirect, url_for, flash
from flask_login import login_user, logout_user, login_required, current_user

from . import auth_bp
from .models import User
from .repositories import UserRepository
from core.utils.api_helpers import RateLimiter

logger = logging.getLogger('ledger.core.auth.routes')

_user_repo = UserRepository()
_auth_limiter = RateLimiter()


def _safe_next(next_page):
    """Only allow same-site relative redirects after login."""
    if next_page and next_page.startswith('/') and not next_page.startswith('//'):
        return next_page
    return None


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Login page and form handler."""
    if current_user.is_authenticated:
        return redirect(url_for('budgets.index'))

    if request.method == 'POST':
        # Rate limit: 10 attempts per 5 minutes per IP
        allowed, retry_after = _auth_limiter.is_allowed(
            f'login:{request.remote_addr}', max_requests=10, window_seconds=300)
        if not allowed:
            flash(f'Too many login attempts. Try again in {retry_after} seconds.', 'error')
            return render_template('core/login.html'), 429

        email = request.form.get('email', '').strip()
        password = request.form.get('password', '')

        if not email or not password:
            flash('Please enter both email and password.', 'error')
            return render_template('core/login.html')

        user_data = _user_repo.authenticate(email, password)
        if user_data:
            user = User(user_data)
            login_user(user, remember=request.form.get('remember') == 'on')
            _user_repo.update_last_login(user.id)
            logger.info(f'User {user.id} logged in')
            return redirect(_safe_next(request.args.get('next')) or url_for('budgets.index'))

        logger.warning(f'Failed login attempt for {email}')
        flash('Invalid email or password.', 'error')

    return render_template('core/login.html')


@auth_bp.route('/logout')
@login_required
def logout():
    """Logout current user."""
    logger.info(f'User {current_user.id} logged out')
    logout_user()
    flash('You have been logged out.', 'info')
    return redirect(url_for('auth.login'))
