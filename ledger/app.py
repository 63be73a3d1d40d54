import sys
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from datetime import timedelta

from flask import Flask, render_template, request, jsonify, redirect, url_for

# Structured logging
from core.utils.logging_config import setup_logging, get_logger
logger = setup_logging(level=os.environ.get('LOG_LEVEL', 'INFO'))
app_logger = get_logger('ledger.app')
app_logger.info('Ledger app module loading...')
from flask_compress import Compress
from flask_login import LoginManager, login_required
from core.auth.models import User
from core.auth.repositories import UserRepository
from core.utils.api_helpers import wants_json
from database import init_db, ping_db

_user_repo = UserRepository()


app = Flask(__name__)

# Secret key: required in production, dev fallback only when FLASK_DEBUG=true
_secret_key = os.environ.get('FLASK_SECRET_KEY', os.environ.get('SECRET_KEY'))
if not _secret_key:
    if os.environ.get('FLASK_DEBUG', 'false').lower() == 'true':
        _secret_key = 'dev-secret-key-for-local-only'
        app_logger.warning('Using development secret key, set FLASK_SECRET_KEY for production')
    else:
        raise RuntimeError('FLASK_SECRET_KEY environment variable is required')
app.secret_key = _secret_key

compress = Compress()
compress.init_app(app)

login_manager = LoginManager()
login_manager.init_app(app)
login_manager.login_view = 'auth.login'
login_manager.login_message = 'Please log in to access this page.'

app.config['REMEMBER_COOKIE_DURATION'] = timedelta(days=30)
app.config['REMEMBER_COOKIE_SECURE'] = True
app.config['REMEMBER_COOKIE_HTTPONLY'] = True
app.config['REMEMBER_COOKIE_SAMESITE'] = 'Lax'

app.config['SESSION_COOKIE_SECURE'] = True
app.config['SESSION_COOKIE_HTTPONLY'] = True
app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

# ============== Blueprint Registrations ==============

from core.auth import auth_bp
app.register_blueprint(auth_bp)

from budgets import budgets_bp, init_budgets
app.register_blueprint(budgets_bp, url_prefix='/budgets')
init_budgets(app)

app_logger.info(f'Ledger startup complete, {len(app.url_map._rules)} routes registered')

# ============== Schema ==============

if not os.environ.get('TESTING'):
    try:
        init_db()
    except Exception as e:
        app_logger.error(f'Database initialization failed: {e}')

# ============== Global Error Handlers ==============

@app.errorhandler(404)
def handle_404(e):
    if wants_json():
        return jsonify({'success': False, 'error': 'Not found'}), 404
    return render_template('error.html', message='The page you requested does not exist.'), 404


@app.errorhandler(405)
def handle_405(e):
    return jsonify({'success': False, 'error': 'Method not allowed'}), 405


@app.errorhandler(500)
def handle_500(e):
    app_logger.exception('Unhandled 500 error')
    if wants_json():
        return jsonify({'success': False, 'error': 'An internal error occurred'}), 500
    return render_template('error.html', message='An internal error occurred.'), 500


# ============== Flask-Login ==============

@login_manager.user_loader
def load_user(user_id):
    """Load user by ID for Flask-Login."""
    user_data = _user_repo.get_by_id(int(user_id))
    return User(user_data) if user_data else None


# ============== Health Check ==============

@app.route('/health')
def health_check():
    """Health check endpoint for orchestrator probes. Only checks DB connectivity."""
    db_ok = ping_db()
    status = 'healthy' if db_ok else 'unhealthy'
    return jsonify({
        'status': status,
        'checks': {'database': db_ok},
        'service': 'ledger',
    }), 200 if db_ok else 503


# ============== Main Routes ==============

@app.route('/')
@login_required
def index():
    """The budget overview is the landing page."""
    return redirect(url_for('budgets.index'))


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5001))
    debug = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'
    app.run(debug=debug, port=port)
