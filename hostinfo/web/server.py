#!/usr/bin/env python3
"""
================================================================================
WEB SERVER - Host Information Web UI with Authentication
================================================================================

Flask-based web interface reporting host system, process and environment
information to signed-in users.

Key Features:
    - Server-rendered pages (Jinja2 templates)
    - Multi-user authentication with bcrypt password hashing
    - Role-based access for administrative actions
    - Session management with secure cookies
    - CSRF protection for all state-changing JSON operations
    - Rate limiting on login, registration and password change only;
      read-only pages and snapshot endpoints are not limited
    - camelCase JSON API with enums serialized by name
    - Audit logging for security-relevant actions

Pages:
    GET  /                    - Redirect to System/Information
    GET  /System/Information  - OS, process and environment snapshots
    GET  /login, POST /login  - Sign in (rate limited)
    GET  /logout              - Sign out
    GET  /register, POST      - Create an account (first account is Administrator)

API Endpoints:
    GET  /api/csrf-token              - CSRF token for the current session
    POST /api/auth/change-password    - Password update
    GET  /api/v1/system/environment   - SystemEnvironment snapshot
    GET  /api/v1/system/os            - RuntimeInformation snapshot
    GET  /api/v1/system/process       - ProcessInformation snapshot
    GET  /api/v1/system/version       - Application version
    POST /api/v1/system/shutdown      - Stop the application (Administrator)

Error Handling:
    RetrievalError from the system service is not caught here; it reaches
    Flask's default error handling (HTTP 500).

Usage:
    python -m hostinfo.web.server
    python start_web_ui.py

    Access at: https://localhost:5000

Last Modified: October 2026
================================================================================
"""

import secrets
import time as _time
from datetime import timedelta
from functools import wraps
from urllib.parse import urlparse

from flask import (
    Flask, render_template, request, jsonify, session, redirect, url_for, g,
    has_request_context,
)
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from hostinfo.core.database import ApplicationDatabase
from hostinfo.core.exceptions import InvalidCredentialsError, NotFoundError, UserExistsError
from hostinfo.core.identity import IdentityStore
from hostinfo.core.models import ChangePasswordRequest
from hostinfo.core.system_service import SystemService
from hostinfo.utils.config import load_config, resolve_connection
from hostinfo.utils.constants import (
    ADMINISTRATOR_ROLE,
    API_RATE_LIMIT,
    CERT_DIR,
    CSRF_TOKEN_ROTATION_INTERVAL,
    LOGIN_RATE_LIMIT,
    SESSION_COOKIE_HTTPONLY,
    SESSION_COOKIE_SAMESITE,
    STATIC_DIR,
    TEMPLATE_DIR,
)
from hostinfo.utils.json_options import CamelCaseJSONProvider
from hostinfo.utils.logger import logger, setup_audit_logging, setup_logging
from hostinfo.web.pages import SystemInformationPage

CONFIG = load_config()
WEB_CONFIG = CONFIG['web']
IDENTITY_CONFIG = CONFIG['identity']

audit_logger = setup_audit_logging()


def audit_log(action, details='', user=None):
    """Log security-sensitive operations"""
    if has_request_context():
        ip = request.remote_addr or 'unknown'
        user = user or session.get('username', 'anonymous')
    else:
        ip = 'local'
        user = user or 'system'
    audit_logger.info('', extra={'action': action, 'details': details, 'user': user, 'ip': ip})


# Create Flask app
app = Flask(__name__,
            template_folder=str(TEMPLATE_DIR),
            static_folder=str(STATIC_DIR))
app.json = CamelCaseJSONProvider(app)
app.config['SECRET_KEY'] = secrets.token_hex(32)

# Session configuration
app.config['SESSION_COOKIE_SECURE'] = bool(WEB_CONFIG['secure_cookies'])
app.config['SESSION_COOKIE_HTTPONLY'] = SESSION_COOKIE_HTTPONLY
app.config['SESSION_COOKIE_SAMESITE'] = SESSION_COOKIE_SAMESITE
app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(hours=WEB_CONFIG['session_lifetime_hours'])
app.config['RATELIMIT_ENABLED'] = bool(WEB_CONFIG['rate_limit_enabled'])

# Initialize rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    app=app,
    storage_uri="memory://"
)

# Services
system_service = SystemService()
database = ApplicationDatabase(resolve_connection(CONFIG))
identity_store = IdentityStore(database, hash_rounds=IDENTITY_CONFIG['bcrypt_rounds'])

# Initialize DB on module load
database.ensure_schema()

# ====================================================================================
# SECURITY HEADERS & CSP
# ====================================================================================

@app.before_request
def generate_nonce():
    """Generate a nonce for CSP and rotate CSRF token if needed"""
    g.csp_nonce = secrets.token_hex(16)

    # Rotate CSRF token if it's too old (for logged-in users)
    if 'username' in session and 'csrf_created_at' in session:
        age = _time.time() - session['csrf_created_at']
        if age > CSRF_TOKEN_ROTATION_INTERVAL:
            session['csrf_token'] = secrets.token_hex(32)
            session['csrf_created_at'] = _time.time()
            audit_log('CSRF_TOKEN_ROTATED', f'Token rotated after {int(age)} seconds')


@app.context_processor
def inject_template_globals():
    """Inject nonce, CSRF token and current user into templates"""
    return dict(
        csp_nonce=getattr(g, 'csp_nonce', ''),
        csrf_token=generate_csrf_token,
        current_user=session.get('username'),
    )


@app.after_request
def add_security_headers(response):
    """Add security headers to response"""
    nonce = getattr(g, 'csp_nonce', '')

    csp = (
        "default-src 'self'; "
        f"script-src 'self' 'nonce-{nonce}'; "
        "style-src 'self'; "
        "img-src 'self' data:; "
        "connect-src 'self'; "
        "frame-ancestors 'none'; "
        "form-action 'self';"
    )
    response.headers['Content-Security-Policy'] = csp
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    if app.config['SESSION_COOKIE_SECURE']:
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
    return response

# ==========================================
# CSRF & ACCESS CONTROL
# ==========================================

def generate_csrf_token():
    """Generate CSRF token for request validation"""
    if 'csrf_token' not in session:
        session['csrf_token'] = secrets.token_hex(32)
        session['csrf_created_at'] = _time.time()
    return session['csrf_token']


def validate_csrf_token(token):
    """Validate CSRF token"""
    expected = session.get('csrf_token')
    return bool(token and expected) and secrets.compare_digest(token, expected)


def _wants_json():
    return request.is_json or request.path.startswith('/api/')


def login_required(f):
    """Decorator to require login for routes"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'username' not in session:
            if _wants_json():
                return jsonify({'error': 'Authentication required'}), 401
            return redirect(url_for('login', next=request.path))
        return f(*args, **kwargs)
    return decorated_function


def web_security_required(f):
    """Decorator for state-changing JSON requests (CSRF + Origin check)"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'username' not in session:
            return jsonify({'error': 'Authentication required'}), 401

        # Check origin (same-origin only)
        origin = request.headers.get('Origin')
        host = request.headers.get('Host')
        if origin and host and urlparse(origin).netloc != host:
            return jsonify({'error': 'Cross-origin requests not allowed'}), 403

        if not validate_csrf_token(request.headers.get('X-CSRF-Token')):
            return jsonify({'error': 'Invalid CSRF token'}), 403

        return f(*args, **kwargs)
    return decorated_function


def role_required(role):
    """Decorator requiring the signed-in user to hold role"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = identity_store.find_user(session.get('username'))
            if user is None or not user.is_in_role(role):
                audit_log('ACCESS_DENIED', f'{request.method} {request.path} requires {role}')
                return jsonify({'error': f'{role} role required'}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def _safe_next(target):
    """Only allow local redirect targets"""
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return url_for('system_information')


def _request_fields(*names):
    """
    Read text fields from a JSON object body or form data.

    Returns:
        dict of name -> str ('' when absent), or None when the body is not a
        JSON object or a field holds a non-string value
    """
    data = request.get_json(silent=True) if request.is_json else request.form
    if data is None and not request.is_json:
        data = {}
    if not hasattr(data, 'get'):
        return None
    fields = {}
    for name in names:
        value = data.get(name)
        if value is None:
            value = ''
        elif not isinstance(value, str):
            return None
        fields[name] = value
    return fields


def _invalid_body():
    return jsonify({'success': False, 'error': 'Invalid request body'}), 400


def _sign_in(user):
    # Regenerate session to prevent session fixation attacks
    session.clear()
    session['username'] = user.user_name
    session['csrf_token'] = secrets.token_hex(32)
    session['csrf_created_at'] = _time.time()
    session.permanent = True

# ==========================================
# PAGES
# ==========================================

@app.route('/')
def index():
    return redirect(url_for('system_information'))


@app.route('/System/Information')
@login_required
def system_information():
    """System information page"""
    view = SystemInformationPage(system_service).handle_view()
    return render_template('system_information.html', model=view)

# ==========================================
# AUTHENTICATION ROUTES
# ==========================================

@app.route('/login', methods=['GET', 'POST'])
@limiter.limit(LOGIN_RATE_LIMIT)
def login():
    """Login page with rate limiting"""
    if identity_store.user_count() == 0:
        return redirect(url_for('register'))

    if request.method == 'POST':
        fields = _request_fields('username', 'password')
        if fields is None:
            audit_log('LOGIN_FAILED', 'Malformed request body')
            return _invalid_body()
        username = fields['username'].strip()
        password = fields['password']

        if identity_store.validate_credentials(username, password):
            user = identity_store.find_user(username)
            _sign_in(user)
            audit_log('LOGIN_SUCCESS', f'User {user.user_name} logged in', user.user_name)
            logger.info(f"User {user.user_name} logged in")

            if request.is_json:
                return jsonify({'success': True, 'message': 'Login successful'})
            return redirect(_safe_next(request.args.get('next')))

        audit_log('LOGIN_FAILED', 'Invalid credentials', username or 'anonymous')
        if request.is_json:
            return jsonify({'success': False, 'error': 'Invalid credentials'}), 401
        return render_template('login.html', error='Invalid credentials'), 401

    if 'username' in session:
        return redirect(url_for('system_information'))

    return render_template('login.html')


@app.route('/logout')
def logout():
    """Logout"""
    username = session.get('username')
    session.clear()
    if username:
        audit_log('LOGOUT', f'User {username} logged out', username)
    return redirect(url_for('login'))


def _validate_registration(username, password, confirm_password):
    errors = []
    if len(username) < IDENTITY_CONFIG['min_username_length']:
        errors.append(f"Username must be at least {IDENTITY_CONFIG['min_username_length']} characters")
    if len(password) < IDENTITY_CONFIG['min_password_length']:
        errors.append(f"Password must be at least {IDENTITY_CONFIG['min_password_length']} characters")
    if password != confirm_password:
        errors.append('Passwords do not match')
    return errors


@app.route('/register', methods=['GET', 'POST'])
@limiter.limit(API_RATE_LIMIT, methods=['POST'])
def register():
    """Account registration; the first account becomes Administrator"""
    first_user = identity_store.user_count() == 0
    if not first_user and not WEB_CONFIG['allow_registration']:
        return redirect(url_for('login'))

    if request.method == 'POST':
        fields = _request_fields('username', 'password', 'confirm_password', 'confirmPassword', 'email')
        if fields is None:
            return _invalid_body()
        username = fields['username'].strip()
        password = fields['password']
        confirm_password = fields['confirm_password'] or fields['confirmPassword']
        email = fields['email'].strip() or None

        errors = _validate_registration(username, password, confirm_password)
        user = None
        if not errors:
            try:
                user = identity_store.create_user(username, password, email=email,
                                                  first_user_roles=(ADMINISTRATOR_ROLE,))
            except UserExistsError:
                errors.append('Username is already taken')

        if errors:
            if request.is_json:
                return jsonify({'success': False, 'errors': errors}), 400
            return render_template('register.html', errors=errors, first_user=first_user), 400

        audit_log('USER_REGISTERED', f'User {user.user_name} registered', user.user_name)
        _sign_in(user)

        if request.is_json:
            return jsonify({'success': True, 'message': 'Account created successfully',
                            'redirect': url_for('system_information')})
        return redirect(url_for('system_information'))

    return render_template('register.html', first_user=first_user)


@app.route('/api/csrf-token', methods=['GET'])
@login_required
def get_csrf_token():
    """Get CSRF token for API requests"""
    return jsonify({'csrf_token': generate_csrf_token()})


@app.route('/api/auth/change-password', methods=['POST'])
@limiter.limit(API_RATE_LIMIT)
@login_required
@web_security_required
def change_password():
    """Change user password"""
    data = request.get_json(silent=True)
    try:
        payload = app.json.options.from_jsonable(data or {}, ChangePasswordRequest)
    except TypeError:
        return jsonify({'error': 'Invalid request body'}), 400
    if not isinstance(payload.current_password, str) or not isinstance(payload.new_password, str):
        return jsonify({'error': 'Invalid request body'}), 400

    if not payload.current_password or not payload.new_password:
        return jsonify({'error': 'Missing required fields'}), 400
    if len(payload.new_password) < IDENTITY_CONFIG['min_password_length']:
        return jsonify({'error': f"Password must be at least {IDENTITY_CONFIG['min_password_length']} characters"}), 400

    username = session['username']
    try:
        identity_store.change_password(username, payload.current_password, payload.new_password)
    except NotFoundError:
        session.clear()
        return jsonify({'error': 'User not found'}), 404
    except InvalidCredentialsError:
        audit_log('PASSWORD_CHANGE_FAILED', 'Current password incorrect', username)
        return jsonify({'error': 'Current password is incorrect'}), 401

    audit_log('PASSWORD_CHANGED', f'User {username} changed password', username)
    return jsonify({'success': True, 'message': 'Password changed successfully'})

# ==========================================
# SYSTEM API
# ==========================================

@app.route('/api/v1/system/environment', methods=['GET'])
@login_required
def api_get_environment():
    """Get the operating system environment information"""
    return jsonify(system_service.get_environment())


@app.route('/api/v1/system/os', methods=['GET'])
@login_required
def api_get_os_information():
    """Get the operating system information"""
    return jsonify(system_service.get_os_information())


@app.route('/api/v1/system/process', methods=['GET'])
@login_required
def api_get_process_information():
    """Get the application process information"""
    return jsonify(system_service.get_process_information())


@app.route('/api/v1/system/version', methods=['GET'])
@login_required
def api_get_version():
    """Get the application version number"""
    return jsonify(system_service.get_version())


@app.route('/api/v1/system/shutdown', methods=['POST'])
@login_required
@web_security_required
@role_required(ADMINISTRATOR_ROLE)
def api_shutdown():
    """Shut down the application host"""
    audit_log('SHUTDOWN', 'Application shutdown requested')
    system_service.shutdown_application()
    return jsonify({'success': True, 'message': 'Application is stopping'}), 202


def main():
    """Start the web server"""
    setup_logging('web', CONFIG['logging']['level'])

    logger.info("=" * 60)
    logger.info("hostinfo - Web UI Server")
    logger.info("=" * 60)
    logger.info(f"Database: {database.connection} (integrity: {database.integrity_check()})")

    if identity_store.user_count() == 0:
        logger.info("FIRST TIME SETUP: navigate to the web UI to create the administrator account")

    host = WEB_CONFIG['host']
    port = int(WEB_CONFIG['port'])

    if WEB_CONFIG['https']:
        from hostinfo.web.certificates import generate_self_signed_cert
        cert_file, key_file = generate_self_signed_cert(CERT_DIR)
        logger.info(f"Starting HTTPS server at https://localhost:{port}")
        app.run(host=host, port=port, ssl_context=(cert_file, key_file), debug=False)
    else:
        logger.warning(f"Starting HTTP server at http://localhost:{port} (HTTPS is recommended)")
        app.run(host=host, port=port, debug=False)


if __name__ == '__main__':
    main()
