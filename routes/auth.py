"""
Authentication routes for TutorBridge
Handles registration, login, logout and the current-user endpoints
"""

import logging
from functools import wraps

from flask import Blueprint, g, jsonify, session
from flask_wtf.csrf import generate_csrf

from models.user import UserRole
from services.auth_service import AuthService, SessionManager
from utils.request_helpers import error_response, get_json_data, success_response
from utils.validators import strip_text, validate_password, validate_registration_data

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


# Authentication decorator
def login_required(*roles):
    """Require a logged-in, active user; optionally restrict to the given roles.

    The loaded user is available as g.current_user inside the view.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = SessionManager.get_current_user(session)
            if user is None:
                return error_response('Authentication required', 401)

            if roles and user.role not in roles:
                return error_response(f"Access denied. Requires role: {', '.join(roles)}", 403)

            g.current_user = user
            return f(*args, **kwargs)
        return decorated_function
    return decorator


@auth_bp.route('/api/register', methods=['POST'])
def register():
    """Self-service sign-up for students and tutors"""
    data = get_json_data()

    cleaned, errors = validate_registration_data(data)
    if errors:
        return error_response('Validation failed', 400, errors)

    conflict = AuthService.find_conflict(cleaned['username'], cleaned['email'])
    if conflict:
        return error_response(conflict, 409)

    success, user, message = AuthService.register_user(cleaned)
    if not success:
        return error_response(message, 409 if 'exists' in message else 500)

    SessionManager.create_session(session, user)
    return success_response(message, 201, user=user.to_dict())


@auth_bp.route('/api/login', methods=['POST'])
def login():
    """Log in by username or email"""
    data = get_json_data()
    identifier = strip_text(data.get('username') or data.get('email'))
    password = data.get('password') or ''

    if not identifier or not password:
        return error_response('Username and password are required', 400)
    if not isinstance(identifier, str) or not isinstance(password, str):
        return error_response('Username and password must be text', 400)

    success, user, message = AuthService.authenticate(identifier, password)
    if not success:
        return error_response(message, 401)

    SessionManager.create_session(session, user)
    return success_response(message, user=user.to_dict(),
                            redirect=SessionManager.dashboard_for(user.role))


@auth_bp.route('/api/logout', methods=['POST'])
def logout():
    """Logout handler for every role"""
    username = session.get('username')
    SessionManager.clear_session(session)
    if username:
        logger.info("User %s logged out", username)
    return success_response('You have been logged out successfully')


@auth_bp.route('/api/user')
@login_required()
def current_user():
    """Currently logged-in user"""
    user = g.current_user
    data = user.to_dict()
    if user.is_tutor and user.tutor_profile:
        data['tutor_profile'] = user.tutor_profile.to_dict()
    return jsonify(data)


@auth_bp.route('/api/user/password', methods=['POST'])
@login_required()
def change_password():
    """Change password for the authenticated user"""
    data = get_json_data()
    current_password = data.get('current_password') or ''
    new_password = data.get('new_password') or ''
    confirm_password = data.get('confirm_password')

    if not current_password or not new_password:
        return error_response('Current and new passwords are required', 400)
    if not isinstance(current_password, str):
        return error_response('Current password is incorrect', 400)

    if confirm_password is not None and new_password != confirm_password:
        return error_response('New passwords do not match', 400)

    is_valid, message = validate_password(new_password)
    if not is_valid:
        return error_response(message, 400)

    success, message = AuthService.change_password(g.current_user, current_password, new_password)
    if not success:
        return error_response(message, 400)
    return success_response(message)


@auth_bp.route('/api/csrf-token')
def csrf_token():
    """CSRF token for clients that send mutating requests"""
    return jsonify({'csrf_token': generate_csrf()})


# Context processor to make session info available in templates
@auth_bp.app_context_processor
def inject_user():
    """Inject user information into template context"""
    role = SessionManager.get_current_role(session)
    return {
        'current_user': SessionManager.get_session_info(session),
        'is_authenticated': SessionManager.is_authenticated(session),
        'is_tutor': role == UserRole.TUTOR,
        'is_admin': role == UserRole.ADMIN,
    }
