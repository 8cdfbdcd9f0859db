"""
User and profile routes for TutorBridge
"""

from flask import Blueprint, g, jsonify

from database import db
from models.user import UserRole
from routes.auth import login_required
from services.admin_service import AdminService
from services.auth_service import AuthService
from utils.db_helpers import safe_update_and_commit
from utils.request_helpers import error_response, get_json_data, parse_id, success_response
from utils.validators import strip_text, validate_email, validate_name

users_bp = Blueprint('users', __name__)


@users_bp.route('/api/users/<user_id>')
def get_user(user_id):
    """Public view of a user"""
    parsed_id = parse_id(user_id)
    if parsed_id is None:
        return error_response('Invalid user id', 400)

    user = AuthService.get_user(parsed_id)
    if user is None:
        return error_response('User not found', 404)
    return jsonify(user.to_public_dict())


@users_bp.route('/api/users', methods=['POST'])
@login_required(UserRole.ADMIN)
def create_user():
    """Admin creates an account with any role"""
    success, result, message = AdminService.create_user(get_json_data())
    if not success:
        if isinstance(result, dict):
            return error_response(message, 400, result)
        return error_response(message, 409)
    return success_response('User created successfully', 201, user=result.to_dict())


@users_bp.route('/api/profile')
@login_required()
def get_profile():
    user = g.current_user
    profile = user.tutor_profile.to_dict() if user.is_tutor and user.tutor_profile else None
    return jsonify({'user': user.to_dict(), 'profile': profile})


@users_bp.route('/api/profile', methods=['PUT'])
@login_required()
def update_profile():
    """Update own name, email, bio and picture; password and role are ignored"""
    user = g.current_user
    data = get_json_data()
    errors = {}

    if 'name' in data:
        name = strip_text(data.get('name'))
        is_valid, message = validate_name(name)
        if is_valid:
            user.name = name
        else:
            errors['name'] = message

    if 'email' in data:
        email = strip_text(data.get('email'), lower=True)
        is_valid, message = validate_email(email)
        if not is_valid:
            errors['email'] = message
        elif AuthService.find_conflict(email=email, exclude_id=user.id):
            return error_response('Email already registered', 409)
        else:
            user.email = email

    for field in ('bio', 'profile_image'):
        if field in data:
            value = data.get(field)
            setattr(user, field, (str(value).strip() or None) if value is not None else None)

    if errors:
        db.session.rollback()
        return error_response('Validation failed', 400, errors)

    success, message = safe_update_and_commit()
    if not success:
        return error_response(message, 409 if 'Duplicate' in message else 500)
    return success_response('Profile updated successfully', user=user.to_dict())
