"""
Admin service for TutorBridge
Business logic for the admin portal: user supervision, approval and listings
"""

import logging

from sqlalchemy import or_

from models.academic import Course
from models.booking import Booking
from models.user import User, UserRole
from services.auth_service import AuthService
from services.notification_service import NotificationService, ActivityService
from utils.db_helpers import like_pattern, safe_update_and_commit
from utils.validators import (
    strip_text, validate_email, validate_name, validate_password, validate_registration_data,
    validate_role, validate_username,
)

logger = logging.getLogger(__name__)


class AdminService:
    """Admin service class"""

    @staticmethod
    def users_query(role=None, search=None):
        """Users, newest first, optionally filtered by role and a name/username/email search"""
        query = User.query
        if role:
            query = query.filter(User.role == role)
        if search:
            pattern = like_pattern(search.strip())
            query = query.filter(or_(
                User.name.ilike(pattern, escape='\\'),
                User.username.ilike(pattern, escape='\\'),
                User.email.ilike(pattern, escape='\\'),
            ))
        return query.order_by(User.created_at.desc(), User.id.desc())

    @staticmethod
    def get_users_by_role(role):
        return User.query.filter_by(role=role).order_by(User.name).all()

    @staticmethod
    def courses_query():
        return Course.query.order_by(Course.created_at.desc(), Course.id.desc())

    @staticmethod
    def bookings_query(status=None):
        query = Booking.query
        if status:
            query = query.filter(Booking.status == status)
        return query.order_by(Booking.booking_time.desc(), Booking.id.desc())

    @staticmethod
    def create_user(data):
        """Admin-created account with any role"""
        cleaned, errors = validate_registration_data(data, allowed_roles=UserRole.ALL)
        if errors:
            return False, errors, "Validation failed"

        conflict = AuthService.find_conflict(cleaned['username'], cleaned['email'])
        if conflict:
            return False, None, conflict

        # Accounts made by an admin start approved
        cleaned['is_approved'] = bool(data.get('is_approved', True))
        return AuthService.register_user(cleaned)

    @staticmethod
    def update_user(user, data):
        """Update any user field; returns (success, user or errors, message)"""
        errors = {}
        updates = {}

        if 'username' in data:
            username = strip_text(data.get('username'))
            is_valid, message = validate_username(username)
            if is_valid:
                updates['username'] = username
            else:
                errors['username'] = message

        if 'email' in data:
            email = strip_text(data.get('email'), lower=True)
            is_valid, message = validate_email(email)
            if is_valid:
                updates['email'] = email
            else:
                errors['email'] = message

        if 'name' in data:
            name = strip_text(data.get('name'))
            is_valid, message = validate_name(name)
            if is_valid:
                updates['name'] = name
            else:
                errors['name'] = message

        if 'role' in data:
            is_valid, message = validate_role(data.get('role'))
            if is_valid:
                updates['role'] = UserRole.normalize(data['role'])
            else:
                errors['role'] = message

        for flag in ('is_active', 'is_approved'):
            if flag in data:
                if isinstance(data[flag], bool):
                    updates[flag] = data[flag]
                else:
                    errors[flag] = f"{flag} must be true or false"

        for optional in ('bio', 'profile_image'):
            if optional in data:
                updates[optional] = (str(data[optional]).strip() or None) if data[optional] is not None else None

        password = data.get('password')
        if password:
            is_valid, message = validate_password(password)
            if not is_valid:
                errors['password'] = message

        if errors:
            return False, errors, "Validation failed"

        conflict = AuthService.find_conflict(updates.get('username'), updates.get('email'), exclude_id=user.id)
        if conflict:
            return False, None, conflict

        for field, value in updates.items():
            setattr(user, field, value)
        if password:
            user.set_password(password)

        success, message = safe_update_and_commit()
        if not success:
            return False, None, message

        logger.info("User %s updated by admin", user.id)
        return True, user, "User updated successfully"

    @staticmethod
    def set_approval(admin, tutor, is_approved):
        """Approve or revoke a tutor account"""
        tutor.is_approved = bool(is_approved)
        state = 'approved' if tutor.is_approved else 'revoked'

        NotificationService.notify(
            tutor.id,
            "Your tutor account has been approved" if tutor.is_approved
            else "Your tutor approval has been revoked",
            'approval', related_id=tutor.id, commit=False)
        ActivityService.log(admin.id, 'user', f"{state} tutor", tutor.name, commit=False)

        success, message = safe_update_and_commit()
        if not success:
            return False, None, message

        logger.info("Tutor %s %s by admin %s", tutor.id, state, admin.id)
        return True, tutor, f"Tutor {state} successfully"
