"""
Authentication service for TutorBridge
Handles login, registration, password management, and session utilities
"""

import logging
from datetime import datetime

from sqlalchemy import func, or_

from database import db
from models.user import User, UserRole, TutorProfile
from utils.db_helpers import safe_add_and_commit, safe_update_and_commit

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication service class"""

    @staticmethod
    def authenticate(identifier, password):
        """Authenticate by username or email (case-insensitive), active users only"""
        normalized = (identifier or '').strip().lower()
        if not normalized or not password:
            return False, None, "Username and password are required"

        try:
            user = (
                User.query
                .filter(or_(func.lower(User.username) == normalized,
                            func.lower(User.email) == normalized))
                .filter_by(is_active=True)
                .first()
            )

            if user and user.check_password(password):
                user.update_last_login()
                logger.info("User %s logged in", user.username)
                return True, user, "Login successful"

            logger.info("Failed login attempt for %s", normalized)
            return False, None, "Invalid username or password"

        except Exception as e:
            db.session.rollback()
            logger.error("Authentication error", exc_info=True)
            return False, None, f"Authentication error: {str(e)}"

    @staticmethod
    def find_conflict(username=None, email=None, exclude_id=None):
        """Return a message if username or email is already taken"""
        if username:
            query = User.query.filter(func.lower(User.username) == username.lower())
            if exclude_id:
                query = query.filter(User.id != exclude_id)
            if query.first():
                return "Username already exists"
        if email:
            query = User.query.filter(func.lower(User.email) == email.lower())
            if exclude_id:
                query = query.filter(User.id != exclude_id)
            if query.first():
                return "Email already registered"
        return None

    @staticmethod
    def register_user(data):
        """Create a user from already-validated registration data"""
        user = User(
            username=data['username'],
            email=data['email'],
            name=data['name'],
            role=data.get('role', UserRole.STUDENT),
            bio=data.get('bio'),
            profile_image=data.get('profile_image'),
            # Students and admins need no approval step
            is_approved=data.get('role') != UserRole.TUTOR or bool(data.get('is_approved')),
        )
        user.set_password(data['password'])
        if user.role == UserRole.TUTOR:
            user.tutor_profile = TutorProfile(subjects=[])

        success, message = safe_add_and_commit(user)
        if not success:
            return False, None, message

        logger.info("Registered %s user %s", user.role, user.username)
        return True, user, "Registration successful"

    @staticmethod
    def get_user(user_id):
        """Get a user by primary key"""
        if user_id is None:
            return None
        return db.session.get(User, user_id)

    @staticmethod
    def change_password(user, old_password, new_password):
        """Change user password"""
        if not user.check_password(old_password):
            return False, "Current password is incorrect"

        user.set_password(new_password)
        success, message = safe_update_and_commit()
        if not success:
            return False, message

        logger.info("Password changed for %s", user.username)
        return True, "Password changed successfully"

    @staticmethod
    def reset_password(user):
        """Reset a user's password to a new random password"""
        new_password = User.generate_password()
        user.set_password(new_password)
        success, message = safe_update_and_commit()
        if not success:
            return False, None, message

        logger.info("Password reset for %s", user.username)
        return True, new_password, "Password reset successfully"

    @staticmethod
    def set_active(user, is_active):
        """Activate or deactivate a user account"""
        user.is_active = bool(is_active)
        success, message = safe_update_and_commit()
        if not success:
            return False, message

        state = 'activated' if user.is_active else 'deactivated'
        logger.info("User %s %s", user.username, state)
        return True, f"User {state} successfully"


class SessionManager:
    """Session management utilities"""

    DASHBOARDS = {
        UserRole.STUDENT: '/student-dashboard',
        UserRole.TUTOR: '/tutor-dashboard',
        UserRole.ADMIN: '/admin-dashboard',
    }
    LOGIN_PAGE = '/auth'

    @staticmethod
    def create_session(session, user):
        """Create user session"""
        session.clear()
        session['user_id'] = user.id
        session['role'] = user.role
        session['username'] = user.username
        session['login_time'] = datetime.utcnow().isoformat()
        session.permanent = True

    @staticmethod
    def clear_session(session):
        """Clear user session"""
        session.clear()

    @staticmethod
    def is_authenticated(session):
        """Check if user is authenticated"""
        return 'user_id' in session and 'role' in session

    @staticmethod
    def get_current_user_id(session):
        return session.get('user_id')

    @staticmethod
    def get_current_role(session):
        return session.get('role')

    @staticmethod
    def get_current_user(session):
        """Load the session's user; stale sessions (deleted/deactivated users) are cleared"""
        if not SessionManager.is_authenticated(session):
            return None

        user = AuthService.get_user(SessionManager.get_current_user_id(session))
        if user is None or not user.is_active:
            session.clear()
            return None

        # Role changed by an admin since login
        if session.get('role') != user.role:
            session['role'] = user.role
        return user

    @staticmethod
    def dashboard_for(role):
        """Dashboard path for a role"""
        return SessionManager.DASHBOARDS.get(role, '/')

    @staticmethod
    def resolve_page_redirect(user, required_role=None):
        """Where a page request must be redirected, or None to serve it.

        Unauthenticated visitors go to the login page; a user opening another
        role's dashboard is sent to their own.
        """
        if user is None:
            return SessionManager.LOGIN_PAGE
        if required_role and user.role != required_role:
            return SessionManager.dashboard_for(user.role)
        return None

    @staticmethod
    def get_session_info(session):
        """Get complete session information"""
        if not SessionManager.is_authenticated(session):
            return None

        return {
            'user_id': session.get('user_id'),
            'role': session.get('role'),
            'username': session.get('username'),
            'login_time': session.get('login_time')
        }
