"""
Page routes for TutorBridge
Serve the single-page app shell behind role-aware redirects
"""

from flask import Blueprint, redirect, render_template, session

from models.user import UserRole
from services.auth_service import SessionManager

pages_bp = Blueprint('pages', __name__)


def _render_shell(page, title):
    return render_template('spa.html', page=page, page_title=title)


def _guarded_page(page, title, required_role=None):
    user = SessionManager.get_current_user(session)
    target = SessionManager.resolve_page_redirect(user, required_role)
    if target:
        return redirect(target)
    return _render_shell(page, title)


@pages_bp.route('/')
def index():
    """Landing page; logged-in users go straight to their dashboard"""
    user = SessionManager.get_current_user(session)
    if user is not None:
        return redirect(SessionManager.dashboard_for(user.role))
    return _render_shell('home', 'Find a tutor')


@pages_bp.route('/auth')
def auth_page():
    user = SessionManager.get_current_user(session)
    if user is not None:
        return redirect(SessionManager.dashboard_for(user.role))
    return _render_shell('auth', 'Sign in')


@pages_bp.route('/student-dashboard')
def student_dashboard():
    return _guarded_page('student-dashboard', 'Student dashboard', UserRole.STUDENT)


@pages_bp.route('/tutor-dashboard')
def tutor_dashboard():
    return _guarded_page('tutor-dashboard', 'Tutor dashboard', UserRole.TUTOR)


@pages_bp.route('/admin-dashboard')
def admin_dashboard():
    return _guarded_page('admin-dashboard', 'Admin dashboard', UserRole.ADMIN)


@pages_bp.route('/courses')
def courses_page():
    return _guarded_page('courses', 'Courses')
