"""
Database configuration and initialization for TutorBridge
"""

import logging
import sqlite3

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# Initialize SQLAlchemy instance
db = SQLAlchemy()

@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite"""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

def init_db(app):
    """Initialize database with application context"""
    with app.app_context():
        # Import all models to ensure they are registered
        import models  # noqa: F401

        db.create_all()

        if app.config.get('CREATE_DEFAULT_ADMIN', True):
            create_default_admin_user(app.config)

        logger.info("Database initialized (%s)", app.config['SQLALCHEMY_DATABASE_URI'])

def create_default_admin_user(settings):
    """Create default admin user for initial access"""
    from models.user import User, UserRole

    username = settings.get('DEFAULT_ADMIN_USERNAME', 'admin')
    existing_user = User.query.filter_by(username=username).first()
    if existing_user:
        return existing_user

    admin = User(
        username=username,
        email=settings.get('DEFAULT_ADMIN_EMAIL', 'admin@tutorbridge.local'),
        name='Administrator',
        role=UserRole.ADMIN,
        is_approved=True,
    )
    admin.set_password(settings.get('DEFAULT_ADMIN_PASSWORD', 'admin123'))

    try:
        db.session.add(admin)
        db.session.commit()
        logger.info("Default admin user created: %s", username)
        return admin
    except Exception:
        db.session.rollback()
        logger.error("Error creating default admin user", exc_info=True)
        return None

def reset_database(app):
    """Reset database - WARNING: This will delete all data"""
    with app.app_context():
        import models  # noqa: F401

        db.drop_all()
        db.create_all()

        if app.config.get('CREATE_DEFAULT_ADMIN', True):
            create_default_admin_user(app.config)
        logger.warning("Database reset completed")
