"""
Configuration settings for TutorBridge tutoring marketplace
"""

import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default='false'):
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration class"""

    VERSION = '1.0.0'

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'tutorbridge-dev-secret-key'
    JSON_SORT_KEYS = False

    # Database settings
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///tutorbridge.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session settings
    PERMANENT_SESSION_LIFETIME = timedelta(hours=2)
    SESSION_COOKIE_SECURE = False  # Set to True in production with HTTPS
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE')

    # Default admin account created by init_db
    DEFAULT_ADMIN_USERNAME = os.environ.get('DEFAULT_ADMIN_USERNAME', 'admin')
    DEFAULT_ADMIN_EMAIL = os.environ.get('DEFAULT_ADMIN_EMAIL', 'admin@tutorbridge.local')
    DEFAULT_ADMIN_PASSWORD = os.environ.get('DEFAULT_ADMIN_PASSWORD', 'admin123')
    CREATE_DEFAULT_ADMIN = True

    # Application settings
    ITEMS_PER_PAGE = int(os.environ.get('ITEMS_PER_PAGE', 20))
    MAX_ITEMS_PER_PAGE = 100
    REQUIRE_TUTOR_APPROVAL = _env_flag('REQUIRE_TUTOR_APPROVAL')
    DEFAULT_SESSION_MINUTES = 60
    DEFAULT_SUBJECTS = ['Mathematics', 'Programming', 'Science', 'English', 'Business Studies']

    # Security settings
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = None
    WTF_CSRF_HEADERS = ['X-CSRFToken', 'X-CSRF-Token']


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class TestingConfig(Config):
    """Configuration used by the test suite"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    WTF_CSRF_ENABLED = False
    CREATE_DEFAULT_ADMIN = False
    LOG_LEVEL = 'WARNING'
    LOG_FILE = None
    REQUIRE_TUTOR_APPROVAL = False


class ProductionConfig(Config):
    SESSION_COOKIE_SECURE = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'WARNING')


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': Config,
}
