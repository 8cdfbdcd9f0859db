"""
TutorBridge tutoring marketplace
Main Flask application entry point
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from flask import Flask, jsonify
from flask_wtf.csrf import CSRFError, CSRFProtect, generate_csrf
from werkzeug.exceptions import HTTPException

from config import config
from database import db, init_db

csrf = CSRFProtect()

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s : %(message)s'
HANDLER_NAME = 'tutorbridge'


def setup_logging(app):
    """Configure console (and optional rotating file) logging once per process"""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    if not any(handler.get_name() == HANDLER_NAME for handler in root.handlers):
        formatter = logging.Formatter(LOG_FORMAT)

        console_handler = logging.StreamHandler()
        console_handler.set_name(HANDLER_NAME)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

        log_file = app.config.get('LOG_FILE')
        if log_file:
            log_dir = os.path.dirname(os.path.abspath(log_file))
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
            file_handler.set_name(f'{HANDLER_NAME}-file')
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

    app.logger.setLevel(level)

    # Keep SQL statement logging out of the application log
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)


def register_blueprints(app):
    """Register all application blueprints"""
    from routes.auth import auth_bp
    from routes.users import users_bp
    from routes.courses import courses_bp
    from routes.tutors import tutors_bp
    from routes.bookings import bookings_bp
    from routes.enrollments import enrollments_bp
    from routes.reviews import reviews_bp
    from routes.notifications import notifications_bp
    from routes.dashboard import dashboard_bp
    from routes.materials import materials_bp
    from routes.admin import admin_bp
    from routes.health import health_bp
    from routes.pages import pages_bp

    for blueprint in (auth_bp, users_bp, courses_bp, tutors_bp, bookings_bp, enrollments_bp,
                      reviews_bp, notifications_bp, dashboard_bp, materials_bp, admin_bp,
                      health_bp, pages_bp):
        app.register_blueprint(blueprint)


def register_error_handlers(app):
    """JSON error bodies for API clients"""

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        return jsonify({'success': False, 'message': f'CSRF validation failed: {error.description}'}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'success': False, 'message': error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        app.logger.error("Unhandled exception", exc_info=error)
        return jsonify({'success': False, 'message': 'Internal server error'}), 500


def create_app(config_class=None):
    """Application factory pattern"""
    if config_class is None:
        config_class = config.get(os.environ.get('FLASK_CONFIG', 'default'), config['default'])

    app = Flask(__name__)
    app.config.from_object(config_class)
    app.json.sort_keys = app.config.get('JSON_SORT_KEYS', False)

    setup_logging(app)

    # Initialize extensions with app
    db.init_app(app)
    csrf.init_app(app)

    # Add CSRF token to template context
    @app.context_processor
    def inject_csrf_token():
        return dict(csrf_token=generate_csrf)

    register_blueprints(app)
    register_error_handlers(app)

    # Initialize database
    init_db(app)

    app.logger.info("TutorBridge started with %s", config_class.__name__)
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 8000)), debug=app.config.get('DEBUG', False),
            use_reloader=False)
