"""
Health check route for TutorBridge
"""

import logging
from datetime import datetime

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from database import db

logger = logging.getLogger(__name__)

health_bp = Blueprint('health', __name__)


@health_bp.route('/api/health')
def health():
    try:
        db.session.execute(text('SELECT 1'))
        database_ok = True
    except Exception:
        db.session.rollback()
        logger.error("Health check database query failed", exc_info=True)
        database_ok = False

    body = {
        'status': 'ok' if database_ok else 'degraded',
        'version': current_app.config.get('VERSION'),
        'timestamp': datetime.utcnow().isoformat(),
        'database': 'ok' if database_ok else 'unavailable',
    }
    return jsonify(body), 200 if database_ok else 503
