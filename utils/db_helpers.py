"""
Database helper utilities for TutorBridge
"""

import logging

from flask import current_app, request
from sqlalchemy.exc import IntegrityError

from database import db

logger = logging.getLogger(__name__)


def _integrity_message(error, default):
    text = str(getattr(error, 'orig', error)).lower()
    if 'unique' in text or 'duplicate' in text:
        return "Record with this identifier already exists"
    if 'foreign key' in text:
        return "Referenced record does not exist"
    return default

def like_pattern(text):
    """Substring pattern for ilike(..., escape='\\') that treats % and _ in text literally"""
    escaped = text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f"%{escaped}%"

def safe_add_and_commit(obj):
    """Safely add object to database with error handling"""
    try:
        db.session.add(obj)
        db.session.commit()
        return True, "Record added successfully"
    except IntegrityError as e:
        db.session.rollback()
        logger.warning("Integrity error adding %r: %s", obj, e.orig)
        return False, _integrity_message(e, "Database constraint violation")
    except Exception as e:
        db.session.rollback()
        logger.error("Error adding %r", obj, exc_info=True)
        return False, f"Database error: {str(e)}"

def safe_delete_and_commit(obj):
    """Safely delete object from database with error handling"""
    try:
        db.session.delete(obj)
        db.session.commit()
        return True, "Record deleted successfully"
    except IntegrityError as e:
        db.session.rollback()
        logger.warning("Integrity error deleting %r: %s", obj, e.orig)
        return False, "Record is still referenced by other records"
    except Exception as e:
        db.session.rollback()
        logger.error("Error deleting %r", obj, exc_info=True)
        return False, f"Database error: {str(e)}"

def safe_update_and_commit():
    """Safely commit database changes with error handling"""
    try:
        db.session.commit()
        return True, "Records updated successfully"
    except IntegrityError as e:
        db.session.rollback()
        logger.warning("Integrity error on update: %s", e.orig)
        if 'unique' in str(e.orig).lower():
            return False, "Duplicate entry found"
        return False, "Database constraint violation"
    except Exception as e:
        db.session.rollback()
        logger.error("Error committing update", exc_info=True)
        return False, f"Database error: {str(e)}"

def get_page_args():
    """Read page/per_page from the query string, clamped to configured limits"""
    default_per_page = current_app.config.get('ITEMS_PER_PAGE', 20)
    max_per_page = current_app.config.get('MAX_ITEMS_PER_PAGE', 100)
    page = request.args.get('page', 1, type=int) or 1
    per_page = request.args.get('per_page', default_per_page, type=int) or default_per_page
    return max(page, 1), min(max(per_page, 1), max_per_page)

def paginate_query(query, page=1, per_page=20, serializer=None):
    """Paginate query results into a JSON-ready envelope"""
    pagination = query.paginate(page=page, per_page=per_page, error_out=False)
    serializer = serializer or (lambda item: item.to_dict())
    return {
        'items': [serializer(item) for item in pagination.items],
        'page': pagination.page,
        'per_page': pagination.per_page,
        'total': pagination.total,
        'pages': pagination.pages,
        'has_prev': pagination.has_prev,
        'has_next': pagination.has_next,
    }

def bulk_insert(objects):
    """Bulk insert objects with error handling"""
    try:
        db.session.add_all(objects)
        db.session.commit()
        return True, f"Successfully inserted {len(objects)} records"
    except IntegrityError as e:
        db.session.rollback()
        return False, f"Bulk insert failed: {str(e.orig)}"
    except Exception as e:
        db.session.rollback()
        return False, f"Database error: {str(e)}"
