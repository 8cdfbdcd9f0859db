"""
Request/response helpers shared by the API blueprints
"""

from flask import jsonify, request

from utils.validators import normalize_keys


def get_json_data():
    """Request body as a dict with snake_case keys ({} when absent or not an object)"""
    return normalize_keys(request.get_json(silent=True))


def error_response(message, status=400, errors=None):
    """Standard JSON error body"""
    body = {'success': False, 'message': message}
    if errors:
        body['errors'] = errors
    return jsonify(body), status


def success_response(message, status=200, **payload):
    """Standard JSON body for successful writes"""
    return jsonify({'success': True, 'message': message, **payload}), status


def parse_id(value):
    """Positive integer id from a URL segment, or None"""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def get_limit(default=5, maximum=50):
    limit = request.args.get('limit', default, type=int) or default
    return min(max(limit, 1), maximum)
