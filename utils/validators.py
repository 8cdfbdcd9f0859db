"""
Validation utilities for TutorBridge
"""

import re
from datetime import datetime, date, timezone

from models.user import UserRole

EMAIL_PATTERN = re.compile(r'^[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}$')
_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')


def strip_text(value, lower=False):
    """Trim a text field; missing values become '' and other JSON types are left for the validators"""
    if value is None:
        return ''
    if not isinstance(value, str):
        return value
    value = value.strip()
    return value.lower() if lower else value


def to_snake_case(key):
    """profileImage -> profile_image"""
    return _CAMEL_BOUNDARY.sub('_', key).lower()


def normalize_keys(data):
    """Accept camelCase request bodies by converting top-level keys to snake_case"""
    if not isinstance(data, dict):
        return {}
    return {to_snake_case(key): value for key, value in data.items()}


def validate_name(name, field_name="Name"):
    """Validate person name"""
    if not name or len(str(name).strip()) == 0:
        return False, f"{field_name} is required"

    if not isinstance(name, str):
        return False, f"{field_name} must be text"

    if len(name) > 100:
        return False, f"{field_name} must be 100 characters or less"

    # Letters (any script), spaces and common name punctuation
    if not all(ch.isalpha() or ch in " .-'" for ch in name):
        return False, f"{field_name} can only contain letters, spaces, periods, hyphens, and apostrophes"

    return True, f"Valid {field_name.lower()}"

def validate_username(username):
    """Validate username format"""
    if not username:
        return False, "Username is required"

    if not isinstance(username, str):
        return False, "Username must be text"

    if len(username.strip()) == 0:
        return False, "Username is required"

    if len(username) < 3:
        return False, "Username must be at least 3 characters long"

    if len(username) > 80:
        return False, "Username must be 80 characters or less"

    # Allow alphanumeric and underscore
    if not re.match(r'^[A-Za-z0-9_]+$', username):
        return False, "Username can only contain letters, numbers, and underscores"

    return True, "Valid username"

def validate_password(password):
    """Validate password strength"""
    if not password:
        return False, "Password is required"

    if not isinstance(password, str):
        return False, "Password must be text"

    if len(password) < 6:
        return False, "Password must be at least 6 characters long"

    if len(password) > 128:
        return False, "Password must be 128 characters or less"

    return True, "Valid password"

def validate_email(email):
    """Validate email address format"""
    if not email or len(str(email).strip()) == 0:
        return False, "Email is required"

    if not isinstance(email, str):
        return False, "Email must be text"

    if len(email) > 120:
        return False, "Email must be 120 characters or less"

    if not EMAIL_PATTERN.match(email):
        return False, "Invalid email format"

    return True, "Valid email"

def validate_role(role, allowed=UserRole.ALL):
    """Validate a role name (any case, known aliases accepted)"""
    canonical = UserRole.normalize(role)
    if canonical is None or canonical not in allowed:
        return False, f"Role must be one of: {', '.join(allowed)}"
    return True, "Valid role"

def validate_rating(rating):
    """Validate review rating (integer 1-5)"""
    if isinstance(rating, bool):
        return False, "Rating must be a whole number"
    try:
        rating_float = float(rating)
    except (ValueError, TypeError):
        return False, "Rating must be a number"
    if not rating_float.is_integer():
        return False, "Rating must be a whole number"
    if rating_float < 1 or rating_float > 5:
        return False, "Rating must be between 1 and 5"
    return True, "Valid rating"

def validate_price(price):
    """Validate a non-negative price"""
    if isinstance(price, bool):
        return False, "Price must be a valid number"
    try:
        price_float = float(price)
    except (ValueError, TypeError):
        return False, "Price must be a valid number"
    if price_float < 0:
        return False, "Price cannot be negative"
    return True, "Valid price"

def validate_positive_int(value, field_name, allow_none=False):
    """Validate a strictly positive integer field"""
    if value is None and allow_none:
        return True, f"Valid {field_name}"
    if isinstance(value, bool):
        return False, f"{field_name} must be a whole number"
    try:
        int_value = int(value)
    except (ValueError, TypeError):
        return False, f"{field_name} must be a whole number"
    if str(value).strip() != str(int_value) and float(value) != int_value:
        return False, f"{field_name} must be a whole number"
    if int_value <= 0:
        return False, f"{field_name} must be greater than zero"
    return True, f"Valid {field_name}"

def validate_progress(progress):
    """Validate enrollment progress percentage"""
    if isinstance(progress, bool):
        return False, "Progress must be a whole number"
    try:
        value = float(progress)
    except (ValueError, TypeError):
        return False, "Progress must be a whole number"
    if not value.is_integer():
        return False, "Progress must be a whole number"
    if value < 0 or value > 100:
        return False, "Progress must be between 0 and 100"
    return True, "Valid progress"

def parse_datetime(value):
    """Parse an ISO-8601 string (or date/datetime) into a naive UTC datetime"""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError("Unsupported date value")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


COURSE_REQUIRED_FIELDS = ('title', 'description', 'subject', 'price')
COURSE_TEXT_LIMITS = {'title': 200, 'subject': 100, 'category': 100, 'level': 50}

def validate_course_data(data, partial=False):
    """Validate a course payload.

    Returns (cleaned, errors). With partial=True only the supplied fields are
    checked, which is what PATCH needs.
    """
    cleaned = {}
    errors = {}

    for field in COURSE_REQUIRED_FIELDS:
        if not partial and (data.get(field) is None or str(data.get(field)).strip() == ''):
            errors[field] = f"{field.replace('_', ' ').capitalize()} is required"

    for field, limit in COURSE_TEXT_LIMITS.items():
        if field in data and field not in errors:
            value = data.get(field)
            if value is None:
                if field in COURSE_REQUIRED_FIELDS:
                    errors[field] = f"{field.capitalize()} is required"
                else:
                    cleaned[field] = None
                continue
            value = str(value).strip()
            if field in COURSE_REQUIRED_FIELDS and not value:
                errors[field] = f"{field.capitalize()} is required"
            elif len(value) > limit:
                errors[field] = f"{field.capitalize()} must be {limit} characters or less"
            else:
                cleaned[field] = value

    if 'description' in data and 'description' not in errors:
        description = str(data.get('description') or '').strip()
        if not description:
            errors['description'] = "Description is required"
        else:
            cleaned['description'] = description

    if 'price' in data and 'price' not in errors:
        is_valid, message = validate_price(data.get('price'))
        if is_valid:
            cleaned['price'] = float(data['price'])
        else:
            errors['price'] = message

    if 'duration' in data:
        is_valid, message = validate_positive_int(data.get('duration'), 'Duration')
        if is_valid:
            cleaned['duration'] = int(data['duration'])
        else:
            errors['duration'] = message

    if 'max_students' in data:
        is_valid, message = validate_positive_int(data.get('max_students'), 'Max students', allow_none=True)
        if is_valid:
            cleaned['max_students'] = int(data['max_students']) if data['max_students'] is not None else None
        else:
            errors['max_students'] = message

    if 'published' in data:
        if isinstance(data['published'], bool):
            cleaned['published'] = data['published']
        else:
            errors['published'] = "Published must be true or false"

    return cleaned, errors

def validate_registration_data(data, allowed_roles=UserRole.SELF_REGISTERABLE):
    """Validate a sign-up payload. Returns (cleaned, errors)"""
    cleaned = {}
    errors = {}

    username = strip_text(data.get('username'))
    is_valid, message = validate_username(username)
    if is_valid:
        cleaned['username'] = username
    else:
        errors['username'] = message

    email = strip_text(data.get('email'), lower=True)
    is_valid, message = validate_email(email)
    if is_valid:
        cleaned['email'] = email
    else:
        errors['email'] = message

    password = data.get('password') or ''
    is_valid, message = validate_password(password)
    if is_valid:
        cleaned['password'] = password
    else:
        errors['password'] = message

    confirm = data.get('confirm_password')
    if confirm is not None and confirm != password:
        errors['confirm_password'] = "Passwords do not match"

    name = strip_text(data.get('name'))
    if not name and (data.get('first_name') or data.get('last_name')):
        name = f"{strip_text(data.get('first_name'))} {strip_text(data.get('last_name'))}".strip()
    if not name:
        name = username
    is_valid, message = validate_name(name) if name != username else (True, "Valid name")
    if is_valid:
        cleaned['name'] = name
    else:
        errors['name'] = message

    role = data.get('role') or UserRole.STUDENT
    is_valid, message = validate_role(role, allowed_roles)
    if is_valid:
        cleaned['role'] = UserRole.normalize(role)
    else:
        errors['role'] = message

    for optional in ('bio', 'profile_image'):
        if data.get(optional):
            cleaned[optional] = str(data[optional]).strip()

    return cleaned, errors
