"""
Tutor service for TutorBridge
Tutor directory and tutor profile management
"""

import logging

from database import db
from models.academic import Course
from models.user import User, UserRole, TutorProfile
from services.admin_service import AdminService
from utils.db_helpers import safe_update_and_commit
from utils.validators import validate_price

logger = logging.getLogger(__name__)


class TutorService:
    """Tutor service class"""

    PROFILE_TEXT_FIELDS = ('education', 'experience')

    @staticmethod
    def get_tutor(tutor_id):
        """Active user with the Tutor role, or None"""
        user = db.session.get(User, tutor_id)
        if user is None or not user.is_tutor or not user.is_active:
            return None
        return user

    @staticmethod
    def tutor_summary(user):
        """Directory entry: public user fields plus profile highlights"""
        data = user.to_public_dict()
        profile = user.tutor_profile
        data['is_approved'] = user.is_approved
        data['subjects'] = list(profile.subjects or []) if profile else []
        data['hourly_rate'] = profile.hourly_rate if profile else None
        data['rating'] = round(profile.rating or 0, 1) if profile else 0
        data['review_count'] = (profile.review_count or 0) if profile else 0
        data['course_count'] = user.courses.count()
        return data

    @staticmethod
    def tutor_detail(user):
        data = user.to_public_dict()
        data['email'] = user.email
        data['is_approved'] = user.is_approved
        data['profile'] = user.tutor_profile.to_dict() if user.tutor_profile else None
        return data

    @staticmethod
    def list_tutors():
        return (
            User.query
            .filter_by(role=UserRole.TUTOR, is_active=True)
            .order_by(User.name)
            .all()
        )

    @staticmethod
    def get_popular_tutors(limit=5):
        """Tutors ordered by rating, then by number of reviews"""
        tutors = TutorService.list_tutors()

        def sort_key(user):
            profile = user.tutor_profile
            if not profile:
                return (0, 0)
            return (profile.rating or 0, profile.review_count or 0)

        return sorted(tutors, key=sort_key, reverse=True)[:limit]

    @staticmethod
    def get_tutor_courses(tutor_id, published_only=False):
        query = Course.query.filter_by(tutor_id=tutor_id)
        if published_only:
            query = query.filter_by(published=True)
        return query.order_by(Course.created_at.desc(), Course.id.desc()).all()

    @staticmethod
    def list_profiles():
        return TutorProfile.query.order_by(TutorProfile.id).all()

    @staticmethod
    def clean_profile_data(data):
        """Validate profile fields present in data. Returns (cleaned, errors)"""
        errors = {}
        cleaned = {}

        if 'subjects' in data:
            subjects = data.get('subjects')
            if isinstance(subjects, str):
                subjects = [item.strip() for item in subjects.split(',')]
            if not isinstance(subjects, list) or not all(isinstance(item, str) for item in subjects):
                errors['subjects'] = "Subjects must be a list of names"
            else:
                cleaned['subjects'] = [item.strip() for item in subjects if item.strip()]

        for field in TutorService.PROFILE_TEXT_FIELDS:
            if field in data:
                cleaned[field] = (str(data[field]).strip() or None) if data[field] is not None else None

        if 'hourly_rate' in data:
            rate = data.get('hourly_rate')
            if rate is None or rate == '':
                cleaned['hourly_rate'] = None
            else:
                is_valid, message = validate_price(rate)
                if is_valid:
                    cleaned['hourly_rate'] = float(rate)
                else:
                    errors['hourly_rate'] = message.replace('Price', 'Hourly rate')

        if 'availability' in data:
            availability = data.get('availability')
            if availability is not None and not isinstance(availability, (dict, list)):
                errors['availability'] = "Availability must be an object or a list"
            else:
                cleaned['availability'] = availability

        return cleaned, errors

    @staticmethod
    def save_profile(tutor, data):
        """Create or update the tutor's own profile"""
        cleaned, errors = TutorService.clean_profile_data(data)
        if errors:
            return False, errors, "Validation failed"

        profile = tutor.tutor_profile
        if profile is None:
            profile = TutorProfile(user_id=tutor.id, subjects=[])
            db.session.add(profile)

        for field, value in cleaned.items():
            setattr(profile, field, value)

        success, message = safe_update_and_commit()
        if not success:
            return False, None, message

        logger.info("Tutor profile saved for user %s", tutor.id)
        return True, profile, "Profile saved successfully"

    @staticmethod
    def create_tutor(data):
        """Admin-created tutor account, with optional profile fields in the same payload"""
        profile_data = dict(data)
        if 'subjects' not in profile_data and data.get('specialization'):
            profile_data['subjects'] = data['specialization']

        cleaned, errors = TutorService.clean_profile_data(profile_data)
        if errors:
            return False, errors, "Validation failed"

        success, result, message = AdminService.create_user(dict(data, role=UserRole.TUTOR))
        if not success:
            return False, result, message

        if cleaned:
            success, _, message = TutorService.save_profile(result, profile_data)
            if not success:
                return False, None, message
        return True, result, "Tutor created successfully"
