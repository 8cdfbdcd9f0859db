"""
Learning material service for TutorBridge
Assignments, the content library, video lessons and the tutor's student roster
"""

import logging

from sqlalchemy import func

from database import db
from models.academic import Course, Enrollment
from models.assignments import Assignment, Content, Video
from models.user import User, UserRole
from utils.db_helpers import (
    like_pattern, safe_add_and_commit, safe_delete_and_commit, safe_update_and_commit,
)
from utils.validators import parse_datetime, validate_positive_int

logger = logging.getLogger(__name__)

ASSIGNMENT_STATUSES = ('active', 'closed', 'draft')


def _required_text(data, field, limit, errors):
    value = str(data.get(field) or '').strip()
    if not value:
        errors[field] = f"{field.replace('_', ' ').capitalize()} is required"
    elif len(value) > limit:
        errors[field] = f"{field.replace('_', ' ').capitalize()} must be {limit} characters or less"
    return value


class MaterialService:
    """Learning material service class"""

    @staticmethod
    def can_manage_course(user, course):
        return user.is_admin or (user.is_tutor and course.tutor_id == user.id)

    # Assignments

    @staticmethod
    def get_assignment(assignment_id):
        return db.session.get(Assignment, assignment_id)

    @staticmethod
    def list_assignments(course_id=None):
        query = Assignment.query
        if course_id:
            query = query.filter_by(course_id=course_id)
        return query.order_by(Assignment.due_date.asc(), Assignment.id.asc()).all()

    @staticmethod
    def _clean_assignment(data, partial=False):
        cleaned = {}
        errors = {}

        if not partial or 'title' in data:
            cleaned['title'] = _required_text(data, 'title', 200, errors)

        if not partial or 'due_date' in data:
            try:
                due_date = parse_datetime(data.get('due_date'))
            except (ValueError, TypeError):
                due_date = None
                errors['due_date'] = "Due date must be an ISO-8601 date"
            else:
                if due_date is None:
                    errors['due_date'] = "Due date is required"
            cleaned['due_date'] = due_date

        if 'points' in data:
            is_valid, message = validate_positive_int(data.get('points'), 'Points')
            if is_valid:
                cleaned['points'] = int(data['points'])
            else:
                errors['points'] = message

        if 'status' in data:
            status = str(data.get('status') or '').strip().lower()
            if status in ASSIGNMENT_STATUSES:
                cleaned['status'] = status
            else:
                errors['status'] = f"Status must be one of: {', '.join(ASSIGNMENT_STATUSES)}"

        return cleaned, errors

    @staticmethod
    def create_assignment(course, data):
        cleaned, errors = MaterialService._clean_assignment(data)
        if errors:
            return False, errors, "Validation failed"

        assignment = Assignment(course_id=course.id, **cleaned)
        success, message = safe_add_and_commit(assignment)
        if not success:
            return False, None, message

        logger.info("Assignment %s created for course %s", assignment.id, course.id)
        return True, assignment, "Assignment created successfully"

    @staticmethod
    def update_assignment(assignment, data):
        cleaned, errors = MaterialService._clean_assignment(data, partial=True)
        if errors:
            return False, errors, "Validation failed"

        for field, value in cleaned.items():
            setattr(assignment, field, value)

        success, message = safe_update_and_commit()
        if not success:
            return False, None, message
        return True, assignment, "Assignment updated successfully"

    @staticmethod
    def delete_assignment(assignment):
        return safe_delete_and_commit(assignment)

    # Content library

    @staticmethod
    def list_contents(course_id=None):
        query = Content.query
        if course_id:
            query = query.filter_by(course_id=course_id)
        return query.order_by(Content.upload_date.desc(), Content.id.desc()).all()

    @staticmethod
    def create_content(course, uploader, data):
        errors = {}
        title = _required_text(data, 'title', 200, errors)
        content_type = _required_text(data, 'type', 50, errors)
        size = _required_text(data, 'size', 50, errors)
        if errors:
            return False, errors, "Validation failed"

        content = Content(course_id=course.id, uploaded_by=uploader.id,
                          title=title, type=content_type, size=size)
        success, message = safe_add_and_commit(content)
        if not success:
            return False, None, message

        logger.info("Content %s added to course %s", content.id, course.id)
        return True, content, "Content added successfully"

    # Videos

    @staticmethod
    def get_video(video_id):
        return db.session.get(Video, video_id)

    @staticmethod
    def list_videos(course_id=None):
        query = Video.query
        if course_id:
            query = query.filter_by(course_id=course_id)
        return query.order_by(Video.upload_date.desc(), Video.id.desc()).all()

    @staticmethod
    def create_video(course, instructor, data):
        errors = {}
        title = _required_text(data, 'title', 200, errors)
        duration = _required_text(data, 'duration', 20, errors)
        thumbnail_url = _required_text(data, 'thumbnail_url', 500, errors)
        if errors:
            return False, errors, "Validation failed"

        video = Video(course_id=course.id, instructor_id=instructor.id, title=title,
                      duration=duration, thumbnail_url=thumbnail_url)
        success, message = safe_add_and_commit(video)
        if not success:
            return False, None, message

        logger.info("Video %s added to course %s", video.id, course.id)
        return True, video, "Video added successfully"

    @staticmethod
    def record_view(video):
        """Increment the view counter in the database"""
        Video.query.filter_by(id=video.id).update({Video.views: func.coalesce(Video.views, 0) + 1})
        success, message = safe_update_and_commit()
        if not success:
            return False, None, message
        db.session.refresh(video)
        return True, video, "View recorded"

    # Students

    @staticmethod
    def students_query(tutor=None, search=None):
        """Students by name, restricted to those enrolled with the tutor when given"""
        query = User.query.filter(User.role == UserRole.STUDENT)
        if search and search.strip():
            query = query.filter(User.name.ilike(like_pattern(search.strip()), escape='\\'))
        if tutor is not None:
            enrolled = (
                db.session.query(Enrollment.student_id)
                .join(Course, Enrollment.course_id == Course.id)
                .filter(Course.tutor_id == tutor.id)
            )
            query = query.filter(User.id.in_(enrolled))
        return query.order_by(User.name, User.id)

    @staticmethod
    def student_summary(student):
        """Student row with enrollment count and average progress"""
        count, average = (
            db.session.query(func.count(Enrollment.id), func.avg(Enrollment.progress))
            .filter(Enrollment.student_id == student.id)
            .one()
        )
        data = student.to_public_dict()
        data['email'] = student.email
        data['created_at'] = student.created_at.isoformat() if student.created_at else None
        data['enrollment_count'] = count or 0
        data['average_progress'] = round(float(average), 1) if average is not None else 0
        return data

    @staticmethod
    def get_student(student_id, tutor=None):
        return MaterialService.students_query(tutor).filter(User.id == student_id).first()

    @staticmethod
    def student_detail(student, tutor=None):
        """Roster entry plus the enrollments, limited to the tutor's courses when given"""
        data = MaterialService.student_summary(student)
        query = Enrollment.query.filter(Enrollment.student_id == student.id)
        if tutor is not None:
            query = query.join(Course, Enrollment.course_id == Course.id).filter(Course.tutor_id == tutor.id)
        enrollments = query.order_by(Enrollment.enrollment_date.desc(), Enrollment.id.desc()).all()
        data['enrollments'] = [enrollment.to_dict(include_course=True) for enrollment in enrollments]
        return data

    @staticmethod
    def get_recent_students(tutor=None, limit=5):
        return (
            MaterialService.students_query(tutor)
            .order_by(None)
            .order_by(User.created_at.desc(), User.id.desc())
            .limit(limit)
            .all()
        )
