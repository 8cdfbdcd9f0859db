"""
Learning material routes for TutorBridge
Assignments, content library, video lessons and student rosters
"""

from flask import Blueprint, g, jsonify, request

from models.user import UserRole
from routes.auth import login_required
from services.admin_service import AdminService
from services.course_service import CourseService
from services.material_service import MaterialService
from utils.db_helpers import get_page_args, paginate_query
from utils.request_helpers import error_response, get_json_data, get_limit, parse_id, success_response

materials_bp = Blueprint('materials', __name__)


def _load_writable_course(data):
    """Course named in the body that the current user may add material to"""
    course_id = parse_id(data.get('course_id'))
    course = CourseService.get_course(course_id) if course_id else None
    if course is None:
        return None, error_response('Course not found', 404)
    if not MaterialService.can_manage_course(g.current_user, course):
        return None, error_response('You can only manage material for your own courses', 403)
    return course, None


def _validation_error(result, message):
    return error_response(message, 400, result if isinstance(result, dict) else None)


# Assignments

@materials_bp.route('/api/assignments')
@login_required()
def list_assignments():
    assignments = MaterialService.list_assignments(course_id=request.args.get('course_id', type=int))
    return jsonify([assignment.to_dict() for assignment in assignments])


@materials_bp.route('/api/assignments', methods=['POST'])
@login_required(UserRole.TUTOR, UserRole.ADMIN)
def create_assignment():
    data = get_json_data()
    course, error = _load_writable_course(data)
    if error:
        return error

    success, result, message = MaterialService.create_assignment(course, data)
    if not success:
        return _validation_error(result, message)
    return success_response(message, 201, assignment=result.to_dict())


@materials_bp.route('/api/assignments/<int:assignment_id>')
@login_required()
def get_assignment(assignment_id):
    assignment = MaterialService.get_assignment(assignment_id)
    if assignment is None:
        return error_response('Assignment not found', 404)
    return jsonify(assignment.to_dict())


@materials_bp.route('/api/assignments/<int:assignment_id>', methods=['PUT'])
@login_required(UserRole.TUTOR, UserRole.ADMIN)
def update_assignment(assignment_id):
    assignment = MaterialService.get_assignment(assignment_id)
    if assignment is None:
        return error_response('Assignment not found', 404)
    if not MaterialService.can_manage_course(g.current_user, assignment.course):
        return error_response('You can only manage material for your own courses', 403)

    data = get_json_data()
    data.pop('course_id', None)
    success, result, message = MaterialService.update_assignment(assignment, data)
    if not success:
        return _validation_error(result, message)
    return success_response(message, assignment=result.to_dict())


@materials_bp.route('/api/assignments/<int:assignment_id>', methods=['DELETE'])
@login_required(UserRole.TUTOR, UserRole.ADMIN)
def delete_assignment(assignment_id):
    assignment = MaterialService.get_assignment(assignment_id)
    if assignment is None:
        return error_response('Assignment not found', 404)
    if not MaterialService.can_manage_course(g.current_user, assignment.course):
        return error_response('You can only manage material for your own courses', 403)

    success, message = MaterialService.delete_assignment(assignment)
    if not success:
        return error_response(message, 500)
    return '', 204


# Content library

@materials_bp.route('/api/content')
@login_required()
def list_content():
    contents = MaterialService.list_contents(course_id=request.args.get('course_id', type=int))
    return jsonify([content.to_dict() for content in contents])


@materials_bp.route('/api/content', methods=['POST'])
@login_required(UserRole.TUTOR, UserRole.ADMIN)
def create_content():
    data = get_json_data()
    course, error = _load_writable_course(data)
    if error:
        return error

    success, result, message = MaterialService.create_content(course, g.current_user, data)
    if not success:
        return _validation_error(result, message)
    return success_response(message, 201, content=result.to_dict())


# Videos

@materials_bp.route('/api/videos')
@login_required()
def list_videos():
    videos = MaterialService.list_videos(course_id=request.args.get('course_id', type=int))
    return jsonify([video.to_dict() for video in videos])


@materials_bp.route('/api/videos', methods=['POST'])
@login_required(UserRole.TUTOR, UserRole.ADMIN)
def create_video():
    data = get_json_data()
    course, error = _load_writable_course(data)
    if error:
        return error

    success, result, message = MaterialService.create_video(course, g.current_user, data)
    if not success:
        return _validation_error(result, message)
    return success_response(message, 201, video=result.to_dict())


@materials_bp.route('/api/videos/<int:video_id>/view', methods=['POST'])
@login_required()
def record_video_view(video_id):
    video = MaterialService.get_video(video_id)
    if video is None:
        return error_response('Video not found', 404)

    success, result, message = MaterialService.record_view(video)
    if not success:
        return error_response(message, 500)
    return success_response(message, views=result.views)


# Students

@materials_bp.route('/api/students')
@login_required(UserRole.TUTOR, UserRole.ADMIN)
def list_students():
    """Students with enrollment figures; tutors only see their own students"""
    user = g.current_user
    query = MaterialService.students_query(tutor=user if user.is_tutor else None,
                                           search=request.args.get('search'))
    page, per_page = get_page_args()
    return jsonify(paginate_query(query, page, per_page,
                                  serializer=MaterialService.student_summary))


@materials_bp.route('/api/students/recent')
@login_required(UserRole.TUTOR, UserRole.ADMIN)
def recent_students():
    user = g.current_user
    students = MaterialService.get_recent_students(tutor=user if user.is_tutor else None,
                                                   limit=get_limit(default=5))
    return jsonify([MaterialService.student_summary(student) for student in students])


@materials_bp.route('/api/students/<student_id>')
@login_required(UserRole.TUTOR, UserRole.ADMIN)
def get_student(student_id):
    parsed_id = parse_id(student_id)
    if parsed_id is None:
        return error_response('Invalid student id', 400)

    user = g.current_user
    tutor = user if user.is_tutor else None
    student = MaterialService.get_student(parsed_id, tutor=tutor)
    if student is None:
        return error_response('Student not found', 404)
    return jsonify(MaterialService.student_detail(student, tutor=tutor))


@materials_bp.route('/api/students', methods=['POST'])
@login_required(UserRole.ADMIN)
def create_student():
    """Admin creates a student account"""
    success, result, message = AdminService.create_user(dict(get_json_data(), role=UserRole.STUDENT))
    if not success:
        if isinstance(result, dict):
            return error_response(message, 400, result)
        return error_response(message, 409)
    return success_response('Student created successfully', 201, student=MaterialService.student_summary(result))
