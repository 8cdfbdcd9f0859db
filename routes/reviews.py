"""
Review routes for TutorBridge
"""

from flask import Blueprint, g, jsonify

from models.user import UserRole
from routes.auth import login_required
from services.course_service import CourseService
from services.review_service import ReviewService
from utils.request_helpers import error_response, get_json_data, parse_id, success_response

reviews_bp = Blueprint('reviews', __name__)


@reviews_bp.route('/api/reviews/course/<int:course_id>')
def course_reviews(course_id):
    if CourseService.get_course(course_id) is None:
        return error_response('Course not found', 404)
    return jsonify([review.to_dict() for review in ReviewService.get_course_reviews(course_id)])


@reviews_bp.route('/api/reviews', methods=['POST'])
@login_required(UserRole.STUDENT)
def create_review():
    """Review a course the student attended or is enrolled in"""
    student = g.current_user
    data = get_json_data()

    course_id = parse_id(data.get('course_id'))
    course = CourseService.get_course(course_id) if course_id else None
    if course is None:
        return error_response('Course not found', 404)

    if not ReviewService.is_eligible(student.id, course.id):
        return error_response('You can only review courses you have booked or enrolled in', 403)

    success, result, message = ReviewService.create_review(
        student, course, data.get('rating'), data.get('comment'))
    if not success:
        return error_response(message, 400, result if isinstance(result, dict) else None)

    return success_response(message, 201, review=result.to_dict(),
                            average_rating=course.average_rating)


@reviews_bp.route('/api/reviews/<int:review_id>', methods=['DELETE'])
@login_required()
def delete_review(review_id):
    review = ReviewService.get_review(review_id)
    if review is None:
        return error_response('Review not found', 404)

    user = g.current_user
    if not (user.is_admin or review.student_id == user.id):
        return error_response('You can only delete your own reviews', 403)

    success, message = ReviewService.delete_review(review)
    if not success:
        return error_response(message, 500)
    return '', 204
