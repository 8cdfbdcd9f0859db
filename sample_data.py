#!/usr/bin/env python3
"""
Sample data generator for TutorBridge
Creates tutors, courses, students, bookings and reviews for demonstration
"""

from datetime import datetime, timedelta

from app import create_app
from database import db
from models.academic import Course, Enrollment
from models.booking import Booking, BookingStatus
from models.review import Review
from models.user import User, UserRole, TutorProfile
from services.review_service import ReviewService
from utils.db_helpers import bulk_insert

SAMPLE_PASSWORD = 'password123'

TUTORS = [
    {
        'username': 'sarah_math', 'email': 'sarah@example.com', 'name': 'Sarah Johnson',
        'bio': 'Math expert with 8 years of teaching experience. Ph.D. in Applied Mathematics.',
        'subjects': ['Algebra', 'Calculus', 'Statistics', 'Trigonometry'],
        'education': 'Ph.D. in Applied Mathematics, Stanford University', 'hourly_rate': 45,
    },
    {
        'username': 'david_science', 'email': 'david@example.com', 'name': 'David Miller',
        'bio': 'Physics professor with a passion for making complex concepts simple to understand.',
        'subjects': ['Physics', 'Astronomy', 'Mechanics', 'Thermodynamics'],
        'education': 'Ph.D. in Physics, MIT', 'hourly_rate': 50,
    },
    {
        'username': 'emma_lang', 'email': 'emma@example.com', 'name': 'Emma Wilson',
        'bio': 'Linguistics expert specializing in Spanish, French, and German language instruction.',
        'subjects': ['Spanish', 'French', 'German', 'English'],
        'education': 'M.A. in Linguistics, Columbia University', 'hourly_rate': 35,
    },
    {
        'username': 'michael_prog', 'email': 'michael@example.com', 'name': 'Michael Brown',
        'bio': 'Software developer with 10+ years of experience teaching programming and web development.',
        'subjects': ['JavaScript', 'Python', 'React', 'Web Development'],
        'education': 'M.S. in Computer Science, UC Berkeley', 'hourly_rate': 60,
    },
    {
        'username': 'james_business', 'email': 'james@example.com', 'name': 'James Taylor',
        'bio': 'MBA graduate with experience in business administration, marketing, and entrepreneurship.',
        'subjects': ['Business Administration', 'Marketing', 'Entrepreneurship', 'Finance'],
        'education': 'MBA, Wharton School', 'hourly_rate': 55,
    },
]

COURSES = [
    ('sarah_math', 'Calculus Foundations', 'Mathematics', 'Limits, derivatives and integrals from first principles.', 40, 90),
    ('sarah_math', 'Statistics for Beginners', 'Mathematics', 'Descriptive statistics, probability and hypothesis testing.', 35, 60),
    ('david_science', 'Classical Mechanics', 'Science', "Newton's laws, energy and momentum with worked problems.", 45, 60),
    ('emma_lang', 'Conversational Spanish', 'English', 'Everyday Spanish conversation for absolute beginners.', 30, 45),
    ('michael_prog', 'Python Programming', 'Programming', 'Python from variables to classes, with weekly projects.', 55, 90),
    ('michael_prog', 'Web Development with React', 'Programming', 'Build interactive single-page applications with React.', 60, 120),
    ('james_business', 'Marketing Essentials', 'Business Studies', 'Market research, positioning and campaign planning.', 50, 60),
]

STUDENTS = [
    ('alex_student', 'alex@example.com', 'Alex Carter'),
    ('priya_student', 'priya@example.com', 'Priya Nair'),
    ('liam_student', 'liam@example.com', 'Liam OBrien'),
]


def _get_or_create_user(username, email, name, role, **extra):
    user = User.query.filter_by(username=username).first()
    if user:
        return user, False

    user = User(username=username, email=email, name=name, role=role, is_approved=True, **extra)
    user.set_password(SAMPLE_PASSWORD)
    db.session.add(user)
    return user, True


def create_sample_data():
    """Create sample data for the system"""
    app = create_app()

    with app.app_context():
        print("Creating sample data...")

        tutors = {}
        for data in TUTORS:
            tutor, created = _get_or_create_user(data['username'], data['email'], data['name'],
                                                 UserRole.TUTOR, bio=data['bio'])
            if created:
                tutor.tutor_profile = TutorProfile(
                    subjects=data['subjects'],
                    education=data['education'],
                    hourly_rate=data['hourly_rate'],
                    availability={'weekdays': ['Mon', 'Wed', 'Fri'], 'hours': '16:00-20:00'},
                )
            tutors[data['username']] = tutor
        db.session.commit()
        print(f"✓ {len(tutors)} tutors ready")

        courses = []
        for username, title, subject, description, price, duration in COURSES:
            tutor = tutors[username]
            course = Course.query.filter_by(tutor_id=tutor.id, title=title).first()
            if course is None:
                course = Course(tutor_id=tutor.id, title=title, subject=subject,
                                description=description, price=price, duration=duration,
                                level='Beginner', max_students=20)
                db.session.add(course)
            courses.append(course)
        db.session.commit()
        print(f"✓ {len(courses)} courses ready")

        students = []
        for username, email, name in STUDENTS:
            student, _ = _get_or_create_user(username, email, name, UserRole.STUDENT)
            students.append(student)
        db.session.commit()
        print(f"✓ {len(students)} students ready")

        now = datetime.utcnow()
        records = []
        for index, student in enumerate(students):
            for offset, course in enumerate(courses[index::2][:3]):
                if Booking.query.filter_by(student_id=student.id, course_id=course.id).first():
                    continue
                completed = offset == 0
                records.append(Booking(
                    course_id=course.id,
                    student_id=student.id,
                    tutor_id=course.tutor_id,
                    status=BookingStatus.COMPLETED if completed else BookingStatus.CONFIRMED,
                    session_date=now + timedelta(days=(-7 if completed else 3 + offset)),
                ))
                if not Enrollment.query.filter_by(student_id=student.id, course_id=course.id).first():
                    records.append(Enrollment(student_id=student.id, course_id=course.id,
                                              progress=100 if completed else 20 * offset,
                                              status='completed' if completed else 'active'))
                if completed and not Review.query.filter_by(student_id=student.id, course_id=course.id).first():
                    records.append(Review(course_id=course.id, tutor_id=course.tutor_id,
                                          student_id=student.id, rating=5 - index % 2,
                                          comment='Clear explanations and well-prepared sessions.'))
        success, message = bulk_insert(records)
        if not success:
            print(f"✗ {message}")
            return

        for course in courses:
            ReviewService.refresh_course_rating(course)
        for tutor in tutors.values():
            ReviewService.refresh_tutor_rating(tutor.id)
        db.session.commit()
        print("✓ Bookings, enrollments and reviews created")

        print(f"\nSample data created. Every sample account uses the password '{SAMPLE_PASSWORD}'.")


if __name__ == '__main__':
    create_sample_data()
