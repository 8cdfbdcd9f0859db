"""
Integration tests for authentication, user and health routes
"""

import unittest

from api_testcase import ApiTestCase
from config import TestingConfig
from database import db
from models.user import User, UserRole


class CsrfTestingConfig(TestingConfig):
    WTF_CSRF_ENABLED = True


class TestAuthRoutes(ApiTestCase):

    def test_register_logs_user_in(self):
        response = self.client.post('/api/register', json={
            'username': 'newbie', 'email': 'newbie@example.com', 'password': 'secret123',
            'confirmPassword': 'secret123', 'firstName': 'New', 'lastName': 'Bie',
        })
        self.assertEqual(response.status_code, 201)
        body = response.get_json()
        self.assertTrue(body['success'])
        self.assertEqual(body['user']['role'], UserRole.STUDENT)
        self.assertEqual(body['user']['name'], 'New Bie')
        self.assertNotIn('password_hash', body['user'])

        response = self.client.get('/api/user')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['username'], 'newbie')

    def test_register_tutor_gets_profile(self):
        response = self.client.post('/api/register', json={
            'username': 'newtutor', 'email': 'newtutor@example.com', 'password': 'secret123',
            'name': 'Terry Tutor', 'role': 'tutor',
        })
        self.assertEqual(response.status_code, 201)
        self.assertFalse(response.get_json()['user']['is_approved'])

        data = self.client.get('/api/user').get_json()
        self.assertEqual(data['role'], UserRole.TUTOR)
        self.assertIn('tutor_profile', data)

    def test_register_conflicts_and_validation(self):
        self.create_user('taken')

        response = self.client.post('/api/register', json={
            'username': 'taken', 'email': 'other@example.com', 'password': 'secret123'})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.get_json()['message'], 'Username already exists')

        response = self.client.post('/api/register', json={
            'username': 'admin2', 'email': 'admin2@example.com', 'password': 'secret123', 'role': 'Admin'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('role', response.get_json()['errors'])

        response = self.client.post('/api/register', json={})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(User.query.count(), 1)

    def test_login_and_logout(self):
        self.create_user('tutor1', role=UserRole.TUTOR)

        response = self.login('tutor1', 'wrong-password')
        self.assertEqual(response.status_code, 401)

        response = self.client.post('/api/login', json={'username': ''})
        self.assertEqual(response.status_code, 400)

        response = self.client.post('/api/login', json={'email': 'tutor1@example.com', 'password': 'password123'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['redirect'], '/tutor-dashboard')

        self.assertEqual(self.logout().status_code, 200)
        self.assertEqual(self.client.get('/api/user').status_code, 401)

    def test_current_user_requires_login(self):
        response = self.client.get('/api/user')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()['message'], 'Authentication required')

    def test_deactivated_user_session_is_dropped(self):
        user = self.create_user('student1')
        self.login('student1')
        user.is_active = False
        db.session.commit()

        self.assertEqual(self.client.get('/api/user').status_code, 401)

    def test_change_password(self):
        self.create_user('student1')
        self.login('student1')

        response = self.client.post('/api/user/password', json={
            'currentPassword': 'nope', 'newPassword': 'brandnew1'})
        self.assertEqual(response.status_code, 400)

        response = self.client.post('/api/user/password', json={
            'current_password': 'password123', 'new_password': 'brandnew1', 'confirm_password': 'brandnew1'})
        self.assertEqual(response.status_code, 200)

        self.logout()
        self.assertEqual(self.login('student1', 'brandnew1').status_code, 200)

    def test_non_text_fields_are_validation_errors(self):
        response = self.client.post('/api/register', json={
            'username': 12345, 'email': 'numbers@example.com', 'password': 'secret123'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['errors']['username'], 'Username must be text')

        self.create_user('student1')
        response = self.client.post('/api/login', json={'username': 'student1', 'password': 123456})
        self.assertEqual(response.status_code, 400)

        self.login('student1')
        response = self.client.post('/api/user/password', json={
            'current_password': 123, 'new_password': 'brandnew1'})
        self.assertEqual(response.status_code, 400)

        response = self.client.put('/api/profile', json={'email': 42})
        self.assertEqual(response.status_code, 400)
        self.assertIn('email', response.get_json()['errors'])

    def test_csrf_token_endpoint(self):
        response = self.client.get('/api/csrf-token')
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.get_json()['csrf_token'])


class TestCsrfProtection(ApiTestCase):

    config_class = CsrfTestingConfig

    def test_post_without_token_is_rejected(self):
        response = self.client.post('/api/login', json={'username': 'x', 'password': 'y'})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.get_json()['success'])

    def test_post_with_token_is_accepted(self):
        self.create_user('student1')
        token = self.client.get('/api/csrf-token').get_json()['csrf_token']
        response = self.client.post('/api/login', json={'username': 'student1', 'password': 'password123'},
                                    headers={'X-CSRFToken': token})
        self.assertEqual(response.status_code, 200)


class TestUserRoutes(ApiTestCase):

    def test_public_user_lookup(self):
        user = self.create_user('student1')

        response = self.client.get(f'/api/users/{user.id}')
        self.assertEqual(response.status_code, 200)
        self.assertNotIn('email', response.get_json())

        self.assertEqual(self.client.get('/api/users/abc').status_code, 400)
        self.assertEqual(self.client.get('/api/users/999').status_code, 404)

    def test_admin_creates_users(self):
        self.create_user('admin1', role=UserRole.ADMIN)
        self.create_user('student1')

        self.login('student1')
        response = self.client.post('/api/users', json={
            'username': 'staff', 'email': 'staff@example.com', 'password': 'secret123', 'role': 'Admin'})
        self.assertEqual(response.status_code, 403)
        self.logout()

        self.login('admin1')
        response = self.client.post('/api/users', json={
            'username': 'staff', 'email': 'staff@example.com', 'password': 'secret123', 'role': 'Admin'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()['user']['role'], UserRole.ADMIN)

        response = self.client.post('/api/users', json={
            'username': 'staff', 'email': 'staff2@example.com', 'password': 'secret123'})
        self.assertEqual(response.status_code, 409)

    def test_update_profile(self):
        self.create_user('student1')
        self.create_user('student2')
        self.login('student1')

        response = self.client.put('/api/profile', json={'name': 'Stu Dent', 'bio': 'Likes maths', 'role': 'Admin'})
        self.assertEqual(response.status_code, 200)
        user = response.get_json()['user']
        self.assertEqual(user['name'], 'Stu Dent')
        self.assertEqual(user['bio'], 'Likes maths')
        self.assertEqual(user['role'], UserRole.STUDENT)

        response = self.client.put('/api/profile', json={'email': 'student2@example.com'})
        self.assertEqual(response.status_code, 409)

        response = self.client.put('/api/profile', json={'name': '123'})
        self.assertEqual(response.status_code, 400)

        profile = self.client.get('/api/profile').get_json()
        self.assertEqual(profile['user']['name'], 'Stu Dent')
        self.assertIsNone(profile['profile'])


class TestHealthRoute(ApiTestCase):

    def test_health(self):
        response = self.client.get('/api/health')
        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertEqual(body['status'], 'ok')
        self.assertEqual(body['database'], 'ok')
        self.assertEqual(body['version'], '1.0.0')

    def test_unknown_api_path_is_json(self):
        response = self.client.get('/api/does-not-exist')
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.get_json()['success'])


if __name__ == '__main__':
    unittest.main()
