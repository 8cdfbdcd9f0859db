"""
Tests for the role-aware page routes
"""

import unittest

from api_testcase import ApiTestCase
from models.user import UserRole


class TestPages(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.create_user('student1')
        self.create_user('tutor1', role=UserRole.TUTOR)
        self.create_user('admin1', role=UserRole.ADMIN)

    def assertRedirectsTo(self, response, path):
        self.assertEqual(response.status_code, 302)
        self.assertTrue(response.headers['Location'].endswith(path))

    def test_anonymous_pages(self):
        response = self.client.get('/')
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'data-page="home"', response.data)

        response = self.client.get('/auth')
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'data-page="auth"', response.data)

    def test_dashboards_require_login(self):
        for path in ('/student-dashboard', '/tutor-dashboard', '/admin-dashboard', '/courses'):
            self.assertRedirectsTo(self.client.get(path), '/auth')

    def test_logged_in_user_skips_landing(self):
        self.login('tutor1')
        self.assertRedirectsTo(self.client.get('/'), '/tutor-dashboard')
        self.assertRedirectsTo(self.client.get('/auth'), '/tutor-dashboard')

    def test_wrong_role_goes_to_own_dashboard(self):
        self.login('student1')
        self.assertRedirectsTo(self.client.get('/admin-dashboard'), '/student-dashboard')
        self.assertRedirectsTo(self.client.get('/tutor-dashboard'), '/student-dashboard')

        response = self.client.get('/student-dashboard')
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'data-page="student-dashboard"', response.data)

    def test_courses_page_any_role(self):
        self.login('admin1')
        self.assertEqual(self.client.get('/courses').status_code, 200)
        self.assertEqual(self.client.get('/admin-dashboard').status_code, 200)


if __name__ == '__main__':
    unittest.main()
