"""
Tests for authentication, the current user endpoint, audit logs and cache helpers
"""
from django.contrib.auth.models import Group
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from bizhub.core.cache_utils import bump_owner_cache_version, cached_for_owner, get_owner_cache_version
from bizhub.core.exceptions import BusinessRuleError, InsufficientStockError
from bizhub.core.models import AuditLog
from bizhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizhub.core.utils import create_audit_log, parse_bool, parse_date, parse_decimal, parse_positive_int


class AuthTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_register_returns_user_and_tokens(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'shopkeeper',
            'email': 'shop@test.com',
            'password': 'Str0ng-pass-99',
            'password_confirm': 'Str0ng-pass-99',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['username'], 'shopkeeper')
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'shopkeeper',
            'password': 'Str0ng-pass-99',
            'password_confirm': 'different-pass-99',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_register_rejects_taken_email(self):
        TestDataFactory.create_user(username='existing', email='shop@test.com')
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'shopkeeper',
            'email': 'Shop@Test.com',
            'password': 'Str0ng-pass-99',
            'password_confirm': 'Str0ng-pass-99',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_login_and_refresh(self):
        TestDataFactory.create_user(username='owner1', password='testpass123')
        response = self.client.post('/api/v1/auth/login/', {'username': 'owner1', 'password': 'testpass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        refresh = self.client.post('/api/v1/auth/refresh/', {'refresh': response.data['refresh']}, format='json')
        self.assertEqual(refresh.status_code, status.HTTP_200_OK)
        self.assertIn('access', refresh.data)

    def test_login_wrong_password(self):
        TestDataFactory.create_user(username='owner1', password='testpass123')
        response = self.client.post('/api/v1/auth/login/', {'username': 'owner1', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_protected_endpoint_requires_token(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UserMeTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user(username='owner1')
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_get_me(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'owner1')
        self.assertFalse(response.data['is_admin'])

    def test_patch_me(self):
        response = self.client.patch('/api/v1/auth/me/', {'phone': '9876543210'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.phone, '9876543210')

    def test_me_lists_groups(self):
        self.user.groups.add(Group.objects.create(name='Cashier'))
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.data['groups'], ['Cashier'])

    def test_patch_me_cannot_change_role_flags(self):
        response = self.client.patch('/api/v1/auth/me/', {'is_staff': True, 'username': 'renamed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertFalse(self.user.is_staff)
        self.assertEqual(self.user.username, 'owner1')


class AuditLogTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.staff = TestDataFactory.create_user(is_staff=True)
        create_audit_log(action='create', model_name='Product', object_id='1', user=self.user)
        create_audit_log(action='create', model_name='Product', object_id='2', user=self.other)

    def test_missing_fields_skip_log(self):
        self.assertIsNone(create_audit_log(action='create', model_name='Product', user=self.user))

    def test_users_only_see_their_own_logs(self):
        client = AuthenticatedAPIClient().authenticate_user(self.user)
        response = client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['object_id'], '1')
        self.assertEqual(response.data['results'][0]['username'], self.user.username)
        self.assertEqual(response.data['results'][0]['action_display'], 'Create')

    def test_staff_see_all_logs(self):
        client = AuthenticatedAPIClient().authenticate_user(self.staff)
        response = client.get('/api/v1/audit-logs/?model_name=Product')
        self.assertEqual(response.data['count'], 2)

    def test_foreign_log_detail_forbidden(self):
        log = AuditLog.objects.get(user=self.other)
        client = AuthenticatedAPIClient().authenticate_user(self.user)
        response = client.get(f'/api/v1/audit-logs/{log.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ParsingTests(TestCase):
    def test_parse_date(self):
        self.assertEqual(str(parse_date('2024-03-05')), '2024-03-05')
        self.assertEqual(str(parse_date('2024-03-05T10:00:00Z')), '2024-03-05')
        self.assertIsNone(parse_date('05/03/2024'))
        self.assertIsNone(parse_date(''))

    def test_parse_decimal(self):
        self.assertEqual(str(parse_decimal('12.50')), '12.50')
        self.assertIsNone(parse_decimal('abc'))
        self.assertIsNone(parse_decimal('NaN'))
        self.assertIsNone(parse_decimal('Infinity'))
        self.assertEqual(parse_decimal(None, default=0), 0)

    def test_parse_bool_and_positive_int(self):
        self.assertTrue(parse_bool('true'))
        self.assertFalse(parse_bool('0'))
        self.assertEqual(parse_positive_int('5', 10), 5)
        self.assertEqual(parse_positive_int('-1', 10), 10)
        self.assertEqual(parse_positive_int('500', 10, maximum=200), 200)


class ExceptionPayloadTests(TestCase):
    def test_payload_carries_details(self):
        error = InsufficientStockError('Insufficient stock', shortages=[{'sku': 'A'}])
        self.assertEqual(error.status_code, 409)
        self.assertEqual(error.as_payload(), {
            'error': 'Insufficient stock',
            'code': 'insufficient_stock',
            'shortages': [{'sku': 'A'}],
        })

    def test_custom_code(self):
        error = BusinessRuleError('Bad', code='custom')
        self.assertEqual(error.status_code, 400)
        self.assertEqual(error.as_payload()['code'], 'custom')


class OwnerCacheTests(TestCase):
    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.calls = 0

    def test_cached_until_version_bumped(self):
        @cached_for_owner('test_counter')
        def counter(owner):
            self.calls += 1
            return {'calls': self.calls}

        self.assertEqual(counter(self.user), {'calls': 1})
        self.assertEqual(counter(self.user), {'calls': 1})

        version = get_owner_cache_version(self.user.pk)
        bump_owner_cache_version(self.user.pk)
        self.assertEqual(get_owner_cache_version(self.user.pk), version + 1)
        self.assertEqual(counter(self.user), {'calls': 2})
