"""
Test suite for leave management
Tests: policy seeding and updates, leave application rules, decisions and balances
"""
from django.test import TestCase
from rest_framework import status

from bizhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizhub.hr.models import LeaveBalance, LeavePolicy, LeaveRequest

POLICY_URL = '/api/v1/hr/leave-policy/'
LEAVES_URL = '/api/v1/hr/leaves/'
BALANCES_URL = '/api/v1/hr/leave-balances/'


class LeavePolicyTests(TestCase):
    def setUp(self):
        self.employee = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_user(is_staff=True)
        self.client = AuthenticatedAPIClient().authenticate_user(self.employee)

    def test_policy_seeded_on_first_read(self):
        response = self.client.get(POLICY_URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        types = {leave_type['code']: leave_type for leave_type in response.data['leave_types']}
        self.assertEqual(set(types), {'sick', 'casual', 'annual'})
        self.assertEqual(types['casual']['max_consecutive_days'], 2)
        self.assertEqual(types['sick']['yearly_quota'], 15)
        self.assertEqual(LeavePolicy.objects.count(), 1)

    def test_update_requires_staff(self):
        response = self.client.put(POLICY_URL, {'leave_types': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_policy(self):
        client = AuthenticatedAPIClient().authenticate_user(self.admin)
        response = client.put(POLICY_URL, {'leave_types': [
            {'code': 'wfh', 'name': 'Work From Home', 'yearly_quota': 24},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['leave_types'][0]['code'], 'wfh')
        self.assertTrue(response.data['leave_types'][0]['is_active'])

    def test_update_policy_validation(self):
        client = AuthenticatedAPIClient().authenticate_user(self.admin)
        self.assertEqual(client.put(POLICY_URL, {'leave_types': 'sick'}, format='json').status_code,
                         status.HTTP_400_BAD_REQUEST)
        self.assertEqual(client.put(POLICY_URL, {'leave_types': [{'code': 'x'}]}, format='json').status_code,
                         status.HTTP_400_BAD_REQUEST)
        self.assertEqual(client.put(POLICY_URL, [{'code': 'sick', 'name': 'Sick'}], format='json').status_code,
                         status.HTTP_400_BAD_REQUEST)


class LeaveApplicationTests(TestCase):
    def setUp(self):
        self.employee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.employee)

    def apply(self, leave_type='annual', from_date='2024-06-03', to_date='2024-06-05', reason='Family trip'):
        return self.client.post(LEAVES_URL, {
            'leave_type': leave_type, 'from_date': from_date, 'to_date': to_date, 'reason': reason,
        }, format='json')

    def test_apply_without_policy(self):
        response = self.apply(leave_type='anything')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['leave']['days'], 3)
        self.assertEqual(response.data['leave']['status'], 'pending')

    def test_missing_fields(self):
        response = self.apply(reason='')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_from_after_to(self):
        response = self.apply(from_date='2024-06-05', to_date='2024-06-03')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_type_not_in_policy(self):
        TestDataFactory.create_leave_policy()
        response = self.apply(leave_type='sabbatical')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('not allowed', response.data['error'])

    def test_inactive_type_rejected(self):
        TestDataFactory.create_leave_policy([{'code': 'annual', 'name': 'Annual', 'is_active': False}])
        self.assertEqual(self.apply().status_code, status.HTTP_400_BAD_REQUEST)

    def test_consecutive_limit(self):
        TestDataFactory.create_leave_policy()
        response = self.apply(leave_type='casual')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['validation_error'], 'EXCEEDS_CONSECUTIVE_LIMIT')
        self.assertEqual(response.data['requested_days'], 3)

    def test_insufficient_balance(self):
        TestDataFactory.create_leave_balance(self.employee, 'annual', 2)
        response = self.apply()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['validation_error'], 'INSUFFICIENT_BALANCE')
        self.assertEqual(response.data['available_balance'], 2)

    def test_zero_balance_is_not_enforced(self):
        TestDataFactory.create_leave_balance(self.employee, 'annual', 0)
        self.assertEqual(self.apply().status_code, status.HTTP_201_CREATED)


class LeaveListAndDecisionTests(TestCase):
    def setUp(self):
        self.employee = TestDataFactory.create_user()
        self.colleague = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_user(is_staff=True)
        self.client = AuthenticatedAPIClient().authenticate_user(self.employee)
        self.admin_client = AuthenticatedAPIClient().authenticate_user(self.admin)
        self.leave = LeaveRequest.objects.create(
            employee=self.employee, leave_type='annual', from_date='2024-06-03', to_date='2024-06-05',
            days=3, reason='Trip'
        )
        LeaveRequest.objects.create(
            employee=self.colleague, leave_type='sick', from_date='2024-06-03', to_date='2024-06-03',
            days=1, reason='Fever'
        )

    def test_employees_see_their_own(self):
        response = self.client.get(f'{LEAVES_URL}?all=true')
        self.assertEqual(response.data['count'], 1)

    def test_staff_can_see_all_or_filter(self):
        self.assertEqual(self.admin_client.get(f'{LEAVES_URL}?all=true').data['count'], 2)
        response = self.admin_client.get(f'{LEAVES_URL}?employee={self.colleague.id}')
        self.assertEqual(response.data['leaves'][0]['leave_type'], 'sick')

    def test_decision_requires_staff(self):
        response = self.client.post(f'{LEAVES_URL}{self.leave.id}/decision/', {'action': 'approve'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_invalid_action(self):
        response = self.admin_client.post(f'{LEAVES_URL}{self.leave.id}/decision/', {'action': 'maybe'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_approve_deducts_balance(self):
        TestDataFactory.create_leave_balance(self.employee, 'annual', 2)
        response = self.admin_client.post(f'{LEAVES_URL}{self.leave.id}/decision/', {'action': 'approve'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['leave']['status'], 'approved')
        self.assertEqual(response.data['leave']['approved_by'], self.admin.id)
        self.assertEqual(LeaveBalance.objects.get(employee=self.employee, leave_type='annual').balance, 0)

        response = self.admin_client.post(f'{LEAVES_URL}{self.leave.id}/decision/', {'action': 'reject'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('already approved', response.data['error'])

    def test_reject_default_reason(self):
        response = self.admin_client.post(f'{LEAVES_URL}{self.leave.id}/decision/', {'action': 'reject'}, format='json')
        self.assertEqual(response.data['leave']['rejection_reason'], 'Rejected by admin')
        self.assertEqual(self.client.get(f'{LEAVES_URL}?status=rejected').data['count'], 1)


class LeaveBalanceTests(TestCase):
    def setUp(self):
        self.employee = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_user(is_staff=True)

    def test_staff_set_and_employee_reads(self):
        admin_client = AuthenticatedAPIClient().authenticate_user(self.admin)
        payload = {'employee': self.employee.id, 'leave_type': 'annual', 'balance': 12}
        self.assertEqual(admin_client.put(BALANCES_URL, payload, format='json').status_code, status.HTTP_201_CREATED)
        payload['balance'] = 8
        self.assertEqual(admin_client.put(BALANCES_URL, payload, format='json').status_code, status.HTTP_200_OK)

        client = AuthenticatedAPIClient().authenticate_user(self.employee)
        response = client.get(BALANCES_URL)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['balance'], 8)
        self.assertEqual(client.put(BALANCES_URL, payload, format='json').status_code, status.HTTP_403_FORBIDDEN)
