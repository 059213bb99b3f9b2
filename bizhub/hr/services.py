"""
Leave policy rules: policy seeding, application checks and approval bookkeeping
"""
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from bizhub.core.exceptions import BusinessRuleError
from .models import LeaveBalance, LeavePolicy, LeaveRequest

logger = logging.getLogger(__name__)

DEFAULT_LEAVE_TYPES = [
    {'code': 'sick', 'name': 'Sick Leave', 'yearly_quota': 15, 'max_consecutive_days': None,
     'description': 'Leave for illness or medical appointments', 'is_active': True},
    {'code': 'casual', 'name': 'Casual Leave', 'yearly_quota': 5, 'max_consecutive_days': 2,
     'description': 'Short personal leave', 'is_active': True},
    {'code': 'annual', 'name': 'Annual Leave', 'yearly_quota': 15, 'max_consecutive_days': None,
     'description': 'Planned vacation leave', 'is_active': True},
]


def company_id():
    return settings.BIZHUB_DEFAULT_COMPANY_ID


def get_or_seed_policy():
    policy, created = LeavePolicy.objects.get_or_create(
        company_id=company_id(),
        defaults={'leave_types': [dict(leave_type) for leave_type in DEFAULT_LEAVE_TYPES]}
    )
    if created:
        logger.info(f"Seeded default leave policy for company {policy.company_id}")
    return policy


def update_policy(leave_types):
    policy, _ = LeavePolicy.objects.update_or_create(
        company_id=company_id(),
        defaults={'leave_types': leave_types}
    )
    return policy


def leave_days(from_date, to_date):
    return (to_date - from_date).days + 1


def apply_for_leave(employee, leave_type, from_date, to_date, reason):
    """Validate a leave application against policy and balance, then record it as pending"""
    if from_date > to_date:
        raise BusinessRuleError("From date must be before or equal to to date", code='invalid_dates')

    days = leave_days(from_date, to_date)

    policy = LeavePolicy.objects.filter(company_id=company_id()).first()
    if policy is not None:
        type_config = policy.get_leave_type(leave_type)
        if type_config is None:
            raise BusinessRuleError(
                "Selected leave type is not allowed in current policy",
                code='leave_type_not_allowed'
            )
        limit = type_config.get('max_consecutive_days')
        if limit and int(limit) > 0 and days > int(limit):
            raise BusinessRuleError(
                f"You cannot take more than {limit} consecutive days for {type_config.get('name') or leave_type}.",
                code='leave_rule',
                validation_error='EXCEEDS_CONSECUTIVE_LIMIT',
                max_consecutive_days=int(limit),
                requested_days=days
            )

    # Zero or missing balances are not enforced; admins manage them separately
    balance = LeaveBalance.objects.filter(employee=employee, leave_type=leave_type).first()
    if balance is not None and 0 < balance.balance < days:
        raise BusinessRuleError(
            f"Insufficient leave balance. Available: {balance.balance} days, Requested: {days} days",
            code='leave_rule',
            validation_error='INSUFFICIENT_BALANCE',
            available_balance=balance.balance,
            requested_days=days
        )

    leave = LeaveRequest.objects.create(
        employee=employee,
        leave_type=leave_type,
        from_date=from_date,
        to_date=to_date,
        days=days,
        reason=reason,
    )
    logger.info(f"Leave request {leave.id} ({days} days {leave_type}) submitted by {employee.username}")
    return leave


def decide_leave(leave, action, approver, rejection_reason=None):
    """Approve or reject a pending leave request"""
    if action not in ('approve', 'reject'):
        raise BusinessRuleError('Action must be "approve" or "reject"', code='invalid_action')

    with transaction.atomic():
        leave = LeaveRequest.objects.select_for_update().get(pk=leave.pk)
        if leave.status != 'pending':
            raise BusinessRuleError(f"Leave request is already {leave.status}", code='already_decided')

        if action == 'approve':
            leave.status = 'approved'
            leave.approved_by = approver
            leave.approved_at = timezone.now()
            leave.save(update_fields=['status', 'approved_by', 'approved_at', 'updated_at'])

            balance = LeaveBalance.objects.select_for_update().filter(
                employee=leave.employee, leave_type=leave.leave_type
            ).first()
            if balance is not None and balance.balance > 0:
                balance.balance = max(balance.balance - leave.days, 0)
                balance.save(update_fields=['balance', 'updated_at'])
        else:
            leave.status = 'rejected'
            leave.rejection_reason = rejection_reason or 'Rejected by admin'
            leave.save(update_fields=['status', 'rejection_reason', 'updated_at'])

    logger.info(f"Leave request {leave.id} {leave.status} by {approver.username}")
    return leave
