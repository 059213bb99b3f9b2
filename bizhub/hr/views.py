import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bizhub.core.utils import create_audit_log, parse_bool
from .models import LeaveBalance, LeaveRequest
from .serializers import (
    LeaveApplySerializer, LeaveBalanceSerializer, LeaveDecisionSerializer, LeavePolicySerializer,
    LeaveRequestSerializer,
)
from .services import apply_for_leave, decide_leave, get_or_seed_policy, update_policy

logger = logging.getLogger(__name__)


def staff_required_response():
    return Response({'error': 'Only administrators can perform this action'}, status=status.HTTP_403_FORBIDDEN)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def leave_policy(request):
    """Read the company leave policy or replace its leave types"""
    if request.method == 'GET':
        return Response(LeavePolicySerializer(get_or_seed_policy()).data)

    if not request.user.is_staff:
        return staff_required_response()

    leave_types = request.data.get('leave_types') if isinstance(request.data, dict) else None
    if not isinstance(leave_types, list):
        return Response({'error': 'leave_types must be a list'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = LeavePolicySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    policy = update_policy(serializer.validated_data['leave_types'])

    create_audit_log(
        request=request,
        action='policy_update',
        model_name='LeavePolicy',
        object_id=str(policy.id),
        object_name=policy.company_id,
        changes={'leave_types': [leave_type['code'] for leave_type in policy.leave_types]}
    )
    return Response(LeavePolicySerializer(policy).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def leave_list_create(request):
    """List leave requests or apply for leave"""
    if request.method == 'GET':
        queryset = LeaveRequest.objects.select_related('employee', 'approved_by')
        employee_id = request.query_params.get('employee')
        if request.user.is_staff and employee_id:
            queryset = queryset.filter(employee_id=employee_id)
        elif not (request.user.is_staff and parse_bool(request.query_params.get('all'))):
            queryset = queryset.filter(employee=request.user)

        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        serializer = LeaveRequestSerializer(queryset.order_by('-created_at', '-id'), many=True)
        return Response({'leaves': serializer.data, 'count': len(serializer.data)})

    serializer = LeaveApplySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            {'error': 'All fields are required', 'details': serializer.errors},
            status=status.HTTP_400_BAD_REQUEST
        )
    data = serializer.validated_data
    leave = apply_for_leave(request.user, data['leave_type'], data['from_date'], data['to_date'], data['reason'])

    create_audit_log(
        request=request,
        action='leave_apply',
        model_name='LeaveRequest',
        object_id=str(leave.id),
        object_name=leave.leave_type,
        changes={'from_date': str(leave.from_date), 'to_date': str(leave.to_date), 'days': leave.days}
    )
    return Response(
        {'message': 'Leave request submitted successfully', 'leave': LeaveRequestSerializer(leave).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def leave_decision(request, pk):
    """Approve or reject a pending leave request"""
    if not request.user.is_staff:
        return staff_required_response()

    leave = get_object_or_404(LeaveRequest, pk=pk)
    serializer = LeaveDecisionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Action must be "approve" or "reject"'}, status=status.HTTP_400_BAD_REQUEST)

    leave = decide_leave(
        leave,
        serializer.validated_data['action'],
        request.user,
        serializer.validated_data.get('rejection_reason')
    )

    create_audit_log(
        request=request,
        action='leave_approve' if leave.status == 'approved' else 'leave_reject',
        model_name='LeaveRequest',
        object_id=str(leave.id),
        object_name=leave.leave_type,
        changes={'status': leave.status, 'employee': leave.employee.username}
    )
    return Response({'message': f"Leave request {leave.status}", 'leave': LeaveRequestSerializer(leave).data})


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def leave_balances(request):
    """Employees read their balances; staff read anyone's and set them"""
    if request.method == 'GET':
        queryset = LeaveBalance.objects.select_related('employee')
        employee_id = request.query_params.get('employee')
        if request.user.is_staff and employee_id:
            queryset = queryset.filter(employee_id=employee_id)
        elif not (request.user.is_staff and parse_bool(request.query_params.get('all'))):
            queryset = queryset.filter(employee=request.user)
        return Response(LeaveBalanceSerializer(queryset, many=True).data)

    if not request.user.is_staff:
        return staff_required_response()

    serializer = LeaveBalanceSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    balance, created = LeaveBalance.objects.update_or_create(
        employee=data['employee'],
        leave_type=data['leave_type'],
        defaults={'balance': data['balance']}
    )
    logger.info(f"Leave balance {balance.leave_type} for {balance.employee.username} set to {balance.balance}")
    return Response(
        LeaveBalanceSerializer(balance).data,
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
    )
