from rest_framework import serializers

from .models import LeaveBalance, LeavePolicy, LeaveRequest


class LeaveTypeSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    name = serializers.CharField(max_length=100)
    yearly_quota = serializers.IntegerField(min_value=0, required=False, default=0)
    max_consecutive_days = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    is_active = serializers.BooleanField(required=False, default=True)


class LeavePolicySerializer(serializers.ModelSerializer):
    leave_types = serializers.ListField(child=LeaveTypeSerializer())

    class Meta:
        model = LeavePolicy
        fields = ['id', 'company_id', 'leave_types', 'created_at', 'updated_at']
        read_only_fields = ['id', 'company_id', 'created_at', 'updated_at']

    def validate_leave_types(self, value):
        codes = [leave_type['code'] for leave_type in value]
        if len(codes) != len(set(codes)):
            raise serializers.ValidationError("Leave type codes must be unique")
        return [dict(leave_type) for leave_type in value]


class LeaveApplySerializer(serializers.Serializer):
    leave_type = serializers.CharField(max_length=50)
    from_date = serializers.DateField()
    to_date = serializers.DateField()
    reason = serializers.CharField()


class LeaveRequestSerializer(serializers.ModelSerializer):
    employee_name = serializers.SerializerMethodField()
    approved_by_username = serializers.CharField(source='approved_by.username', read_only=True, default=None)

    class Meta:
        model = LeaveRequest
        fields = [
            'id', 'employee', 'employee_name', 'leave_type', 'from_date', 'to_date', 'days', 'reason',
            'status', 'approved_by', 'approved_by_username', 'approved_at', 'rejection_reason',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_employee_name(self, obj):
        return obj.employee.get_full_name() or obj.employee.username


class LeaveDecisionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=['approve', 'reject'])
    rejection_reason = serializers.CharField(required=False, allow_blank=True)


class LeaveBalanceSerializer(serializers.ModelSerializer):
    employee_username = serializers.CharField(source='employee.username', read_only=True)

    class Meta:
        model = LeaveBalance
        fields = ['id', 'employee', 'employee_username', 'leave_type', 'balance', 'updated_at']
        read_only_fields = ['id', 'employee_username', 'updated_at']
        validators = []
