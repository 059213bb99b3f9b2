from django.contrib import admin
from .models import LeaveBalance, LeavePolicy, LeaveRequest


@admin.register(LeavePolicy)
class LeavePolicyAdmin(admin.ModelAdmin):
    list_display = ['company_id', 'updated_at']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(LeaveBalance)
class LeaveBalanceAdmin(admin.ModelAdmin):
    list_display = ['employee', 'leave_type', 'balance', 'updated_at']
    list_filter = ['leave_type']
    search_fields = ['employee__username']


@admin.register(LeaveRequest)
class LeaveRequestAdmin(admin.ModelAdmin):
    list_display = ['employee', 'leave_type', 'from_date', 'to_date', 'days', 'status', 'approved_by', 'created_at']
    list_filter = ['status', 'leave_type']
    search_fields = ['employee__username', 'reason']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at']
