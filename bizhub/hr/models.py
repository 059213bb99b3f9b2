from django.db import models


class LeavePolicy(models.Model):
    """
    Company-wide leave policy
    leave_types entries: {code, name, yearly_quota, max_consecutive_days, description, is_active}
    """
    company_id = models.CharField(max_length=100, unique=True)
    leave_types = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'leave_policies'
        verbose_name_plural = 'leave policies'

    def __str__(self):
        return f"Leave policy ({self.company_id})"

    def get_leave_type(self, code):
        """Active leave type config for a code, None when missing or inactive"""
        for leave_type in self.leave_types or []:
            if leave_type.get('code') == code and leave_type.get('is_active', True) is not False:
                return leave_type
        return None


class LeaveBalance(models.Model):
    employee = models.ForeignKey('core.User', on_delete=models.CASCADE, related_name='leave_balances')
    leave_type = models.CharField(max_length=50)
    balance = models.PositiveIntegerField(default=0, help_text="Days available")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'leave_balances'
        ordering = ['employee', 'leave_type']
        unique_together = [['employee', 'leave_type']]

    def __str__(self):
        return f"{self.employee} {self.leave_type}: {self.balance}"


class LeaveRequest(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]

    employee = models.ForeignKey('core.User', on_delete=models.CASCADE, related_name='leave_requests')
    leave_type = models.CharField(max_length=50)
    from_date = models.DateField()
    to_date = models.DateField()
    days = models.PositiveIntegerField(help_text="Inclusive day count")
    reason = models.TextField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    approved_by = models.ForeignKey(
        'core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='leave_decisions'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'leave_requests'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['employee', 'status'], name='idx_leave_employee_status'),
            models.Index(fields=['status', '-created_at'], name='idx_leave_status_created'),
        ]

    def __str__(self):
        return f"{self.employee} {self.leave_type} {self.from_date} - {self.to_date} ({self.status})"
