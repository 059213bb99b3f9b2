from django.contrib import admin
from .models import Quotation


@admin.register(Quotation)
class QuotationAdmin(admin.ModelAdmin):
    list_display = ['title', 'ref_no', 'owner', 'quotation_type', 'status', 'updated_at']
    list_filter = ['quotation_type', 'status']
    search_fields = ['title', 'ref_no', 'owner__username']
    ordering = ['-updated_at']
    readonly_fields = ['created_at', 'updated_at']
