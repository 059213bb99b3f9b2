from django.contrib import admin
from .models import PresentationWorkspace


@admin.register(PresentationWorkspace)
class PresentationWorkspaceAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'slide_count', 'theme', 'status', 'created_at']
    list_filter = ['status', 'theme']
    search_fields = ['name', 'owner__username']
    readonly_fields = ['created_at', 'updated_at']
