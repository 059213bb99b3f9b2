from django.urls import path
from .views import workspace_list_create, workspace_detail, workspace_slide_update

urlpatterns = [
    path('presentations/', workspace_list_create, name='workspace-list-create'),
    path('presentations/<int:pk>/', workspace_detail, name='workspace-detail'),
    path('presentations/<int:pk>/slides/<int:index>/', workspace_slide_update, name='workspace-slide-update'),
]
