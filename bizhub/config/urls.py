"""
URL configuration for the bizhub back office.

Every app mounts its routes under api/v1/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "BizHub Back Office Admin"
admin.site.site_title = "BizHub Admin Portal"
admin.site.index_title = "Welcome to the BizHub Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('bizhub.core.urls')),
    path('api/v1/', include('bizhub.inventory.urls')),
    path('api/v1/', include('bizhub.sales.urls')),
    path('api/v1/', include('bizhub.analytics.urls')),
    path('api/v1/', include('bizhub.quotations.urls')),
    path('api/v1/', include('bizhub.hr.urls')),
    path('api/v1/', include('bizhub.presentations.urls')),
    re_path(r'^static/(?P<path>.*)$', serve, {'document_root': settings.STATIC_ROOT}),
]
