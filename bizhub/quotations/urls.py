from django.urls import path
from .views import quotation_list_create, quotation_detail, quotation_duplicate, quotation_finalize

urlpatterns = [
    path('quotations/', quotation_list_create, name='quotation-list-create'),
    path('quotations/<int:pk>/', quotation_detail, name='quotation-detail'),
    path('quotations/<int:pk>/duplicate/', quotation_duplicate, name='quotation-duplicate'),
    path('quotations/<int:pk>/finalize/', quotation_finalize, name='quotation-finalize'),
]
