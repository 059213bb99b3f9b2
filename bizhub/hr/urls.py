from django.urls import path
from .views import leave_policy, leave_list_create, leave_decision, leave_balances

urlpatterns = [
    path('hr/leave-policy/', leave_policy, name='leave-policy'),
    path('hr/leaves/', leave_list_create, name='leave-list-create'),
    path('hr/leaves/<int:pk>/decision/', leave_decision, name='leave-decision'),
    path('hr/leave-balances/', leave_balances, name='leave-balances'),
]
