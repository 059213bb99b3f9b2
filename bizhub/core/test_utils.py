"""
Test utilities and factories for creating test data
"""
import random
import string
from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from bizhub.hr.models import LeaveBalance, LeavePolicy
from bizhub.hr.services import DEFAULT_LEAVE_TYPES
from bizhub.inventory.models import Product
from bizhub.presentations.models import PresentationWorkspace
from bizhub.quotations.models import Quotation
from bizhub.sales.models import Cart
from bizhub.sales.services import generate_cart_number, record_sale

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_product(owner, name=None, sku=None, price=Decimal('100.00'), cost=Decimal('60.00'), quantity=10,
                       **extra):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if not sku:
            sku = f'SKU_{TestDataFactory.random_string(8)}'
        return Product.objects.create(
            owner=owner,
            name=name,
            sku=sku,
            price=price,
            cost=cost,
            quantity=quantity,
            **extra
        )

    @staticmethod
    def create_cart(owner, status='active', customer_name='Walk-in Customer'):
        """Create a test cart"""
        return Cart.objects.create(
            owner=owner,
            cart_number=generate_cart_number(),
            customer_name=customer_name,
            status=status
        )

    @staticmethod
    def create_sale(owner, product, quantity=1, amount_paid=None, **kwargs):
        """Record a sale of one product through the stock-taking service"""
        return record_sale(owner, [{'product': product, 'quantity': quantity}], amount_paid=amount_paid,
                           user=owner, **kwargs)

    @staticmethod
    def create_quotation(owner, title=None, status='draft', **extra):
        """Create a test quotation"""
        return Quotation.objects.create(
            owner=owner,
            title=title or f'Quotation {TestDataFactory.random_string(4)}',
            ref_no=f'REF-{random.randint(0, 999999):06d}',
            status=status,
            **extra
        )

    @staticmethod
    def create_leave_policy(leave_types=None, company_id='default'):
        """Create the company leave policy (defaults to the seeded leave types)"""
        if leave_types is None:
            leave_types = [dict(leave_type) for leave_type in DEFAULT_LEAVE_TYPES]
        return LeavePolicy.objects.create(company_id=company_id, leave_types=leave_types)

    @staticmethod
    def create_leave_balance(employee, leave_type='annual', balance=10):
        return LeaveBalance.objects.create(employee=employee, leave_type=leave_type, balance=balance)

    @staticmethod
    def create_workspace(owner, name=None, slides=None, **extra):
        """Create a presentation workspace, optionally with generated slides"""
        presentation = None
        if slides is not None:
            presentation = {'title': name or 'Deck', 'slides': slides}
        return PresentationWorkspace.objects.create(
            owner=owner,
            name=name or f'Deck {TestDataFactory.random_string(4)}',
            presentation=presentation,
            **extra
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
