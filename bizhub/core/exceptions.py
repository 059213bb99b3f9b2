"""
Business-rule exceptions and the project-wide DRF exception handler
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


class BusinessRuleError(Exception):
    """A request that is well-formed but breaks a business rule"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'business_rule_violation'

    def __init__(self, message, code=None, **details):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details

    def as_payload(self):
        payload = {'error': self.message, 'code': self.code}
        payload.update(self.details)
        return payload


class InsufficientStockError(BusinessRuleError):
    status_code = status.HTTP_409_CONFLICT
    default_code = 'insufficient_stock'


class InvalidStateTransition(BusinessRuleError):
    status_code = status.HTTP_409_CONFLICT
    default_code = 'invalid_transition'


def api_exception_handler(exc, context):
    """
    Wrap DRF's handler:
    - BusinessRuleError -> its status with {'error', 'code', ...details}
    - DRF/Django HTTP errors -> DRF's default body
    - anything else -> logged with traceback, 500 JSON body
    """
    if isinstance(exc, BusinessRuleError):
        set_rollback()
        return Response(exc.as_payload(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get('view')
    view_name = getattr(view, '__name__', None) or view.__class__.__name__
    logger.exception(f"Unhandled error in {view_name}: {str(exc)}")
    set_rollback()
    return Response(
        {'error': 'Internal server error', 'detail': str(exc)},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )
