import logging

from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bizhub.core.exceptions import InvalidStateTransition
from bizhub.core.pagination import paginate_queryset
from bizhub.core.utils import create_audit_log
from .builders import (
    DEFAULT_FOOTER, generate_ref_no, resolve_client_details, resolve_company_details, resolve_content_blocks,
)
from .models import Quotation, default_client_details, default_footer, default_signature
from .serializers import QuotationListSerializer, QuotationSerializer

logger = logging.getLogger(__name__)

COPY_FIELDS = ['quotation_type', 'ref_no', 'date', 'company_details', 'client_details', 'subject', 'greeting',
               'content_blocks', 'footer', 'signature', 'watermark', 'styles', 'answers', 'default_font_family']


def ensure_draft(quotation):
    if quotation.status != 'draft':
        raise InvalidStateTransition(
            f"Quotation is {quotation.status} and can no longer be edited",
            status=quotation.status
        )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def quotation_list_create(request):
    """List the user's quotations or create one from answers, blocks or pre-generated content"""
    if request.method == 'GET':
        queryset = Quotation.objects.filter(owner=request.user)
        search = request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.filter(Q(title__icontains=search) | Q(ref_no__icontains=search))
        queryset = queryset.order_by('-updated_at', '-id')
        return Response(paginate_queryset(request, queryset, QuotationListSerializer, default_limit=20, max_limit=100))

    body = request.data
    if not isinstance(body, dict):
        return Response({'error': 'Request body must be a JSON object'}, status=status.HTTP_400_BAD_REQUEST)
    answers = body.get('answers') or {}
    ai_data = body.get('ai_data') or {}
    if not isinstance(answers, dict) or not isinstance(ai_data, dict):
        return Response({'error': 'answers and ai_data must be objects'}, status=status.HTTP_400_BAD_REQUEST)

    quotation_type = body.get('type') or body.get('quotation_type') or 'manual'
    is_automated = quotation_type == 'automated'
    title = body.get('title') or 'New Quotation'

    footer = default_footer()
    footer.update({
        'line1': ai_data.get('footer_line1') or DEFAULT_FOOTER['line1'],
        'line2': ai_data.get('footer_line2') or DEFAULT_FOOTER['line2'],
        'line3': ai_data.get('footer_line3') or DEFAULT_FOOTER['line3'],
    })
    signature = default_signature()
    signature.update(ai_data.get('signature') or {})

    data = {
        'quotation_type': quotation_type,
        'title': title,
        'ref_no': body.get('ref_no') or generate_ref_no(),
        'date': body.get('date') or timezone.localdate().strftime('%d/%m/%Y'),
        'company_details': body.get('company_details') or resolve_company_details(is_automated, answers, ai_data),
        'client_details': body.get('client_details') or resolve_client_details(is_automated, answers) or default_client_details(),
        'subject': answers.get('project_subject') or body.get('subject') or title,
        'greeting': ai_data.get('greeting') or body.get('greeting') or 'Dear Sir,',
        'content_blocks': resolve_content_blocks(body.get('content_blocks'), ai_data, body.get('pages'), answers),
        'footer': body.get('footer') or footer,
        'signature': body.get('signature') or signature,
        'answers': answers,
    }
    for field in ('watermark', 'styles', 'default_font_family'):
        if field in body:
            data[field] = body[field]

    serializer = QuotationSerializer(data=data)
    serializer.is_valid(raise_exception=True)
    quotation = serializer.save(owner=request.user)

    create_audit_log(
        request=request,
        action='create',
        model_name='Quotation',
        object_id=str(quotation.id),
        object_name=quotation.title,
        object_reference=quotation.ref_no,
        changes={'type': quotation.quotation_type, 'blocks': len(quotation.content_blocks)}
    )
    logger.info(f"Quotation {quotation.ref_no} created by {request.user.username}")
    return Response(QuotationSerializer(quotation).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def quotation_detail(request, pk):
    """Retrieve, edit (drafts only) or delete one of the user's quotations"""
    quotation = get_object_or_404(Quotation, pk=pk, owner=request.user)

    if request.method == 'GET':
        return Response(QuotationSerializer(quotation).data)

    if request.method in ('PUT', 'PATCH'):
        ensure_draft(quotation)
        serializer = QuotationSerializer(quotation, data=request.data, partial=request.method == 'PATCH')
        serializer.is_valid(raise_exception=True)
        quotation = serializer.save()
        create_audit_log(
            request=request,
            action='update',
            model_name='Quotation',
            object_id=str(quotation.id),
            object_name=quotation.title,
            object_reference=quotation.ref_no,
            changes={'fields': sorted(serializer.validated_data.keys())}
        )
        return Response(QuotationSerializer(quotation).data)

    quotation_id = quotation.id
    create_audit_log(
        request=request,
        action='delete',
        model_name='Quotation',
        object_id=str(quotation_id),
        object_name=quotation.title,
        object_reference=quotation.ref_no,
    )
    quotation.delete()
    logger.info(f"Quotation {quotation_id} deleted by {request.user.username}")
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def quotation_duplicate(request, pk):
    """Copy a quotation into a new draft"""
    source = get_object_or_404(Quotation, pk=pk, owner=request.user)
    copy = Quotation(owner=request.user, title=f"Copy of {source.title}", status='draft')
    for field in COPY_FIELDS:
        setattr(copy, field, getattr(source, field))
    copy.save()

    create_audit_log(
        request=request,
        action='create',
        model_name='Quotation',
        object_id=str(copy.id),
        object_name=copy.title,
        object_reference=copy.ref_no,
        changes={'duplicated_from': source.id}
    )
    return Response(QuotationSerializer(copy).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def quotation_finalize(request, pk):
    """Lock a draft quotation against further edits"""
    quotation = get_object_or_404(Quotation, pk=pk, owner=request.user)
    ensure_draft(quotation)
    quotation.status = 'finalized'
    quotation.save(update_fields=['status', 'updated_at'])

    create_audit_log(
        request=request,
        action='quotation_finalize',
        model_name='Quotation',
        object_id=str(quotation.id),
        object_name=quotation.title,
        object_reference=quotation.ref_no,
        changes={'status': {'old': 'draft', 'new': 'finalized'}}
    )
    logger.info(f"Quotation {quotation.ref_no} finalized by {request.user.username}")
    return Response(QuotationSerializer(quotation).data)
