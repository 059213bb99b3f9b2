import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bizhub.core.utils import create_audit_log
from .models import PresentationWorkspace
from .serializers import PresentationWorkspaceListSerializer, PresentationWorkspaceSerializer, SlideSerializer

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def workspace_list_create(request):
    """List the user's presentation workspaces or start a new one"""
    if request.method == 'GET':
        queryset = PresentationWorkspace.objects.filter(owner=request.user)
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        queryset = queryset.order_by('-created_at', '-id')
        return Response(PresentationWorkspaceListSerializer(queryset, many=True).data)

    serializer = PresentationWorkspaceSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    workspace = serializer.save(owner=request.user)

    create_audit_log(
        request=request,
        action='create',
        model_name='PresentationWorkspace',
        object_id=str(workspace.id),
        object_name=workspace.name,
        changes={'slide_count': workspace.slide_count, 'theme': workspace.theme}
    )
    logger.info(f"Presentation workspace {workspace.id} created by {request.user.username}")
    return Response(PresentationWorkspaceSerializer(workspace).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def workspace_detail(request, pk):
    """Retrieve, update or delete one of the user's workspaces"""
    workspace = get_object_or_404(PresentationWorkspace, pk=pk, owner=request.user)

    if request.method == 'GET':
        return Response(PresentationWorkspaceSerializer(workspace).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = PresentationWorkspaceSerializer(workspace, data=request.data, partial=request.method == 'PATCH')
        serializer.is_valid(raise_exception=True)
        workspace = serializer.save()
        return Response(PresentationWorkspaceSerializer(workspace).data)

    workspace_id = workspace.id
    create_audit_log(
        request=request,
        action='delete',
        model_name='PresentationWorkspace',
        object_id=str(workspace_id),
        object_name=workspace.name,
    )
    workspace.delete()
    logger.info(f"Presentation workspace {workspace_id} deleted by {request.user.username}")
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def workspace_slide_update(request, pk, index):
    """Edit one slide of the generated presentation"""
    workspace = get_object_or_404(PresentationWorkspace, pk=pk, owner=request.user)
    slides = workspace.slides
    if index >= len(slides):
        return Response({'error': 'Slide not found'}, status=status.HTTP_404_NOT_FOUND)
    if not isinstance(request.data, dict):
        return Response({'error': 'Request body must be a JSON object'}, status=status.HTTP_400_BAD_REQUEST)

    merged = dict(slides[index])
    merged.update(request.data)
    serializer = SlideSerializer(data=merged)
    serializer.is_valid(raise_exception=True)

    slides[index] = serializer.validated_data
    workspace.presentation['slides'] = slides
    workspace.save(update_fields=['presentation', 'updated_at'])
    return Response({'index': index, 'slide': serializer.validated_data, 'slide_total': len(slides)})
