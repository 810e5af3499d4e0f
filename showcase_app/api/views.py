import logging
import os
import uuid
from rest_framework import status
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.generics import ListAPIView
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from core.utils import email as mailer
from core.utils.permissions import IsTrustedWebConnect
from quiz_app.services import storage as blob_storage
from quiz_app.services.images import content_type_for
from showcase_app.api.serializers import (
    ActiveStatusSerializer,
    FeaturedStatusSerializer,
    WebsiteConnectionCreateSerializer,
    WebsiteConnectionSerializer,
)
from showcase_app.models import WebsiteConnection

logger = logging.getLogger(__name__)

BANNER_CONTAINER = 'website-connections'


def _notify(user, render, title):
    """Sends a showcase notification; a mail failure is logged and never fails the request"""
    if not user.email:
        return
    subject, html = render(user.get_username(), title)
    try:
        mailer.send_html_email(user.email, subject, html)
    except mailer.EmailSendError:
        logger.warning('Showcase notification "%s" to User(%s) failed.', subject, user.id)


def _get_connection(pk) -> WebsiteConnection:
    connection = WebsiteConnection.objects.select_related('user').filter(pk=pk).first()
    if connection is None:
        raise NotFound('Website connection not found.')
    return connection


class WebsiteConnectionListCreateView(APIView):
    """
    GET  /api/connections/  all submissions (staff only)
    POST /api/connections/  submit a project with a banner (trusted web connect members)

    POST responses:
      - 201: stored, inactive until approved; confirmation email sent (best effort).
      - 400: missing fields or banner.
      - 500: banner upload failed.
    """

    def get_permissions(self):
        if self.request.method == 'GET':
            return [IsAdminUser()]
        return [IsTrustedWebConnect()]

    def get(self, request):
        connections = WebsiteConnection.objects.select_related('user').all()
        return Response(WebsiteConnectionSerializer(connections, many=True).data, status=status.HTTP_200_OK)

    def post(self, request):
        serializer = WebsiteConnectionCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        banner = data['banner']
        blob_name = f'{uuid.uuid4().hex}{os.path.splitext(banner.name)[1].lower()}'
        try:
            image_path = blob_storage.get_storage().upload(
                BANNER_CONTAINER, blob_name, banner, content_type=content_type_for(banner.name)
            )
        except blob_storage.BlobStorageError:
            logger.exception('Banner upload for User(%s) failed.', request.user.id)
            return Response(
                {'success': False, 'message': 'Failed to upload banner.'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        connection = WebsiteConnection.objects.create(
            title=data['title'],
            link=data['link'],
            github_link=data['githubLink'],
            description=data['description'],
            image_path=image_path,
            user=request.user,
        )
        logger.info('User(%s) submitted WebsiteConnection(%s).', request.user.id, connection.id)
        _notify(request.user, mailer.render_submission_email, connection.title)
        return Response(WebsiteConnectionSerializer(connection).data, status=status.HTTP_201_CREATED)


class ActiveConnectionsView(ListAPIView):
    """GET /api/connections/active/ - approved projects"""
    permission_classes = [AllowAny]
    serializer_class = WebsiteConnectionSerializer

    def get_queryset(self):
        return WebsiteConnection.objects.select_related('user').filter(is_active=True)


class FeaturedConnectionsView(ActiveConnectionsView):
    """GET /api/connections/featured/"""

    def get_queryset(self):
        return super().get_queryset().filter(is_featured=True)


class OwnedConnectionsView(ListAPIView):
    """GET /api/connections/owned/ - submissions of the authenticated user, approved or not"""
    permission_classes = [IsAuthenticated]
    serializer_class = WebsiteConnectionSerializer

    def get_queryset(self):
        return WebsiteConnection.objects.select_related('user').filter(user=self.request.user)


class ConnectionStatusView(APIView):
    """
    POST /api/connections/{id}/status/ {isActive}
    Approves or removes a project and notifies its owner (staff only).
    """
    permission_classes = [IsAdminUser]

    def post(self, request, pk):
        connection = _get_connection(pk)
        serializer = ActiveStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        connection.is_active = serializer.validated_data['isActive']
        connection.save(update_fields=['is_active'])
        render = mailer.render_approval_email if connection.is_active else mailer.render_removal_email
        _notify(connection.user, render, connection.title)
        return Response(WebsiteConnectionSerializer(connection).data, status=status.HTTP_200_OK)


class ConnectionFeatureView(APIView):
    """POST /api/connections/{id}/feature/ {isFeatured} (staff only)"""
    permission_classes = [IsAdminUser]

    def post(self, request, pk):
        connection = _get_connection(pk)
        serializer = FeaturedStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        connection.is_featured = serializer.validated_data['isFeatured']
        connection.save(update_fields=['is_featured'])
        return Response(WebsiteConnectionSerializer(connection).data, status=status.HTTP_200_OK)


class ConnectionDetailView(APIView):
    """DELETE /api/connections/{id}/ - owner or staff; the banner blob delete is best effort"""
    permission_classes = [IsAuthenticated]

    def delete(self, request, pk):
        connection = _get_connection(pk)
        if not request.user.is_staff and connection.user_id != request.user.id:
            raise PermissionDenied('You do not have permission to delete this project.')

        location = blob_storage.parse_blob_url(connection.image_path)
        if location is not None:
            try:
                blob_storage.get_storage().delete(*location)
            except blob_storage.BlobStorageError as exc:
                logger.warning('Banner delete for WebsiteConnection(%s) failed: %s', connection.id, exc)
        connection.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
