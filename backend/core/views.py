"""
Core app views — **Thin Views**.

Each view delegates all business logic to the corresponding service in
``core.services``.  Views are responsible only for:

1. Extracting and validating query parameters from the request.
2. Calling the service with the authenticated principal and parameters.
3. Serialising the result and returning an HTTP ``Response``.
"""

from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)

from core.domain.access import Principal

from .serializers import (
    NotificationFilterSerializer,
    NotificationSerializer,
    SystemConstantsSerializer,
)
from .services import NotificationInboxService, SystemConstantsService


class SystemConstantsView(APIView):
    """
    **GET /api/core/constants/**

    Return the system-wide choice enumerations so the frontend can build
    dropdowns, filters and labels without hardcoding values.

    **Authentication**: Not required (``AllowAny``).
    These constants are public configuration data.
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="System constants",
        description=(
            "Return complaint statuses, roles, notification types, history "
            "actions, the priority range and the lock lease length."
        ),
        responses={200: OpenApiResponse(response=SystemConstantsSerializer, description="System constants.")},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        data = SystemConstantsService.get_constants()
        serializer = SystemConstantsSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)


class NotificationViewSet(viewsets.ViewSet):
    """
    **Notification API** — the authenticated user's inbox.

    Endpoints
    ---------
    GET  /api/core/notifications/    → list own notifications

    **Authentication**: Required (``IsAuthenticated``).
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List notifications",
        description="Return all notifications addressed to the authenticated user, newest first.",
        parameters=[
            OpenApiParameter(name="complaint", type=int, location=OpenApiParameter.QUERY, description="Only notifications about this complaint."),
        ],
        responses={200: OpenApiResponse(response=NotificationSerializer(many=True), description="Notification list.")},
        tags=["Notifications"],
    )
    def list(self, request: Request) -> Response:
        """
        GET /api/core/notifications/
        """
        filter_serializer = NotificationFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        service = NotificationInboxService(Principal.from_user(request.user))
        notifications = service.list_notifications(
            complaint_id=filter_serializer.validated_data.get("complaint"),
        )
        serializer = NotificationSerializer(notifications, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)
