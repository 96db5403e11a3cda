"""
Complaints app ViewSets.

Architecture: Views are intentionally thin.
Every view follows the strict three-step pattern:

    1. Parse / validate input via a serializer.
    2. Delegate all business logic to the appropriate service class.
    3. Serialize the result and return a DRF ``Response``.

Domain exceptions raised by the services are translated to HTTP status
codes by ``core.domain.exception_handler``.

ViewSets
--------
- ``ComplaintViewSet`` — CRUD plus the lock, comment and statistics
  actions.
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from core.domain.access import Principal

from .serializers import (
    ComplaintCommentCreateSerializer,
    ComplaintCommentSerializer,
    ComplaintCreateSerializer,
    ComplaintDetailSerializer,
    ComplaintFilterSerializer,
    ComplaintListSerializer,
    ComplaintLockSerializer,
    ComplaintStatisticsSerializer,
    ComplaintUpdateSerializer,
)
from .services import (
    ComplaintLifecycleService,
    ComplaintLockService,
    ComplaintQueryService,
)

_LOCK_RESPONSES = {
    200: OpenApiResponse(response=ComplaintLockSerializer, description="Current lock state."),
    403: OpenApiResponse(description="Caller may not process this complaint."),
    404: OpenApiResponse(description="Complaint not found."),
}


class ComplaintViewSet(viewsets.ViewSet):
    """
    Central ViewSet for the complaints app.

    Permission Strategy
    -------------------
    The base permission is ``IsAuthenticated``.  Role and department
    checks happen exclusively in the service layer through
    ``core.domain.access``.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"[0-9]+"

    def _principal(self, request: Request) -> Principal:
        return Principal.from_user(request.user)

    def _detail(self, complaint_id, principal: Principal, *, check_access: bool = True) -> dict:
        complaint = ComplaintQueryService.get_complaint(
            complaint_id, principal, check_access=check_access,
        )
        return ComplaintDetailSerializer(complaint).data

    # ── Standard CRUD ────────────────────────────────────────────────

    @extend_schema(
        summary="List complaints",
        description=(
            "Paginated list of complaints visible to the caller. Citizens see "
            "their own, employees their department's, admins everything."
        ),
        parameters=[
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY, description="Filter by status."),
            OpenApiParameter(name="department", type=int, location=OpenApiParameter.QUERY, description="Filter by department PK."),
            OpenApiParameter(name="citizen", type=int, location=OpenApiParameter.QUERY, description="Filter by citizen PK."),
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY, description="Match reference number, description or type."),
            OpenApiParameter(name="page", type=int, location=OpenApiParameter.QUERY, description="1-based page (default 1)."),
            OpenApiParameter(name="limit", type=int, location=OpenApiParameter.QUERY, description="Page size (default 10)."),
        ],
        responses={200: OpenApiResponse(description="`{items: [...], meta: {total, page, limit, total_pages}}`.")},
        tags=["Complaints"],
    )
    def list(self, request: Request) -> Response:
        """
        GET /api/complaints/
        """
        filter_serializer = ComplaintFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        page = ComplaintQueryService.list_complaints(
            self._principal(request),
            filter_serializer.validated_data,
        )
        return Response(
            {
                "items": ComplaintListSerializer(page["items"], many=True).data,
                "meta": page["meta"],
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        summary="File a complaint",
        description="Citizen only. The complaint is created NEW with a fresh reference number.",
        request=ComplaintCreateSerializer,
        responses={
            201: OpenApiResponse(response=ComplaintDetailSerializer, description="Complaint created."),
            400: OpenApiResponse(description="Validation error."),
            403: OpenApiResponse(description="Caller is not a citizen."),
        },
        tags=["Complaints"],
    )
    def create(self, request: Request) -> Response:
        """
        POST /api/complaints/
        """
        serializer = ComplaintCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        principal = self._principal(request)

        complaint = ComplaintLifecycleService.create_complaint(serializer.validated_data, principal)
        return Response(self._detail(complaint.pk, principal), status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Retrieve a complaint",
        description="Complaint with its comments and history. Internal notes are hidden from citizens.",
        responses={
            200: OpenApiResponse(response=ComplaintDetailSerializer, description="Complaint detail."),
            403: OpenApiResponse(description="Complaint is outside the caller's scope."),
            404: OpenApiResponse(description="Complaint not found."),
        },
        tags=["Complaints"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        """
        GET /api/complaints/{id}/
        """
        return Response(self._detail(pk, self._principal(request)), status=status.HTTP_200_OK)

    @extend_schema(
        summary="Update a complaint",
        description=(
            "Change status, department and/or assigned employee. Employees of the "
            "complaint's department and admins only. Blocked while another user "
            "holds the processing lock."
        ),
        request=ComplaintUpdateSerializer,
        responses={
            200: OpenApiResponse(response=ComplaintDetailSerializer, description="Updated complaint."),
            403: OpenApiResponse(description="Caller may not process this complaint."),
            404: OpenApiResponse(description="Complaint not found."),
            409: OpenApiResponse(description="Locked by another user."),
        },
        tags=["Complaints"],
    )
    def partial_update(self, request: Request, pk: str = None) -> Response:
        """
        PATCH /api/complaints/{id}/
        """
        serializer = ComplaintUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        principal = self._principal(request)

        ComplaintLifecycleService.update_complaint(pk, serializer.validated_data, principal)
        return Response(self._detail(pk, principal, check_access=False), status=status.HTTP_200_OK)

    @extend_schema(
        summary="Delete a complaint",
        description="Admin only. Removes the complaint with its comments and history.",
        responses={
            204: OpenApiResponse(description="Deleted."),
            403: OpenApiResponse(description="Caller is not an admin."),
            404: OpenApiResponse(description="Complaint not found."),
        },
        tags=["Complaints"],
    )
    def destroy(self, request: Request, pk: str = None) -> Response:
        """
        DELETE /api/complaints/{id}/
        """
        ComplaintLifecycleService.delete_complaint(pk, self._principal(request))
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ── Processing lock ──────────────────────────────────────────────

    @extend_schema(
        summary="Lock a complaint for processing",
        request=None,
        responses={**_LOCK_RESPONSES, 409: OpenApiResponse(description="Locked by another user.")},
        tags=["Complaint Lock"],
    )
    @action(detail=True, methods=["post"], url_path="lock")
    def lock(self, request: Request, pk: str = None) -> Response:
        """
        POST /api/complaints/{id}/lock/
        """
        complaint = ComplaintLockService.acquire(pk, self._principal(request))
        return Response(ComplaintLockSerializer(complaint).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Release the processing lock",
        request=None,
        responses=_LOCK_RESPONSES,
        tags=["Complaint Lock"],
    )
    @action(detail=True, methods=["post"], url_path="unlock")
    def unlock(self, request: Request, pk: str = None) -> Response:
        """
        POST /api/complaints/{id}/unlock/
        """
        complaint = ComplaintLockService.release(pk, self._principal(request))
        return Response(ComplaintLockSerializer(complaint).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Extend the processing lock",
        request=None,
        responses={**_LOCK_RESPONSES, 409: OpenApiResponse(description="Caller holds no live lock.")},
        tags=["Complaint Lock"],
    )
    @action(detail=True, methods=["post"], url_path="renew-lock")
    def renew_lock(self, request: Request, pk: str = None) -> Response:
        """
        POST /api/complaints/{id}/renew-lock/
        """
        complaint = ComplaintLockService.renew(pk, self._principal(request))
        return Response(ComplaintLockSerializer(complaint).data, status=status.HTTP_200_OK)

    # ── Comments ─────────────────────────────────────────────────────

    @extend_schema(
        summary="Comment on a complaint",
        description="Anyone who can view the complaint may comment. Only staff may add internal notes.",
        request=ComplaintCommentCreateSerializer,
        responses={
            201: OpenApiResponse(response=ComplaintCommentSerializer, description="Comment created."),
            403: OpenApiResponse(description="No access, or a citizen posting an internal note."),
            404: OpenApiResponse(description="Complaint not found."),
        },
        tags=["Complaints"],
    )
    @action(detail=True, methods=["post"], url_path="comments")
    def comments(self, request: Request, pk: str = None) -> Response:
        """
        POST /api/complaints/{id}/comments/
        """
        serializer = ComplaintCommentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        comment = ComplaintLifecycleService.add_comment(
            pk,
            serializer.validated_data["content"],
            serializer.validated_data["is_internal"],
            self._principal(request),
        )
        return Response(ComplaintCommentSerializer(comment).data, status=status.HTTP_201_CREATED)

    # ── Statistics ───────────────────────────────────────────────────

    @extend_schema(
        summary="Complaint statistics",
        description="Per-status counts in the caller's scope. Employees and admins only.",
        responses={
            200: OpenApiResponse(response=ComplaintStatisticsSerializer, description="Counts."),
            403: OpenApiResponse(description="Caller is a citizen."),
        },
        tags=["Complaints"],
    )
    @action(detail=False, methods=["get"], url_path="statistics")
    def statistics(self, request: Request) -> Response:
        """
        GET /api/complaints/statistics/
        """
        stats = ComplaintQueryService.get_statistics(self._principal(request))
        return Response(ComplaintStatisticsSerializer(stats).data, status=status.HTTP_200_OK)
