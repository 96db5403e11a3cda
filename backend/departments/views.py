"""
Departments app views.

Thin views: validate, delegate to ``DepartmentStaffService``, serialize.

ViewSets
--------
- ``DepartmentViewSet`` — employee assignment @actions.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from accounts.serializers import UserDetailSerializer
from core.domain.access import Principal

from .serializers import EmployeeReferenceSerializer
from .services import DepartmentStaffService


class DepartmentViewSet(viewsets.ViewSet):
    """
    Department staffing endpoints.  Admin only (enforced in the service).
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"[0-9]+"

    @extend_schema(
        summary="Assign an employee to a department",
        request=EmployeeReferenceSerializer,
        responses={
            200: OpenApiResponse(response=UserDetailSerializer, description="Employee assigned."),
            400: OpenApiResponse(description="Citizen user or inactive department."),
            403: OpenApiResponse(description="Caller is not an admin."),
            404: OpenApiResponse(description="User or department not found."),
        },
        tags=["Departments"],
    )
    @action(detail=True, methods=["post"], url_path="assign-employee")
    def assign_employee(self, request: Request, pk: str = None) -> Response:
        """
        POST /api/departments/{id}/assign-employee/
        """
        serializer = EmployeeReferenceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = DepartmentStaffService.assign_employee(
            int(pk),
            serializer.validated_data["user"],
            Principal.from_user(request.user),
        )
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Remove an employee from their department",
        request=EmployeeReferenceSerializer,
        responses={
            200: OpenApiResponse(response=UserDetailSerializer, description="Employee removed."),
            400: OpenApiResponse(description="User is not assigned to a department."),
            403: OpenApiResponse(description="Caller is not an admin."),
            404: OpenApiResponse(description="User not found."),
        },
        tags=["Departments"],
    )
    @action(detail=False, methods=["post"], url_path="remove-employee")
    def remove_employee(self, request: Request) -> Response:
        """
        POST /api/departments/remove-employee/
        """
        serializer = EmployeeReferenceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = DepartmentStaffService.remove_employee(
            serializer.validated_data["user"],
            Principal.from_user(request.user),
        )
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)
