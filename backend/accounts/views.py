"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers, delegate to the service layer, and return the result
wrapped in a DRF ``Response``.  **No business logic** resides here.

View Map
--------
- ``UserViewSet`` — POST /users/  (admin account provisioning)
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from core.domain.access import Principal

from .serializers import AccountCreateSerializer, UserDetailSerializer
from .services import AccountProvisioningService


class UserViewSet(viewsets.ViewSet):
    """
    Account provisioning for administrators.

    Listing / editing users is a directory concern handled elsewhere.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Create an account",
        description=(
            "Create a citizen, employee or admin account. Admin only. "
            "The new user receives an ACCOUNT_CREATED notification."
        ),
        request=AccountCreateSerializer,
        responses={
            201: OpenApiResponse(response=UserDetailSerializer, description="Account created."),
            403: OpenApiResponse(description="Caller is not an admin."),
            409: OpenApiResponse(description="Username, email or phone number already taken."),
        },
        tags=["Accounts"],
    )
    def create(self, request: Request) -> Response:
        """
        POST /api/accounts/users/
        """
        serializer = AccountCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = AccountProvisioningService.create_account(
            serializer.validated_data,
            Principal.from_user(request.user),
        )
        return Response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)
