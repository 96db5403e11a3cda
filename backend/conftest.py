"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_user`` factory fixture for creating test users.
  - ``create_department`` factory fixture.
  - ``auth_header`` fixture for authenticated requests (JWT).
"""

from __future__ import annotations

import pytest
from rest_framework.test import APIClient


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def create_department(db):
    """
    Factory fixture that creates a department.

    Usage::

        def test_something(create_department):
            dept = create_department(name="Water Authority")
    """
    from departments.models import Department

    _counter = 0

    def _factory(*, name: str | None = None, is_active: bool = True, **kwargs) -> Department:
        nonlocal _counter
        _counter += 1
        if name is None:
            name = f"Department {_counter}"
        return Department.objects.create(name=name, is_active=is_active, **kwargs)

    return _factory


@pytest.fixture()
def create_user(db):
    """
    Factory fixture that creates a user with sensible defaults.

    Usage::

        def test_something(create_user):
            citizen = create_user(username="alice")
            employee = create_user(role=UserRole.EMPLOYEE, department=dept)
    """
    from accounts.models import User, UserRole

    _counter = 0

    def _factory(
        *,
        username: str | None = None,
        password: str = "TestPass123!",
        email: str | None = None,
        phone_number: str | None = None,
        role=UserRole.CITIZEN,
        department=None,
        is_active: bool = True,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if username is None:
            username = f"testuser{_counter}"
        if email is None:
            email = f"{username}@test.local"
        if phone_number is None:
            phone_number = f"0912{_counter:07d}"

        return User.objects.create_user(
            username=username,
            password=password,
            email=email,
            phone_number=phone_number,
            role=role,
            department=department,
            is_active=is_active,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def auth_header(create_user):
    """
    Returns a helper that creates a user and an ``Authorization`` header
    dict carrying a valid JWT access token for it.

    Usage::

        def test_protected(auth_header, api_client):
            user, header = auth_header(role=UserRole.EMPLOYEE, department=dept)
            api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])
            resp = api_client.get("/api/complaints/")
            assert resp.status_code == 200
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(**user_kwargs):
        user = create_user(**user_kwargs)
        token = AccessToken.for_user(user)
        return user, {"Authorization": f"Bearer {token}"}

    return _make
