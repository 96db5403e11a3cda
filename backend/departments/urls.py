"""
Departments app URL configuration.

  POST /api/departments/{id}/assign-employee/  → assign an employee
  POST /api/departments/remove-employee/       → detach an employee
"""

from rest_framework.routers import DefaultRouter

from .views import DepartmentViewSet

router = DefaultRouter()
router.register(
    prefix=r"departments",
    viewset=DepartmentViewSet,
    basename="department",
)

urlpatterns = router.urls
