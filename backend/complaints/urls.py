"""
Complaints app URL configuration.

All routes are registered under the ``/api/complaints/`` prefix.

Route Hierarchy
---------------
  /api/complaints/                        → list / create
  /api/complaints/{id}/                   → retrieve / partial_update / destroy
  GET  /api/complaints/statistics/        → per-status counts

  ── Processing lock @actions ────────────────────────────────────
  POST /api/complaints/{id}/lock/
  POST /api/complaints/{id}/unlock/
  POST /api/complaints/{id}/renew-lock/

  ── Sub-resource @actions ───────────────────────────────────────
  POST /api/complaints/{id}/comments/
"""

from rest_framework.routers import DefaultRouter

from .views import ComplaintViewSet

router = DefaultRouter()
router.register(
    prefix=r"complaints",
    viewset=ComplaintViewSet,
    basename="complaint",
)

urlpatterns = router.urls
