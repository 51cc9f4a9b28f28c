"""Order routes.

Besides the list/detail routes the viewset adds ``account/<id>/``,
``large/``, ``summary/``, ``report/`` and ``top/`` under ``orders/``.
"""

from __future__ import annotations

from rest_framework.routers import SimpleRouter

from modules.orders.views import OrderViewSet

router = SimpleRouter()
router.register("orders", OrderViewSet, basename="order")

urlpatterns = router.urls
