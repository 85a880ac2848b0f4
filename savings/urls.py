from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    CurrentSavingsTargetView,
    MemberSavingsTargetListView,
    QuarterViewSet,
)

router = DefaultRouter()
router.register("quarters", QuarterViewSet, basename="quarter")

urlpatterns = [
    path("targets/", MemberSavingsTargetListView.as_view(), name="savings-target-list"),
    path("targets/current/", CurrentSavingsTargetView.as_view(), name="savings-target-current"),
    path("", include(router.urls)),
]
