from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import EntryViewSet

router = DefaultRouter()
router.trailing_slash = "/?"  # /entries/2025-07-18 와 /entries/2025-07-18/ 둘 다 허용
router.register("entries", EntryViewSet, basename="entry")

urlpatterns = [
    path("", include(router.urls)),
]
