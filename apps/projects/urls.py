from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import PaymentApprovalViewSet, ProjectViewSet

router = DefaultRouter()
router.register(r"projects", ProjectViewSet, basename="projects")
router.register(r"payment-approvals", PaymentApprovalViewSet, basename="payment-approvals")

urlpatterns = [
    path("", include(router.urls)),
]
