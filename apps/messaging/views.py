from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters, viewsets
from rest_framework.permissions import IsAuthenticated

from common.permissions import PolicyPermission
from common.policies import CREATE, authorize, policy_scope

from .models import Message
from .serializers import MessageSerializer


@extend_schema_view(
    list=extend_schema(summary="List messages visible to me"),
    create=extend_schema(summary="Write a message (members and admins)"),
    update=extend_schema(summary="Edit a message (author or admin)"),
    destroy=extend_schema(summary="Delete a message (author or admin)"),
)
class MessageViewSet(viewsets.ModelViewSet):
    serializer_class = MessageSerializer
    permission_classes = (IsAuthenticated, PolicyPermission)
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["subject", "body"]
    ordering_fields = ["created_at"]

    def get_queryset(self):
        return policy_scope(self.request.user, Message.objects.select_related("author", "recipient"))

    def perform_create(self, serializer):
        authorize(self.request.user, CREATE, Message(author=self.request.user, **serializer.validated_data))
        serializer.save(author=self.request.user)
