from django.db import transaction
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from common.exceptions import ValidationFailed
from common.permissions import PolicyPermission
from common.policies import CREATE, UPDATE, authorize, policy_scope

from .models import Project, UserProject, Connection, PaymentApproval
from .serializers import (
    ConnectionSerializer,
    PaymentApprovalSerializer,
    ProjectSerializer,
    UserProjectSerializer,
)


@extend_schema_view(
    list=extend_schema(summary="List projects"),
    retrieve=extend_schema(summary="Retrieve project"),
    create=extend_schema(summary="Create project (members and admins)"),
    followed=extend_schema(summary="Projects I follow"),
    precommitted=extend_schema(summary="Projects I precommitted to"),
    invested=extend_schema(summary="Projects I have approved payments for"),
)
class ProjectViewSet(viewsets.ModelViewSet):
    serializer_class = ProjectSerializer
    permission_classes = (IsAuthenticated, PolicyPermission)
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["creator"]
    search_fields = ["title", "description"]
    ordering_fields = ["created_at", "title"]

    def get_queryset(self):
        return policy_scope(self.request.user, Project.objects.select_related("creator"))

    def perform_create(self, serializer):
        project = Project(creator=self.request.user, **serializer.validated_data)
        authorize(self.request.user, CREATE, project)
        with transaction.atomic():
            project = serializer.save(creator=self.request.user)
            UserProject.objects.create(user=self.request.user, project=project, role="founder")

    # ---------- connections ----------
    def _connect(self, request, type_of):
        project = self.get_object()
        connection, created = Connection.objects.get_or_create(user=request.user, project=project, type_of=type_of)
        return Response(ConnectionSerializer(connection).data,
                        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def follow(self, request, pk=None):
        return self._connect(request, Connection.Type.FOLLOWER)

    @action(detail=True, methods=["post"])
    def unfollow(self, request, pk=None):
        project = self.get_object()
        Connection.objects.filter(user=request.user, project=project, type_of=Connection.Type.FOLLOWER).delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def precommit(self, request, pk=None):
        return self._connect(request, Connection.Type.PRECOMMITTED)

    @action(detail=False, methods=["get"])
    def followed(self, request):
        return Response(self.get_serializer(request.user.followed_projects(), many=True).data)

    @action(detail=False, methods=["get"])
    def precommitted(self, request):
        return Response(self.get_serializer(request.user.precommitted_projects(), many=True).data)

    @action(detail=False, methods=["get"])
    def invested(self, request):
        return Response(self.get_serializer(request.user.projects_invested_in(), many=True).data)

    # ---------- membership ----------
    @action(detail=True, methods=["get", "post"], serializer_class=UserProjectSerializer)
    def members(self, request, pk=None):
        project = self.get_object()
        if request.method == "GET":
            return Response(UserProjectSerializer(project.user_projects.all(), many=True).data)
        authorize(request.user, UPDATE, project)
        serializer = UserProjectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if project.user_projects.filter(user=serializer.validated_data["user"]).exists():
            raise ValidationFailed({"user": ["Already a member of this project."]})
        serializer.save(project=project)
        return Response(serializer.data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    list=extend_schema(summary="List my payment approvals"),
    create=extend_schema(summary="Approve a payment to back a project"),
    cancel=extend_schema(summary="Cancel a pending or approved payment"),
)
class PaymentApprovalViewSet(mixins.ListModelMixin,
                             mixins.RetrieveModelMixin,
                             mixins.CreateModelMixin,
                             viewsets.GenericViewSet):
    serializer_class = PaymentApprovalSerializer
    permission_classes = (IsAuthenticated,)
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["project", "state"]

    def get_queryset(self):
        return PaymentApproval.objects.filter(backer=self.request.user).order_by("-created_at")

    def perform_create(self, serializer):
        serializer.save(backer=self.request.user, state=PaymentApproval.State.APPROVED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        approval = self.get_object()
        if approval.state == PaymentApproval.State.CAPTURED:
            raise ValidationFailed({"state": ["Captured payments cannot be cancelled."]})
        approval.state = PaymentApproval.State.CANCELLED
        approval.save(update_fields=["state", "updated_at"])
        return Response(self.get_serializer(approval).data)
