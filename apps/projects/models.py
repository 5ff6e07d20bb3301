"""
Projects and the ways users relate to them: membership, follow/precommit
connections and pre-approved payments from backers.
"""
from django.conf import settings
from django.db import models
from django.utils import timezone


class Project(models.Model):
    creator = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                related_name="created_projects")
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    pitchdeck_url = models.URLField(max_length=1024, blank=True, null=True)
    # set once Box has accepted the pitch deck for viewing
    box_api_doc_id = models.CharField(max_length=255, blank=True, null=True)
    goal_cents = models.BigIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    members = models.ManyToManyField(settings.AUTH_USER_MODEL, through="UserProject", related_name="projects")

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    def followers(self):
        return [c.user for c in self.connections.filter(type_of=Connection.Type.FOLLOWER).select_related("user")]

    def pledged_cents(self) -> int:
        total = self.payment_approvals.filter(
            state=PaymentApproval.State.APPROVED
        ).aggregate(total=models.Sum("amount_cents"))["total"]
        return total or 0


class UserProject(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="user_projects")
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="user_projects")
    role = models.CharField(max_length=50, default="collaborator")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "project"], name="projects_userproject_unique"),
        ]


class Connection(models.Model):
    class Type(models.TextChoices):
        FOLLOWER = "follower", "Follower"
        PRECOMMITTED = "precommitted", "Precommitted"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="connections")
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="connections")
    type_of = models.CharField(max_length=32, choices=Type.choices, db_index=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [models.Index(fields=["user", "type_of"], name="proj_conn_user_type_idx")]
        constraints = [
            models.UniqueConstraint(fields=["user", "project", "type_of"], name="projects_connection_unique"),
        ]

    def __str__(self):
        return f"{self.user_id} {self.type_of} {self.project_id}"


class PaymentApproval(models.Model):
    """A backer's pre-approved payment (WePay preapproval) for a project."""

    class State(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        CAPTURED = "captured", "Captured"
        CANCELLED = "cancelled", "Cancelled"

    backer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="payment_approvals")
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="payment_approvals")
    amount_cents = models.PositiveBigIntegerField()
    preapproval_id = models.CharField(max_length=255, blank=True, null=True)
    state = models.CharField(max_length=32, choices=State.choices, default=State.PENDING, db_index=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=["project", "state"], name="proj_pay_project_state_idx")]
