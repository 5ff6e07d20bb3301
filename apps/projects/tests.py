from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from apps.accounts.models import User
from common.policies import Decision, decide

from .models import Connection, PaymentApproval, Project, UserProject


class ProjectModelTests(TestCase):
    def setUp(self):
        self.founder = User.objects.create_user(email="founder@example.com", is_member=True)
        self.backer = User.objects.create_user(email="backer@example.com")
        self.project = Project.objects.create(creator=self.founder, title="Hackers Collective")

    def test_pledged_cents_counts_approved_only(self):
        PaymentApproval.objects.create(backer=self.backer, project=self.project, amount_cents=500,
                                       state=PaymentApproval.State.APPROVED)
        PaymentApproval.objects.create(backer=self.backer, project=self.project, amount_cents=700,
                                       state=PaymentApproval.State.CANCELLED)
        self.assertEqual(self.project.pledged_cents(), 500)

    def test_user_project_relations(self):
        UserProject.objects.create(user=self.founder, project=self.project, role="founder")
        self.assertEqual(self.founder.administered_project_ids(), [self.project.pk])
        self.assertEqual(self.founder.user_project(self.project).role, "founder")
        self.assertIsNone(self.backer.user_project(self.project))
        self.assertEqual(list(self.project.members.all()), [self.founder])

    def test_connections_by_type(self):
        Connection.objects.create(user=self.backer, project=self.project, type_of=Connection.Type.FOLLOWER)
        self.assertEqual(self.backer.followed_projects(), [self.project])
        self.assertEqual(self.backer.precommitted_projects(), [])
        self.assertEqual(self.project.followers(), [self.backer])

    def test_projects_invested_in(self):
        PaymentApproval.objects.create(backer=self.backer, project=self.project, amount_cents=100)
        PaymentApproval.objects.create(backer=self.backer, project=self.project, amount_cents=200)
        self.assertEqual(list(self.backer.projects_invested_in()), [self.project])

    def test_creator_is_the_author(self):
        self.assertIs(decide(self.founder, "update", self.project), Decision.ALLOW)
        self.assertIs(decide(self.backer, "update", self.project), Decision.DENY)


class ProjectApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", is_admin=True)
        self.member = User.objects.create_user(email="member@example.com", is_member=True)
        self.outsider = User.objects.create_user(email="outsider@example.com")

    def test_member_creates_project_and_becomes_founder(self):
        self.client.force_authenticate(self.member)
        resp = self.client.post("/api/v1/projects/", {"title": "Robots", "goal_cents": 10000}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        project = Project.objects.get(pk=resp.data["id"])
        self.assertEqual(project.creator, self.member)
        self.assertEqual(self.member.user_project(project).role, "founder")

    def test_roleless_user_cannot_create_project(self):
        self.client.force_authenticate(self.outsider)
        resp = self.client.post("/api/v1/projects/", {"title": "Nope"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Project.objects.exists())

    def test_only_creator_or_admin_updates(self):
        project = Project.objects.create(creator=self.member, title="Mine")
        self.client.force_authenticate(self.outsider)
        resp = self.client.patch(f"/api/v1/projects/{project.pk}/", {"title": "Theirs"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        resp = self.client.patch(f"/api/v1/projects/{project.pk}/", {"title": "Admin's"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        project.refresh_from_db()
        self.assertEqual(project.title, "Admin's")

    def test_admin_destroys_project(self):
        project = Project.objects.create(creator=self.member, title="Mine")
        self.client.force_authenticate(self.admin)
        resp = self.client.delete(f"/api/v1/projects/{project.pk}/")
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Project.objects.exists())

    def test_follow_is_idempotent(self):
        project = Project.objects.create(creator=self.member, title="Mine")
        self.client.force_authenticate(self.outsider)
        first = self.client.post(f"/api/v1/projects/{project.pk}/follow/")
        second = self.client.post(f"/api/v1/projects/{project.pk}/follow/")
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(Connection.objects.count(), 1)

        resp = self.client.get("/api/v1/projects/followed/")
        self.assertEqual([p["id"] for p in resp.data], [project.pk])

        self.client.post(f"/api/v1/projects/{project.pk}/unfollow/")
        self.assertEqual(Connection.objects.count(), 0)

    def test_add_member_requires_update_rights(self):
        project = Project.objects.create(creator=self.member, title="Mine")
        self.client.force_authenticate(self.outsider)
        resp = self.client.post(f"/api/v1/projects/{project.pk}/members/", {"user": self.outsider.pk},
                                format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.member)
        resp = self.client.post(f"/api/v1/projects/{project.pk}/members/", {"user": self.outsider.pk},
                                format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        resp = self.client.post(f"/api/v1/projects/{project.pk}/members/", {"user": self.outsider.pk},
                                format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_payment_approval_lifecycle(self):
        project = Project.objects.create(creator=self.member, title="Mine")
        self.client.force_authenticate(self.outsider)
        resp = self.client.post("/api/v1/payment-approvals/", {"project": project.pk, "amount_cents": 2500},
                                format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["state"], PaymentApproval.State.APPROVED)
        self.assertEqual(project.pledged_cents(), 2500)

        resp = self.client.post(f"/api/v1/payment-approvals/{resp.data['id']}/cancel/")
        self.assertEqual(resp.data["state"], PaymentApproval.State.CANCELLED)
        self.assertEqual(project.pledged_cents(), 0)

    def test_payment_amount_must_be_positive(self):
        project = Project.objects.create(creator=self.member, title="Mine")
        self.client.force_authenticate(self.outsider)
        resp = self.client.post("/api/v1/payment-approvals/", {"project": project.pk, "amount_cents": 0},
                                format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
