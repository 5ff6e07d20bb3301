from rest_framework import serializers

from .models import Project, UserProject, Connection, PaymentApproval


class ProjectSerializer(serializers.ModelSerializer):
    creator = serializers.PrimaryKeyRelatedField(read_only=True)
    pledged_cents = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = [
            "id", "creator", "title", "description", "pitchdeck_url",
            "box_api_doc_id", "goal_cents", "pledged_cents", "created_at", "updated_at",
        ]
        read_only_fields = ("id", "creator", "box_api_doc_id", "created_at", "updated_at")

    def get_pledged_cents(self, obj) -> int:
        return obj.pledged_cents()


class UserProjectSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserProject
        fields = ["id", "user", "project", "role", "created_at"]
        read_only_fields = ("id", "project", "created_at")


class ConnectionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Connection
        fields = ["id", "user", "project", "type_of", "created_at"]
        read_only_fields = fields


class PaymentApprovalSerializer(serializers.ModelSerializer):
    backer = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = PaymentApproval
        fields = ["id", "backer", "project", "amount_cents", "preapproval_id", "state", "created_at", "updated_at"]
        read_only_fields = ("id", "backer", "state", "created_at", "updated_at")

    def validate_amount_cents(self, value):
        if value <= 0:
            raise serializers.ValidationError("amount_cents must be positive")
        return value
