from rest_framework import serializers

from apps.accounts.models import User
from apps.projects.models import Project

from .models import Message


class MessageSerializer(serializers.ModelSerializer):
    author = serializers.PrimaryKeyRelatedField(read_only=True)
    recipient = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False, allow_null=True)
    project = serializers.PrimaryKeyRelatedField(queryset=Project.objects.all(), required=False, allow_null=True)

    class Meta:
        model = Message
        fields = ["id", "author", "recipient", "project", "subject", "body", "created_at", "updated_at"]
        read_only_fields = ("id", "author", "created_at", "updated_at")
