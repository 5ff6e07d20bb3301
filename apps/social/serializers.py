from rest_framework import serializers

from apps.projects.models import Project


class TwitterMessageSerializer(serializers.Serializer):
    METHOD_CHOICES = (("dm", "Direct message"), ("tweet", "Tweet"))

    method = serializers.ChoiceField(choices=METHOD_CHOICES)
    tweet_body = serializers.CharField(max_length=280, trim_whitespace=True)
    screen_name = serializers.CharField(max_length=50, required=False, allow_blank=False)

    def validate(self, attrs):
        if attrs["method"] == "dm" and not attrs.get("screen_name"):
            raise serializers.ValidationError({"screen_name": "A recipient is required for direct messages."})
        return attrs


class LinkedInMessageSerializer(serializers.Serializer):
    linkedin_id = serializers.CharField(max_length=100)
    subject = serializers.CharField(max_length=255, allow_blank=True, default="")
    body = serializers.CharField()


class BoxDocumentSerializer(serializers.Serializer):
    project_id = serializers.PrimaryKeyRelatedField(queryset=Project.objects.all(), source="project")


class BoxSessionSerializer(serializers.Serializer):
    doc_id = serializers.CharField(max_length=255)


class DispatchResultSerializer(serializers.Serializer):
    provider = serializers.CharField()
    action = serializers.CharField()
    ok = serializers.BooleanField()
    status_code = serializers.IntegerField(allow_null=True)
    payload = serializers.JSONField(allow_null=True)
