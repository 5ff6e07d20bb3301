"""
Endpoints that forward an in-app action to a third-party API.

Failures come back through common.exceptions.custom_exception_handler:
NoLinkedIdentity -> 422, ProviderCallFailed -> 502 with the provider's raw response.
"""
from dataclasses import asdict

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .config import get_provider_credentials
from .serializers import (
    BoxDocumentSerializer,
    BoxSessionSerializer,
    DispatchResultSerializer,
    LinkedInMessageSerializer,
    TwitterMessageSerializer,
)


def _result_response(result, http_status=status.HTTP_200_OK):
    return Response(DispatchResultSerializer(asdict(result)).data, status=http_status)


@extend_schema(
    summary="Upload a project's pitch deck to Box View",
    request=BoxDocumentSerializer,
    responses={200: DispatchResultSerializer},
    tags=["Providers"],
)
class BoxDocumentView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = BoxDocumentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = services.create_box_document(serializer.validated_data["project"], get_provider_credentials())
        return _result_response(result)


@extend_schema(
    summary="Open a Box View session for a document",
    request=BoxSessionSerializer,
    responses={200: DispatchResultSerializer},
    tags=["Providers"],
)
class BoxSessionView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = BoxSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = services.create_box_session(serializer.validated_data["doc_id"], get_provider_credentials())
        return _result_response(result)


@extend_schema(
    summary="Post a tweet or send a direct message from the user's linked Twitter account",
    request=TwitterMessageSerializer,
    responses={200: DispatchResultSerializer},
    tags=["Providers"],
)
class TwitterMessageView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = TwitterMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        credentials = get_provider_credentials()

        if data["method"] == "dm":
            result = services.send_twitter_direct_message(
                request.user, data["screen_name"], data["tweet_body"], credentials
            )
        else:
            result = services.post_tweet(request.user, data["tweet_body"], credentials)
        return _result_response(result)


@extend_schema(
    summary="Send a LinkedIn message from the user's linked LinkedIn account",
    request=LinkedInMessageSerializer,
    responses={201: DispatchResultSerializer},
    tags=["Providers"],
)
class LinkedInMessageView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = LinkedInMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = services.send_linkedin_message(
            request.user, data["linkedin_id"], data["subject"], data["body"], get_provider_credentials()
        )
        return _result_response(result, http_status=status.HTTP_201_CREATED)
