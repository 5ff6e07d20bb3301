from django.urls import path

from .views import BoxDocumentView, BoxSessionView, LinkedInMessageView, TwitterMessageView

app_name = "social"

urlpatterns = [
    path("providers/box/documents/", BoxDocumentView.as_view(), name="box-documents"),
    path("providers/box/sessions/", BoxSessionView.as_view(), name="box-sessions"),
    path("providers/twitter/messages/", TwitterMessageView.as_view(), name="twitter-messages"),
    path("providers/linkedin/messages/", LinkedInMessageView.as_view(), name="linkedin-messages"),
]
