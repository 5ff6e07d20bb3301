import logging

import tweepy

from common.exceptions import ProviderCallFailed

from .http import TimeoutSession

logger = logging.getLogger(__name__)

PROVIDER = "twitter"


def _error_payload(exc: tweepy.TweepyException):
    if isinstance(exc, tweepy.HTTPException):
        response = exc.response
        return {
            "status": getattr(response, "status_code", None),
            "errors": exc.api_errors,
            "messages": exc.api_messages,
        }
    return {"messages": [str(exc)]}


def _status_of(exc: tweepy.TweepyException):
    response = getattr(exc, "response", None)
    return getattr(response, "status_code", None)


class TwitterAdapter:
    """Twitter calls made on behalf of one linked identity (OAuth 1.0a user context)."""

    def __init__(self, consumer_key, consumer_secret, access_token, access_token_secret, timeout: float):
        self.client = tweepy.Client(
            consumer_key=consumer_key,
            consumer_secret=consumer_secret,
            access_token=access_token,
            access_token_secret=access_token_secret,
        )
        # tweepy sends through client.session without a timeout
        self.client.session = TimeoutSession(timeout)

    def post_tweet(self, text: str) -> dict:
        try:
            resp = self.client.create_tweet(text=text, user_auth=True)
        except tweepy.TweepyException as exc:
            raise ProviderCallFailed(PROVIDER, "Tweet could not be posted",
                                     status_code=_status_of(exc), payload=_error_payload(exc)) from exc
        return resp.data or {}

    def lookup_user_id(self, screen_name: str):
        try:
            resp = self.client.get_user(username=screen_name.lstrip("@"), user_auth=True)
        except tweepy.TweepyException as exc:
            raise ProviderCallFailed(PROVIDER, f"Could not look up @{screen_name}",
                                     status_code=_status_of(exc), payload=_error_payload(exc)) from exc
        if not resp.data:
            raise ProviderCallFailed(PROVIDER, f"Unknown Twitter user @{screen_name}",
                                     payload={"errors": resp.errors})
        return resp.data.id

    def send_direct_message(self, screen_name: str, text: str) -> dict:
        participant_id = self.lookup_user_id(screen_name)
        try:
            resp = self.client.create_direct_message(participant_id=participant_id, text=text, user_auth=True)
        except tweepy.TweepyException as exc:
            raise ProviderCallFailed(PROVIDER, "Direct message could not be sent",
                                     status_code=_status_of(exc), payload=_error_payload(exc)) from exc
        return resp.data or {}
