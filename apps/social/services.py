"""
Provider dispatch: turn an in-app action into an authenticated third-party call.

Every action goes through the same steps:
    locate identity -> authenticate client -> execute -> DispatchResult | exception

A missing identity raises NoLinkedIdentity before any client is built, so no
HTTP call is made. Provider errors raise ProviderCallFailed with the raw payload
attached. Nothing here retries; callers decide.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from apps.accounts.models import Identity
from common.exceptions import NoLinkedIdentity, ProviderCallFailed, ValidationFailed

from .adapters.box_adapter import BoxViewAdapter
from .adapters.linkedin_adapter import LinkedInAdapter
from .adapters.twitter_adapter import TwitterAdapter
from .config import ProviderCredentials

logger = logging.getLogger(__name__)

TWITTER = Identity.Provider.TWITTER.value
LINKEDIN = Identity.Provider.LINKEDIN.value
BOX = Identity.Provider.BOX.value


@dataclass
class DispatchResult:
    provider: str
    action: str
    ok: bool
    status_code: Optional[int] = None
    payload: Any = None


# ---------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------
def locate_identity(user, provider: str) -> Identity:
    identity = user.identity_for(provider) if user is not None and user.pk else None
    if identity is None:
        logger.info("%s dispatch refused: user %s has no linked identity", provider, getattr(user, "pk", None))
        raise NoLinkedIdentity(provider)
    return identity


def twitter_client(identity: Identity, credentials: ProviderCredentials) -> TwitterAdapter:
    if not credentials.twitter_configured:
        raise ProviderCallFailed(TWITTER, "Twitter application credentials are not configured")
    return TwitterAdapter(
        consumer_key=credentials.twitter_consumer_key,
        consumer_secret=credentials.twitter_consumer_secret,
        access_token=identity.oauth_token,
        access_token_secret=identity.oauth_secret,
        timeout=credentials.http_timeout,
    )


def box_client(credentials: ProviderCredentials) -> BoxViewAdapter:
    if not credentials.box_configured:
        raise ProviderCallFailed(BOX, "Box View API token is not configured")
    return BoxViewAdapter(credentials.box_view_api_token, timeout=credentials.http_timeout)


# ---------------------------------------------------------------------
# Twitter
# ---------------------------------------------------------------------
def post_tweet(user, tweet_body: str, credentials: ProviderCredentials) -> DispatchResult:
    identity = locate_identity(user, TWITTER)
    client = twitter_client(identity, credentials)
    logger.info("twitter.tweet user=%s", user.pk)
    data = client.post_tweet(tweet_body)
    return DispatchResult(TWITTER, "tweet", ok=True, payload=data)


def send_twitter_direct_message(user, screen_name: str, msg_body: str,
                                credentials: ProviderCredentials) -> DispatchResult:
    identity = locate_identity(user, TWITTER)
    client = twitter_client(identity, credentials)
    logger.info("twitter.dm user=%s to=%s", user.pk, screen_name)
    data = client.send_direct_message(screen_name, msg_body)
    return DispatchResult(TWITTER, "dm", ok=True, payload=data)


# ---------------------------------------------------------------------
# LinkedIn
# ---------------------------------------------------------------------
def send_linkedin_message(user, linkedin_id: str, subject: str, body: str,
                          credentials: ProviderCredentials) -> DispatchResult:
    identity = locate_identity(user, LINKEDIN)
    client = LinkedInAdapter(identity.oauth_token, timeout=credentials.http_timeout)
    logger.info("linkedin.message user=%s to=%s", user.pk, linkedin_id)
    resp = client.send_message(linkedin_id, subject, body)
    return DispatchResult(LINKEDIN, "message", ok=True, status_code=resp.status_code, payload=resp.payload)


# ---------------------------------------------------------------------
# Box View
# ---------------------------------------------------------------------
def create_box_document(project, credentials: ProviderCredentials) -> DispatchResult:
    """
    Upload the project's pitch deck to Box View. When Box accepts it (202) the
    returned document id is stored on the project.
    """
    if not project.pitchdeck_url:
        raise ValidationFailed({"project_id": ["Project has no pitch deck to upload."]})
    client = box_client(credentials)
    logger.info("box.document project=%s", project.pk)
    resp = client.create_document(project.pitchdeck_url)

    if resp.status_code == 202:
        doc_id = resp.payload.get("id") if isinstance(resp.payload, dict) else None
        if not doc_id:
            raise ProviderCallFailed(BOX, "Box accepted the document but returned no id",
                                     status_code=resp.status_code, payload=resp.payload)
        project.box_api_doc_id = doc_id
        project.save(update_fields=["box_api_doc_id", "updated_at"])
    return DispatchResult(BOX, "document", ok=True, status_code=resp.status_code, payload=resp.payload)


def create_box_session(doc_id: str, credentials: ProviderCredentials) -> DispatchResult:
    client = box_client(credentials)
    logger.info("box.session doc=%s", doc_id)
    resp = client.create_session(str(doc_id))
    return DispatchResult(BOX, "session", ok=True, status_code=resp.status_code, payload=resp.payload)


# ---------------------------------------------------------------------
# Table-driven entry point
# ---------------------------------------------------------------------
# (provider, action) -> (required payload keys, handler)
DISPATCH_TABLE = {
    (TWITTER, "tweet"): (
        ("body",),
        lambda user, payload, creds: post_tweet(user, payload["body"], creds),
    ),
    (TWITTER, "dm"): (
        ("recipient", "body"),
        lambda user, payload, creds: send_twitter_direct_message(
            user, payload["recipient"], payload["body"], creds),
    ),
    (LINKEDIN, "message"): (
        ("recipient", "body"),
        lambda user, payload, creds: send_linkedin_message(
            user, payload["recipient"], payload.get("subject", ""), payload["body"], creds),
    ),
}


def dispatch(user, provider: str, action: str, payload: dict, credentials: ProviderCredentials) -> DispatchResult:
    """
    dispatch(user, "twitter", "tweet", {"body": ...}, creds)
    dispatch(user, "twitter", "dm", {"recipient": "handle", "body": ...}, creds)
    dispatch(user, "linkedin", "message", {"recipient": "<id>", "subject": ..., "body": ...}, creds)
    """
    entry = DISPATCH_TABLE.get((provider, action))
    if entry is None:
        raise ValidationFailed({"action": [f"Unsupported action {provider}/{action}."]})
    required, handler = entry
    payload = payload or {}
    missing = [key for key in required if not payload.get(key)]
    if missing:
        raise ValidationFailed({"payload": [f"Missing {', '.join(missing)} for {provider}/{action}."]})
    return handler(user, payload, credentials)
