"""
Process-wide provider credentials.

Loaded from Django settings on first use and cached for the life of the process.
Dispatch functions take a ProviderCredentials argument instead of reading settings
themselves, which keeps them easy to drive from tests and management commands.
"""
from dataclasses import dataclass
from functools import lru_cache

from django.conf import settings


@dataclass(frozen=True)
class ProviderCredentials:
    twitter_consumer_key: str = ""
    twitter_consumer_secret: str = ""
    box_view_api_token: str = ""
    http_timeout: float = 15.0

    @property
    def twitter_configured(self) -> bool:
        return bool(self.twitter_consumer_key and self.twitter_consumer_secret)

    @property
    def box_configured(self) -> bool:
        return bool(self.box_view_api_token)

    def __repr__(self) -> str:
        # never print secrets
        return (f"ProviderCredentials(twitter_configured={self.twitter_configured}, "
                f"box_configured={self.box_configured}, http_timeout={self.http_timeout})")


@lru_cache(maxsize=None)
def get_provider_credentials() -> ProviderCredentials:
    return ProviderCredentials(
        twitter_consumer_key=getattr(settings, "TWITTER_KEY", ""),
        twitter_consumer_secret=getattr(settings, "TWITTER_SECRET", ""),
        box_view_api_token=getattr(settings, "BOX_VIEW_API_ID", ""),
        http_timeout=float(getattr(settings, "PROVIDER_HTTP_TIMEOUT", 15)),
    )
