"""YouTube Data API integration for subscription listing and management."""

from .api_client import SubscriptionPage, YouTubeAPIClient

__all__ = [
    "SubscriptionPage",
    "YouTubeAPIClient",
]
