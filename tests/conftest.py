"""
Pytest configuration and fixtures for kidtube tests.

Every fixture writes to a per-test temporary state directory and uses a
controllable clock, so tests never touch the user's real ~/.kidtube files
or depend on wall-clock time.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from kidtube.auth.credential_store import CredentialStore
from kidtube.auth.token_guard import TokenGuard
from kidtube.models import CacheSnapshot, ChannelRecord, Credential, User
from kidtube.storage import LocalStorage
from kidtube.subscriptions.cache import SubscriptionCache
from kidtube.subscriptions.service import SubscriptionService
from kidtube.youtube.api_client import SubscriptionPage, YouTubeAPIClient
from kidtube.youtube.schemas import ChannelDetailsItem, SubscriptionItem

HOUR_MS = 60 * 60 * 1000


class FakeClock:
    """Callable clock returning a settable epoch-millis value."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "state")


@pytest.fixture
def credential_store(storage, clock):
    return CredentialStore(storage, clock=clock)


@pytest.fixture
def token_guard(credential_store):
    return TokenGuard(credential_store, buffer_seconds=300)


@pytest.fixture
def user():
    return User(id="user-123", name="Test User", email="test@example.com")


@pytest.fixture
def other_user():
    return User(id="user-456", name="Other User", email="other@example.com")


@pytest.fixture
def credential(user, clock):
    return Credential(access_token="token-abc", expires_at=clock.now + HOUR_MS, user=user)


@pytest.fixture
def signed_in(credential_store, credential):
    """Store a valid credential for ``user``."""
    credential_store.save(credential)
    return credential


@pytest.fixture
def cache(storage, credential_store, clock):
    return SubscriptionCache(storage, credential_store, clock=clock)


@pytest.fixture
def make_channels():
    """Factory for simple, unenriched channel records."""

    def _make(count: int, prefix: str = "UC") -> list[ChannelRecord]:
        return [
            ChannelRecord(id=f"{prefix}{i:03d}", title=f"Channel {i:03d}")
            for i in range(count)
        ]

    return _make


@pytest.fixture
def make_snapshot(make_channels):
    """Factory for cache snapshots to write straight into storage."""

    def _make(count: int, timestamp: int, user_id=None) -> CacheSnapshot:
        return CacheSnapshot(
            timestamp=timestamp, data=tuple(make_channels(count)), user_id=user_id
        )

    return _make


@pytest.fixture
def subscription_item():
    """Factory for subscriptions.list wire items."""

    def _make(channel_id: str, title: str, description: str = "", thumbnails=None) -> dict:
        return {
            "kind": "youtube#subscription",
            "id": f"sub-{channel_id}",
            "snippet": {
                "publishedAt": "2024-01-15T12:00:00Z",
                "title": title,
                "description": description,
                "resourceId": {"kind": "youtube#channel", "channelId": channel_id},
                "channelId": "UCme",
                "thumbnails": thumbnails if thumbnails is not None else {
                    "default": {"url": f"https://img.example.com/{channel_id}/default.jpg"},
                },
            },
            "contentDetails": {"totalItemCount": 10, "newItemCount": 0, "activityType": "all"},
        }

    return _make


@pytest.fixture
def make_page(subscription_item):
    """Factory for SubscriptionPage results built from channel ids."""

    def _make(channel_ids, next_page_token=None, total_results=None) -> SubscriptionPage:
        items = [
            SubscriptionItem.model_validate(subscription_item(cid, f"Title {cid}"))
            for cid in channel_ids
        ]
        return SubscriptionPage(
            items=items,
            next_page_token=next_page_token,
            total_results=total_results if total_results is not None else len(items),
        )

    return _make


@pytest.fixture
def channel_details():
    """Factory for channels.list items with statistics and a topic."""

    def _make(channel_id: str, subscribers: str = "1000", topic: str = "Music") -> ChannelDetailsItem:
        return ChannelDetailsItem.model_validate({
            "id": channel_id,
            "statistics": {"subscriberCount": subscribers, "videoCount": "12"},
            "topicDetails": {
                "topicCategories": [f"https://en.wikipedia.org/wiki/{topic}"],
            },
        })

    return _make


@pytest.fixture
def mock_api_client():
    """YouTube gateway double with awaitable methods."""
    client = MagicMock(spec=YouTubeAPIClient)
    client.fetch_subscription_page = AsyncMock()
    client.fetch_channel_details = AsyncMock(return_value=[])
    client.find_subscription_id = AsyncMock(return_value=None)
    client.delete_subscription = AsyncMock(return_value=None)
    return client


@pytest.fixture
def service(credential_store, token_guard, cache, mock_api_client):
    return SubscriptionService(
        credential_store=credential_store,
        token_guard=token_guard,
        cache=cache,
        api_client=mock_api_client,
        page_size=50,
    )
