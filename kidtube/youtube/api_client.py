"""YouTube Data API v3 client for the signed-in user's subscriptions."""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import AsyncIterator, Callable, Iterable

import httplib2
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from pydantic import ValidationError

from ..errors import RemoteError, classify_http_error
from ..models import ChannelRecord
from .schemas import (
    ChannelDetailsItem,
    ChannelListResponse,
    SubscriptionItem,
    SubscriptionListResponse,
    Thumbnails,
)

logger = logging.getLogger(__name__)

# YouTube API allows max 50 results/IDs per request
MAX_RESULTS_PER_PAGE = 50
MAX_IDS_PER_REQUEST = 50


def build_youtube_service(access_token: str):
    """Build a YouTube API service authorized with a bearer token."""
    credentials = Credentials(token=access_token)
    return build("youtube", "v3", credentials=credentials, cache_discovery=False)


def best_thumbnail_url(thumbnails: Thumbnails) -> str | None:
    """Pick the largest available thumbnail (high > medium > default)."""
    for rendition in (thumbnails.high, thumbnails.medium, thumbnails.default):
        if rendition is not None and rendition.url:
            return rendition.url
    return None


def category_from_topics(topic_categories: list[str]) -> str | None:
    """Derive a readable category from the first topic category URL.

    ``https://en.wikipedia.org/wiki/Video_game_culture`` becomes
    ``Video game culture``.
    """
    if not topic_categories:
        return None
    segment = topic_categories[0].rstrip("/").rsplit("/", 1)[-1]
    return segment.replace("_", " ") or None


def subscription_to_channel(item: SubscriptionItem) -> ChannelRecord:
    """Map a subscriptions.list entry to an unenriched ChannelRecord."""
    snippet = item.snippet
    return ChannelRecord(
        id=snippet.resource_id.channel_id,
        title=snippet.title,
        thumbnail_url=best_thumbnail_url(snippet.thumbnails) or "",
        description=snippet.description,
    )


def merge_channel_details(
    record: ChannelRecord, details: ChannelDetailsItem
) -> ChannelRecord:
    """Return a copy of ``record`` carrying subscriber count and category."""
    statistics = details.statistics
    topics = details.topic_details
    return replace(
        record,
        subscriber_count=(statistics.subscriber_count or None) if statistics else None,
        category=category_from_topics(topics.topic_categories) if topics else None,
    )


def parse_subscription_items(raw_items: Iterable[dict]) -> list[SubscriptionItem]:
    """Validate raw subscription entries, skipping unrecognized shapes."""
    items = []
    for raw in raw_items:
        try:
            items.append(SubscriptionItem.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping malformed subscription item: {e.error_count()} errors")
    return items


def parse_channel_items(raw_items: Iterable[dict]) -> list[ChannelDetailsItem]:
    """Validate raw channel entries, skipping unrecognized shapes."""
    items = []
    for raw in raw_items:
        try:
            items.append(ChannelDetailsItem.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping malformed channel item: {e.error_count()} errors")
    return items


@dataclass
class SubscriptionPage:
    """One page of subscriptions.list results."""

    items: list[SubscriptionItem] = field(default_factory=list)
    next_page_token: str | None = None
    total_results: int = 0

    @property
    def channels(self) -> list[ChannelRecord]:
        return [subscription_to_channel(item) for item in self.items]


class YouTubeAPIClient:
    """Client for the subscription endpoints of YouTube Data API v3.

    Every call takes the caller's bearer token. The blocking
    ``googleapiclient`` request runs in a worker thread so callers on an
    event loop are suspended rather than blocked.
    """

    def __init__(self, service_factory: Callable[[str], object] | None = None):
        """Initialize the client.

        Args:
            service_factory: Builds an API service for an access token.
                Defaults to :func:`build_youtube_service`.
        """
        self._service_factory = service_factory or build_youtube_service
        self._youtube = None
        self._token = None

    def youtube(self, access_token: str):
        """Lazy-load the YouTube API service for ``access_token``."""
        if self._youtube is None or self._token != access_token:
            self._youtube = self._service_factory(access_token)
            self._token = access_token
        return self._youtube

    async def _execute(self, request, action: str):
        try:
            return await asyncio.to_thread(request.execute)
        except HttpError as e:
            error = classify_http_error(e.resp.status, e.content)
            logger.error(f"YouTube API error {action}: {error}")
            raise error from e
        except (OSError, httplib2.HttpLib2Error) as e:
            logger.error(f"YouTube API transport error {action}: {e}")
            raise RemoteError(f"Network error {action}: {e}") from e

    async def fetch_subscription_page(
        self,
        access_token: str,
        page_token: str | None = None,
        max_results: int = MAX_RESULTS_PER_PAGE,
    ) -> SubscriptionPage:
        """Fetch one page of the user's subscriptions, ordered by title.

        Args:
            access_token: OAuth bearer token.
            page_token: Opaque cursor from a previous page, or None for the first.
            max_results: Page size (1-50).

        Returns:
            SubscriptionPage with parsed items and paging info.

        Raises:
            QuotaExceeded, Unauthorized, RemoteError: On API failure.
        """
        params = {
            "part": "snippet,contentDetails",
            "mine": True,
            "maxResults": max(1, min(max_results, MAX_RESULTS_PER_PAGE)),
            "order": "alphabetical",
        }
        if page_token:
            params["pageToken"] = page_token

        request = self.youtube(access_token).subscriptions().list(**params)
        response = await self._execute(request, "fetching subscriptions")
        envelope = SubscriptionListResponse.model_validate(response or {})

        page = SubscriptionPage(
            items=parse_subscription_items(envelope.items),
            next_page_token=envelope.next_page_token,
            total_results=envelope.page_info.total_results,
        )
        logger.debug(
            f"Fetched {len(page.items)} subscriptions (total {page.total_results})"
        )
        return page

    async def iter_all_subscriptions(
        self, access_token: str, max_results: int = MAX_RESULTS_PER_PAGE
    ) -> AsyncIterator[SubscriptionPage]:
        """Yield every page of subscriptions until the API stops paging."""
        page_token = None
        while True:
            page = await self.fetch_subscription_page(
                access_token, page_token=page_token, max_results=max_results
            )
            yield page
            page_token = page.next_page_token
            if not page_token:
                break

    async def fetch_channel_details(
        self, access_token: str, channel_ids: list[str]
    ) -> list[ChannelDetailsItem]:
        """Fetch statistics and topic details for up to 50 channels.

        Callers are responsible for chunking larger id sets.

        Raises:
            ValueError: If more than 50 ids are given.
            RemoteError: On API failure.
        """
        if not channel_ids:
            return []
        if len(channel_ids) > MAX_IDS_PER_REQUEST:
            raise ValueError(
                f"At most {MAX_IDS_PER_REQUEST} channel ids per request, got {len(channel_ids)}"
            )

        request = self.youtube(access_token).channels().list(
            part="snippet,statistics,topicDetails",
            id=",".join(channel_ids),
            maxResults=MAX_IDS_PER_REQUEST,
        )
        response = await self._execute(request, "fetching channel details")
        envelope = ChannelListResponse.model_validate(response or {})
        return parse_channel_items(envelope.items)

    async def find_subscription_id(
        self, access_token: str, channel_id: str
    ) -> str | None:
        """Resolve the subscription resource id for a subscribed channel.

        Returns:
            The subscription id, or None if the user is not subscribed.
        """
        request = self.youtube(access_token).subscriptions().list(
            part="snippet",
            forChannelId=channel_id,
            mine=True,
            maxResults=1,
        )
        response = await self._execute(request, f"finding subscription for {channel_id}")
        envelope = SubscriptionListResponse.model_validate(response or {})
        items = parse_subscription_items(envelope.items)
        return items[0].id if items else None

    async def delete_subscription(self, access_token: str, subscription_id: str) -> None:
        """Delete a subscription by its subscription id (not the channel id).

        Raises:
            PermissionDenied: If the token lacks the scope to modify subscriptions.
            NotFound: If the subscription no longer exists.
            RemoteError: On any other API failure.
        """
        request = self.youtube(access_token).subscriptions().delete(id=subscription_id)
        await self._execute(request, f"deleting subscription {subscription_id}")
        logger.info(f"Deleted subscription {subscription_id}")
