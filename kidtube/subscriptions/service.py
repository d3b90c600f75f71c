"""Subscription access service: cache-or-network reads and unsubscribe."""

import logging

from ..auth.credential_store import CredentialStore
from ..auth.token_guard import TokenGuard
from ..errors import NotAuthenticated, NotFound, TokenExpired, Unauthorized
from ..models import (
    CacheCursor,
    ChannelRecord,
    Credential,
    PageCursor,
    PageResult,
    RemoteCursor,
    User,
)
from ..youtube.api_client import (
    MAX_IDS_PER_REQUEST,
    MAX_RESULTS_PER_PAGE,
    YouTubeAPIClient,
    merge_channel_details,
)
from .cache import SubscriptionCache

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Orchestrates credential checks, the subscription cache and the YouTube API.

    Reads prefer a valid cache, fall back to the network, and degrade to any
    cached snapshot (however stale) when the network fails. Writes always
    surface their errors.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        token_guard: TokenGuard,
        cache: SubscriptionCache,
        api_client: YouTubeAPIClient,
        page_size: int = MAX_RESULTS_PER_PAGE,
        enrichment_batch_size: int = MAX_IDS_PER_REQUEST,
    ):
        """Initialize the service.

        Args:
            credential_store: Slot holding the signed-in user's credential.
            token_guard: Expiry gate applied before every remote call.
            cache: Subscription snapshot for the current user.
            api_client: YouTube Data API gateway.
            page_size: Default number of channels per page.
            enrichment_batch_size: Channel ids per channels.list call (max 50).
        """
        if not 1 <= enrichment_batch_size <= MAX_IDS_PER_REQUEST:
            raise ValueError(
                f"enrichment_batch_size must be between 1 and {MAX_IDS_PER_REQUEST}"
            )
        self.credential_store = credential_store
        self.token_guard = token_guard
        self.cache = cache
        self.api_client = api_client
        self.page_size = page_size
        self.enrichment_batch_size = enrichment_batch_size

    def _require_credential(self) -> Credential:
        credential = self.credential_store.load()
        if credential is None:
            raise NotAuthenticated()
        if not self.token_guard.enforce_validity():
            raise TokenExpired()
        return credential

    def _drop_foreign_cache(self) -> None:
        if self.cache.belongs_to_different_user():
            logger.info("Cached subscriptions belong to another account. Clearing cache...")
            self.cache.clear()

    def is_authenticated(self) -> bool:
        """True if a credential is stored and not about to expire."""
        return not self.token_guard.is_expired_or_expiring()

    def set_credential_user(self, user: User) -> None:
        """Record a completed login, discarding another account's cached data."""
        snapshot = self.cache.snapshot()
        if snapshot is not None and snapshot.user_id and snapshot.user_id != user.id:
            logger.info("Detected login from a different user. Clearing cache...")
            self.cache.clear()

    def clear_cache(self) -> None:
        """Force the next read to hit the network."""
        self.cache.clear()

    async def get_subscriptions(
        self,
        cursor: PageCursor | None = None,
        max_results: int | None = None,
    ) -> PageResult:
        """Get one page of the user's subscriptions.

        Args:
            cursor: None for the first page, a CacheCursor from a cached page,
                or a RemoteCursor from a network page.
            max_results: Page size; defaults to the service page size.

        Returns:
            PageResult with channels and the cursors for adjacent pages.

        Raises:
            NotAuthenticated: If no usable credential exists (TokenExpired if it
                was just cleared).
            KidTubeError: Remote failures, only when no cached snapshot exists.
        """
        max_results = max_results or self.page_size
        credential = self._require_credential()
        self._drop_foreign_cache()

        if cursor is None and self.cache.is_valid():
            logger.info("Using cached subscription data for first page")
            return self.cache.page(0, max_results)

        if isinstance(cursor, CacheCursor) and self.cache.is_valid():
            logger.info(f"Using cached subscription data for page {cursor.index}")
            return self.cache.page(cursor.index, max_results)

        try:
            return await self._fetch_remote_page(credential, cursor, max_results)
        except Exception as e:
            logger.error(f"Error fetching subscriptions: {e}")
            if isinstance(e, Unauthorized):
                self.credential_store.clear()
            if self.cache.exists():
                logger.info("Falling back to cached data due to API error")
                index = cursor.index if isinstance(cursor, CacheCursor) else 0
                return self.cache.page(index, max_results)
            if isinstance(e, Unauthorized):
                raise TokenExpired() from e
            raise

    async def get_all_subscriptions(self) -> list[ChannelRecord]:
        """Channels on the first page (kept for callers that do not paginate)."""
        result = await self.get_subscriptions()
        return result.channels

    async def _fetch_remote_page(
        self,
        credential: Credential,
        cursor: PageCursor | None,
        max_results: int,
    ) -> PageResult:
        access_token = credential.access_token
        remote_token = None
        if isinstance(cursor, RemoteCursor):
            remote_token = cursor.token
        elif isinstance(cursor, CacheCursor) and cursor.index > 0:
            remote_token = await self._remote_token_for_index(
                access_token, cursor.index, max_results
            )

        page = await self.api_client.fetch_subscription_page(
            access_token, page_token=remote_token, max_results=max_results
        )
        channels = await self._enrich(access_token, page.channels)

        if remote_token is None:
            self.cache.replace(channels)

        if isinstance(cursor, CacheCursor):
            prev_cursor = CacheCursor(cursor.index - 1) if cursor.index > 0 else None
        else:
            prev_cursor = cursor

        return PageResult(
            channels=channels,
            next_page_token=RemoteCursor(page.next_page_token) if page.next_page_token else None,
            prev_page_token=prev_cursor,
            total_results=page.total_results,
        )

    async def _remote_token_for_index(
        self, access_token: str, index: int, page_size: int
    ) -> str:
        """Walk remote pages to find the pageToken for a cached page index."""
        remote_token = None
        for _ in range(index):
            page = await self.api_client.fetch_subscription_page(
                access_token, page_token=remote_token, max_results=page_size
            )
            remote_token = page.next_page_token
            if not remote_token:
                raise NotFound(
                    f"Page {index} is past the end of the subscription list",
                    status=None,
                )
        return remote_token

    async def _enrich(
        self, access_token: str, channels: list[ChannelRecord]
    ) -> list[ChannelRecord]:
        """Add subscriber counts and categories, one sequential batch at a time.

        A batch whose lookup fails is kept unenriched.
        """
        enriched: list[ChannelRecord] = []
        size = self.enrichment_batch_size
        for start in range(0, len(channels), size):
            batch = channels[start:start + size]
            try:
                details = await self.api_client.fetch_channel_details(
                    access_token, [channel.id for channel in batch]
                )
            except Exception as e:
                logger.warning(
                    f"Error fetching details for batch {start}-{start + size}: {e}"
                )
                enriched.extend(batch)
                continue

            details_by_id = {item.id: item for item in details}
            for channel in batch:
                item = details_by_id.get(channel.id)
                enriched.append(merge_channel_details(channel, item) if item else channel)
        return enriched

    async def unsubscribe(self, channel_id: str) -> bool:
        """Unsubscribe from a channel and drop it from the cache.

        Returns:
            True once the subscription is deleted.

        Raises:
            NotAuthenticated: If no usable credential exists.
            TokenExpired: If the API rejected the token (credential is cleared).
            NotFound: If the user is not subscribed to the channel.
            PermissionDenied: If the token lacks the scope to modify subscriptions.
            RemoteError: On any other API failure.
        """
        credential = self._require_credential()
        access_token = credential.access_token
        self._drop_foreign_cache()

        try:
            subscription_id = await self.api_client.find_subscription_id(
                access_token, channel_id
            )
            if subscription_id is None:
                raise NotFound(f"Subscription not found for channel {channel_id}")
            await self.api_client.delete_subscription(access_token, subscription_id)
        except Unauthorized as e:
            self.credential_store.clear()
            raise TokenExpired() from e

        self.cache.remove_by_id(channel_id)
        logger.info(f"Unsubscribed from channel {channel_id}")
        return True
