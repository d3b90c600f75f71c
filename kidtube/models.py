"""Data classes for subscriptions, credentials and cached pages.

Persisted records keep the camelCase JSON shape used by the stored state
files (``thumbnailUrl``, ``expiresAt``, ``userId``...).
"""

import time
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

AVATAR_URL_TEMPLATE = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"
CHANNEL_URL_TEMPLATE = "https://www.youtube.com/channel/{channel_id}"


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def generated_avatar_url(title: str) -> str:
    """Deterministic placeholder avatar keyed by channel title."""
    return AVATAR_URL_TEMPLATE.format(seed=quote(title, safe=""))


@dataclass(frozen=True)
class ChannelRecord:
    """A subscribed YouTube channel."""

    id: str  # UC... format
    title: str
    thumbnail_url: str = ""
    description: str | None = None
    subscriber_count: str | None = None  # kept as the API's string
    category: str | None = None
    is_kid_friendly: bool | None = None
    url: str = ""

    def __post_init__(self):
        if not self.thumbnail_url:
            object.__setattr__(self, "thumbnail_url", generated_avatar_url(self.title))
        if not self.url:
            object.__setattr__(
                self, "url", CHANNEL_URL_TEMPLATE.format(channel_id=self.id)
            )

    def to_dict(self) -> dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "thumbnailUrl": self.thumbnail_url,
            "url": self.url,
        }
        if self.description is not None:
            data["description"] = self.description
        if self.subscriber_count is not None:
            data["subscriberCount"] = self.subscriber_count
        if self.category is not None:
            data["category"] = self.category
        if self.is_kid_friendly is not None:
            data["isKidFriendly"] = self.is_kid_friendly
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChannelRecord":
        return cls(
            id=data["id"],
            title=data["title"],
            thumbnail_url=data.get("thumbnailUrl") or "",
            description=data.get("description"),
            subscriber_count=data.get("subscriberCount"),
            category=data.get("category"),
            is_kid_friendly=data.get("isKidFriendly"),
            url=data.get("url") or "",
        )


@dataclass(frozen=True)
class User:
    """Authenticated Google account."""

    id: str  # OpenID "sub"
    name: str
    email: str
    image_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = {"id": self.id, "name": self.name, "email": self.email}
        if self.image_url:
            data["imageUrl"] = self.image_url
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            email=data.get("email", ""),
            image_url=data.get("imageUrl"),
        )


@dataclass(frozen=True)
class Credential:
    """OAuth bearer token with its absolute expiry and owning user."""

    access_token: str
    expires_at: int  # epoch millis
    user: User

    def __repr__(self) -> str:
        return f"Credential(user={self.user.id!r}, expires_at={self.expires_at})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "accessToken": self.access_token,
            "expiresAt": self.expires_at,
            "user": self.user.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Credential":
        return cls(
            access_token=data["accessToken"],
            expires_at=int(data["expiresAt"]),
            user=User.from_dict(data["user"]),
        )


@dataclass(frozen=True)
class CacheSnapshot:
    """Cached subscription list with capture time and owner."""

    timestamp: int  # epoch millis
    data: tuple[ChannelRecord, ...] = ()
    user_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = {
            "timestamp": self.timestamp,
            "data": [record.to_dict() for record in self.data],
        }
        if self.user_id is not None:
            payload["userId"] = self.user_id
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheSnapshot":
        return cls(
            timestamp=int(data["timestamp"]),
            data=tuple(ChannelRecord.from_dict(item) for item in data["data"]),
            user_id=data.get("userId"),
        )


@dataclass(frozen=True)
class CacheCursor:
    """Zero-based page index into the cached subscription list."""

    index: int

    def __str__(self) -> str:
        return str(self.index)


@dataclass(frozen=True)
class RemoteCursor:
    """Opaque pageToken issued by the YouTube API."""

    token: str

    def __str__(self) -> str:
        return self.token


PageCursor = CacheCursor | RemoteCursor


@dataclass
class PageResult:
    """One page of subscriptions returned to the caller."""

    channels: list[ChannelRecord] = field(default_factory=list)
    next_page_token: PageCursor | None = None
    prev_page_token: PageCursor | None = None
    total_results: int | None = None
