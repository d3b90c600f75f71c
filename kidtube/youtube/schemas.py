"""
Pydantic models for YouTube Data API v3 wire payloads.

Only the fields the subscription manager reads are declared; anything else
in the response is ignored.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Thumbnail(_WireModel):
    """A single thumbnail rendition."""
    url: str
    width: Optional[int] = None
    height: Optional[int] = None


class Thumbnails(_WireModel):
    """Thumbnail renditions keyed by size."""
    default: Optional[Thumbnail] = None
    medium: Optional[Thumbnail] = None
    high: Optional[Thumbnail] = None


class ResourceId(_WireModel):
    kind: Optional[str] = None
    channel_id: str = Field(..., alias="channelId")


class SubscriptionSnippet(_WireModel):
    title: str
    description: Optional[str] = None
    resource_id: ResourceId = Field(..., alias="resourceId")
    thumbnails: Thumbnails = Field(default_factory=Thumbnails)
    published_at: Optional[str] = Field(default=None, alias="publishedAt")


class SubscriptionItem(_WireModel):
    """One entry of subscriptions.list: the subscription edge and its channel."""
    id: str
    snippet: SubscriptionSnippet


class PageInfo(_WireModel):
    total_results: int = Field(default=0, alias="totalResults")
    results_per_page: Optional[int] = Field(default=None, alias="resultsPerPage")


class SubscriptionListResponse(_WireModel):
    """Envelope of subscriptions.list.

    ``items`` stay raw so that one malformed entry can be skipped without
    rejecting the whole page.
    """
    items: List[dict] = Field(default_factory=list)
    next_page_token: Optional[str] = Field(default=None, alias="nextPageToken")
    prev_page_token: Optional[str] = Field(default=None, alias="prevPageToken")
    page_info: PageInfo = Field(default_factory=PageInfo, alias="pageInfo")


class ChannelSnippet(_WireModel):
    title: Optional[str] = None
    description: Optional[str] = None
    custom_url: Optional[str] = Field(default=None, alias="customUrl")


class ChannelStatistics(_WireModel):
    subscriber_count: Optional[str] = Field(default=None, alias="subscriberCount")
    hidden_subscriber_count: bool = Field(default=False, alias="hiddenSubscriberCount")
    video_count: Optional[str] = Field(default=None, alias="videoCount")


class TopicDetails(_WireModel):
    topic_ids: List[str] = Field(default_factory=list, alias="topicIds")
    topic_categories: List[str] = Field(default_factory=list, alias="topicCategories")


class ChannelDetailsItem(_WireModel):
    """One entry of channels.list with statistics and topic metadata."""
    id: str
    snippet: Optional[ChannelSnippet] = None
    statistics: Optional[ChannelStatistics] = None
    topic_details: Optional[TopicDetails] = Field(default=None, alias="topicDetails")


class ChannelListResponse(_WireModel):
    items: List[dict] = Field(default_factory=list)
