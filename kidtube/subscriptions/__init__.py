"""Subscription cache, access service and content classifier."""

from .cache import SubscriptionCache
from .classifier import classify, filter_channels, label_kid_friendly
from .service import SubscriptionService

__all__ = [
    "SubscriptionCache",
    "SubscriptionService",
    "classify",
    "filter_channels",
    "label_kid_friendly",
]
