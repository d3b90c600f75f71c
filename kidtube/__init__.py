"""KidTube: manage YouTube channel subscriptions with a family-friendly filter."""

__version__ = "0.1.0"
