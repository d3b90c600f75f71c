"""Keyword heuristic for family-friendly channels.

This is a recall-favouring approximation based on category, title and
description text. It is not a content-safety judgement.
"""

from dataclasses import replace
from typing import Iterable, Optional

from ..models import ChannelRecord

KID_FRIENDLY_CATEGORIES = ("Education", "Music", "Family", "Kids", "Animation")

KID_FRIENDLY_KEYWORDS = (
    "kids",
    "child",
    "children",
    "family",
    "learning",
    "education",
    "cartoon",
    "animation",
    "nursery",
    "rhymes",
    "baby",
    "toddler",
    "preschool",
)

ALL_CATEGORIES = "all"


def _contains_any(text: Optional[str], needles: Iterable[str]) -> bool:
    if not text:
        return False
    lowered = text.lower()
    return any(needle.lower() in lowered for needle in needles)


def classify(record: ChannelRecord) -> bool:
    """Return True if the channel looks family-friendly."""
    return (
        _contains_any(record.category, KID_FRIENDLY_CATEGORIES)
        or _contains_any(record.title, KID_FRIENDLY_KEYWORDS)
        or _contains_any(record.description, KID_FRIENDLY_KEYWORDS)
    )


def label_kid_friendly(records: Iterable[ChannelRecord]) -> list[ChannelRecord]:
    """Return copies of ``records`` with ``is_kid_friendly`` filled in."""
    return [replace(record, is_kid_friendly=classify(record)) for record in records]


def categories(records: Iterable[ChannelRecord]) -> list[str]:
    """Sorted distinct categories present in ``records``."""
    return sorted({record.category for record in records if record.category})


def filter_channels(
    records: Iterable[ChannelRecord],
    search_term: str = "",
    category: Optional[str] = None,
    kid_friendly_only: bool = False,
) -> list[ChannelRecord]:
    """Filter channels the way the dashboard controls do.

    Args:
        records: Channels to filter, in display order.
        search_term: Case-insensitive substring matched against title and description.
        category: Exact category (case-insensitive); None or "all" keeps every category.
        kid_friendly_only: Keep only channels classified as family-friendly.
            Channels not yet labelled are classified on the fly.

    Returns:
        The matching channels, order preserved.
    """
    term = search_term.strip().lower()
    wanted_category = None
    if category and category.lower() != ALL_CATEGORIES:
        wanted_category = category.lower()

    matches = []
    for record in records:
        if term and not (
            term in record.title.lower()
            or (record.description and term in record.description.lower())
        ):
            continue
        if wanted_category and (record.category or "").lower() != wanted_category:
            continue
        if kid_friendly_only:
            is_kid_friendly = record.is_kid_friendly
            if is_kid_friendly is None:
                is_kid_friendly = classify(record)
            if not is_kid_friendly:
                continue
        matches.append(record)
    return matches
