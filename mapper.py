#!/usr/bin/env python3
"""
Result mapping for TVDB episode records
Converts a raw catalog record into the host application's episode metadata.
"""

from datetime import datetime
from typing import Any, Optional, Tuple

from dateutil import parser as date_parser

from credits import build_credits
from model import (
    DisplayOrder,
    EpisodeLocator,
    IMDB_KEY,
    MappedEpisode,
    MetadataResult,
    RawEpisodeRecord,
    TVDB_KEY,
)


# Two defaults that differ in every date part, so omitted parts show up
_DATE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def _to_int(value: Any) -> int:
    # int(None) would raise TypeError; a missing number counts as zero
    if value is None:
        return 0
    return int(value)


def resolve_numbering(
    display_order: Optional[str],
    record: RawEpisodeRecord,
    index_number: Optional[int],
    parent_index_number: Optional[int]
) -> Tuple[Optional[int], Optional[int]]:
    """
    Pick the episode numbering exposed for a record

    Exactly one branch applies, in priority order: dvd order, absolute order,
    aired episode number, aired season number. Values from two branches are
    never blended.

    Args:
        display_order: Caller preference ("dvd", "absolute", anything else means aired)
        record: Raw episode record
        index_number: Index to keep when the chosen branch does not set one
        parent_index_number: Parent index to keep when the chosen branch does not set one

    Returns:
        Tuple of (index_number, parent_index_number)

    Raises:
        ValueError: If a selected numbering field is not an integer
    """
    if DisplayOrder.matches(display_order, DisplayOrder.DVD):
        episode = record.dvd_episode_number
        if episode is None:
            episode = record.aired_episode_number
        season = record.dvd_season if record.dvd_season is not None else record.aired_season
        return _to_int(episode), season

    if DisplayOrder.matches(display_order, DisplayOrder.ABSOLUTE):
        absolute_number = _to_int(record.absolute_number)
        if absolute_number != 0:
            return absolute_number, parent_index_number
        return index_number, parent_index_number

    if record.aired_episode_number is not None:
        return _to_int(record.aired_episode_number), parent_index_number

    if record.aired_season is not None:
        return index_number, _to_int(record.aired_season)

    return index_number, parent_index_number


def parse_premiere_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse the first-aired string of a record

    Dates from TVDB are UTC without an offset. Absent, malformed or partial
    dates (a bare year, day or month name) return None.
    """
    if not value:
        return None
    try:
        parsed = date_parser.parse(value, default=_DATE_DEFAULTS[0])
        # A part taken from the default differs between the two parses
        if parsed != date_parser.parse(value, default=_DATE_DEFAULTS[1]):
            return None
        return parsed
    except (ValueError, OverflowError, TypeError):
        return None


def map_episode_to_result(locator: EpisodeLocator, record: RawEpisodeRecord) -> MetadataResult:
    """
    Build the metadata result for a single episode

    Args:
        locator: Locator the record was fetched for
        record: Raw episode record from the catalog

    Returns:
        MetadataResult with has_metadata set
    """
    item = MappedEpisode(
        index_number=locator.index_number,
        parent_index_number=locator.parent_index_number,
        index_number_end=locator.index_number_end,
        airs_before_episode_number=record.airs_before_episode,
        airs_after_season_number=record.airs_after_season,
        airs_before_season_number=record.airs_before_season,
        name=record.episode_name,
        overview=record.overview,
        community_rating=float(record.site_rating) if record.site_rating is not None else None,
        official_rating=record.content_rating
    )

    item.set_provider_id(TVDB_KEY, str(record.id))
    item.set_provider_id(IMDB_KEY, record.imdb_id)

    item.index_number, item.parent_index_number = resolve_numbering(
        locator.series_display_order,
        record,
        item.index_number,
        item.parent_index_number
    )

    premiere_date = parse_premiere_date(record.first_aired)
    if premiere_date:
        item.premiere_date = premiere_date
        item.production_year = premiere_date.year

    item.people = build_credits(record)

    return MetadataResult(
        item=item,
        has_metadata=True,
        queried_by_id=True,
        result_language=record.language.episode_name
    )
