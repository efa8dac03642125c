#!/usr/bin/env python3
"""
TVDB Episode Provider
Resolves episode metadata for a media item, combining multi-episode files into one result.
"""

import asyncio
import logging
from typing import List, Optional

import requests

from mapper import map_episode_to_result
from model import (
    EpisodeLocator,
    MetadataResult,
    PROVIDER_NAME,
    RemoteSearchResult,
    TVDB_KEY,
    is_valid_series,
)
from tvdb import CatalogClient, TvdbServerException


NAME_SEPARATOR = " / "


def combine_results(results: List[MetadataResult]) -> MetadataResult:
    """
    Merge the per-episode results of a span into one

    Names and overviews are joined in episode order; every other field,
    credits included, comes from the first result. A sub-result without
    metadata keeps its slot and contributes an empty segment.

    Args:
        results: Per-episode results ordered by index

    Returns:
        The first result with the joined name and overview
    """
    result = results[0]
    if result.item is None:
        return result

    names = [result.item.name or ""]
    overviews = [result.item.overview or ""]
    for other in results[1:]:
        names.append((other.item.name or "") if other.item else "")
        overviews.append((other.item.overview or "") if other.item else "")

    result.item.name = NAME_SEPARATOR.join(names)
    result.item.overview = NAME_SEPARATOR.join(overviews)
    return result


class EpisodeProvider:
    """Episode metadata provider backed by a TVDB catalog client"""

    name = PROVIDER_NAME

    def __init__(
        self,
        catalog: CatalogClient,
        session: Optional[requests.Session] = None,
        image_timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the provider

        Args:
            catalog: Catalog client resolving episode ids and fetching records
            session: HTTP session used for image requests
            image_timeout: Timeout in seconds for image requests
            logger: Optional logger instance
        """
        self.catalog = catalog
        self.session = session or requests.Session()
        self.image_timeout = image_timeout
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def is_valid_locator(locator: EpisodeLocator) -> bool:
        """Either an episode number or a date must be given, and the series ids must be usable"""
        if locator.index_number is None and locator.premiere_date is None:
            return False
        return is_valid_series(locator.series_provider_ids)

    @staticmethod
    def _is_span(locator: EpisodeLocator) -> bool:
        return (
            locator.index_number is not None
            and locator.index_number_end is not None
            and locator.index_number_end >= locator.index_number
        )

    async def get_metadata(self, locator: EpisodeLocator) -> MetadataResult:
        """
        Get episode metadata for a locator

        Args:
            locator: Series identity plus episode index or air date

        Returns:
            MetadataResult; has_metadata is False when nothing could be resolved
        """
        if not self.is_valid_locator(locator):
            self.logger.debug(f"No series identity found for {locator.name}")
            return MetadataResult(queried_by_id=True)

        # Check for multiple episodes per file, if not run one query
        if self._is_span(locator):
            self.logger.debug(f"Multiple episodes found in {locator.path}")
            return await self._get_combined_episode(locator)

        return await self._get_episode(locator)

    async def get_search_results(self, locator: EpisodeLocator) -> List[RemoteSearchResult]:
        """Search results for a locator; at most one entry"""
        if not self.is_valid_locator(locator):
            return []

        result = await self._get_episode(locator)
        if not result.has_metadata or result.item is None:
            return []

        item = result.item
        return [RemoteSearchResult(
            name=item.name,
            index_number=item.index_number,
            parent_index_number=item.parent_index_number,
            index_number_end=item.index_number_end,
            premiere_date=item.premiere_date,
            production_year=item.production_year,
            provider_ids=dict(item.provider_ids),
            search_provider_name=self.name
        )]

    async def _get_combined_episode(self, locator: EpisodeLocator) -> MetadataResult:
        # Sequential so that each slot stays at its index even when a fetch fails
        results = []
        for episode in range(locator.index_number, locator.index_number_end + 1):
            results.append(await self._get_episode(locator.with_index(episode)))

        return combine_results(results)

    async def _get_episode(self, locator: EpisodeLocator) -> MetadataResult:
        result = MetadataResult(queried_by_id=True)

        series_tvdb_id = locator.series_id(TVDB_KEY)
        episode_tvdb_id = None
        try:
            episode_tvdb_id = await self.catalog.resolve_episode_id(locator, locator.metadata_language)
            if not episode_tvdb_id:
                self.logger.error(
                    f"Episode {locator.parent_index_number}x{locator.index_number} not found "
                    f"for series {series_tvdb_id}:{locator.name}"
                )
                return result

            record = await self.catalog.fetch_episode(int(episode_tvdb_id), locator.metadata_language)
            result = map_episode_to_result(locator, record)
        except TvdbServerException as e:
            self.logger.error(
                f"Failed to retrieve episode with id {episode_tvdb_id}, "
                f"series id {series_tvdb_id}:{locator.name}: {e}"
            )

        return result

    async def get_image_response(self, url: str) -> requests.Response:
        """Plain GET of an image url, returned unparsed"""
        return await asyncio.to_thread(self.session.get, url, timeout=self.image_timeout)
