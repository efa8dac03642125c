#!/usr/bin/env python3
"""
TVDB API Client for Episode Information
Resolves series/episode keys to TVDB ids and fetches raw episode records.

The blocking HTTP calls run through a shared requests session; the async
methods used by the episode provider push them onto the default executor.
"""

import asyncio
import logging
import threading
import time
from typing import Any, Dict, Mapping, Optional, Protocol

import requests

from model import (
    DisplayOrder,
    EpisodeLocator,
    IMDB_KEY,
    RawEpisodeRecord,
    TVDB_KEY,
    ZAP2IT_KEY,
    get_provider_id,
)


DEFAULT_BASE_URL = "https://api.thetvdb.com"


class TvdbServerException(Exception):
    """Transport or service fault reported by the TVDB API"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TvdbNotFoundException(TvdbServerException):
    """Requested resource does not exist in TVDB"""
    pass


class CatalogClient(Protocol):
    """The two lookups the episode provider needs from a catalog"""

    async def resolve_episode_id(self, locator: EpisodeLocator, language: str) -> Optional[str]:
        ...

    async def fetch_episode(self, episode_id: int, language: str) -> RawEpisodeRecord:
        ...


class TvdbClient:
    """Client for interacting with the TVDB API"""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        language: str = "en",
        proxy_host: Optional[str] = None,
        proxy_port: Optional[int] = None,
        rate_limit: int = 20,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize TVDB client

        Args:
            api_key: TVDB API key
            base_url: API root (default: https://api.thetvdb.com)
            language: Language used when a caller passes none
            proxy_host: Proxy host with protocol (e.g., "http://proxy.example.com")
            proxy_port: Proxy port
            rate_limit: Maximum number of requests allowed per second (default: 20)
            timeout: Request timeout in seconds
            logger: Optional logger instance
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.language = language
        self.rate_limit = rate_limit
        self.timeout = timeout
        self.min_request_interval = 1.0 / rate_limit
        self.last_request_time = 0.0
        self.logger = logger or logging.getLogger(__name__)
        self.token: Optional[str] = None

        self._rate_lock = threading.Lock()
        self._login_lock = threading.Lock()

        self.session = requests.Session()
        self.session.headers.update({'Accept': 'application/json'})

        if proxy_host and proxy_port:
            proxy_url = f"{proxy_host.rstrip('/')}:{proxy_port}"
            self.session.proxies.update({
                'http': proxy_url,
                'https': proxy_url,
            })
            self.logger.debug(f"Proxy configured: {proxy_url}")

    def _wait_for_rate_limit(self):
        """
        Enforce rate limiting by waiting if necessary before making a request.
        Ensures we don't exceed rate_limit requests per second.
        """
        with self._rate_lock:
            time_since_last_request = time.time() - self.last_request_time

            if time_since_last_request < self.min_request_interval:
                wait_time = self.min_request_interval - time_since_last_request
                self.logger.debug(f"Rate limiting: waiting {wait_time:.3f} seconds before next request")
                time.sleep(wait_time)

            self.last_request_time = time.time()

    def login(self) -> str:
        """
        Obtain a bearer token for the configured API key

        Raises:
            TvdbServerException: If the login request fails
        """
        with self._login_lock:
            data = self._send('POST', '/login', json_body={'apikey': self.api_key}, authenticated=False)
            token = data.get('token')
            if not token:
                raise TvdbServerException("No token received in login response")
            self.token = token
            self.logger.debug("Authenticated with TVDB API")
            return token

    def _send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        language: Optional[str] = None,
        authenticated: bool = True
    ) -> Dict[str, Any]:
        headers = {}
        if language:
            headers['Accept-Language'] = language
        if authenticated and self.token:
            headers['Authorization'] = f"Bearer {self.token}"

        url = f"{self.base_url}{path}"
        self._wait_for_rate_limit()
        self.logger.debug(f"TVDB request: {method} {url} params={params}")

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise TvdbServerException(f"Request to {url} failed: {e}") from e

        if response.status_code == 404:
            raise TvdbNotFoundException(f"Resource not found: {url}", status_code=404)
        if response.status_code >= 400:
            raise TvdbServerException(
                f"TVDB returned HTTP {response.status_code} for {url}",
                status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise TvdbServerException(f"Invalid JSON from {url}: {e}") from e

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        language: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Send an authenticated request, logging in again once on HTTP 401

        Returns:
            Decoded JSON body
        """
        if not self.token:
            self.login()
        try:
            return self._send(method, path, params=params, language=language)
        except TvdbServerException as e:
            if e.status_code != 401:
                raise
            self.logger.info("TVDB token rejected, logging in again")
            self.login()
            return self._send(method, path, params=params, language=language)

    def get_series_tvdb_id(self, provider_ids: Mapping[str, str], language: Optional[str] = None) -> Optional[str]:
        """
        Get the TVDB series id for a set of provider ids

        Uses the Tvdb id when present, otherwise searches by IMDb and then Zap2It id.

        Returns:
            Series id as string, or None if no match
        """
        tvdb_id = get_provider_id(provider_ids, TVDB_KEY)
        if tvdb_id:
            return tvdb_id

        for key, param in ((IMDB_KEY, 'imdbId'), (ZAP2IT_KEY, 'zap2itId')):
            remote_id = get_provider_id(provider_ids, key)
            if not remote_id:
                continue
            try:
                response = self._request('GET', '/search/series', params={param: remote_id}, language=language)
            except TvdbNotFoundException:
                self.logger.debug(f"No TVDB series found for {key} id {remote_id}")
                continue
            series = response.get('data') or []
            if series:
                series_id = str(series[0].get('id'))
                self.logger.debug(f"Resolved {key} id {remote_id} to TVDB series {series_id}")
                return series_id
        return None

    def _build_episode_query(self, locator: EpisodeLocator) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if locator.index_number is not None:
            display_order = locator.series_display_order
            if DisplayOrder.matches(display_order, DisplayOrder.DVD):
                query['dvdEpisode'] = locator.index_number
                if locator.parent_index_number is not None:
                    query['dvdSeason'] = locator.parent_index_number
            elif DisplayOrder.matches(display_order, DisplayOrder.ABSOLUTE):
                query['absoluteNumber'] = locator.index_number
            else:
                query['airedEpisode'] = locator.index_number
                if locator.parent_index_number is not None:
                    query['airedSeason'] = locator.parent_index_number
        elif locator.premiere_date is not None:
            query['firstAired'] = locator.premiere_date.strftime('%Y-%m-%d')
        return query

    def get_episode_tvdb_id(self, locator: EpisodeLocator, language: Optional[str] = None) -> Optional[str]:
        """
        Resolve the TVDB episode id for a locator

        Args:
            locator: Series identity plus episode index or air date
            language: Language for the lookup

        Returns:
            Episode id as string, or None if the series or episode is unknown
        """
        language = language or self.language
        series_id = self.get_series_tvdb_id(locator.series_provider_ids, language)
        if not series_id:
            self.logger.debug(f"No TVDB series id for {locator.name}")
            return None

        query = self._build_episode_query(locator)
        if not query:
            return None

        try:
            response = self._request('GET', f"/series/{series_id}/episodes/query", params=query, language=language)
        except TvdbNotFoundException:
            return None

        episodes = response.get('data') or []
        if not episodes:
            return None
        return str(episodes[0].get('id'))

    def get_episode(self, episode_id: int, language: Optional[str] = None) -> RawEpisodeRecord:
        """
        Fetch a full episode record by TVDB id

        Raises:
            TvdbServerException: If the record cannot be retrieved
        """
        response = self._request('GET', f"/episodes/{episode_id}", language=language or self.language)
        return RawEpisodeRecord.from_dict(response.get('data') or {})

    async def resolve_episode_id(self, locator: EpisodeLocator, language: str) -> Optional[str]:
        return await asyncio.to_thread(self.get_episode_tvdb_id, locator, language)

    async def fetch_episode(self, episode_id: int, language: str) -> RawEpisodeRecord:
        return await asyncio.to_thread(self.get_episode, episode_id, language)

    def close(self) -> None:
        self.session.close()


def create_tvdb_client_from_config(config: Any, logger: Optional[logging.Logger] = None) -> TvdbClient:
    """
    Create TvdbClient instance from Config

    Args:
        config: Config instance (with tvdb and proxy at root level)
        logger: Optional logger instance

    Returns:
        TvdbClient instance configured with proxy if specified
    """
    tvdb_config = config.tvdb
    proxy_host = None
    proxy_port = None
    if config.proxy:
        proxy_host = config.proxy.host
        proxy_port = config.proxy.port

    return TvdbClient(
        api_key=tvdb_config.api_key,
        base_url=tvdb_config.base_url,
        language=tvdb_config.language,
        proxy_host=proxy_host,
        proxy_port=proxy_port,
        rate_limit=tvdb_config.rate_limit,
        timeout=tvdb_config.timeout,
        logger=logger
    )
