#!/usr/bin/env python3
"""
TVDB client tests.

Tests TvdbClient from tvdb.py with the HTTP session mocked out:
- login and token refresh
- series id resolution from Tvdb / IMDb / Zap2It ids
- episode query construction per display order and air date
- error mapping for transport and server faults
"""

import asyncio
import sys
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

# Add parent directory to path to import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from model import EpisodeLocator, RawEpisodeRecord
from tvdb import (
    TvdbClient,
    TvdbNotFoundException,
    TvdbServerException,
    create_tvdb_client_from_config,
)


BASE_URL = "https://api.example.test"


def fake_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else {}
    return response


class FakeApi:
    """Routes mocked session.request calls by method and path"""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def __call__(self, method, url, params=None, json=None, headers=None, timeout=None):
        path = url[len(BASE_URL):]
        self.calls.append({'method': method, 'path': path, 'params': params, 'json': json, 'headers': headers})
        handler = self.routes.get((method, path))
        if handler is None:
            return fake_response(404)
        if callable(handler) and not isinstance(handler, MagicMock):
            return handler(params)
        if isinstance(handler, list):
            return handler.pop(0)
        return handler


def make_client(routes):
    client = TvdbClient(api_key="secret", base_url=BASE_URL, rate_limit=1000)
    api = FakeApi(routes)
    client.session.request = MagicMock(side_effect=api)
    return client, api


LOGIN = fake_response(200, {'token': 'abc'})


class TestAuthentication:
    """Tests for login and token refresh"""

    def test_login_before_first_request(self):
        client, api = make_client({
            ('POST', '/login'): LOGIN,
            ('GET', '/episodes/55'): fake_response(200, {'data': {'id': 55}}),
        })

        client.get_episode(55, "en")

        assert api.calls[0]['path'] == '/login'
        assert api.calls[0]['json'] == {'apikey': 'secret'}
        assert api.calls[1]['headers']['Authorization'] == 'Bearer abc'
        assert api.calls[1]['headers']['Accept-Language'] == 'en'

    def test_relogin_on_unauthorized(self):
        client, api = make_client({
            ('POST', '/login'): [fake_response(200, {'token': 'old'}), fake_response(200, {'token': 'new'})],
            ('GET', '/episodes/55'): [fake_response(401), fake_response(200, {'data': {'id': 55}})],
        })

        record = client.get_episode(55)

        assert record.id == 55
        assert client.token == 'new'
        assert [call['path'] for call in api.calls] == ['/login', '/episodes/55', '/login', '/episodes/55']

    def test_login_without_token_fails(self):
        client, _ = make_client({('POST', '/login'): fake_response(200, {})})

        with pytest.raises(TvdbServerException):
            client.login()


class TestEpisodeLookup:
    """Tests for series and episode id resolution"""

    def test_aired_query(self):
        client, api = make_client({
            ('POST', '/login'): LOGIN,
            ('GET', '/series/81189/episodes/query'): fake_response(200, {'data': [{'id': 349232}, {'id': 1}]}),
        })
        locator = EpisodeLocator(series_provider_ids={"Tvdb": "81189"}, index_number=2, parent_index_number=1)

        episode_id = client.get_episode_tvdb_id(locator, "en")

        assert episode_id == "349232"
        assert api.calls[-1]['params'] == {'airedEpisode': 2, 'airedSeason': 1}

    def test_dvd_query(self):
        client, api = make_client({
            ('POST', '/login'): LOGIN,
            ('GET', '/series/81189/episodes/query'): fake_response(200, {'data': [{'id': 10}]}),
        })
        locator = EpisodeLocator(
            series_provider_ids={"Tvdb": "81189"},
            index_number=3,
            parent_index_number=2,
            series_display_order="DVD",
        )

        client.get_episode_tvdb_id(locator)

        assert api.calls[-1]['params'] == {'dvdEpisode': 3, 'dvdSeason': 2}

    def test_absolute_query(self):
        client, api = make_client({
            ('POST', '/login'): LOGIN,
            ('GET', '/series/81189/episodes/query'): fake_response(200, {'data': [{'id': 10}]}),
        })
        locator = EpisodeLocator(
            series_provider_ids={"Tvdb": "81189"},
            index_number=62,
            parent_index_number=3,
            series_display_order="absolute",
        )

        client.get_episode_tvdb_id(locator)

        assert api.calls[-1]['params'] == {'absoluteNumber': 62}

    def test_air_date_query(self):
        client, api = make_client({
            ('POST', '/login'): LOGIN,
            ('GET', '/series/81189/episodes/query'): fake_response(200, {'data': [{'id': 10}]}),
        })
        locator = EpisodeLocator(series_provider_ids={"Tvdb": "81189"}, premiere_date=date(2013, 9, 29))

        client.get_episode_tvdb_id(locator)

        assert api.calls[-1]['params'] == {'firstAired': '2013-09-29'}

    def test_series_resolved_from_imdb_then_zap2it(self):
        client, api = make_client({
            ('POST', '/login'): LOGIN,
            ('GET', '/search/series'): lambda params: (
                fake_response(404) if 'imdbId' in params else fake_response(200, {'data': [{'id': 81189}]})
            ),
            ('GET', '/series/81189/episodes/query'): fake_response(200, {'data': [{'id': 10}]}),
        })
        locator = EpisodeLocator(
            series_provider_ids={"Imdb": "tt0903747", "Zap2It": "SH01234"},
            index_number=1,
            parent_index_number=1,
        )

        episode_id = client.get_episode_tvdb_id(locator)

        assert episode_id == "10"
        searches = [call['params'] for call in api.calls if call['path'] == '/search/series']
        assert searches == [{'imdbId': 'tt0903747'}, {'zap2itId': 'SH01234'}]

    def test_unknown_series(self):
        client, _ = make_client({('POST', '/login'): LOGIN})
        locator = EpisodeLocator(series_provider_ids={"Imdb": "tt0"}, index_number=1)

        assert client.get_episode_tvdb_id(locator) is None

    def test_episode_not_found(self):
        client, _ = make_client({('POST', '/login'): LOGIN})
        locator = EpisodeLocator(series_provider_ids={"Tvdb": "81189"}, index_number=99, parent_index_number=1)

        assert client.get_episode_tvdb_id(locator) is None

    def test_async_surface(self):
        client, _ = make_client({
            ('POST', '/login'): LOGIN,
            ('GET', '/series/81189/episodes/query'): fake_response(200, {'data': [{'id': 77}]}),
            ('GET', '/episodes/77'): fake_response(200, {'data': {'id': 77, 'episodeName': 'Ozymandias'}}),
        })
        locator = EpisodeLocator(series_provider_ids={"Tvdb": "81189"}, index_number=14, parent_index_number=5)

        async def run():
            episode_id = await client.resolve_episode_id(locator, "en")
            return await client.fetch_episode(int(episode_id), "en")

        record = asyncio.run(run())

        assert isinstance(record, RawEpisodeRecord)
        assert record.episode_name == 'Ozymandias'


class TestErrors:
    """Tests for error mapping"""

    def test_server_error(self):
        client, _ = make_client({
            ('POST', '/login'): LOGIN,
            ('GET', '/episodes/55'): fake_response(503),
        })

        with pytest.raises(TvdbServerException) as excinfo:
            client.get_episode(55)
        assert excinfo.value.status_code == 503
        assert not isinstance(excinfo.value, TvdbNotFoundException)

    def test_missing_episode_record(self):
        client, _ = make_client({('POST', '/login'): LOGIN})

        with pytest.raises(TvdbNotFoundException):
            client.get_episode(55)

    def test_transport_error(self):
        client = TvdbClient(api_key="secret", base_url=BASE_URL, rate_limit=1000)
        client.session.request = MagicMock(side_effect=requests.ConnectionError("refused"))

        with pytest.raises(TvdbServerException):
            client.login()

    def test_invalid_json(self):
        response = fake_response(200)
        response.json.side_effect = ValueError("Expecting value")
        client, _ = make_client({('POST', '/login'): response})

        with pytest.raises(TvdbServerException):
            client.login()


class TestFactory:
    """Tests for create_tvdb_client_from_config"""

    def test_proxy_and_settings(self):
        config = MagicMock()
        config.tvdb.api_key = "key"
        config.tvdb.base_url = BASE_URL + "/"
        config.tvdb.language = "fr"
        config.tvdb.rate_limit = 5
        config.tvdb.timeout = 12
        config.proxy.host = "http://proxy.local"
        config.proxy.port = 3128

        client = create_tvdb_client_from_config(config)

        assert client.base_url == BASE_URL
        assert client.language == "fr"
        assert client.timeout == 12
        assert client.min_request_interval == pytest.approx(0.2)
        assert client.session.proxies['https'] == "http://proxy.local:3128"
