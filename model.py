#!/usr/bin/env python3
"""
Data models for the TVDB Episode Provider
Defines the lookup key, the raw catalog record and the mapped metadata result.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union


PROVIDER_NAME = "TheTVDB"

# Provider id keys
TVDB_KEY = "Tvdb"
IMDB_KEY = "Imdb"
ZAP2IT_KEY = "Zap2It"

SERIES_KEYS = (TVDB_KEY, IMDB_KEY, ZAP2IT_KEY)


class DisplayOrder(str, Enum):
    DEFAULT = "default"
    AIRED = "aired"
    DVD = "dvd"
    ABSOLUTE = "absolute"

    @classmethod
    def matches(cls, value: Optional[str], order: 'DisplayOrder') -> bool:
        """Case-insensitive comparison of a raw preference string"""
        return (value or "").lower() == order.value


class PersonType(Enum):
    DIRECTOR = "Director"
    WRITER = "Writer"
    GUEST_STAR = "GuestStar"


def get_provider_id(provider_ids: Optional[Mapping[str, str]], key: str) -> Optional[str]:
    """Look up a provider id ignoring the case of the key"""
    if not provider_ids:
        return None
    for name, value in provider_ids.items():
        if name.lower() == key.lower():
            return value
    return None


def is_valid_series(provider_ids: Optional[Mapping[str, str]]) -> bool:
    """True when at least one recognized series key carries a value"""
    return any(get_provider_id(provider_ids, key) for key in SERIES_KEYS)


@dataclass(frozen=True)
class EpisodeLocator:
    """Caller-supplied key identifying which episode(s) to fetch"""
    series_provider_ids: Mapping[str, str] = field(default_factory=dict)
    index_number: Optional[int] = None
    parent_index_number: Optional[int] = None
    index_number_end: Optional[int] = None  # Multi-episode files (e.g. S01E01-E03)
    premiere_date: Optional[Union[date, datetime]] = None
    series_display_order: str = ""
    metadata_language: str = "en"
    name: Optional[str] = None
    path: Optional[str] = None

    def series_id(self, key: str = TVDB_KEY) -> Optional[str]:
        return get_provider_id(self.series_provider_ids, key)

    def with_index(self, index_number: int) -> 'EpisodeLocator':
        """Independent copy pointing at a single episode of a span"""
        return replace(self, index_number=index_number)


@dataclass
class EpisodeLanguage:
    """Language tags attached to the translated fields of a record"""
    episode_name: Optional[str] = None
    overview: Optional[str] = None


@dataclass
class RawEpisodeRecord:
    """Episode record as returned by the catalog"""
    id: int
    aired_season: Optional[int] = None
    aired_episode_number: Optional[int] = None
    dvd_season: Optional[int] = None
    dvd_episode_number: Optional[Union[int, float, str]] = None
    absolute_number: Optional[int] = None
    episode_name: Optional[str] = None
    overview: Optional[str] = None
    first_aired: Optional[str] = None
    content_rating: Optional[str] = None
    site_rating: Optional[float] = None
    airs_after_season: Optional[int] = None
    airs_before_season: Optional[int] = None
    airs_before_episode: Optional[int] = None
    directors: List[str] = field(default_factory=list)
    writers: List[str] = field(default_factory=list)
    guest_stars: List[str] = field(default_factory=list)
    imdb_id: Optional[str] = None
    series_id: Optional[int] = None
    language: EpisodeLanguage = field(default_factory=EpisodeLanguage)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RawEpisodeRecord':
        """Create a record from the catalog's JSON payload"""
        language = data.get('language') or {}
        return cls(
            id=data.get('id', 0),
            aired_season=data.get('airedSeason'),
            aired_episode_number=data.get('airedEpisodeNumber'),
            dvd_season=data.get('dvdSeason'),
            dvd_episode_number=data.get('dvdEpisodeNumber'),
            absolute_number=data.get('absoluteNumber'),
            episode_name=data.get('episodeName'),
            overview=data.get('overview'),
            first_aired=data.get('firstAired'),
            content_rating=data.get('contentRating'),
            site_rating=data.get('siteRating'),
            airs_after_season=data.get('airsAfterSeason'),
            airs_before_season=data.get('airsBeforeSeason'),
            airs_before_episode=data.get('airsBeforeEpisode'),
            directors=list(data.get('directors') or []),
            writers=list(data.get('writers') or []),
            guest_stars=list(data.get('guestStars') or []),
            imdb_id=data.get('imdbId'),
            series_id=data.get('seriesId'),
            language=EpisodeLanguage(
                episode_name=language.get('episodeName'),
                overview=language.get('overview')
            )
        )


@dataclass
class PersonCredit:
    """A person associated with an episode"""
    name: str
    type: PersonType
    role: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'type': self.type.value, 'role': self.role}


@dataclass
class MappedEpisode:
    """Episode metadata in the host application's schema"""
    index_number: Optional[int] = None
    parent_index_number: Optional[int] = None
    index_number_end: Optional[int] = None
    airs_before_episode_number: Optional[int] = None
    airs_after_season_number: Optional[int] = None
    airs_before_season_number: Optional[int] = None
    name: Optional[str] = None
    overview: Optional[str] = None
    community_rating: Optional[float] = None
    official_rating: Optional[str] = None
    premiere_date: Optional[datetime] = None
    production_year: Optional[int] = None
    provider_ids: Dict[str, str] = field(default_factory=dict)
    people: List[PersonCredit] = field(default_factory=list)

    def set_provider_id(self, key: str, value: Optional[str]) -> None:
        self.provider_ids[key] = value or ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'index_number': self.index_number,
            'parent_index_number': self.parent_index_number,
            'index_number_end': self.index_number_end,
            'airs_before_episode_number': self.airs_before_episode_number,
            'airs_after_season_number': self.airs_after_season_number,
            'airs_before_season_number': self.airs_before_season_number,
            'name': self.name,
            'overview': self.overview,
            'community_rating': self.community_rating,
            'official_rating': self.official_rating,
            'premiere_date': self.premiere_date.isoformat() if self.premiere_date else None,
            'production_year': self.production_year,
            'provider_ids': dict(self.provider_ids),
            'people': [person.to_dict() for person in self.people]
        }


@dataclass
class MetadataResult:
    """Outcome of a metadata lookup handed to the host application"""
    item: Optional[MappedEpisode] = None
    has_metadata: bool = False
    queried_by_id: bool = True
    result_language: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'item': self.item.to_dict() if self.item else None,
            'has_metadata': self.has_metadata,
            'queried_by_id': self.queried_by_id,
            'result_language': self.result_language
        }


@dataclass
class RemoteSearchResult:
    """Search result projected from a mapped episode"""
    name: Optional[str] = None
    index_number: Optional[int] = None
    parent_index_number: Optional[int] = None
    index_number_end: Optional[int] = None
    premiere_date: Optional[datetime] = None
    production_year: Optional[int] = None
    provider_ids: Dict[str, str] = field(default_factory=dict)
    search_provider_name: str = PROVIDER_NAME

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'index_number': self.index_number,
            'parent_index_number': self.parent_index_number,
            'index_number_end': self.index_number_end,
            'premiere_date': self.premiere_date.isoformat() if self.premiere_date else None,
            'production_year': self.production_year,
            'provider_ids': dict(self.provider_ids),
            'search_provider_name': self.search_provider_name
        }
