"""
API Data Models
Pydantic schemas for request/response data
"""

import sys
from pathlib import Path
from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import date, datetime

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from model import EpisodeLocator


class EpisodeLocatorRequest(BaseModel):
    """Episode lookup key sent by the host application"""
    series_provider_ids: Dict[str, str] = Field(..., description="Series ids by catalog name (Tvdb, Imdb, Zap2It)")
    index_number: Optional[int] = Field(None, description="Episode number")
    parent_index_number: Optional[int] = Field(None, description="Season number")
    index_number_end: Optional[int] = Field(None, description="Last episode number of a multi-episode file")
    premiere_date: Optional[date] = Field(None, description="Air date, used when no episode number is known")
    series_display_order: str = Field("", description="Numbering scheme: aired, dvd or absolute")
    metadata_language: str = Field("en", description="Content language")
    name: Optional[str] = None
    path: Optional[str] = None

    def to_locator(self) -> EpisodeLocator:
        return EpisodeLocator(
            series_provider_ids=dict(self.series_provider_ids),
            index_number=self.index_number,
            parent_index_number=self.parent_index_number,
            index_number_end=self.index_number_end,
            premiere_date=self.premiere_date,
            series_display_order=self.series_display_order,
            metadata_language=self.metadata_language,
            name=self.name,
            path=self.path
        )


class PersonCreditResponse(BaseModel):
    """Person credited on an episode"""
    name: str
    type: str
    role: str = ""


class EpisodeResponse(BaseModel):
    """Mapped episode metadata"""
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
    provider_ids: Dict[str, str] = Field(default_factory=dict)
    people: List[PersonCreditResponse] = Field(default_factory=list)


class MetadataResultResponse(BaseModel):
    """Metadata lookup outcome"""
    item: Optional[EpisodeResponse] = None
    has_metadata: bool = False
    queried_by_id: bool = True
    result_language: Optional[str] = None


class SearchResultResponse(BaseModel):
    """Single episode search result"""
    name: Optional[str] = None
    index_number: Optional[int] = None
    parent_index_number: Optional[int] = None
    index_number_end: Optional[int] = None
    premiere_date: Optional[datetime] = None
    production_year: Optional[int] = None
    provider_ids: Dict[str, str] = Field(default_factory=dict)
    search_provider_name: str


class ErrorResponse(BaseModel):
    """Error response"""
    detail: str = Field(..., description="Error message")
    error_type: Optional[str] = None
