"""
Episode API Routes
Endpoints exposing the episode provider to the host application
"""

import sys
from pathlib import Path
from typing import List

import requests
from fastapi import APIRouter, Depends, HTTPException, Query, Response

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent.parent))

from app.models.api_models import EpisodeLocatorRequest, MetadataResultResponse, SearchResultResponse
from app.services.provider_service import get_episode_provider
from episode_provider import EpisodeProvider

router = APIRouter()


@router.post("/episodes/metadata", response_model=MetadataResultResponse)
async def get_episode_metadata(
    request: EpisodeLocatorRequest,
    provider: EpisodeProvider = Depends(get_episode_provider)
):
    """
    Get episode metadata

    Resolves the episode on TVDB and maps it to the host schema. Files
    spanning several episodes are combined into a single result.
    """
    result = await provider.get_metadata(request.to_locator())
    return MetadataResultResponse(**result.to_dict())


@router.post("/episodes/search", response_model=List[SearchResultResponse])
async def search_episodes(
    request: EpisodeLocatorRequest,
    provider: EpisodeProvider = Depends(get_episode_provider)
):
    """Search TVDB for the episode described by the locator"""
    results = await provider.get_search_results(request.to_locator())
    return [SearchResultResponse(**result.to_dict()) for result in results]


@router.get("/images")
async def get_image(
    url: str = Query(..., description="Image URL"),
    provider: EpisodeProvider = Depends(get_episode_provider)
):
    """Fetch an image and pass the upstream response through"""
    try:
        response = await provider.get_image_response(url)
    except requests.RequestException as e:
        raise HTTPException(
            status_code=502,
            detail=f"Image request failed: {str(e)}"
        )

    return Response(
        content=response.content,
        status_code=response.status_code,
        media_type=response.headers.get('Content-Type')
    )
