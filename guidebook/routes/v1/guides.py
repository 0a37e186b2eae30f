# guidebook/routes/v1/guides.py
"""
Guide directory routes - API v1

Endpoints:
    GET / - Paginated guides with their free slots
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_guide_service
from ...schemas.guide import GuideListResponse, GuideResponse, Pagination
from ...services.guide_service import GuideService

router = APIRouter(tags=["guides-v1"])


@router.get("", response_model=GuideListResponse)
def list_guides(
    # Raw strings: unparseable values fall back to defaults instead of failing
    page: Optional[str] = Query(None, description="Page number, starting at 1"),
    size: Optional[str] = Query(None, description="Page size, capped at 100"),
    expertise: Optional[str] = Query(None, description='Expertise filter; "all" disables it'),
    guide_service: GuideService = Depends(get_guide_service),
) -> GuideListResponse:
    listing = guide_service.list_guides(page=page, size=size, expertise=expertise)
    return GuideListResponse(
        guides=[
            GuideResponse.from_guide(guide, listing.free_slots[guide.id])
            for guide in listing.guides
        ],
        expertises=listing.expertises,
        pagination=Pagination(total=listing.total, page=listing.page, size=listing.size),
    )
