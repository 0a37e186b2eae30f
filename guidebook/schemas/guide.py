"""Guide directory responses."""

from datetime import datetime
from typing import Any, Iterable, List

from pydantic import BaseModel, Field

from ..core.slots import format_slot
from .base import ResponseModel


class GuideResponse(ResponseModel):
    id: int
    name: str
    expertise: str
    availability: List[str] = Field(
        default_factory=list, description="Free slots, canonical UTC RFC3339, published order"
    )

    @classmethod
    def from_guide(cls, guide: Any, free_slots: Iterable[datetime]) -> "GuideResponse":
        return cls(
            id=guide.id,
            name=guide.name,
            expertise=guide.expertise,
            availability=[format_slot(slot) for slot in free_slots],
        )


class Pagination(BaseModel):
    total: int
    page: int
    size: int


class GuideListResponse(BaseModel):
    guides: List[GuideResponse]
    expertises: List[str]
    pagination: Pagination
