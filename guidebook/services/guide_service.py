# guidebook/services/guide_service.py
"""
Guide Service for GuideBook

Paginated guide directory with each guide's currently free slots.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import Settings, settings
from ..core.constants import MAX_DB_INT
from ..models.guide import Guide
from ..repositories.factory import RepositoryFactory
from ..repositories.guide_repository import GuideRepository
from .availability_service import AvailabilityService
from .base import BaseService

ALL_EXPERTISE = "all"


@dataclass
class GuideListing:
    guides: List[Guide]
    free_slots: Dict[int, List[datetime]]
    expertises: List[str]
    total: int
    page: int
    size: int
    expertise: Optional[str] = None


def _coerce_positive(value: Any, default: int, maximum: int = MAX_DB_INT) -> int:
    """Parse a query value as an int in ``1..maximum``, falling back to ``default``."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if 1 <= parsed <= maximum else default


class GuideService(BaseService):
    def __init__(
        self,
        db: Session,
        guide_repository: Optional[GuideRepository] = None,
        availability_service: Optional[AvailabilityService] = None,
        config: Optional[Settings] = None,
    ):
        super().__init__(db)
        self.config = config or settings
        self.guide_repository = guide_repository or RepositoryFactory.create_guide_repository(db)
        self.availability_service = availability_service or AvailabilityService(db)

    @BaseService.measure_operation("list_guides")
    def list_guides(
        self,
        page: Any = None,
        size: Any = None,
        expertise: Optional[str] = None,
    ) -> GuideListing:
        """
        List guides with their free slots.

        Invalid ``page``/``size`` values fall back to defaults and ``size`` is
        capped. ``expertise`` matches case-insensitively; "all" or empty means
        no filter.
        """
        page_size = min(
            _coerce_positive(size, self.config.default_page_size), self.config.max_page_size
        )
        # Pages whose offset would not fit an Integer column fall back to the first
        page_number = _coerce_positive(page, 1, maximum=MAX_DB_INT // page_size + 1)
        expertise_filter = (expertise or "").strip() or None
        if expertise_filter and expertise_filter.lower() == ALL_EXPERTISE:
            expertise_filter = None

        with self.read_guard():
            guides, total = self.guide_repository.list_guides(
                offset=(page_number - 1) * page_size,
                limit=page_size,
                expertise=expertise_filter,
            )
            expertises = self.guide_repository.list_expertises()

        free_slots = self.availability_service.free_slots_for_many(guides)

        return GuideListing(
            guides=guides,
            free_slots=free_slots,
            expertises=expertises,
            total=total,
            page=page_number,
            size=page_size,
            expertise=expertise_filter,
        )
