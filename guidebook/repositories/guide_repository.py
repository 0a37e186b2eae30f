# guidebook/repositories/guide_repository.py
"""
Guide Repository for GuideBook

Read-side queries for the guide directory. Guides and their published
slots are maintained outside this service.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from ..models.guide import Guide
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class GuideRepository(BaseRepository[Guide]):
    def __init__(self, db: Session):
        super().__init__(db, Guide)

    def _filtered(self, expertise: Optional[str]) -> Query:
        query = self.db.query(Guide)
        if expertise:
            query = query.filter(func.lower(Guide.expertise) == expertise.lower())
        return query

    def list_guides(
        self, *, offset: int, limit: int, expertise: Optional[str] = None
    ) -> Tuple[List[Guide], int]:
        """
        One page of guides ordered by id, plus the total matching count.

        ``expertise`` matches case-insensitively; None means no filter.
        """
        query = self._filtered(expertise)
        total = self._execute_scalar(query.with_entities(func.count(Guide.id)))
        page = self._execute_query(query.order_by(Guide.id).offset(offset).limit(limit))
        return page, int(total or 0)

    def list_expertises(self) -> List[str]:
        """Distinct expertise values, alphabetically."""
        query = self.db.query(Guide.expertise).distinct().order_by(Guide.expertise)
        return [row[0] for row in self._execute_query(query)]
