"""Repository helpers for publish records."""

from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models


class PublishedJobRepository:
    """Published job access helpers."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def exists(self, job_id: str) -> bool:
        return self.session.get(models.PublishedJobORM, job_id) is not None

    def insert_if_absent(self, job_id: str) -> bool:
        """Insert a row; False when the primary key already exists."""

        self.session.add(models.PublishedJobORM(job_id=job_id))
        try:
            self.session.flush()
        except IntegrityError:
            self.session.rollback()
            return False
        return True

    def list_recent(self, limit: int = 50) -> List[models.PublishedJobORM]:
        stmt = (
            select(models.PublishedJobORM)
            .order_by(models.PublishedJobORM.published_at.desc())
            .limit(limit)
        )
        return list(self.session.scalars(stmt))
