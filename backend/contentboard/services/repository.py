from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from contentboard.models.content import ContentItem


# Ids are 32-bit integer keys; lookups outside that range cannot match a row.
_ID_RANGE = range(-(2**31), 2**31)


class ContentRepository:
    """Persistence for content items, bound to one session and transaction."""

    def __init__(self, db: Session):
        self.db = db

    def list(self, owner_id: int | None = None) -> list[ContentItem]:
        stmt = select(ContentItem).order_by(ContentItem.id)
        if owner_id is not None:
            stmt = stmt.where(ContentItem.user_id == owner_id)
        return list(self.db.scalars(stmt).unique().all())

    def get(self, content_id: int, *, for_update: bool = False) -> ContentItem | None:
        if content_id not in _ID_RANGE:
            return None
        stmt = select(ContentItem).where(ContentItem.id == content_id)
        if for_update:
            # Lock only the content row; the joined owner row stays unlocked.
            stmt = stmt.with_for_update(of=ContentItem)
        return self.db.scalars(stmt).unique().first()

    def add(self, item: ContentItem) -> ContentItem:
        self.db.add(item)
        self.db.flush()
        self.db.refresh(item)
        return item

    def delete(self, item: ContentItem) -> None:
        self.db.delete(item)
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
