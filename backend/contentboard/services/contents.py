from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from contentboard.core.errors import AccessDenied, ContentNotFound, ValidationFailed, field_errors
from contentboard.core.security import AuthContext
from contentboard.models.content import ContentItem
from contentboard.schemas.content import ContentCreate, ContentUpdate, StageUpdate
from contentboard.services.repository import ContentRepository

log = logging.getLogger(__name__)


def validate_payload(model: type[BaseModel], data: Any) -> BaseModel:
    if not isinstance(data, dict):
        raise ValidationFailed.for_field("body", "Expected a JSON object")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValidationFailed(field_errors(e.errors())) from e


def to_public(item: ContentItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "title": item.title,
        "description": item.description,
        "script": item.script,
        "thumbnail_idea": item.thumbnail_idea,
        "resources_links": item.resources_links,
        "stage": item.stage,
        "content_type": item.content_type,
        "planned_date": item.planned_date.date().isoformat() if item.planned_date else None,
        "youtube_live_link": item.youtube_live_link,
        "instagram_live_link": item.instagram_live_link,
        "created_at": item.created_at,
        "user_id": item.user_id,
        "creator": item.owner.username if item.owner is not None else None,
    }


class ContentService:
    """Validation, defaulting and ownership checks in front of the content store."""

    def __init__(self, repo: ContentRepository, auth: AuthContext):
        self.repo = repo
        self.auth = auth

    def list_contents(self) -> list[ContentItem]:
        if not self.auth.is_authenticated or self.auth.is_admin:
            return self.repo.list()
        return self.repo.list(owner_id=self.auth.user_id)

    def get_content(self, content_id: int) -> ContentItem:
        item = self.repo.get(content_id)
        if item is None:
            raise ContentNotFound()
        self._check_owner(item)
        return item

    def create_content(self, data: Any) -> ContentItem:
        payload = validate_payload(ContentCreate, data)
        item = ContentItem(**payload.model_dump(), user_id=self.auth.user_id)
        try:
            item = self.repo.add(item)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise
        log.info("content %s created by user %s", item.id, self.auth.user_id)
        return item

    def update_content(self, content_id: int, data: Any) -> ContentItem:
        return self._update(content_id, ContentUpdate, data)

    def update_stage(self, content_id: int, data: Any) -> ContentItem:
        return self._update(content_id, StageUpdate, data)

    def delete_content(self, content_id: int) -> bool:
        try:
            item = self._locked(content_id)
            self.repo.delete(item)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise
        log.info("content %s deleted by user %s", content_id, self.auth.user_id)
        return True

    def _update(self, content_id: int, model: type[BaseModel], data: Any) -> ContentItem:
        # Ownership is checked against the locked pre-update row, in the same
        # transaction as the write.
        try:
            item = self._locked(content_id)
            payload = validate_payload(model, data)
            for field, value in payload.model_dump(exclude_unset=True).items():
                setattr(item, field, value)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise
        log.info("content %s updated by user %s", content_id, self.auth.user_id)
        return item

    def _locked(self, content_id: int) -> ContentItem:
        item = self.repo.get(content_id, for_update=True)
        if item is None:
            raise ContentNotFound()
        self._check_owner(item)
        return item

    def _check_owner(self, item: ContentItem) -> None:
        if not self.auth.may_access(item.user_id):
            raise AccessDenied()
