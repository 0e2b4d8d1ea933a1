from __future__ import annotations

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Response
from sqlalchemy.orm import Session

from contentboard.core.errors import ValidationFailed
from contentboard.core.notifier import ChangeNotifier, get_notifier
from contentboard.core.security import AuthContext, get_auth_context
from contentboard.db.session import get_db
from contentboard.schemas.content import ContentPublic
from contentboard.services.contents import ContentService, to_public
from contentboard.services.repository import ContentRepository

router = APIRouter(prefix="/api/contents", tags=["contents"])


def get_content_service(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
) -> ContentService:
    return ContentService(ContentRepository(db), auth)


def _parse_id(raw: str) -> int:
    try:
        content_id = int(str(raw).strip())
    except ValueError as e:
        raise ValidationFailed.for_field("id", "Invalid ID format") from e
    return content_id


@router.get("", response_model=list[ContentPublic])
def list_contents(service: ContentService = Depends(get_content_service)):
    return [to_public(c) for c in service.list_contents()]


@router.get("/{content_id}", response_model=ContentPublic)
def get_content(content_id: str, service: ContentService = Depends(get_content_service)):
    return to_public(service.get_content(_parse_id(content_id)))


@router.post("", response_model=ContentPublic, status_code=201)
def create_content(
    background_tasks: BackgroundTasks,
    payload: Any = Body(default=None),
    service: ContentService = Depends(get_content_service),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    item = service.create_content(payload)
    background_tasks.add_task(notifier.content_updated)
    return to_public(item)


@router.patch("/{content_id}", response_model=ContentPublic)
def update_content(
    content_id: str,
    background_tasks: BackgroundTasks,
    payload: Any = Body(default=None),
    service: ContentService = Depends(get_content_service),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    item = service.update_content(_parse_id(content_id), payload)
    background_tasks.add_task(notifier.content_updated)
    return to_public(item)


@router.patch("/{content_id}/stage", response_model=ContentPublic)
def update_stage(
    content_id: str,
    background_tasks: BackgroundTasks,
    payload: Any = Body(default=None),
    service: ContentService = Depends(get_content_service),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    item = service.update_stage(_parse_id(content_id), payload)
    background_tasks.add_task(notifier.content_updated)
    return to_public(item)


@router.delete("/{content_id}", status_code=204)
def delete_content(
    content_id: str,
    background_tasks: BackgroundTasks,
    service: ContentService = Depends(get_content_service),
    notifier: ChangeNotifier = Depends(get_notifier),
):
    service.delete_content(_parse_id(content_id))
    background_tasks.add_task(notifier.content_updated)
    return Response(status_code=204, background=background_tasks)
