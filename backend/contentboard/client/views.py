"""Pure projections of the cached content collection for board, calendar and table views."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable

from contentboard.models.content import ContentStage

STAGES = [s.value for s in ContentStage]


def group_by_stage(contents: Iterable[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    """Kanban columns in pipeline order; every stage is present, possibly empty."""
    columns: dict[str, list[dict[str, Any]]] = {stage: [] for stage in STAGES}
    for item in contents:
        columns.setdefault(str(item.get("stage")), []).append(item)
    return columns


def _as_date(value: Any) -> date | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def group_by_planned_date(contents: Iterable[dict[str, Any]]) -> dict[date, list[dict[str, Any]]]:
    """Calendar buckets keyed by planned day, ascending; unscheduled items are left out."""
    buckets: dict[date, list[dict[str, Any]]] = {}
    for item in contents:
        day = _as_date(item.get("plannedDate"))
        if day is None:
            continue
        buckets.setdefault(day, []).append(item)
    return dict(sorted(buckets.items()))


def filter_by_type(contents: Iterable[dict[str, Any]], content_type: str | None) -> list[dict[str, Any]]:
    if not content_type or content_type == "all":
        return list(contents)
    return [c for c in contents if c.get("contentType") == content_type]


def _created(item: dict[str, Any]) -> str:
    return str(item.get("createdAt") or "")


def sort_contents(contents: Iterable[dict[str, Any]], option: str = "lastModified") -> list[dict[str, Any]]:
    items = list(contents)
    if option == "title":
        return sorted(items, key=lambda c: str(c.get("title") or "").casefold())
    if option == "oldest":
        return sorted(items, key=_created)
    if option == "newest":
        return sorted(items, key=_created, reverse=True)
    # "lastModified" keeps the server's order.
    return items
