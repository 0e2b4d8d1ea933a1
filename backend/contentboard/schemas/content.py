from __future__ import annotations

from datetime import date, datetime

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

from contentboard.models.content import ContentStage, ContentType


_url_adapter = TypeAdapter(AnyUrl)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ContentFields(CamelModel):
    """Editable content fields; every field optional, as for a partial update."""

    title: str | None = Field(default=None, min_length=3)
    description: str | None = None
    script: str | None = None
    thumbnail_idea: str | None = None
    resources_links: str | None = None
    stage: ContentStage | None = None
    content_type: ContentType | None = None
    planned_date: datetime | None = None
    youtube_live_link: str | None = None
    instagram_live_link: str | None = None

    @field_validator(
        "description",
        "script",
        "thumbnail_idea",
        "resources_links",
        "youtube_live_link",
        "instagram_live_link",
        mode="before",
    )
    @classmethod
    def _empty_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("planned_date", mode="before")
    @classmethod
    def _parse_planned_date(cls, v):
        if v is None or isinstance(v, datetime):
            return v
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, date):
            return datetime(v.year, v.month, v.day)
        if isinstance(v, str):
            raw = v.strip()
            try:
                if len(raw) == 10:
                    d = date.fromisoformat(raw)
                    return datetime(d.year, d.month, d.day)
                return datetime.fromisoformat(raw.replace("Z", "+00:00"))
            except ValueError as e:
                raise ValueError("Invalid date") from e
        raise ValueError("Invalid date")

    @field_validator("youtube_live_link", "instagram_live_link")
    @classmethod
    def _valid_url(cls, v: str | None) -> str | None:
        if v is None:
            return None
        try:
            _url_adapter.validate_python(v)
        except ValueError as e:
            raise ValueError("Invalid url") from e
        return v

    @field_validator("title", "stage", "content_type")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("Field may not be null")
        return v


class ContentUpdate(ContentFields):
    pass


class ContentCreate(ContentFields):
    title: str = Field(min_length=3)
    stage: ContentStage = ContentStage.idea
    content_type: ContentType


class StageUpdate(CamelModel):
    stage: ContentStage


class ContentPublic(CamelModel):
    id: int
    title: str
    description: str | None
    script: str | None
    thumbnail_idea: str | None
    resources_links: str | None
    stage: ContentStage
    content_type: ContentType
    planned_date: str | None
    youtube_live_link: str | None
    instagram_live_link: str | None
    created_at: datetime
    user_id: int | None
    creator: str | None = None
