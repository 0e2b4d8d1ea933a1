import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contentboard.db.base import Base
from contentboard.models.user import User


class ContentStage(str, enum.Enum):
    idea = "Idea"
    planning = "Planning"
    recording = "Recording"
    editing = "Editing"
    published = "Published"


class ContentType(str, enum.Enum):
    short = "Short"
    long = "Long"


def _enum_values(enum_cls) -> list[str]:
    return [m.value for m in enum_cls]


class ContentItem(Base):
    __tablename__ = "contents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(500))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    script: Mapped[str | None] = mapped_column(Text, nullable=True)
    thumbnail_idea: Mapped[str | None] = mapped_column(Text, nullable=True)
    resources_links: Mapped[str | None] = mapped_column(Text, nullable=True)

    stage: Mapped[ContentStage] = mapped_column(
        Enum(ContentStage, name="content_stage", native_enum=False, length=20, values_callable=_enum_values),
        index=True,
        default=ContentStage.idea,
    )
    content_type: Mapped[ContentType] = mapped_column(
        Enum(ContentType, name="content_type", native_enum=False, length=10, values_callable=_enum_values),
    )

    planned_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    youtube_live_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    instagram_live_link: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    user_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    owner: Mapped[User | None] = relationship(User, lazy="joined")
