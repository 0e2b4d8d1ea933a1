from contentboard.models.user import User, UserRole
from contentboard.models.content import ContentItem, ContentStage, ContentType

__all__ = [
    "User",
    "UserRole",
    "ContentItem",
    "ContentStage",
    "ContentType",
]
