from contentboard.client.api import (
    ApiConflict,
    ApiError,
    ApiForbidden,
    ApiNotFound,
    ApiUnauthorized,
    ApiValidationError,
    ContentApiClient,
)
from contentboard.client.cache import ALL_CONTENTS, ContentStore, QueryCache
from contentboard.client.live import LiveUpdates

__all__ = [
    "ALL_CONTENTS",
    "ApiConflict",
    "ApiError",
    "ApiForbidden",
    "ApiNotFound",
    "ApiUnauthorized",
    "ApiValidationError",
    "ContentApiClient",
    "ContentStore",
    "LiveUpdates",
    "QueryCache",
]
