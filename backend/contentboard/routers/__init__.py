from contentboard.routers import auth, contents, health, live

__all__ = [
    "auth",
    "contents",
    "health",
    "live",
]
