"""Push channel message types shared by the server notifier and the client library."""

CONTENT_UPDATED = "CONTENT_UPDATED"
