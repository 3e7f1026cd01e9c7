"""HTTP-клиенты внешних систем."""

from .asana import AsanaAPIError, AsanaClient
from .youtrack import YouTrackAPIError, YouTrackClient

__all__ = ["AsanaClient", "AsanaAPIError", "YouTrackClient", "YouTrackAPIError"]
