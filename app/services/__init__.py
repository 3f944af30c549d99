"""
app/services package marker.
"""

from app.services.feed_cache import FeedCache
from app.services.feed_loader import FeedLoader, parse_feed_text
from app.services.project_data_service import (
    ProjectDataService,
    ProjectSnapshot,
    get_project_data_service,
)

__all__ = [
    "FeedCache",
    "FeedLoader",
    "parse_feed_text",
    "ProjectDataService",
    "ProjectSnapshot",
    "get_project_data_service",
]
