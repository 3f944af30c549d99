"""
app/connectors package marker.
"""

from app.connectors.base import FeedConnector, FeedFetchError, HTTPFeedConnector
from app.connectors.feed_connector import RemoteFeedConnector, StaticFeedConnector, build_feed_connector

__all__ = [
    "FeedConnector",
    "FeedFetchError",
    "HTTPFeedConnector",
    "RemoteFeedConnector",
    "StaticFeedConnector",
    "build_feed_connector",
]
