"""
Feed component.

Public API for the content read paths: feed, single post, creator pages,
collections and the viewer dashboard.
"""

from .component import (
    get_collection,
    get_creator_collections,
    get_creator_posts,
    get_dashboard,
    get_feed,
    get_my_posts,
    get_post,
    present,
)
from .models import CollectionDetail, Dashboard, FeedPage, ReadContext
from .ports import ContentReadRepoPort, DashboardFactsPort

__all__ = [
    # Functions
    "present",
    "get_feed",
    "get_post",
    "get_creator_posts",
    "get_my_posts",
    "get_creator_collections",
    "get_collection",
    "get_dashboard",
    # Models
    "ReadContext",
    "FeedPage",
    "CollectionDetail",
    "Dashboard",
    # Ports
    "ContentReadRepoPort",
    "DashboardFactsPort",
]
