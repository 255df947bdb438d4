"""
Output generation.

This package writes the feed files and checks the article cover images.
"""

from .covers import check_covers
from .writer import feed_payload, read_feed, write_feed

__all__ = ["check_covers", "feed_payload", "read_feed", "write_feed"]
