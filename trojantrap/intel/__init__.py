"""Malware hash intelligence: the in-memory store and the feed downloader."""

from .hash_store import HashStore
from .feed_downloader import FeedDownloader

__all__ = ["HashStore", "FeedDownloader"]
