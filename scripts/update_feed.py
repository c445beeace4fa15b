#!/usr/bin/env python3
"""TrojanTrap hash feed updater.

Downloads the MalwareBazaar CSV export to the configured feed path, then
loads it once to report how many hashes it holds. The running server
picks the new file up on its next start.

Exit codes:
    0: feed downloaded
    1: download or write failed

Usage:
    python scripts/update_feed.py
    python scripts/update_feed.py --dest data/full.csv
    python scripts/update_feed.py --url https://bazaar.abuse.ch/export/csv/recent/
"""

import argparse
import asyncio
import sys

from trojantrap.dependencies import get_app_config, resolve_path
from trojantrap.errors import FeedDownloadError
from trojantrap.intel.feed_downloader import FeedDownloader
from trojantrap.intel.hash_store import SOURCE_FEED, HashStore
from trojantrap.utils.logging import get_logger, setup_logging

logger = get_logger("scripts.update_feed")


def main(argv=None) -> int:
    config = get_app_config()

    parser = argparse.ArgumentParser(description="Download the TrojanTrap malware hash feed")
    parser.add_argument("--url", default=config.hash_feed_url, help="Feed export URL")
    parser.add_argument("--dest", default=config.hash_feed_path, help="Destination CSV path")
    parser.add_argument("--timeout", type=float, default=config.feed_download_timeout, help="Request timeout in seconds")
    parser.add_argument("--debug", action="store_true", help="Human-readable log output")
    args = parser.parse_args(argv)

    setup_logging(
        debug=args.debug or config.debug,
        log_dir=str(resolve_path(config.log_dir)),
        app_name=config.app_name,
    )

    downloader = FeedDownloader(url=args.url, dest=resolve_path(args.dest), timeout=args.timeout)
    try:
        path = asyncio.run(downloader.download())
    except FeedDownloadError as e:
        logger.error("feed_update_failed", error=str(e))
        return 1

    store = HashStore()
    size = store.load(path)
    if store.source != SOURCE_FEED:
        logger.error("feed_update_unreadable", path=str(path))
        return 1
    logger.info("feed_updated", path=str(path), hashes=size)
    return 0


if __name__ == "__main__":
    sys.exit(main())
