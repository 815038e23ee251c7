"""Archiving PDF bookmarks as Linkding assets."""

import logging
import os
import shutil
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from .mimes import get_mime_type, is_known_mime_type
from .models import Asset, Bookmark, BookmarksQuery
from .pdf import download, is_pdf

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobConfiguration:
    """Settings for one pass over the bookmarks."""

    tags: Sequence[str] = ()
    bundle_id: int = 0
    is_dry_run: bool = False
    last_scan: Optional[datetime] = None


@dataclass
class JobSummary:
    """Bookmarks whose PDF was archived, and those that failed."""

    succeeded: List[Bookmark] = field(default_factory=list)
    failed: List[Bookmark] = field(default_factory=list)


def get_bookmarks(client, config):
    """Return the bookmarks for all configured tags, without duplicates."""
    bookmarks = {}
    for tag in config.tags or ("",):
        query = BookmarksQuery(
            tag=tag, bundle_id=config.bundle_id, modified_since=config.last_scan
        )
        for bookmark in client.get_bookmarks(query):
            bookmarks.setdefault(bookmark.id, bookmark)
    return list(bookmarks.values())


def _download_pdf(client, bookmark):
    """Download the bookmark's PDF, or return None if it is already stored."""
    context = {"bookmark_id": bookmark.id}
    try:
        assets = client.get_bookmark_assets(bookmark.id)
    except Exception:
        logger.error("Failed to fetch bookmark assets", extra=context)
        raise

    existing = next(
        (
            asset
            for asset in assets
            if asset.asset_type == "upload" and is_known_mime_type(asset.content_type)
        ),
        None,
    )
    if existing is not None:
        logger.info("PDF asset already exists", extra={**context, "asset_id": existing.id})
        return None

    logger.info("Downloading PDF", extra=context)
    try:
        path = download(bookmark.url)
    except Exception as err:
        logger.error("Failed to download PDF", extra={**context, "error": str(err)})
        raise

    logger.info("PDF downloaded successfully", extra={**context, "path": path})
    return path


def _upload_asset(client, bookmark, path, is_dry_run):
    if is_dry_run:
        os.stat(path)
        return Asset(
            id=-1,
            asset_type="upload",
            content_type=get_mime_type(path),
            display_name="Simulated Asset" + os.path.splitext(path)[1],
        )
    return client.add_bookmark_asset(bookmark.id, path)


def _upload_pdf(client, bookmark, path, is_dry_run):
    context = {"bookmark_id": bookmark.id, "is_dry_run": is_dry_run, "path": path}
    logger.info("Adding asset", extra=context)
    try:
        asset = _upload_asset(client, bookmark, path, is_dry_run)
    except Exception as err:
        logger.error("Failed to add asset", extra={**context, "error": str(err)})
        raise
    finally:
        shutil.rmtree(os.path.dirname(path), ignore_errors=True)
    logger.info("Asset added successfully", extra={**context, "asset_id": asset.id})
    return asset


def process_bookmarks(client, config):
    """Archive the PDF of every matching bookmark that has none yet.

    Errors while listing bookmarks propagate; errors for single bookmarks
    are logged and counted as failures.
    """
    context = {
        "tags": list(config.tags),
        "bundle_id": config.bundle_id,
        "is_dry_run": config.is_dry_run,
    }
    bookmarks = get_bookmarks(client, config)
    summary = JobSummary()

    if not bookmarks:
        logger.info("No bookmarks to process", extra=context)
        return summary

    logger.info("Processing bookmarks", extra={**context, "count": len(bookmarks)})

    with ThreadPoolExecutor() as executor:
        uploads = []
        for bookmark in bookmarks:
            if not is_pdf(bookmark.url):
                logger.debug("Skipping non-PDF URL", extra={**context, "url": bookmark.url})
                continue
            try:
                path = _download_pdf(client, bookmark)
            except Exception:
                summary.failed.append(bookmark)
                continue
            if path is None:
                continue
            future = executor.submit(
                _upload_pdf, client, bookmark, path, config.is_dry_run
            )
            uploads.append((future, bookmark))

        for future, bookmark in uploads:
            if future.exception() is None:
                summary.succeeded.append(bookmark)
            else:
                summary.failed.append(bookmark)

    logger.info(
        "Done processing bookmarks",
        extra={
            **context,
            "succeeded": len(summary.succeeded),
            "failed": len(summary.failed),
        },
    )
    return summary