"""HTTP client for the Linkding REST API."""

import io
import logging
import os
import secrets
from datetime import timezone
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests

from .mimes import get_mime_type
from .models import Asset, Bookmark

logger = logging.getLogger(__name__)

_FIELD_NAME = "file"


class HTTPStatusError(Exception):
    """Raised when the server answers with a non-2xx status."""

    def __init__(self, status_code, reason=""):
        self.status_code = status_code
        self.reason = reason
        status = f"{status_code} {reason}".strip()
        super().__init__(f"expected success status code, was {status}")


class _MultipartBody:
    """A readable request body streaming a single file as multipart form data."""

    def __init__(self, prefix, file, size, suffix):
        self._sources = [io.BytesIO(prefix), file, io.BytesIO(suffix)]
        self._length = len(prefix) + size + len(suffix)

    def __len__(self):
        return self._length

    def read(self, size=-1):
        out = bytearray()
        while self._sources and (size is None or size < 0 or len(out) < size):
            wanted = -1 if size is None or size < 0 else size - len(out)
            chunk = self._sources[0].read(wanted)
            if not chunk:
                self._sources.pop(0)
                continue
            out += chunk
        return bytes(out)


def _bookmark_from_json(data):
    return Bookmark(
        id=data.get("id", 0),
        url=data.get("url") or "",
        title=data.get("title") or "",
    )


def _asset_from_json(data):
    return Asset(
        id=data.get("id", 0),
        asset_type=data.get("asset_type") or "",
        content_type=data.get("content_type") or "",
        display_name=data.get("display_name") or "",
    )


def _multipart_framing(boundary, file_name, mime_type):
    prefix = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{_FIELD_NAME}"; filename="{file_name}"\r\n'
        f"Content-Type: {mime_type}\r\n"
        "\r\n"
    ).encode()
    suffix = f"\r\n--{boundary}--\r\n".encode()
    return prefix, suffix


class Client:
    """Authenticated access to a Linkding instance."""

    def __init__(self, base_url, token):
        if not base_url:
            raise ValueError("base URL is required")
        parsed = urlsplit(base_url)
        if not parsed.scheme:
            raise ValueError(f"base URL is not absolute: {base_url}")
        self.base_url = base_url
        self.token = token
        self._base = parsed
        self._session = requests.Session()

    def get_bookmarks(self, query):
        """Return every bookmark matching ``query``, following pagination."""
        logger.debug(
            "Fetching bookmarks tag=%r bundle_id=%r modified_since=%r",
            query.tag,
            query.bundle_id,
            query.modified_since,
        )
        params = {}
        if query.tag:
            params["q"] = "#" + query.tag
        if query.bundle_id > 0:
            params["bundle"] = str(query.bundle_id)
        if query.modified_since is not None:
            params["modified_since"] = query.modified_since.astimezone(
                timezone.utc
            ).strftime("%Y-%m-%dT%H:%M:%SZ")

        url = self._url("bookmarks/", params=params)
        bookmarks = [_bookmark_from_json(item) for item in self._get_all_items(url)]
        logger.debug("Fetched bookmarks count=%d", len(bookmarks))
        return bookmarks

    def get_bookmark_assets(self, bookmark_id):
        """Return all assets attached to a bookmark."""
        logger.debug("Fetching assets for bookmark %d", bookmark_id)
        url = self._url("bookmarks", str(bookmark_id), "assets/")
        assets = [_asset_from_json(item) for item in self._get_all_items(url)]
        logger.debug("Fetched assets for bookmark count=%d", len(assets))
        return assets

    def download_bookmark_asset(self, bookmark_id, asset_id):
        """Return the content of an asset as bytes."""
        logger.debug("Downloading asset %d of bookmark %d", asset_id, bookmark_id)
        url = self._url(
            "bookmarks", str(bookmark_id), "assets", str(asset_id), "download/"
        )
        return self._send("GET", url).content

    def add_bookmark_asset(self, bookmark_id, path):
        """Upload the file at ``path`` as an asset of a bookmark."""
        logger.debug("Adding asset for bookmark %d", bookmark_id)
        file_name = os.path.basename(path)
        mime_type = get_mime_type(file_name)
        size = os.path.getsize(path)
        boundary = secrets.token_hex(30)
        prefix, suffix = _multipart_framing(boundary, file_name, mime_type)
        headers = {"Content-Type": f"multipart/form-data; boundary={boundary}"}
        url = self._url("bookmarks", str(bookmark_id), "assets/upload/")

        with open(path, "rb") as file:
            body = _MultipartBody(prefix, file, size, suffix)
            response = self._send("POST", url, headers=headers, data=body)

        logger.debug("Added asset")
        return _asset_from_json(response.json())

    def _url(self, *parts, params=None):
        base = self._base
        path = base.path.rstrip("/") + "/" + "/".join(("api",) + parts)
        query_items = parse_qsl(base.query, keep_blank_values=True)
        if params:
            merged = dict(query_items)
            merged.update(params)
            query_items = sorted(merged.items())
        return urlunsplit((base.scheme, base.netloc, path, urlencode(query_items), ""))

    def _get_all_items(self, url):
        items = []
        next_url = url
        while next_url is not None:
            page = self._send("GET", next_url).json()
            items.extend(page.get("results") or [])
            next_url = page.get("next")
        return items

    def _send(self, method, url, headers=None, data=None):
        request_headers = dict(headers or {})
        request_headers["Authorization"] = f"Token {self.token}"
        logger.debug("Sending HTTP request method=%s url=%s", method, url)
        response = self._session.request(method, url, headers=request_headers, data=data)
        logger.debug("Received HTTP response status_code=%d", response.status_code)
        if not 200 <= response.status_code <= 299:
            raise HTTPStatusError(response.status_code, response.reason or "")
        return response