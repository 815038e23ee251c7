"""Detecting and downloading PDF documents."""

import logging
import os
import shutil
import tempfile
from urllib.parse import unquote, urlsplit

import requests

logger = logging.getLogger(__name__)

_TIMEOUT_SECONDS = 60
_DEFAULT_FILE_NAME = "download.pdf"


class DownloadError(Exception):
    """Raised when the server answers a download with a non-2xx status."""

    def __init__(self, status_code, reason=""):
        self.status_code = status_code
        self.reason = reason
        status = f"{status_code} {reason}".strip()
        super().__init__(f"expected success status code, was {status}")


def _extension(name):
    index = name.rfind(".")
    return name[index:] if index >= 0 else ""


def _url_path(url):
    return unquote(urlsplit(url).path)


def is_pdf(url):
    """Tell whether the URL path ends in a ``.pdf`` extension."""
    try:
        path = _url_path(url)
    except ValueError:
        return False
    return _extension(path.rsplit("/", 1)[-1]) == ".pdf"


def _file_name(url):
    name = _url_path(url).rstrip("/").rsplit("/", 1)[-1]
    logger.debug("Extracted filename from URL filename=%r", name)
    if name in ("", ".", "..") or not _extension(name):
        logger.debug("Using default filename %s", _DEFAULT_FILE_NAME)
        return _DEFAULT_FILE_NAME
    return name


def download(url):
    """Download ``url`` into a new temporary directory and return the file path."""
    logger.debug("Downloading file from URL %s", url)
    with requests.get(url, timeout=_TIMEOUT_SECONDS, stream=True) as response:
        if not 200 <= response.status_code <= 299:
            raise DownloadError(response.status_code, response.reason or "")

        temp_dir = tempfile.mkdtemp(prefix="linkding-pdf-")
        try:
            path = os.path.join(temp_dir, _file_name(url))
            with open(path, "wb") as file:
                for chunk in response.iter_content(chunk_size=64 * 1024):
                    file.write(chunk)
        except BaseException:
            shutil.rmtree(temp_dir, ignore_errors=True)
            raise

    logger.debug("File downloaded successfully path=%s", path)
    return path