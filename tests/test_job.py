import os
import threading
from datetime import datetime, timezone

import pytest
import responses

from linkding_archiver.job import (
    JobConfiguration,
    JobSummary,
    get_bookmarks,
    process_bookmarks,
)
from linkding_archiver.models import Asset, Bookmark

PDF_CONTENT = b"%PDF-1.4\nTest PDF content"
PDF_URL = "http://files.example.com/doc.pdf"


class FakeClient:
    def __init__(self, bookmarks_by_tag, assets=None, fail_upload=False, fail_query=False):
        self.bookmarks_by_tag = bookmarks_by_tag
        self.assets = assets or {}
        self.fail_upload = fail_upload
        self.fail_query = fail_query
        self.queries = []
        self.asset_requests = []
        self.uploads = []
        self._lock = threading.Lock()

    def get_bookmarks(self, query):
        if self.fail_query:
            raise RuntimeError("listing failed")
        self.queries.append(query)
        return list(self.bookmarks_by_tag.get(query.tag, []))

    def get_bookmark_assets(self, bookmark_id):
        self.asset_requests.append(bookmark_id)
        return list(self.assets.get(bookmark_id, []))

    def add_bookmark_asset(self, bookmark_id, path):
        with open(path, "rb") as file:
            content = file.read()
        with self._lock:
            self.uploads.append((bookmark_id, path, content))
        if self.fail_upload:
            raise RuntimeError("upload failed")
        return Asset(
            id=bookmark_id + 100,
            asset_type="upload",
            content_type="application/pdf",
            display_name=os.path.basename(path),
        )


@pytest.fixture
def http():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        yield mock


def test_get_bookmarks_deduplicates_across_tags():
    b1 = Bookmark(id=1, url="http://example.com/a.pdf")
    b2 = Bookmark(id=2, url="http://example.com/b.pdf")
    b3 = Bookmark(id=3, url="http://example.com/c.pdf")
    client = FakeClient({"a": [b1, b2], "b": [b2, b3]})
    last_scan = datetime(2024, 1, 1, tzinfo=timezone.utc)
    config = JobConfiguration(tags=["a", "b"], bundle_id=2, last_scan=last_scan)

    assert get_bookmarks(client, config) == [b1, b2, b3]
    assert [q.tag for q in client.queries] == ["a", "b"]
    assert all(q.bundle_id == 2 for q in client.queries)
    assert all(q.modified_since == last_scan for q in client.queries)


def test_get_bookmarks_without_tags_queries_once_unfiltered():
    b1 = Bookmark(id=1, url="http://example.com/a.pdf")
    client = FakeClient({"": [b1]})
    assert get_bookmarks(client, JobConfiguration()) == [b1]
    assert [q.tag for q in client.queries] == [""]
    assert client.queries[0].modified_since is None


def test_process_bookmarks_without_bookmarks():
    client = FakeClient({})
    assert process_bookmarks(client, JobConfiguration()) == JobSummary()


def test_process_bookmarks_propagates_listing_error():
    client = FakeClient({}, fail_query=True)
    with pytest.raises(RuntimeError):
        process_bookmarks(client, JobConfiguration())


def test_process_bookmarks_skips_non_pdf():
    bookmark = Bookmark(id=1, url="http://example.com/page.html")
    client = FakeClient({"": [bookmark]})
    summary = process_bookmarks(client, JobConfiguration())
    assert summary == JobSummary()
    assert client.asset_requests == []
    assert client.uploads == []


def test_process_bookmarks_uploads_downloaded_pdf(http):
    http.add(responses.GET, PDF_URL, body=PDF_CONTENT, status=200)
    bookmark = Bookmark(id=1, url=PDF_URL)
    client = FakeClient({"": [bookmark]})

    summary = process_bookmarks(client, JobConfiguration())

    assert summary.succeeded == [bookmark]
    assert summary.failed == []
    assert len(client.uploads) == 1
    bookmark_id, path, content = client.uploads[0]
    assert bookmark_id == 1
    assert os.path.basename(path) == "doc.pdf"
    assert content == PDF_CONTENT
    assert not os.path.exists(os.path.dirname(path))


def test_process_bookmarks_skips_existing_pdf_asset(http):
    bookmark = Bookmark(id=1, url=PDF_URL)
    existing = Asset(id=5, asset_type="upload", content_type="application/pdf")
    client = FakeClient({"": [bookmark]}, assets={1: [existing]})

    summary = process_bookmarks(client, JobConfiguration())

    assert summary == JobSummary()
    assert client.uploads == []
    assert len(http.calls) == 0


def test_process_bookmarks_ignores_non_upload_pdf_asset(http):
    http.add(responses.GET, PDF_URL, body=PDF_CONTENT, status=200)
    bookmark = Bookmark(id=1, url=PDF_URL)
    snapshot = Asset(id=5, asset_type="snapshot", content_type="application/pdf")
    client = FakeClient({"": [bookmark]}, assets={1: [snapshot]})

    summary = process_bookmarks(client, JobConfiguration())

    assert summary.succeeded == [bookmark]
    assert len(client.uploads) == 1


def test_process_bookmarks_counts_failed_download(http):
    http.add(responses.GET, PDF_URL, status=404)
    bookmark = Bookmark(id=1, url=PDF_URL)
    client = FakeClient({"": [bookmark]})

    summary = process_bookmarks(client, JobConfiguration())

    assert summary.failed == [bookmark]
    assert summary.succeeded == []
    assert client.uploads == []


def test_process_bookmarks_counts_failed_upload(http):
    http.add(responses.GET, PDF_URL, body=PDF_CONTENT, status=200)
    bookmark = Bookmark(id=1, url=PDF_URL)
    client = FakeClient({"": [bookmark]}, fail_upload=True)

    summary = process_bookmarks(client, JobConfiguration())

    assert summary.failed == [bookmark]
    assert summary.succeeded == []
    _, path, _ = client.uploads[0]
    assert not os.path.exists(os.path.dirname(path))


def test_process_bookmarks_dry_run_does_not_upload(http):
    http.add(responses.GET, PDF_URL, body=PDF_CONTENT, status=200)
    bookmark = Bookmark(id=1, url=PDF_URL)
    client = FakeClient({"": [bookmark]})

    summary = process_bookmarks(client, JobConfiguration(is_dry_run=True))

    assert summary.succeeded == [bookmark]
    assert client.uploads == []


def test_process_bookmarks_handles_several_bookmarks(http):
    http.add(responses.GET, "http://files.example.com/one.pdf", body=PDF_CONTENT)
    http.add(responses.GET, "http://files.example.com/two.pdf", status=500)
    good = Bookmark(id=1, url="http://files.example.com/one.pdf")
    bad = Bookmark(id=2, url="http://files.example.com/two.pdf")
    other = Bookmark(id=3, url="http://example.com/index.html")
    client = FakeClient({"": [good, bad, other]})

    summary = process_bookmarks(client, JobConfiguration())

    assert {b.id for b in summary.succeeded} == {1}
    assert {b.id for b in summary.failed} == {2}