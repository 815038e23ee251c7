# linkding-archiver

Scans a Linkding instance for bookmarks whose URL path ends in `.pdf`,
downloads each PDF and attaches it to its bookmark as an uploaded asset.
Bookmarks that already carry an uploaded asset of type `application/pdf`
are left alone.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Configuration

Settings are read from the environment. A `.env` file in the working
directory is loaded first if present; variables already set in the
environment take precedence over it.

| Variable             | Meaning                                                          | Default |
|----------------------|------------------------------------------------------------------|---------|
| `LDPA_BASEURL`       | Absolute base URL of the Linkding instance (required)            |         |
| `LDPA_TOKEN`         | Linkding API token                                               |         |
| `LDPA_TAGS`          | Whitespace-separated tags; bookmarks with any of them are scanned | all     |
| `LDPA_BUNDLE_ID`     | Only scan bookmarks in this bundle (positive integer)            | none    |
| `LDPA_SCAN_INTERVAL` | Seconds between scans (positive integer)                         | 3600    |
| `LDPA_LOG_FORMAT`    | `json` or `text`; otherwise text on a terminal, JSON elsewhere   | auto    |
| `LDPA_LOG_LEVEL`     | `DEBUG`, `INFO`, `WARN` or `ERROR`                               | `INFO`  |

Invalid or non-positive values for `LDPA_BUNDLE_ID` and `LDPA_SCAN_INTERVAL`
fall back to their defaults.

Example `.env`:

```
LDPA_BASEURL=https://linkding.example.com
LDPA_TOKEN=token
LDPA_TAGS=pdf papers
```

## Usage

```
linkding-archiver [-n] [-s]
```

The same command is available as `python -m linkding_archiver.cli`.

- `-n` dry run: download PDFs but do not upload them; the downloaded files
  are deleted again.
- `-s` single run: process bookmarks once and exit.

Without `-s` the program scans immediately and then once per interval. After
a successful scan only bookmarks modified since the start of that scan are
considered; a scan that fails while listing bookmarks is logged and the next
one repeats the same window. Failures for single bookmarks are logged and do
not stop the scan. Each downloaded PDF is stored in its own temporary
directory, which is removed after the upload attempt.

If `LDPA_BASEURL` is missing or not absolute, the program prints the error and
exits with status 1. Ctrl-C or SIGTERM stop it with status 1.

Logs go to standard output, one record per line, with the record's fields
either as a JSON object or as `key=value` pairs.

## Library use

```python
from linkding_archiver.client import Client
from linkding_archiver.job import JobConfiguration, process_bookmarks

client = Client("https://linkding.example.com", "token")
summary = process_bookmarks(client, JobConfiguration(tags=["pdf"], is_dry_run=True))
print(len(summary.succeeded), len(summary.failed))
```

Modules:

- `linkding_archiver.client` — `Client(base_url, token)` with
  `get_bookmarks(query)`, `get_bookmark_assets(bookmark_id)`,
  `download_bookmark_asset(bookmark_id, asset_id)` (returns the content as
  bytes) and `add_bookmark_asset(bookmark_id, path)` (streams the file as a
  multipart upload). Listing calls follow pagination. A non-2xx answer raises
  `HTTPStatusError`; an empty or relative base URL raises `ValueError`.
- `linkding_archiver.models` — the frozen dataclasses `Bookmark`, `Asset` and
  `BookmarksQuery(tag, bundle_id, modified_since)`.
- `linkding_archiver.job` — `JobConfiguration`, `JobSummary`,
  `get_bookmarks(client, config)` (merges the results for all tags, without
  duplicates) and `process_bookmarks(client, config)`.
- `linkding_archiver.pdf` — `is_pdf(url)` (case-sensitive `.pdf` check on
  the URL path) and `download(url)`, which saves the file in a new temporary
  directory and returns its path, named after the URL or `download.pdf`. The
  caller removes the directory. A non-2xx answer raises `DownloadError`.
- `linkding_archiver.mimes` — `get_mime_type(file_name)` and
  `is_known_mime_type(mime_type)`; only `.pdf` / `application/pdf` is known,
  other names raise `UnknownMimeTypeError`.
- `linkding_archiver.logsetup` — `get_log_level()` and `new_logger()`, which
  configure the `linkding_archiver` logger from the variables above.