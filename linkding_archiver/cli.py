"""Command line entry point running the archiving job periodically."""

import argparse
import os
import re
import signal
import sys
import threading
import time
from datetime import datetime, timezone

from dotenv import load_dotenv

from .client import Client
from .job import JobConfiguration, process_bookmarks
from .logsetup import new_logger

_DEFAULT_SCAN_INTERVAL = 3600
_INTEGER = re.compile(r"[+-]?\d+")


def _positive_int_env(name, default):
    value = os.environ.get(name, "")
    if not _INTEGER.fullmatch(value):
        return default
    number = int(value)
    return number if number > 0 else default


def get_tags():
    """Return the whitespace separated tags from ``LDPA_TAGS``."""
    return os.environ.get("LDPA_TAGS", "").split()


def get_bundle_id():
    """Return ``LDPA_BUNDLE_ID`` as a positive integer, or 0 for none."""
    return _positive_int_env("LDPA_BUNDLE_ID", 0)


def get_scan_interval():
    """Return ``LDPA_SCAN_INTERVAL`` in seconds, one hour by default."""
    return _positive_int_env("LDPA_SCAN_INTERVAL", _DEFAULT_SCAN_INTERVAL)


def _parse_args(argv):
    parser = argparse.ArgumentParser(
        description="Archive PDF bookmarks as Linkding assets."
    )
    parser.add_argument(
        "-n",
        dest="dry_run",
        action="store_true",
        help="Dry run: download PDFs but do not actually upload them to Linkding",
    )
    parser.add_argument(
        "-s",
        dest="single_run",
        action="store_true",
        help="Single run: exit after processing bookmarks once",
    )
    return parser.parse_args(argv)


def _terminate(signum, frame):
    raise SystemExit(1)


def _run(args):
    logger = new_logger()

    try:
        client = Client(os.environ.get("LDPA_BASEURL", ""), os.environ.get("LDPA_TOKEN", ""))
    except ValueError as err:
        raise SystemExit(str(err)) from None

    tags = get_tags()
    bundle_id = get_bundle_id()
    interval = get_scan_interval()

    last_scan = None
    next_tick = time.monotonic()
    while True:
        started = datetime.now(timezone.utc)
        config = JobConfiguration(
            tags=tags,
            bundle_id=bundle_id,
            is_dry_run=args.dry_run,
            last_scan=last_scan,
        )
        try:
            process_bookmarks(client, config)
        except Exception as err:
            logger.error("Error processing bookmarks", extra={"error": str(err)})
        else:
            last_scan = started

        if args.single_run:
            return 0

        logger.info("Waiting for next scan", extra={"scan_interval": interval})
        next_tick += interval
        delay = next_tick - time.monotonic()
        if delay > 0:
            time.sleep(delay)
        else:
            next_tick = time.monotonic()


def main(argv=None):
    """Run the archiver; returns the process exit code."""
    load_dotenv(".env")
    args = _parse_args(argv)

    in_main_thread = threading.current_thread() is threading.main_thread()
    previous = signal.signal(signal.SIGTERM, _terminate) if in_main_thread else None
    try:
        return _run(args)
    except KeyboardInterrupt:
        return 1
    finally:
        if in_main_thread:
            signal.signal(signal.SIGTERM, previous if previous is not None else signal.SIG_DFL)


if __name__ == "__main__":
    sys.exit(main())