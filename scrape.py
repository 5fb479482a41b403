#!/usr/bin/env python3
"""
Build a gig list for the bands a profile likes.

Walks the profile's liked music pages, each band page's upcoming events and
each event page, caching every step under cache/ so a re-run only fetches
what is new. Refresh flags force a stage to be recomputed:

  --refresh-bands          liked pages listing
  --refresh-event-ids      per-band event listings
  --refresh-event-html     stored event pages
  --refresh-event-details  details extracted from stored event pages

Requires FACEBOOK_TOKEN, FACEBOOK_COOKIE and FACEBOOK_PROFILE_ID (a .env file works).
"""

import json
import sys
import traceback
from datetime import datetime

import requests

from giglist import config
from giglist.errors import GigListError
from giglist.pipeline.cache import CacheStore
from giglist.pipeline.io import write_run_log
from giglist.pipeline.metrics import format_summary
from giglist.pipeline.orchestrator import RefreshFlags, run_pipeline


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    run_timestamp = datetime.utcnow().isoformat() + "Z"
    log_lines = []

    def log(message, level="INFO"):
        """Log a message to both console and log buffer."""
        timestamp = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S")
        print(message, file=sys.stderr)
        log_lines.append(f"[{timestamp}] [{level}] {message}")

    log(f"Starting gig list run at {run_timestamp}")
    refresh = RefreshFlags.from_argv(argv)
    forced = [name for name, enabled in vars(refresh).items() if enabled]
    if forced:
        log(f"  Refreshing: {', '.join(forced)}")

    exit_code = 0
    try:
        credentials = config.load_credentials()
        cache = CacheStore(config.CACHE_DIR, log_func=log)
        report, metrics = run_pipeline(credentials, cache, refresh=refresh, log_func=log)

        log("")
        for line in format_summary(metrics):
            log(line)
        event_count = sum(len(band["events"]) for band in report)
        log(f"\n{len(report)} bands, {event_count} events")

        print(json.dumps(report, indent=2, ensure_ascii=False))
    except (GigListError, requests.RequestException) as e:
        log(f"ERROR: {e}", "ERROR")
        log(f"  Traceback:\n{traceback.format_exc()}", "ERROR")
        log("  Work finished before the failure is cached; re-run to resume.", "ERROR")
        exit_code = 1
    finally:
        log_path = write_run_log(log_lines)
        print(f"Log saved to {log_path}", file=sys.stderr)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
