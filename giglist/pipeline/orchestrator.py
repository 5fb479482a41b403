import time
from contextlib import contextmanager
from dataclasses import dataclass

from tqdm import tqdm

from giglist import config
from giglist.client import HostClient
from giglist.errors import StageError
from giglist.extract.chain import extract_event_detail
from giglist.pipeline.metrics import StageMetrics
from giglist.pipeline.validate import validate_band
from giglist.sources.graph import iter_band_pages
from giglist.sources.mobile import fetch_event_ids, fetch_event_page
from giglist.utils.text import cache_key


@dataclass(frozen=True)
class RefreshFlags:
    """Per-stage switches that bypass the cache and recompute."""
    bands: bool = False
    event_ids: bool = False
    event_details: bool = False
    event_html: bool = False

    @classmethod
    def from_argv(cls, argv):
        """Flags may appear anywhere in argv; anything else is ignored."""
        argv = list(argv)
        return cls(**{name: flag in argv for name, flag in config.REFRESH_FLAGS.items()})


@contextmanager
def stage_errors(stage, key):
    """Re-raise any failure inside the block as a StageError naming the unit of work."""
    try:
        yield
    except StageError:
        raise
    except Exception as e:
        raise StageError(stage, key, e) from e


class _StageTimer:
    def __init__(self, name, cache):
        self.metrics = StageMetrics(name=name)
        self.cache = cache

    def __enter__(self):
        self.start_time = time.time()
        self.start_hits = self.cache.hits
        self.start_misses = self.cache.misses
        return self.metrics

    def __exit__(self, exc_type, exc, tb):
        self.metrics.cache_hits = self.cache.hits - self.start_hits
        self.metrics.fetched = self.cache.misses - self.start_misses
        self.metrics.duration_ms = (time.time() - self.start_time) * 1000
        return False


def collect_bands(graph, cache, profile_id, access_token, refresh=False, progress=tqdm, max_pages=None):
    """Stage 1: the profile's liked music pages as [{"id": int, "name": str}]."""
    key = cache_key("bands for profile", profile_id)

    def produce():
        bands = []
        with progress(total=None, desc="Bands", unit="page") as bar:
            for page in iter_band_pages(graph, profile_id, access_token, max_pages=max_pages):
                bands.extend(validate_band(item) for item in page)
                bar.update(1)
        return bands

    with stage_errors("bands", key):
        return cache.cached(key, refresh, produce)


def collect_event_ids(mobile, cache, bands, refresh=False, progress=tqdm, max_pages=None):
    """Stage 2: {band id: [event id, ...]} with ids as ints, first occurrence order."""

    def produce_for(band_id):
        event_ids = fetch_event_ids(mobile, band_id, max_pages=max_pages)
        return list(dict.fromkeys(int(event_id) for event_id in event_ids))

    event_ids_by_band = {}
    with progress(total=len(bands), desc="Event lists", unit="band") as bar:
        for band in bands:
            band_id = band["id"]
            key = cache_key("event ids for band", band_id)
            with stage_errors("event ids", key):
                event_ids_by_band[band_id] = cache.cached(key, refresh, lambda: produce_for(band_id))
            bar.update(1)
    return event_ids_by_band


def collect_event_details(mobile, cache, event_ids, cookie, refresh_html=False, refresh_details=False,
                          progress=tqdm):
    """
    Stage 3: {event id: EventDetail or None}.

    The raw page and the extracted detail are cached separately, so
    extraction can be re-run over stored pages without refetching.
    """
    unique_ids = list(dict.fromkeys(event_ids))
    details_by_event = {}

    with progress(total=len(unique_ids), desc="Event details", unit="event") as bar:
        for event_id in unique_ids:
            html_key = cache_key("event html for event", event_id)
            with stage_errors("event html", html_key):
                html = cache.cached(
                    html_key,
                    refresh_html,
                    lambda: fetch_event_page(mobile, event_id, cookie),
                )

            details_key = cache_key("event details for event", event_id)
            with stage_errors("event details", details_key):
                details_by_event[event_id] = cache.cached(
                    details_key,
                    refresh_details,
                    lambda: extract_event_detail(html),
                )
            bar.update(1)
    return details_by_event


def compose_report(bands, event_ids_by_band, details_by_event):
    return [
        {
            "id": band["id"],
            "name": band["name"],
            "events": [
                {"id": event_id, "details": details_by_event.get(event_id)}
                for event_id in event_ids_by_band.get(band["id"], [])
            ],
        }
        for band in bands
    ]


def build_report(graph, mobile, cache, credentials, refresh=None, progress=tqdm, max_pages=None):
    """
    Run the three stages against already-open host clients.
    Returns (report, [StageMetrics, ...]).
    """
    refresh = refresh or RefreshFlags()
    metrics = []

    with _StageTimer("Bands", cache) as m:
        bands = collect_bands(
            graph, cache, credentials.profile_id, credentials.access_token,
            refresh=refresh.bands, progress=progress, max_pages=max_pages,
        )
        m.unit_count = len(bands)
    metrics.append(m)

    with _StageTimer("Event ids", cache) as m:
        event_ids_by_band = collect_event_ids(
            mobile, cache, bands, refresh=refresh.event_ids, progress=progress, max_pages=max_pages,
        )
        m.unit_count = len(event_ids_by_band)
    metrics.append(m)

    all_event_ids = [event_id for ids in event_ids_by_band.values() for event_id in ids]
    with _StageTimer("Event details", cache) as m:
        details_by_event = collect_event_details(
            mobile, cache, all_event_ids, credentials.cookie,
            refresh_html=refresh.event_html, refresh_details=refresh.event_details, progress=progress,
        )
        m.unit_count = len(details_by_event)
    metrics.append(m)

    return compose_report(bands, event_ids_by_band, details_by_event), metrics


def run_pipeline(credentials, cache, refresh=None, progress=tqdm, log_func=None, max_pages=None):
    """Open one client per host for the whole run and always close them."""
    with HostClient(config.GRAPH_HOST, log_func=log_func) as graph, \
            HostClient(config.MOBILE_HOST, headers=config.MOBILE_HEADERS, log_func=log_func) as mobile:
        return build_report(
            graph, mobile, cache, credentials,
            refresh=refresh, progress=progress, max_pages=max_pages,
        )
