import json
from functools import partial

import pytest
from tqdm import tqdm

responses = pytest.importorskip("responses")

from giglist import config
from giglist.config import Credentials
from giglist.errors import StageError
from giglist.pipeline import orchestrator
from giglist.pipeline.cache import CacheStore
from giglist.pipeline.orchestrator import RefreshFlags, run_pipeline

CREDENTIALS = Credentials(access_token="tok", cookie="c_user=1; xs=2", profile_id="42")
MUSIC_URL = "https://graph.facebook.com/v4.0/42/music"
MORE_URL = "https://m.facebook.com/pages/events/more/"
SILENT_PROGRESS = partial(tqdm, disable=True)

EVENTS = {
    1001: ("Tour Opener", "2026-11-14T19:00:00-0500", "Tabernacle", "Going"),
    1002: ("Hometown Show", "2026-11-20T20:00:00-0500", "The Earl", "Interested"),
    2001: ("Festival Slot", "2026-12-01T18:00:00-0500", "Center Stage", "Going"),
    2002: ("Late Show", "2026-12-02T22:00:00-0500", "Terminal West", "Interested"),
}


def quiet(*_args, **_kwargs):
    pass


def event_html(event_id):
    title, date, venue, status = EVENTS[event_id]
    block = {
        "@type": "Event",
        "name": title,
        "startDate": date,
        "eventStatus": status,
        "location": {
            "name": venue,
            "address": {"@type": "PostalAddress", "streetAddress": f"{event_id} Peachtree St", "addressLocality": "Atlanta"},
        },
    }
    return f'<html><head><script type="application/ld+json">{json.dumps(block)}</script></head><body></body></html>'


def register_profile(rsps):
    rsps.add(rsps.GET, MUSIC_URL, json={
        "data": [{"id": "10", "name": "A Day To Remember"}],
        "paging": {"next": True, "cursors": {"after": "bands-2"}},
    })
    rsps.add(rsps.GET, MUSIC_URL, json={
        "data": [{"id": "20", "name": "Parkway Drive"}],
        "paging": {"cursors": {"after": "bands-3"}},
    })

    # Band 10: first page links 1001 and carries a cursor, the continuation links 1002.
    rsps.add(rsps.GET, "https://m.facebook.com/10/events/", body=(
        '<a href="/events/1001">Tour Opener</a>'
        '<a href="/pages/events/more/?page_id=10&amp;serialized_cursor=band10-more">See more</a>'
    ))
    rsps.add(rsps.GET, MORE_URL, body='for (;;);{"payload":"<a href=\\"\\/events\\/1002\\">Hometown Show<\\/a>"}')
    # Band 20: everything on the first page.
    rsps.add(rsps.GET, "https://m.facebook.com/20/events/", body=(
        '<a href="/events/2001">Festival Slot</a><a href="/events/2002">Late Show</a>'
    ))

    for event_id in EVENTS:
        rsps.add(rsps.GET, f"https://m.facebook.com/events/{event_id}", body=event_html(event_id))


def expected_details(event_id):
    title, date, venue, status = EVENTS[event_id]
    return {
        "title": title,
        "date": date,
        "venue": venue,
        "address": f"{event_id} Peachtree St, Atlanta",
        "status": status,
    }


@pytest.fixture
def cache(tmp_path):
    return CacheStore(tmp_path / "cache", log_func=quiet)


def run(cache, refresh=None, progress=SILENT_PROGRESS):
    return run_pipeline(CREDENTIALS, cache, refresh=refresh, progress=progress, log_func=quiet)


def test_two_bands_two_events_each_end_to_end(cache):
    with responses.RequestsMock() as rsps:
        register_profile(rsps)
        report, metrics = run(cache)

    assert report == [
        {
            "id": 10,
            "name": "A Day To Remember",
            "events": [
                {"id": 1001, "details": expected_details(1001)},
                {"id": 1002, "details": expected_details(1002)},
            ],
        },
        {
            "id": 20,
            "name": "Parkway Drive",
            "events": [
                {"id": 2001, "details": expected_details(2001)},
                {"id": 2002, "details": expected_details(2002)},
            ],
        },
    ]
    assert [m.name for m in metrics] == ["Bands", "Event ids", "Event details"]
    assert [m.unit_count for m in metrics] == [2, 2, 4]
    assert sum(m.cache_hits for m in metrics) == 0


def test_rerun_is_served_entirely_from_cache(cache):
    with responses.RequestsMock() as rsps:
        register_profile(rsps)
        first_report, _ = run(cache)

    with responses.RequestsMock() as rsps:
        second_report, metrics = run(cache)
        assert len(rsps.calls) == 0

    assert second_report == first_report
    assert [m.fetched for m in metrics] == [0, 0, 0]


def test_cache_entries_are_named_by_task(cache):
    with responses.RequestsMock() as rsps:
        register_profile(rsps)
        run(cache)

    names = sorted(path.stem for path in cache.directory.glob("*.json"))
    assert "bands-for-profile-42" in names
    assert "event-ids-for-band-10" in names
    assert "event-html-for-event-2002" in names
    assert "event-details-for-event-2002" in names
    assert json.loads((cache.directory / "event-ids-for-band-10.json").read_text()) == [1001, 1002]


def test_refresh_event_details_reextracts_without_refetching(cache):
    with responses.RequestsMock() as rsps:
        register_profile(rsps)
        run(cache)

    cache.save("event-details-for-event-1001", {"title": "stale"})

    with responses.RequestsMock() as rsps:
        report, _ = run(cache, refresh=RefreshFlags(event_details=True))
        assert len(rsps.calls) == 0

    assert report[0]["events"][0]["details"] == expected_details(1001)


def test_refresh_bands_refetches_only_the_band_listing(cache):
    with responses.RequestsMock() as rsps:
        register_profile(rsps)
        run(cache)

    with responses.RequestsMock() as rsps:
        rsps.add(rsps.GET, MUSIC_URL, json={"data": [{"id": "10", "name": "ADTR"}], "paging": {}})
        report, _ = run(cache, refresh=RefreshFlags(bands=True))
        assert len(rsps.calls) == 1

    assert [band["name"] for band in report] == ["ADTR"]
    assert [event["id"] for event in report[0]["events"]] == [1001, 1002]


def test_progress_reported_per_unit(cache):
    bars = []

    class RecordingBar:
        def __init__(self, total=None, desc=None, unit=None):
            self.total, self.desc, self.count = total, desc, 0
            bars.append(self)

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def update(self, n=1):
            self.count += n

    with responses.RequestsMock() as rsps:
        register_profile(rsps)
        run(cache, progress=RecordingBar)

    assert [(bar.desc, bar.total, bar.count) for bar in bars] == [
        ("Bands", None, 2),
        ("Event lists", 2, 2),
        ("Event details", 4, 4),
    ]


def test_failure_names_stage_and_key_and_keeps_earlier_work(cache):
    with responses.RequestsMock() as rsps:
        rsps.add(rsps.GET, MUSIC_URL, json={"data": [{"id": "10", "name": "A Day To Remember"}], "paging": {}})
        rsps.add(rsps.GET, "https://m.facebook.com/10/events/", status=500)

        with pytest.raises(StageError) as exc:
            run(cache)

    assert exc.value.stage == "event ids"
    assert exc.value.key == "event-ids-for-band-10"
    assert "bands-for-profile-42" in cache
    assert "event-ids-for-band-10" not in cache


def test_host_clients_closed_even_when_a_stage_fails(cache, monkeypatch):
    opened = []

    class TrackingClient(orchestrator.HostClient):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            opened.append(self)

    monkeypatch.setattr(orchestrator, "HostClient", TrackingClient)

    with responses.RequestsMock() as rsps:
        rsps.add(rsps.GET, MUSIC_URL, status=503)
        with pytest.raises(StageError):
            run(cache)

    assert [client.base_url for client in opened] == [config.GRAPH_HOST, config.MOBILE_HOST]
    assert all(client.closed for client in opened)


def test_event_shared_by_two_bands_is_fetched_once(cache):
    with responses.RequestsMock() as rsps:
        rsps.add(rsps.GET, MUSIC_URL, json={
            "data": [{"id": "10", "name": "A Day To Remember"}, {"id": "20", "name": "Parkway Drive"}],
            "paging": {},
        })
        rsps.add(rsps.GET, "https://m.facebook.com/10/events/", body='<a href="/events/1001">Co-headline</a>')
        rsps.add(rsps.GET, "https://m.facebook.com/20/events/", body='<a href="/events/1001">Co-headline</a>')
        rsps.add(rsps.GET, "https://m.facebook.com/events/1001", body=event_html(1001))

        report, _ = run(cache, refresh=RefreshFlags(event_html=True, event_details=True))
        event_calls = [c for c in rsps.calls if c.request.url.endswith("/events/1001")]
        assert len(event_calls) == 1

    assert report[0]["events"] == report[1]["events"]
