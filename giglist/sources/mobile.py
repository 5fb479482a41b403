import json
import re

from giglist import config
from giglist.errors import PaginationError
from giglist.pipeline.paginate import paginate

EVENT_LINK_RE = re.compile(r"/events/([0-9]+)")
ESCAPED_EVENT_LINK_RE = re.compile(r'href=\\"\\/events\\/([0-9]+)')
CURSOR_RE = re.compile(r"serialized_cursor=([A-Za-z0-9_-]+)")
JSON_STREAM_PREFIX = "for (;;);"


def extract_cursor(text):
    """First serialized_cursor token anywhere in the body, or None."""
    match = CURSOR_RE.search(text)
    return match.group(1) if match else None


def decode_json_stream(text):
    """Decode a JSONStream body, tolerating the anti-hijacking prefix."""
    body = text.lstrip()
    if body.startswith(JSON_STREAM_PREFIX):
        body = body[len(JSON_STREAM_PREFIX):]
    return json.loads(body)


def fetch_first_events_page(client, page_id):
    """Fetch a band page's events root. Returns (event_ids, next_cursor)."""
    html = client.get(f"/{page_id}/events/").text
    return EVENT_LINK_RE.findall(html), extract_cursor(html)


def fetch_more_events_page(client, page_id, cursor):
    """Fetch a "see more" continuation of a band's events. Returns (event_ids, next_cursor)."""
    params = {
        "page_id": page_id,
        "query_type": config.EVENTS_QUERY_TYPE,
        "see_more_id": config.EVENTS_SEE_MORE_ID,
        "serialized_cursor": cursor,
    }
    text = client.get("/pages/events/more/", params=params, headers=config.JSON_STREAM_HEADERS).text
    try:
        decode_json_stream(text)
    except ValueError as e:
        raise PaginationError(f"More-events page for {page_id} is not a JSON stream: {e}") from e

    return ESCAPED_EVENT_LINK_RE.findall(text), extract_cursor(text)


def fetch_event_ids(client, page_id, max_pages=None):
    """Every event id linked from a band's events, page root first then each "see more" page."""
    return paginate(
        lambda _cursor: fetch_first_events_page(client, page_id),
        lambda cursor: fetch_more_events_page(client, page_id, cursor),
        max_pages=max_pages,
    )


def fetch_event_page(client, event_id, cookie):
    """Fetch the HTML of one event page as the logged-in operator."""
    headers = {**config.EVENT_PAGE_HEADERS, "Cookie": cookie}
    return client.get(f"/events/{event_id}", headers=headers).text
