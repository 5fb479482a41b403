from giglist import config
from giglist.errors import PaginationError
from giglist.pipeline.paginate import iter_pages
from giglist.pipeline.validate import validate_graph_page


def next_graph_cursor(paging):
    """
    The continuation cursor of an API listing page, or None on the last page.
    A page with a falsy `next` or an absent/empty `cursors.after` is the last one.
    """
    if not paging.get("next"):
        return None
    cursors = paging.get("cursors") or {}
    return cursors.get("after") or None


def fetch_bands_page(client, profile_id, access_token, cursor):
    """Fetch one page of the profile's liked music pages. Returns (items, next_cursor)."""
    params = {
        "access_token": access_token,
        "fields": "name",
        "limit": config.GRAPH_PAGE_LIMIT,
        "after": cursor,
    }
    resp = client.get(f"/{config.GRAPH_API_VERSION}/{profile_id}/music", params=params)
    try:
        payload = resp.json()
    except ValueError as e:
        raise PaginationError(f"Liked pages listing for {profile_id} is not JSON: {e}") from e

    validate_graph_page(payload)
    return payload["data"], next_graph_cursor(payload["paging"])


def iter_band_pages(client, profile_id, access_token, max_pages=None):
    return iter_pages(
        lambda cursor: fetch_bands_page(client, profile_id, access_token, cursor),
        max_pages=max_pages,
    )
