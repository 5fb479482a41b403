import itertools

from giglist import config
from giglist.errors import PaginationError


def iter_pages(fetch_page, fetch_next=None, initial_cursor="", max_pages=None):
    """
    Yield the items of each page of a cursor-paginated listing, in fetch order.

    fetch_page(cursor) fetches the first page and fetch_next(cursor) every
    continuation (sources whose first page lives at a different URL pass
    both). Each returns (items, next_cursor). Pagination stops as soon as
    next_cursor is None or empty; the cursor is otherwise never inspected.

    max_pages caps the number of pages; 0 or None means no cap. Exceeding it
    raises PaginationError instead of returning a truncated listing.
    """
    if max_pages is None:
        max_pages = config.MAX_PAGES
    fetch_next = fetch_next or fetch_page

    fetch = fetch_page
    cursor = initial_cursor
    pages_fetched = 0
    while True:
        items, next_cursor = fetch(cursor)
        pages_fetched += 1
        yield list(items)

        if not next_cursor:
            return
        if max_pages and pages_fetched >= max_pages:
            raise PaginationError(
                f"Listing still had more pages after {pages_fetched} pages (cursor {next_cursor!r})"
            )
        cursor = next_cursor
        fetch = fetch_next


def paginate(fetch_page, fetch_next=None, initial_cursor="", max_pages=None):
    """Concatenate every page's items; see iter_pages."""
    pages = iter_pages(fetch_page, fetch_next, initial_cursor=initial_cursor, max_pages=max_pages)
    return list(itertools.chain.from_iterable(pages))
