from giglist.errors import PaginationError


def validate_graph_page(payload):
    """Check that an API listing page has the data/paging shape we page through."""
    if not isinstance(payload, dict):
        raise PaginationError(f"Expected a JSON object, got {type(payload).__name__}")
    for key in ("data", "paging"):
        if key not in payload:
            raise PaginationError(f"Listing page is missing '{key}'")
    if not isinstance(payload["data"], list):
        raise PaginationError("Listing page 'data' is not a list")
    if not isinstance(payload["paging"], dict):
        raise PaginationError("Listing page 'paging' is not an object")
    return payload


def validate_band(band):
    """Normalize one API record to a Band. The id must be integer-like; a missing name becomes an empty string."""
    try:
        band_id = int(band["id"])
    except (KeyError, TypeError, ValueError):
        raise PaginationError(f"Listing item has no usable id: {band!r}")
    return {"id": band_id, "name": band.get("name") or ""}
