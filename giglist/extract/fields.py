EVENT_DETAIL_FIELDS = ("title", "date", "venue", "address", "status")


def make_detail(**values):
    """An EventDetail dict with every field present; unknown fields are rejected."""
    unknown = set(values) - set(EVENT_DETAIL_FIELDS)
    if unknown:
        raise TypeError(f"Unknown event detail field(s): {', '.join(sorted(unknown))}")
    return {field: values.get(field) for field in EVENT_DETAIL_FIELDS}


def is_empty_detail(detail):
    return not detail or all(detail.get(field) is None for field in EVENT_DETAIL_FIELDS)
