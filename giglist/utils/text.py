import re


def clean_text(text):
    """Collapse whitespace; blank or missing text becomes None."""
    if text is None:
        return None
    text = re.sub(r"\s+", " ", str(text)).strip()
    return text or None


def node_text(node):
    """Visible text of a BeautifulSoup node, or None when the node is missing or blank."""
    if node is None:
        return None
    return clean_text(node.get_text(" ", strip=True))


def slugify(text):
    text = str(text).lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")


def cache_key(*parts):
    """
    Build a deterministic, human-readable cache key from task parameters.
    Example: cache_key("event details for event", 42) -> "event-details-for-event-42"
    """
    return "-".join(filter(None, (slugify(part) for part in parts)))
