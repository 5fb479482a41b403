"""
Extraction from the structured data block some event pages embed.

Event pages that carry a schema.org style Event object include it in a
<script> block whose location holds a PostalAddress; that object is mapped
field by field onto an EventDetail.
"""

import json
import re

from giglist.errors import ExtractionError
from giglist.extract.fields import make_detail
from giglist.utils.text import clean_text

ADDRESS_MARKER = re.compile(r'"@type"\s*:\s*"PostalAddress"')

# EventDetail field -> path into the structured object
STRUCTURED_SCHEMA = {
    "title": ("name",),
    "date": ("startDate",),
    "venue": ("location", "name"),
    "address": ("location", "address"),
    "status": ("eventStatus",),
}
ADDRESS_PARTS = ("streetAddress", "addressLocality", "addressRegion", "postalCode", "addressCountry")


def find_structured_blocks(soup):
    """Texts of every <script> containing the address marker, in document order."""
    blocks = []
    for script in soup.find_all("script"):
        text = script.string or script.get_text()
        if text and ADDRESS_MARKER.search(text):
            blocks.append(text)
    return blocks


def _event_object(data):
    if isinstance(data, dict):
        return data
    if isinstance(data, list):
        for entry in data:
            if isinstance(entry, dict) and "location" in entry:
                return entry
    raise ExtractionError(f"Structured event block has unexpected shape: {type(data).__name__}")


def _lookup(obj, path):
    value = obj
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def format_address(address):
    if address is None or isinstance(address, str):
        return clean_text(address)
    if isinstance(address, dict):
        parts = [clean_text(address.get(part)) for part in ADDRESS_PARTS]
        return clean_text(", ".join(p for p in parts if p))
    raise ExtractionError(f"Unsupported address value: {address!r}")


def map_structured_event(obj):
    """Map a decoded structured event object onto an EventDetail."""
    values = {}
    for field, path in STRUCTURED_SCHEMA.items():
        raw = _lookup(obj, path)
        if field == "address":
            values[field] = format_address(raw)
        elif raw is None or isinstance(raw, str):
            values[field] = clean_text(raw)
        else:
            raise ExtractionError(f"Structured field '{'.'.join(path)}' is not text: {raw!r}")
    return make_detail(**values)


def extract_structured(soup):
    """
    Map the first marker-bearing script that decodes as JSON.
    Pages may also carry inline JavaScript mentioning the marker; those blocks are skipped.
    """
    blocks = find_structured_blocks(soup)
    if not blocks:
        return None

    errors = []
    for text in blocks:
        try:
            data = json.loads(text)
        except ValueError as e:
            errors.append(str(e))
            continue
        return map_structured_event(_event_object(data))

    raise ExtractionError(f"No structured event block is valid JSON: {'; '.join(errors)}")
