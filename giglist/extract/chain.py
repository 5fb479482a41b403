from bs4 import BeautifulSoup

from giglist.extract.fields import is_empty_detail
from giglist.extract.positional import extract_positional
from giglist.extract.structured import extract_structured


def default_strategies():
    # Embedded structured data first; selector scraping only when a page lacks it.
    return [
        ("structured", extract_structured),
        ("positional", extract_positional),
    ]


def extract_event_detail(html, strategies=None):
    """
    Turn an event page into an EventDetail.
    Returns the first non-empty result in strategy order, or None if every strategy comes up empty.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    for _name, strategy in strategies or default_strategies():
        detail = strategy(soup)
        if not is_empty_detail(detail):
            return detail
    return None
