from dataclasses import dataclass
from typing import Callable, Optional

from giglist.errors import ExtractionError
from giglist.extract.fields import make_detail
from giglist.utils.text import node_text

UNRESPONDED = "Unresponded"


def rsvp_status(node):
    """
    Read the operator's RSVP status from the event's status control.

    The control renders a single icon when nothing has been chosen and a
    dropdown (two icons) showing the current choice once a response exists.
    Only icons directly inside the control count.
    """
    icon_count = len(node.find_all("i", recursive=False))
    if icon_count == 1:
        return UNRESPONDED
    if icon_count == 2:
        return node_text(node)
    raise ExtractionError(f"RSVP control has {icon_count} icons; expected 1 or 2")


@dataclass(frozen=True)
class FieldRule:
    field: str
    selector: str
    index: int = 0
    transform: Optional[Callable] = None

    def apply(self, soup):
        nodes = soup.select(self.selector)
        if len(nodes) <= self.index:
            return None
        node = nodes[self.index]
        if self.transform is None:
            return node_text(node)
        return self.transform(node)


FIELD_RULES = (
    FieldRule("title", "#event_header h3"),
    FieldRule("date", "#event_summary .info-row dt", 0),
    FieldRule("venue", "#event_summary .info-row dt", 1),
    FieldRule("address", "#event_summary .info-row dd", 1),
    FieldRule("status", "#event_button_bar .rsvp-control", transform=rsvp_status),
)


def extract_positional(soup, rules=FIELD_RULES):
    return make_detail(**{rule.field: rule.apply(soup) for rule in rules})
