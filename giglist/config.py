import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from giglist.errors import MissingCredentialError

load_dotenv()

REPO_ROOT = Path(__file__).resolve().parents[1]
CACHE_DIR = Path(os.environ.get("GIGLIST_CACHE_DIR", REPO_ROOT / "cache"))
LOG_PATH = Path(os.environ.get("GIGLIST_LOG_PATH", REPO_ROOT / "logs" / "scrape-log.txt"))
LOG_RETENTION_DAYS = 14

GRAPH_HOST = "https://graph.facebook.com"
GRAPH_API_VERSION = "v4.0"
GRAPH_PAGE_LIMIT = 100

MOBILE_HOST = "https://m.facebook.com"
EVENTS_QUERY_TYPE = "upcoming_exclude_recurring"
EVENTS_SEE_MORE_ID = "u_0_2j"

MOBILE_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
}
EVENT_PAGE_HEADERS = {
    **MOBILE_HEADERS,
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Upgrade-Insecure-Requests": "1",
}
JSON_STREAM_HEADERS = {"X-Response-Format": "JSONStream"}

REQUEST_TIMEOUT = float(os.environ.get("GIGLIST_TIMEOUT", "30"))
# 0 disables the cap
MAX_PAGES = int(os.environ.get("GIGLIST_MAX_PAGES", "500"))

REFRESH_FLAGS = {
    "bands": "--refresh-bands",
    "event_ids": "--refresh-event-ids",
    "event_details": "--refresh-event-details",
    "event_html": "--refresh-event-html",
}


@dataclass(frozen=True)
class Credentials:
    access_token: str
    cookie: str
    profile_id: str


def load_credentials(environ=None):
    """
    Read the API token, session cookie and profile id from the environment.
    Raises MissingCredentialError naming every variable that is unset or blank.
    """
    environ = os.environ if environ is None else environ
    names = {
        "access_token": "FACEBOOK_TOKEN",
        "cookie": "FACEBOOK_COOKIE",
        "profile_id": "FACEBOOK_PROFILE_ID",
    }
    values = {field: (environ.get(var) or "").strip() for field, var in names.items()}
    missing = [names[field] for field, value in values.items() if not value]
    if missing:
        raise MissingCredentialError(missing)
    return Credentials(**values)
