from urllib.parse import urlencode

import requests

from giglist import config

REDACTED_PARAMS = {"access_token"}


def describe_url(url, params=None):
    """Render a request URL for the run log with secrets masked."""
    if not params:
        return url
    shown = {k: ("<redacted>" if k in REDACTED_PARAMS else v) for k, v in params.items()}
    return f"{url}?{urlencode(shown)}"


class HostClient:
    """
    A persistent connection to one host.

    Wraps a requests.Session so every call to the same host reuses the
    connection pool. Use it as a context manager; the session is closed when
    the block exits, whether or not the block raised.
    """

    def __init__(self, base_url, headers=None, timeout=None, log_func=None, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = config.REQUEST_TIMEOUT if timeout is None else timeout
        self.log = log_func or print
        self.session = session or requests.Session()
        if headers:
            self.session.headers.update(headers)
        self.closed = False

    def url_for(self, path):
        return self.base_url + "/" + path.lstrip("/")

    def get(self, path, params=None, headers=None):
        url = self.url_for(path)
        self.log(f"    GET {describe_url(url, params)}")
        resp = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        resp.raise_for_status()
        return resp

    def close(self):
        if not self.closed:
            self.session.close()
            self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
