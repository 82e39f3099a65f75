"""Shared HTTP helpers for fetching the schedule page and spreadsheet."""

from urllib.parse import urljoin, urlsplit

import requests

from src.timetable.constants import HOST_RE
from src.timetable.logging import get_logger

log = get_logger(__name__)

ACCEPT_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/vnd.ms-excel,"
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet,*/*;q=0.8",
}


def build_session(user_agent: str) -> requests.Session:
    """Create the HTTP session shared by every request of one run.

    Args:
        user_agent: Value for the User-Agent header.
    """
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent, **ACCEPT_HEADERS})
    log.debug("http_session_created", user_agent=user_agent)
    return session


def host_prefix(url: str) -> str | None:
    """Return the scheme and host at the start of ``url``, e.g. "https://school.org.il".

    Only lowercase letters and dots are accepted in the host, so hosts with
    digits, hyphens or ports yield a shorter prefix.
    """
    match = HOST_RE.match(url)
    return match.group(0) if match else None


def resolve_url(base: str, href: str) -> str:
    """Resolve a possibly relative link found on ``base`` to an absolute URL."""
    return urljoin(base, href)


def url_path(url: str) -> str:
    """Path part of a URL without query string or fragment."""
    return urlsplit(url).path
