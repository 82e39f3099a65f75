"""SchedulePage - finds the timetable spreadsheet link on the school's web page.

The page lists many files; the daily timetable is the first anchor that
looks like one:

  <a href="https://school.org.il/files/ab-cd.xlsx">Download</a>

Format filter:
  - href ends with ".xls", or
  - href ends with ".xlsx" and the file name is "<1-2 chars>-<1-2 chars>.<ext>"
    (other spreadsheets on the page, e.g. exam calendars, are named freely)

Security filter (on by default):
  - href starts with the page's own scheme+host, and
  - the anchor text contains "download" (case-insensitive)
  Visitors can post links in the page's comment section, so a link that
  merely looks right is not trusted.

First match in document order wins. Hrefs that do not parse as URLs are skipped.
"""

from urllib.parse import urlsplit

import requests
from bs4 import BeautifulSoup

from src.timetable.constants import DOWNLOAD_MARKER, PAGE_TIMEOUT, XLSX_NAME_RE
from src.timetable.errors import LinkNotFoundError
from src.timetable.logging import get_logger
from src.timetable.utils import host_prefix, resolve_url

log = get_logger(__name__)


def is_schedule_file(href: str) -> bool:
    """Check an href against the known timetable file formats."""
    if href.endswith(".xls"):
        return True
    if href.endswith(".xlsx"):
        return XLSX_NAME_RE.match(href.rsplit("/", 1)[-1]) is not None
    return False


def is_trusted(href: str, text: str, prefix: str | None) -> bool:
    """Check that a link is hosted by the page itself and labelled as a download."""
    if not prefix or not href.startswith(prefix):
        return False
    return DOWNLOAD_MARKER in text.casefold()


def is_well_formed(href: str, page_url: str) -> bool:
    """Check that an href resolves against the page into a parseable URL.

    Hrefs like "https://host[/a.xls" (unbalanced IPv6 brackets) make urllib raise.
    """
    try:
        urlsplit(resolve_url(page_url, href))
    except ValueError:
        return False
    return True


class SchedulePage:
    """The public page that links to the current timetable spreadsheet.

    Fetches the page once and scans its anchors for the spreadsheet link.
    """

    PARSER = "html.parser"

    def __init__(
        self,
        session: requests.Session,
        *,
        secure: bool = True,
        timeout: float = PAGE_TIMEOUT,
    ) -> None:
        self.session = session
        self.secure = secure
        self.timeout = timeout

    def fetch(self, url: str) -> str:
        """Download the page HTML.

        Raises:
            LinkNotFoundError: If the page cannot be fetched.
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            log.warning("schedule_page_fetch_failed", url=url, error=str(e))
            raise LinkNotFoundError(f"Failed to fetch {url}: {e}") from e

        log.debug("schedule_page_fetched", url=url, bytes=len(response.content))
        return response.text

    def find_link(self, html: str, page_url: str) -> str:
        """Return the href of the first anchor passing both filters.

        Args:
            html: Page HTML.
            page_url: URL the page was fetched from (source of the trusted host).

        Raises:
            LinkNotFoundError: If no anchor qualifies.
        """
        soup = BeautifulSoup(html, self.PARSER)
        prefix = host_prefix(page_url)

        anchors = soup.find_all("a")
        for anchor in anchors:
            href = anchor.get("href") or ""
            if not is_schedule_file(href):
                continue
            if not is_well_formed(href, page_url):
                log.debug("schedule_link_malformed", href=href)
                continue
            if self.secure and not is_trusted(href, anchor.get_text(), prefix):
                log.debug("schedule_link_untrusted", href=href)
                continue
            log.info("schedule_link_found", href=href, secure=self.secure)
            return href

        log.warning("schedule_link_missing", url=page_url, anchors=len(anchors))
        raise LinkNotFoundError(f"No timetable link among {len(anchors)} anchors")

    def resolve(self, url: str) -> str:
        """Fetch the page at ``url`` and return its timetable link."""
        return self.find_link(self.fetch(url), url)
