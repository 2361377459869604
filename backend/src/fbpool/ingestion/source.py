"""Read weekly schedule pages from the web or from local copies."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import cloudscraper
from requests.exceptions import ConnectionError, HTTPError, Timeout
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from fbpool.config import get_settings

logger = logging.getLogger(__name__)

# Errors worth another attempt; local-file errors are included so a page that
# is being rewritten is picked up on the next try.
FETCH_ERRORS = (HTTPError, ConnectionError, Timeout, OSError)

# Rate limiting: pause between requests to be polite
_REQUEST_DELAY_S = 1.0
_last_request_time: float = 0.0

_scraper: cloudscraper.CloudScraper | None = None


def _get_scraper() -> cloudscraper.CloudScraper:
    global _scraper
    if _scraper is None:
        _scraper = cloudscraper.create_scraper()
    return _scraper


def _rate_limited_get(url: str) -> bytes:
    """GET with rate limiting and raise on HTTP errors."""
    global _last_request_time
    elapsed = time.monotonic() - _last_request_time
    if elapsed < _REQUEST_DELAY_S:
        time.sleep(_REQUEST_DELAY_S - elapsed)

    resp = _get_scraper().get(url, timeout=30)
    _last_request_time = time.monotonic()
    resp.raise_for_status()
    return resp.content


def week_page_location(week_num: int, from_web: bool) -> str:
    """URL ({base}{week}) or file path ({base}{week}.html) of a week's page."""
    base = get_settings().schedule_base_url
    if from_web:
        return f"{base}{week_num}"
    return f"{base}{week_num}.html"


def read_week_page(week_num: int, from_web: bool) -> bytes:
    """Return the raw page for one week. Raises one of ``FETCH_ERRORS``."""
    location = week_page_location(week_num, from_web)
    if from_web:
        logger.info("Fetching week %d from %s", week_num, location)
        return _rate_limited_get(location)
    logger.info("Reading week %d from %s", week_num, location)
    return Path(location).read_bytes()


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((HTTPError, ConnectionError, Timeout)),
    reraise=True,
)
def fetch_schedule_page(week_num: int) -> bytes:
    """Page used for the initial schedule load."""
    return read_week_page(week_num, get_settings().schedule_from_web)
