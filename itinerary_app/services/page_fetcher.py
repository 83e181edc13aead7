"""
Page Fetcher.
Downloads a booking page and reduces it to plain text for the model.
"""
import httpx
import logging
import re
from typing import Optional

from ..config import Settings, settings as default_settings
from .errors import PageFetchError

logger = logging.getLogger(__name__)

SCRIPT_PATTERN = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
STYLE_PATTERN = re.compile(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", re.IGNORECASE)
TAG_PATTERN = re.compile(r"<[^>]+>")
WHITESPACE_PATTERN = re.compile(r"\s+")

HTML_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
)


def clean_html(html: str) -> str:
    """Strip scripts, styles and tags; collapse whitespace; decode basic entities."""
    cleaned = SCRIPT_PATTERN.sub("", html)
    cleaned = STYLE_PATTERN.sub("", cleaned)
    cleaned = TAG_PATTERN.sub(" ", cleaned)
    cleaned = WHITESPACE_PATTERN.sub(" ", cleaned).strip()
    for entity, char in HTML_ENTITIES:
        cleaned = cleaned.replace(entity, char)
    return cleaned


class PageFetcher:
    """Fetches pages with a browser-like User-Agent."""

    def __init__(self, config: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or default_settings
        self._client = client
        self.headers = {"User-Agent": self.config.scraper_user_agent}

    async def fetch(self, url: str) -> str:
        """Return the raw body of ``url``; PageFetchError when it can't be had."""
        try:
            if self._client is not None:
                response = await self._client.get(url, headers=self.headers, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self.config.http_timeout) as client:
                    response = await client.get(url, headers=self.headers, follow_redirects=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Could not fetch {url}: {e}")
            raise PageFetchError(f"Failed to fetch URL: {e}") from e

        if not response.is_success:
            logger.error(f"Could not fetch {url}: status {response.status_code}")
            raise PageFetchError(f"Failed to fetch URL: {response.status_code}")
        return response.text

    async def fetch_text(self, url: str) -> str:
        """Cleaned page text, cut to the configured content limit."""
        html = await self.fetch(url)
        return clean_html(html)[: self.config.page_content_limit]
