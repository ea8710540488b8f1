"""
Open Graph and HTML metadata extraction for link previews.

Arbitrary markup never raises; missing tags simply leave fields empty.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from bs4 import BeautifulSoup
from bs4.element import Tag

from link_preview.core.logging import get_logger
from link_preview.utils.dates import parse_iso8601

logger = get_logger(__name__)

FAVICON_RELS = ("icon", "shortcut icon", "apple-touch-icon", "apple-touch-icon-precomposed")


@dataclass(frozen=True)
class HtmlMetadata:
    """Raw metadata candidates found in a page."""

    title_tag: str | None = None
    description: str | None = None
    og_title: str | None = None
    og_description: str | None = None
    og_image_url: str | None = None
    og_published_time: str | None = None
    og_modified_time: str | None = None
    article_published_time: str | None = None
    article_modified_time: str | None = None
    favicon_url: str | None = None

    @property
    def preferred_title(self) -> str | None:
        return self.og_title if self.og_title is not None else self.title_tag

    @property
    def preferred_description(self) -> str | None:
        return self.og_description if self.og_description is not None else self.description

    @property
    def preferred_image_url(self) -> str | None:
        return self.og_image_url if self.og_image_url is not None else self.favicon_url

    @property
    def date_for_link_preview(self) -> datetime | None:
        """Parse the first present date candidate; later candidates are not consulted."""
        candidates = (
            self.og_published_time,
            self.article_published_time,
            self.og_modified_time,
            self.article_modified_time,
        )
        first = next((c for c in candidates if c is not None), None)
        return parse_iso8601(first)


def _meta_content(soup: BeautifulSoup, key: str) -> str | None:
    """Content of the first <meta> whose property or name equals key (case-insensitive)."""
    key = key.lower()
    for tag in soup.find_all("meta"):
        if not isinstance(tag, Tag):
            continue
        for attr in ("property", "name"):
            value = tag.get(attr)
            if isinstance(value, str) and value.strip().lower() == key:
                content = tag.get("content")
                if isinstance(content, str) and content.strip():
                    return content
    return None


def _title_tag(soup: BeautifulSoup) -> str | None:
    title = soup.find("title")
    if not isinstance(title, Tag):
        return None
    text = title.get_text()
    return text if text.strip() else None


def _favicon_href(soup: BeautifulSoup) -> str | None:
    for tag in soup.find_all("link"):
        if not isinstance(tag, Tag):
            continue
        rel = tag.get("rel")
        if not rel:
            continue
        rel_value = " ".join(rel) if isinstance(rel, list) else str(rel)
        if rel_value.strip().lower() in FAVICON_RELS:
            href = tag.get("href")
            if isinstance(href, str) and href.strip():
                return href.strip()
    return None


def parse_html_metadata(raw_html: str) -> HtmlMetadata:
    """Extract link preview metadata from an HTML document.

    Args:
        raw_html: Page body as text.

    Returns:
        HtmlMetadata with every candidate found; absent tags yield None.
    """
    try:
        soup = BeautifulSoup(raw_html, "html.parser")
    except Exception as e:
        # html.parser is lenient, but a pathological document must not fail the preview
        logger.warning(f"Could not parse HTML for link preview: {e}")
        return HtmlMetadata()

    return HtmlMetadata(
        title_tag=_title_tag(soup),
        description=_meta_content(soup, "description"),
        og_title=_meta_content(soup, "og:title"),
        og_description=_meta_content(soup, "og:description"),
        og_image_url=_meta_content(soup, "og:image") or _meta_content(soup, "og:image:url"),
        og_published_time=_meta_content(soup, "og:published_time"),
        og_modified_time=_meta_content(soup, "og:modified_time"),
        article_published_time=_meta_content(soup, "article:published_time"),
        article_modified_time=_meta_content(soup, "article:modified_time"),
        favicon_url=_favicon_href(soup),
    )
