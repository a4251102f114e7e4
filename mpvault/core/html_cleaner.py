"""
Article HTML Cleaning Module

Locates the article's content container and strips the page chrome that only
makes sense inside the publishing platform (toasts, bottom bars, scripts).
"""

import logging
from typing import Optional

from bs4 import BeautifulSoup, Tag


CONTENT_SELECTOR = '#page-content'


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, 'lxml')


def find_page_content(soup: BeautifulSoup) -> Optional[Tag]:
    """Return the content container, or None when the page has none."""
    return soup.select_one(CONTENT_SELECTOR)


class ArticleCleaner:
    """
    Removes presentational noise from an article's content container.

    The article body (#js_content) ships with an inline style that keeps it
    hidden until the platform's scripts reveal it; that style is dropped so
    the body renders without scripts.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

        self.hidden_body_selector = '#js_content'

        self.noise_selectors = [
            '#js_tags_preview_toast',
            '#content_bottom_area',
            '#js_temp_bottom_area',
        ]

    def clean(self, page_content: Tag) -> Tag:
        """
        Clean the content container in place.

        Args:
            page_content: The #page-content element

        Returns:
            The same element, for chaining
        """
        body = page_content.select_one(self.hidden_body_selector)
        if body is not None and body.has_attr('style'):
            del body['style']

        removed_count = 0
        for selector in self.noise_selectors:
            element = page_content.select_one(selector)
            if element is not None:
                element.decompose()
                removed_count += 1

        for script in page_content.find_all('script'):
            script.decompose()
            removed_count += 1

        if removed_count > 0:
            self.logger.debug(f"Removed {removed_count} noise elements")

        return page_content
