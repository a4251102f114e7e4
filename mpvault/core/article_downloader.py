"""
Article Download Module

Fetches an article page through the backend's /api/download endpoint and
checks that what came back is really an article.
"""

import logging
from typing import Optional

import requests

from .config import ClientConfig
from .exceptions import DownloadFailedError
from .html_cleaner import find_page_content, parse_html


class ArticleDownloader:
    """
    Downloads article HTML via the backend service.

    One attempt per article; the backend does the actual fetching from the
    publishing platform, this class only validates the result.
    """

    def __init__(self, config: Optional[ClientConfig] = None):
        """
        Args:
            config: Client configuration (backend URL, timeout, user agent)
        """
        self.config = config or ClientConfig()
        self.logger = logging.getLogger(__name__)

        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': self.config.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        })

    def download_article_html(self, article_url: str, title: Optional[str] = None) -> str:
        """
        Download the full HTML of an article.

        Args:
            article_url: Public URL of the article
            title: Article title, only used in log output

        Returns:
            The raw page HTML

        Raises:
            DownloadFailedError: If the request fails or the page has no
                content container
        """
        self.logger.info(f"Downloading article: {title or article_url}")

        try:
            response = self.session.get(
                self.config.api_url('/api/download'),
                params={'url': article_url},
                timeout=self.config.request_timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.error(f"Request for {article_url} failed: {e}")
            raise DownloadFailedError(url=article_url) from e

        full_html = response.text

        if find_page_content(parse_html(full_html)) is None:
            if title:
                self.logger.info(title)
            self.logger.warning(f"No article content in response for {article_url}")
            raise DownloadFailedError(url=article_url)

        self.logger.debug(f"Downloaded {len(full_html)} chars for {article_url}")
        return full_html

    def close(self):
        """Close the HTTP session."""
        self.session.close()


def download_article_html(article_url: str, title: Optional[str] = None,
                          config: Optional[ClientConfig] = None) -> str:
    downloader = ArticleDownloader(config)
    try:
        return downloader.download_article_html(article_url, title)
    finally:
        downloader.close()
