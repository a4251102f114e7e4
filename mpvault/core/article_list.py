"""
Publish List Client

Pages through an account's publish list via the backend's /api/appmsgpublish
endpoint. The payload is JSON nested inside JSON strings: publish_page is a
JSON string holding publish_list, and each entry's publish_info is again a
JSON string holding the appmsgex list of articles.
"""

import json
import logging
from typing import Any, Dict, Iterator, List, Optional

import requests

from .config import ClientConfig
from .exceptions import ArticleListError, SessionExpiredError


RET_OK = 0
RET_SESSION_EXPIRED = 200003


class ArticleListClient:
    """
    Client for the publish-list endpoint.

    Each call fetches exactly one page; an empty result means there are no
    more pages.
    """

    # Safety limit for iter_articles when no max_pages is given
    MAX_PAGES = 1000

    def __init__(self, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig()
        self.logger = logging.getLogger(__name__)
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': self.config.user_agent
        })

    def get_article_list(self, fakeid: str, token: str, page: int = 1, keyword: str = '') -> List[Dict[str, Any]]:
        """
        Fetch one page of an account's published articles.

        Args:
            fakeid: Account identifier
            token: Auth token of the logged-in session
            page: 1-based page number
            keyword: Optional search keyword

        Returns:
            The articles (appmsgex entries) of the page, flattened; an empty
            list once the publish list is exhausted

        Raises:
            SessionExpiredError: If the token is no longer valid
            ArticleListError: If the API reports any other error
            requests.RequestException: If the request itself fails
        """
        params = {
            'id': fakeid,
            'token': token,
            'page': page,
            'size': self.config.page_size,
            'keyword': keyword,
        }
        self.logger.debug(f"Requesting publish list page {page} for {fakeid}")

        response = self.session.get(
            self.config.api_url('/api/appmsgpublish'),
            params=params,
            timeout=self.config.request_timeout,
        )
        response.raise_for_status()
        data = response.json()

        base_resp = data.get('base_resp') or {}
        ret = base_resp.get('ret')
        if ret == RET_OK:
            return self._parse_publish_page(data.get('publish_page'))
        if ret == RET_SESSION_EXPIRED:
            self.logger.warning("Publish list request rejected: session expired")
            raise SessionExpiredError()

        err_msg = base_resp.get('err_msg', '')
        self.logger.error(f"Publish list request failed (ret={ret}): {err_msg}")
        raise ArticleListError(err_msg, ret)

    def _parse_publish_page(self, publish_page: str) -> List[Dict[str, Any]]:
        page = json.loads(publish_page)
        publish_list = [item for item in page.get('publish_list', []) if item.get('publish_info')]

        if not publish_list:
            # Everything has been loaded
            return []

        articles = []
        for item in publish_list:
            publish_info = json.loads(item['publish_info'])
            articles.extend(publish_info.get('appmsgex', []))
        return articles

    def iter_articles(self, fakeid: str, token: str, keyword: str = '',
                      start_page: int = 1, max_pages: int = 0) -> Iterator[Dict[str, Any]]:
        """
        Yield articles page by page until an empty page comes back.

        Args:
            max_pages: Stop after this many pages; 0 means no cap
        """
        limit = max_pages if max_pages and max_pages > 0 else self.MAX_PAGES
        page = start_page
        for _ in range(limit):
            articles = self.get_article_list(fakeid, token, page, keyword)
            if not articles:
                return
            self.logger.info(f"Page {page}: {len(articles)} articles")
            yield from articles
            page += 1
        if not max_pages:
            self.logger.warning(f"Publish list paging aborted after {self.MAX_PAGES} pages (safety limit)")

    def close(self):
        """Close the HTTP session."""
        self.session.close()


def get_article_list(fakeid: str, token: str, page: int = 1, keyword: str = '',
                     config: Optional[ClientConfig] = None) -> List[Dict[str, Any]]:
    client = ArticleListClient(config)
    try:
        return client.get_article_list(fakeid, token, page, keyword)
    finally:
        client.close()
