"""
Runtime configuration for the HTTP clients and the archiving run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_PROXY_BASE = "https://service.champ.design/api/proxy"
DEFAULT_USER_AGENT = "mpvault/1.0 (Article Archiver)"


@dataclass
class ClientConfig:
    base_url: str = DEFAULT_BASE_URL        # Backend serving /api/download and /api/appmsgpublish
    request_timeout: float = 30
    page_size: int = 20
    user_agent: str = DEFAULT_USER_AGENT
    asset_workers: int = 1                  # 1 = fetch assets strictly one after another

    def api_url(self, path: str) -> str:
        return self.base_url.rstrip('/') + '/' + path.lstrip('/')


@dataclass
class RunConfig:
    output_path: str = "output/articles.zip"
    fakeid: Optional[str] = None
    token: Optional[str] = None
    keyword: str = ""
    max_pages: int = 0      # 0 = no cap
    max_articles: int = 0   # 0 = no cap
    client: ClientConfig = field(default_factory=ClientConfig)
