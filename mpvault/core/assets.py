"""
Asset download and CSS background rewrite utilities.

The packager uses these to fetch the images, background images and
stylesheets an article references and to point the article at the local
copies. Failures are reported per URL and never stop the caller.
"""

from __future__ import annotations

import html as htmllib
import os
import re
import mimetypes
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Dict, Optional, Tuple
from urllib.parse import urljoin, urlparse, parse_qs

import requests

from .config import ClientConfig


# background / background-image: url(...) with the URL optionally wrapped in
# entity-escaped or raw quotes. Group 2 is the URL as it appears in the markup.
BACKGROUND_URL_PATTERN = re.compile(
    r"((?:background|background-image):\s*url\((?:&quot;|&#39;|[\"'])?)"
    r"((?:https?:|//)[^)]+?)"
    r"((?:&quot;|&#39;|[\"'])?\))",
    re.S,
)

SAFE_EXTENSION = re.compile(r"[a-z0-9]{1,10}")


@dataclass
class FetchedAsset:
    url: str
    content: bytes
    mime_type: str = ''


def resolve_url(url: str, base_url: Optional[str] = None) -> str:
    if url.startswith('//'):
        return 'https:' + url
    if base_url:
        return urljoin(base_url, url)
    return url


def extension_for(mime_type: str, url: str) -> str:
    """
    Pick a file extension for a downloaded asset.

    The MIME type wins; otherwise the platform's wx_fmt query parameter, then
    the URL path suffix, then 'bin'.
    """
    ext = mimetypes.guess_extension(mime_type) if mime_type else None
    if not ext:
        parsed = urlparse(url)
        wx_fmt = parse_qs(parsed.query).get('wx_fmt')
        if wx_fmt and wx_fmt[0]:
            ext = wx_fmt[0]
        else:
            ext = os.path.splitext(parsed.path)[1]
    ext = ext.lstrip('.').lower()
    # The extension ends up in a zip member name
    if not SAFE_EXTENSION.fullmatch(ext):
        return 'bin'
    return ext


class AssetDownloader:
    def __init__(self, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig()
        self.logger = logging.getLogger(__name__)
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': self.config.user_agent
        })

    def fetch(self, url: str) -> FetchedAsset:
        """
        Download one binary asset.

        Raises:
            requests.RequestException: If the request fails or returns an error status
        """
        resp = self.session.get(url, timeout=self.config.request_timeout)
        resp.raise_for_status()
        mime_type = resp.headers.get('content-type', '').split(';')[0].strip().lower()
        return FetchedAsset(url=url, content=resp.content, mime_type=mime_type)

    def fetch_text(self, url: str) -> str:
        resp = self.session.get(url, timeout=self.config.request_timeout)
        resp.raise_for_status()
        return resp.text

    def fetch_all(self, urls: List[str]) -> List[Tuple[str, Optional[FetchedAsset], Optional[Exception]]]:
        """
        Fetch several assets, returning (url, asset, error) in input order.

        Runs one request at a time unless config.asset_workers > 1.
        """
        def fetch_one(url: str):
            try:
                return url, self.fetch(url), None
            except Exception as e:
                return url, None, e

        workers = max(1, self.config.asset_workers)
        if workers == 1 or len(urls) <= 1:
            return [fetch_one(u) for u in urls]
        with ThreadPoolExecutor(max_workers=workers) as ex:
            return list(ex.map(fetch_one, urls))

    def close(self):
        self.session.close()


class BackgroundImageRewriter:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def collect(self, markup: str) -> List[str]:
        """Distinct background-image URLs in order of first appearance."""
        urls: Dict[str, None] = {}
        for match in BACKGROUND_URL_PATTERN.finditer(markup):
            urls.setdefault(match.group(2), None)
        return list(urls)

    def fetch_url(self, raw_url: str) -> str:
        """Turn a URL as written in the markup into one that can be requested."""
        return resolve_url(htmllib.unescape(raw_url))

    def rewrite(self, markup: str, mapping: Dict[str, str]) -> str:
        """
        Point every mapped background URL at its local path.

        Args:
            markup: Serialized HTML
            mapping: URL as written in the markup -> archive-relative path

        Returns:
            Rewritten markup; unmapped URLs are left as they are
        """
        def repl(m):
            url = m.group(2)
            path = mapping.get(url)
            if path is None:
                self.logger.warning(f"Background image missing: {url}")
                return m.group(0)
            return f"{m.group(1)}./{path}{m.group(3)}"

        return BACKGROUND_URL_PATTERN.sub(repl, markup)
