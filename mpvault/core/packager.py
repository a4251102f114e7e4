"""
Article Packaging Module

Turns a downloaded article page into a self-contained archive: an index.html
holding the cleaned content container plus an assets/ folder with local
copies of the images, background images and stylesheets it references.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from .archive import ASSETS_DIR, Archive, unique_asset_name
from .assets import AssetDownloader, BackgroundImageRewriter, extension_for, resolve_url
from .config import ClientConfig
from .exceptions import ContentNotFoundError
from .html_cleaner import ArticleCleaner, find_page_content, parse_html
from .logger import ErrorTracker


INDEX_TEMPLATE = """<!DOCTYPE html>
<html lang="zh_CN">
<head>
    <meta charset="utf-8">
    <meta http-equiv="Content-Type" content="text/html; charset=utf-8">
    <meta http-equiv="X-UA-Compatible" content="IE=edge">
    <meta name="viewport" content="width=device-width,initial-scale=1.0,maximum-scale=1.0,user-scalable=0,viewport-fit=cover">
    {links}
    <style>
        #page-content {{
            max-width: 667px;
            margin: 0 auto;
        }}
        img {{
            max-width: 100%;
        }}
    </style>
</head>
<body>
{content}
</body>
</html>"""


class ArticlePackager:
    """
    Packs article HTML and its assets into an Archive.

    Missing assets are logged and skipped, so an archive is produced even when
    some downloads fail. A page without a content container is an error.
    """

    def __init__(self,
                 config: Optional[ClientConfig] = None,
                 error_tracker: Optional[ErrorTracker] = None,
                 downloader: Optional[AssetDownloader] = None):
        self.config = config or ClientConfig()
        self.logger = logging.getLogger(__name__)
        self.error_tracker = error_tracker
        self.cleaner = ArticleCleaner()
        self.downloader = downloader or AssetDownloader(self.config)
        self.backgrounds = BackgroundImageRewriter()

    def pack_html_assets(self, html: str, archive: Optional[Archive] = None,
                         base_url: Optional[str] = None) -> Archive:
        """
        Pack one article into an archive.

        Args:
            html: Full article page HTML
            archive: Archive (or archive folder) to write into; a new one if None
            base_url: URL of the article, used to resolve relative asset URLs

        Returns:
            The archive written to

        Raises:
            ContentNotFoundError: If the page has no content container
        """
        if archive is None:
            archive = Archive()

        soup = parse_html(html)
        page_content = find_page_content(soup)
        if page_content is None:
            raise ContentNotFoundError("Article HTML has no #page-content element")

        self.cleaner.clean(page_content)
        assets = archive.folder(ASSETS_DIR)

        self._pack_images(page_content, assets, base_url)
        content_html = self._pack_background_images(str(page_content), assets)
        links = self._pack_stylesheets(soup, assets, base_url)

        archive.file('index.html', INDEX_TEMPLATE.format(links=''.join(links), content=content_html))
        self.logger.info(f"Packed article with {len(assets)} assets")
        return archive

    def _pack_images(self, page_content: Tag, assets: Archive, base_url: Optional[str]) -> None:
        targets = []
        for img in page_content.select('img[src]'):
            src = img.get('src', '').strip()
            if not src:
                self.logger.warning("img element has an empty src")
                continue
            targets.append((img, resolve_url(src, base_url)))

        results = self.downloader.fetch_all([url for _, url in targets])
        for (img, url), (_, asset, error) in zip(targets, results):
            if error is not None:
                self._report_failure('image', url, error)
                continue
            name = unique_asset_name(extension_for(asset.mime_type, url))
            assets.file(name, asset.content)
            img['src'] = f"./{ASSETS_DIR}/{name}"

    def _pack_background_images(self, markup: str, assets: Archive) -> str:
        # Background images live in style text, so they are found and
        # rewritten on the serialized markup rather than through the DOM
        raw_urls = self.backgrounds.collect(markup)
        results = self.downloader.fetch_all([self.backgrounds.fetch_url(u) for u in raw_urls])

        mapping = {}
        for raw_url, (url, asset, error) in zip(raw_urls, results):
            if error is not None:
                self._report_failure('background image', url, error)
                continue
            name = unique_asset_name(extension_for(asset.mime_type, url))
            assets.file(name, asset.content)
            mapping[raw_url] = f"{ASSETS_DIR}/{name}"

        return self.backgrounds.rewrite(markup, mapping)

    def _pack_stylesheets(self, soup: BeautifulSoup, assets: Archive, base_url: Optional[str]) -> List[str]:
        links = []
        for link in soup.select('head link[rel="stylesheet"]'):
            href = link.get('href')
            if not href:
                continue
            url = resolve_url(href, base_url)
            try:
                stylesheet = self.downloader.fetch_text(url)
            except Exception as e:
                self._report_failure('stylesheet', url, e)
                continue
            name = unique_asset_name('css')
            assets.file(name, stylesheet)
            links.append(f'<link rel="stylesheet" href="./{ASSETS_DIR}/{name}">')
        return links

    def _report_failure(self, kind: str, url: str, error: Exception) -> None:
        if self.error_tracker is not None:
            self.error_tracker.log_error(error, context=kind, url=url)
        else:
            self.logger.warning(f"Failed to download {kind}: {url} ({error})")

    def close(self):
        self.downloader.close()


def pack_html_assets(html: str, archive: Optional[Archive] = None,
                     config: Optional[ClientConfig] = None,
                     base_url: Optional[str] = None) -> Archive:
    packager = ArticlePackager(config)
    try:
        return packager.pack_html_assets(html, archive, base_url=base_url)
    finally:
        packager.close()
