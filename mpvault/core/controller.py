"""
mpvault Orchestrator: lists an account's articles, downloads them and packs
them into one archive, one folder per article.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional

from .archive import Archive
from .article_downloader import ArticleDownloader
from .article_list import ArticleListClient
from .config import RunConfig
from .exceptions import ContentNotFoundError, DownloadFailedError
from .logger import ErrorTracker
from .packager import ArticlePackager
from mpvault.utils.file_manager import FileManager


class ArchiveController:
    def __init__(self, config: RunConfig, logger: Optional[logging.Logger] = None,
                 error_tracker: Optional[ErrorTracker] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.error_tracker = error_tracker or ErrorTracker(self.logger)
        self.lister = ArticleListClient(config.client)
        self.downloader = ArticleDownloader(config.client)
        self.packager = ArticlePackager(config.client, error_tracker=self.error_tracker)
        self.files = FileManager(os.path.dirname(config.output_path) or ".")
        self.archive = Archive()
        self._stop_event = threading.Event()

    def stop(self):
        self._stop_event.set()

    def archive_articles(self, articles: Iterable[Dict[str, Any]],
                         progress: Optional[Callable[[object], None]] = None) -> Dict[str, int]:
        """
        Download and pack articles into self.archive.

        Args:
            articles: Dicts with at least 'link'; 'title' and
                'create_time'/'update_time' are used for folder names
            progress: Optional callback receiving status dicts

        Returns:
            Counters: total, downloaded, packed, failed
        """
        stats = {"total": 0, "downloaded": 0, "packed": 0, "failed": 0}

        for idx, article in enumerate(articles, 1):
            if self._stop_event.is_set():
                break
            stats["total"] += 1
            url = article.get('link') or article.get('url')
            title = article.get('title')
            if not url:
                self.error_tracker.log_warning("Article has no link, skipping", context="article")
                stats["failed"] += 1
                continue

            if progress:
                progress({"type": "article", "index": idx, "stage": "downloading", "url": url})
            try:
                html = self.downloader.download_article_html(url, title)
            except DownloadFailedError as e:
                self.error_tracker.log_error(e, context="download", url=url)
                stats["failed"] += 1
                if progress:
                    progress({"type": "article", "index": idx, "stage": "failed", "url": url, "reason": "download"})
                continue
            stats["downloaded"] += 1

            name = self._unique_folder_name(self.files.archive_folder_name(article))
            if progress:
                progress({"type": "article", "index": idx, "stage": "packing", "url": url})
            try:
                self.packager.pack_html_assets(html, self.archive.folder(name), base_url=url)
            except ContentNotFoundError as e:
                self.error_tracker.log_error(e, context="pack", url=url)
                stats["failed"] += 1
                if progress:
                    progress({"type": "article", "index": idx, "stage": "failed", "url": url, "reason": "pack"})
                continue
            stats["packed"] += 1

            if progress:
                progress({"type": "article", "index": idx, "stage": "completed", "url": url})

        self.logger.info(
            f"Archived {stats['packed']}/{stats['total']} articles ({stats['failed']} failed)"
        )
        if progress:
            progress({"type": "counters", "stats": stats})
        return stats

    def list_account_articles(self) -> List[Dict[str, Any]]:
        """
        Collect the account's articles, honouring max_pages and max_articles.

        Raises:
            ValueError: If fakeid or token is missing from the run config
            SessionExpiredError: If the token has expired
        """
        if not self.config.fakeid or not self.config.token:
            raise ValueError("fakeid and token are required to list an account")

        articles = []
        for article in self.lister.iter_articles(self.config.fakeid, self.config.token,
                                                 keyword=self.config.keyword,
                                                 max_pages=self.config.max_pages):
            articles.append(article)
            if self.config.max_articles and len(articles) >= self.config.max_articles:
                break
        self.logger.info(f"Found {len(articles)} articles for {self.config.fakeid}")
        return articles

    def archive_account(self, progress: Optional[Callable[[object], None]] = None) -> Dict[str, int]:
        if progress:
            progress("Listing published articles...")
        articles = self.list_account_articles()
        if progress:
            progress({"type": "discovery", "total": len(articles)})
        return self.archive_articles(articles, progress)

    def save(self, path: Optional[str] = None) -> str:
        return self.files.save_archive(self.archive, path or self.config.output_path)

    def close(self):
        self.lister.close()
        self.downloader.close()
        self.packager.close()

    def _unique_folder_name(self, name: str) -> str:
        """Return name, or "name (n)" with the lowest n >= 2 not yet in the archive."""
        taken = {path.split('/', 1)[0] for path in self.archive.namelist()}
        candidate = name
        n = 2
        while candidate in taken:
            candidate = f"{name} ({n})"
            n += 1
        return candidate
