"""
File Management Utilities

Naming for archive folders and saving finished archives to disk.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional
import logging

from mpvault.core.archive import Archive
from mpvault.core.formatters import format_timestamp


MAX_NAME_LENGTH = 200


class FileManager:
    """
    Names article folders inside an archive and writes archives out.
    """

    def __init__(self, base_output_dir: str = "output"):
        """
        Args:
            base_output_dir: Directory archives are saved into
        """
        self.base_output_dir = Path(base_output_dir)
        self.logger = logging.getLogger(__name__)

    def safe_name(self, text: str, fallback: str = "untitled") -> str:
        """
        Make a string usable as a file or folder name.

        Keeps word characters (including CJK), spaces, dots and dashes.
        """
        name = re.sub(r'[\\/:*?"<>|\r\n\t]+', '_', text or '')
        name = re.sub(r'_+', '_', name)
        name = re.sub(r'\s+', ' ', name).strip(' ._')

        if len(name) > MAX_NAME_LENGTH:
            name = name[:MAX_NAME_LENGTH].rstrip(' ._')

        return name or fallback

    def archive_folder_name(self, article: Dict[str, Any]) -> str:
        """
        Folder name for one article inside a multi-article archive.

        'YYYY-MM-DD HH-MM title' when the article carries a timestamp,
        otherwise just the title (or the link when there is no title).
        """
        title = article.get('title') or article.get('link') or ''
        timestamp = article.get('create_time') or article.get('update_time')
        if timestamp:
            try:
                title = f"{format_timestamp(timestamp).replace(':', '-')} {title}"
            except (TypeError, ValueError, OverflowError, OSError):
                self.logger.debug(f"Ignoring bad timestamp {timestamp!r} for {title}")
        return self.safe_name(title)

    def save_archive(self, archive: Archive, path: Optional[str] = None) -> str:
        """
        Write an archive as a zip file.

        Args:
            archive: Archive to write
            path: Target path; relative names land in the output directory

        Returns:
            Path of the written zip
        """
        target = Path(path) if path else self.base_output_dir / "articles.zip"
        if not target.is_absolute() and target.parent == Path('.'):
            target = self.base_output_dir / target

        archive.save(str(target))
        self.logger.info(f"Saved archive ({os.path.getsize(target)} bytes): {target}")
        return str(target)
