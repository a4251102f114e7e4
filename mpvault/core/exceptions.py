"""
Exceptions raised by the downloader, packager and publish-list client.
"""

from typing import Optional


class VaultError(Exception):
    """Base class for mpvault errors."""


class DownloadFailedError(VaultError):
    """The article page could not be downloaded or is not a valid article."""

    def __init__(self, message: str = "Download failed, please retry", url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class ContentNotFoundError(VaultError):
    """The HTML handed to the packager has no content container."""


class ArticleListError(VaultError):
    """The publish-list API answered with a non-zero result code."""

    def __init__(self, message: str, ret: Optional[int] = None):
        super().__init__(message)
        self.ret = ret


class SessionExpiredError(ArticleListError):
    """The auth token is no longer accepted (ret 200003)."""

    def __init__(self, message: str = "session expired", ret: Optional[int] = 200003):
        super().__init__(message, ret)
