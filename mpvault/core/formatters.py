"""
Small formatting helpers shared by the CLI and the archiving run.
"""

from datetime import datetime
from urllib.parse import quote

from .config import DEFAULT_PROXY_BASE


# Characters encodeURIComponent leaves alone on top of quote()'s own safe set
_URI_COMPONENT_SAFE = "!*'()"


def format_timestamp(timestamp: int) -> str:
    """Format unix seconds as local time, e.g. '2023-05-15 12:00'."""
    return datetime.fromtimestamp(int(timestamp)).strftime('%Y-%m-%d %H:%M')


def proxy_image(url: str, proxy_base: str = DEFAULT_PROXY_BASE) -> str:
    """Route an image URL through the CORS-safe image proxy."""
    return f"{proxy_base}?url={quote(url, safe=_URI_COMPONENT_SAFE)}"
