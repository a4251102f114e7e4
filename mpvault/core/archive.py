"""
In-memory zip archive that articles and their assets are packed into.

Entries are held in memory until the archive is serialized, so a path written
twice simply replaces its earlier content. folder() hands out views that share
the same storage, which is how several articles end up in one zip.
"""

from __future__ import annotations

import io
import os
import re
import uuid
import zipfile
from typing import Dict, List, Optional, Union


ASSETS_DIR = "assets"

_EXTENSION = re.compile(r"[A-Za-z0-9]{1,10}")


def unique_asset_name(ext: str) -> str:
    """Return '<128-bit random hex>.<ext>' for a file under assets/."""
    ext = ext.lstrip('.')
    if not _EXTENSION.fullmatch(ext):
        ext = 'bin'
    return f"{uuid.uuid4().hex}.{ext}"


class Archive:
    def __init__(self, root: str = "", entries: Optional[Dict[str, Optional[bytes]]] = None):
        self.root = root
        # Full archive path -> content; None marks a directory entry
        self._entries: Dict[str, Optional[bytes]] = entries if entries is not None else {}

    def folder(self, name: str) -> Archive:
        """Create (if needed) a sub folder and return a view rooted there."""
        prefix = self._full(name).rstrip('/') + '/'
        self._entries.setdefault(prefix, None)
        return Archive(prefix, self._entries)

    def file(self, path: str, data: Union[bytes, str]) -> None:
        if isinstance(data, str):
            data = data.encode('utf-8')
        self._entries[self._full(path)] = data

    def read(self, path: str) -> bytes:
        data = self._entries.get(self._full(path))
        if data is None:
            raise KeyError(path)
        return data

    def namelist(self) -> List[str]:
        """File paths under this view, relative to it, in insertion order."""
        return [
            name[len(self.root):]
            for name, data in self._entries.items()
            if data is not None and name.startswith(self.root)
        ]

    def to_bytes(self) -> bytes:
        """Serialize the whole archive (not just this view) as a zip file."""
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as z:
            for name, data in self._entries.items():
                z.writestr(name, b"" if data is None else data)
        return buf.getvalue()

    def save(self, path: str) -> str:
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        with open(path, 'wb') as f:
            f.write(self.to_bytes())
        return path

    def _full(self, path: str) -> str:
        return self.root + path.lstrip('/')

    def __len__(self) -> int:
        return len(self.namelist())
