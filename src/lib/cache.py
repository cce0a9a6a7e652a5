"""
Read-through cache of layout documents

Layouts are read once per run per file name and kept verbatim. Every
caller gets its own LineBuffer copy, so composing one page never leaks
into the next page that uses the same layout.
"""

import threading
from pathlib import Path
from typing import Dict, Tuple

from ..models.document import LineBuffer
from .log import LOG


class LayoutCache:
    """
    Layout sources keyed by file name

    The first load of a name is done under a lock, so concurrent callers
    never read the same layout twice.
    """

    def __init__(self) -> None:
        self._sources: Dict[str, Tuple[str, ...]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, name: object) -> bool:
        return name in self._sources

    def layout_get(self, path: Path, encoding: str = "utf-8") -> LineBuffer:
        """
        Working copy of the layout at path

        Args:
            path: Layout file; its file name is the cache key
            encoding: Codec used on first read

        Returns:
            A new LineBuffer the caller may mutate freely

        Raises:
            OSError: If the layout cannot be read
        """
        key = Path(path).name
        cached = self._sources.get(key)
        if cached is None:
            with self._lock:
                cached = self._sources.get(key)
                if cached is None:
                    text = Path(path).read_text(encoding=encoding)
                    cached = tuple(LineBuffer.text_parse(text))
                    self._sources[key] = cached
                    LOG(f"Loaded layout {key} ({len(cached)} lines)", level=2)
        return LineBuffer(cached)

    def clear(self) -> None:
        with self._lock:
            self._sources.clear()
