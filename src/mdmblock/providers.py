from __future__ import annotations

import threading
from pathlib import Path

from .loader import BlockList, load_block_list


class RuleProvider:
    """Base class for block list sources.

    Subclasses must implement ``get_block_list()``. Returning ``None``
    means no rules are configured and matching is never blocked.
    """

    def get_block_list(self) -> BlockList | None:
        """Return the current block list, or ``None`` if none is configured.

        Raises:
            NotImplementedError: If not overridden by a subclass.
        """
        raise NotImplementedError


class StaticRuleProvider(RuleProvider):
    """Provides a fixed block list (or none at all).

    Example:
        >>> provider = StaticRuleProvider(load_block_list({"blocklist": []}))
        >>> provider.get_block_list()
        BlockList(rules=())
    """

    def __init__(self, block_list: BlockList | None = None) -> None:
        self._block_list = block_list

    def get_block_list(self) -> BlockList | None:
        return self._block_list


class FileRuleProvider(RuleProvider):
    """Reads the block list from a JSON file, reloading it when it changes.

    The parsed block list is cached and reused until the file's
    modification time changes. A missing file means no rules are
    configured.

    Attributes:
        path: Location of the block list JSON document.

    Raises:
        BlockListLoadError: From ``get_block_list()`` when the file exists
            but cannot be parsed or validated.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._mtime: float | None = None
        self._block_list: BlockList | None = None

    def get_block_list(self) -> BlockList | None:
        try:
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            return None

        with self._lock:
            if self._block_list is None or mtime != self._mtime:
                self._block_list = load_block_list(self.path)
                self._mtime = mtime
            return self._block_list
