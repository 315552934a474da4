"""Repository root lookup for import paths served by other repositories."""

from __future__ import annotations

import logging
import re
import threading
from typing import TYPE_CHECKING

from errors import RemoteLookupError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

# Hosts whose repositories live at exactly <host>/<org>/<repo>.
KNOWN_HOSTS = ("github.com", "gitlab.com", "bitbucket.org")

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")


def has_path_prefix(path: str, prefix: str) -> bool:
    """True when ``prefix`` is ``""``, equal to ``path`` or a parent of it."""
    return prefix == "" or path == prefix or path.startswith(prefix + "/")


def trim_path_prefix(path: str, prefix: str) -> str:
    """Remove a path prefix previously checked with ``has_path_prefix``."""
    if prefix == "":
        return path
    if path == prefix:
        return ""
    return path[len(prefix) + 1 :]


def repository_name(root: str) -> str:
    """Derive a repository identifier from a hosted import path root.

    Examples:
        >>> repository_name("github.com/org/repo")
        '@com_github_org_repo'
    """
    host, _, rest = root.partition("/")
    parts = [*reversed(host.split(".")), *rest.split("/")]
    return "@" + "_".join(_NON_ALNUM.sub("_", part) for part in parts if part)


class RemoteCache:
    """Resolves an import path to ``(root prefix, repository)``.

    Explicit entries win by longest matching prefix; imports under well-known
    hosting services fall back to a repository derived from the first three
    path segments.
    """

    def __init__(self, entries: Iterable[tuple[str, str]] = ()) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, str] = {}
        for prefix, repo in entries:
            self.add(prefix, repo)

    def add(self, prefix: str, repo: str) -> None:
        with self._lock:
            self._entries[prefix.strip("/")] = repo

    def root(self, import_path: str) -> tuple[str, str]:
        """Return the repository root prefix and identifier for an import.

        Raises:
            RemoteLookupError: When no entry or hosting rule matches.
        """
        with self._lock:
            matches = [
                prefix
                for prefix in self._entries
                if has_path_prefix(import_path, prefix)
            ]
            if matches:
                best = max(matches, key=len)
                return best, self._entries[best]

        parts = import_path.split("/")
        if parts[0] in KNOWN_HOSTS and len(parts) >= 3:
            root = "/".join(parts[:3])
            repo = repository_name(root)
            logger.debug("derived repository %s for %s", repo, import_path)
            return root, repo

        msg = f"unknown repository root for import path {import_path!r}"
        raise RemoteLookupError(msg)


__all__ = [
    "KNOWN_HOSTS",
    "RemoteCache",
    "has_path_prefix",
    "repository_name",
    "trim_path_prefix",
]
