"""Path normalization for included resources.

A resource reached through an include directory is displayed relative to
that directory (``/usr/include/c++/12/vector`` becomes ``vector``).  Those
short names are only safe while they are unique: once two different
resources map to the same display name, that name is *conflicted* and both
resources fall back to their absolute identifiers.

Usage::

    normalizer = PathNormalizer()
    normalizer.register("/inc/a/x.h", "/inc/a")
    normalizer.display_name_of("/inc/a/x.h")   # "x.h"
"""

from __future__ import annotations

import logging
import os
from collections.abc import Set

logger = logging.getLogger(__name__)


def is_path_prefix(directory: str, resource_id: str) -> bool:
    """True if *directory* is a whole-component prefix of *resource_id*."""
    if not directory:
        return False
    prefix = directory if directory.endswith(os.sep) else directory + os.sep
    return resource_id.startswith(prefix) and len(resource_id) > len(prefix)


def strip_directory(directory: str, resource_id: str) -> str:
    """Return *resource_id* relative to *directory* (no leading separator)."""
    return resource_id[len(directory):].lstrip(os.sep)


class PathNormalizer:
    """Maps resource ids to short, unambiguous display names."""

    def __init__(self) -> None:
        self._origins: dict[str, str] = {}
        self._display_names: dict[str, str] = {}
        self._owners: dict[str, str] = {}
        self._conflicts: set[str] = set()

    @property
    def conflicts(self) -> Set[str]:
        """Display names claimed by more than one resource."""
        return frozenset(self._conflicts)

    def origin_of(self, resource_id: str) -> str | None:
        """Directory *resource_id* was first registered against, if any."""
        return self._origins.get(resource_id)

    def register(self, resource_id: str, origin_dir: str) -> bool:
        """Record that *resource_id* was reached through *origin_dir*.

        The first registration for a resource wins.  Returns ``True`` if a
        display name was stored.
        """
        return self._store(resource_id, resource_id, origin_dir)

    def _store(self, resource_id: str, path: str, origin_dir: str) -> bool:
        if resource_id in self._origins:
            return False
        if not is_path_prefix(origin_dir, path):
            logger.warning("Can't normalize path %s against directory %s", path, origin_dir)
            return False

        self._origins[resource_id] = origin_dir
        display_name = strip_directory(origin_dir, path)
        self._display_names[resource_id] = display_name

        # Owners are compared by path, so two ids naming the same file agree.
        owner = self._owners.setdefault(display_name, path)
        if owner != path:
            if display_name not in self._conflicts:
                logger.debug(
                    "Display name %s is ambiguous (%s, %s)", display_name, owner, resource_id,
                )
            self._conflicts.add(display_name)
        return True

    def resolve_and_register(self, resource_id: str, origin_dir: str) -> bool:
        """Resolve both paths against the file system, then :meth:`register`.

        Symlinks and relative components are resolved first so that the
        prefix check compares canonical paths; the display name is still
        keyed by the *resource_id* the host reported.  Two ids that resolve
        to the same file share their display name without a conflict.  A
        directory that cannot be resolved is reported and the resource keeps
        its raw identifier.
        """
        if not origin_dir or not os.path.isdir(origin_dir):
            if origin_dir:
                logger.warning("Couldn't resolve include directory %r", origin_dir)
            return False
        real_dir = os.path.realpath(origin_dir)
        real_resource = os.path.realpath(resource_id)
        return self._store(resource_id, real_resource, real_dir)

    def display_name_of(self, resource_id: str) -> str:
        """Short display name for *resource_id*, or the id itself.

        Falls back to the raw identifier when the resource was never
        normalized or its display name is conflicted.
        """
        display_name = self._display_names.get(resource_id)
        if display_name is None or display_name in self._conflicts:
            return resource_id
        return display_name
