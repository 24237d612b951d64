# Copyright Red Hat
#
# treecmp/compare/pathset.py - Directory tree comparison path enumeration
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Path set construction and subdirectory enumeration for tree comparison.
"""
from typing import Callable, List, Optional, Set, Tuple
from pathlib import PurePath
import logging
import os

from treecmp import TREECMP_SUBSYSTEM_COMPARE

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TREECMP_SUBSYSTEM_COMPARE}, **kwargs)


def _dir_key(path: str) -> Optional[Tuple[int, int]]:
    """
    Return a ``(st_dev, st_ino)`` identity for the directory at ``path``,
    following symbolic links, or ``None`` if it cannot be determined.
    """
    try:
        st = os.stat(path)
    except OSError:
        return None
    return (st.st_dev, st.st_ino)


def _scan_dir(path: str) -> List[os.DirEntry]:
    """
    List the entries of the directory at ``path``.

    :param path: The directory to list.
    :type path: ``str``
    :returns: A list of ``os.DirEntry`` objects, empty if the directory
              cannot be read.
    :rtype: ``List[os.DirEntry]``
    """
    try:
        with os.scandir(path) as it:
            return list(it)
    except FileNotFoundError:
        _log_debug_compare("Directory '%s' vanished before listing", path)
    except OSError as err:
        _log_warn("Skipping unreadable directory %s: %s", path, err.strerror or err)
    return []


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


def _is_file(entry: os.DirEntry) -> bool:
    try:
        return entry.is_file()
    except OSError:
        return False


def build_path_set(
    root: str, callback: Optional[Callable[[], None]] = None
) -> Set[str]:
    """
    Walk the tree below ``root`` and return the set of regular file paths
    found, relative to ``root`` and using ``/`` as the separator.

    Directories are traversed but are never members of the returned set.
    Traversal uses an explicit work list, so deep trees do not hit the
    interpreter recursion limit. Entries are classified by the platform
    defaults of ``os.DirEntry.is_dir()`` and ``os.DirEntry.is_file()``
    (which follow symbolic links), so a directory reachable under two
    names contributes its files under both. A directory that is one of
    its own ancestors (a symbolic link cycle) is not entered again.
    Directories that cannot be listed are skipped.

    :param root: The directory to walk.
    :type root: ``str``
    :param callback: An optional function called once per directory
                     visited (for instance to drive a throbber).
    :type callback: ``Optional[Callable[[], None]]``
    :returns: The set of relative file paths below ``root``.
    :rtype: ``Set[str]``
    """
    files = set()

    to_visit = [(root, PurePath(), frozenset())]
    while to_visit:
        dir_path, rel_dir, ancestors = to_visit.pop()

        key = _dir_key(dir_path)
        if key is not None:
            if key in ancestors:
                _log_debug_compare("Not re-entering ancestor directory '%s'", dir_path)
                continue
            ancestors = ancestors | {key}

        if callback:
            callback()

        for entry in _scan_dir(dir_path):
            rel_path = rel_dir / entry.name
            if _is_dir(entry):
                to_visit.append((entry.path, rel_path, ancestors))
            elif _is_file(entry):
                files.add(rel_path.as_posix())

    _log_debug_compare("Found %d files below '%s'", len(files), root)
    return files


def list_subdirs(root: str) -> Set[str]:
    """
    Return the names of the immediate subdirectories of ``root``.

    Only one level is examined. Entries that cannot be classified are
    omitted, and an unreadable ``root`` yields an empty set.

    :param root: The directory to list.
    :type root: ``str``
    :returns: The set of child directory names.
    :rtype: ``Set[str]``
    """
    subdirs = {entry.name for entry in _scan_dir(root) if _is_dir(entry)}
    _log_debug_compare(
        "Found subdirectories of '%s': %s", root, ", ".join(sorted(subdirs))
    )
    return subdirs


__all__ = [
    "build_path_set",
    "list_subdirs",
]
