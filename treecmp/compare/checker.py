# Copyright Red Hat
#
# treecmp/compare/checker.py - Directory tree comparison content checks
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
File content equality checking.
"""
from functools import partial
from hashlib import blake2b, blake2s, sha256, sha512, sha3_256
from typing import Optional
import logging
import os

from treecmp import TREECMP_SUBSYSTEM_COMPARE, TreecmpCompareError

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TREECMP_SUBSYSTEM_COMPARE}, **kwargs)


#: Default digest used to decide content equality.
DEFAULT_HASH_ALGORITHM = "sha256"

#: Default read buffer size used when streaming file content.
DEFAULT_READ_SIZE = 8192

#: Supported 256 bit (or wider) digests.
_HASH_TYPES = {
    "sha256": sha256,
    "sha512": sha512,
    "sha3_256": sha3_256,
    "blake2b": partial(blake2b, digest_size=32),
    "blake2s": blake2s,
}


def hash_algorithms():
    """
    Return the names of the supported content digest algorithms.
    """
    return list(_HASH_TYPES.keys())


class ContentChecker:
    """
    Decide whether two files have byte-identical content.

    Files of different sizes are rejected from ``os.stat()`` data alone.
    Files of equal size are streamed through a cryptographic digest and
    are considered identical if the digests match.
    """

    def __init__(
        self,
        hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
        read_size: int = DEFAULT_READ_SIZE,
    ):
        """
        Initialise a new ``ContentChecker`` object.

        :param hash_algorithm: The name of the digest algorithm to use.
        :type hash_algorithm: ``str``
        :param read_size: The size of each read when streaming file content.
        :type read_size: ``int``
        :raises ValueError: If ``hash_algorithm`` is unknown or ``read_size``
                            is not positive.
        """
        if hash_algorithm not in _HASH_TYPES:
            raise ValueError(f"Unknown hash algorithm: {hash_algorithm}")
        if read_size <= 0:
            raise ValueError(f"Invalid read size: {read_size}")

        self.hash_algorithm: str = hash_algorithm
        self.read_size: int = read_size
        self.hasher = _HASH_TYPES[hash_algorithm]

    def _file_size(self, path: str, rel_path: str) -> int:
        try:
            return os.stat(path).st_size
        except OSError as err:
            raise TreecmpCompareError(rel_path, err) from err

    def content_digest(self, path: str, rel_path: Optional[str] = None) -> bytes:
        """
        Calculate the content digest of the file at ``path``.

        :param path: The path to the file to hash.
        :type path: ``str``
        :param rel_path: The path to report on failure (defaults to
                         ``path``).
        :type rel_path: ``Optional[str]``
        :returns: The digest of the file content.
        :rtype: ``bytes``
        :raises TreecmpCompareError: If the file cannot be opened or read.
        """
        hasher = self.hasher(usedforsecurity=False)
        try:
            with open(path, "rb") as f:
                for chunk in iter(lambda: f.read(self.read_size), b""):
                    hasher.update(chunk)
        except OSError as err:
            raise TreecmpCompareError(rel_path or path, err) from err
        return hasher.digest()

    def files_equal(
        self, path_a: str, path_b: str, rel_path: Optional[str] = None
    ) -> bool:
        """
        Compare the content of the files at ``path_a`` and ``path_b``.

        :param path_a: The first (left hand) file.
        :type path_a: ``str``
        :param path_b: The second (right hand) file.
        :type path_b: ``str``
        :param rel_path: The path to report on failure (defaults to
                         ``path_a``).
        :type rel_path: ``Optional[str]``
        :returns: ``True`` if the content is identical or ``False`` if it
                  differs.
        :rtype: ``bool``
        :raises TreecmpCompareError: If either file cannot be examined.
        """
        rel_path = rel_path or path_a

        size_a = self._file_size(path_a, rel_path)
        size_b = self._file_size(path_b, rel_path)
        if size_a != size_b:
            _log_debug_compare(
                "Size mismatch for '%s' (%d != %d)", rel_path, size_a, size_b
            )
            return False

        digest_a = self.content_digest(path_a, rel_path)
        digest_b = self.content_digest(path_b, rel_path)
        return digest_a == digest_b


__all__ = [
    "ContentChecker",
    "hash_algorithms",
]
