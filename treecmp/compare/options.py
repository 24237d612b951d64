# Copyright Red Hat
#
# treecmp/compare/options.py - Directory tree comparison options
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree comparison options.
"""
from dataclasses import dataclass, fields
from typing import Union
from argparse import Namespace
import logging

from treecmp import TREECMP_SUBSYSTEM_COMPARE

from .checker import DEFAULT_HASH_ALGORITHM, DEFAULT_READ_SIZE, hash_algorithms

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TREECMP_SUBSYSTEM_COMPARE}, **kwargs)


@dataclass(frozen=True)
class CompareOptions:
    """
    Directory tree comparison options.
    """

    #: Verify that files present on both sides have identical content
    verify_contents: bool = False
    #: Digest algorithm used for content verification
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM
    #: Read buffer size in bytes for content verification
    read_size: int = DEFAULT_READ_SIZE
    #: Do not output progress or status updates
    quiet: bool = False

    def __post_init__(self):
        if self.hash_algorithm not in hash_algorithms():
            raise ValueError(f"Unknown hash algorithm: {self.hash_algorithm}")
        if self.read_size <= 0:
            raise ValueError(f"Invalid read size: {self.read_size}")

    def __str__(self):
        """
        Return a human readable string representation of this
        ``CompareOptions`` instance.

        :returns: A human readable string.
        :rtype: ``str``
        """
        return "\n".join(f"{key}={val}" for key, val in self.__dict__.items())

    @classmethod
    def from_cmd_args(cls, cmd_args: Namespace) -> "CompareOptions":
        """
        Initialise CompareOptions from command line arguments.

        Arguments that are absent from ``cmd_args``, or set to ``None``,
        take the dataclass default.

        :param cmd_args: The parsed command line arguments.
        :type cmd_args: ``Namespace``
        :returns: A new ``CompareOptions`` instance
        :rtype: ``CompareOptions``
        """

        def get_value(name: str) -> Union[bool, int, str, None]:
            return getattr(cmd_args, name, None)

        kwargs = {
            f.name: get_value(f.name)
            for f in fields(cls)
            if get_value(f.name) is not None
        }
        options = cls(**kwargs)
        _log_debug_compare(
            "Initialised CompareOptions from arguments: %s", repr(options)
        )
        return options
