# Copyright Red Hat
#
# treecmp/compare/comparer.py - Directory tree comparison top-level interface
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Top-level tree comparison interface.
"""
from typing import Optional
import logging
import os

from treecmp import TreecmpPathError
from treecmp.progress import TermControl

from .engine import CompareResults, DiffEngine
from .options import CompareOptions

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _check_root(root: str, side: str):
    """
    Check that ``root`` names an existing directory.

    :param root: The root path to check.
    :type root: ``str``
    :param side: A label for ``root`` used in error messages.
    :type side: ``str``
    :raises TreecmpPathError: If ``root`` is not a directory.
    """
    if not os.path.exists(root):
        raise TreecmpPathError(f"Root {side} does not exist: {root}")
    if not os.path.isdir(root):
        raise TreecmpPathError(f"Root {side} is not a directory: {root}")


class TreeComparer:
    """
    Top-level interface for comparing two directory trees.
    """

    def __init__(
        self,
        options: Optional[CompareOptions] = None,
        color: str = "auto",
        term_control: Optional[TermControl] = None,
    ):
        """
        Initialise a new ``TreeComparer`` to compute tree differences.

        :param options: Options to control this ``TreeComparer`` instance.
        :type options: ``CompareOptions``
        :param color: A string to control color rendering: "auto",
                      "always", or "never".
        :type color: ``str``
        :param term_control: An optional ``TermControl`` instance to use for
                             formatting. The supplied instance overrides any
                             ``color`` argument if set.
        :type term_control: ``Optional[TermControl]``
        """
        self.options: CompareOptions = options or CompareOptions()
        self.diff_engine: DiffEngine = DiffEngine()
        self.term_control: TermControl = term_control or TermControl(color=color)

    def compare(self, root_a: str, root_b: str) -> CompareResults:
        """
        Compare the trees below ``root_a`` and ``root_b``.

        :param root_a: The first (left hand) root directory.
        :type root_a: ``str``
        :param root_b: The second (right hand) root directory.
        :type root_b: ``str``
        :returns: The comparison results.
        :rtype: ``CompareResults``
        :raises TreecmpPathError: If either root is not a directory.
        """
        _check_root(root_a, "A")
        _check_root(root_b, "B")

        _log_debug(
            "Comparing %s to %s with options:\n%s", root_a, root_b, self.options
        )
        return self.diff_engine.compare_roots(
            root_a, root_b, self.options, term_control=self.term_control
        )


__all__ = [
    "TreeComparer",
]
