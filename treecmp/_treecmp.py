# Copyright Red Hat
#
# treecmp/_treecmp.py - Directory tree comparison global definitions
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Global definitions for the top-level treecmp package.
"""
from typing import Optional, TextIO, Union, TYPE_CHECKING
import logging
import weakref
import sys
import re

if TYPE_CHECKING:
    from .progress import ThrobberBase

_log = logging.getLogger("treecmp")

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

# Treecmp debugging subsystem mask
TREECMP_DEBUG_COMPARE = 1
TREECMP_DEBUG_COMMAND = 2
TREECMP_DEBUG_ALL = TREECMP_DEBUG_COMPARE | TREECMP_DEBUG_COMMAND

# Treecmp debugging subsystem names
TREECMP_SUBSYSTEM_COMPARE = "treecmp.compare"
TREECMP_SUBSYSTEM_COMMAND = "treecmp.command"

_DEBUG_MASK_TO_SUBSYSTEM = {
    TREECMP_DEBUG_COMPARE: TREECMP_SUBSYSTEM_COMPARE,
    TREECMP_DEBUG_COMMAND: TREECMP_SUBSYSTEM_COMMAND,
}

_debug_subsystems = set()

# Registry of active throbber instances: uses a WeakSet so we don't prevent
# garbage collection.
_active_progress: weakref.WeakSet = weakref.WeakSet()

_SIZE_RE = re.compile(r"^(?P<size>[0-9]+)(?P<units>([KMGTkmgt]i{,1})?[Bb]{,1})$")

#: All suffixes are expressed in powers of two.
_SIZE_SUFFIXES = {
    "B": 1,
    "K": 2**10,
    "M": 2**20,
    "G": 2**30,
    "T": 2**40,
}


class SubsystemFilter(logging.Filter):
    """
    Filters DEBUG records based on a set of enabled subsystem names.
    Non-DEBUG records or DEBUG records without a 'subsystem' attribute
    are always passed through.
    """

    def __init__(self, name=""):
        super().__init__(name)
        self.enabled_subsystems = set(_debug_subsystems)

    def filter(self, record):
        if record.levelno != logging.DEBUG:
            return True

        if not hasattr(record, "subsystem"):
            return True

        return record.subsystem in self.enabled_subsystems

    def set_debug_subsystems(self, subsystems):
        """Sets the collection of subsystems to allow."""
        self.enabled_subsystems = set(subsystems)


def get_debug_mask():
    """
    Return the current debug mask for the ``treecmp`` package.

    :returns: The current debug mask value
    :rtype: int
    """
    enabled_subsystems = set(_debug_subsystems)
    treecmp_log = logging.getLogger("treecmp")

    for handler in treecmp_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                enabled_subsystems.update(f.enabled_subsystems)

    mask_map = {v: k for k, v in _DEBUG_MASK_TO_SUBSYSTEM.items()}
    mask = 0
    for subsystem_name in enabled_subsystems:
        mask |= mask_map.get(subsystem_name, 0)
    return mask


def set_debug_mask(mask):
    """
    Set the debug mask for the ``treecmp`` package.

    :param mask: the logical OR of the ``TREECMP_DEBUG_*``
                 values to log.
    :rtype: None
    """
    # pylint: disable=global-statement
    global _debug_subsystems

    if mask < 0 or mask > TREECMP_DEBUG_ALL:
        raise ValueError(f"Invalid treecmp debug mask: {mask}")

    enabled_subsystems = [
        subsystem_name
        for flag, subsystem_name in _DEBUG_MASK_TO_SUBSYSTEM.items()
        if mask & flag
    ]

    treecmp_log = logging.getLogger("treecmp")
    for handler in treecmp_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                f.set_debug_subsystems(enabled_subsystems)

    _debug_subsystems = set(enabled_subsystems)


def register_progress(progress: "ThrobberBase"):
    """Register a throbber instance for log coordination."""
    _active_progress.add(progress)
    progress.registered = True


def unregister_progress(progress: "ThrobberBase"):
    """Unregister a throbber instance."""
    _active_progress.discard(progress)
    progress.registered = False


def notify_log_output(stream: TextIO):
    """
    Notify throbber instances that log output occurred on stream.

    Called by ProgressAwareHandler after emitting a record.

    :param stream: The stream that received output.
    :type stream: ``TextIO``
    """
    if stream not in (sys.stdout, sys.stderr):
        return
    for progress in list(_active_progress):
        if hasattr(progress, "reset_position"):
            progress.reset_position()


class ProgressAwareHandler(logging.StreamHandler):
    """
    A logging handler that coordinates with active throbber instances.

    After emitting a log record, notifies any throbbers writing to the
    same stream so they can avoid erasing the log message.
    """

    def __init__(self, stream: Optional[TextIO] = None, **kwargs):
        super().__init__(stream=stream or sys.stderr, **kwargs)

    def emit(self, record):
        try:
            msg = self.format(record)
            self.stream.write(msg + "\n")
            self.stream.flush()
            notify_log_output(self.stream)
        except Exception:  # pylint: disable=broad-exception-caught
            self.handleError(record)


#
# Treecmp exception types
#


class TreecmpError(Exception):
    """
    Base class for tree comparison errors.
    """


class TreecmpPathError(TreecmpError):
    """
    An invalid path was supplied, for example a comparison root that does
    not exist or is not a directory.
    """


class TreecmpArgumentError(TreecmpError):
    """
    An invalid argument was passed to a treecmp API call.
    """


class TreecmpCompareError(TreecmpError):
    """
    The contents of a pair of files could not be compared.
    """

    def __init__(self, path: str, cause: Union[str, OSError]):
        """
        Initialise a new ``TreecmpCompareError`` exception.

        :param path: The relative path of the file pair that failed.
        :param cause: The underlying error or a description of it.
        """
        if isinstance(cause, OSError):
            cause = cause.strerror or str(cause)
        self.path, self.cause = path, cause
        super().__init__(f"Failed to compare {path}: {cause}")


def parse_size_with_units(value):
    """
    Parse a size string with optional unit suffix and return a value in bytes,

    :param size: The size string to parse.
    :returns: an integer size in bytes.
    :raises: ``TreecmpArgumentError`` if the string could not be parsed as a
             valid size value.
    """
    match = _SIZE_RE.search(value)
    if match is None:
        raise TreecmpArgumentError(f"Malformed size expression: '{value}'")
    (size, unit) = (match.group("size"), match.group("units").upper())
    return int(size) * _SIZE_SUFFIXES[unit[0] if unit else "B"]


__all__ = [
    "TREECMP_DEBUG_COMPARE",
    "TREECMP_DEBUG_COMMAND",
    "TREECMP_DEBUG_ALL",
    # Debug logging - subsystem name interface
    "SubsystemFilter",
    "TREECMP_SUBSYSTEM_COMPARE",
    "TREECMP_SUBSYSTEM_COMMAND",
    "set_debug_mask",
    "get_debug_mask",
    # Progress log callbacks
    "register_progress",
    "unregister_progress",
    "notify_log_output",
    "ProgressAwareHandler",
    "TreecmpError",
    "TreecmpPathError",
    "TreecmpArgumentError",
    "TreecmpCompareError",
    "parse_size_with_units",
]
