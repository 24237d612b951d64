# Copyright Red Hat
#
# treecmp/progress.py - Directory tree comparison terminal control
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Terminal control and busy indicators.
"""
from typing import ClassVar, Dict, Optional, TextIO
from datetime import datetime, timedelta
from abc import ABC, abstractmethod
import curses
import sys
import os

from treecmp import register_progress, unregister_progress

#: Default frames-per-second for Throbber classes
DEFAULT_FPS = 10

#: Microseconds per second
_USECS_PER_SEC = 1000000

#: Valid values for the ``color`` argument of ``TermControl``
COLOR_MODES = ["auto", "always", "never"]


class TermControl:
    """
    Control sequences for throbber updates and colored reports.

    Each attribute holds the sequence for the current terminal, or the
    empty string if the stream is not a terminal, the terminal lacks the
    capability, or color is disabled. Output can always be written as:

        >>> tc = TermControl()
        >>> print(tc.GREEN + "identical" + tc.NORMAL)
    """

    # Cursor control (throbber redraws):
    BOL: str = ""  #: Move the cursor to the beginning of the line
    UP: str = ""  #: Move the cursor up one line
    RIGHT: str = ""  #: Move the cursor right one char
    CLEAR_EOL: str = ""  #: Clear to the end of the line
    HIDE_CURSOR: str = ""  #: Make the cursor invisible
    SHOW_CURSOR: str = ""  #: Make the cursor visible

    # Report colors:
    RED: str = ""  #: Missing, one-sided and changed paths
    GREEN: str = ""  #: Identical results and throbber frames
    YELLOW: str = ""  #: Report section headings
    CYAN: str = ""  #: Subdirectory headers
    NORMAL: str = ""  #: Reset to the default color

    #: Attribute name to terminfo capability name.
    _CURSOR_CAPABILITIES: ClassVar[Dict[str, str]] = {
        "BOL": "cr",
        "UP": "cuu1",
        "RIGHT": "cuf1",
        "CLEAR_EOL": "el",
        "HIDE_CURSOR": "civis",
        "SHOW_CURSOR": "cnorm",
    }

    #: Attribute name to ANSI color number.
    _COLORS: ClassVar[Dict[str, int]] = {
        "RED": 1,
        "GREEN": 2,
        "YELLOW": 3,
        "CYAN": 6,
    }

    def __init__(self, term_stream: Optional[TextIO] = None, color: str = "auto"):
        """
        Probe ``term_stream`` and set up control sequences.

        With ``color="always"`` colors are set even when the stream is not a
        terminal, falling back to plain ANSI sequences if terminfo has none.
        With ``color="never"`` no color or reset sequence is ever set.

        :param term_stream: Output stream to probe (defaults to stdout).
        :type term_stream: ``Optional[TextIO]``
        :param color: One of ``COLOR_MODES``.
        :type color: ``str``
        """
        if color not in COLOR_MODES:
            raise ValueError(f"Invalid color mode: {color}")

        self.term_stream = term_stream if term_stream is not None else sys.stdout
        is_tty = hasattr(self.term_stream, "isatty") and self.term_stream.isatty()

        if not is_tty and color != "always":
            return

        if not self._setupterm():
            if color == "always":
                self._set_ansi_colors()
            return

        if is_tty:
            for attr, cap_name in self._CURSOR_CAPABILITIES.items():
                setattr(self, attr, self._tigetstr(cap_name))

        if color != "never":
            self._init_colors()
        if color == "always" and not self.GREEN:
            self._set_ansi_colors()

    @staticmethod
    def _setupterm() -> bool:
        # curses.error does not behave as a normal exception class when
        # caught by name: catch broadly and re-raise interruption.
        try:
            curses.setupterm()
        except BaseException as err:  # pylint: disable=broad-exception-caught
            if isinstance(err, (KeyboardInterrupt, SystemExit)):  # pragma: no cover
                raise
            return False
        return True

    @staticmethod
    def _tigetstr(cap_name: str) -> str:
        # Strip terminfo padding delays of the form "$<2>".
        cap = curses.tigetstr(cap_name)
        cap = cap.decode(encoding="utf8") if cap else ""
        return cap.split("$", maxsplit=1)[0]

    def _init_colors(self):
        set_fg = self._tigetstr("setaf")
        if not set_fg:
            return
        set_fg = set_fg.encode("utf8")
        for attr, number in self._COLORS.items():
            setattr(self, attr, curses.tparm(set_fg, number).decode("utf8") or "")
        self.NORMAL = self._tigetstr("sgr0")

    def _set_ansi_colors(self):
        for attr, number in self._COLORS.items():
            setattr(self, attr, f"\033[0;3{number}m")
        self.NORMAL = "\033[0m"


def _flush_with_broken_pipe_guard(stream: TextIO) -> None:
    """
    Handle ``BrokenPipeError`` when attempting to flush output streams.

    :param stream: The stream to flush.
    :type stream: TextIO
    """
    if stream is None or not hasattr(stream, "flush"):
        return
    try:
        stream.flush()
    except BrokenPipeError as err:
        devnull = os.open(os.devnull, os.O_WRONLY)
        try:
            if hasattr(stream, "fileno"):
                os.dup2(devnull, stream.fileno())
        finally:
            os.close(devnull)
        raise SystemExit() from err


class ThrobberBase(ABC):
    """
    An abstract busy indicator. A throbber shows that a scan is alive when
    the number of items to process is not known in advance.
    """

    def __init__(self, header: str, register: bool = True):
        """
        Initialize base throbber state.

        :param header: The throbber header.
        :type header: ``str``
        :param register: Register this throbber for log callbacks.
        :type register: ``bool``
        """
        self.header: str = header
        self.frames: str = "."
        self.stream: Optional[TextIO] = None
        self.started: bool = False
        self.first_update: bool = True
        self.registered: bool = False
        self.register: bool = register
        self._frame_index: int = 0
        self._interval_us: int = round(_USECS_PER_SEC / DEFAULT_FPS)
        self._last: Optional[datetime] = None

    def reset_position(self):
        """Mark throbber as displaced by external output."""
        self.first_update = True

    def _check_started(self, step: str):
        """
        :raises ``ValueError``: If the throbber has not been started.
        """
        if not self.started or self._last is None:
            raise ValueError(
                f"{self.__class__.__name__}.{step}() called before start()"
            )

    def start(self):
        """
        Begin a throbber run.
        """
        self.started = True
        self._last = datetime.now() - timedelta(microseconds=self._interval_us)
        if self.register:
            register_progress(self)
        self._do_start()
        self.throb()

    def throb(self):
        """
        Show the next frame if the frame interval has elapsed.
        """
        self._check_started("throb")
        now = datetime.now()
        if (now - self._last).total_seconds() * _USECS_PER_SEC < self._interval_us:
            return
        self._do_throb()
        _flush_with_broken_pipe_guard(self.stream)
        self._last = now
        self._frame_index = (self._frame_index + 1) % len(self.frames)
        self.first_update = False

    def end(self, message: Optional[str] = None):
        """
        End the throbber run.

        :param message: An optional completion message.
        :type message: ``Optional[str]``
        """
        self._check_started("end")
        self._do_end(message=message)
        _flush_with_broken_pipe_guard(self.stream)
        self.started = False
        self._last = None
        if self.registered:
            unregister_progress(self)

    def _do_start(self):
        print(f"{self.header}: ..", end="", file=self.stream)

    @abstractmethod
    def _do_throb(self):
        """
        Hook for subclasses to update the throbber display.
        """

    def _do_end(self, message: Optional[str] = None):
        print(f" {message}" if message else "", file=self.stream)


class Throbber(ThrobberBase):
    """
    A one line throbber that redraws in place on capable terminals.
    """

    #: Braille frames for terminals that can encode them.
    FRAMES = "⠁⠂⠄⡀⢀⠠⠐⠈"
    #: Fallback frames for other terminals.
    ASCII_FRAMES = r"-\|/"

    def __init__(
        self,
        header: str,
        register: bool = True,
        term_stream: Optional[TextIO] = None,
        tc: Optional[TermControl] = None,
    ):
        """
        Initialise a new one line throbber.

        :param header: The header string to print.
        :type header: ``str``
        :param register: Register this ``Throbber`` for log callbacks.
        :type register: ``bool``
        :param term_stream: The terminal stream to write to (defaults to
                            stderr).
        :type term_stream: ``Optional[TextIO]``
        :param tc: An optional ``TermControl`` already bound to a stream.
                   Overrides ``term_stream`` if set.
        :type tc: ``Optional[TermControl]``
        """
        super().__init__(header, register=register)
        if tc is not None:
            term_stream = tc.term_stream
        self.stream = term_stream or sys.stderr
        self.term: TermControl = tc or TermControl(term_stream=self.stream)

        self.frames = self.ASCII_FRAMES
        encoding = getattr(self.stream, "encoding", None)
        if encoding:
            try:
                self.FRAMES.encode(encoding)
                self.frames = self.FRAMES
            except UnicodeEncodeError:
                pass

    def _do_start(self):
        print(self.term.HIDE_CURSOR, end="", file=self.stream)

    def _do_throb(self):
        if not self.first_update:
            print(
                self.term.BOL + self.term.UP + self.term.CLEAR_EOL,
                end="",
                file=self.stream,
            )
        frame = self.frames[self._frame_index]
        print(
            f"{self.header}: {self.term.GREEN}{frame}{self.term.NORMAL}",
            file=self.stream,
        )

    def _do_end(self, message: Optional[str] = None):
        if not self.first_update:
            # Return to the end of "<header>: " on the previous line.
            print(
                self.term.BOL
                + self.term.UP
                + (len(self.header) + 2) * self.term.RIGHT
                + self.term.CLEAR_EOL,
                end="",
                file=self.stream,
            )
        print(self.term.SHOW_CURSOR, end="", file=self.stream)
        print(f"{message}\n" if message else "", end="", file=self.stream)


class SimpleThrobber(ThrobberBase):
    """
    A throbber that appends dots and needs no terminal capabilities.
    """

    def __init__(
        self, header: str, register: bool = True, term_stream: Optional[TextIO] = None
    ):
        super().__init__(header, register=register)
        self.stream = term_stream or sys.stderr

    def _do_throb(self):
        print(self.frames[self._frame_index], end="", file=self.stream)


class NullThrobber(ThrobberBase):
    """
    A throbber that produces no output.
    """

    def _do_start(self):
        """No output."""

    def _do_throb(self):
        """No output."""

    def _do_end(self, message: Optional[str] = None):
        """No output."""


class ProgressFactory:
    """
    A factory for constructing busy indicator objects.
    """

    @staticmethod
    def get_throbber(
        header: str,
        quiet: bool = False,
        term_stream: Optional[TextIO] = None,
        term_control: Optional[TermControl] = None,
        register: bool = True,
    ) -> ThrobberBase:
        """
        Return the throbber implementation suited to ``term_stream``.

        :param header: The throbber header.
        :type header: ``str``
        :param quiet: Suppress all output.
        :type quiet: ``bool``
        :param term_stream: An optional ``TextIO`` output object.
                            Defaults to ``sys.stderr`` if unspecified.
        :type term_stream: ``Optional[TextIO]``
        :param term_control: An optional ``TermControl`` object to use
                             for the throbber. Only used if it writes to
                             ``term_stream``.
        :type term_control: ``Optional[TermControl]``
        :param register: Register the new object with the log system for
                         notification callbacks.
        :type register: ``bool``
        :returns: A ``NullThrobber`` if ``quiet``, a ``SimpleThrobber``
                  if ``term_stream`` is not a terminal, otherwise a
                  ``Throbber``.
        :rtype: ``ThrobberBase``
        """
        term_stream = term_stream or sys.stderr
        if term_control is not None and term_control.term_stream is not term_stream:
            term_control = None

        if quiet:
            return NullThrobber(header, register=register)
        if not hasattr(term_stream, "isatty") or not term_stream.isatty():
            return SimpleThrobber(header, register=register, term_stream=term_stream)
        return Throbber(
            header, register=register, term_stream=term_stream, tc=term_control
        )


__all__ = [
    "COLOR_MODES",
    "DEFAULT_FPS",
    "NullThrobber",
    "ProgressFactory",
    "SimpleThrobber",
    "TermControl",
    "ThrobberBase",
    "Throbber",
]
