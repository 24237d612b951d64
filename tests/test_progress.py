# Copyright Red Hat
#
# tests/test_progress.py - Progress and TermControl tests
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
from unittest.mock import MagicMock, patch
from io import StringIO
import curses

from treecmp.progress import (
    NullThrobber,
    ProgressFactory,
    SimpleThrobber,
    TermControl,
    Throbber,
)


def _tty_stream():
    stream = MagicMock()
    stream.isatty.return_value = True
    stream.encoding = "utf-8"
    return stream


class TestTermControl(unittest.TestCase):
    def test_term_control_default_stdout(self):
        """Test TermControl when stream is None"""
        tc = TermControl()
        self.assertIsNotNone(tc)

    def test_term_control_bad_color(self):
        with self.assertRaisesRegex(ValueError, "Invalid color mode"):
            TermControl(color="sometimes")

    def test_term_control_no_tty(self):
        """Test TermControl when stream is not a TTY."""
        mock_stream = MagicMock()
        mock_stream.isatty.return_value = False

        tc = TermControl(term_stream=mock_stream)

        # attributes should be empty strings
        self.assertEqual(tc.BOL, "")
        self.assertEqual(tc.GREEN, "")

    def test_term_control_curses_error(self):
        """Test TermControl handles curses setup errors gracefully."""
        with patch("treecmp.progress.curses") as mock_curses:
            mock_curses.setupterm.side_effect = curses.error("Curses error")
            tc = TermControl(term_stream=_tty_stream())
            self.assertEqual(tc.BOL, "")
            self.assertEqual(tc.RED, "")

    def test_term_control_always_forces_ansi(self):
        """Test color="always" falls back to ANSI sequences without a tty."""
        with patch("treecmp.progress.curses") as mock_curses:
            mock_curses.setupterm.side_effect = curses.error("Curses error")
            tc = TermControl(term_stream=StringIO(), color="always")
        self.assertEqual(tc.RED, "\033[0;31m")
        self.assertEqual(tc.GREEN, "\033[0;32m")
        self.assertEqual(tc.NORMAL, "\033[0m")

    def test_term_control_never_no_color(self):
        """Test color="never" on a terminal sets no color or reset sequence."""
        with patch("treecmp.progress.curses") as mock_curses:
            mock_curses.tigetstr.return_value = b"\x1b[X"
            mock_curses.tparm.return_value = b"\x1b[31m"
            tc = TermControl(term_stream=_tty_stream(), color="never")
        self.assertEqual(tc.BOL, "\x1b[X")
        self.assertEqual(tc.RED, "")
        self.assertEqual(tc.NORMAL, "")

    def test_term_control_auto_tty_colors(self):
        with patch("treecmp.progress.curses") as mock_curses:
            mock_curses.tigetstr.return_value = b"\x1b[X"
            mock_curses.tparm.return_value = b"\x1b[31m"
            tc = TermControl(term_stream=_tty_stream())
        self.assertEqual(tc.RED, "\x1b[31m")
        self.assertEqual(tc.NORMAL, "\x1b[X")


class TestThrobbers(unittest.TestCase):
    def test_factory_quiet(self):
        throbber = ProgressFactory.get_throbber("Comparing", quiet=True)
        self.assertIsInstance(throbber, NullThrobber)

    def test_factory_not_tty(self):
        throbber = ProgressFactory.get_throbber("Comparing", term_stream=StringIO())
        self.assertIsInstance(throbber, SimpleThrobber)

    def test_factory_tty(self):
        stream = _tty_stream()
        tc = TermControl(term_stream=StringIO())
        tc.term_stream = stream
        throbber = ProgressFactory.get_throbber(
            "Comparing", term_stream=stream, term_control=tc
        )
        self.assertIsInstance(throbber, Throbber)
        self.assertIs(throbber.term, tc)
        self.assertEqual(throbber.frames, Throbber.FRAMES)

    def test_throbber_ascii_fallback(self):
        stream = MagicMock()
        stream.isatty.return_value = False
        stream.encoding = "ascii"
        tc = TermControl(term_stream=stream)
        throbber = Throbber("Comparing", tc=tc)
        self.assertEqual(throbber.frames, Throbber.ASCII_FRAMES)

    def test_simple_throbber_output(self):
        stream = StringIO()
        throbber = SimpleThrobber("Comparing docs", term_stream=stream)
        throbber.start()
        throbber.end("done")
        output = stream.getvalue()
        self.assertTrue(output.startswith("Comparing docs: .."))
        self.assertTrue(output.endswith(" done\n"))
        self.assertFalse(throbber.registered)

    def test_throbber_before_start(self):
        throbber = SimpleThrobber("Comparing", term_stream=StringIO())
        with self.assertRaisesRegex(ValueError, "called before start"):
            throbber.throb()
        with self.assertRaisesRegex(ValueError, "called before start"):
            throbber.end()

    def test_null_throbber(self):
        throbber = NullThrobber("Comparing")
        with self.assertRaises(ValueError):
            throbber.throb()
        throbber.start()
        self.assertTrue(throbber.registered)
        throbber.throb()
        throbber.end("done")
        self.assertFalse(throbber.started)
        self.assertFalse(throbber.registered)
