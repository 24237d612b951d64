# Copyright Red Hat
#
# tests/test_treecmp.py - Core treecmp tests
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
from unittest.mock import MagicMock
from io import StringIO
import logging

import treecmp
from treecmp import (
    TREECMP_DEBUG_ALL,
    TREECMP_DEBUG_COMPARE,
    TREECMP_SUBSYSTEM_COMPARE,
    TREECMP_SUBSYSTEM_COMMAND,
    ProgressAwareHandler,
    SubsystemFilter,
    TreecmpArgumentError,
    TreecmpCompareError,
    TreecmpError,
    TreecmpPathError,
    get_debug_mask,
    parse_size_with_units,
    register_progress,
    set_debug_mask,
    unregister_progress,
)

log = logging.getLogger()


class TreecmpTests(unittest.TestCase):
    def setUp(self):
        log.debug("Preparing %s", self._testMethodName)
        self.addCleanup(set_debug_mask, 0)

    def test_version(self):
        self.assertTrue(treecmp.__version__)

    def test_set_debug_mask(self):
        set_debug_mask(TREECMP_DEBUG_ALL)
        self.assertEqual(get_debug_mask(), TREECMP_DEBUG_ALL)
        set_debug_mask(TREECMP_DEBUG_COMPARE)
        self.assertEqual(get_debug_mask(), TREECMP_DEBUG_COMPARE)

    def test_set_debug_mask_bad_mask(self):
        with self.assertRaises(ValueError):
            set_debug_mask(TREECMP_DEBUG_ALL + 1)
        with self.assertRaises(ValueError):
            set_debug_mask(-1)

    def test_SubsystemFilter(self):
        sub_filter = SubsystemFilter("treecmp")
        sub_filter.set_debug_subsystems([TREECMP_SUBSYSTEM_COMPARE])

        def _record(level, subsystem=None):
            record = logging.LogRecord(
                "treecmp.compare", level, __file__, 1, "msg", None, None
            )
            if subsystem:
                record.subsystem = subsystem
            return record

        self.assertTrue(sub_filter.filter(_record(logging.DEBUG, TREECMP_SUBSYSTEM_COMPARE)))
        self.assertFalse(
            sub_filter.filter(_record(logging.DEBUG, TREECMP_SUBSYSTEM_COMMAND))
        )
        self.assertTrue(sub_filter.filter(_record(logging.DEBUG)))
        self.assertTrue(sub_filter.filter(_record(logging.INFO, TREECMP_SUBSYSTEM_COMMAND)))

    def test_ProgressAwareHandler_resets_throbbers(self):
        handler = ProgressAwareHandler()
        handler.stream = StringIO()
        progress = MagicMock()
        register_progress(progress)
        self.addCleanup(unregister_progress, progress)

        handler.emit(logging.LogRecord("treecmp", logging.INFO, __file__, 1, "hi", None, None))
        self.assertEqual(handler.stream.getvalue(), "hi\n")
        # Output to a private stream does not displace the throbber.
        progress.reset_position.assert_not_called()

    def test_register_progress(self):
        progress = MagicMock()
        register_progress(progress)
        self.assertTrue(progress.registered)
        unregister_progress(progress)
        self.assertFalse(progress.registered)

    def test_error_hierarchy(self):
        for exc_class in (TreecmpPathError, TreecmpArgumentError, TreecmpCompareError):
            self.assertTrue(issubclass(exc_class, TreecmpError))

    def test_TreecmpCompareError_from_oserror(self):
        err = TreecmpCompareError("a/b", OSError(2, "No such file or directory"))
        self.assertEqual(err.path, "a/b")
        self.assertEqual(err.cause, "No such file or directory")
        self.assertEqual(str(err), "Failed to compare a/b: No such file or directory")

    def test_TreecmpCompareError_from_oserror_no_strerror(self):
        err = TreecmpCompareError("f", OSError("device gone"))
        self.assertEqual(err.cause, "device gone")

    def test_TreecmpCompareError_from_str(self):
        err = TreecmpCompareError("f", "Permission denied")
        self.assertEqual(err.cause, "Permission denied")

    def test_parse_size_with_units(self):
        cases = {
            "512": 512,
            "12B": 12,
            "8K": 8192,
            "8KiB": 8192,
            "8kib": 8192,
            "1M": 2**20,
            "2GiB": 2 * 2**30,
            "1T": 2**40,
        }
        for value, expected in cases.items():
            with self.subTest(value=value):
                self.assertEqual(parse_size_with_units(value), expected)

    def test_parse_size_with_units_bad(self):
        for value in ("", "abc", "1.5K", "-1", "10X"):
            with self.subTest(value=value):
                with self.assertRaises(TreecmpArgumentError):
                    parse_size_with_units(value)
