# Copyright Red Hat
#
# tests/compare/test_comparer.py - TreeComparer tests.
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
from unittest.mock import MagicMock
import tempfile
import os

from treecmp import TreecmpPathError
from treecmp.compare import CompareOptions, ResultType, TreeComparer
from treecmp.progress import TermControl

from tests._util import make_tree


class TestTreeComparer(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp_dir.cleanup)
        self.root_a = os.path.join(self.tmp_dir.name, "A")
        self.root_b = os.path.join(self.tmp_dir.name, "B")
        os.mkdir(self.root_a)
        os.mkdir(self.root_b)
        self.comparer = TreeComparer(
            options=CompareOptions(verify_contents=True, quiet=True), color="never"
        )

    def test_TreeComparer_defaults(self):
        comparer = TreeComparer()
        self.assertEqual(comparer.options, CompareOptions())
        self.assertIsInstance(comparer.term_control, TermControl)

    def test_TreeComparer_term_control_override(self):
        tc = TermControl(color="never")
        comparer = TreeComparer(term_control=tc)
        self.assertIs(comparer.term_control, tc)

    def test_compare_missing_root(self):
        missing = os.path.join(self.tmp_dir.name, "missing")
        with self.assertRaisesRegex(TreecmpPathError, "does not exist"):
            self.comparer.compare(missing, self.root_b)
        with self.assertRaisesRegex(TreecmpPathError, "Root B"):
            self.comparer.compare(self.root_a, missing)

    def test_compare_root_not_directory(self):
        make_tree(self.tmp_dir.name, {"plain": "file"})
        plain = os.path.join(self.tmp_dir.name, "plain")
        with self.assertRaisesRegex(TreecmpPathError, "not a directory"):
            self.comparer.compare(self.root_a, plain)

    def test_compare_same_root_identical(self):
        make_tree(self.root_a, {"logs/app.log": "entry\n", "docs/r.txt": "r"})
        results = self.comparer.compare(self.root_a, self.root_a)
        self.assertEqual([r.name for r in results], ["docs", "logs"])
        self.assertTrue(results.identical)
        for record in results:
            self.assertEqual(record.result_type, ResultType.IDENTICAL)

    def test_compare_same_root_via_symlink(self):
        make_tree(self.root_a, {"logs/app.log": "entry\n"})
        alias = os.path.join(self.tmp_dir.name, "alias")
        os.symlink(self.root_a, alias)
        self.assertTrue(self.comparer.compare(self.root_a, alias).identical)

    def test_compare_delegates_to_engine(self):
        self.comparer.diff_engine = MagicMock()
        self.comparer.compare(self.root_a, self.root_b)
        self.comparer.diff_engine.compare_roots.assert_called_once_with(
            self.root_a,
            self.root_b,
            self.comparer.options,
            term_control=self.comparer.term_control,
        )

    def test_compare(self):
        make_tree(self.root_a, {"docs/readme.txt": "hello", "cache/x": "x"})
        make_tree(self.root_b, {"docs/readme.txt": "HELLO"})
        results = self.comparer.compare(self.root_a, self.root_b)
        self.assertEqual([r.name for r in results], ["cache", "docs"])
        self.assertEqual(results[0].result_type, ResultType.ONLY_IN)
        self.assertEqual(results[1].report.changed, ["readme.txt"])
        self.assertEqual(results.root_a, self.root_a)
