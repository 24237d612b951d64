# Copyright Red Hat
#
# tests/compare/test_options.py - CompareOptions tests.
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
from argparse import Namespace
from dataclasses import FrozenInstanceError

from treecmp.compare.options import (
    CompareOptions,
    DEFAULT_HASH_ALGORITHM,
    DEFAULT_READ_SIZE,
)


class TestCompareOptions(unittest.TestCase):
    def test_CompareOptions_defaults(self):
        opts = CompareOptions()
        self.assertFalse(opts.verify_contents)
        self.assertEqual(opts.hash_algorithm, DEFAULT_HASH_ALGORITHM)
        self.assertEqual(opts.read_size, DEFAULT_READ_SIZE)
        self.assertFalse(opts.quiet)

    def test_CompareOptions__str__(self):
        opts = CompareOptions(verify_contents=True, read_size=4096)
        s = str(opts)
        self.assertIn("verify_contents=True", s)
        self.assertIn("read_size=4096", s)
        self.assertIn("hash_algorithm=sha256", s)

    def test_CompareOptions_bad_read_size(self):
        with self.assertRaises(ValueError):
            CompareOptions(read_size=0)
        with self.assertRaises(ValueError):
            CompareOptions(read_size=-1)

    def test_CompareOptions_bad_hash_algorithm(self):
        with self.assertRaisesRegex(ValueError, "Unknown hash algorithm: md5"):
            CompareOptions(hash_algorithm="md5")

    def test_CompareOptions_hash_algorithms(self):
        for algorithm in ("sha256", "sha512", "sha3_256", "blake2b", "blake2s"):
            self.assertEqual(
                CompareOptions(hash_algorithm=algorithm).hash_algorithm, algorithm
            )

    def test_CompareOptions_frozen(self):
        opts = CompareOptions()
        with self.assertRaises(FrozenInstanceError):
            opts.verify_contents = True

    def test_from_cmd_args(self):
        """Test initialization from argparse Namespace."""
        args = Namespace(
            verify_contents=True,
            read_size=65536,
            quiet=True,
            unknown_arg="ignored",
        )
        opts = CompareOptions.from_cmd_args(args)

        self.assertTrue(opts.verify_contents)
        self.assertEqual(opts.read_size, 65536)
        self.assertTrue(opts.quiet)
        # Should use defaults for missing args
        self.assertEqual(opts.hash_algorithm, DEFAULT_HASH_ALGORITHM)

    def test_from_cmd_args_none_uses_default(self):
        args = Namespace(hash_algorithm=None, read_size=None)
        opts = CompareOptions.from_cmd_args(args)
        self.assertEqual(opts, CompareOptions())
