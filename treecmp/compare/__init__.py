# Copyright Red Hat
#
# treecmp/compare/__init__.py - Directory tree comparison package
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory tree comparison package.

Provides subdirectory-scoped comparison of two directory trees: file set
enumeration, structural differences, and optional content verification.
The main entry points are ``TreeComparer`` and ``CompareOptions``.
"""
from .checker import ContentChecker
from .comparer import TreeComparer
from .difftypes import ResultType, Side
from .engine import ComparisonReport, CompareResults, DiffEngine, SubdirResult
from .options import CompareOptions
from .pathset import build_path_set, list_subdirs

__all__ = [
    "CompareOptions",
    "CompareResults",
    "ComparisonReport",
    "ContentChecker",
    "DiffEngine",
    "ResultType",
    "Side",
    "SubdirResult",
    "TreeComparer",
    "build_path_set",
    "list_subdirs",
]
