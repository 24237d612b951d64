# Copyright Red Hat
#
# treecmp/compare/difftypes.py - Directory tree comparison result types
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree comparison result types
"""
from enum import Enum


class Side(Enum):
    """
    Enum for the two sides of a comparison.
    """

    A = "a"
    B = "b"


class ResultType(Enum):
    """
    Enum for the per-subdirectory comparison outcome.
    """

    ONLY_IN = "only_in"
    IDENTICAL = "identical"
    DIFFERENT = "different"
