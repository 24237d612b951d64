# Copyright Red Hat
#
# treecmp/__main__.py - Directory tree comparison module entry point
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
import sys

from treecmp.command import main

sys.exit(main(["treecmp"] + sys.argv[1:]))
