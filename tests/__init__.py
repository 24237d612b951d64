# Copyright Red Hat
#
# tests/__init__.py - Directory tree comparison test package
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
import logging

log = logging.getLogger()
log.setLevel(logging.DEBUG)
formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
file_handler = logging.FileHandler("test.log")
file_handler.setFormatter(formatter)
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)
log.addHandler(file_handler)
log.addHandler(console_handler)


class MockArgs(object):
    debug = None
    verbose = 0
    verify_contents = False
    hash_algorithm = "sha256"
    read_size = "8192"
    output_format = "text"
    pretty = False
    color = "never"
    quiet = True
    dir_a = None
    dir_b = None
