# Copyright Red Hat
#
# treecmp/command.py - Directory tree comparison command interface
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""The ``treecmp.command`` module provides both the treecmp command line
interface infrastructure, and a simple procedural interface to the
``treecmp.compare`` library modules.
"""
from argparse import ArgumentParser
from os.path import basename
import logging
import sys

from treecmp import (
    TreecmpError,
    TREECMP_DEBUG_COMPARE,
    TREECMP_DEBUG_COMMAND,
    TREECMP_DEBUG_ALL,
    TREECMP_SUBSYSTEM_COMMAND,
    SubsystemFilter,
    set_debug_mask,
    ProgressAwareHandler,
    parse_size_with_units,
    __version__,
)
from treecmp.progress import COLOR_MODES, TermControl

from .compare import CompareOptions, CompareResults, TreeComparer
from .compare.checker import (
    DEFAULT_HASH_ALGORITHM,
    DEFAULT_READ_SIZE,
    hash_algorithms,
)

#: Output formats understood by ``--output-format``
OUTPUT_FORMATS = ["text", "json", "summary"]

#: Exit status: all subdirectories identical
EXIT_IDENTICAL = 0
#: Exit status: differences found
EXIT_DIFFERENT = 1
#: Exit status: invalid arguments or comparison failure
EXIT_ERROR = 2

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_command(msg, *args, **kwargs):
    """A wrapper for command subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TREECMP_SUBSYSTEM_COMMAND}, **kwargs)


_DEFAULT_LOG_LEVEL = logging.WARNING
_CONSOLE_HANDLER = None


def compare_trees(
    root_a: str,
    root_b: str,
    options: CompareOptions,
    color: str = "auto",
) -> CompareResults:
    """
    Compare two directory trees.

    :param root_a: The first (left hand) root directory.
    :type root_a: ``str``
    :param root_b: The second (right hand) root directory.
    :type root_b: ``str``
    :param options: Options controlling the comparison.
    :type options: ``CompareOptions``
    :param color: A string to control color rendering: "auto",
                  "always", or "never".
    :type color: ``str``
    :returns: The comparison results.
    :rtype: ``CompareResults``
    """
    comparer = TreeComparer(options=options, color=color)
    return comparer.compare(root_a, root_b)


def print_results(
    results: CompareResults,
    output_format: str = "text",
    pretty: bool = False,
    color: str = "auto",
):
    """
    Print comparison results to stdout in ``output_format``.

    :param results: The results to print.
    :type results: ``CompareResults``
    :param output_format: One of ``OUTPUT_FORMATS``.
    :type output_format: ``str``
    :param pretty: Indent JSON output.
    :type pretty: ``bool``
    :param color: A string to control color rendering: "auto",
                  "always", or "never".
    :type color: ``str``
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format: {output_format}")

    term_control = TermControl(term_stream=sys.stdout, color=color)
    if output_format == "json":
        print(results.json(pretty=pretty))
    elif output_format == "summary":
        print(results.summary(term_control=term_control))
    elif len(results):
        print(results.render(term_control=term_control))
    else:
        print("No subdirectories to compare.")


def _compare_cmd(cmd_args):
    """
    Compare command handler.

    Compare the immediate subdirectories of two root directories.

    :param cmd_args: Command line arguments for the command
    :returns: integer status code returned from ``main()``
    """
    if cmd_args.pretty and cmd_args.output_format != "json":
        _log_error("Option --pretty only supported with --output-format=json")
        return EXIT_ERROR

    try:
        cmd_args.read_size = parse_size_with_units(cmd_args.read_size)
    except TreecmpError as err:
        _log_error("Invalid read size: %s", err)
        return EXIT_ERROR

    try:
        options = CompareOptions.from_cmd_args(cmd_args)
        results = compare_trees(
            cmd_args.dir_a, cmd_args.dir_b, options, color=cmd_args.color
        )
    except (TreecmpError, ValueError) as err:
        _log_error("%s", err)
        return EXIT_ERROR

    print_results(
        results,
        output_format=cmd_args.output_format,
        pretty=cmd_args.pretty,
        color=cmd_args.color,
    )
    return EXIT_IDENTICAL if results.identical else EXIT_DIFFERENT


def setup_logging(cmd_args):
    """
    Set up treecmp logging.
    """
    # pylint: disable=global-statement
    global _CONSOLE_HANDLER
    level = _DEFAULT_LOG_LEVEL
    if cmd_args.verbose and cmd_args.verbose > 1:
        level = logging.DEBUG
    elif cmd_args.verbose and cmd_args.verbose > 0:
        level = logging.INFO

    treecmp_log = logging.getLogger("treecmp")
    formatter = logging.Formatter("%(levelname)s - %(message)s")
    treecmp_log.setLevel(level)
    if treecmp_log.hasHandlers():
        treecmp_log.handlers.clear()

    _CONSOLE_HANDLER = ProgressAwareHandler()
    _CONSOLE_HANDLER.setLevel(level)
    _CONSOLE_HANDLER.setFormatter(formatter)
    _CONSOLE_HANDLER.addFilter(SubsystemFilter("treecmp"))

    treecmp_log.addHandler(_CONSOLE_HANDLER)


def shutdown_logging():
    """
    Shut down treecmp logging.
    """
    logging.shutdown()


def set_debug(debug_arg):
    """
    Set debugging mask from command line argument.
    """
    if not debug_arg:
        return

    mask_map = {
        "compare": TREECMP_DEBUG_COMPARE,
        "command": TREECMP_DEBUG_COMMAND,
        "all": TREECMP_DEBUG_ALL,
    }

    mask = 0
    for name in debug_arg.split(","):
        if name not in mask_map:
            raise ValueError(f"Unknown debug option: {name}")
        mask |= mask_map[name]
    set_debug_mask(mask)


def _add_compare_args(parser):
    """
    Add comparison arguments to ``parser``.
    """
    parser.add_argument(
        "-c",
        "--verify-contents",
        action="store_true",
        help="Verify that files present on both sides have identical content",
    )
    parser.add_argument(
        "-a",
        "--hash-algorithm",
        choices=hash_algorithms(),
        default=DEFAULT_HASH_ALGORITHM,
        help="Digest used for content verification (default: %(default)s)",
    )
    parser.add_argument(
        "--read-size",
        metavar="SIZE",
        type=str,
        default=str(DEFAULT_READ_SIZE),
        help="Read buffer size for content verification (for example 8KiB)",
    )
    parser.add_argument(
        "-o",
        "--output-format",
        choices=OUTPUT_FORMATS,
        default="text",
        help="Output format for the comparison results",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Indent JSON output",
    )
    parser.add_argument(
        "--color",
        choices=COLOR_MODES,
        default="auto",
        help="Control color output",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Do not output progress or status updates",
    )
    parser.add_argument("dir_a", metavar="DIR_A", help="The reference directory")
    parser.add_argument("dir_b", metavar="DIR_B", help="The directory to check")


def main(args):
    """
    Main entry point for treecmp.
    """
    parser = ArgumentParser(
        description="Compare the subdirectories of two directory trees",
        prog=basename(args[0]),
    )

    parser.add_argument(
        "-d",
        "--debug",
        metavar="DEBUGOPTS",
        type=str,
        help="A list of debug options to enable (compare, command, all)",
    )
    parser.add_argument("-v", "--verbose", help="Enable verbose output", action="count")
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        help="Report the version number of treecmp",
        version=__version__,
    )
    _add_compare_args(parser)
    parser.set_defaults(func=_compare_cmd)

    cmd_args = parser.parse_args(args[1:])

    status = EXIT_ERROR

    try:
        set_debug(cmd_args.debug)
    except ValueError as err:
        print(err)
        parser.print_help()
        return status

    setup_logging(cmd_args)

    _log_debug_command("Parsed %s", " ".join(args[1:]))

    if cmd_args.debug:
        status = cmd_args.func(cmd_args)
    else:
        try:
            status = cmd_args.func(cmd_args)
        # pylint: disable=broad-except
        except KeyboardInterrupt:  # pragma: no cover
            _log_info("Exiting on user cancel")
        except Exception as err:
            _log_error("Command failed: %s", err)

    shutdown_logging()
    return status


def console_main():
    """
    Console script entry point.
    """
    sys.exit(main(sys.argv))


# vim: set et ts=4 sw=4 :
