# Copyright Red Hat
#
# treecmp/compare/engine.py - Directory tree comparison engine
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory tree comparison engine
"""
from typing import Any, Dict, Iterator, List, Optional, Tuple
from datetime import datetime
import logging
import json
import os

from treecmp import TREECMP_SUBSYSTEM_COMPARE, TreecmpCompareError
from treecmp.progress import ProgressFactory, TermControl

from .checker import ContentChecker
from .difftypes import ResultType, Side
from .options import CompareOptions
from .pathset import build_path_set, list_subdirs

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TREECMP_SUBSYSTEM_COMPARE}, **kwargs)


class ComparisonReport:
    """
    The differences found between one pair of matched subdirectories.
    """

    def __init__(
        self,
        missing_in_b: Optional[List[str]] = None,
        missing_in_a: Optional[List[str]] = None,
        changed: Optional[List[str]] = None,
        errored: Optional[List[Tuple[str, str]]] = None,
    ):
        """
        Initialise a new ``ComparisonReport`` object.

        :param missing_in_b: Paths present under A but not under B.
        :type missing_in_b: ``Optional[List[str]]``
        :param missing_in_a: Paths present under B but not under A.
        :type missing_in_a: ``Optional[List[str]]``
        :param changed: Paths present on both sides with different content.
        :type changed: ``Optional[List[str]]``
        :param errored: ``(path, cause)`` pairs for paths present on both
                        sides that could not be compared.
        :type errored: ``Optional[List[Tuple[str, str]]]``
        """
        self.missing_in_b: List[str] = missing_in_b or []
        self.missing_in_a: List[str] = missing_in_a or []
        self.changed: List[str] = changed or []
        self.errored: List[Tuple[str, str]] = errored or []

    def __repr__(self) -> str:
        return (
            f"ComparisonReport(missing_in_b={self.missing_in_b!r}, "
            f"missing_in_a={self.missing_in_a!r}, changed={self.changed!r}, "
            f"errored={self.errored!r})"
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, ComparisonReport):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @property
    def identical(self) -> bool:
        """
        ``True`` if no difference of any kind was recorded.
        """
        return not (
            self.missing_in_b or self.missing_in_a or self.changed or self.errored
        )

    @property
    def total_differences(self) -> int:
        """
        The total number of paths recorded in this report.
        """
        return (
            len(self.missing_in_b)
            + len(self.missing_in_a)
            + len(self.changed)
            + len(self.errored)
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``ComparisonReport`` object into a dictionary
        representation suitable for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        return {
            "missing_in_b": list(self.missing_in_b),
            "missing_in_a": list(self.missing_in_a),
            "changed": list(self.changed),
            "errored": [{"path": path, "cause": cause} for path, cause in self.errored],
        }


class SubdirResult:
    """
    The comparison outcome for one immediate subdirectory name.
    """

    def __init__(
        self,
        name: str,
        result_type: ResultType,
        side: Optional[Side] = None,
        report: Optional[ComparisonReport] = None,
    ):
        """
        Initialise a new ``SubdirResult`` object.

        :param name: The subdirectory name, relative to the roots.
        :type name: ``str``
        :param result_type: The outcome of the comparison.
        :type result_type: ``ResultType``
        :param side: For ``ResultType.ONLY_IN`` the side on which the
                     subdirectory exists.
        :type side: ``Optional[Side]``
        :param report: For matched subdirectories, the comparison report.
        :type report: ``Optional[ComparisonReport]``
        """
        if result_type == ResultType.ONLY_IN and side is None:
            raise ValueError("ONLY_IN results require a side")
        if result_type != ResultType.ONLY_IN and report is None:
            report = ComparisonReport()
        self.name = name
        self.result_type = result_type
        self.side = side
        self.report = report

    def __repr__(self) -> str:
        return (
            f"SubdirResult({self.name!r}, {self.result_type}, "
            f"side={self.side}, report={self.report!r})"
        )

    @classmethod
    def from_report(cls, name: str, report: ComparisonReport) -> "SubdirResult":
        """
        Build a result for a matched subdirectory from its report.

        :param name: The subdirectory name.
        :type name: ``str``
        :param report: The comparison report for the subdirectory.
        :type report: ``ComparisonReport``
        :returns: An ``IDENTICAL`` or ``DIFFERENT`` result.
        :rtype: ``SubdirResult``
        """
        result_type = ResultType.IDENTICAL if report.identical else ResultType.DIFFERENT
        return cls(name, result_type, report=report)

    @property
    def identical(self) -> bool:
        """
        ``True`` if this subdirectory matched fully on both sides.
        """
        return self.result_type == ResultType.IDENTICAL

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``SubdirResult`` object into a dictionary representation
        suitable for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        out = {
            "name": self.name,
            "result": self.result_type.value,
        }
        if self.side is not None:
            out["only_in"] = self.side.value
        if self.report is not None:
            out.update(self.report.to_dict())
        return out


class CompareResults:
    """
    Container for the per-subdirectory results of one tree comparison.
    """

    def __init__(
        self,
        root_a: str,
        root_b: str,
        records: List[SubdirResult],
        options: CompareOptions,
        timestamp: Optional[int] = None,
    ):
        """
        Initialise a new ``CompareResults`` object.

        :param root_a: The first (left hand) root directory.
        :type root_a: ``str``
        :param root_b: The second (right hand) root directory.
        :type root_b: ``str``
        :param records: The per-subdirectory results, in output order.
        :type records: ``List[SubdirResult]``
        :param options: The options used for the comparison.
        :type options: ``CompareOptions``
        :param timestamp: The time the comparison was made (UNIX epoch).
        :type timestamp: ``Optional[int]``
        """
        self.root_a = root_a
        self.root_b = root_b
        self._records = records
        self.options = options
        self.timestamp = (
            timestamp if timestamp is not None else round(datetime.now().timestamp())
        )

    def __repr__(self) -> str:
        return (
            f"CompareResults({self.root_a!r}, {self.root_b!r}, "
            f"{self._records!r}, {self.options!r}, {self.timestamp})"
        )

    def __iter__(self) -> Iterator[SubdirResult]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, index: int) -> SubdirResult:
        return self._records[index]

    def get(self, name: str) -> Optional[SubdirResult]:
        """
        Return the result for subdirectory ``name`` or ``None``.
        """
        for record in self._records:
            if record.name == name:
                return record
        return None

    @property
    def identical(self) -> bool:
        """
        ``True`` if every subdirectory compared identical.
        """
        return all(record.identical for record in self._records)

    @property
    def only_in(self) -> List[SubdirResult]:
        """
        Subdirectories present on one side only.
        """
        return [r for r in self._records if r.result_type == ResultType.ONLY_IN]

    @property
    def different(self) -> List[SubdirResult]:
        """
        Matched subdirectories with at least one difference.
        """
        return [r for r in self._records if r.result_type == ResultType.DIFFERENT]

    @property
    def total_differences(self) -> int:
        """
        The number of one-sided subdirectories plus the number of paths
        recorded across all subdirectory reports.
        """
        return len(self.only_in) + sum(
            r.report.total_differences for r in self._records if r.report is not None
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert these results into a dictionary representation suitable
        for encoding as JSON.

        :returns: A dictionary describing the comparison.
        :rtype: ``Dict[str, Any]``
        """
        return {
            "root_a": self.root_a,
            "root_b": self.root_b,
            "verify_contents": self.options.verify_contents,
            "hash_algorithm": self.options.hash_algorithm,
            "timestamp": self.timestamp,
            "identical": self.identical,
            "subdirectories": [record.to_dict() for record in self._records],
        }

    def json(self, pretty: bool = False) -> str:
        """
        Return a JSON representation of these results.

        :param pretty: Indent the output for human readers.
        :type pretty: ``bool``
        :returns: A JSON string.
        :rtype: ``str``
        """
        return json.dumps(self.to_dict(), indent=4 if pretty else None)

    def render(self, term_control: Optional[TermControl] = None) -> str:
        """
        Render these results as human readable text, one section per
        subdirectory.

        :param term_control: An optional ``TermControl`` instance used for
                             color output.
        :type term_control: ``Optional[TermControl]``
        :returns: The rendered text.
        :rtype: ``str``
        """
        tc = term_control or TermControl(color="never")
        roots = {Side.A: self.root_a, Side.B: self.root_b}
        lines = []

        def _section(title: str, paths: List[str]):
            if paths:
                lines.append(f"  {tc.YELLOW}{title}{tc.NORMAL}")
                lines.extend(f"    {tc.RED}{path}{tc.NORMAL}" for path in paths)

        for record in self._records:
            if lines:
                lines.append("")
            lines.append(f"{tc.CYAN}=== Subdirectory: {record.name} ==={tc.NORMAL}")

            if record.result_type == ResultType.ONLY_IN:
                other = Side.B if record.side == Side.A else Side.A
                lines.append(
                    f"  {tc.RED}Present in {roots[record.side]} but MISSING "
                    f"entirely in {roots[other]}{tc.NORMAL}"
                )
                continue

            if record.identical:
                what = "file sets"
                if self.options.verify_contents:
                    what = "file sets and contents"
                lines.append(f"  {tc.GREEN}identical {what}{tc.NORMAL}")
                continue

            report = record.report
            _section(
                f"Files present in {self.root_a} but MISSING in {self.root_b}:",
                report.missing_in_b,
            )
            _section(
                f"Files present in {self.root_b} but MISSING in {self.root_a}:",
                report.missing_in_a,
            )
            _section("Files with DIFFERENT content:", report.changed)
            _section(
                "Files that could not be COMPARED:",
                [f"{path} ({cause})" for path, cause in report.errored],
            )
        return "\n".join(lines)

    def summary(self, term_control: Optional[TermControl] = None) -> str:
        """
        Render a short count-based summary of these results.

        :param term_control: An optional ``TermControl`` instance used for
                             color output.
        :type term_control: ``Optional[TermControl]``
        :returns: The summary text.
        :rtype: ``str``
        """
        tc = term_control or TermControl(color="never")

        def _count(attr: str) -> int:
            return sum(
                len(getattr(r.report, attr))
                for r in self._records
                if r.report is not None
            )

        nr_identical = sum(1 for r in self._records if r.identical)
        only_a = sum(1 for r in self.only_in if r.side == Side.A)
        only_b = sum(1 for r in self.only_in if r.side == Side.B)
        status = (
            f"{tc.GREEN}identical{tc.NORMAL}"
            if self.identical
            else f"{tc.RED}different{tc.NORMAL}"
        )
        lines = [
            f"Comparing {self.root_a} to {self.root_b}: {status}",
            f"  subdirectories:     {len(self._records)}",
            f"  identical:          {nr_identical}",
            f"  different:          {len(self.different)}",
            f"  only in {self.root_a}: {only_a}",
            f"  only in {self.root_b}: {only_b}",
            f"  missing in {self.root_b}: {_count('missing_in_b')}",
            f"  missing in {self.root_a}: {_count('missing_in_a')}",
        ]
        if self.options.verify_contents:
            lines.append(f"  changed content:    {_count('changed')}")
            lines.append(f"  comparison errors:  {_count('errored')}")
        return "\n".join(lines)


class DiffEngine:
    """
    Core class for generating tree comparisons.
    """

    def compare_subdir(
        self,
        dir_a: str,
        dir_b: str,
        options: CompareOptions,
        term_control: Optional[TermControl] = None,
        label: Optional[str] = None,
    ) -> ComparisonReport:
        """
        Compare one pair of matched directories.

        :param dir_a: The directory on side A.
        :type dir_a: ``str``
        :param dir_b: The directory on side B.
        :type dir_b: ``str``
        :param options: Options to apply to the comparison.
        :type options: ``CompareOptions``
        :param term_control: An optional ``TermControl`` for progress output.
        :type term_control: ``Optional[TermControl]``
        :param label: A name for the comparison used in progress output.
        :type label: ``Optional[str]``
        :returns: The differences found.
        :rtype: ``ComparisonReport``
        """
        label = label or os.path.basename(os.path.normpath(dir_a))
        throbber = ProgressFactory.get_throbber(
            f"Comparing {label}",
            quiet=options.quiet,
            term_control=term_control,
        )
        throbber.start()
        start_time = datetime.now()
        try:
            files_a = build_path_set(dir_a, callback=throbber.throb)
            files_b = build_path_set(dir_b, callback=throbber.throb)

            report = ComparisonReport(
                missing_in_b=sorted(files_a - files_b),
                missing_in_a=sorted(files_b - files_a),
            )

            if options.verify_contents:
                checker = ContentChecker(
                    hash_algorithm=options.hash_algorithm,
                    read_size=options.read_size,
                )
                for rel_path in sorted(files_a & files_b):
                    throbber.throb()
                    try:
                        if not checker.files_equal(
                            os.path.join(dir_a, rel_path),
                            os.path.join(dir_b, rel_path),
                            rel_path=rel_path,
                        ):
                            report.changed.append(rel_path)
                    except TreecmpCompareError as err:
                        _log_debug_compare("Comparison failed: %s", err)
                        report.errored.append((err.path, err.cause))
        except KeyboardInterrupt:
            throbber.end("Quit!")
            raise
        except Exception:
            throbber.end("failed")
            raise

        end_time = datetime.now()
        throbber.end(
            f"{report.total_differences} differences in {end_time - start_time}"
        )
        _log_debug_compare("Compared '%s' to '%s': %r", dir_a, dir_b, report)
        return report

    def compare_roots(
        self,
        root_a: str,
        root_b: str,
        options: Optional[CompareOptions] = None,
        term_control: Optional[TermControl] = None,
    ) -> CompareResults:
        """
        Compare the immediate subdirectories of ``root_a`` and ``root_b``.

        Files located directly in either root are not compared. A
        subdirectory that exists on one side only is reported as such and
        is not descended into.

        :param root_a: The first (left hand) root directory.
        :type root_a: ``str``
        :param root_b: The second (right hand) root directory.
        :type root_b: ``str``
        :param options: Options to apply to the comparison.
        :type options: ``Optional[CompareOptions]``
        :param term_control: An optional ``TermControl`` for progress output.
        :type term_control: ``Optional[TermControl]``
        :returns: The per-subdirectory results in lexicographic name order.
        :rtype: ``CompareResults``
        """
        options = options or CompareOptions()
        timestamp = round(datetime.now().timestamp())

        subdirs = sorted(list_subdirs(root_a) | list_subdirs(root_b))
        _log_info(
            "Comparing %d subdirectories of %s and %s", len(subdirs), root_a, root_b
        )

        records = []
        for name in subdirs:
            path_a = os.path.join(root_a, name)
            path_b = os.path.join(root_b, name)
            is_dir_a = os.path.isdir(path_a)
            is_dir_b = os.path.isdir(path_b)

            if is_dir_a and is_dir_b:
                report = self.compare_subdir(
                    path_a, path_b, options, term_control=term_control, label=name
                )
                records.append(SubdirResult.from_report(name, report))
            elif is_dir_a:
                records.append(SubdirResult(name, ResultType.ONLY_IN, side=Side.A))
            elif is_dir_b:
                records.append(SubdirResult(name, ResultType.ONLY_IN, side=Side.B))
            else:
                # Listed on enumeration but gone before comparison.
                _log_debug_compare("Subdirectory '%s' vanished from both roots", name)

        return CompareResults(root_a, root_b, records, options, timestamp=timestamp)


__all__ = [
    "ComparisonReport",
    "CompareResults",
    "DiffEngine",
    "SubdirResult",
]
