"""
Diagnostics Collector
=====================

Accumulates categorised diagnostics for one validation run, binds them
to lines of the canonical source text, keeps per-key occurrence counts
and merges long-form descriptions by code.

A collector is created per validation request and is never shared.
Recording never raises: a malformed call is itself recorded as an
internal application error so that one broken checker cannot abort
validation of the rest of a document.

Example:
    collector = DiagnosticsCollector()
    collector.bind_source_text(canonical_text)
    collector.record(Diagnostic(code="SL011-1", message="...",
                                fragments=[Fragment.from_element(elem)]))
    print(collector.summary())
"""

from collections import Counter
from typing import Any, Dict, Iterator, List, Optional, Sequence
import logging

from docprofile_core.diagnostics.base import (
    Diagnostic,
    Fragment,
    Keys,
    LongDescription,
    Severity,
    SourceLine,
)
from docprofile_core.xml.utils import MAX_FRAGMENT_LINES, is_element

logger = logging.getLogger(__name__)

_COUNTED = (Severity.FATAL, Severity.ERROR, Severity.WARNING, Severity.INFORMATION)

NO_MESSAGE = "no error message"


class DiagnosticsCollector:
    """
    Per-run store of diagnostics, line annotations and descriptions.

    Args:
        report_internal_errors: Show internal application errors in the
            error bucket (they are always kept in ``internal_errors`` and
            counted under the reserved key)
        max_fragment_lines: Snippet length used by :meth:`fragment`
    """

    def __init__(self, report_internal_errors: bool = True,
                 max_fragment_lines: int = MAX_FRAGMENT_LINES):
        self.report_internal_errors = report_internal_errors
        self.max_fragment_lines = max_fragment_lines

        self.fatals: List[Diagnostic] = []
        self.errors: List[Diagnostic] = []
        self.warnings: List[Diagnostic] = []
        self.informationals: List[Diagnostic] = []
        self.debugs: List[Diagnostic] = []
        self.internal_errors: List[Diagnostic] = []

        self._counts: Dict[Severity, Counter] = {severity: Counter() for severity in _COUNTED}
        self._lines: List[SourceLine] = []
        self._descriptions: Dict[str, LongDescription] = {}

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record(self, diagnostic: Diagnostic) -> None:
        """
        Record a diagnostic and annotate each of its fragments' lines.

        Args:
            diagnostic: The finding to record
        """
        if not isinstance(diagnostic, Diagnostic):
            self._invalid_call("ERR000", f"record() called with {type(diagnostic).__name__} instead of a Diagnostic")
            return
        if not isinstance(diagnostic.severity, Severity):
            self._invalid_call("ERR000", f"record() called with invalid severity ({diagnostic.severity!r})")
            return
        if not diagnostic.code:
            self._invalid_call("ERR001", "record() called without code")
            diagnostic.code = "ERR001"
        if not diagnostic.message:
            self._invalid_call("ERR002", "record() called without message")
            diagnostic.message = NO_MESSAGE
        diagnostic.fragments = self._anchors(diagnostic.fragments, "record")

        self._store(diagnostic)

    def record_for_fragments(self, diagnostic: Diagnostic, fragments: Sequence[Any]) -> None:
        """
        Record one diagnostic that involves several locations.

        The message is stored once; every fragment's line is annotated.
        Elements and quoted source text are accepted in place of fragments.

        Args:
            diagnostic: The finding to record
            fragments: Fragments, lxml elements or text involved
        """
        if not isinstance(diagnostic, Diagnostic):
            self.record(diagnostic)
            return
        self.record(diagnostic.with_fragments(self._anchors(fragments, "record_for_fragments")))

    def fragment(self, element: Any, quote: bool = True) -> Fragment:
        """Build a fragment for *element* using this collector's snippet length."""
        return Fragment.from_element(element, self.max_fragment_lines, quote=quote)

    def _anchors(self, items: Any, caller: str) -> List[Fragment]:
        """Normalise fragment arguments; unusable items are recorded as invalid calls."""
        if items is None:
            return []
        if isinstance(items, (Fragment, str)) or is_element(items):
            items = [items]
        elif not isinstance(items, (list, tuple)):
            self._invalid_call("ERR000", f"{caller}() called with fragments of type {type(items).__name__}")
            return []

        anchors = []
        for item in items:
            if item is None:
                continue
            if isinstance(item, Fragment):
                anchors.append(item)
            elif isinstance(item, str):
                anchors.append(Fragment(text=item))
            elif is_element(item):
                anchors.append(self.fragment(item))
            else:
                self._invalid_call("ERR000", f"{caller}() called with a {type(item).__name__} fragment")
        return anchors

    def _invalid_call(self, code: str, message: str) -> None:
        self.internal_errors.append(Diagnostic(code=code, message=message, severity=Severity.APPLICATION))
        if self.report_internal_errors:
            self.errors.append(self.internal_errors[-1])
        self._counts[Severity.ERROR][Keys.APPLICATION_ERROR] += 1
        self._counts[Severity.ERROR][Keys.INVALID_RECORD_CALL] += 1
        logger.debug(f"Invalid record call: {message}")

    def _store(self, diagnostic: Diagnostic) -> None:
        severity = diagnostic.severity

        if severity is Severity.DEBUG:
            self.debugs.append(diagnostic)
            return

        if severity is Severity.FATAL:
            self.fatals.append(diagnostic)
        elif severity is Severity.ERROR:
            self.errors.append(diagnostic)
        elif severity is Severity.WARNING:
            self.warnings.append(diagnostic)
        elif severity is Severity.INFORMATION:
            self.informationals.append(diagnostic)
        elif severity is Severity.APPLICATION:
            self.internal_errors.append(diagnostic)
            if self.report_internal_errors:
                self.errors.append(diagnostic)

        if severity is Severity.APPLICATION:
            self._counts[Severity.ERROR][Keys.APPLICATION_ERROR] += 1
        elif diagnostic.key:
            self._counts[severity][diagnostic.key] += 1

        for line in diagnostic.lines:
            self.annotate(severity, diagnostic.code, diagnostic.message, line)

        if diagnostic.description:
            self.add_long_description(diagnostic.code, diagnostic.description, diagnostic.clause)

    # ------------------------------------------------------------------
    # Source text and annotations
    # ------------------------------------------------------------------

    def bind_source_text(self, text: str) -> None:
        """
        Load the text that line annotations are attached to.

        Any previously bound text and its annotations are discarded.

        Args:
            text: Canonical source text
        """
        self._lines = [SourceLine(number=index + 1, value=value)
                       for index, value in enumerate((text or "").split("\n"))]

    def annotate(self, severity: Severity, code: str, message: str, line: Optional[int]) -> None:
        """
        Attach a message to a line of the bound source text.

        Does nothing when no text is bound or the line is out of range.
        """
        if isinstance(line, bool) or not isinstance(line, int):
            return
        if 1 <= line <= len(self._lines):
            marker = severity.marker if isinstance(severity, Severity) else str(severity)
            self._lines[line - 1].annotations.append(f"{marker} {code}: {message}")

    @property
    def source_lines(self) -> List[SourceLine]:
        return self._lines

    def source_line(self, line: Optional[int]) -> Optional[str]:
        """Text of a bound line, or None if out of range."""
        if isinstance(line, int) and 1 <= line <= len(self._lines):
            return self._lines[line - 1].value
        return None

    def annotated_lines(self) -> Iterator[SourceLine]:
        """Iterate over the bound lines that carry at least one annotation."""
        return (line for line in self._lines if line.annotations)

    # ------------------------------------------------------------------
    # Long descriptions
    # ------------------------------------------------------------------

    def add_long_description(self, code: str, text: str, clause: Optional[str] = None) -> None:
        """
        Add explanatory text for a code.

        Text already present for the code is not repeated; different text
        is appended on a new line.
        """
        if not code or not text:
            return
        found = self._descriptions.get(code)
        if found is None:
            self._descriptions[code] = LongDescription(code=code, description=text, clause=clause)
            return
        # containment, not equality: text already part of a merged description is skipped
        if text not in found.description:
            found.description += f"\n{text}"
        if not found.clause and clause:
            found.clause = clause

    @property
    def long_descriptions(self) -> List[LongDescription]:
        return list(self._descriptions.values())

    # ------------------------------------------------------------------
    # Counts and summaries
    # ------------------------------------------------------------------

    def counts(self) -> Dict[str, Dict[str, int]]:
        """Per-severity {key: occurrences} tables plus totals, for telemetry."""
        result = {severity.value: dict(self._counts[severity]) for severity in _COUNTED}
        result["totals"] = {
            Severity.FATAL.value: len(self.fatals),
            Severity.ERROR.value: len(self.errors),
            Severity.WARNING.value: len(self.warnings),
            Severity.INFORMATION.value: len(self.informationals),
            Severity.DEBUG.value: len(self.debugs),
        }
        return result

    def num_fatals(self) -> int:
        return len(self.fatals)

    def num_errors(self) -> int:
        return len(self.errors)

    def num_warnings(self) -> int:
        return len(self.warnings)

    def num_informationals(self) -> int:
        return len(self.informationals)

    @property
    def has_fatal(self) -> bool:
        return bool(self.fatals)

    @property
    def is_valid(self) -> bool:
        """True when no fatal or error diagnostics were recorded."""
        return not self.fatals and not self.errors

    def summary(self) -> str:
        """Generate a text summary of the run."""
        if self.is_valid and not self.warnings:
            return "Validation PASSED - No errors found"

        status = "PASSED" if self.is_valid else "FAILED"
        lines = [
            f"Validation {status} - {len(self.fatals)} fatal, {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s), {len(self.informationals)} informational(s)",
        ]

        for severity in _COUNTED:
            counter = self._counts[severity]
            if not counter:
                continue
            lines.extend(["", f"{severity.value.capitalize()} counts by key:"])
            for key, count in sorted(counter.items(), key=lambda x: -x[1]):
                lines.append(f"  {key}: {count}")

        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Plain-data view of the run for report renderers and log writers."""
        return {
            'fatals': [d.to_dict() for d in self.fatals],
            'errors': [d.to_dict() for d in self.errors],
            'warnings': [d.to_dict() for d in self.warnings],
            'informationals': [d.to_dict() for d in self.informationals],
            'counts': self.counts(),
            'descriptions': [
                {'code': d.code, 'description': d.description, 'clause': d.clause}
                for d in self.long_descriptions
            ],
            'markup': [
                {'line': line.number, 'value': line.value, 'annotations': list(line.annotations)}
                for line in self._lines
            ],
        }
