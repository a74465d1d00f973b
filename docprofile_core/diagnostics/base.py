"""
Diagnostic Data Model
=====================

Severity levels, source fragments and the Diagnostic record accumulated
by the DiagnosticsCollector.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, List, Optional

from docprofile_core.xml.utils import (
    MAX_FRAGMENT_LINES,
    element_line,
    get_element_path,
    pretty_fragment,
)


class Severity(Enum):
    """Closed set of diagnostic severities."""
    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"
    APPLICATION = "application"  # internal application error (a bug in a calling checker)
    DEBUG = "debug"

    @property
    def marker(self) -> str:
        """Short marker used in line annotations, e.g. "(E)"."""
        return _MARKERS[self]


_MARKERS = {
    Severity.FATAL: "(F)",
    Severity.ERROR: "(E)",
    Severity.WARNING: "(W)",
    Severity.INFORMATION: "(I)",
    Severity.APPLICATION: "(A)",
    Severity.DEBUG: "(D)",
}


class Keys:
    """Common grouping keys for diagnostic counts."""
    MALFORMED_XML = "malformed XML"
    XSD_VALIDATION = "XSD validation"
    SCHEMA_VERSION = "schema version"
    MISSING_ELEMENT = "missing element"
    WRONG_ELEMENT_COUNT = "wrong element count"
    ELEMENT_NOT_ALLOWED = "element not allowed"
    PROFILED_OUT = "profiled out"
    MISSING_ATTRIBUTE = "missing attribute"
    UNEXPECTED_ATTRIBUTE = "unexpected attribute"
    APPLICATION_ERROR = "application process error"
    INVALID_RECORD_CALL = "invalid record call"


@dataclass(frozen=True)
class Fragment:
    """
    A location in the canonical source text that anchors a diagnostic.

    Attributes:
        line: 1-based line number in the canonical text (optional)
        text: Quoted source, either an element snippet or a raw line
        path: XPath-like element path for context
    """
    line: Optional[int] = None
    text: Optional[str] = None
    path: Optional[str] = None

    @classmethod
    def from_element(cls, element: Any, max_lines: int = MAX_FRAGMENT_LINES,
                     quote: bool = True) -> "Fragment":
        """
        Build a fragment for an element.

        Args:
            element: lxml element
            max_lines: Snippet length limit
            quote: Whether to include the element's pretty-printed text
        """
        return cls(
            line=element_line(element),
            text=pretty_fragment(element, max_lines) if quote else None,
            path=get_element_path(element),
        )

    @classmethod
    def at_line(cls, line: Optional[int], text: Optional[str] = None) -> "Fragment":
        return cls(line=line, text=text)


@dataclass
class Diagnostic:
    """
    A single finding.

    A diagnostic can point at any number of fragments; the usual case is
    one, a cardinality problem may point at several, and document-level
    findings point at none.

    Attributes:
        code: Short rule code, e.g. "SL011-1"
        message: Human-readable message
        severity: Severity, ERROR by default
        fragments: Source locations the diagnostic is anchored at
        key: Grouping key for per-key counts
        description: Long-form explanation of the code (shown once per code)
        clause: Citation for the description
    """
    code: str
    message: str
    severity: Severity = Severity.ERROR
    fragments: List[Fragment] = field(default_factory=list)
    key: Optional[str] = None
    description: Optional[str] = None
    clause: Optional[str] = None

    @property
    def lines(self) -> List[int]:
        """Line numbers of all anchored fragments."""
        return [f.line for f in self.fragments if isinstance(f.line, int)]

    @property
    def line(self) -> Optional[int]:
        lines = self.lines
        return lines[0] if lines else None

    def with_fragments(self, fragments: List[Fragment]) -> "Diagnostic":
        return replace(self, fragments=list(fragments))

    def to_dict(self) -> dict:
        """Convert to dictionary for report renderers."""
        data = {
            'severity': self.severity.value,
            'code': self.code,
            'message': self.message,
        }
        if self.key:
            data['key'] = self.key
        if self.fragments:
            data['fragments'] = [
                {k: v for k, v in (('line', f.line), ('text', f.text), ('path', f.path)) if v is not None}
                for f in self.fragments
            ]
        return data


@dataclass
class LongDescription:
    """Long-form explanation of a diagnostic code, merged across occurrences."""
    code: str
    description: str
    clause: Optional[str] = None


@dataclass
class SourceLine:
    """One line of the canonical source text with its attached annotations."""
    number: int
    value: str
    annotations: List[str] = field(default_factory=list)
