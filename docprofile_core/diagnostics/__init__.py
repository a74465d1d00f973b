"""
Diagnostics Framework
=====================

Components:
- Severity: closed set of severities
- Diagnostic / Fragment: a finding and the source locations it is anchored at
- DiagnosticsCollector: per-run accumulation, line annotation and counting
"""

from docprofile_core.diagnostics.base import (
    Diagnostic,
    Fragment,
    Keys,
    LongDescription,
    Severity,
    SourceLine,
)

from docprofile_core.diagnostics.collector import (
    DiagnosticsCollector,
)

__all__ = [
    "Diagnostic",
    "Fragment",
    "Keys",
    "LongDescription",
    "Severity",
    "SourceLine",
    "DiagnosticsCollector",
]
