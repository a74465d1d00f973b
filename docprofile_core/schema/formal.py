"""
Formal Schema Validation
========================

Thin wrapper around lxml's schema validators (XSD, DTD, RelaxNG). The
formal schema is treated as an opaque collaborator: its results are
forwarded into the DiagnosticsCollector without interpretation.
"""

from pathlib import Path
from typing import Any, List, NamedTuple, Optional, Protocol
import logging
import re

from lxml import etree

from docprofile_core.diagnostics.base import Diagnostic, Fragment, Keys, Severity
from docprofile_core.diagnostics.collector import DiagnosticsCollector

logger = logging.getLogger(__name__)


class FormalSchemaIssue(NamedTuple):
    """One finding reported by the formal schema validator."""
    message: str
    line: Optional[int] = None


class FormalSchemaValidator(Protocol):
    """Interface of a formal schema validator."""

    def validate(self, root: Any, schema: Any) -> List[FormalSchemaIssue]:
        ...


class LxmlSchemaValidator:
    """
    Validator for lxml schema objects (``etree.XMLSchema``, ``etree.DTD``,
    ``etree.RelaxNG``).

    Example:
        validator = LxmlSchemaValidator()
        issues = validator.validate(root, load_schema(Path("schema.xsd")))
    """

    def validate(self, root: Any, schema: Any) -> List[FormalSchemaIssue]:
        """
        Validate an element tree against *schema*.

        Args:
            root: Root element (or ElementTree) of the document
            schema: lxml schema object

        Returns:
            List of issues, empty when the document is valid
        """
        if schema.validate(root):
            return []
        return [
            FormalSchemaIssue(
                message=self._make_readable(str(error.message)),
                line=error.line if getattr(error, 'line', 0) else None,
            )
            for error in schema.error_log
        ]

    def _make_readable(self, message: str) -> str:
        """Make schema error message more readable."""
        replacements = {
            r'\{[^}]*\}': '',
            r"Element '([\w.\-]+)'": r'Element <\1>',
            r'No declaration for element ([\w.\-]+)': r'Element <\1> is not declared in the schema',
        }

        readable = message
        for pattern, replacement in replacements.items():
            readable = re.sub(pattern, replacement, readable)

        return readable


def schema_type(schema: Any) -> str:
    """Return the type of schema, e.g. 'XSD' or 'DTD'."""
    if isinstance(schema, etree.XMLSchema):
        return "XSD"
    if isinstance(schema, etree.DTD):
        return "DTD"
    if isinstance(schema, etree.RelaxNG):
        return "RelaxNG"
    return "Unknown"


def load_schema(schema_path: Path) -> Any:
    """
    Load a formal schema from file. Included and imported schemas are
    resolved relative to the schema file.

    Args:
        schema_path: Path to a .xsd, .dtd or .rng file

    Returns:
        lxml schema object

    Raises:
        FileNotFoundError: If the schema file doesn't exist
        ValueError: If the file type is not supported
        etree.XMLSchemaParseError: If the schema itself is invalid
    """
    schema_path = Path(schema_path)
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    suffix = schema_path.suffix.lower()
    if suffix == '.xsd':
        schema = etree.XMLSchema(etree.parse(str(schema_path)))
    elif suffix == '.dtd':
        schema = etree.DTD(str(schema_path))
    elif suffix == '.rng':
        schema = etree.RelaxNG(etree.parse(str(schema_path)))
    else:
        raise ValueError(f"Unsupported schema format: {suffix}")

    logger.debug(f"Loaded {schema_type(schema)} schema from {schema_path}")
    return schema


def schema_check(root: Any,
                 schema: Any,
                 collector: DiagnosticsCollector,
                 error_code: str,
                 validator: Optional[FormalSchemaValidator] = None) -> None:
    """
    Validate *root* against the formal schema and forward every issue.

    Each issue is recorded with *error_code* and anchored at the canonical
    source line it reports, quoting that line.

    Args:
        root: Root element of the (canonically reformatted) document
        schema: Formal schema handle
        collector: Receives the diagnostics
        error_code: Code for every formal schema issue
        validator: Validator to use (lxml by default)
    """
    if schema is None:
        collector.record(Diagnostic(
            code="LS001",
            message="validator not loaded: no formal schema for this document",
            severity=Severity.DEBUG,
        ))
        return

    validator = validator or LxmlSchemaValidator()
    try:
        issues = validator.validate(root, schema)
    except (etree.LxmlError, TypeError, ValueError) as e:
        logger.warning(f"Formal schema validation could not run: {e}")
        collector.record(Diagnostic(
            code="LS000",
            message=f"formal schema validation failed to run: {e}",
            severity=Severity.DEBUG,
        ))
        return

    for issue in issues:
        collector.record(Diagnostic(
            code=error_code,
            message=issue.message,
            fragments=[Fragment.at_line(issue.line, collector.source_line(issue.line))],
            key=Keys.XSD_VALIDATION,
        ))
