"""
Document Normalization & Load Pipeline
======================================

One pass per validation call:

    RAW_TEXT → PARSE → CANONICAL_REFORMAT → REPARSE → BIND_SOURCE → root

The document is re-indented into a canonical form and parsed again, so
every line number a diagnostic refers to depends only on the logical
content of the document, not on its author's whitespace. Any failure
before BIND_SOURCE is recorded as a Fatal diagnostic and ends the run;
a failed reparse still binds the canonical text so partial annotation
is possible.

Example:
    collector = DiagnosticsCollector()
    root = validate_document(text, registry, collector, "SL001",
                             expected_root="ServiceList")
    if root is not None:
        check_children(root, SERVICE_LIST_CHILDREN, ..., collector, "SL020")
"""

from enum import Enum
from typing import Any, Optional, Union
import logging

from lxml import etree

from docprofile_core.diagnostics.base import Diagnostic, Fragment, Keys, Severity
from docprofile_core.diagnostics.collector import DiagnosticsCollector
from docprofile_core.schema.formal import FormalSchemaValidator, schema_check
from docprofile_core.schema.registry import SchemaVersionRegistry, report_lifecycle
from docprofile_core.xml.utils import elementize, element_line, node_name

logger = logging.getLogger(__name__)

DEFAULT_INDENT = "  "


class LoadStage(Enum):
    """Stages of the load pipeline."""
    PARSE = "parse"
    CANONICAL_REFORMAT = "canonical reformat"
    REPARSE = "reparse"
    BIND_SOURCE = "bind source"


def _parser(text: Union[str, bytes], remove_blank_text: bool) -> etree.XMLParser:
    # str input has already been decoded, so any declared encoding is overridden
    return etree.XMLParser(
        remove_blank_text=remove_blank_text,
        resolve_entities=False,
        no_network=True,
        encoding="utf-8" if isinstance(text, str) else None,
    )


def _parse(text: Union[str, bytes], remove_blank_text: bool = False) -> Any:
    data = text.encode("utf-8") if isinstance(text, str) else text
    return etree.fromstring(data, _parser(text, remove_blank_text))


def canonical_format(document: Any, indent: str = DEFAULT_INDENT) -> str:
    """
    Serialise a parsed document in canonical indentation.

    Args:
        document: Root element or ElementTree (re-indented in place)
        indent: Indentation unit

    Returns:
        Canonical text, including any DOCTYPE and top-level comments, but
        without an XML declaration
    """
    tree = document.getroottree() if hasattr(document, "getroottree") else document
    etree.indent(tree, space=indent)
    return etree.tostring(tree, encoding="unicode", pretty_print=True)


def _fatal(collector: DiagnosticsCollector, stage: LoadStage, code: str, message: str) -> None:
    logger.debug(f"Load failed at {stage.value}: {message}")
    collector.record(Diagnostic(
        code=code,
        message=message,
        severity=Severity.FATAL,
        key=Keys.MALFORMED_XML,
    ))


def load_document(text: Union[str, bytes],
                  collector: DiagnosticsCollector,
                  error_code: str = "LD",
                  indent: str = DEFAULT_INDENT) -> Optional[Any]:
    """
    Parse, canonicalise and reparse a document, binding the canonical
    text into *collector*.

    Args:
        text: Raw document text
        collector: Receives load diagnostics and the canonical text
        error_code: Prefix for load diagnostic codes
        indent: Indentation unit of the canonical form

    Returns:
        Root element of the canonical document, or None after a Fatal
    """
    # PARSE
    try:
        raw = _parse(text, remove_blank_text=True)
    except etree.XMLSyntaxError as e:
        entries = [entry for entry in e.error_log] or [None]
        for entry in entries:
            if entry is None:
                detail = str(e)
            else:
                detail = f"{entry.message} at line {entry.line}, char {entry.column}"
            _fatal(collector, LoadStage.PARSE, f"{error_code}-1", f"Raw XML parsing failed: {detail}")
        return None
    except ValueError as e:
        _fatal(collector, LoadStage.PARSE, f"{error_code}-1", f"Raw XML parsing failed: {e}")
        return None

    # CANONICAL_REFORMAT
    try:
        canonical = canonical_format(raw, indent)
    except (etree.SerialisationError, ValueError, TypeError) as e:
        _fatal(collector, LoadStage.CANONICAL_REFORMAT, f"{error_code}-2", f"XML format failed: {e}")
        return None

    # REPARSE
    try:
        root = _parse(canonical)
    except (etree.XMLSyntaxError, ValueError) as e:
        _fatal(collector, LoadStage.REPARSE, f"{error_code}-11", f"XML parsing failed: {e}")
        collector.bind_source_text(canonical)
        return None

    if root is None:
        _fatal(collector, LoadStage.REPARSE, f"{error_code}-12", "XML document is empty")
        collector.bind_source_text(canonical)
        return None

    # BIND_SOURCE
    collector.bind_source_text(canonical)
    logger.debug(f"Loaded document <{node_name(root)}> ({len(collector.source_lines)} canonical lines)")
    return root


def validate_document(text: Union[str, bytes],
                      registry: SchemaVersionRegistry,
                      collector: DiagnosticsCollector,
                      error_code: str = "DV",
                      load_code: str = "LD",
                      expected_root: Optional[str] = None,
                      validator: Optional[FormalSchemaValidator] = None,
                      report_schema_version: bool = True,
                      old_severity: Severity = Severity.ERROR,
                      indent: str = DEFAULT_INDENT) -> Optional[Any]:
    """
    Load a document, select its formal schema by namespace and validate it.

    Args:
        text: Raw document text
        registry: Supported schema versions
        collector: Receives all diagnostics
        error_code: Prefix for diagnostic codes
        load_code: Prefix for load (parse/reformat) diagnostic codes
        expected_root: Required local name of the root element, if any
        validator: Formal schema validator (lxml by default)
        report_schema_version: Report outdated or draft schema usage
        old_severity: Severity for an out of date schema
        indent: Indentation unit of the canonical form

    Returns:
        Root element for domain-specific checking, or None if checking
        cannot continue
    """
    root = load_document(text, collector, load_code, indent)
    if root is None:
        return None

    name = node_name(root)
    root_fragment = Fragment(line=element_line(root), path=f"/{name.local_name}")

    if expected_root and name.local_name != expected_root:
        collector.record(Diagnostic(
            code=f"{error_code}-4",
            message=f"Root element is not {elementize(expected_root)}",
            fragments=[root_fragment],
            key=Keys.XSD_VALIDATION,
            description=f"the root element of the document must be {elementize(expected_root)}",
        ))
        return None

    if not name.namespace_uri:
        collector.record(Diagnostic(
            code=f"{error_code}-3",
            message=f"namespace is not provided for {elementize(name.local_name)}",
            fragments=[root_fragment],
            key=Keys.XSD_VALIDATION,
            description="the namespace of the root element is required to select the schema version",
        ))
        return None

    entry = registry.resolve(name.namespace_uri)
    if entry is None:
        collector.record(Diagnostic(
            code=f"{error_code}-10",
            message=f'Unsupported namespace "{name.namespace_uri}"',
            severity=Severity.FATAL,
            fragments=[root_fragment],
            key=Keys.XSD_VALIDATION,
        ))
        return None

    schema_check(root, entry.schema, collector,
                 f"{error_code}-5:{registry.spec_version_of(name.namespace_uri)}", validator)
    if report_schema_version:
        report_lifecycle(entry, collector, f"{error_code}-5:", element_line(root), old_severity)

    return root
