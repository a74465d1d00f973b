"""
Profile Checkers
================

Check one element's children and attributes against the profile's
allow-lists. The formal schema has already decided what is legal; these
checks narrow that down to what the profile permits:

- constructs the profile requires but the document omits are errors
- constructs neither the profile nor the formal schema knows are errors
- constructs the formal schema defines but the profile excludes are
  reported as information ("profiled out")

Names are compared by local name only, regardless of the namespace
(and hence schema revision) the document uses.
"""

from typing import Any, Iterable, Optional, Sequence
import logging

from docprofile_core.diagnostics.base import Diagnostic, Fragment, Keys, Severity
from docprofile_core.diagnostics.collector import DiagnosticsCollector
from docprofile_core.profile.specs import ChildSpec
from docprofile_core.xml.utils import (
    attributize,
    child_elements,
    element_line,
    elementize,
    get_attribute_any_ns,
    get_element_path,
    local_name,
    named_children,
    qualified_element_name,
)

logger = logging.getLogger(__name__)


def check_children(parent: Any,
                   child_specs: Sequence[ChildSpec],
                   base_schema_children: Iterable[str],
                   allow_foreign_children: bool,
                   collector: DiagnosticsCollector,
                   error_code: str = "TE") -> bool:
    """
    Check that the children of *parent* match the profile.

    Args:
        parent: Element whose children are checked
        child_specs: Permitted children and their cardinality
        base_schema_children: Names of all children the formal schema
            defines for *parent*, including those profiled out
        allow_foreign_children: Whether children unknown to both the
            profile and the formal schema (e.g. extensions) are permitted
        collector: Receives the diagnostics
        error_code: Code prefix for the diagnostics

    Returns:
        False if a mandatory child is missing, a cardinality is violated
        or a child is not permitted; informational findings keep True
    """
    if parent is None:
        collector.record(Diagnostic(
            code=f"{error_code}000",
            message="check_children() called with a 'None' element to check",
            severity=Severity.APPLICATION,
        ))
        return False
    if child_specs is None:
        collector.record(Diagnostic(
            code=f"{error_code}000",
            message="check_children() called with child_specs==None",
            severity=Severity.APPLICATION,
        ))
        return False

    ok = True
    this_element = elementize(qualified_element_name(parent))

    specs = []
    for entry in child_specs:
        if isinstance(entry, ChildSpec):
            specs.append(entry)
            continue
        collector.record(Diagnostic(
            code=f"{error_code}000",
            message=f"check_children() called with an invalid child spec ({entry!r})",
            severity=Severity.APPLICATION,
        ))
        ok = False

    for spec in specs:
        instances = named_children(parent, spec.name)
        count = len(instances)

        if count == 0 and spec.min_occurs > 0:
            collector.record(Diagnostic(
                code=f"{error_code}-1",
                message=f"Mandatory element {elementize(spec.name)} not specified in {this_element}",
                fragments=[Fragment(line=element_line(parent), path=get_element_path(parent))],
                key=Keys.MISSING_ELEMENT,
            ))
            ok = False
        elif not spec.accepts(count):
            for child in instances:
                collector.record(Diagnostic(
                    code=f"{error_code}-2",
                    message=(f"Cardinality of {elementize(spec.name)} in {this_element} "
                             f"is not in the range {spec.range_text}"),
                    fragments=[collector.fragment(child)],
                    key=Keys.WRONG_ELEMENT_COUNT,
                ))
            ok = False

    # names the formal schema allows here but the profile does not
    profiled = {spec.name for spec in specs}
    excluded = set(base_schema_children or ()) - profiled

    for child in child_elements(parent):
        name = local_name(child)
        if name in profiled:
            continue
        if name in excluded:
            collector.record(Diagnostic(
                code=f"{error_code}-10",
                message=f"Element {elementize(name)} in {this_element} is profiled out",
                severity=Severity.INFORMATION,
                fragments=[collector.fragment(child)],
                key=Keys.PROFILED_OUT,
            ))
        elif not allow_foreign_children:
            collector.record(Diagnostic(
                code=f"{error_code}-11",
                message=f"Element {elementize(name)} is not permitted in {this_element}",
                fragments=[collector.fragment(child)],
                key=Keys.ELEMENT_NOT_ALLOWED,
            ))
            ok = False

    return ok


def check_attributes(element: Any,
                     required: Optional[Iterable[str]],
                     optional: Optional[Iterable[str]],
                     base_schema_defined: Optional[Iterable[str]],
                     collector: DiagnosticsCollector,
                     error_code: str = "AT") -> None:
    """
    Check the attributes of *element* against the profile.

    Args:
        element: Element whose attributes are checked
        required: Attributes that must be present
        optional: Attributes that may be present
        base_schema_defined: All attributes the formal schema defines for
            the element, whether required, optional or profiled out
        collector: Receives the diagnostics
        error_code: Code prefix for the diagnostics
    """
    if element is None or required is None:
        collector.record(Diagnostic(
            code=f"{error_code}000",
            message="check_attributes() called with element==None or required==None",
            severity=Severity.APPLICATION,
        ))
        return

    required = list(required)
    optional = list(optional or ())
    defined = list(dict.fromkeys(base_schema_defined or ()))
    qualified_name = qualified_element_name(element)
    anchor = Fragment(line=element_line(element), path=get_element_path(element))

    for name in required:
        if get_attribute_any_ns(element, name) is None:
            collector.record(Diagnostic(
                code=f"{error_code}-1",
                message=f"{attributize(name, qualified_name)} is a required attribute",
                fragments=[anchor],
                key=Keys.MISSING_ATTRIBUTE,
            ))

    for key in element.attrib.keys():
        name = local_name(key)
        if name not in required and name not in optional and name not in defined:
            collector.record(Diagnostic(
                code=f"{error_code}-2",
                message=f"{attributize(name)} is not permitted in {qualified_name}",
                fragments=[anchor],
                key=Keys.UNEXPECTED_ATTRIBUTE,
            ))

    for name in defined:
        if name in required or name in optional:
            continue
        if get_attribute_any_ns(element, name) is not None:
            collector.record(Diagnostic(
                code=f"{error_code}-3",
                message=f"{attributize(name)} is profiled out of {elementize(local_name(element))}",
                severity=Severity.INFORMATION,
                fragments=[anchor],
                key=Keys.PROFILED_OUT,
            ))
