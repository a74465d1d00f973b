"""
XML Processing Utilities
========================

Namespace-insensitive naming and navigation helpers used by the checkers.
"""

from docprofile_core.xml.utils import (
    MAX_FRAGMENT_LINES,
    NodeName,
    node_name,
    local_name,
    local_name_matches,
    is_element,
    child_elements,
    named_children,
    has_child,
    attribute_names,
    get_attribute_any_ns,
    element_line,
    qualified_element_name,
    elementize,
    attributize,
    get_element_path,
    pretty_fragment,
)

__all__ = [
    "MAX_FRAGMENT_LINES",
    "NodeName",
    "node_name",
    "local_name",
    "local_name_matches",
    "is_element",
    "child_elements",
    "named_children",
    "has_child",
    "attribute_names",
    "get_attribute_any_ns",
    "element_line",
    "qualified_element_name",
    "elementize",
    "attributize",
    "get_element_path",
    "pretty_fragment",
]
