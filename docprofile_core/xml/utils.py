"""
XML Utility Functions
=====================

Node naming and navigation helpers shared by the profile checkers and the
diagnostics collector. Profiles are expressed in local names only, so all
matching here ignores the namespace; the namespace URI is carried along
for diagnostic context.
"""

from typing import Any, Iterator, List, NamedTuple, Optional
import logging

from lxml import etree

logger = logging.getLogger(__name__)

# the maximum number of lines of an element shown when it is quoted in a report
MAX_FRAGMENT_LINES = 6


class NodeName(NamedTuple):
    """Local name / namespace URI pair of an element or attribute."""
    local_name: str
    namespace_uri: Optional[str] = None

    def __str__(self) -> str:
        return self.local_name


def node_name(node: Any) -> NodeName:
    """
    Split the name of an element (or a Clark-notation string) into its parts.

    Args:
        node: lxml element, or a name such as "{urn:x}Service"

    Returns:
        NodeName; comments and processing instructions yield an empty local name

    Example:
        >>> node_name(etree.Element("{urn:x}Service"))
        NodeName(local_name='Service', namespace_uri='urn:x')
    """
    tag = node if isinstance(node, str) else getattr(node, "tag", None)
    if not isinstance(tag, str):
        return NodeName("")
    if tag.startswith("{"):
        namespace, local = tag[1:].split("}", 1)
        return NodeName(local, namespace)
    return NodeName(tag)


def local_name(node: Any) -> str:
    """Extract the local name from an element tag, stripping any namespace."""
    return node_name(node).local_name


def local_name_matches(node: Any, name: str) -> bool:
    """
    Namespace-insensitive name comparison.

    Args:
        node: lxml element, NodeName or Clark-notation name
        name: Local name to compare against

    Returns:
        True if the local names are equal
    """
    if isinstance(node, NodeName):
        return node.local_name == name
    return local_name(node) == name


def is_element(node: Any) -> bool:
    """True for real elements (not comments, PIs or entities)."""
    return isinstance(getattr(node, "tag", None), str)


def child_elements(parent: Any) -> Iterator[Any]:
    """Iterate over the element children of *parent* in document order."""
    for child in parent:
        if is_element(child):
            yield child


def named_children(parent: Any, name: str) -> List[Any]:
    """Return all element children of *parent* with the given local name."""
    return [child for child in child_elements(parent) if local_name_matches(child, name)]


def has_child(parent: Any, name: str) -> bool:
    """Check if the element contains a child with the given local name."""
    if parent is None:
        return False
    return any(local_name_matches(child, name) for child in child_elements(parent))


def attribute_names(element: Any) -> List[NodeName]:
    """Return the names of the attributes present on *element*."""
    return [node_name(key) for key in element.attrib.keys()]


def get_attribute_any_ns(element: Any, name: str) -> Optional[str]:
    """
    Get an attribute value by local name, whatever its namespace.

    Args:
        element: lxml element
        name: Local attribute name

    Returns:
        Attribute value, or None if no attribute has that local name
    """
    for key, value in element.attrib.items():
        if local_name(key) == name:
            return value
    return None


def element_line(element: Any) -> Optional[int]:
    """Source line (1-based) of an element, if the parser recorded one."""
    line = getattr(element, "sourceline", None)
    return line if isinstance(line, int) else None


def qualified_element_name(element: Any) -> str:
    """Name an element together with its parent, e.g. "ServiceList.Service"."""
    name = local_name(element)
    parent = element.getparent() if hasattr(element, "getparent") else None
    if parent is not None and is_element(parent):
        return f"{local_name(parent)}.{name}"
    return name


def elementize(name: str) -> str:
    """Format an element name for messages."""
    return f"<{name}>"


def attributize(name: str, element_name: Optional[str] = None) -> str:
    """Format an attribute name for messages, optionally qualified by its element."""
    if element_name:
        return f"{element_name}@{name}"
    return f"@{name}"


def get_element_path(element: Any) -> str:
    """
    Get XPath-like path to an element for debugging.

    Args:
        element: XML element

    Returns:
        Path string like "/ServiceList/Service[2]/ServiceName[1]"
    """
    parts = []
    current = element

    while current is not None:
        name = local_name(current)
        parent = current.getparent()

        if parent is not None:
            # Count same-named siblings
            index = 1
            for sibling in parent:
                if sibling is current:
                    break
                if local_name(sibling) == name:
                    index += 1
            parts.append(f"{name}[{index}]")
        else:
            parts.append(name)

        current = parent

    return "/" + "/".join(reversed(parts))


def pretty_fragment(element: Any, max_lines: int = MAX_FRAGMENT_LINES) -> str:
    """
    Serialise an element for quoting in a report, truncated to *max_lines*.

    Args:
        element: lxml element
        max_lines: Number of lines kept before the "...." marker

    Returns:
        Indented XML text of the element (without its tail)
    """
    text = etree.tostring(element, encoding="unicode", pretty_print=True, with_tail=False)
    lines = text.split("\n")
    if len(lines) <= max_lines:
        return text
    return "\n".join(lines[:max_lines]) + "\n....\n"
