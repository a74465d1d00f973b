"""
DocProfile Core Library
=======================

Validation of XML documents against two layered schemas: an external
formal schema (XSD, DTD or RelaxNG, checked by lxml) and a declarative
profile that narrows what the formal schema allows.

- Diagnostics collection with line-anchored annotations
- Child element / attribute profile checks with cardinality
- Schema version registry with lifecycle (draft/old) reporting
- Canonical load pipeline with reproducible line numbers

Architecture
------------

    docprofile_core/
    ├── xml/           - Namespace-insensitive naming and navigation
    ├── diagnostics/   - Severity, Diagnostic, DiagnosticsCollector
    ├── profile/       - ChildSpec/AttributeSpec checkers, YAML profiles
    ├── schema/        - Schema version registry, formal schema delegation
    ├── loading/       - Parse → canonical reformat → reparse → bind
    └── config/        - Configuration management

Usage
-----

    from docprofile_core import (
        DiagnosticsCollector, ChildSpec, UNBOUNDED,
        check_children, validate_document,
    )
    from docprofile_core.config import load_config, build_registry

    config = load_config(Path("validator.yaml"))
    registry = build_registry(config)          # once, at startup

    collector = DiagnosticsCollector()         # once per document
    root = validate_document(text, registry, collector, "SL001",
                             expected_root="ServiceList")
    if root is not None:
        check_children(root, [ChildSpec("Name", 1, UNBOUNDED)],
                       ["Name", "ProviderName"], False, collector, "SL020")
    print(collector.summary())

"""

__version__ = "1.0.0"

from docprofile_core.diagnostics import (
    Diagnostic,
    DiagnosticsCollector,
    Fragment,
    Keys,
    LongDescription,
    Severity,
)

from docprofile_core.profile import (
    UNBOUNDED,
    AttributeSpec,
    ChildSpec,
    ElementProfile,
    check_attributes,
    check_children,
    load_profiles,
)

from docprofile_core.schema import (
    LifecycleStatus,
    LxmlSchemaValidator,
    SchemaVersionEntry,
    SchemaVersionRegistry,
    load_schema,
    report_lifecycle,
    schema_check,
)

from docprofile_core.loading import (
    canonical_format,
    load_document,
    validate_document,
)

from docprofile_core.xml import (
    NodeName,
    local_name_matches,
    node_name,
)

__all__ = [
    # Version
    "__version__",
    # Diagnostics
    "Diagnostic",
    "DiagnosticsCollector",
    "Fragment",
    "Keys",
    "LongDescription",
    "Severity",
    # Profile
    "UNBOUNDED",
    "AttributeSpec",
    "ChildSpec",
    "ElementProfile",
    "check_attributes",
    "check_children",
    "load_profiles",
    # Schema
    "LifecycleStatus",
    "LxmlSchemaValidator",
    "SchemaVersionEntry",
    "SchemaVersionRegistry",
    "load_schema",
    "report_lifecycle",
    "schema_check",
    # Loading
    "canonical_format",
    "load_document",
    "validate_document",
    # XML
    "NodeName",
    "local_name_matches",
    "node_name",
]
