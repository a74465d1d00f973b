"""
Schema Versions and Formal Validation
=====================================

Components:
- SchemaVersionRegistry: namespace → version, lifecycle status, formal schema
- report_lifecycle: flag outdated or draft schema usage
- LxmlSchemaValidator / schema_check: delegate to the formal schema
"""

from docprofile_core.schema.registry import (
    SCHEMA_UNKNOWN,
    LifecycleStatus,
    SchemaVersionEntry,
    SchemaVersionRegistry,
    report_lifecycle,
)

from docprofile_core.schema.formal import (
    FormalSchemaIssue,
    FormalSchemaValidator,
    LxmlSchemaValidator,
    load_schema,
    schema_check,
    schema_type,
)

__all__ = [
    "SCHEMA_UNKNOWN",
    "LifecycleStatus",
    "SchemaVersionEntry",
    "SchemaVersionRegistry",
    "report_lifecycle",
    "FormalSchemaIssue",
    "FormalSchemaValidator",
    "LxmlSchemaValidator",
    "load_schema",
    "schema_check",
    "schema_type",
]
