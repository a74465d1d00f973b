"""
Document Loading
================

Parse → canonical reformat → reparse → bind source, plus the top-level
document validation entry point.
"""

from docprofile_core.loading.pipeline import (
    DEFAULT_INDENT,
    LoadStage,
    canonical_format,
    load_document,
    validate_document,
)

__all__ = [
    "DEFAULT_INDENT",
    "LoadStage",
    "canonical_format",
    "load_document",
    "validate_document",
]
