"""
Profile Checking
================

Declarative restrictions layered on top of the formal schema.

Components:
- ChildSpec / AttributeSpec: allow-lists supplied per call site
- check_children / check_attributes: the structural and attribute checkers
- ElementProfile / load_profiles: profiles kept in YAML or JSON files
"""

from docprofile_core.profile.specs import (
    UNBOUNDED,
    AttributeSpec,
    ChildSpec,
)

from docprofile_core.profile.checker import (
    check_attributes,
    check_children,
)

from docprofile_core.profile.definitions import (
    ElementProfile,
    load_profiles,
    save_profiles,
)

__all__ = [
    "UNBOUNDED",
    "AttributeSpec",
    "ChildSpec",
    "check_attributes",
    "check_children",
    "ElementProfile",
    "load_profiles",
    "save_profiles",
]
