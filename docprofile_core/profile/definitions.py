"""
Profile Definitions
===================

Declarative element profiles that bundle the child and attribute
allow-lists of one element, so a document type's profile can be kept in
a YAML or JSON file instead of being spelled out at every call site.

File format (YAML):

    ServiceList:
      children:
        - {name: Name, max: unbounded}
        - {name: ProviderName, max: unbounded}
        - {name: LCNTableList, min: 0}
      base_schema_children: [Name, ProviderName, LCNTableList, ContentGuideSource]
      allow_foreign_children: false
      attributes:
        required: [version]
        optional: [lang]
        base_schema_defined: [version, lang, responseStatus]
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
import json
import logging

import yaml

from docprofile_core.diagnostics.collector import DiagnosticsCollector
from docprofile_core.profile.checker import check_attributes, check_children
from docprofile_core.profile.specs import UNBOUNDED, AttributeSpec, ChildSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElementProfile:
    """
    Profile of a single element type.

    Attributes:
        element: Local name of the element the profile applies to
        children: Permitted children with cardinality
        base_schema_children: Children the formal schema defines
        allow_foreign_children: Permit children unknown to profile and schema
        attributes: Attribute allow-list, or None to skip attribute checks
    """
    element: str
    children: Tuple[ChildSpec, ...] = ()
    base_schema_children: Tuple[str, ...] = ()
    allow_foreign_children: bool = False
    attributes: Optional[AttributeSpec] = None

    def check(self, element: Any, collector: DiagnosticsCollector, error_code: str) -> bool:
        """
        Apply the profile to *element*.

        Attribute diagnostics use the code prefix ``{error_code}A`` so they
        stay distinguishable from the child-element diagnostics.

        Returns:
            Result of the child check
        """
        ok = check_children(element, self.children, self.base_schema_children,
                            self.allow_foreign_children, collector, error_code)
        if self.attributes is not None:
            check_attributes(element, self.attributes.required, self.attributes.optional,
                             self.attributes.base_schema_defined, collector, f"{error_code}A")
        return ok

    @classmethod
    def from_dict(cls, element: str, data: Dict[str, Any]) -> 'ElementProfile':
        """Create from dictionary."""
        children = tuple(_child_spec(element, entry) for entry in data.get('children', []) or [])
        attributes = None
        if data.get('attributes') is not None:
            attrs = data['attributes']
            attributes = AttributeSpec.of(
                attrs.get('required', []) or [],
                attrs.get('optional', []) or [],
                attrs.get('base_schema_defined', []) or [],
            )
        return cls(
            element=element,
            children=children,
            base_schema_children=tuple(data.get('base_schema_children', []) or []),
            allow_foreign_children=bool(data.get('allow_foreign_children', False)),
            attributes=attributes,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data: Dict[str, Any] = {
            'children': [
                {
                    'name': spec.name,
                    'min': spec.min_occurs,
                    'max': 'unbounded' if spec.max_occurs == UNBOUNDED else int(spec.max_occurs),
                }
                for spec in self.children
            ],
            'base_schema_children': list(self.base_schema_children),
            'allow_foreign_children': self.allow_foreign_children,
        }
        if self.attributes is not None:
            data['attributes'] = {
                'required': list(self.attributes.required),
                'optional': list(self.attributes.optional),
                'base_schema_defined': list(self.attributes.base_schema_defined),
            }
        return data


def _child_spec(element: str, entry: Any) -> ChildSpec:
    if isinstance(entry, str):
        return ChildSpec(entry)
    if not isinstance(entry, dict) or 'name' not in entry:
        raise ValueError(f"Invalid child entry in profile for {element}: {entry!r}")
    upper = entry.get('max', 1)
    if isinstance(upper, str):
        if upper.lower() != 'unbounded':
            raise ValueError(f"Invalid max for {element}/{entry['name']}: {upper!r}")
        upper = UNBOUNDED
    return ChildSpec(entry['name'], int(entry.get('min', 1)), upper)


def load_profiles(profile_path: Path) -> Dict[str, ElementProfile]:
    """
    Load element profiles from file.

    Supports JSON and YAML formats based on file extension.

    Args:
        profile_path: Path to profile file

    Returns:
        Mapping of element local name to ElementProfile

    Raises:
        FileNotFoundError: If the profile file doesn't exist
        ValueError: If the format is unsupported or an entry is malformed
    """
    if not profile_path.exists():
        raise FileNotFoundError(f"Profile file not found: {profile_path}")

    suffix = profile_path.suffix.lower()

    with open(profile_path, 'r', encoding='utf-8') as f:
        if suffix in ['.yaml', '.yml']:
            data = yaml.safe_load(f)
        elif suffix == '.json':
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported profile format: {suffix}")

    if not isinstance(data, dict):
        raise ValueError(f"Profile file must contain a mapping: {profile_path}")

    profiles = {name: ElementProfile.from_dict(name, body or {}) for name, body in data.items()}
    logger.info(f"Loaded {len(profiles)} element profile(s) from {profile_path}")
    return profiles


def save_profiles(profiles: Dict[str, ElementProfile], profile_path: Path) -> None:
    """
    Save element profiles to file (JSON or YAML by extension).

    Raises:
        ValueError: If file format is not supported
    """
    suffix = profile_path.suffix.lower()
    if suffix not in ['.yaml', '.yml', '.json']:
        raise ValueError(f"Unsupported profile format: {suffix}")

    data = {name: profile.to_dict() for name, profile in profiles.items()}

    profile_path.parent.mkdir(parents=True, exist_ok=True)

    with open(profile_path, 'w', encoding='utf-8') as f:
        if suffix == '.json':
            json.dump(data, f, indent=2)
        else:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Saved {len(profiles)} element profile(s) to {profile_path}")
