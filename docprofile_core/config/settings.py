"""
Configuration Settings
======================

Configuration dataclasses for document validation: the supported schema
versions, diagnostics behaviour, canonical formatting and logging.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
import json
import logging

import yaml

from docprofile_core.diagnostics.base import Severity
from docprofile_core.diagnostics.collector import DiagnosticsCollector
from docprofile_core.loading.pipeline import DEFAULT_INDENT, validate_document
from docprofile_core.schema.formal import load_schema
from docprofile_core.schema.registry import SchemaVersionRegistry
from docprofile_core.xml.utils import MAX_FRAGMENT_LINES

logger = logging.getLogger(__name__)


@dataclass
class SchemaConfig:
    """One supported schema version."""

    namespace: str = ""
    version: int = 0
    location: str = ""  # path to the .xsd/.dtd/.rng file
    status: List[str] = field(default_factory=lambda: ["current"])
    spec_version: Optional[str] = None


@dataclass
class DiagnosticsConfig:
    """Diagnostics-related configuration."""

    # show internal application errors (bugs in checkers) in the error bucket
    report_internal_errors: bool = True
    max_fragment_lines: int = MAX_FRAGMENT_LINES
    old_schema_severity: str = "error"  # "error" or "warning"
    report_schema_version: bool = True

    @property
    def old_severity(self) -> Severity:
        try:
            severity = Severity(self.old_schema_severity.lower())
        except ValueError:
            raise ValueError(f"Invalid old_schema_severity: {self.old_schema_severity!r}") from None
        if severity not in (Severity.ERROR, Severity.WARNING):
            raise ValueError(f"old_schema_severity must be 'error' or 'warning', got {self.old_schema_severity!r}")
        return severity


@dataclass
class LoadConfig:
    """Canonical formatting configuration."""

    indent: str = DEFAULT_INDENT
    error_code: str = "LD"


@dataclass
class ValidatorConfig:
    """
    Complete validator configuration.

    Example:
        config = ValidatorConfig()
        config.schemas.append(SchemaConfig(namespace="urn:example:2024", version=2,
                                           location="schemas/example_2024.xsd"))
        config.diagnostics.report_internal_errors = False
        save_config(config, Path("validator.yaml"))
    """

    schemas: List[SchemaConfig] = field(default_factory=list)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    load: LoadConfig = field(default_factory=LoadConfig)

    # General settings
    profiles_path: str = ""  # optional YAML/JSON element profile file
    log_level: str = "INFO"

    # Custom extensions
    custom: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'schemas': [asdict(schema) for schema in self.schemas],
            'diagnostics': asdict(self.diagnostics),
            'load': asdict(self.load),
            'profiles_path': self.profiles_path,
            'log_level': self.log_level,
            'custom': self.custom,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ValidatorConfig':
        """Create from dictionary."""
        config = cls()

        if 'schemas' in data:
            config.schemas = [SchemaConfig(**schema) for schema in data['schemas'] or []]
        if 'diagnostics' in data:
            config.diagnostics = DiagnosticsConfig(**data['diagnostics'])
        if 'load' in data:
            config.load = LoadConfig(**data['load'])

        if 'profiles_path' in data:
            config.profiles_path = data['profiles_path']
        if 'log_level' in data:
            config.log_level = data['log_level']
        if 'custom' in data:
            config.custom = data['custom']

        return config


def load_config(config_path: Path) -> ValidatorConfig:
    """
    Load configuration from file.

    Supports JSON and YAML formats based on file extension. Relative
    schema locations are resolved against the config file's directory.

    Args:
        config_path: Path to config file

    Returns:
        ValidatorConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is not supported
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    with open(config_path, 'r', encoding='utf-8') as f:
        if suffix in ['.yaml', '.yml']:
            data = yaml.safe_load(f)
        elif suffix == '.json':
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

    config = ValidatorConfig.from_dict(data or {})
    for schema in config.schemas:
        if schema.location and not Path(schema.location).is_absolute():
            schema.location = str(config_path.parent / schema.location)

    logger.info(f"Loaded configuration from {config_path}")
    return config


def save_config(config: ValidatorConfig, config_path: Path) -> None:
    """
    Save configuration to file.

    Supports JSON and YAML formats based on file extension.

    Args:
        config: ValidatorConfig to save
        config_path: Path to save config file

    Raises:
        ValueError: If file format is not supported
    """
    suffix = config_path.suffix.lower()
    if suffix not in ['.yaml', '.yml', '.json']:
        raise ValueError(f"Unsupported config format: {suffix}")

    data = config.to_dict()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        if suffix == '.json':
            json.dump(data, f, indent=2)
        else:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Saved configuration to {config_path}")


def get_default_config() -> ValidatorConfig:
    """Get default configuration."""
    return ValidatorConfig()


def configure_logging(config: ValidatorConfig) -> None:
    """Apply the configured log level to the root logger."""
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Invalid log level: {config.log_level!r}")
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger().setLevel(level)


def build_registry(config: ValidatorConfig,
                   loader: Optional[Callable[[Any], Any]] = load_schema) -> SchemaVersionRegistry:
    """
    Build the process-wide schema version registry at startup.

    Args:
        config: Validator configuration
        loader: Loads a schema handle from a location (None to skip loading)

    Returns:
        Frozen SchemaVersionRegistry
    """
    return SchemaVersionRegistry.from_config(
        config.schemas,
        loader=(lambda location: loader(Path(location))) if loader else None,
    )


def new_collector(config: ValidatorConfig) -> DiagnosticsCollector:
    """Create the collector for one validation run."""
    return DiagnosticsCollector(
        report_internal_errors=config.diagnostics.report_internal_errors,
        max_fragment_lines=config.diagnostics.max_fragment_lines,
    )


def validate_with_config(text: Any,
                         registry: SchemaVersionRegistry,
                         config: ValidatorConfig,
                         collector: DiagnosticsCollector,
                         error_code: str = "DV",
                         expected_root: Optional[str] = None) -> Optional[Any]:
    """
    Run validate_document() with the configured load and diagnostics options.

    Returns:
        Root element for domain-specific checking, or None
    """
    return validate_document(
        text,
        registry,
        collector,
        error_code=error_code,
        load_code=config.load.error_code,
        expected_root=expected_root,
        report_schema_version=config.diagnostics.report_schema_version,
        old_severity=config.diagnostics.old_severity,
        indent=config.load.indent,
    )
