"""
Configuration Management
========================

Configuration utilities for document validation.
"""

from docprofile_core.config.settings import (
    ValidatorConfig,
    SchemaConfig,
    DiagnosticsConfig,
    LoadConfig,
    load_config,
    save_config,
    get_default_config,
    configure_logging,
    build_registry,
    new_collector,
    validate_with_config,
)

__all__ = [
    "ValidatorConfig",
    "SchemaConfig",
    "DiagnosticsConfig",
    "LoadConfig",
    "load_config",
    "save_config",
    "get_default_config",
    "configure_logging",
    "build_registry",
    "new_collector",
    "validate_with_config",
]
