"""
Schema Version Registry
=======================

Maps a document namespace to the schema version it identifies, the
lifecycle status of that version and the loaded formal schema.

The registry is built once at startup, frozen, and passed explicitly
into each validation run. Nothing mutates it afterwards, so concurrent
runs may call :meth:`SchemaVersionRegistry.resolve` without locking.

Example:
    registry = SchemaVersionRegistry([
        SchemaVersionEntry("urn:dvb:metadata:servicediscovery:2024", 7,
                           schema=load_schema(xsd_r7), status=LifecycleStatus.DRAFT),
        SchemaVersionEntry("urn:dvb:metadata:servicediscovery:2022b", 6,
                           schema=load_schema(xsd_r6), status=LifecycleStatus.CURRENT),
    ]).freeze()

    entry = registry.resolve(root_namespace)
    if entry is None:
        ...  # unsupported namespace, stop checking this document
"""

from dataclasses import dataclass, field
from enum import IntFlag
from typing import Any, Callable, Dict, Iterable, Iterator, Optional
import logging

from docprofile_core.diagnostics.base import Diagnostic, Fragment, Keys, Severity
from docprofile_core.diagnostics.collector import DiagnosticsCollector

logger = logging.getLogger(__name__)

SCHEMA_UNKNOWN = -1


class LifecycleStatus(IntFlag):
    """Publication state of a schema version; bits are independent."""
    NONE = 0
    DRAFT = 0x01
    OLD = 0x02
    LEGACY_STANDARD = 0x04
    CURRENT = 0x08

    @classmethod
    def parse(cls, names: Iterable[str]) -> 'LifecycleStatus':
        """
        Combine status names such as ``["old", "legacy_standard"]``.

        Raises:
            ValueError: If a name is not a known status
        """
        status = cls.NONE
        for name in names:
            try:
                status |= cls[str(name).strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown lifecycle status: {name!r}") from None
        return status

    def names(self) -> list:
        return [member.name.lower() for member in LifecycleStatus
                if member is not LifecycleStatus.NONE and member in self]


@dataclass(frozen=True)
class SchemaVersionEntry:
    """
    One supported schema version.

    Attributes:
        namespace: Namespace URI that identifies the version (unique key)
        version: Ordinal of the version, higher is newer
        schema: Formal schema handle (e.g. an ``etree.XMLSchema``)
        status: Lifecycle status bits
        spec_version: Display label of the specification revision
        location: Where the schema was loaded from, for diagnostics
    """
    namespace: str
    version: int
    schema: Any = field(default=None, compare=False, repr=False)
    status: LifecycleStatus = LifecycleStatus.CURRENT
    spec_version: Optional[str] = None
    location: Optional[str] = None


class SchemaVersionRegistry:
    """Namespace-keyed table of supported schema versions."""

    def __init__(self, entries: Iterable[SchemaVersionEntry] = ()):
        self._entries: Dict[str, SchemaVersionEntry] = {}
        self._frozen = False
        for entry in entries:
            self.register(entry)

    def register(self, entry: SchemaVersionEntry) -> None:
        """
        Add a schema version.

        Registering an equal entry again is a no-op.

        Raises:
            ValueError: If a different entry is already registered for the namespace
            RuntimeError: If the registry has been frozen
        """
        if self._frozen:
            raise RuntimeError("Schema version registry is frozen; register entries at startup")

        existing = self._entries.get(entry.namespace)
        if existing is not None:
            if existing == entry:
                logger.debug(f"Schema version already registered: {entry.namespace}")
                return
            logger.warning(f"Conflicting registration for namespace {entry.namespace}")
            raise ValueError(
                f"Namespace {entry.namespace!r} is already registered as version {existing.version}"
            )

        self._entries[entry.namespace] = entry
        logger.debug(f"Registered schema version {entry.version} for {entry.namespace}")

    def freeze(self) -> 'SchemaVersionRegistry':
        """Disallow further registration; returns the registry."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def resolve(self, namespace: Optional[str]) -> Optional[SchemaVersionEntry]:
        """Entry for *namespace*, or None if the namespace is not supported."""
        if not namespace:
            return None
        return self._entries.get(namespace)

    def version_of(self, namespace: Optional[str]) -> int:
        """Version ordinal for *namespace*, or SCHEMA_UNKNOWN."""
        entry = self.resolve(namespace)
        return entry.version if entry else SCHEMA_UNKNOWN

    def spec_version_of(self, namespace: Optional[str]) -> str:
        """Specification revision label for *namespace*, or "r?"."""
        entry = self.resolve(namespace)
        if entry is None:
            return "r?"
        return entry.spec_version or f"r{entry.version}"

    def __contains__(self, namespace: object) -> bool:
        return namespace in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[SchemaVersionEntry]:
        """Entries from the newest version to the oldest."""
        return iter(sorted(self._entries.values(), key=lambda e: e.version, reverse=True))

    @classmethod
    def from_config(cls, schema_configs: Iterable[Any],
                    loader: Optional[Callable[[Any], Any]] = None) -> 'SchemaVersionRegistry':
        """
        Build and freeze a registry from configuration.

        Args:
            schema_configs: Objects with ``namespace``, ``version``,
                ``location``, ``status`` (list of names) and ``spec_version``
            loader: Turns a location into a schema handle; when omitted the
                entries carry no schema

        Returns:
            Frozen registry
        """
        registry = cls()
        for cfg in schema_configs:
            schema = loader(cfg.location) if loader and cfg.location else None
            registry.register(SchemaVersionEntry(
                namespace=cfg.namespace,
                version=cfg.version,
                schema=schema,
                status=LifecycleStatus.parse(cfg.status),
                spec_version=cfg.spec_version,
                location=str(cfg.location) if cfg.location else None,
            ))
        logger.info(f"Schema version registry ready with {len(registry)} namespace(s)")
        return registry.freeze()


def report_lifecycle(entry: SchemaVersionEntry,
                     collector: DiagnosticsCollector,
                     code_prefix: str,
                     line: Optional[int] = None,
                     old_severity: Severity = Severity.ERROR) -> None:
    """
    Report use of a schema version that is not the current formal one.

    The OLD and DRAFT bits are checked independently, so both may fire.

    Args:
        entry: Resolved schema version of the document
        collector: Receives the diagnostics
        code_prefix: Prefix for the codes ("a" is appended for out of date,
            "b" for draft)
        line: Line of the document's root element, if known
        old_severity: Severity used for an out of date schema
    """
    fragments = [Fragment.at_line(line)] if line is not None else []

    if entry.status & LifecycleStatus.OLD:
        collector.record(Diagnostic(
            code=f"{code_prefix}a",
            message="schema version is out of date",
            severity=old_severity,
            fragments=list(fragments),
            key=Keys.SCHEMA_VERSION,
        ))
    if entry.status & LifecycleStatus.DRAFT:
        collector.record(Diagnostic(
            code=f"{code_prefix}b",
            message="schema is in draft status",
            severity=Severity.WARNING,
            fragments=list(fragments),
            key=Keys.SCHEMA_VERSION,
        ))
