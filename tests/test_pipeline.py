"""
Load Pipeline and Document Validation Tests

Run with: pytest tests/test_pipeline.py -v
"""

import pytest
from lxml import etree

from docprofile_core import (
    DiagnosticsCollector,
    Keys,
    SchemaVersionEntry,
    SchemaVersionRegistry,
    Severity,
    canonical_format,
    load_document,
    node_name,
    validate_document,
)
from docprofile_core.loading import pipeline
from docprofile_core.schema import FormalSchemaIssue

from conftest import NS_CURRENT, NS_DRAFT, NS_OLD


def service_list(namespace, body="<Name>n</Name>", attrs=' version="1"'):
    return f'<ServiceList xmlns="{namespace}"{attrs}>{body}</ServiceList>'


def codes(diagnostics):
    return [d.code for d in diagnostics]


class StubValidator:
    """Formal schema validator returning canned issues."""

    def __init__(self, issues=None, error=None):
        self.issues = issues or []
        self.error = error
        self.calls = 0

    def validate(self, root, schema):
        self.calls += 1
        if self.error:
            raise self.error
        return self.issues


class TestLoadDocument:
    """Tests for load_document()."""

    def test_malformed_is_fatal(self, collector):
        """Unparseable text gives fatal diagnostics and no bound text."""
        assert load_document("<a><b></a>", collector) is None
        assert collector.has_fatal
        assert set(codes(collector.fatals)) == {"LD-1"}
        assert collector.fatals[0].message.startswith("Raw XML parsing failed:")
        assert collector.counts()["fatal"][Keys.MALFORMED_XML] == len(collector.fatals)
        assert collector.source_lines == []

    def test_empty_text_is_fatal(self, collector):
        """An empty document cannot be loaded."""
        assert load_document("", collector) is None
        assert collector.has_fatal

    def test_binds_canonical_text(self, collector):
        """The canonical text, not the input, is bound for annotation."""
        root = load_document("<a><b>x</b><c/></a>", collector)
        assert root is not None
        assert [line.value for line in collector.source_lines] == \
            ["<a>", "  <b>x</b>", "  <c/>", "</a>", ""]
        assert root[1].sourceline == 3

    def test_line_numbers_independent_of_layout(self):
        """Differently indented copies of a document share line numbers."""
        compact = '<a x="1"><b>x</b><c><d/></c></a>'
        spread = '<?xml version="1.0" encoding="UTF-8"?>\n<a   x="1">\n\n    <b>x</b>\n\t<c>\n<d/>   </c>\n</a>\n'
        first, second = DiagnosticsCollector(), DiagnosticsCollector()
        root_a = load_document(compact, first)
        root_b = load_document(spread, second)
        assert [line.value for line in first.source_lines] == \
            [line.value for line in second.source_lines]
        assert root_a[1][0].sourceline == root_b[1][0].sourceline == 4

    def test_bytes_input(self, collector):
        """Encoded input is accepted."""
        root = load_document('<?xml version="1.0" encoding="UTF-8"?><a>é</a>'.encode("utf-8"), collector)
        assert root is not None and root.text == "é"

    def test_custom_indent(self, collector):
        """The canonical indentation unit is configurable."""
        load_document("<a><b/></a>", collector, indent="    ")
        assert collector.source_line(2) == "    <b/>"

    def test_reformat_failure_is_fatal(self, collector, monkeypatch):
        """A failed canonical reformat is fatal and binds nothing."""
        def broken_format(document, indent):
            raise TypeError("cannot serialise")

        monkeypatch.setattr(pipeline, "canonical_format", broken_format)
        assert load_document("<a><b/></a>", collector) is None
        assert codes(collector.fatals) == ["LD-2"]
        assert collector.source_lines == []

    def test_reparse_failure_keeps_canonical_text(self, collector, monkeypatch):
        """A failed reparse is fatal but the canonical text stays bound."""
        original_parse = pipeline._parse
        calls = []

        def parse_once(text, remove_blank_text=False):
            calls.append(text)
            if len(calls) > 1:
                raise ValueError("reparse failed")
            return original_parse(text, remove_blank_text)

        monkeypatch.setattr(pipeline, "_parse", parse_once)
        assert load_document("<a><b/></a>", collector) is None
        assert codes(collector.fatals) == ["LD-11"]
        assert [line.value for line in collector.source_lines] == ["<a>", "  <b/>", "</a>", ""]

    def test_canonical_format(self):
        """canonical_format re-indents a parsed tree."""
        root = etree.fromstring("<a><b/></a>")
        assert canonical_format(root) == "<a>\n  <b/>\n</a>\n"


class TestValidateDocument:
    """Tests for validate_document()."""

    def test_valid_document(self, collector, registry):
        """A valid current document produces no findings."""
        root = validate_document(service_list(NS_CURRENT), registry, collector,
                                 expected_root="ServiceList")
        assert node_name(root) == ("ServiceList", NS_CURRENT)
        assert collector.is_valid
        assert collector.num_warnings() == 0

    def test_schema_error_anchored_at_line(self, collector, registry):
        """Formal schema errors carry the canonical line they refer to."""
        text = service_list(NS_CURRENT, body="<Name>n</Name><Service></Service>")
        root = validate_document(text, registry, collector)
        assert root is not None
        assert codes(collector.errors) == ["DV-5:r2"]
        error = collector.errors[0]
        assert error.line == 3
        assert error.fragments[0].text == "  <Service/>"
        assert error.message.startswith("Element <Service>")
        assert "{" not in error.message
        assert collector.counts()["error"] == {Keys.XSD_VALIDATION: 1}
        assert collector.source_lines[2].annotations[0].startswith("(E) DV-5:r2: Element <Service>")

    def test_missing_attribute_from_schema(self, collector, registry):
        """A schema-required attribute is reported at the root line."""
        validate_document(service_list(NS_CURRENT, attrs=""), registry, collector)
        assert codes(collector.errors) == ["DV-5:r2"]
        assert collector.errors[0].line == 1

    def test_wrong_root(self, collector, registry):
        """An unexpected root element stops checking."""
        text = f'<Other xmlns="{NS_CURRENT}"/>'
        assert validate_document(text, registry, collector, expected_root="ServiceList") is None
        assert codes(collector.errors) == ["DV-4"]
        assert collector.errors[0].message == "Root element is not <ServiceList>"

    def test_no_namespace(self, collector, registry):
        """A root without a namespace cannot select a schema."""
        text = '<ServiceList version="1"><Name>n</Name></ServiceList>'
        assert validate_document(text, registry, collector, expected_root="ServiceList") is None
        assert codes(collector.errors) == ["DV-3"]
        assert collector.errors[0].line == 1

    def test_unsupported_namespace_is_fatal(self, collector, registry):
        """An unknown namespace ends the run with a fatal diagnostic."""
        assert validate_document(service_list("urn:unknown"), registry, collector) is None
        assert codes(collector.fatals) == ["DV-10"]
        assert collector.fatals[0].message == 'Unsupported namespace "urn:unknown"'
        assert collector.num_errors() == 0

    def test_malformed_uses_load_code(self, collector, registry):
        """Parse failures are reported under the load code."""
        assert validate_document("<ServiceList>", registry, collector, "SL001", load_code="SL000") is None
        assert set(codes(collector.fatals)) == {"SL000-1"}

    def test_old_schema(self, collector, registry):
        """An old schema version is reported as an error."""
        root = validate_document(service_list(NS_OLD), registry, collector, "SL001")
        assert root is not None
        assert codes(collector.errors) == ["SL001-5:a"]
        assert collector.errors[0].line == 1

    def test_old_schema_as_warning(self, collector, registry):
        """The old schema severity can be lowered to a warning."""
        validate_document(service_list(NS_OLD), registry, collector, old_severity=Severity.WARNING)
        assert collector.num_errors() == 0
        assert codes(collector.warnings) == ["DV-5:a"]

    def test_draft_schema(self, collector, registry):
        """A draft schema version is reported as a warning."""
        validate_document(service_list(NS_DRAFT), registry, collector)
        assert collector.num_errors() == 0
        assert codes(collector.warnings) == ["DV-5:b"]

    def test_schema_version_reporting_disabled(self, collector, registry):
        """Lifecycle reporting can be switched off."""
        validate_document(service_list(NS_OLD), registry, collector, report_schema_version=False)
        assert collector.is_valid
        assert collector.num_warnings() == 0

    def test_no_schema_loaded(self, collector):
        """An entry without a formal schema is traced at debug level only."""
        registry = SchemaVersionRegistry([SchemaVersionEntry(NS_CURRENT, 2)]).freeze()
        root = validate_document(service_list(NS_CURRENT, attrs=""), registry, collector)
        assert root is not None
        assert codes(collector.debugs) == ["LS001"]
        assert collector.is_valid

    def test_custom_validator(self, collector, registry):
        """Issues from an injected validator are forwarded unchanged."""
        validator = StubValidator([FormalSchemaIssue("something is wrong", 2)])
        validate_document(service_list(NS_CURRENT), registry, collector, validator=validator)
        assert validator.calls == 1
        assert codes(collector.errors) == ["DV-5:r2"]
        assert collector.errors[0].message == "something is wrong"
        assert collector.errors[0].fragments[0].text == "  <Name>n</Name>"

    def test_validator_failure_is_traced(self, collector, registry):
        """A validator that cannot run is traced, not raised."""
        validator = StubValidator(error=ValueError("broken"))
        root = validate_document(service_list(NS_CURRENT), registry, collector, validator=validator)
        assert root is not None
        assert codes(collector.debugs) == ["LS000"]
        assert collector.is_valid

    @pytest.mark.parametrize("namespace,expected", [(NS_CURRENT, "r2"), (NS_OLD, "r1")])
    def test_error_code_names_spec_version(self, collector, registry, namespace, expected):
        """Formal schema codes carry the revision label of the namespace."""
        validate_document(service_list(namespace, attrs=""), registry, collector,
                          report_schema_version=False)
        assert codes(collector.errors) == [f"DV-5:{expected}"]
