"""Shared fixtures for the docprofile_core test suite."""

import pytest
from lxml import etree

from docprofile_core import (
    DiagnosticsCollector,
    LifecycleStatus,
    SchemaVersionEntry,
    SchemaVersionRegistry,
)

NS_CURRENT = "urn:example:servicelist:2024"
NS_OLD = "urn:example:servicelist:2019"
NS_DRAFT = "urn:example:servicelist:2025"

XSD_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema"
           targetNamespace="{ns}" xmlns="{ns}" elementFormDefault="qualified">
  <xs:element name="ServiceList">
    <xs:complexType>
      <xs:sequence>
        <xs:element name="Name" type="xs:string" maxOccurs="unbounded"/>
        <xs:element name="Service" minOccurs="0" maxOccurs="unbounded">
          <xs:complexType>
            <xs:sequence>
              <xs:element name="ServiceName" type="xs:string"/>
            </xs:sequence>
          </xs:complexType>
        </xs:element>
      </xs:sequence>
      <xs:attribute name="version" type="xs:integer" use="required"/>
      <xs:attribute name="responseStatus" type="xs:string"/>
    </xs:complexType>
  </xs:element>
</xs:schema>
"""


def make_schema(namespace):
    """Build an lxml XMLSchema for the test service list format."""
    return etree.XMLSchema(etree.fromstring(XSD_TEMPLATE.format(ns=namespace).encode("utf-8")))


@pytest.fixture
def collector():
    """Fresh collector per test."""
    return DiagnosticsCollector()


@pytest.fixture
def registry():
    """Frozen registry with a current, an old and a draft schema version."""
    return SchemaVersionRegistry([
        SchemaVersionEntry(NS_CURRENT, 2, schema=make_schema(NS_CURRENT),
                           status=LifecycleStatus.CURRENT, spec_version="r2"),
        SchemaVersionEntry(NS_OLD, 1, schema=make_schema(NS_OLD),
                           status=LifecycleStatus.OLD, spec_version="r1"),
        SchemaVersionEntry(NS_DRAFT, 3, schema=make_schema(NS_DRAFT),
                           status=LifecycleStatus.DRAFT, spec_version="r3"),
    ]).freeze()
