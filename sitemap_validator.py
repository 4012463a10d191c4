"""Schema validation of written sitemaps.

Documents are checked with lxml against the sitemaps.org schemas for
``urlset`` and ``sitemapindex`` documents. Extension elements (news, video,
xhtml) are accepted wherever the protocol allows foreign elements but are
not checked against their own schemas.
"""

import functools
import gzip
import logging
from pathlib import Path
from typing import Union

from lxml import etree

from sitemap_errors import ValidationError
from sitemap_sinks import GZIP_SUFFIX

logger = logging.getLogger(__name__)

SITEMAP_XSD = """\
<?xml version="1.0" encoding="UTF-8"?>
<xsd:schema xmlns:xsd="http://www.w3.org/2001/XMLSchema"
            targetNamespace="http://www.sitemaps.org/schemas/sitemap/0.9"
            xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"
            elementFormDefault="qualified">
  <xsd:element name="urlset">
    <xsd:complexType>
      <xsd:sequence>
        <xsd:any namespace="##other" processContents="lax" minOccurs="0" maxOccurs="unbounded"/>
        <xsd:element ref="url" minOccurs="0" maxOccurs="unbounded"/>
      </xsd:sequence>
    </xsd:complexType>
  </xsd:element>
  <xsd:element name="url">
    <xsd:complexType>
      <xsd:sequence>
        <xsd:element name="loc" type="tLoc"/>
        <xsd:element name="lastmod" type="tLastmod" minOccurs="0"/>
        <xsd:element name="changefreq" type="tChangeFreq" minOccurs="0"/>
        <xsd:element name="priority" type="tPriority" minOccurs="0"/>
        <xsd:any namespace="##other" processContents="lax" minOccurs="0" maxOccurs="unbounded"/>
      </xsd:sequence>
    </xsd:complexType>
  </xsd:element>
  <xsd:simpleType name="tLoc">
    <xsd:restriction base="xsd:anyURI">
      <xsd:minLength value="12"/>
      <xsd:maxLength value="2048"/>
    </xsd:restriction>
  </xsd:simpleType>
  <xsd:simpleType name="tMinute">
    <xsd:restriction base="xsd:string">
      <xsd:pattern value="\\d{4}-\\d{2}-\\d{2}T\\d{2}:\\d{2}(Z|[+\\-]\\d{2}:\\d{2})"/>
    </xsd:restriction>
  </xsd:simpleType>
  <xsd:simpleType name="tLastmod">
    <xsd:union memberTypes="xsd:date xsd:dateTime xsd:gYearMonth xsd:gYear tMinute"/>
  </xsd:simpleType>
  <xsd:simpleType name="tChangeFreq">
    <xsd:restriction base="xsd:string">
      <xsd:enumeration value="always"/>
      <xsd:enumeration value="hourly"/>
      <xsd:enumeration value="daily"/>
      <xsd:enumeration value="weekly"/>
      <xsd:enumeration value="monthly"/>
      <xsd:enumeration value="yearly"/>
      <xsd:enumeration value="never"/>
    </xsd:restriction>
  </xsd:simpleType>
  <xsd:simpleType name="tPriority">
    <xsd:restriction base="xsd:decimal">
      <xsd:minInclusive value="0.0"/>
      <xsd:maxInclusive value="1.0"/>
    </xsd:restriction>
  </xsd:simpleType>
</xsd:schema>
"""

SITEINDEX_XSD = """\
<?xml version="1.0" encoding="UTF-8"?>
<xsd:schema xmlns:xsd="http://www.w3.org/2001/XMLSchema"
            targetNamespace="http://www.sitemaps.org/schemas/sitemap/0.9"
            xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"
            elementFormDefault="qualified">
  <xsd:element name="sitemapindex">
    <xsd:complexType>
      <xsd:sequence>
        <xsd:element ref="sitemap" minOccurs="0" maxOccurs="unbounded"/>
      </xsd:sequence>
    </xsd:complexType>
  </xsd:element>
  <xsd:element name="sitemap">
    <xsd:complexType>
      <xsd:sequence>
        <xsd:element name="loc" type="tLoc"/>
        <xsd:element name="lastmod" type="tLastmod" minOccurs="0"/>
        <xsd:any namespace="##other" processContents="lax" minOccurs="0" maxOccurs="unbounded"/>
      </xsd:sequence>
    </xsd:complexType>
  </xsd:element>
  <xsd:simpleType name="tLoc">
    <xsd:restriction base="xsd:anyURI">
      <xsd:minLength value="12"/>
      <xsd:maxLength value="2048"/>
    </xsd:restriction>
  </xsd:simpleType>
  <xsd:simpleType name="tMinute">
    <xsd:restriction base="xsd:string">
      <xsd:pattern value="\\d{4}-\\d{2}-\\d{2}T\\d{2}:\\d{2}(Z|[+\\-]\\d{2}:\\d{2})"/>
    </xsd:restriction>
  </xsd:simpleType>
  <xsd:simpleType name="tLastmod">
    <xsd:union memberTypes="xsd:date xsd:dateTime xsd:gYearMonth xsd:gYear tMinute"/>
  </xsd:simpleType>
</xsd:schema>
"""

Source = Union[str, bytes, Path]


@functools.lru_cache(maxsize=None)
def _schema(xsd: str) -> etree.XMLSchema:
    return etree.XMLSchema(etree.fromstring(xsd.encode('utf-8')))


def _read(source: Source) -> bytes:
    if isinstance(source, Path):
        if source.name.endswith(GZIP_SUFFIX):
            with gzip.open(source, 'rb') as f:
                return f.read()
        return source.read_bytes()
    if isinstance(source, str):
        return source.encode('utf-8')
    return source


def _validate(source: Source, xsd: str, kind: str) -> None:
    where = f" {source}" if isinstance(source, Path) else ''
    try:
        document = etree.fromstring(_read(source))
        _schema(xsd).assertValid(document)
    except (etree.XMLSyntaxError, etree.DocumentInvalid) as e:
        logger.error(f"Invalid {kind}{where}: {e}")
        raise ValidationError(f"Invalid {kind}{where}: {e}") from e
    logger.info(f"Validated {kind}{where}")


def validate_web_sitemap(source: Source) -> None:
    """Validate a ``urlset`` document.

    Args:
        source: XML text or bytes, or the Path of a (possibly gzipped) file.

    Raises:
        ValidationError: If the document is malformed or breaks the schema.
    """
    _validate(source, SITEMAP_XSD, 'sitemap')


def validate_sitemap_index(source: Source) -> None:
    """Validate a ``sitemapindex`` document.

    Args:
        source: XML text or bytes, or the Path of a (possibly gzipped) file.

    Raises:
        ValidationError: If the document is malformed or breaks the schema.
    """
    _validate(source, SITEINDEX_XSD, 'sitemap index')
