"""
KML codec.

Reads every Placemark of a KML document, however deeply it is nested in
Document/Folder containers, into model Features, and writes Features back
out as a single KML Document.

KML coordinate text is ``lon,lat[,alt]``; altitude is dropped on read and
never written, so longitude/latitude pass through in the same order the
model stores them.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from lxml import etree

from geoconvert.core.errors import FormatError, UnsupportedGeometryError
from geoconvert.core.geometry import (
    Collection,
    Coordinate,
    Feature,
    Geometry,
    LineString,
    Point,
    Polygon,
    Ring,
)

logger = logging.getLogger(__name__)

KML_NAMESPACE = "http://www.opengis.net/kml/2.2"
FILE_TYPE = "KML"

CONTAINER_ELEMENTS = frozenset({"kml", "Document", "Folder"})

# Every KML geometry element; only the first four have a model mapping.
GEOMETRY_ELEMENTS = frozenset(
    {
        "Point",
        "LineString",
        "Polygon",
        "MultiGeometry",
        "LinearRing",
        "Model",
        "Track",
        "MultiTrack",
    }
)


def _local_name(element: etree._Element) -> Optional[str]:
    """Tag name without namespace; None for comments and processing instructions."""
    if not isinstance(element.tag, str):
        return None
    return etree.QName(element).localname


def parse_kml_coordinates(text: Optional[str]) -> List[Coordinate]:
    """
    Parse KML coordinate text into (lon, lat) pairs.

    Tuples are separated by whitespace and their members by commas;
    a third (altitude) member is ignored.

    Args:
        text: Raw text of a ``<coordinates>`` element

    Returns:
        List of (lon, lat) tuples

    Raises:
        FormatError: If the text is empty or a tuple is malformed

    Examples:
        >>> parse_kml_coordinates("-122.08,37.42,0 -122.09,37.43")
        [(-122.08, 37.42), (-122.09, 37.43)]
    """
    if not text or not text.strip():
        raise FormatError("Empty coordinate string", file_type=FILE_TYPE)

    coordinates: List[Coordinate] = []
    for part in text.split():
        values = part.split(",")
        if len(values) < 2:
            raise FormatError(
                f"Invalid coordinate format: {part} (need at least lon,lat)",
                file_type=FILE_TYPE,
            )
        try:
            coordinates.append((float(values[0]), float(values[1])))
        except ValueError as e:
            raise FormatError(f"Failed to parse coordinate: {part}", file_type=FILE_TYPE) from e

    return coordinates


def format_kml_coordinates(coords: Iterable[Coordinate]) -> str:
    """Format (lon, lat) pairs as KML coordinate text without loss of precision."""
    return " ".join(f"{x!r},{y!r}" for x, y in coords)


class KMLReader:
    """
    Decode a KML document into Features.

    Handles:
    - Arbitrarily nested Document and Folder containers
    - Point, LineString, Polygon (with holes) and MultiGeometry
    - ExtendedData Data and SchemaData/SimpleData attributes
    """

    def __init__(self, source: Optional[str] = None) -> None:
        """
        Initialize KML reader.

        Args:
            source: Name of the input, used in error messages
        """
        self.source = source
        self.namespace = ""

    def read(self, data: bytes) -> List[Feature]:
        """
        Parse KML bytes.

        Args:
            data: Raw KML document

        Returns:
            One Feature per Placemark that carries a geometry

        Raises:
            FormatError: If the payload is not well-formed KML
            UnsupportedGeometryError: If a Placemark uses a geometry with no
                model mapping
        """
        root = self._parse_root(data)

        features: List[Feature] = []
        for placemark in self.iter_placemarks(root):
            feature = self._parse_placemark(placemark)
            if feature is not None:
                features.append(feature)

        logger.info(f"Decoded {len(features)} KML placemark(s){self._in()}")
        return features

    def iter_placemarks(self, element: etree._Element) -> Iterator[etree._Element]:
        """
        Yield every Placemark below ``element`` in document order.

        Walks container elements recursively; each call starts a fresh walk.
        """
        for child in element:
            name = _local_name(child)
            if name == "Placemark":
                yield child
            elif name in CONTAINER_ELEMENTS:
                yield from self.iter_placemarks(child)

    def _parse_root(self, data: bytes) -> etree._Element:
        parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
        try:
            root = etree.fromstring(data, parser=parser)
        except etree.XMLSyntaxError as e:
            raise FormatError(
                f"Invalid XML structure{self._in()}: {e}",
                file_type=FILE_TYPE,
                source=self.source,
            ) from e

        if _local_name(root) != "kml":
            raise FormatError(
                f"Invalid root element{self._in()}: expected <kml>, got <{_local_name(root)}>",
                file_type=FILE_TYPE,
                source=self.source,
            )

        self.namespace = etree.QName(root).namespace or ""
        if self.namespace and self.namespace != KML_NAMESPACE:
            logger.debug(f"Non-standard KML namespace: {self.namespace}")
        return root

    def _tag(self, name: str) -> str:
        return f"{{{self.namespace}}}{name}" if self.namespace else name

    def _parse_placemark(self, element: etree._Element) -> Optional[Feature]:
        geometry_elem = next(
            (child for child in element if _local_name(child) in GEOMETRY_ELEMENTS), None
        )
        if geometry_elem is None:
            logger.debug("Skipping placemark without geometry")
            return None

        attributes: Dict[str, str] = {}
        name_elem = element.find(self._tag("name"))
        if name_elem is not None and name_elem.text and name_elem.text.strip():
            attributes["name"] = name_elem.text.strip()

        for key, value in self._parse_extended_data(element):
            if key == "name" and "name" in attributes:
                continue
            attributes[key] = value

        return Feature(self._parse_geometry(geometry_elem), attributes)

    def _parse_geometry(self, element: etree._Element) -> Geometry:
        geom_type = _local_name(element)

        if geom_type == "Point":
            coords = self._coordinates(element)
            x, y = coords[0]
            return Point(x, y)
        elif geom_type == "LineString":
            return LineString(self._coordinates(element))
        elif geom_type == "Polygon":
            return self._parse_polygon(element)
        elif geom_type == "MultiGeometry":
            return Collection(
                tuple(
                    self._parse_geometry(child)
                    for child in element
                    if _local_name(child) in GEOMETRY_ELEMENTS
                )
            )
        else:
            raise UnsupportedGeometryError(
                geom_type or "unknown",
                message=f"KML Geometry {geom_type} is not supported",
            )

    def _parse_polygon(self, element: etree._Element) -> Polygon:
        outer = element.find(f"{self._tag('outerBoundaryIs')}/{self._tag('LinearRing')}")
        if outer is None:
            raise FormatError(
                f"Polygon without outerBoundaryIs/LinearRing{self._in()}",
                file_type=FILE_TYPE,
                source=self.source,
            )

        holes = []
        for inner in element.findall(self._tag("innerBoundaryIs")):
            for ring in inner.findall(self._tag("LinearRing")):
                holes.append(self._coordinates(ring))

        return Polygon(self._coordinates(outer), tuple(holes))

    def _coordinates(self, element: etree._Element) -> List[Coordinate]:
        coords_elem = element.find(self._tag("coordinates"))
        text = coords_elem.text if coords_elem is not None else None
        return parse_kml_coordinates(text)

    def _parse_extended_data(self, element: etree._Element) -> Iterator[tuple]:
        extended_data = element.find(self._tag("ExtendedData"))
        if extended_data is None:
            return

        for data in extended_data.findall(self._tag("Data")):
            key = data.get("name")
            if not key:
                continue
            value_elem = data.find(self._tag("value"))
            value = value_elem.text if value_elem is not None else None
            yield key, (value or "").strip()

        for schema_data in extended_data.findall(self._tag("SchemaData")):
            for simple_data in schema_data.findall(self._tag("SimpleData")):
                key = simple_data.get("name")
                if key:
                    yield key, (simple_data.text or "").strip()

    def _in(self) -> str:
        return f" in '{self.source}'" if self.source else ""


class KMLWriter:
    """
    Encode Features as a single KML Document.

    Each Feature becomes a Placemark: the ``name`` attribute is its label and
    all other attributes go to ExtendedData.
    """

    def __init__(self, document_name: str, document_description: str) -> None:
        self.document_name = document_name
        self.document_description = document_description

    def write(self, features: List[Feature]) -> bytes:
        """
        Serialize features.

        Raises:
            UnsupportedGeometryError: For collections that are not multi-polygons
            FormatError: If a name or attribute holds characters XML cannot carry
        """
        root = etree.Element(_kml("kml"), nsmap={None: KML_NAMESPACE})
        document = etree.SubElement(root, _kml("Document"))
        _text_element(document, "name", self.document_name, field="document name")
        _text_element(
            document, "description", self.document_description, field="document description"
        )

        for feature in features:
            self._add_placemark(document, feature)

        logger.info(f"Encoded {len(features)} feature(s) as KML")
        return etree.tostring(root, pretty_print=True, xml_declaration=True, encoding="UTF-8")

    def _add_placemark(self, document: etree._Element, feature: Feature) -> None:
        placemark = etree.SubElement(document, _kml("Placemark"))
        _text_element(placemark, "name", feature.display_name, field="name")

        extra = [(k, v) for k, v in feature.attributes.items() if k != "name"]
        if extra:
            extended_data = etree.SubElement(placemark, _kml("ExtendedData"))
            for key, value in extra:
                data = _text_element(extended_data, "Data", None, field=key, name=key)
                _text_element(data, "value", value, field=key)

        self._add_geometry(placemark, feature.geometry)

    def _add_geometry(self, parent: etree._Element, geometry: Geometry) -> None:
        if isinstance(geometry, Point):
            point = etree.SubElement(parent, _kml("Point"))
            etree.SubElement(point, _kml("coordinates")).text = format_kml_coordinates(
                [(geometry.x, geometry.y)]
            )
        elif isinstance(geometry, LineString):
            line = etree.SubElement(parent, _kml("LineString"))
            etree.SubElement(line, _kml("coordinates")).text = format_kml_coordinates(
                geometry.coords
            )
        elif isinstance(geometry, Polygon):
            polygon = etree.SubElement(parent, _kml("Polygon"))
            self._add_ring(polygon, "outerBoundaryIs", geometry.shell)
            for hole in geometry.holes:
                self._add_ring(polygon, "innerBoundaryIs", hole)
        elif isinstance(geometry, Collection) and geometry.is_multi_polygon:
            multi = etree.SubElement(parent, _kml("MultiGeometry"))
            for member in geometry.geometries:
                self._add_geometry(multi, member)
        else:
            raise UnsupportedGeometryError(geometry.geometry_type)

    def _add_ring(self, polygon: etree._Element, boundary: str, ring: Ring) -> None:
        boundary_elem = etree.SubElement(polygon, _kml(boundary))
        linear_ring = etree.SubElement(boundary_elem, _kml("LinearRing"))
        etree.SubElement(linear_ring, _kml("coordinates")).text = format_kml_coordinates(ring)


def _kml(name: str) -> str:
    return f"{{{KML_NAMESPACE}}}{name}"


def _text_element(
    parent: etree._Element,
    tag: str,
    text: Optional[str],
    field: str,
    **attrib: str,
) -> etree._Element:
    """
    Append a KML element with optional text.

    lxml rejects control characters and other XML-illegal code points,
    which JSON strings may legally contain; those surface as FormatError
    naming the offending field.
    """
    try:
        element = etree.SubElement(parent, _kml(tag), **attrib)
        if text is not None:
            element.text = text
    except ValueError as e:
        raise FormatError(
            f"Attribute {field!r} contains characters that cannot be written to KML",
            file_type=FILE_TYPE,
            details={"attribute": field},
            suggestions=["Remove control characters from feature names and properties"],
        ) from e
    return element


def decode_kml(data: bytes, source: Optional[str] = None) -> List[Feature]:
    """
    Convenience function to decode KML bytes into Features.

    Args:
        data: Raw KML document
        source: Name of the input, used in error messages

    Returns:
        List of Features
    """
    return KMLReader(source=source).read(data)


def encode_kml(
    features: List[Feature],
    document_name: str,
    document_description: str,
) -> bytes:
    """
    Convenience function to encode Features as a KML document.

    Args:
        features: Features to encode
        document_name: Name of the enclosing Document
        document_description: Description of the enclosing Document

    Returns:
        UTF-8 encoded KML
    """
    return KMLWriter(document_name, document_description).write(features)
