"""
Tests for the KML codec.

Tests cover:
- Placemark discovery through nested Documents and Folders
- Geometry parsing (Point, LineString, Polygon with holes, MultiGeometry)
- Extended data parsing
- Document writing and round trips through GeoJSON
- Error handling
"""

import pytest
from lxml import etree

from geoconvert.core.codecs import (
    KML_NAMESPACE,
    KMLReader,
    decode_geojson,
    decode_kml,
    encode_kml,
    parse_kml_coordinates,
)
from geoconvert.core.errors import FormatError, UnsupportedGeometryError
from geoconvert.core.geometry import Collection, Feature, LineString, Point, Polygon

from conftest import kml_document, kml_polygon_placemark, square

NS = {"kml": KML_NAMESPACE}

HOLE_KML = kml_document(
    """
    <Placemark>
      <name>Courtyard</name>
      <Polygon>
        <outerBoundaryIs><LinearRing>
          <coordinates>0,0,0 10,0,0 10,10,0 0,10,0 0,0,0</coordinates>
        </LinearRing></outerBoundaryIs>
        <innerBoundaryIs><LinearRing>
          <coordinates>4,4,0 6,4,0 6,6,0 4,6,0 4,4,0</coordinates>
        </LinearRing></innerBoundaryIs>
      </Polygon>
    </Placemark>
    """
)


class TestParseCoordinates:
    """Tests for KML coordinate text parsing."""

    def test_altitude_dropped(self):
        """Test lon,lat,alt tuples keep only lon,lat."""
        assert parse_kml_coordinates("-122.08,37.42,0 -122.09,37.43") == [
            (-122.08, 37.42),
            (-122.09, 37.43),
        ]

    def test_whitespace_separated(self):
        """Test tuples separated by newlines and tabs."""
        assert parse_kml_coordinates("\n\t1,2\n\t3,4\n") == [(1.0, 2.0), (3.0, 4.0)]

    def test_empty(self):
        """Test empty coordinate text is rejected."""
        with pytest.raises(FormatError):
            parse_kml_coordinates("   ")

    def test_malformed(self):
        """Test tuples without latitude are rejected."""
        with pytest.raises(FormatError):
            parse_kml_coordinates("1,2 3")


class TestKMLReader:
    """Tests for decoding KML documents."""

    def test_polygon_with_hole(self):
        """Test inner boundaries become holes and reduce the area."""
        features = decode_kml(HOLE_KML)

        assert len(features) == 1
        polygon = features[0].geometry
        assert isinstance(polygon, Polygon)
        assert len(polygon.holes) == 1
        assert polygon.area == pytest.approx(96.0)
        assert features[0].attributes == {"name": "Courtyard"}

    def test_nested_folders_in_document_order(self):
        """Test placemarks in nested folders are found depth-first in order."""
        data = kml_document(
            kml_polygon_placemark("first", 0, 0, 1, 1)
            + "<Folder><name>outer</name>"
            + kml_polygon_placemark("second", 1, 1, 2, 2)
            + "<Folder>"
            + kml_polygon_placemark("third", 2, 2, 3, 3)
            + "</Folder></Folder>"
            + kml_polygon_placemark("fourth", 3, 3, 4, 4)
        )

        names = [f.name for f in decode_kml(data)]
        assert names == ["first", "second", "third", "fourth"]

    def test_iter_placemarks_restartable(self):
        """Test each traversal starts from the beginning."""
        reader = KMLReader()
        root = etree.fromstring(kml_document(kml_polygon_placemark("a", 0, 0, 1, 1)))
        assert len(list(reader.iter_placemarks(root))) == 1
        assert len(list(reader.iter_placemarks(root))) == 1

    def test_point_and_linestring(self):
        """Test Point and LineString placemarks."""
        data = kml_document(
            "<Placemark><name>well</name><Point><coordinates>5,6,100</coordinates></Point></Placemark>"
            "<Placemark><LineString><coordinates>0,0 1,1 2,0</coordinates></LineString></Placemark>"
        )

        point, line = decode_kml(data)
        assert point.geometry == Point(5, 6)
        assert isinstance(line.geometry, LineString)
        assert len(line.geometry.coords) == 3
        assert line.attributes == {}

    def test_multigeometry(self):
        """Test MultiGeometry becomes a Collection of its members."""
        data = kml_document(
            "<Placemark><MultiGeometry>"
            "<Point><coordinates>0,0</coordinates></Point>"
            "<Polygon><outerBoundaryIs><LinearRing>"
            "<coordinates>0,0 1,0 1,1 0,1 0,0</coordinates>"
            "</LinearRing></outerBoundaryIs></Polygon>"
            "</MultiGeometry></Placemark>"
        )

        geometry = decode_kml(data)[0].geometry
        assert isinstance(geometry, Collection)
        assert [g.geometry_type for g in geometry.geometries] == ["Point", "Polygon"]

    def test_extended_data(self):
        """Test Data and SchemaData values become attributes."""
        data = kml_document(
            "<Placemark><name>lot</name>"
            "<ExtendedData>"
            '<Data name="owner"><value> County </value></Data>'
            '<Data name="blank"></Data>'
            '<SchemaData schemaUrl="#s"><SimpleData name="zone">R1</SimpleData></SchemaData>'
            "</ExtendedData>"
            "<Point><coordinates>0,0</coordinates></Point></Placemark>"
        )

        assert decode_kml(data)[0].attributes == {
            "name": "lot",
            "owner": "County",
            "blank": "",
            "zone": "R1",
        }

    def test_placemark_name_wins_over_data_name(self):
        """Test a Data element called 'name' does not replace the placemark name."""
        data = kml_document(
            "<Placemark><name>real</name>"
            '<ExtendedData><Data name="name"><value>other</value></Data></ExtendedData>'
            "<Point><coordinates>0,0</coordinates></Point></Placemark>"
        )
        assert decode_kml(data)[0].name == "real"

    def test_placemark_without_geometry_skipped(self):
        """Test placemarks with no geometry are ignored."""
        data = kml_document(
            "<Placemark><name>note</name></Placemark>" + kml_polygon_placemark("a", 0, 0, 1, 1)
        )
        assert [f.name for f in decode_kml(data)] == ["a"]

    def test_document_without_namespace(self):
        """Test KML without the standard namespace is still read."""
        data = (
            b"<kml><Document><Placemark><name>bare</name>"
            b"<Point><coordinates>1,2</coordinates></Point></Placemark></Document></kml>"
        )
        features = decode_kml(data)
        assert features[0].name == "bare"
        assert features[0].geometry == Point(1, 2)

    def test_unsupported_geometry(self):
        """Test geometry types without a model mapping are named in the error."""
        data = kml_document(
            "<Placemark><Model><Location><longitude>0</longitude></Location></Model></Placemark>"
        )
        with pytest.raises(UnsupportedGeometryError) as exc_info:
            decode_kml(data)
        assert exc_info.value.message == "KML Geometry Model is not supported"
        assert exc_info.value.geometry_type == "Model"

    def test_invalid_xml(self):
        """Test malformed XML raises FormatError."""
        with pytest.raises(FormatError) as exc_info:
            decode_kml(b"<kml><Document>", source="broken.kml")
        assert "Invalid XML structure" in exc_info.value.message
        assert "broken.kml" in exc_info.value.message

    def test_wrong_root_element(self):
        """Test XML that is not KML is rejected."""
        with pytest.raises(FormatError) as exc_info:
            decode_kml(b"<gpx><trk/></gpx>")
        assert "Invalid root element" in exc_info.value.message

    def test_polygon_without_outer_boundary(self):
        """Test a Polygon lacking an outer ring is rejected."""
        data = kml_document("<Placemark><Polygon></Polygon></Placemark>")
        with pytest.raises(FormatError):
            decode_kml(data)

    def test_entities_not_resolved(self):
        """Test external entities are not expanded."""
        data = (
            b'<?xml version="1.0"?>'
            b'<!DOCTYPE kml [<!ENTITY xxe SYSTEM "file:///etc/passwd">]>'
            b'<kml xmlns="http://www.opengis.net/kml/2.2"><Document>'
            b"<Placemark><name>&xxe;</name><Point><coordinates>0,0</coordinates></Point>"
            b"</Placemark></Document></kml>"
        )
        features = decode_kml(data)
        assert "root:" not in (features[0].name or "")


class TestKMLWriter:
    """Tests for encoding Features as KML."""

    def _parse(self, payload: bytes) -> etree._Element:
        return etree.fromstring(payload)

    def test_document_header(self):
        """Test the Document name and description are written."""
        root = self._parse(encode_kml([], "Converted GeoJSON", "Converted from GeoJSON file"))

        assert etree.QName(root).localname == "kml"
        assert root.findtext("kml:Document/kml:name", namespaces=NS) == "Converted GeoJSON"
        assert (
            root.findtext("kml:Document/kml:description", namespaces=NS)
            == "Converted from GeoJSON file"
        )
        assert root.findall(".//kml:Placemark", namespaces=NS) == []

    def test_placemark_name_and_extended_data(self):
        """Test the name attribute labels the placemark and others become Data."""
        feature = Feature(Point(1, 2), {"name": "Well", "depth": "30"})
        root = self._parse(encode_kml([feature], "doc", "desc"))

        placemark = root.find(".//kml:Placemark", namespaces=NS)
        assert placemark.findtext("kml:name", namespaces=NS) == "Well"
        data = placemark.findall("kml:ExtendedData/kml:Data", namespaces=NS)
        assert [d.get("name") for d in data] == ["depth"]
        assert data[0].findtext("kml:value", namespaces=NS) == "30"
        assert placemark.findtext("kml:Point/kml:coordinates", namespaces=NS) == "1.0,2.0"

    def test_unnamed_feature_label(self):
        """Test features without a name get the default label."""
        root = self._parse(encode_kml([Feature(Point(0, 0))], "doc", "desc"))
        assert root.findtext(".//kml:Placemark/kml:name", namespaces=NS) == "Unnamed Feature"
        assert root.find(".//kml:ExtendedData", namespaces=NS) is None

    def test_multi_polygon_written_as_multigeometry(self):
        """Test polygon collections become MultiGeometry."""
        feature = Feature(Collection((square(0, 0, 1, 1), square(2, 2, 3, 3))))
        root = self._parse(encode_kml([feature], "doc", "desc"))
        assert len(root.findall(".//kml:MultiGeometry/kml:Polygon", namespaces=NS)) == 2

    def test_mixed_collection_rejected(self):
        """Test non-polygon collections cannot be written."""
        feature = Feature(Collection((Point(0, 0), square(0, 0, 1, 1))))
        with pytest.raises(UnsupportedGeometryError) as exc_info:
            encode_kml([feature], "doc", "desc")
        assert "GeometryCollection" in exc_info.value.message

    def test_hole_round_trip(self):
        """Test a polygon with a hole survives encode and decode."""
        features = decode_kml(HOLE_KML)
        assert decode_kml(encode_kml(features, "doc", "desc")) == features

    def test_geojson_to_kml_round_trip(self, square_geojson):
        """Test GeoJSON features keep geometry and attributes through KML."""
        features = decode_geojson(square_geojson)
        round_tripped = decode_kml(encode_kml(features, "doc", "desc"))

        assert round_tripped == features
        assert round_tripped[0].geometry.area == pytest.approx(100.0)

    def test_coordinates_keep_full_precision(self):
        """Test coordinates are written without rounding."""
        point = Point(51.123456789012, 35.987654321098)
        features = decode_kml(encode_kml([Feature(point, {"name": "p"})], "doc", "desc"))
        assert features[0].geometry == point

    def test_control_character_in_property(self):
        """Test XML-illegal characters in a property raise FormatError naming the key."""
        feature = Feature(Point(0, 0), {"name": "Well", "note": "a\u0001b"})
        with pytest.raises(FormatError) as exc_info:
            encode_kml([feature], "doc", "desc")
        assert "'note'" in exc_info.value.message
        assert exc_info.value.details == {"attribute": "note", "file_type": "KML"}

    def test_control_character_in_name(self):
        """Test XML-illegal characters in the placemark name raise FormatError."""
        feature = Feature(Point(0, 0), {"name": "bad\x0bname"})
        with pytest.raises(FormatError) as exc_info:
            encode_kml([feature], "doc", "desc")
        assert exc_info.value.details["attribute"] == "name"

    def test_control_character_in_property_key(self):
        """Test XML-illegal characters in a property key raise FormatError."""
        feature = Feature(Point(0, 0), {"key\x02": "value"})
        with pytest.raises(FormatError):
            encode_kml([feature], "doc", "desc")
