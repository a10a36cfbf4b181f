"""
Tests for XGMML serialization.

Validates that:
1. The output parses as XML with the Cytoscape namespaces on the root
2. Attributes carry XGMML and Cytoscape types
3. The header rewrite touches only the first <graph line
4. Write failures raise GraphExportError and leave no file behind
"""

import logging
import math
import xml.etree.ElementTree as ET
from unittest.mock import patch

import pytest

from pcqnet.errors import GraphExportError
from pcqnet.graph.builder import GraphBuilder
from pcqnet.graph.elements import AttributeType, GraphDocument, GraphNode, NodeGraphics
from pcqnet.io.xgmml import XGMML_NAMESPACE, XML_DECLARATION, fix_header, graph_header, serialize, write_xgmml

NS = {"x": XGMML_NAMESPACE, "cy": "http://www.cytoscape.org"}


def _parse(text):
    return ET.fromstring(text.encode("utf-8"))


@pytest.fixture
def document(params, scenario_a):
    return GraphBuilder(params).build("pcq_test", [scenario_a])


class TestSerialize:
    """Complete XGMML documents."""

    def test_declaration_and_header(self, document):
        """The declaration comes first and the root carries the Cytoscape header."""
        text = serialize(document)
        lines = text.split("\n")

        assert lines[0] == XML_DECLARATION
        assert lines[1] == graph_header("pcq_test")
        root = _parse(text)
        assert root.tag == f"{{{XGMML_NAMESPACE}}}graph"
        assert root.get("{http://www.cytoscape.org}documentVersion") == "3.0"
        assert root.get("label") == "pcq_test"

    def test_nodes_and_edges(self, document):
        """Every node and edge of the document is written."""
        root = _parse(serialize(document))

        assert len(root.findall("x:node", NS)) == 5
        edges = root.findall("x:edge", NS)
        assert [e.get("id") for e in edges] == ["1", "2", "3", "4"]
        assert (edges[0].get("source"), edges[0].get("target")) == ("AAA", "P1")

    def test_typed_attributes(self, document):
        """Attributes carry both the XGMML and the Cytoscape type."""
        root = _parse(serialize(document))
        node = root.find("x:node[@id='AAA']", NS)
        atts = {a.get("name"): a for a in node.findall("x:att", NS)}

        assert atts["finalRatio"].get("type") == "real"
        assert atts["finalRatio"].get("{http://www.cytoscape.org}type") == "Double"
        assert atts["finalRatio"].get("value") == "1.0"
        assert atts["numPsms"].get("type") == "integer"
        assert atts["PCQ_ID"].get("type") == "string"

    def test_node_graphics(self, document):
        """Node graphics carry shape, size, colors and visual properties."""
        root = _parse(serialize(document))
        graphics = root.find("x:node[@id='P1']/x:graphics", NS)

        assert graphics.get("type") == "ROUND_RECTANGLE"
        assert graphics.get("h") == "30"
        assert graphics.get("w") == "70"
        names = [a.get("name") for a in graphics.findall("x:att", NS)]
        assert "NODE_TOOLTIP" in names
        assert "NODE_LABEL" in names

    def test_special_real_values(self):
        """NaN and infinities are written the way Cytoscape reads them."""
        document = GraphDocument(label="special")
        node = GraphNode(id="n", label="n",
                         graphics=NodeGraphics("ELLIPSE", 30, 30, "#FFFFFF", "#000000"))
        node.set_attribute("a", math.nan, AttributeType.REAL)
        node.set_attribute("b", math.inf, AttributeType.REAL)
        node.set_attribute("c", True)
        document.add_nodes([node])
        root = _parse(serialize(document))
        values = {a.get("name"): a.get("value") for a in root.findall("x:node/x:att", NS)}

        assert values == {"a": "NaN", "b": "Infinity", "c": "1"}

    def test_label_escaped(self):
        """Quotes and ampersands in the label stay well-formed."""
        text = serialize(GraphDocument(label='a "b" & c'))
        assert _parse(text).get("label") == 'a "b" & c'


class TestFixHeader:
    """Rewrite of the root opening line."""

    def test_first_line_only(self):
        """Only the first <graph line is replaced."""
        text = '<?xml version="1.0"?>\n<graph id="1">\n  <graph id="2" />\n</graph>'
        fixed = fix_header(text, "net").split("\n")

        assert fixed[1] == graph_header("net")
        assert fixed[2] == '  <graph id="2" />'

    def test_no_graph_line(self, caplog):
        """Text without a graph element is returned unchanged with a warning."""
        with caplog.at_level(logging.WARNING, logger="pcqnet.io.xgmml"):
            assert fix_header("<other/>", "net") == "<other/>"
        assert "No <graph> line" in caplog.text

    def test_graphics_element_untouched(self):
        """Lines opening <graphics> are not mistaken for the root."""
        text = '<graphics fill="#FFFFFF">\n<graph id="1">'
        assert fix_header(text, "net").split("\n")[0] == '<graphics fill="#FFFFFF">'


class TestWriteXgmml:
    """Writing documents to disk."""

    def test_writes_file(self, tmp_path, document):
        """The written file holds the serialized document."""
        path = write_xgmml(document, tmp_path / "out.xgmml")

        assert path.exists()
        assert path.read_text(encoding="utf-8") == serialize(document)
        assert list(tmp_path.glob("*.tmp")) == []

    def test_write_failure_raises_export_error(self, tmp_path, document):
        """An OSError during the write becomes GraphExportError."""
        path = tmp_path / "out.xgmml"
        with patch("pcqnet.io.xgmml.atomic_write_text", side_effect=OSError("disk full")):
            with pytest.raises(GraphExportError, match="disk full"):
                write_xgmml(document, path)
        assert not path.exists()

    def test_missing_directory(self, tmp_path, document):
        """A missing destination directory fails without leaving files."""
        with pytest.raises(GraphExportError):
            write_xgmml(document, tmp_path / "missing" / "out.xgmml")
        assert list(tmp_path.rglob("*")) == []

    def test_failed_write_keeps_previous_file(self, tmp_path, document):
        """A failed replace leaves the previous version intact."""
        path = tmp_path / "out.xgmml"
        path.write_text("previous")
        with patch("pcqnet.utils.fileio.os.replace", side_effect=OSError("busy")):
            with pytest.raises(GraphExportError):
                write_xgmml(document, path)

        assert path.read_text() == "previous"
        assert list(tmp_path.glob("*.tmp")) == []
