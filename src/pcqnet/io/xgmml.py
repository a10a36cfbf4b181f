"""
XGMML serialization for Cytoscape.

A ``GraphDocument`` is rendered with ``xml.etree.ElementTree``, pretty
printed, and then post-processed: the opening ``<graph`` line is replaced by
the header Cytoscape 3 expects (XGMML default namespace, ``dc``/``xlink``/
``rdf``/``cy`` prefixes and ``cy:documentVersion="3.0"``). The rewrite works
line by line and only touches the first matching line.
"""

from __future__ import annotations

import logging
import os
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, Optional
from xml.sax.saxutils import escape

from pcqnet.errors import GraphExportError
from pcqnet.graph.elements import Attribute, GraphDocument
from pcqnet.utils.fileio import atomic_write_text

logger = logging.getLogger(__name__)

__all__ = [
    'XGMML_NAMESPACE',
    'XML_DECLARATION',
    'graph_header',
    'fix_header',
    'document_to_element',
    'serialize',
    'write_xgmml',
]

XGMML_NAMESPACE = "http://www.cs.rpi.edu/XGMML"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'

_GRAPH_OPEN = re.compile(r"^\s*<graph[\s>/]")


def graph_header(label: str) -> str:
    """Opening ``<graph>`` tag with the namespaces Cytoscape requires."""
    label = escape(label, {'"': "&quot;"})
    return (
        f'<graph id="1" label="{label}" directed="1" cy:documentVersion="3.0"'
        ' xmlns:dc="http://purl.org/dc/elements/1.1/"'
        ' xmlns:xlink="http://www.w3.org/1999/xlink"'
        ' xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"'
        ' xmlns:cy="http://www.cytoscape.org"'
        f' xmlns="{XGMML_NAMESPACE}">'
    )


def fix_header(text: str, label: str) -> str:
    """Replace the first line opening the ``graph`` element with ``graph_header``."""
    lines = text.split("\n")
    for i, line in enumerate(lines):
        if _GRAPH_OPEN.match(line):
            lines[i] = graph_header(label)
            break
    else:
        logger.warning(f"No <graph> line found in XGMML for '{label}'")
    return "\n".join(lines)


def _att_element(parent: ET.Element, att: Attribute) -> ET.Element:
    return ET.SubElement(parent, "att", {
        "name": att.name,
        "value": att.text,
        "type": att.type.xgmml_name,
        "cy:type": att.type.cy_type,
    })


def _graphics_atts(parent: ET.Element, atts: Dict[str, Optional[str]]) -> None:
    for name, value in atts.items():
        attrib = {"name": name}
        if value is not None:
            attrib["value"] = value
        attrib["type"] = "string"
        attrib["cy:type"] = "String"
        ET.SubElement(parent, "att", attrib)


def document_to_element(document: GraphDocument) -> ET.Element:
    """Element tree for ``document``; the root carries no namespaces yet."""
    root = ET.Element("graph", {"id": "1", "label": document.label, "directed": "1"})
    for att in document.attributes.values():
        _att_element(root, att)
    graphics = ET.SubElement(root, "graphics")
    _graphics_atts(graphics, document.graphics_atts)

    for node in document.nodes:
        element = ET.SubElement(root, "node", {"id": node.id, "label": node.label})
        for att in node.attributes.values():
            _att_element(element, att)
        if node.graphics is not None:
            g = node.graphics
            node_graphics = ET.SubElement(element, "graphics", {
                "type": g.shape,
                "h": str(g.height),
                "w": str(g.width),
                "width": str(g.border_width),
                "outline": g.outline,
                "fill": g.fill,
            })
            _graphics_atts(node_graphics, g.atts)

    for edge in document.edges:
        attrib = {"id": str(edge.id)}
        if edge.label is not None:
            attrib["label"] = edge.label
        attrib["source"] = edge.source
        attrib["target"] = edge.target
        element = ET.SubElement(root, "edge", attrib)
        for att in edge.attributes.values():
            _att_element(element, att)
        if edge.graphics is not None:
            edge_graphics = ET.SubElement(element, "graphics", {
                "fill": edge.graphics.fill,
                "width": str(edge.graphics.width),
            })
            _graphics_atts(edge_graphics, edge.graphics.atts)
    return root


def serialize(document: GraphDocument) -> str:
    """Complete XGMML text for ``document``, header included."""
    root = document_to_element(document)
    ET.indent(root)
    body = ET.tostring(root, encoding="unicode")
    return fix_header(f"{XML_DECLARATION}\n{body}\n", document.label)


def write_xgmml(document: GraphDocument, path: str | os.PathLike) -> Path:
    """
    Serialize ``document`` and write it atomically to ``path``.

    Raises:
        GraphExportError: If the file cannot be written; no partial file is left
    """
    path = Path(path)
    text = serialize(document)
    try:
        atomic_write_text(path, text)
    except OSError as e:
        raise GraphExportError(f"Cannot write XGMML file {path}: {e}") from e
    logger.info(f"XGMML written to {path}")
    return path
