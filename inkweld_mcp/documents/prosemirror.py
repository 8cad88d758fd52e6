"""Minimal reader for ProseMirror XML fragments.

Handles the subset the editor produces: element tags with attributes,
self-closing tags, comments, text with the five predefined entities plus
numeric character references. Malformed input never raises; parsing stops at
the first unrecoverable position.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

_TAG_RE = re.compile(r"<([A-Za-z_][A-Za-z0-9_-]*)")
_ATTR_RE = re.compile(r"""([A-Za-z_][A-Za-z0-9_-]*)=(?:"([^"]*)"|'([^']*)')""")
_CLOSE_RE = re.compile(r"</[A-Za-z_][A-Za-z0-9_-]*>")

BLOCK_TAGS = frozenset(
    {
        "paragraph",
        "heading",
        "blockquote",
        "code_block",
        "list_item",
        "bullet_list",
        "ordered_list",
        "horizontal_rule",
        "table_row",
    }
)


@dataclass
class XmlElement:
    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List["XmlNode"] = field(default_factory=list)


XmlNode = Union[XmlElement, str]


def _decode(text: str) -> str:
    return html.unescape(text)


def _parse_text(xml: str, pos: int) -> Tuple[str, int]:
    end = xml.find("<", pos)
    if end == -1:
        end = len(xml)
    return _decode(xml[pos:end]), end


def _parse_node(xml: str, pos: int) -> Optional[Tuple[Optional[XmlNode], int]]:
    if pos >= len(xml):
        return None
    if xml[pos] == "<":
        if xml.startswith("<!--", pos):
            end = xml.find("-->", pos + 4)
            if end == -1:
                return None
            return None, end + 3
        if xml.startswith("</", pos):
            return None
        return _parse_element(xml, pos)
    return _parse_text(xml, pos)


def _parse_element(xml: str, pos: int) -> Tuple[Optional[XmlNode], int]:
    match = _TAG_RE.match(xml, pos)
    if match is None:
        # A stray "<" is kept as text.
        end = xml.find("<", pos + 1)
        end = len(xml) if end == -1 else end
        return _decode(xml[pos:end]), end

    tag = match.group(1).lower()
    cursor = match.end()
    attrs: Dict[str, str] = {}
    while cursor < len(xml):
        while cursor < len(xml) and xml[cursor].isspace():
            cursor += 1
        if xml.startswith(">", cursor) or xml.startswith("/>", cursor):
            break
        attr = _ATTR_RE.match(xml, cursor)
        if attr:
            value = attr.group(2) if attr.group(2) is not None else (attr.group(3) or "")
            attrs[attr.group(1)] = _decode(value)
            cursor = attr.end()
        else:
            cursor += 1

    element = XmlElement(tag=tag, attrs=attrs)
    if xml.startswith("/>", cursor):
        return element, cursor + 2
    cursor += 1

    closing = f"</{tag}>"
    while cursor < len(xml):
        if xml[cursor : cursor + len(closing)].lower() == closing:
            cursor += len(closing)
            break
        child = _parse_node(xml, cursor)
        if child is None:
            stray = _CLOSE_RE.match(xml, cursor)
            if stray:
                cursor = stray.end()
            break
        node, next_pos = child
        if node is not None and node != "":
            element.children.append(node)
        if next_pos <= cursor:
            break
        cursor = next_pos
    return element, cursor


def parse_fragment(xml: str) -> List[XmlNode]:
    """Parse an XML fragment (zero or more top-level nodes)."""
    nodes: List[XmlNode] = []
    if not xml or not xml.strip():
        return nodes
    pos = 0
    while pos < len(xml):
        result = _parse_node(xml, pos)
        if result is None:
            break
        node, next_pos = result
        if node is not None and node != "":
            nodes.append(node)
        if next_pos <= pos:
            break
        pos = next_pos
    return nodes


def _collect(nodes: List[XmlNode], blocks: List[str], current: List[str]) -> None:
    for node in nodes:
        if isinstance(node, str):
            current.append(node)
        elif node.tag == "hard_break":
            current.append("\n")
        elif node.tag in BLOCK_TAGS:
            if current:
                blocks.append("".join(current))
                current.clear()
            inner: List[str] = []
            _collect(node.children, blocks, inner)
            if inner:
                blocks.append("".join(inner))
        else:
            _collect(node.children, blocks, current)


def extract_text(xml: str) -> str:
    """Plain text of a fragment; block elements are separated by newlines."""
    blocks: List[str] = []
    current: List[str] = []
    _collect(parse_fragment(xml), blocks, current)
    if current:
        blocks.append("".join(current))
    return "\n".join(b.strip() for b in blocks if b.strip())


def count_words(text: str) -> int:
    return len(text.split())
