"""Nested and text renderings of a positional element array."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from inkweld_mcp.tree.positional import Element

TYPE_ICONS = {"FOLDER": "📁", "ITEM": "📄", "WORLDBUILDING": "📦"}
DEFAULT_ICON = "📋"


def build_visual_tree(elements: List[Element]) -> List[Dict[str, Any]]:
    """Nest elements into ``{id, name, type, level, order, children}`` nodes.

    Only expandable elements (and folders) adopt children; anything following
    a leaf at a deeper level attaches to the nearest open container.
    """
    roots: List[Dict[str, Any]] = []
    stack: List[Dict[str, Any]] = []

    for element in elements:
        node = {
            "id": element.get("id"),
            "name": element.get("name"),
            "type": element.get("type"),
            "level": element.get("level", 0),
            "order": element.get("order", 0),
            "children": [],
        }
        while stack and stack[-1]["level"] >= node["level"]:
            stack.pop()
        if stack:
            stack[-1]["children"].append(node)
        else:
            roots.append(node)
        if element.get("expandable") or element.get("type") == "FOLDER":
            stack.append(node)

    return roots


def limit_depth(nodes: List[Dict[str, Any]], max_depth: Optional[int], depth: int = 0):
    """Keep ``max_depth`` levels of descendants below ``nodes`` (``None`` keeps all)."""
    if max_depth is None:
        return nodes
    return [
        dict(node, children=[] if depth >= max_depth else limit_depth(node["children"], max_depth, depth + 1))
        for node in nodes
    ]


def _render(nodes: List[Dict[str, Any]], indent: str) -> List[str]:
    lines: List[str] = []
    for i, node in enumerate(nodes):
        last = i == len(nodes) - 1
        icon = TYPE_ICONS.get(node["type"], DEFAULT_ICON)
        lines.append(f"{indent}{'└── ' if last else '├── '}{icon} {node['name']} ({node['id']})")
        if node["children"]:
            lines.extend(_render(node["children"], indent + ("    " if last else "│   ")))
    return lines


def nodes_to_text(nodes: List[Dict[str, Any]]) -> str:
    lines = _render(nodes, "")
    return "\n".join(lines) + "\n" if lines else ""


def tree_to_text(elements: List[Element]) -> str:
    return nodes_to_text(build_visual_tree(elements))
