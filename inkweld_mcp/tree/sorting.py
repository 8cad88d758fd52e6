"""Sibling sorting for positional element arrays."""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from inkweld_mcp.tree.positional import (
    Element,
    find_parent_by_position,
    get_subtree_end_index,
    index_of,
    normalize,
)

Comparator = Callable[[Element, Element], int]

SORT_KEYS = ("name", "type", "type-then-name")
TYPE_ORDER: Dict[str, int] = {"FOLDER": 0, "ITEM": 1, "WORLDBUILDING": 2}
UNKNOWN_TYPE_ORDER = 99


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def compare_names(a: str, b: str) -> int:
    """Case-insensitive collation; exact case only breaks ties."""
    return _cmp(a.casefold(), b.casefold()) or _cmp(a, b)


def _type_rank(element: Element) -> int:
    return TYPE_ORDER.get(element.get("type", ""), UNKNOWN_TYPE_ORDER)


def make_element_comparator(
    sort_by: str = "name", descending: bool = False, folders_first: bool = True
) -> Comparator:
    """Build a comparator for :func:`sort_children`.

    ``descending`` reverses only the inner comparison: folders still come
    first when ``folders_first`` is set.
    """
    if sort_by not in SORT_KEYS:
        raise ValueError(f"sort_by must be one of {', '.join(SORT_KEYS)}")

    def compare(a: Element, b: Element) -> int:
        if folders_first:
            a_folder = a.get("type") == "FOLDER"
            b_folder = b.get("type") == "FOLDER"
            if a_folder and not b_folder:
                return -1
            if b_folder and not a_folder:
                return 1

        if sort_by == "name":
            result = compare_names(a.get("name", ""), b.get("name", ""))
        elif sort_by == "type":
            result = _type_rank(a) - _type_rank(b)
        else:
            result = _type_rank(a) - _type_rank(b)
            if result == 0:
                result = compare_names(a.get("name", ""), b.get("name", ""))

        return -result if descending else result

    return compare


@dataclass
class _Node:
    element: Element
    children: List["_Node"] = field(default_factory=list)


def _build_forest(elements: List[Element], parent_id: Optional[str]) -> List[_Node]:
    nodes: Dict[str, _Node] = {}
    roots: List[_Node] = []
    for index, element in enumerate(elements):
        node = _Node(element)
        nodes[element["id"]] = node
        parent = find_parent_by_position(elements, index)
        owner = parent["id"] if parent is not None else None
        if owner == parent_id:
            roots.append(node)
        elif owner is not None and owner in nodes:
            nodes[owner].children.append(node)
    return roots


def _flatten(
    nodes: List[_Node],
    level: int,
    parent_id: Optional[str],
    key,
    sort_here: bool,
    recursive: bool,
) -> List[Element]:
    ordered = sorted(nodes, key=key) if sort_here else nodes
    result: List[Element] = []
    for node in ordered:
        element = dict(node.element)
        element["level"] = level
        element["parentId"] = parent_id
        result.append(element)
        if node.children:
            result.extend(
                _flatten(node.children, level + 1, element["id"], key, recursive, recursive)
            )
    return result


def sort_children(
    elements: List[Element],
    parent_id: Optional[str],
    comparator: Comparator,
    recursive: bool = False,
) -> List[Element]:
    """Sort the direct children of ``parent_id`` (``None`` sorts root elements).

    Subtrees travel with their roots. Nested children are sorted too only when
    ``recursive`` is set. Sorting is stable, so repeated application with the
    same comparator is a no-op.
    """
    key = functools.cmp_to_key(lambda a, b: comparator(a.element, b.element))

    if parent_id is None:
        forest = _build_forest(elements, None)
        return normalize(_flatten(forest, 0, None, key, True, recursive))

    parent_index = index_of(elements, parent_id)
    if parent_index == -1:
        return list(elements)

    forest = _build_forest(elements, parent_id)
    start_level = int(elements[parent_index].get("level", 0)) + 1
    flattened = _flatten(forest, start_level, parent_id, key, True, recursive)
    end = get_subtree_end_index(elements, parent_index)
    return normalize(list(elements[: parent_index + 1]) + flattened + list(elements[end:]))
