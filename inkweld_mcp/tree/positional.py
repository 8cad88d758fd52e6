"""Positional hierarchy helpers for project element arrays.

Elements live in one flat array. Parent/child relationships are encoded by
array position and ``level``:

    0: Characters (level 0)     <- parent
    1: Elena      (level 1)     <- child of Characters
    2: Marcus     (level 1)     <- child of Characters
    3: Locations  (level 0)     <- ends the Characters subtree
    4: Tavern     (level 1)     <- child of Locations

A child immediately follows its parent with ``level == parent.level + 1``; a
subtree runs until the next element whose level is less than or equal to the
root's. ``parentId`` is informational and always equals the closest preceding
element one level up.

Every function here is pure: input arrays and their dicts are never mutated.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from inkweld_mcp.exceptions import ElementNotFoundError, TreeError

Element = Dict[str, Any]

ELEMENT_TYPES = ("FOLDER", "ITEM", "WORLDBUILDING")


def elements_doc_id(owner: str, slug: str) -> str:
    """Document id of a project's element array (trailing ``/`` is part of the room name)."""
    return f"{owner}:{slug}:elements/"


def element_doc_id(owner: str, slug: str, element_id: str) -> str:
    return f"{owner}:{slug}:{element_id}/"


def _level(element: Element) -> int:
    return int(element.get("level", 0))


def index_of(elements: List[Element], element_id: Optional[str]) -> int:
    for index, element in enumerate(elements):
        if element.get("id") == element_id:
            return index
    return -1


def find_parent_by_position(elements: List[Element], index: int) -> Optional[Element]:
    """Closest preceding element whose level is one less than ``elements[index]``."""
    if index < 0 or index >= len(elements):
        return None
    level = _level(elements[index])
    if level == 0:
        return None
    for i in range(index - 1, -1, -1):
        if _level(elements[i]) == level - 1:
            return elements[i]
    return None


def get_subtree_end_index(elements: List[Element], start_index: int) -> int:
    """Index of the first element after the subtree rooted at ``start_index``."""
    if start_index < 0 or start_index >= len(elements):
        return start_index
    start_level = _level(elements[start_index])
    for i in range(start_index + 1, len(elements)):
        if _level(elements[i]) <= start_level:
            return i
    return len(elements)


def get_subtree(elements: List[Element], start_index: int) -> List[Element]:
    if start_index < 0 or start_index >= len(elements):
        return []
    return elements[start_index : get_subtree_end_index(elements, start_index)]


def get_direct_children(elements: List[Element], parent_index: int) -> List[Element]:
    if parent_index < 0 or parent_index >= len(elements):
        return []
    child_level = _level(elements[parent_index]) + 1
    end = get_subtree_end_index(elements, parent_index)
    return [e for e in elements[parent_index + 1 : end] if _level(e) == child_level]


def get_siblings(elements: List[Element], element_id: str) -> List[Element]:
    """Elements sharing the positional parent of ``element_id`` (the element included)."""
    index = index_of(elements, element_id)
    if index == -1:
        raise ElementNotFoundError(element_id)
    parent = find_parent_by_position(elements, index)
    if parent is None:
        return [e for e in elements if _level(e) == 0]
    return get_direct_children(elements, index_of(elements, parent["id"]))


def normalize(elements: List[Element]) -> List[Element]:
    """Set ``order`` to the array index and ``parentId`` to the positional parent."""
    result = []
    for index, element in enumerate(elements):
        parent = find_parent_by_position(elements, index)
        normalized = dict(element)
        normalized["order"] = index
        normalized["parentId"] = parent["id"] if parent is not None else None
        result.append(normalized)
    return result


def _insertion_index(
    elements: List[Element],
    parent_id: Optional[str],
    after_sibling_id: Optional[str],
    at_start: bool = False,
) -> int:
    if parent_id is None:
        if at_start:
            return 0
        if after_sibling_id:
            sibling_index = index_of(elements, after_sibling_id)
            if sibling_index != -1 and _level(elements[sibling_index]) == 0:
                return get_subtree_end_index(elements, sibling_index)
        return len(elements)

    parent_index = index_of(elements, parent_id)
    if parent_index == -1:
        raise TreeError(f'Parent element "{parent_id}" not found')
    parent_end = get_subtree_end_index(elements, parent_index)
    if at_start:
        return parent_index + 1
    if after_sibling_id:
        sibling_index = index_of(elements, after_sibling_id)
        if (
            parent_index < sibling_index < parent_end
            and _level(elements[sibling_index]) == _level(elements[parent_index]) + 1
        ):
            return get_subtree_end_index(elements, sibling_index)
    return parent_end


def insert_element(
    elements: List[Element],
    new_element: Element,
    parent_id: Optional[str],
    after_sibling_id: Optional[str] = None,
) -> List[Element]:
    """Insert ``new_element`` as a child of ``parent_id`` (``None`` for root).

    With ``after_sibling_id`` naming a child of the parent, the element lands
    right after that sibling's subtree; otherwise it is appended as the
    parent's last child.

    Raises:
        TreeError: If ``parent_id`` does not exist
    """
    index = _insertion_index(elements, parent_id, after_sibling_id)
    if parent_id is None:
        level = 0
    else:
        level = _level(elements[index_of(elements, parent_id)]) + 1

    to_insert = dict(new_element)
    to_insert["level"] = level
    to_insert["parentId"] = parent_id
    result = list(elements[:index]) + [to_insert] + list(elements[index:])
    return normalize(result)


def remove_element(elements: List[Element], element_id: str) -> List[Element]:
    """Drop the subtree rooted at ``element_id``; unknown ids leave the array as is."""
    index = index_of(elements, element_id)
    if index == -1:
        return list(elements)
    end = get_subtree_end_index(elements, index)
    return normalize(list(elements[:index]) + list(elements[end:]))


def move_element(
    elements: List[Element],
    element_id: str,
    new_parent_id: Optional[str],
    after_sibling_id: Optional[str] = None,
    at_start: bool = False,
) -> List[Element]:
    """Move an element and its subtree under ``new_parent_id``.

    Placement follows :func:`insert_element`; ``at_start`` makes the subtree
    the parent's first child instead (first root element when the parent is
    ``None``).

    Raises:
        ElementNotFoundError: If ``element_id`` does not exist
        TreeError: If the new parent is missing or lies inside the moved subtree
    """
    index = index_of(elements, element_id)
    if index == -1:
        raise ElementNotFoundError(element_id)

    end = get_subtree_end_index(elements, index)
    subtree = elements[index:end]
    if new_parent_id is not None and any(e.get("id") == new_parent_id for e in subtree):
        raise TreeError("Cannot move element into its own subtree")

    if new_parent_id is None:
        new_level = 0
    else:
        parent_index = index_of(elements, new_parent_id)
        if parent_index == -1:
            raise TreeError(f'New parent "{new_parent_id}" not found')
        new_level = _level(elements[parent_index]) + 1

    delta = new_level - _level(elements[index])
    adjusted = []
    for element in subtree:
        moved = dict(element)
        moved["level"] = _level(element) + delta
        adjusted.append(moved)
    adjusted[0]["parentId"] = new_parent_id

    remaining = list(elements[:index]) + list(elements[end:])
    insert_at = _insertion_index(remaining, new_parent_id, after_sibling_id, at_start=at_start)
    return normalize(remaining[:insert_at] + adjusted + remaining[insert_at:])
