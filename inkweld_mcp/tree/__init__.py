"""Positional-tree helpers for project element arrays."""

from inkweld_mcp.tree.positional import (
    ELEMENT_TYPES,
    Element,
    element_doc_id,
    elements_doc_id,
    find_parent_by_position,
    get_direct_children,
    get_siblings,
    get_subtree,
    get_subtree_end_index,
    index_of,
    insert_element,
    move_element,
    normalize,
    remove_element,
)
from inkweld_mcp.tree.sorting import compare_names, make_element_comparator, sort_children
from inkweld_mcp.tree.visual import build_visual_tree, limit_depth, nodes_to_text, tree_to_text

__all__ = [
    "ELEMENT_TYPES",
    "Element",
    "build_visual_tree",
    "compare_names",
    "element_doc_id",
    "elements_doc_id",
    "find_parent_by_position",
    "get_direct_children",
    "get_siblings",
    "get_subtree",
    "get_subtree_end_index",
    "index_of",
    "insert_element",
    "limit_depth",
    "make_element_comparator",
    "move_element",
    "nodes_to_text",
    "normalize",
    "remove_element",
    "sort_children",
    "tree_to_text",
]
