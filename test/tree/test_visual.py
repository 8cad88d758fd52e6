"""Tests for nested tree rendering."""

from conftest import sample_elements
from inkweld_mcp.tree import build_visual_tree, limit_depth, nodes_to_text, normalize, tree_to_text


def test_build_visual_tree_nests_folder_children():
    tree = build_visual_tree(sample_elements())
    assert [n["id"] for n in tree] == ["chars", "locs", "ch1"]
    assert [n["id"] for n in tree[0]["children"]] == ["elena", "marcus"]
    assert tree[0]["children"][0]["level"] == 1
    assert tree[2]["children"] == []


def test_leaf_does_not_adopt_deeper_elements():
    elements = normalize(
        [
            {"id": "f", "name": "F", "type": "FOLDER", "level": 0},
            {"id": "leaf", "name": "Leaf", "type": "ITEM", "level": 1},
            {"id": "deep", "name": "Deep", "type": "ITEM", "level": 2},
        ]
    )
    tree = build_visual_tree(elements)
    assert [n["id"] for n in tree[0]["children"]] == ["leaf", "deep"]
    assert tree[0]["children"][0]["children"] == []


def test_expandable_item_adopts_children():
    elements = normalize(
        [
            {"id": "chapter", "name": "Chapter", "type": "ITEM", "level": 0, "expandable": True},
            {"id": "scene", "name": "Scene", "type": "ITEM", "level": 1},
        ]
    )
    tree = build_visual_tree(elements)
    assert tree[0]["children"][0]["id"] == "scene"


def test_limit_depth():
    tree = build_visual_tree(sample_elements())
    assert all(n["children"] == [] for n in limit_depth(tree, 0))
    assert limit_depth(tree, 1)[0]["children"][0]["id"] == "elena"
    assert limit_depth(tree, None) is tree


def test_tree_to_text():
    text = tree_to_text(sample_elements())
    assert text == (
        "├── 📁 Characters (chars)\n"
        "│   ├── 📦 Elena (elena)\n"
        "│   └── 📦 Marcus (marcus)\n"
        "├── 📁 Locations (locs)\n"
        "│   └── 📦 Tavern (tavern)\n"
        "└── 📄 Chapter One (ch1)\n"
    )


def test_empty_tree_renders_empty_text():
    assert nodes_to_text([]) == ""
