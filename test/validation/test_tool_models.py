"""Tests for tool argument models."""

import pytest
from pydantic import ValidationError

from inkweld_mcp.validation.tool_models import (
    CreateElementInput,
    GetMediaContentInput,
    GetProjectTreeInput,
    MoveElementsInput,
    ReplaceAllElementsInput,
    SortElementsInput,
    TagElementInput,
    UpdateElementInput,
)


def test_aliases_and_defaults():
    payload = SortElementsInput.model_validate({"project": "alice/novel", "parentId": "chars"})
    assert payload.parent_id == "chars"
    assert payload.sort_by == "name"
    assert payload.folders_first is True
    assert payload.recursive is False


def test_blank_ids_mean_root():
    payload = CreateElementInput.model_validate(
        {"project": "alice/novel", "name": "Chapter", "type": "ITEM", "parentId": ""}
    )
    assert payload.parent_id is None
    assert MoveElementsInput.model_validate(
        {"project": "alice/novel", "elementIds": ["a"], "newParentId": ""}
    ).new_parent_id is None


def test_name_is_stripped():
    payload = CreateElementInput.model_validate(
        {"project": "alice/novel", "name": "  Chapter Two ", "type": "ITEM"}
    )
    assert payload.name == "Chapter Two"
    assert UpdateElementInput.model_validate(
        {"project": "p/q", "elementId": "e", "name": " New "}
    ).name == "New"


def test_blank_name_rejected():
    with pytest.raises(ValidationError, match="name is required"):
        CreateElementInput.model_validate({"project": "alice/novel", "name": "   ", "type": "ITEM"})


def test_unknown_element_type_rejected():
    with pytest.raises(ValidationError) as exc_info:
        CreateElementInput.model_validate({"project": "alice/novel", "name": "X", "type": "IMAGE"})
    assert exc_info.value.errors()[0]["loc"] == ("type",)


def test_missing_required_field_reports_alias():
    with pytest.raises(ValidationError) as exc_info:
        TagElementInput.model_validate({"project": "alice/novel", "action": "add", "tags": ["x"]})
    errors = exc_info.value.errors()
    assert errors[0]["type"] == "missing"
    assert errors[0]["loc"] == ("elementId",)


def test_tag_action_values():
    with pytest.raises(ValidationError):
        TagElementInput.model_validate(
            {"project": "p/q", "elementId": "e", "action": "toggle", "tags": []}
        )


def test_move_requires_ids():
    with pytest.raises(ValidationError):
        MoveElementsInput.model_validate({"project": "p/q", "elementIds": []})


def test_negative_depth_rejected():
    with pytest.raises(ValidationError):
        GetProjectTreeInput.model_validate({"project": "p/q", "maxDepth": -1})


def test_replace_all_element_specs():
    payload = ReplaceAllElementsInput.model_validate(
        {
            "project": "p/q",
            "elements": [
                {"id": "a", "name": "A", "type": "FOLDER", "level": 0, "extra": "ignored"},
                {"id": "b", "name": "B", "type": "WORLDBUILDING", "level": 1, "schemaId": "character"},
            ],
        }
    )
    assert payload.elements[1].schema_id == "character"
    with pytest.raises(ValidationError):
        ReplaceAllElementsInput.model_validate(
            {"project": "p/q", "elements": [{"id": "a", "name": "A", "type": "FOLDER", "level": -1}]}
        )


def test_media_content_as_alias():
    payload = GetMediaContentInput.model_validate({"project": "p/q", "as": "text", "maxBytes": 10})
    assert payload.as_ == "text"
    assert payload.max_bytes == 10
