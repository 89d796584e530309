"""Parsing of per-item fields into typed operations."""

from __future__ import annotations

import pytest

from tools.file_utils import BinaryPayload
from tools.operations import (
    MediaRead,
    MediaUpload,
    PostCreate,
    PostDelete,
    PostUpdate,
    UserDelete,
    UserUpdate,
    build_operation,
    is_post_like,
)
from tools.validators import WordPressOperationError


def test_is_post_like() -> None:
    assert is_post_like("post")
    assert is_post_like("my_cpt")
    assert not is_post_like("media")
    assert not is_post_like("user")


def test_create_defaults() -> None:
    operation = build_operation("post", "create", {})

    assert operation == PostCreate(resource="post", title="", content="", status="draft", body={}, acf=None)


def test_update_keeps_none_for_unset_fields() -> None:
    operation = build_operation("page", "update", {"post_id": 12, "title": ""})

    assert isinstance(operation, PostUpdate)
    assert operation.item_id == "12"
    assert operation.title == ""
    assert operation.content is None
    assert operation.status is None


@pytest.mark.parametrize("operation", ["update", "delete"])
def test_post_operations_require_item_id(operation: str) -> None:
    with pytest.raises(WordPressOperationError) as excinfo:
        build_operation("post", operation, {"post_id": "  "})

    assert operation in str(excinfo.value)


def test_item_id_cannot_contain_path_separators() -> None:
    with pytest.raises(WordPressOperationError):
        build_operation("post", "delete", {"post_id": "1/../users"})


def test_acf_fields_accept_collection_shape() -> None:
    operation = build_operation(
        "post",
        "create",
        {"acf_fields": {"values": [{"key": "list", "value": "[1, 2]"}, {"key": "", "value": "skipped"}]}},
    )

    assert operation.acf == {"list": [1, 2]}


def test_acf_fields_accept_flat_mapping() -> None:
    operation = build_operation("post", "update", {"post_id": 3, "acf_fields": {"subtitle": "Hello", "rating": "4"}})

    assert operation.acf == {"subtitle": "Hello", "rating": 4}


def test_acf_fields_reject_scalar() -> None:
    with pytest.raises(WordPressOperationError):
        build_operation("post", "create", {"acf_fields": "not json"})


def test_options_may_arrive_as_json_strings() -> None:
    operation = build_operation("media", "mediaRead", {"limit": "3", "options": '{"qs": {"media_type": "image"}}'})

    assert operation == MediaRead(limit=3, qs={"media_type": "image"})


@pytest.mark.parametrize("limit", [0, 101, "many"])
def test_invalid_limit(limit) -> None:
    with pytest.raises(WordPressOperationError):
        build_operation("post", "read", {"limit": limit})


def test_invalid_status_rejected() -> None:
    with pytest.raises(WordPressOperationError):
        build_operation("post", "create", {"status": "archived"})


def test_media_upload_resolves_binary_property() -> None:
    payload = BinaryPayload(data=b"abc", file_name="a.png", mime_type="image/png")

    operation = build_operation(
        "media",
        "mediaUpload",
        {"file_binary_property": "image", "media_title": "Logo"},
        binary={"image": payload},
    )

    assert isinstance(operation, MediaUpload)
    assert operation.binary is payload
    assert operation.title == "Logo"
    assert operation.description is None


def test_user_create_requires_login_fields() -> None:
    with pytest.raises(WordPressOperationError) as excinfo:
        build_operation("user", "userCreate", {"user_username": "jane", "user_email": "jane@example.com"})

    assert "Password" in str(excinfo.value)


def test_user_update_and_delete() -> None:
    update = build_operation("user", "userUpdate", {"user_id": "5", "user_email": ""})
    delete = build_operation("user", "userDelete", {"user_id": "5", "user_reassign": " "})

    assert update == UserUpdate(user_id="5", email="")
    assert delete == UserDelete(user_id="5", reassign=None)


@pytest.mark.parametrize(
    ("resource", "operation"),
    [("media", "create"), ("user", "read"), ("post", "mediaUpload"), ("page", "userDelete"), ("user", "unknown")],
)
def test_unsupported_combinations_name_both_values(resource: str, operation: str) -> None:
    with pytest.raises(WordPressOperationError) as excinfo:
        build_operation(resource, operation, {"post_id": "1", "user_id": "1"})

    assert f"'{operation}'" in str(excinfo.value)
    assert f"'{resource}'" in str(excinfo.value)


def test_missing_resource() -> None:
    with pytest.raises(WordPressOperationError):
        build_operation("", "read", {})


def test_delete_operation_is_plain_data() -> None:
    assert build_operation("my_cpt", "delete", {"post_id": 4}) == PostDelete(resource="my_cpt", item_id="4")
