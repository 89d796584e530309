"""User facing error text produced at the tool boundary."""

from __future__ import annotations

import json

from tools.base import describe_error
from tools.http_client import WordPressHttpError
from tools.validators import WordPressOperationError


def test_http_error_includes_wordpress_details_and_hints() -> None:
    body = json.dumps(
        {
            "code": "rest_invalid_param",
            "message": "Invalid parameter(s): status",
            "data": {"status": 400, "params": {"status": "status is not one of publish, draft."}},
        }
    )
    error = WordPressHttpError(400, "WordPress APIエラー (400): [rest_invalid_param] Invalid parameter(s): status", body=body)
    error.item_index = 2

    text = describe_error(error, "WordPress操作")

    assert text.startswith("WordPress操作 に失敗しました: [item 2] WordPress APIエラー (HTTP 400)")
    assert "詳細: [rest_invalid_param] Invalid parameter(s): status" in text
    assert "パラメータエラー: status: status is not one of publish, draft." in text
    assert "ヒント:" in text


def test_rest_no_route_suggests_rest_base() -> None:
    error = WordPressHttpError(404, "WordPress APIエラー (404): [rest_no_route] No route was found")

    text = describe_error(error, "WordPress操作")

    assert "REST base" in text


def test_operation_error_without_hints() -> None:
    text = describe_error(WordPressOperationError("リソースを指定してください"), "WordPress操作")

    assert text == "WordPress操作 に失敗しました: リソースを指定してください"
