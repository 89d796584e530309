"""WordPressHttpClient request construction and response handling."""

from __future__ import annotations

import base64
import json
from unittest.mock import MagicMock

import pytest
import requests

from tools.credentials import WordPressCredentials
from tools.http_client import WordPressHttpClient, WordPressHttpError, _sanitize_for_log
from tools.transport import BinaryRequestOptions, RequestOptions


def _response(status: int = 200, payload=None, text: str | None = None, content_type: str = "application/json"):
    response = requests.Response()
    response.status_code = status
    body = text if text is not None else json.dumps(payload)
    response._content = body.encode("utf-8")
    response.headers["Content-Type"] = content_type
    response.url = "https://example.com/wp-json/wp/v2/posts"
    return response


def _client(response, authentication: str = "basicAuth") -> tuple[WordPressHttpClient, MagicMock]:
    session = MagicMock(spec=requests.Session)
    session.request.return_value = response
    credentials = WordPressCredentials(
        base_url="https://example.com/",
        authentication=authentication,
        username="admin",
        password="pw",
    )
    return WordPressHttpClient(credentials=credentials, session=session), session


def test_get_request_builds_url_query_and_auth() -> None:
    client, session = _client(_response(payload=[{"id": 1}]))

    result = client.request(RequestOptions(endpoint="/posts", qs={"per_page": 10, "context": "view"}))

    assert result == [{"id": 1}]
    kwargs = session.request.call_args.kwargs
    assert kwargs["method"] == "GET"
    assert kwargs["url"] == "https://example.com/wp-json/wp/v2/posts"
    assert kwargs["params"] == {"per_page": 10, "context": "view"}
    assert "json" not in kwargs
    expected = base64.b64encode(b"admin:pw").decode("ascii")
    assert kwargs["headers"]["Authorization"] == f"Basic {expected}"
    assert kwargs["headers"]["Accept"] == "application/json"
    assert kwargs["timeout"] == 30


def test_boolean_query_values_are_lowercase() -> None:
    client, session = _client(_response(payload={"deleted": True}))

    client.request(RequestOptions(endpoint="posts/3", method="DELETE", qs={"force": True}))

    kwargs = session.request.call_args.kwargs
    assert kwargs["params"] == {"force": "true"}
    assert kwargs["json"] == {}


def test_post_sends_json_body() -> None:
    client, session = _client(_response(payload={"id": 9}))

    client.request(RequestOptions(endpoint="posts", method="POST", body={"title": "T"}))

    kwargs = session.request.call_args.kwargs
    assert kwargs["json"] == {"title": "T"}
    assert kwargs["headers"]["Content-Type"] == "application/json"


def test_oauth2_sends_no_authorization() -> None:
    client, session = _client(_response(payload=[]), authentication="oauth2")

    client.request(RequestOptions(endpoint="users"))

    assert "Authorization" not in session.request.call_args.kwargs["headers"]


def test_binary_request_keeps_caller_headers() -> None:
    client, session = _client(_response(status=201, payload={"id": 4}))

    result = client.request_binary(
        BinaryRequestOptions(
            endpoint="media",
            data=b"bytes",
            headers={"Content-Disposition": 'attachment; filename="a.png"', "Content-Type": "image/png"},
        )
    )

    assert result == {"id": 4}
    kwargs = session.request.call_args.kwargs
    assert kwargs["data"] == b"bytes"
    assert kwargs["headers"]["Content-Type"] == "image/png"
    assert kwargs["headers"]["Content-Disposition"] == 'attachment; filename="a.png"'


def test_error_response_raises_with_wordpress_message() -> None:
    payload = {"code": "rest_post_invalid_id", "message": "Invalid post ID.", "data": {"status": 404}}
    client, _ = _client(_response(status=404, payload=payload))

    with pytest.raises(WordPressHttpError) as excinfo:
        client.request(RequestOptions(endpoint="posts/999"))

    assert excinfo.value.status_code == 404
    assert "[rest_post_invalid_id] Invalid post ID." in str(excinfo.value)
    assert excinfo.value.item_index is None


def test_network_error_is_wrapped() -> None:
    client, session = _client(_response(payload={}))
    session.request.side_effect = requests.ConnectionError("refused")

    with pytest.raises(WordPressHttpError) as excinfo:
        client.request(RequestOptions(endpoint="posts"))

    assert excinfo.value.status_code is None
    assert session.request.call_count == 1


def test_html_response_is_rejected() -> None:
    client, _ = _client(_response(text="<html>wp-login</html>", content_type="text/html"))

    with pytest.raises(WordPressHttpError) as excinfo:
        client.request(RequestOptions(endpoint="posts"))

    assert "HTML" in str(excinfo.value)


def test_empty_body_returns_none() -> None:
    client, _ = _client(_response(status=204, text=""))

    assert client.request(RequestOptions(endpoint="posts/1", method="DELETE")) is None


def test_empty_base_url_is_rejected() -> None:
    with pytest.raises(ValueError):
        WordPressHttpClient(credentials=WordPressCredentials(base_url=""))


def test_sanitize_masks_basic_credentials() -> None:
    assert _sanitize_for_log("Basic YWRtaW46cHc=") == "Basic ***"
