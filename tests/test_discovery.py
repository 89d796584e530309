"""Resource option discovery and ACF placeholder options."""

from __future__ import annotations

from conftest import FakeTransport
from tools.discovery import (
    DEFAULT_TYPES,
    ResourceOptionCache,
    acf_field_options,
    resource_options,
)
from tools.http_client import WordPressHttpError


def test_default_table_is_initial_state() -> None:
    cache = ResourceOptionCache()

    assert cache.types == DEFAULT_TYPES
    assert cache.types is not DEFAULT_TYPES
    assert [value for _, value in cache.resource_options()] == [
        "post", "media", "user", "page", "posts", "pages", "my_cpts",
    ]


def test_refresh_replaces_table_from_types_endpoint() -> None:
    transport = FakeTransport(
        responses=[
            {
                "post": {"name": "Posts", "slug": "post", "rest_base": "posts"},
                "book": {"name": "Books", "slug": "book", "rest_base": "books"},
                "wp_block": {"name": "Patterns", "slug": "wp_block"},
            }
        ]
    )
    cache = ResourceOptionCache()

    assert cache.refresh(transport) is True
    assert transport.calls[0].endpoint == "types"
    assert transport.calls[0].method == "GET"
    assert ("Books", "books") in cache.resource_options()
    assert ("Patterns", "wp_block") in cache.resource_options()
    assert "my_cpt" not in cache.types
    assert cache.rest_base_for("book") == "books"


def test_failed_refresh_keeps_last_good_table() -> None:
    transport = FakeTransport(responses=[WordPressHttpError(401, "unauthorized"), []])
    cache = ResourceOptionCache()

    assert cache.refresh(transport) is False
    assert cache.refresh(transport) is False
    assert cache.types == DEFAULT_TYPES


def test_resource_options_deduplicate_by_rest_base() -> None:
    options = resource_options(
        {
            "attachment": {"name": "Media", "slug": "attachment", "rest_base": "media"},
            "user": {"name": "Users", "slug": "user"},
        }
    )

    values = [value for _, value in options]
    assert values == ["post", "media", "user", "page"]


def test_acf_options_for_posts() -> None:
    values = [value for _, value in acf_field_options("posts")]

    assert values == ["text_field", "image_field", "repeater_field"]


def test_acf_options_for_custom_type() -> None:
    options = acf_field_options("book")

    assert options[0] == ("(ACF Fields for book - dynamic)", "")
    assert [value for _, value in options[1:]] == ["example_field_1", "example_field_2"]


def test_acf_options_not_applicable() -> None:
    assert acf_field_options("media") == [("N/A for this resource or no resource selected", "")]
    assert acf_field_options("") == [("N/A for this resource or no resource selected", "")]
