# where: wordpress/tools/discovery.py
# what: Dynamic option helpers for the resource and ACF field selectors.
# why: Populate Dify dropdowns with the post types a site exposes, without blocking on failures.

from __future__ import annotations

import copy
import logging
from typing import Any

from .operations import is_post_like
from .transport import RequestOptions, Transport

logger = logging.getLogger(__name__)

# types エンドポイントに到達できない間の初期値
DEFAULT_TYPES: dict[str, dict[str, str]] = {
    "post": {"name": "Posts", "slug": "post", "rest_base": "posts"},
    "page": {"name": "Pages", "slug": "page", "rest_base": "pages"},
    "media": {"name": "Media", "slug": "attachment", "rest_base": "media"},
    "my_cpt": {"name": "My CPTs", "slug": "my_cpt", "rest_base": "my_cpts"},
}

BASE_RESOURCE_OPTIONS: tuple[tuple[str, str], ...] = (
    ("Post", "post"),
    ("Media", "media"),
    ("User", "user"),
    ("Page", "page"),
)


class ResourceOptionCache:
    """Holds the last known ``/types`` table, starting from DEFAULT_TYPES."""

    def __init__(self, types: dict[str, dict[str, Any]] | None = None) -> None:
        self._types = copy.deepcopy(types if types is not None else DEFAULT_TYPES)

    @property
    def types(self) -> dict[str, dict[str, Any]]:
        return self._types

    def refresh(self, transport: Transport) -> bool:
        """Replace the table from ``GET types``; keep the previous one on failure."""
        try:
            discovered = transport.request(RequestOptions(endpoint="types"))
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to load post types, keeping cached table: %s", exc)
            return False

        if not isinstance(discovered, dict) or not discovered:
            logger.warning("Unexpected /types response, keeping cached table: %r", type(discovered).__name__)
            return False

        self._types = {
            key: details for key, details in discovered.items() if isinstance(details, dict)
        }
        logger.info("Loaded %d post types from WordPress", len(self._types))
        return True

    def rest_base_for(self, resource: str) -> str | None:
        """Return the REST base registered for a type slug, if the table knows it."""
        for key, details in self._types.items():
            if resource in (key, details.get("slug")):
                return details.get("rest_base") or None
        return None

    def resource_options(self) -> list[tuple[str, str]]:
        return resource_options(self._types)


def resource_options(types: dict[str, dict[str, Any]]) -> list[tuple[str, str]]:
    """Merge discovered types into the static resource list as (label, value) pairs."""
    options = list(BASE_RESOURCE_OPTIONS)
    seen = {value for _, value in options}
    for key, details in types.items():
        value = details.get("rest_base") or details.get("slug") or key
        if value in seen:
            continue
        options.append((details.get("name") or value, value))
        seen.add(value)
    return options


def acf_field_options(resource: str | None) -> list[tuple[str, str]]:
    """Placeholder ACF field keys; no lookup is made against the site."""
    if not resource or not is_post_like(resource):
        return [("N/A for this resource or no resource selected", "")]

    if resource in ("post", "posts"):
        return [
            ("Text Field (text_field)", "text_field"),
            ("Image Field (image_field)", "image_field"),
            ("Repeater Field (repeater_field)", "repeater_field"),
        ]

    return [
        (f"(ACF Fields for {resource} - dynamic)", ""),
        ("Example Custom Field 1 (example_field_1)", "example_field_1"),
        ("Example Custom Field 2 (example_field_2)", "example_field_2"),
    ]
