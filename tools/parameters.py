# where: wordpress/tools/parameters.py
# what: Converts Dify tool parameters into dispatcher input items.
# why: Dify passes one flat parameter dict; the dispatcher works on a list of per-item field sets.

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from .dispatcher import InputItem
from .operations import DEFAULT_BINARY_PROPERTY
from .validators import WordPressOperationError

logger = logging.getLogger(__name__)

# 項目ごとのフィールドではなく、バッチ全体の制御に使うパラメータ
_CONTROL_KEYS = {"items", "continue_on_fail", "file", "query_options", "body_options"}


def parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _decode_json(value: Any, label: str) -> Any:
    if not isinstance(value, str):
        return value
    stripped = value.strip()
    if not stripped:
        return None
    try:
        return json.loads(stripped)
    except ValueError as exc:
        raise WordPressOperationError(f"{label}のJSONを解析できません: {exc}") from exc


def _base_fields(tool_parameters: Mapping[str, Any]) -> dict[str, Any]:
    fields = {key: value for key, value in tool_parameters.items() if key not in _CONTROL_KEYS}

    qs = _decode_json(tool_parameters.get("query_options"), "query_options")
    body = _decode_json(tool_parameters.get("body_options"), "body_options")
    if qs or body:
        fields["options"] = {"qs": qs or {}, "body": body or {}}

    if "acf_fields" in fields:
        fields["acf_fields"] = _decode_json(fields["acf_fields"], "acf_fields")
    return fields


def parse_input_items(tool_parameters: Mapping[str, Any]) -> list[InputItem]:
    """Build the item list: one item from the flat parameters, or one per ``items`` entry."""
    base = _base_fields(tool_parameters)
    binary: dict[str, Any] = {}
    file_param = tool_parameters.get("file")
    if file_param:
        property_name = base.get("file_binary_property") or DEFAULT_BINARY_PROPERTY
        binary[property_name] = file_param

    raw_items = _decode_json(tool_parameters.get("items"), "items")
    if not raw_items:
        return [InputItem(fields=base, binary=binary)]

    if not isinstance(raw_items, list):
        raise WordPressOperationError("itemsはJSON配列である必要があります")

    items: list[InputItem] = []
    for index, override in enumerate(raw_items):
        if not isinstance(override, dict):
            raise WordPressOperationError(f"items[{index}] はJSONオブジェクトである必要があります")
        override = dict(override)
        item_binary = {**binary, **(override.pop("binary", None) or {})}
        items.append(InputItem(fields={**base, **override}, binary=item_binary))

    logger.debug("Parsed %d input item(s)", len(items))
    return items
