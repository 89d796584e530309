# where: wordpress/tools/wordpress.py
# what: Implements the WordPress Enhanced tool (posts, custom post types, media, users).
# why: Allow Dify workflows to run WordPress REST API operations item by item.

from __future__ import annotations

import logging
from typing import Any

from dify_plugin.entities import I18nObject, ParameterOption
from dify_plugin.entities.tool import ToolInvokeMessage

from . import base
from .discovery import ResourceOptionCache, acf_field_options
from .dispatcher import WordPressDispatcher
from .parameters import parse_bool, parse_input_items

logger = logging.getLogger(__name__)

# プロセス内で共有する投稿タイプのキャッシュ（初期値は組み込みテーブル）
_RESOURCE_CACHE = ResourceOptionCache()


def _to_parameter_options(options: list[tuple[str, str]]) -> list[ParameterOption]:
    return [
        ParameterOption(value=value, label=I18nObject(en_US=label, ja_JP=label))
        for label, value in options
    ]


class WordPressTool(base.BaseWordPressTool):
    def _invoke(self, tool_parameters: dict[str, Any]) -> list[ToolInvokeMessage]:
        try:
            credentials = self._load_credentials()
            client = self._create_http_client(credentials)
            dispatcher = WordPressDispatcher(client, credentials, resource_cache=_RESOURCE_CACHE)

            items = parse_input_items(tool_parameters)
            continue_on_fail = parse_bool(tool_parameters.get("continue_on_fail", False))

            logger.debug(
                "Running %s on %s for %d item(s) (continue_on_fail=%s)",
                tool_parameters.get("operation"),
                tool_parameters.get("resource"),
                len(items),
                continue_on_fail,
            )
            records = dispatcher.execute(items, continue_on_fail=continue_on_fail)

            failed = sum(1 for record in records if record.error is not None)
            result_text = f"WordPressで{len(items)}件の項目を処理し、{len(records)}件の結果を取得しました"
            if failed:
                result_text += f"（エラー {failed}件）"

            return [
                self._create_text_message(result_text),
                self._create_json_message({"items": [record.json for record in records]}),
            ]
        except Exception as exc:  # noqa: BLE001
            return self._handle_error(exc, "WordPress操作")

    def _fetch_parameter_options(self, parameter: str) -> list[ParameterOption]:
        if parameter == "resource":
            try:
                client = self._create_http_client(self._load_credentials())
            except ValueError as exc:
                logger.warning("WordPress credentials not configured for resource options: %s", exc)
            else:
                _RESOURCE_CACHE.refresh(client)
            return _to_parameter_options(_RESOURCE_CACHE.resource_options())

        if parameter == "acf_field_key":
            # dynamic-select はほかのパラメータ値を受け取れないため、投稿向けの候補を返す
            return _to_parameter_options(acf_field_options("post"))

        return []
