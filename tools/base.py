# where: wordpress/tools/base.py
# what: Shared helper utilities for WordPress tools (credentials, messaging, error hints).
# why: Keep the tool implementation focused on translating parameters into dispatcher calls.

from __future__ import annotations

import json
import logging
from typing import Any

from dify_plugin import Tool
from dify_plugin.entities.tool import ToolInvokeMessage

from .credentials import WordPressCredentials
from .http_client import WordPressHttpClient, WordPressHttpError

logger = logging.getLogger(__name__)


class BaseWordPressTool(Tool):
    """Base class that takes care of credential loading and HTTP client creation."""

    def _load_credentials(self) -> WordPressCredentials:
        raw: dict[str, Any] = getattr(self.runtime, "credentials", {}) or {}
        credentials = WordPressCredentials.from_mapping(raw)

        # デバッグ用: 取得した認証情報をログ出力（機密情報はマスク）
        logger.debug(
            "Loading credentials: base_url=%s, authentication=%s, username=%s, password=%s",
            credentials.base_url or "(empty)",
            credentials.authentication,
            credentials.username or "(empty)",
            "***" if credentials.password else "(empty)",
        )
        return credentials

    def _create_http_client(self, credentials: WordPressCredentials) -> WordPressHttpClient:
        """Create a WordPress HTTP client from the provider credentials."""
        logger.debug("Creating WordPress HTTP client")
        return WordPressHttpClient.from_credentials(credentials)

    # ---- Messaging helpers -------------------------------------------------

    def _create_text_message(self, text: str) -> ToolInvokeMessage:
        return self.create_text_message(text)

    def _create_json_message(self, payload: dict[str, Any]) -> ToolInvokeMessage:
        return self.create_json_message(payload)

    def _handle_error(self, error: Exception, action: str) -> list[ToolInvokeMessage]:
        logger.exception("Failed to %s: %s", action, error)
        return [self._create_text_message(describe_error(error, action))]


def describe_error(error: Exception, action: str) -> str:
    """Build the user facing failure text, with hints derived from the error."""
    hints: list[str] = []
    message = str(error)

    if isinstance(error, WordPressHttpError):
        if error.status_code:
            message = f"WordPress APIエラー (HTTP {error.status_code}): {error}"
        message += _describe_error_body(error.body)

    item_index = getattr(error, "item_index", None)
    if item_index is not None:
        message = f"[item {item_index}] {message}"

    lowered = message.lower()
    # エラーメッセージに基づいてヒントを追加
    if "401" in message or "unauthorized" in lowered:
        hints.append("WordPressの認証情報（ユーザー名またはパスワード）が無効です。")
        hints.append("アプリケーションパスワードを使う場合は、WordPress管理画面で正しく生成されているか確認してください。")
    if "403" in message or "forbidden" in lowered:
        hints.append("WordPressユーザーに必要な権限がありません。")
    if "404" in message or "rest_no_route" in lowered or "not found" in lowered:
        hints.append("指定されたリソースまたはエンドポイントが見つかりません。")
        hints.append("カスタム投稿タイプの場合は、スラッグではなくREST base（例: books）を指定してください。")
    if "429" in message or "rate" in lowered:
        hints.append("短時間にリクエストしすぎている可能性があります。数秒待って再実行してください")
    if "400" in message or "rest_invalid_param" in lowered:
        hints.append("リクエストパラメータの形式を確認してください（タイトル、本文、IDなど）")
    if "500" in message or "internal server error" in lowered:
        hints.append("WordPressサーバーでエラーが発生しました。WordPressサイトのログを確認してください。")

    text = f"{action} に失敗しました: {message}"
    if hints:
        text += "\n\n" + "\n".join(f"ヒント: {hint}" for hint in hints)
    return text


def _describe_error_body(body: str | None) -> str:
    if not body:
        return ""
    try:
        body_json = json.loads(body)
    except ValueError:
        return f"\n詳細: {body[:500]}"

    if not isinstance(body_json, dict):
        return ""

    # WordPress REST APIのエラーフォーマット
    details = ""
    code = body_json.get("code", "")
    error_message = body_json.get("message", "")
    if error_message:
        details += f"\n詳細: [{code}] {error_message}" if code else f"\n詳細: {error_message}"

    data = body_json.get("data")
    params = data.get("params") if isinstance(data, dict) else None
    if isinstance(params, dict) and params:
        param_errors = "; ".join(f"{param}: {param_msg}" for param, param_msg in params.items())
        details += f"\nパラメータエラー: {param_errors}"
    return details
