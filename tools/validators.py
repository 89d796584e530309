# where: wordpress/tools/validators.py
# what: Validation utilities for WordPress REST API payload fields.
# why: Keep the dispatcher focused on WordPress REST API orchestration.

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)

# WordPress REST APIのper_page上限
MAX_PER_PAGE = 100
DEFAULT_LIMIT = 10

# WordPress投稿ステータスの有効な値（作成・更新時）
VALID_POST_STATUSES = {"publish", "draft", "pending", "private", "future"}

VALID_USER_ROLES = {"subscriber", "contributor", "author", "editor", "administrator"}


class WordPressOperationError(RuntimeError):
    """Raised when an item cannot be turned into a WordPress request."""

    def __init__(self, message: str, item_index: int | None = None) -> None:
        self.item_index = item_index
        super().__init__(message)


def validate_item_id(item_id: Any, label: str, operation: str) -> str:
    """Return the ID as a path segment, raising when it is missing."""
    if item_id is None:
        raise WordPressOperationError(f"{operation} オペレーションには{label}が必要です")

    item_id_str = str(item_id).strip()
    if not item_id_str:
        raise WordPressOperationError(f"{operation} オペレーションには{label}が必要です")

    # パスに埋め込むため、区切り文字を含むIDは拒否
    if "/" in item_id_str or "?" in item_id_str:
        raise WordPressOperationError(f"{label}の形式が不正です: {item_id_str}")

    return item_id_str


def validate_limit(limit: Any) -> int:
    """Validate and convert the per_page limit."""
    if limit is None or limit == "":
        return DEFAULT_LIMIT

    try:
        limit_int = int(limit)
    except (ValueError, TypeError) as exc:
        raise WordPressOperationError(f"limitは整数である必要があります: {limit}") from exc

    if limit_int < 1:
        raise WordPressOperationError(f"limitは1以上である必要があります: {limit_int}")

    if limit_int > MAX_PER_PAGE:
        raise WordPressOperationError(f"limitは最大{MAX_PER_PAGE}までです: {limit_int}")

    return limit_int


def validate_post_status(status: str | None) -> None:
    """Validate WordPress post status."""
    if status is None or status == "":
        return

    if status.strip().lower() not in VALID_POST_STATUSES:
        valid_statuses = ", ".join(sorted(VALID_POST_STATUSES))
        raise WordPressOperationError(f"無効な投稿ステータスです: {status}（有効な値: {valid_statuses}）")


def validate_user_role(role: str | None) -> None:
    if not role:
        return

    if role not in VALID_USER_ROLES:
        valid_roles = ", ".join(sorted(VALID_USER_ROLES))
        raise WordPressOperationError(f"無効なユーザーロールです: {role}（有効な値: {valid_roles}）")


def require_text(value: Any, label: str, operation: str) -> str:
    if value is None or not str(value).strip():
        raise WordPressOperationError(f"{operation} オペレーションには{label}が必要です")
    return str(value)


def flatten_query(qs: Mapping[str, Any]) -> dict[str, Any]:
    """Collapse list values to comma separated strings, as WordPress expects for ID filters."""
    flattened: dict[str, Any] = {}
    for key, value in qs.items():
        if isinstance(value, (list, tuple)):
            flattened[key] = ",".join(str(entry) for entry in value)
        else:
            flattened[key] = value
    return flattened


def decode_acf_value(value: Any) -> Any:
    """Decode a JSON encoded ACF value, falling back to the raw value."""
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        return value


def reduce_acf_fields(entries: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    acf: dict[str, Any] = {}
    for entry in entries:
        key = entry.get("key")
        if not key:
            logger.debug("Skipping ACF entry without key: %s", entry)
            continue
        acf[str(key)] = decode_acf_value(entry.get("value", ""))
    return acf


def parse_json_object(value: Any, label: str) -> dict[str, Any]:
    """Accept a dict or a JSON object string (tool parameters arrive as text)."""
    if value is None or value == "":
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError as exc:
            raise WordPressOperationError(f"{label}はJSONオブジェクトである必要があります: {exc}") from exc
        if isinstance(decoded, dict):
            return decoded
    raise WordPressOperationError(f"{label}はJSONオブジェクトである必要があります")
