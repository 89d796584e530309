# where: wordpress/tools/operations.py
# what: Typed payloads for every supported (resource, operation) pair and the parser that builds them.
# why: Each operation carries only the fields it accepts, so the dispatcher never probes for optional inputs.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

import requests

from . import validators
from .file_utils import BinaryPayload, resolve_binary
from .validators import WordPressOperationError

logger = logging.getLogger(__name__)

RESOURCE_MEDIA = "media"
RESOURCE_USER = "user"

POST_OPERATIONS = ("create", "read", "update", "delete")
MEDIA_OPERATIONS = ("mediaUpload", "mediaRead", "mediaUpdate", "mediaDelete")
USER_OPERATIONS = ("userCreate", "userRead", "userUpdate", "userDelete")

DEFAULT_BINARY_PROPERTY = "data"


def is_post_like(resource: str) -> bool:
    return resource not in (RESOURCE_MEDIA, RESOURCE_USER)


# ---- Post-like resources (post, page, custom post types) --------------------


@dataclass(frozen=True, slots=True)
class PostRead:
    resource: str
    limit: int = validators.DEFAULT_LIMIT
    qs: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PostCreate:
    resource: str
    title: str = ""
    content: str = ""
    status: str = "draft"
    body: dict[str, Any] = field(default_factory=dict)
    acf: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class PostUpdate:
    resource: str
    item_id: str
    # None は「未指定」、空文字列は「空で更新」
    title: str | None = None
    content: str | None = None
    status: str | None = None
    body: dict[str, Any] = field(default_factory=dict)
    acf: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class PostDelete:
    resource: str
    item_id: str


# ---- Media ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MediaUpload:
    binary: BinaryPayload
    title: str | None = None
    description: str | None = None
    caption: str | None = None
    alt_text: str | None = None
    body: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class MediaRead:
    limit: int = validators.DEFAULT_LIMIT
    qs: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class MediaUpdate:
    item_id: str
    title: str | None = None
    description: str | None = None
    caption: str | None = None
    alt_text: str | None = None
    body: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class MediaDelete:
    item_id: str


# ---- Users ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class UserCreate:
    username: str
    email: str
    password: str
    first_name: str = ""
    last_name: str = ""
    nickname: str = ""
    url: str = ""
    description: str = ""
    role: str = "subscriber"
    body: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class UserRead:
    limit: int = validators.DEFAULT_LIMIT
    qs: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class UserUpdate:
    user_id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    nickname: str | None = None
    url: str | None = None
    description: str | None = None
    role: str | None = None
    body: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class UserDelete:
    user_id: str
    reassign: str | None = None


Operation = Union[
    PostRead, PostCreate, PostUpdate, PostDelete,
    MediaUpload, MediaRead, MediaUpdate, MediaDelete,
    UserCreate, UserRead, UserUpdate, UserDelete,
]


# ---- Parsing ----------------------------------------------------------------


def _options(fields: Mapping[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return (qs, body) from the ``options`` collection."""
    options = validators.parse_json_object(fields.get("options"), "options")
    qs = validators.parse_json_object(options.get("qs"), "options.qs")
    body = validators.parse_json_object(options.get("body"), "options.body")
    return qs, body


def _acf(fields: Mapping[str, Any]) -> dict[str, Any] | None:
    raw = fields.get("acf_fields")
    if isinstance(raw, str):
        raw = validators.decode_acf_value(raw)
    if not raw:
        return None
    # コレクション形式 {"values": [...]}、リスト形式、{フィールド名: 値} 形式を受け付ける
    if isinstance(raw, Mapping):
        if isinstance(raw.get("values"), list):
            entries = raw["values"]
        else:
            entries = [{"key": key, "value": value} for key, value in raw.items()]
    else:
        entries = raw
    if not entries:
        return None
    if not isinstance(entries, list):
        raise WordPressOperationError("acf_fieldsは {key, value} のリストである必要があります")
    return validators.reduce_acf_fields(entries)


def _optional_text(fields: Mapping[str, Any], key: str) -> str | None:
    value = fields.get(key)
    return None if value is None else str(value)


def _text(fields: Mapping[str, Any], key: str, default: str = "") -> str:
    value = fields.get(key)
    return default if value is None else str(value)


def _unsupported(resource: str, operation: str, family_hint: str | None = None) -> WordPressOperationError:
    message = f"オペレーション '{operation}' はリソース '{resource}' ではサポートされていません"
    if family_hint:
        message += f"。{family_hint}用のオペレーションを選択してください"
    return WordPressOperationError(message)


def build_operation(
    resource: str,
    operation: str,
    fields: Mapping[str, Any],
    binary: Mapping[str, Any] | None = None,
    item_index: int | None = None,
) -> Operation:
    """Build the typed payload for one input item.

    ``fields`` holds the per-item parameter values; a missing key or ``None``
    means the caller left the field unset. ``binary`` maps binary property
    names to file inputs and is only consulted for ``mediaUpload``.
    """
    resource = (resource or "").strip()
    operation = (operation or "").strip()
    if not resource:
        raise WordPressOperationError("リソースを指定してください")

    if is_post_like(resource):
        return _build_post_operation(resource, operation, fields)
    if resource == RESOURCE_MEDIA:
        return _build_media_operation(operation, fields, binary or {}, item_index)
    return _build_user_operation(operation, fields)


def _build_post_operation(resource: str, operation: str, fields: Mapping[str, Any]) -> Operation:
    if operation == "read":
        qs, _ = _options(fields)
        return PostRead(resource=resource, limit=validators.validate_limit(fields.get("limit")), qs=qs)

    if operation == "create":
        _, body = _options(fields)
        status = _text(fields, "status", "draft") or "draft"
        validators.validate_post_status(status)
        return PostCreate(
            resource=resource,
            title=_text(fields, "title"),
            content=_text(fields, "content"),
            status=status,
            body=body,
            acf=_acf(fields),
        )

    if operation == "update":
        item_id = validators.validate_item_id(fields.get("post_id"), "Item ID", operation)
        _, body = _options(fields)
        status = _optional_text(fields, "status")
        validators.validate_post_status(status)
        return PostUpdate(
            resource=resource,
            item_id=item_id,
            title=_optional_text(fields, "title"),
            content=_optional_text(fields, "content"),
            status=status,
            body=body,
            acf=_acf(fields),
        )

    if operation == "delete":
        item_id = validators.validate_item_id(fields.get("post_id"), "Item ID", operation)
        return PostDelete(resource=resource, item_id=item_id)

    raise _unsupported(resource, operation, "投稿タイプ")


def _build_media_operation(
    operation: str,
    fields: Mapping[str, Any],
    binary: Mapping[str, Any],
    item_index: int | None,
) -> Operation:
    if operation == "mediaUpload":
        property_name = _text(fields, "file_binary_property", DEFAULT_BINARY_PROPERTY) or DEFAULT_BINARY_PROPERTY
        file_info = binary.get(property_name)
        if file_info is None:
            raise WordPressOperationError(
                f"バイナリプロパティ '{property_name}' にデータがありません (item {item_index})",
                item_index=item_index,
            )
        try:
            payload = resolve_binary(file_info)
        except (ValueError, requests.RequestException) as exc:
            raise WordPressOperationError(
                f"バイナリプロパティ '{property_name}' のファイルを読み込めません: {exc}",
                item_index=item_index,
            ) from exc
        _, body = _options(fields)
        return MediaUpload(
            binary=payload,
            title=_optional_text(fields, "media_title"),
            description=_optional_text(fields, "media_description"),
            caption=_optional_text(fields, "media_caption"),
            alt_text=_optional_text(fields, "media_alt_text"),
            body=body,
        )

    if operation == "mediaRead":
        qs, _ = _options(fields)
        return MediaRead(limit=validators.validate_limit(fields.get("limit")), qs=qs)

    if operation == "mediaUpdate":
        item_id = validators.validate_item_id(fields.get("post_id"), "Media ID", operation)
        _, body = _options(fields)
        return MediaUpdate(
            item_id=item_id,
            title=_optional_text(fields, "media_title"),
            description=_optional_text(fields, "media_description"),
            caption=_optional_text(fields, "media_caption"),
            alt_text=_optional_text(fields, "media_alt_text"),
            body=body,
        )

    if operation == "mediaDelete":
        item_id = validators.validate_item_id(fields.get("post_id"), "Media ID", operation)
        return MediaDelete(item_id=item_id)

    raise _unsupported(RESOURCE_MEDIA, operation, "メディア")


def _build_user_operation(operation: str, fields: Mapping[str, Any]) -> Operation:
    if operation == "userCreate":
        _, body = _options(fields)
        role = _text(fields, "user_role", "subscriber") or "subscriber"
        validators.validate_user_role(role)
        return UserCreate(
            username=validators.require_text(fields.get("user_username"), "Username", operation),
            email=validators.require_text(fields.get("user_email"), "Email", operation),
            password=validators.require_text(fields.get("user_password"), "Password", operation),
            first_name=_text(fields, "user_first_name"),
            last_name=_text(fields, "user_last_name"),
            nickname=_text(fields, "user_nickname"),
            url=_text(fields, "user_url"),
            description=_text(fields, "user_description"),
            role=role,
            body=body,
        )

    if operation == "userRead":
        qs, _ = _options(fields)
        return UserRead(limit=validators.validate_limit(fields.get("limit")), qs=qs)

    if operation == "userUpdate":
        user_id = validators.validate_item_id(fields.get("user_id"), "User ID", operation)
        _, body = _options(fields)
        role = _optional_text(fields, "user_role")
        validators.validate_user_role(role)
        return UserUpdate(
            user_id=user_id,
            email=_optional_text(fields, "user_email"),
            first_name=_optional_text(fields, "user_first_name"),
            last_name=_optional_text(fields, "user_last_name"),
            nickname=_optional_text(fields, "user_nickname"),
            url=_optional_text(fields, "user_url"),
            description=_optional_text(fields, "user_description"),
            role=role,
            body=body,
        )

    if operation == "userDelete":
        user_id = validators.validate_item_id(fields.get("user_id"), "User ID", operation)
        reassign = (_optional_text(fields, "user_reassign") or "").strip()
        return UserDelete(user_id=user_id, reassign=reassign or None)

    raise _unsupported(RESOURCE_USER, operation, "ユーザー")
