# where: wordpress/tools/dispatcher.py
# what: Turns input items into WordPress REST API calls and collects the results.
# why: One place owns endpoint resolution, request bodies and the per-item failure policy.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from . import validators
from .credentials import WordPressCredentials
from .discovery import ResourceOptionCache
from .http_client import WordPressHttpError
from .operations import (
    MediaDelete,
    MediaRead,
    MediaUpdate,
    MediaUpload,
    Operation,
    PostCreate,
    PostDelete,
    PostRead,
    PostUpdate,
    UserCreate,
    UserDelete,
    UserRead,
    UserUpdate,
    build_operation,
)
from .transport import BinaryRequestOptions, RequestOptions, Transport
from .validators import WordPressOperationError

logger = logging.getLogger(__name__)

MEDIA_REST_BASE = "media"
USER_REST_BASE = "users"


@dataclass(slots=True)
class InputItem:
    """Parameter values for one item; ``fields`` includes ``resource`` and ``operation``."""

    fields: Mapping[str, Any]
    binary: Mapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ExecutionRecord:
    json: Any
    item_index: int
    error: Exception | None = None


def _read_query(limit: int, qs: Mapping[str, Any]) -> dict[str, Any]:
    return validators.flatten_query({"per_page": limit, "context": "view", **qs})


class WordPressDispatcher:
    def __init__(
        self,
        transport: Transport,
        credentials: WordPressCredentials,
        resource_cache: ResourceOptionCache | None = None,
    ) -> None:
        self.transport = transport
        self.credentials = credentials
        self.resource_cache = resource_cache or ResourceOptionCache()

    def execute(self, items: Sequence[InputItem], continue_on_fail: bool = False) -> list[ExecutionRecord]:
        """Process items in order, one request cycle at a time.

        With ``continue_on_fail`` a failing item yields ``{"error": message}``
        and processing moves on; otherwise the exception is tagged with the
        item index and re-raised, and later items are not processed.
        """
        records: list[ExecutionRecord] = []
        for index, item in enumerate(items):
            try:
                response = self.process_item(item, index)
            except Exception as exc:
                logger.error("WordPress: error processing item %d: %s", index, exc)
                if continue_on_fail:
                    records.append(ExecutionRecord(json={"error": str(exc)}, item_index=index, error=exc))
                    continue
                if isinstance(exc, (WordPressOperationError, WordPressHttpError)) and exc.item_index is None:
                    exc.item_index = index
                raise

            if isinstance(response, list):
                records.extend(ExecutionRecord(json=entry, item_index=index) for entry in response)
            elif response is not None:
                records.append(ExecutionRecord(json=response, item_index=index))

        logger.info("Processed %d item(s), produced %d record(s)", len(items), len(records))
        return records

    def process_item(self, item: InputItem, index: int) -> Any:
        if not self.credentials.base_url:
            raise WordPressOperationError(
                "WordPress APIの認証情報またはサイトURLが設定されていません。プロバイダー設定を確認してください。",
                item_index=index,
            )

        operation = build_operation(
            item.fields.get("resource") or "",
            item.fields.get("operation") or "",
            item.fields,
            binary=item.binary,
            item_index=index,
        )
        return self.dispatch(operation)

    def dispatch(self, operation: Operation) -> Any:
        if isinstance(operation, MediaUpload):
            return self._upload_media(operation)

        if isinstance(operation, (PostRead, PostCreate, PostUpdate, PostDelete)):
            self._warn_on_rest_base_mismatch(operation.resource)

        options = self.build_request(operation)
        logger.debug("Dispatching %s to %s %s", type(operation).__name__, options.method, options.endpoint)
        return self.transport.request(options)

    def build_request(self, operation: Operation) -> RequestOptions:
        """Map a JSON operation to its endpoint, method, query and body."""
        # 投稿タイプ（post, page, カスタム投稿タイプ）
        if isinstance(operation, PostRead):
            return RequestOptions(endpoint=operation.resource, qs=_read_query(operation.limit, operation.qs))

        if isinstance(operation, PostCreate):
            body: dict[str, Any] = {
                "title": operation.title,
                "content": operation.content,
                "status": operation.status,
                **operation.body,
            }
            if operation.acf:
                body["acf"] = operation.acf
            return RequestOptions(endpoint=operation.resource, method="POST", body=body)

        if isinstance(operation, PostUpdate):
            body = dict(operation.body)
            if operation.title is not None:
                body["title"] = operation.title
            if operation.content is not None:
                body["content"] = operation.content
            if operation.status is not None:
                body["status"] = operation.status
            if operation.acf:
                body["acf"] = operation.acf
            return RequestOptions(endpoint=f"{operation.resource}/{operation.item_id}", method="POST", body=body)

        if isinstance(operation, PostDelete):
            return RequestOptions(
                endpoint=f"{operation.resource}/{operation.item_id}",
                method="DELETE",
                qs={"force": True},
            )

        # メディア
        if isinstance(operation, MediaRead):
            return RequestOptions(endpoint=MEDIA_REST_BASE, qs=_read_query(operation.limit, operation.qs))

        if isinstance(operation, MediaUpdate):
            body = dict(operation.body)
            if operation.title is not None:
                body["title"] = operation.title
            if operation.description is not None:
                body["description"] = operation.description
            if operation.caption is not None:
                body["caption"] = operation.caption
            if operation.alt_text is not None:
                body["alt_text"] = operation.alt_text
            return RequestOptions(endpoint=f"{MEDIA_REST_BASE}/{operation.item_id}", method="POST", body=body)

        if isinstance(operation, MediaDelete):
            return RequestOptions(
                endpoint=f"{MEDIA_REST_BASE}/{operation.item_id}",
                method="DELETE",
                qs={"force": True},
            )

        # ユーザー
        if isinstance(operation, UserCreate):
            body = {
                "username": operation.username,
                "email": operation.email,
                "password": operation.password,
                "first_name": operation.first_name,
                "last_name": operation.last_name,
                "nickname": operation.nickname,
                "url": operation.url,
                "description": operation.description,
                "roles": [operation.role],
                **operation.body,
            }
            return RequestOptions(endpoint=USER_REST_BASE, method="POST", body=body)

        if isinstance(operation, UserRead):
            return RequestOptions(endpoint=USER_REST_BASE, qs=_read_query(operation.limit, operation.qs))

        if isinstance(operation, UserUpdate):
            # ユーザー更新は空文字列を「未指定」として扱う（投稿更新とは異なる）
            body = dict(operation.body)
            if operation.email:
                body["email"] = operation.email
            if operation.first_name:
                body["first_name"] = operation.first_name
            if operation.last_name:
                body["last_name"] = operation.last_name
            if operation.nickname:
                body["nickname"] = operation.nickname
            if operation.url:
                body["url"] = operation.url
            if operation.description:
                body["description"] = operation.description
            if operation.role:
                body["roles"] = [operation.role]
            return RequestOptions(endpoint=f"{USER_REST_BASE}/{operation.user_id}", method="POST", body=body)

        if isinstance(operation, UserDelete):
            qs: dict[str, Any] = {"force": True}
            if operation.reassign:
                qs["reassign"] = operation.reassign
            return RequestOptions(endpoint=f"{USER_REST_BASE}/{operation.user_id}", method="DELETE", qs=qs)

        raise WordPressOperationError(f"未対応のオペレーションです: {type(operation).__name__}")

    def _upload_media(self, operation: MediaUpload) -> Any:
        binary = operation.binary
        headers = {"Content-Disposition": f'attachment; filename="{binary.file_name}"'}
        if binary.mime_type:
            headers["Content-Type"] = binary.mime_type
        auth_header = self.credentials.basic_auth_header()
        if auth_header:
            headers["Authorization"] = auth_header

        logger.debug("Uploading media %s (%d bytes)", binary.file_name, len(binary.data))
        response = self.transport.request_binary(
            BinaryRequestOptions(endpoint=MEDIA_REST_BASE, data=binary.data, headers=headers)
        )
        if not isinstance(response, dict) or not response.get("id"):
            return response

        media_id = response["id"]
        title = operation.title or binary.file_name
        changed: dict[str, Any] = {}
        if title != binary.file_name:
            changed["title"] = title
        if operation.description:
            changed["description"] = operation.description
        if operation.caption:
            changed["caption"] = operation.caption
        if operation.alt_text:
            changed["alt_text"] = operation.alt_text
        for key, value in operation.body.items():
            changed.setdefault(key, value)

        if not changed:
            return response

        logger.info("Updating metadata of uploaded media (ID: %s): %s", media_id, sorted(changed))
        endpoint = f"{MEDIA_REST_BASE}/{media_id}"
        self.transport.request(RequestOptions(endpoint=endpoint, method="POST", body={"title": title, **changed}))
        return self.transport.request(RequestOptions(endpoint=endpoint))

    def _warn_on_rest_base_mismatch(self, resource: str) -> None:
        # スラッグをそのままパスに使う。rest_baseと異なる場合は警告のみ
        rest_base = self.resource_cache.rest_base_for(resource)
        if rest_base and rest_base != resource:
            logger.warning(
                "Resource '%s' is sent as path '/wp/v2/%s' but its registered rest_base is '%s'; "
                "select '%s' as the resource if the request returns rest_no_route.",
                resource,
                resource,
                rest_base,
                rest_base,
            )
