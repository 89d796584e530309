# where: wordpress/tools/file_utils.py
# what: Shared helpers for turning Dify file inputs into in-memory binary payloads.
# why: Media upload sends the raw file body to WordPress, so no temporary files are needed.

from __future__ import annotations

import base64
import binascii
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests

_DOWNLOAD_TIMEOUT = 30
_CHUNK_SIZE = 512 * 1024
_MAX_DOWNLOAD_SIZE = 10 * 1024 * 1024  # 10 MB maximum download size

DEFAULT_FILE_NAME = "upload.bin"


@dataclass(frozen=True, slots=True)
class BinaryPayload:
    data: bytes
    file_name: str = DEFAULT_FILE_NAME
    mime_type: str | None = None


def resolve_binary(file_info: Any) -> BinaryPayload:
    """Convert a Dify file, dict, bytes or base64 string into a BinaryPayload."""
    if isinstance(file_info, BinaryPayload):
        return file_info

    if isinstance(file_info, (bytes, bytearray)):
        return BinaryPayload(data=bytes(file_info))

    if isinstance(file_info, str):
        return BinaryPayload(data=_coerce_bytes(file_info))

    serialized = _serialize_file_info(file_info)
    file_name = str(serialized.get("filename") or serialized.get("file_name") or serialized.get("name") or DEFAULT_FILE_NAME)
    mime_type = serialized.get("mime_type") or serialized.get("mimeType") or _guess_mime_type(file_name)

    content = serialized.get("blob") or serialized.get("content") or serialized.get("data")
    if content:
        return BinaryPayload(data=_coerce_bytes(content), file_name=file_name, mime_type=mime_type)

    url = serialized.get("url")
    if url:
        return BinaryPayload(data=_download(str(url), serialized), file_name=file_name, mime_type=mime_type)

    raise ValueError("ファイル情報に blob/url/content のいずれも含まれていません")


def _serialize_file_info(file_info: Any) -> dict[str, Any]:
    if isinstance(file_info, dict):
        return dict(file_info)

    exportable: dict[str, Any] = {}
    for attr in ("filename", "name", "mime_type", "url", "headers", "authorization", "auth"):
        if hasattr(file_info, attr):
            exportable[attr] = getattr(file_info, attr)

    # Dify の File.blob はアクセス時にダウンロードするため一度だけ評価する
    blob = getattr(file_info, "blob", None)
    if blob is not None:
        exportable["blob"] = blob

    if exportable:
        return exportable

    if hasattr(file_info, "model_dump"):
        return dict(file_info.model_dump())

    raise ValueError("ファイルパラメータの構造を解釈できません")


def _coerce_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        stripped = value.strip()
        try:
            return base64.b64decode(stripped, validate=True)
        except (binascii.Error, ValueError):
            return stripped.encode("utf-8")
    raise ValueError("content/data には bytes か base64文字列を指定してください")


def _download(url: str, file_meta: dict[str, Any]) -> bytes:
    normalized = url.strip()
    if not normalized:
        raise ValueError("ファイルURLが空です")

    headers: dict[str, str] = {}
    raw_headers = file_meta.get("headers")
    if isinstance(raw_headers, dict):
        for key, value in raw_headers.items():
            if isinstance(key, str) and isinstance(value, str) and key.strip():
                headers[key.strip()] = value
    auth_token = file_meta.get("authorization") or file_meta.get("auth")
    if isinstance(auth_token, str) and auth_token.strip():
        headers.setdefault("Authorization", auth_token.strip())

    with requests.get(normalized, headers=headers or None, stream=True, timeout=_DOWNLOAD_TIMEOUT) as response:
        response.raise_for_status()

        content_length = response.headers.get("Content-Length")
        if content_length and content_length.isdigit() and int(content_length) > _MAX_DOWNLOAD_SIZE:
            raise ValueError(
                f"ファイルサイズが大きすぎます ({int(content_length) / 1024 / 1024:.1f}MB)。"
                f"最大 {_MAX_DOWNLOAD_SIZE / 1024 / 1024:.0f}MB まで対応しています"
            )

        chunks: list[bytes] = []
        downloaded_size = 0
        for chunk in response.iter_content(_CHUNK_SIZE):
            if not chunk:
                continue
            downloaded_size += len(chunk)
            if downloaded_size > _MAX_DOWNLOAD_SIZE:
                raise ValueError(
                    f"ダウンロード中にファイルサイズが制限を超えました。"
                    f"最大 {_MAX_DOWNLOAD_SIZE / 1024 / 1024:.0f}MB まで対応しています"
                )
            chunks.append(chunk)
    return b"".join(chunks)


def _guess_mime_type(file_name: str) -> str | None:
    suffix = Path(file_name).suffix
    if not suffix:
        return None
    mime_type, _ = mimetypes.guess_type(file_name)
    return mime_type
