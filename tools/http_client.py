# where: wordpress/tools/http_client.py
# what: requests-based transport for the WordPress REST API (wp/v2 namespace).
# why: Some Dify environments cannot install a WordPress SDK, so the REST calls are issued directly.

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

import requests
from requests import Response, Session

from .credentials import WordPressCredentials
from .transport import BinaryRequestOptions, RequestOptions

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 30
_MAX_LOG_BODY_LENGTH = 200  # Maximum length of response body to log


def _sanitize_for_log(text: str) -> str:
    """Sanitize sensitive information from log messages."""
    if not text:
        return text

    # Mask Basic auth credentials
    text = re.sub(r'Basic\s+[A-Za-z0-9+/=]{8,}', 'Basic ***', text, flags=re.IGNORECASE)

    # Mask long alphanumeric strings that might be passwords
    text = re.sub(r'[A-Za-z0-9]{32,}', '***', text)

    # Truncate if too long
    if len(text) > _MAX_LOG_BODY_LENGTH:
        text = text[:_MAX_LOG_BODY_LENGTH] + "... (truncated)"

    return text


class WordPressHttpError(RuntimeError):
    """Raised when the WordPress REST API call fails or returns an error response."""

    def __init__(self, status_code: int | None, message: str, body: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        self.item_index: int | None = None
        super().__init__(message)


def _encode_params(qs: dict[str, Any]) -> dict[str, Any]:
    # requestsはTrueを"True"に変換するため、WordPressが解釈できる小文字に揃える
    encoded: dict[str, Any] = {}
    for key, value in qs.items():
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        elif value is not None:
            encoded[key] = value
    return encoded


@dataclass
class WordPressHttpClient:
    credentials: WordPressCredentials
    timeout: int = _DEFAULT_TIMEOUT
    session: Session | None = None

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()

        # WordPress URLの検証
        if not self.credentials.base_url:
            raise ValueError("WordPressサイトURLが空です。Difyのプロバイダー設定でWordPressサイトURLを確認してください。")

        # ベースURLを正規化（末尾のスラッシュを削除）
        self.base_url = self.credentials.api_root
        logger.debug("WordPressHttpClient initialized with base_url: %s", self.base_url)

    @classmethod
    def from_credentials(cls, credentials: WordPressCredentials, **kwargs: Any) -> "WordPressHttpClient":
        return cls(credentials=credentials, **kwargs)

    # ---- Transport interface -----------------------------------------------

    def request(self, options: RequestOptions) -> Any:
        """Send a JSON request and return the decoded body."""
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            **options.headers,
        }
        kwargs: dict[str, Any] = {"params": _encode_params(options.qs)}
        method = options.method.upper()
        if method != "GET":
            # GET以外は空でもJSONボディを送る
            kwargs["json"] = options.body or {}

        response = self._request(method, options.endpoint, headers=headers, **kwargs)
        return self._parse_json_response(response)

    def request_binary(self, options: BinaryRequestOptions) -> Any:
        """Send a raw binary body (media upload) and return the decoded response."""
        headers = {"Accept": "application/json", **options.headers}
        response = self._request(options.method.upper(), options.endpoint, headers=headers, data=options.data)
        return self._parse_json_response(response)

    # ---- Low-level helpers -------------------------------------------------

    def build_url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Response:
        url = self.build_url(endpoint)
        headers = kwargs.pop("headers", {}) or {}

        # Basic認証の設定（OAuth2の場合はヘッダーなし）
        auth_header = self.credentials.basic_auth_header()
        if auth_header:
            headers.setdefault("Authorization", auth_header)

        logger.info("Request: %s %s", method, url)
        if "Authorization" in headers:
            logger.debug("Authorization header: %s", _sanitize_for_log(headers["Authorization"]))

        try:
            response = self._session.request(
                method=method,
                url=url,
                headers=headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            sanitized_exc = _sanitize_for_log(str(exc))
            raise WordPressHttpError(None, f"WordPress APIリクエストに失敗しました: {sanitized_exc}") from exc

        if response.status_code >= 400:
            message = self._extract_error_message(response)
            sanitized_body = _sanitize_for_log(response.text)
            logger.error(
                "WordPress APIエラー (status=%s): %s, body=%s",
                response.status_code,
                message,
                sanitized_body,
            )
            raise WordPressHttpError(response.status_code, message, body=response.text)

        return response

    def _parse_json_response(self, response: Response) -> Any:
        """Parse JSON response with better error handling."""
        content_type = response.headers.get("Content-Type", "").lower()
        response_text = response.text or ""

        # 204などの空レスポンスは結果なしとして扱う
        if not response_text.strip():
            logger.debug("Empty response body (status=%s)", response.status_code)
            return None

        # HTMLレスポンスの場合（REST API無効化、ログインページへのリダイレクトなど）
        if "text/html" in content_type:
            error_hint = "WordPress APIがHTMLレスポンスを返しました。"
            lowered = response_text.lower()
            if "login" in lowered or "ログイン" in response_text:
                error_hint += " 認証エラーの可能性があります。ユーザー名とパスワードを確認してください。"
            elif "404" in response_text or "not found" in lowered:
                error_hint += " REST APIエンドポイントが見つかりません。WordPressサイトURLが正しいか確認してください。"
            else:
                error_hint += " REST APIが有効でない可能性があります。WordPressサイトの設定を確認してください。"

            request_url = getattr(response, "url", None) or "unknown"
            logger.error(
                "JSON解析エラー: status=%s, content_type=%s, url=%s, response_preview=%s",
                response.status_code,
                content_type,
                request_url,
                _sanitize_for_log(response_text[:500]),
            )
            raise WordPressHttpError(
                response.status_code,
                f"{error_hint} リクエストURL: {request_url}",
                body=response_text,
            )

        try:
            return json.loads(response_text)
        except ValueError as exc:
            response_preview = _sanitize_for_log(response_text[:500])
            logger.error(
                "JSON解析エラー: status=%s, content_type=%s, response_preview=%s",
                response.status_code,
                content_type,
                response_preview,
            )
            raise WordPressHttpError(
                response.status_code,
                f"WordPress APIのレスポンスをJSONとして解析できませんでした。レスポンス: {response_preview}",
                body=response_text,
            ) from exc

    @staticmethod
    def _extract_error_message(response: Response) -> str:
        """Extract error message from WordPress REST API error response."""
        try:
            data = json.loads(response.text or "")
        except ValueError:
            data = None

        if isinstance(data, dict):
            # WordPress REST APIのエラーフォーマット
            code = data.get("code", "")
            message = data.get("message", "")

            if message:
                if code:
                    return f"WordPress APIエラー ({response.status_code}): [{code}] {message}"
                return f"WordPress APIエラー ({response.status_code}): {message}"

            error = data.get("error")
            if isinstance(error, str):
                return f"WordPress APIエラー ({response.status_code}): {_sanitize_for_log(error)}"

        if response.text:
            sanitized_text = _sanitize_for_log(response.text[:500])
            return f"WordPress APIエラー ({response.status_code}): {sanitized_text}"
        return f"WordPress APIエラー ({response.status_code})"
