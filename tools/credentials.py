# where: wordpress/tools/credentials.py
# what: WordPress credential schema and the parsed credential object.
# why: Share one definition of the provider fields between console validation and tool runtime.

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

AUTH_BASIC = "basicAuth"
AUTH_OAUTH2 = "oauth2"
AUTH_APPLICATION_PASSWORD = "applicationPassword"

AUTHENTICATION_MODES = (AUTH_BASIC, AUTH_OAUTH2, AUTH_APPLICATION_PASSWORD)

# Basic認証ヘッダーを付与する認証方式
BASIC_AUTH_MODES = {AUTH_BASIC, AUTH_APPLICATION_PASSWORD}


@dataclass(frozen=True, slots=True)
class CredentialField:
    name: str
    type: str
    required: bool = False
    default: str = ""
    show_for: tuple[str, ...] = ()


# provider/wordpress.yaml の credentials_for_provider と同じ並び
CREDENTIAL_FIELDS: tuple[CredentialField, ...] = (
    CredentialField("base_url", "text-input", required=True),
    CredentialField("authentication", "select", required=True, default=AUTH_BASIC),
    CredentialField("username", "text-input", show_for=(AUTH_BASIC, AUTH_APPLICATION_PASSWORD)),
    CredentialField("password", "secret-input", show_for=(AUTH_BASIC, AUTH_APPLICATION_PASSWORD)),
    CredentialField("client_id", "text-input", show_for=(AUTH_OAUTH2,)),
    CredentialField("client_secret", "secret-input", show_for=(AUTH_OAUTH2,)),
)

_CAMEL_CASE_KEYS = {
    "base_url": "baseUrl",
    "client_id": "clientId",
    "client_secret": "clientSecret",
}


def _lookup(credentials: Mapping[str, Any], key: str) -> str:
    value = credentials.get(key)
    if value is None and key in _CAMEL_CASE_KEYS:
        value = credentials.get(_CAMEL_CASE_KEYS[key])
    return str(value).strip() if value is not None else ""


@dataclass(frozen=True, slots=True)
class WordPressCredentials:
    base_url: str
    authentication: str = AUTH_BASIC
    username: str = ""
    password: str = ""
    # OAuth2はプレースホルダーのみ（どのリクエストでも使用しない）
    client_id: str = ""
    client_secret: str = ""

    @classmethod
    def from_mapping(cls, credentials: Mapping[str, Any] | None) -> "WordPressCredentials":
        credentials = credentials or {}
        return cls(
            base_url=_lookup(credentials, "base_url"),
            authentication=_lookup(credentials, "authentication") or AUTH_BASIC,
            username=_lookup(credentials, "username"),
            password=_lookup(credentials, "password"),
            client_id=_lookup(credentials, "client_id"),
            client_secret=_lookup(credentials, "client_secret"),
        )

    @property
    def api_root(self) -> str:
        return f"{self.base_url.rstrip('/')}/wp-json/wp/v2"

    def basic_auth_header(self) -> str | None:
        """Return the ``Authorization`` value, or None when the mode sends no header."""
        if self.authentication not in BASIC_AUTH_MODES:
            return None
        raw = f"{self.username}:{self.password}"
        return "Basic " + base64.b64encode(raw.encode("utf-8")).decode("ascii")


def validate_credentials(credentials: Mapping[str, Any] | None) -> WordPressCredentials:
    """Validate credentials entered in the host console and return the parsed object."""
    parsed = WordPressCredentials.from_mapping(credentials)

    if not parsed.base_url:
        raise ValueError("WordPressサイトURLを入力してください")

    url = urlparse(parsed.base_url)
    if url.scheme not in ("http", "https"):
        raise ValueError("WordPressサイトURLはhttp://またはhttps://で始まる必要があります")
    if not url.netloc:
        raise ValueError("WordPressサイトURLが不正です")

    # HTTPSの推奨（警告のみ）
    if url.scheme == "http":
        logger.warning("WordPressサイトURLがHTTPです。セキュリティのためHTTPSの使用を推奨します")

    if parsed.authentication not in AUTHENTICATION_MODES:
        valid_modes = ", ".join(AUTHENTICATION_MODES)
        raise ValueError(f"無効な認証方式です: {parsed.authentication}（有効な値: {valid_modes}）")

    if parsed.authentication in BASIC_AUTH_MODES:
        if not parsed.username:
            raise ValueError("WordPressユーザー名を入力してください")
        if not parsed.password:
            raise ValueError("パスワード（またはアプリケーションパスワード）を入力してください")
    else:
        logger.warning("OAuth2認証は未対応のため、リクエストには認証ヘッダーが付与されません")

    return parsed
