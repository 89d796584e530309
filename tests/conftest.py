"""Shared fixtures for the WordPress plugin tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tools.credentials import WordPressCredentials  # noqa: E402
from tools.transport import BinaryRequestOptions, RequestOptions  # noqa: E402


class FakeTransport:
    """Records every request and replays queued responses (exceptions are raised)."""

    def __init__(self, responses: list[Any] | None = None, binary_responses: list[Any] | None = None) -> None:
        self.calls: list[RequestOptions | BinaryRequestOptions] = []
        self.responses = list(responses or [])
        self.binary_responses = list(binary_responses or [])

    def request(self, options: RequestOptions) -> Any:
        self.calls.append(options)
        return self._next(self.responses)

    def request_binary(self, options: BinaryRequestOptions) -> Any:
        self.calls.append(options)
        return self._next(self.binary_responses)

    @staticmethod
    def _next(queue: list[Any]) -> Any:
        if not queue:
            return {"id": 1}
        response = queue.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def credentials() -> WordPressCredentials:
    return WordPressCredentials(
        base_url="https://example.com/",
        authentication="applicationPassword",
        username="admin",
        password="abcd efgh ijkl mnop",
    )
