# where: wordpress/tools/transport.py
# what: Request envelopes and the transport interface used by the dispatcher.
# why: Callers pick the HTTP implementation once and inject it, instead of probing the runtime.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(slots=True)
class RequestOptions:
    """A single JSON request against the ``wp/v2`` namespace."""

    endpoint: str
    method: str = "GET"
    body: dict[str, Any] = field(default_factory=dict)
    qs: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class BinaryRequestOptions:
    """A raw binary upload (media) against the ``wp/v2`` namespace."""

    endpoint: str
    data: bytes
    method: str = "POST"
    headers: dict[str, str] = field(default_factory=dict)


class Transport(Protocol):
    def request(self, options: RequestOptions) -> Any:
        ...

    def request_binary(self, options: BinaryRequestOptions) -> Any:
        ...
