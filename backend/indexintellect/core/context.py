"""Request correlation id shared by the API, its log records and outgoing client calls."""
from __future__ import annotations

import re
from contextvars import ContextVar, Token
from uuid import uuid4

REQUEST_ID_HEADER = "X-Request-Id"
MAX_REQUEST_ID_LENGTH = 128

_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]+$")

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def new_request_id() -> str:
    return uuid4().hex


def accept_request_id(candidate: str | None) -> str:
    """Reuse a caller-supplied id when it is short and log-safe, otherwise mint one."""
    if candidate and len(candidate) <= MAX_REQUEST_ID_LENGTH and _SAFE_REQUEST_ID.match(candidate):
        return candidate
    return new_request_id()


def bind_request_id(request_id: str) -> Token:
    return request_id_ctx_var.set(request_id)


def reset_request_id(token: Token) -> None:
    request_id_ctx_var.reset(token)


def get_request_id() -> str | None:
    return request_id_ctx_var.get()
