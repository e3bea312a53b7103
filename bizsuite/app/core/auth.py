from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request

from bizsuite.app.core.errors import MockApiError
from bizsuite.app.dependencies import MockDependencies
from bizsuite.services.client_config import mask_token


def get_deps(request: Request) -> MockDependencies:
    return request.app.state.deps


@dataclass(frozen=True)
class Actor:
    actor_id: str | None
    actor_name: str | None


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization") or ""
    if header.startswith("Bearer "):
        return header.split(" ", 1)[1].strip() or None
    return None


def get_actor(request: Request, deps: MockDependencies = Depends(get_deps)) -> Actor:
    """
    Resolve the caller from the bearer token.

    Always 401 (never 422) when auth is required and the token is missing or unknown.
    """
    token = _bearer_token(request)
    if not deps.require_auth:
        return Actor(actor_id=mask_token(token) if token else None, actor_name=deps.tokens.get(token or ""))
    if not token:
        raise MockApiError(401, "Missing access token")
    if deps.tokens and token not in deps.tokens:
        raise MockApiError(401, "Invalid access token")
    return Actor(actor_id=mask_token(token), actor_name=deps.tokens.get(token))


AuthRequired = Annotated[Actor, Depends(get_actor)]
