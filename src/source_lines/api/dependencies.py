from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from fastapi import Header

from source_lines.core.decoration import HtmlSourceDecorator
from source_lines.core.ports.decorator import SourceDecorator
from source_lines.core.ports.permissions import PermissionAuthority
from source_lines.core.ports.store import GrantStore, SourceStore
from source_lines.db.backend import open_backend
from source_lines.models import Identity

logger = logging.getLogger(__name__)

_store: SourceStore | None = None
_authority: GrantStore | None = None


async def _backend() -> tuple[SourceStore, GrantStore]:
    global _store, _authority  # noqa: PLW0603
    if _store is None or _authority is None:
        _store, _authority = await open_backend()
    return _store, _authority


async def start_backend() -> None:
    """Open the configured backend and make sure its schema exists."""
    store, _ = await _backend()
    await store.ensure_ready()
    logger.info("Source store ready (%s)", type(store).__name__)


async def get_store() -> AsyncIterator[SourceStore]:
    """Yield the ``SourceStore``, creating it lazily on first call."""
    store, _ = await _backend()
    yield store


async def get_authority() -> AsyncIterator[PermissionAuthority]:
    _, authority = await _backend()
    yield authority


def get_decorator() -> SourceDecorator:
    return HtmlSourceDecorator()


def get_identity(
    x_auth_login: str | None = Header(None, description="Login of the authenticated caller, set by the proxy."),
    x_auth_groups: str | None = Header(None, description="Comma-separated groups of the caller."),
) -> Identity:
    """Build the caller's identity from the headers of the authenticating proxy. No login means anonymous."""
    groups = frozenset(g.strip() for g in (x_auth_groups or "").split(",") if g.strip())
    return Identity(login=x_auth_login or None, groups=groups)


async def shutdown_backend() -> None:
    global _store, _authority  # noqa: PLW0603
    if _store is not None:
        await _store.dispose()
    _store = None
    _authority = None
