from typing import Protocol

from source_lines.core.ports.directory import ComponentDirectory
from source_lines.core.ports.permissions import PermissionAuthority
from source_lines.core.ports.source_index import SourceLineIndex
from source_lines.models import Component, LineRecord


class SourceStore(ComponentDirectory, SourceLineIndex, Protocol):
    async def save_component(self, component: Component) -> None: ...

    async def save_lines(self, file_uuid: str, lines: list[LineRecord]) -> None: ...

    async def ensure_ready(self) -> None: ...

    async def ping(self) -> bool: ...

    async def dispose(self) -> None: ...


class GrantStore(PermissionAuthority, Protocol):
    async def grant(self, grantee: str, capability: str, component_key: str) -> None: ...
