from typing import Protocol

from source_lines.models import Identity

CODEVIEWER = "codeviewer"


class PermissionAuthority(Protocol):
    async def has_capability(self, identity: Identity, capability: str, component_key: str) -> bool: ...
