from typing import Protocol

from source_lines.models import Component


class ComponentDirectory(Protocol):
    async def get_component_by_uuid(self, uuid: str) -> Component | None: ...
