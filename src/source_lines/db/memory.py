from collections import defaultdict

from source_lines.models import Component, Identity, LineRecord


class InMemorySourceStore:
    def __init__(self) -> None:
        self.components: dict[str, Component] = {}
        self.lines: dict[str, list[LineRecord]] = {}

    async def save_component(self, component: Component) -> None:
        self.components[component.uuid] = component

    async def save_lines(self, file_uuid: str, lines: list[LineRecord]) -> None:
        self.lines[file_uuid] = sorted(lines, key=lambda r: r.line)

    async def get_component_by_uuid(self, uuid: str) -> Component | None:
        return self.components.get(uuid)

    async def get_lines(self, file_uuid: str, from_line: int, to_line: int | None = None) -> list[LineRecord]:
        return [
            record
            for record in self.lines.get(file_uuid, [])
            if record.line >= from_line and (to_line is None or record.line <= to_line)
        ]

    async def ensure_ready(self) -> None:
        pass

    async def ping(self) -> bool:
        return True

    async def dispose(self) -> None:
        pass


class InMemoryPermissionAuthority:
    def __init__(self) -> None:
        # component_key -> capability -> grantees
        self.grants: dict[str, dict[str, set[str]]] = defaultdict(lambda: defaultdict(set))

    async def grant(self, grantee: str, capability: str, component_key: str) -> None:
        self.grants[component_key][capability].add(grantee)

    async def has_capability(self, identity: Identity, capability: str, component_key: str) -> bool:
        holders = self.grants.get(component_key, {}).get(capability, set())
        return not holders.isdisjoint(identity.grantees())
