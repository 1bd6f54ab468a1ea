import json
import logging
from pathlib import Path

from source_lines.core.ports.store import GrantStore, SourceStore
from source_lines.models import SourceDump

logger = logging.getLogger(__name__)


def read_dump(path: str | Path) -> SourceDump:
    return SourceDump.model_validate(json.loads(Path(path).read_text(encoding="utf-8")))


async def load_dump(store: SourceStore, authority: GrantStore, dump: SourceDump) -> dict[str, int]:
    """Write the dump's components, line records and grants.

    Lines of a file replace whatever the store held for it. Returns counts per kind.
    """
    await store.ensure_ready()
    for component in dump.components:
        await store.save_component(component)

    line_count = 0
    for file_uuid, lines in dump.lines.items():
        await store.save_lines(file_uuid, sorted(lines, key=lambda r: r.line))
        line_count += len(lines)

    for grant in dump.permissions:
        await authority.grant(grant.grantee, grant.capability, grant.component_key)

    counts = {
        "components": len(dump.components),
        "files": len(dump.lines),
        "lines": line_count,
        "permissions": len(dump.permissions),
    }
    logger.info("Loaded %(components)d component(s), %(lines)d line(s), %(permissions)d grant(s)", counts)
    return counts
