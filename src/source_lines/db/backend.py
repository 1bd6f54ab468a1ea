import logging

from source_lines.core.load import load_dump, read_dump
from source_lines.core.ports.store import GrantStore, SourceStore
from source_lines.db.engine import get_engine
from source_lines.db.memory import InMemoryPermissionAuthority, InMemorySourceStore
from source_lines.db.postgres import PostgresPermissionAuthority, PostgresSourceStore
from source_lines.settings import settings

logger = logging.getLogger(__name__)


async def open_backend(
    backend: str | None = None,
    seed_file: str | None = None,
) -> tuple[SourceStore, GrantStore]:
    """Create the configured store and permission authority.

    The memory backend starts empty unless a seed file (or ``SEED_FILE``) is given.
    """
    backend = (backend or settings.STORE_BACKEND).lower()
    if backend == "postgres":
        engine = get_engine()
        return PostgresSourceStore(engine), PostgresPermissionAuthority(engine)
    if backend != "memory":
        raise ValueError(f"Unknown store backend: {backend!r}")

    store = InMemorySourceStore()
    authority = InMemoryPermissionAuthority()
    seed = seed_file or settings.SEED_FILE
    if seed:
        logger.info("Seeding in-memory store from %s", seed)
        await load_dump(store, authority, read_dump(seed))
    return store, authority
