from source_lines.db.memory import InMemoryPermissionAuthority, InMemorySourceStore
from source_lines.db.postgres import PostgresPermissionAuthority, PostgresSourceStore

__all__ = [
    "InMemoryPermissionAuthority",
    "InMemorySourceStore",
    "PostgresPermissionAuthority",
    "PostgresSourceStore",
]
