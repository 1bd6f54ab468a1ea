from typing import Protocol

from source_lines.models import LineRecord


class SourceLineIndex(Protocol):
    async def get_lines(self, file_uuid: str, from_line: int, to_line: int | None = None) -> list[LineRecord]:
        """Return the file's line records with ``from_line <= line <= to_line``, ascending.

        ``to_line=None`` means no upper bound.
        """
        ...
