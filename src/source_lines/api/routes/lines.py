from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, Query

from source_lines.api.dependencies import get_authority, get_decorator, get_identity, get_store
from source_lines.core.lines import MAX_LINE, get_lines
from source_lines.core.ports.decorator import SourceDecorator
from source_lines.core.ports.permissions import PermissionAuthority
from source_lines.core.ports.store import SourceStore
from source_lines.models import Identity, LinesResponse

router = APIRouter(prefix="/api/sources", tags=["sources"])

_EXAMPLE: dict[str, Any] = json.loads((Path(__file__).parent.parent / "examples" / "lines.json").read_text())

_DESCRIPTION = (
    "Show source code with line oriented info. Requires the See Source Code permission on the file's project.\n\n"
    "Each element of the `sources` array holds the line number, the decorated content of the line, "
    "the author, revision and last commit date of the line (from SCM information) and its coverage counters. "
    "`duplicated` is only present, and `true`, on duplicated lines."
)


@router.get(
    "/lines",
    response_model=LinesResponse,
    response_model_exclude_unset=True,
    description=_DESCRIPTION,
    responses={
        200: {"content": {"application/json": {"example": _EXAMPLE}}},
        403: {"description": "Caller may not see the file's source"},
        404: {"description": "Unknown file uuid, or no lines in the requested range"},
    },
)
async def lines(
    uuid: str = Query(..., description="File uuid", examples=["f333aab4-7e3a-4d70-87e1-f4c491f05e5c"]),
    from_: int = Query(1, alias="from", le=MAX_LINE, description="First line to return. Starts at 1", examples=[10]),
    to: int | None = Query(None, le=MAX_LINE, description="Last line to return (inclusive)", examples=[20]),
    identity: Identity = Depends(get_identity),
    store: SourceStore = Depends(get_store),
    authority: PermissionAuthority = Depends(get_authority),
    decorator: SourceDecorator = Depends(get_decorator),
) -> LinesResponse:
    await store.ensure_ready()
    return await get_lines(
        uuid,
        identity,
        directory=store,
        authority=authority,
        index=store,
        decorator=decorator,
        from_line=from_,
        to_line=to,
    )
