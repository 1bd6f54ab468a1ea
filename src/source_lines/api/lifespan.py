from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from source_lines.api.dependencies import shutdown_backend, start_backend


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # seed and schema work happens here rather than on the first request
    await start_backend()
    try:
        yield
    finally:
        await shutdown_backend()
