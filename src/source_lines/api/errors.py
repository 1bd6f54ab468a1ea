from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from source_lines.core.errors import ForbiddenError, NotFoundError, SourceLinesError

ERROR_STATUS_CODES: dict[type[SourceLinesError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
}


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(SourceLinesError)
    async def _handle_source_lines_error(_request: Request, exc: SourceLinesError) -> JSONResponse:
        status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})
