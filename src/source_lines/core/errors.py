class SourceLinesError(Exception):
    """Base class for errors surfaced to callers of the lines operation."""


class NotFoundError(SourceLinesError):
    pass


class ForbiddenError(SourceLinesError):
    pass
