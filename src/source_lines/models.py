from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ANYONE_GROUP = "anyone"


class Component(BaseModel):
    uuid: str
    key: str
    project_key: str | None = None
    path: str | None = None
    qualifier: str = "FIL"

    @property
    def permission_key(self) -> str:
        """Key that permissions are granted on: the owning project when known."""
        return self.project_key or self.key


class LineRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=1)
    source: str = ""
    highlighting: str = ""
    symbols: str = ""
    scm_author: str | None = None
    scm_revision: str | None = None
    scm_date: datetime | None = None
    line_hits: int | None = None
    conditions: int | None = None
    covered_conditions: int | None = None
    duplications: list[int] = Field(default_factory=list)


class Identity(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str | None = None
    groups: frozenset[str] = frozenset()

    @property
    def is_anonymous(self) -> bool:
        return self.login is None

    def grantees(self) -> set[str]:
        """Grantee names this identity acts as, e.g. ``user:jdoe`` and ``group:anyone``."""
        names = {f"group:{g}" for g in self.groups | {ANYONE_GROUP}}
        if self.login is not None:
            names.add(f"user:{self.login}")
        return names


class PermissionGrant(BaseModel):
    grantee: str
    capability: str
    component_key: str


class SourceDump(BaseModel):
    """Serialized components, line records and grants, as read by ``source-lines load``."""

    components: list[Component] = Field(default_factory=list)
    lines: dict[str, list[LineRecord]] = Field(default_factory=dict)
    permissions: list[PermissionGrant] = Field(default_factory=list)


class SourceLine(BaseModel):
    """One element of the ``sources`` array.

    ``duplicated`` is only ever set to ``True``; serialize with
    ``exclude_unset=True`` so it is omitted for lines without duplications.
    """

    model_config = ConfigDict(populate_by_name=True)

    line: int
    code: str
    scm_author: str | None = Field(None, alias="scmAuthor")
    scm_revision: str | None = Field(None, alias="scmRevision")
    scm_date: str | None = Field(None, alias="scmDate")
    line_hits: int | None = Field(None, alias="lineHits")
    conditions: int | None = None
    covered_conditions: int | None = Field(None, alias="coveredConditions")
    duplicated: bool = False


class LinesResponse(BaseModel):
    sources: list[SourceLine]

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
