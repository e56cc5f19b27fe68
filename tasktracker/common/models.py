"""Shared Pydantic bases for records exchanged verbatim with the remote API."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiRecord(BaseModel):
    """A server record: camelCase on the wire, unknown fields kept.

    The server's ``_id`` is exposed as ``id``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("_id", "id"),
        serialization_alias="id",
    )


class ApiPayload(BaseModel):
    """Request body sent to the remote API in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_api(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class DepartmentBrief(ApiRecord):
    """Department embedded in worker/comment records."""

    name: str = ""


class WorkerBrief(ApiRecord):
    """Worker embedded in leave, comment, and food-request records."""

    name: Optional[str] = None
    department: Optional[str | DepartmentBrief] = None
    photo: Optional[str] = None
    rfid: Optional[str] = None

    @property
    def department_name(self) -> str:
        if isinstance(self.department, DepartmentBrief):
            return self.department.name
        return self.department or ""
