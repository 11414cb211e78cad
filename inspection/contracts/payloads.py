from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class LoadAllResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: str
    sites: list[dict[str, Any]] = Field(default_factory=list)
    officers: list[dict[str, Any]] = Field(default_factory=list)
    reports: list[dict[str, Any]] = Field(default_factory=list)


class SubmitReportPayload(BaseModel):
    action: Literal["SUBMIT"] = "SUBMIT"
    id: int | str
    date: str
    officer: str
    inspectorRole: str
    site: str
    remarks: str
    status: str


class UpdateStatusPayload(BaseModel):
    action: Literal["UPDATE_STATUS"] = "UPDATE_STATUS"
    rowId: int | str
    status: str
    note: str | None = None


class UpsertOfficerPayload(BaseModel):
    action: Literal["ADD_USER", "UPDATE_USER"]
    oldName: str = ""
    name: str
    designation: str
    office: str = ""
    level: str
    password: str
    jurisdiction: str


class ObservationInput(BaseModel):
    site: str = Field(min_length=1)
    remarks: str

    @field_validator("remarks")
    @classmethod
    def _remarks_present(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Enter remarks")
        return value


class OfficerInput(BaseModel):
    name: str = Field(min_length=1)
    designation: str = Field(min_length=1)
    office: str = ""
    level: str = Field(min_length=1)
    password: str = Field(min_length=1)
    jurisdiction: str = Field(min_length=1)

    @field_validator("name", "designation", "level", "password", "jurisdiction")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("field is required")
        return value.strip()

    @field_validator("level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


def first_error_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    return str(errors[0].get("msg", "")).removeprefix("Value error, ")
