"""Pydantic models for the REST server."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str


class DefectBody(BaseModel):
    kind: str
    message: str


class RejectionBody(BaseModel):
    kind: str
    message: str
    defects: list[DefectBody] = Field(default_factory=list)


class AvailableActions(BaseModel):
    instanceId: str
    currentStateId: str
    actions: list[str]


class ErrorResponse(BaseModel):
    detail: RejectionBody
