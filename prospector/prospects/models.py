from __future__ import annotations

import math
import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ProspectStatus(str, Enum):
    TO_CONTACT = "TO_CONTACT"
    NOT_INTERESTED = "NOT_INTERESTED"
    CALL_LATER = "CALL_LATER"
    MEETING_SET = "MEETING_SET"


STATUS_LABELS: dict[ProspectStatus, str] = {
    ProspectStatus.TO_CONTACT: "À contacter",
    ProspectStatus.NOT_INTERESTED: "Pas intéressé",
    ProspectStatus.CALL_LATER: "Rappeler + tard",
    ProspectStatus.MEETING_SET: "RDV pris",
}


def now_ms() -> int:
    return int(time.time() * 1000)


class ProspectCandidate(BaseModel):
    """A parsed prospect that has not been written to the store yet."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    phone: str = ""
    email: str = ""
    activity: str = ""
    city: str
    lat: float | None = None
    lon: float | None = None
    status: ProspectStatus = ProspectStatus.TO_CONTACT
    notes: str = ""
    created_at: int = Field(default_factory=now_ms, alias="createdAt")

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        return value

    @model_validator(mode="after")
    def _coordinates_paired(self) -> ProspectCandidate:
        # Coordinates are stored as a pair or not at all.
        if self.lat is None or self.lon is None:
            self.lat = None
            self.lon = None
        elif not (math.isfinite(self.lat) and math.isfinite(self.lon)):
            self.lat = None
            self.lon = None
        return self

    def to_document(self) -> dict[str, Any]:
        """Store payload; absent coordinates are omitted rather than null."""
        doc = self.model_dump(by_alias=True, exclude_none=True)
        doc["status"] = self.status.value
        return doc


class Prospect(ProspectCandidate):
    id: str

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Prospect:
        return cls(id=doc_id, **data)


# ── API payloads ─────────────────────────────────────────────────────────


class LoginRequest(BaseModel):
    username: str
    password: str


class ImportRequest(BaseModel):
    city: str = Field(..., min_length=1, description="Target city for every imported row")
    raw_text: str = Field(..., min_length=1, description="Semicolon-delimited export, header first")


class ProspectUpdate(BaseModel):
    status: ProspectStatus | None = None
    notes: str | None = None


class BatchDeleteRequest(BaseModel):
    ids: list[str] = Field(..., min_length=1)


class BatchDeleteResponse(BaseModel):
    """Ids sent to the store for deletion, including ids that matched nothing."""

    processed: int
