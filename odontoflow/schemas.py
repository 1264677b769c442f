"""Patient record schemas shared by the record store API and the client core."""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .models.patient import Classification, PROCEDURES


def _check_classification(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in Classification.ALL:
        raise ValueError(f"classification must be one of {', '.join(Classification.ALL)}")
    return value


def _check_name(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("name must not be blank")
    return value


def _check_procedures(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return value
    if not value:
        raise ValueError("at least one procedure is required")
    unknown = [p for p in value if p not in PROCEDURES]
    if unknown:
        raise ValueError(f"unknown procedures: {', '.join(unknown)}")
    return value


class PatientPayload(BaseModel):
    """Body for creating a record; the store assigns id and created_at."""

    name: str
    classification: str
    procedures: List[str]
    notes: Optional[str] = None

    validate_classification = field_validator("classification")(_check_classification)
    validate_name = field_validator("name")(_check_name)
    validate_procedures = field_validator("procedures")(_check_procedures)


class PatientUpdate(BaseModel):
    """Partial replacement: omitted fields are left unchanged."""

    name: Optional[str] = None
    classification: Optional[str] = None
    procedures: Optional[List[str]] = None
    notes: Optional[str] = None

    validate_classification = field_validator("classification")(_check_classification)
    validate_name = field_validator("name")(_check_name)
    validate_procedures = field_validator("procedures")(_check_procedures)


class PatientRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str
    classification: str
    procedures: List[str]
    notes: Optional[str] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # SQLite and some JSON producers drop the offset; stored values are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
