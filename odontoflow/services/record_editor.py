"""
Record editor: turns patient form input into records for the store.
Works in create mode (new record) or edit mode (pre-populated from an existing one).
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from ..models.patient import Classification, PROCEDURES
from ..schemas import PatientPayload, PatientRecord
from .dashboard import DashboardService


class RecordValidationError(ValueError):
    """Raised when a form is submitted with required fields missing."""

    def __init__(self, missing_fields: List[str]):
        self.missing_fields = missing_fields
        super().__init__(
            "Please fill in every field and select at least one procedure "
            f"(missing: {', '.join(missing_fields)})"
        )


@dataclass
class PatientForm:
    name: str = ""
    classification: str = ""
    procedures: List[str] = field(default_factory=list)
    notes: str = ""
    procedure_search: str = ""


@dataclass
class EditorResult:
    record: PatientRecord
    payload: PatientPayload
    is_new: bool
    return_to: str = "dashboard"


class RecordEditor:
    def __init__(self, initial: Optional[PatientRecord] = None):
        self.initial = initial
        self.form = PatientForm()
        self.reset()

    @property
    def mode(self) -> str:
        return "edit" if self.initial is not None else "create"

    def reset(self) -> None:
        """Put the form back to its starting values for the current mode."""
        if self.initial is None:
            self.form = PatientForm()
        else:
            self.form = PatientForm(
                name=self.initial.name,
                classification=self.initial.classification,
                procedures=list(self.initial.procedures),
                notes=self.initial.notes or "",
            )

    def toggle_procedure(self, procedure: str) -> List[str]:
        if procedure not in PROCEDURES:
            raise ValueError(f"Unknown procedure: {procedure}")
        if procedure in self.form.procedures:
            self.form.procedures.remove(procedure)
        else:
            self.form.procedures.append(procedure)
        return list(self.form.procedures)

    def procedure_options(self) -> List[str]:
        return DashboardService.search_vocabulary(self.form.procedure_search)

    def validate(self) -> None:
        missing = []
        if not self.form.name.strip():
            missing.append("name")
        if self.form.classification not in Classification.ALL:
            missing.append("classification")
        if not self.form.procedures:
            missing.append("procedures")
        if missing:
            raise RecordValidationError(missing)

    def submit(self, now: Optional[datetime] = None) -> EditorResult:
        """
        Validate and emit the record.

        Create mode assigns a fresh id and created_at; edit mode keeps both from
        the original record and replaces everything else. The form is cleared
        afterwards, and the caller should return to the dashboard.
        """
        self.validate()

        payload = PatientPayload(
            name=self.form.name,
            classification=self.form.classification,
            procedures=list(self.form.procedures),
            notes=self.form.notes or None,
        )
        if self.initial is None:
            record = PatientRecord(
                id=str(uuid.uuid4()),
                created_at=now or datetime.now(timezone.utc),
                **payload.model_dump(),
            )
        else:
            record = PatientRecord(
                id=self.initial.id,
                created_at=self.initial.created_at,
                **payload.model_dump(),
            )

        is_new = self.initial is None
        self.form = PatientForm()
        return EditorResult(record=record, payload=payload, is_new=is_new)
