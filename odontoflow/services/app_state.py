"""
Application state for the dashboard client.

State is an immutable value; every change is an action passed through reduce().
"""
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Union

from ..schemas import PatientRecord
from .dashboard import FilterState
from .session_gate import Session

VIEW_DASHBOARD = "dashboard"
VIEW_FORM = "form"


@dataclass(frozen=True)
class AppState:
    session: Optional[Session] = None
    records: Tuple[PatientRecord, ...] = ()
    view: str = VIEW_DASHBOARD
    editing: Optional[PatientRecord] = None
    filters: FilterState = field(default_factory=FilterState)
    error: Optional[str] = None


@dataclass(frozen=True)
class SessionChanged:
    session: Optional[Session]


@dataclass(frozen=True)
class RecordsLoaded:
    records: Tuple[PatientRecord, ...]


@dataclass(frozen=True)
class RecordSaved:
    """Insert a new record or replace the one with the same id."""
    record: PatientRecord


@dataclass(frozen=True)
class RecordReplaced:
    """Swap a provisional record (by its id) for the stored version."""
    provisional_id: str
    record: PatientRecord


@dataclass(frozen=True)
class RecordRemoved:
    record_id: str


@dataclass(frozen=True)
class EditStarted:
    record: PatientRecord


@dataclass(frozen=True)
class FormOpened:
    pass


@dataclass(frozen=True)
class FormClosed:
    pass


@dataclass(frozen=True)
class FiltersChanged:
    filters: FilterState


@dataclass(frozen=True)
class ErrorRaised:
    message: str


@dataclass(frozen=True)
class ErrorCleared:
    pass


Action = Union[
    SessionChanged, RecordsLoaded, RecordSaved, RecordReplaced, RecordRemoved,
    EditStarted, FormOpened, FormClosed, FiltersChanged, ErrorRaised, ErrorCleared,
]


def _upsert(records: Tuple[PatientRecord, ...], record: PatientRecord) -> Tuple[PatientRecord, ...]:
    if any(r.id == record.id for r in records):
        return tuple(record if r.id == record.id else r for r in records)
    return records + (record,)


def reduce(state: AppState, action: Action) -> AppState:
    if isinstance(action, SessionChanged):
        if action.session is None:
            # signed out: drop everything tied to the previous user
            return AppState()
        return replace(state, session=action.session)

    if isinstance(action, RecordsLoaded):
        return replace(state, records=tuple(action.records))

    if isinstance(action, RecordSaved):
        return replace(
            state,
            records=_upsert(state.records, action.record),
            view=VIEW_DASHBOARD,
            editing=None,
        )

    if isinstance(action, RecordReplaced):
        return replace(
            state,
            records=tuple(
                action.record if r.id == action.provisional_id else r for r in state.records
            ),
        )

    if isinstance(action, RecordRemoved):
        return replace(
            state,
            records=tuple(r for r in state.records if r.id != action.record_id),
        )

    if isinstance(action, EditStarted):
        return replace(state, view=VIEW_FORM, editing=action.record)

    if isinstance(action, FormOpened):
        return replace(state, view=VIEW_FORM, editing=None)

    if isinstance(action, FormClosed):
        return replace(state, view=VIEW_DASHBOARD, editing=None)

    if isinstance(action, FiltersChanged):
        return replace(state, filters=action.filters)

    if isinstance(action, ErrorRaised):
        return replace(state, error=action.message)

    if isinstance(action, ErrorCleared):
        return replace(state, error=None)

    raise TypeError(f"Unknown action: {action!r}")
