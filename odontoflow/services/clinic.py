"""
Dashboard client: owns the application state and wires the session gate, remote
record store, local cache, record editor and deletion guard together.

Records are kept oldest-first locally so new entries append at the end; the
patient list shows them through DashboardView.recent_first().
"""
import copy
import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..schemas import PatientRecord, PatientUpdate
from .app_state import (
    AppState,
    EditStarted,
    ErrorCleared,
    ErrorRaised,
    FiltersChanged,
    FormClosed,
    FormOpened,
    RecordRemoved,
    RecordReplaced,
    RecordSaved,
    RecordsLoaded,
    SessionChanged,
    reduce,
)
from .dashboard import DashboardService, DashboardView, FilterState, dashboard_service
from .deletion_guard import DeletionGuard
from .local_cache import LocalCache
from .record_editor import EditorResult, RecordEditor
from .record_store_client import RecordStoreClient, RemoteStoreError
from .session_gate import AuthApiClient, Session, SessionGate

logger = logging.getLogger(__name__)


class ClinicApp:
    def __init__(
        self,
        gate: SessionGate,
        store: Optional[RecordStoreClient],
        cache: LocalCache,
        dashboard: DashboardService = dashboard_service,
    ):
        self.gate = gate
        self.store = store if store is not None and store.is_configured else None
        self.cache = cache
        self.dashboard = dashboard
        self.state = AppState()
        self.editor = RecordEditor()
        self.guard = DeletionGuard()

        gate.on_authenticated(self._on_authenticated)
        gate.on_signed_out(self._on_signed_out)

    @classmethod
    def from_settings(cls) -> "ClinicApp":
        gate = SessionGate(AuthApiClient())
        store = RecordStoreClient(token_provider=gate.access_token, on_unauthorized=gate.refresh)
        return cls(gate=gate, store=store, cache=LocalCache())

    def start(self) -> None:
        self.gate.start()

    def dispatch(self, action) -> AppState:
        self.state = reduce(self.state, action)
        return self.state

    # ── session ──────────────────────────────────────────────────────────────

    def _on_authenticated(self, session: Session) -> None:
        self.dispatch(SessionChanged(session))
        self.load_records()

    def _on_signed_out(self) -> None:
        self.dispatch(SessionChanged(None))
        self.guard.cancel()
        self.editor = RecordEditor()

    def sign_out(self) -> None:
        self.gate.sign_out()

    # ── loading ──────────────────────────────────────────────────────────────

    def load_records(self) -> AppState:
        """Load from the remote store, falling back to the local cache."""
        self.gate.require_session()
        if self.store is not None:
            try:
                newest_first = self.store.list()
            except RemoteStoreError as exc:
                if not self.gate.is_authenticated:
                    return self.state
                logger.warning("Remote load failed, using local cache: %s", exc.message)
                self.dispatch(ErrorRaised(f"{exc.message} (showing locally cached records)"))
            else:
                self.dispatch(RecordsLoaded(tuple(reversed(newest_first))))
                self.dispatch(ErrorCleared())
                self.cache.save(self.state.records)
                return self.state

        return self.dispatch(RecordsLoaded(tuple(self.cache.load())))

    # ── editor ───────────────────────────────────────────────────────────────

    def open_form(self) -> None:
        self.editor = RecordEditor()
        self.dispatch(FormOpened())

    def start_edit(self, record: PatientRecord) -> None:
        self.editor = RecordEditor(record)
        self.dispatch(EditStarted(record))

    def cancel_form(self) -> None:
        self.editor = RecordEditor()
        self.dispatch(FormClosed())

    def submit_form(self, now: Optional[datetime] = None) -> bool:
        """
        Submit the editor. Validation errors propagate untouched.

        The record is applied locally first, then written to the store. If the
        write fails the previous state and form are restored and the error is
        kept in state.error.
        """
        self.gate.require_session()
        previous_state = self.state
        previous_form = copy.deepcopy(self.editor.form)

        result = self.editor.submit(now=now)
        self.dispatch(RecordSaved(result.record))

        try:
            self._persist_saved(result)
        except RemoteStoreError as exc:
            if not self.gate.is_authenticated:
                return False
            self.editor.form = previous_form
            self.state = replace(previous_state, error=exc.message)
            return False

        self.editor = RecordEditor()
        self.cache.save(self.state.records)
        if self.store is not None:
            self.dispatch(ErrorCleared())
        return True

    def _persist_saved(self, result: EditorResult) -> None:
        if self.store is None:
            return
        if result.is_new:
            stored = self.store.create(result.payload)
        else:
            stored = self.store.update(
                result.record.id, PatientUpdate(**result.payload.model_dump())
            )
        self.dispatch(RecordReplaced(result.record.id, stored))

    # ── deletion ─────────────────────────────────────────────────────────────

    def request_delete(self, record: PatientRecord) -> None:
        self.gate.require_session()
        self.guard.request(record)

    def type_delete_confirmation(self, text: str) -> bool:
        return self.guard.type_confirmation(text)

    def cancel_delete(self) -> None:
        self.guard.cancel()

    def confirm_delete(self) -> bool:
        """Remove the staged record if the typed name matches; False otherwise."""
        self.gate.require_session()
        record = self.guard.confirm()
        if record is None:
            return False

        previous_state = self.state
        self.dispatch(RecordRemoved(record.id))
        if self.store is not None:
            try:
                self.store.delete(record.id, confirm_name=record.name)
            except RemoteStoreError as exc:
                if not self.gate.is_authenticated:
                    return False
                self.state = replace(previous_state, error=exc.message)
                return False
            self.dispatch(ErrorCleared())

        self.cache.save(self.state.records)
        return True

    # ── dashboard ────────────────────────────────────────────────────────────

    def set_filters(self, filters: FilterState) -> DashboardView:
        self.dispatch(FiltersChanged(filters))
        return self.view()

    def clear_filters(self) -> DashboardView:
        return self.set_filters(FilterState())

    def clear_error(self) -> None:
        self.dispatch(ErrorCleared())

    def view(self, now: Optional[datetime] = None) -> DashboardView:
        return self.dashboard.build(self.state.records, self.state.filters, now=now)
