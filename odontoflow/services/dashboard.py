"""
Dashboard filtering and aggregation.
Derives the visible record set and its statistics from the full collection.
"""
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from ..core.config import settings
from ..models.patient import Classification, PROCEDURES
from ..schemas import PatientRecord


@dataclass(frozen=True)
class FilterState:
    """Dashboard filters; every field's default value means "no filter"."""
    text_query: str = ""
    classification: Optional[str] = None
    procedures: FrozenSet[str] = frozenset()
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @property
    def is_active(self) -> bool:
        return bool(
            self.text_query
            or self.classification
            or self.procedures
            or self.start_date
            or self.end_date
        )


@dataclass(frozen=True)
class ClassificationCount:
    name: str
    value: int


@dataclass(frozen=True)
class ProcedureCount:
    name: str
    count: int


@dataclass(frozen=True)
class DashboardSummary:
    visible_count: int
    procedures_realized: int
    seen_today: int
    share_of_total_pct: int


@dataclass(frozen=True)
class DashboardView:
    visible_records: List[PatientRecord]
    procedure_counts: Dict[str, int]
    classification_breakdown: List[ClassificationCount]
    top_procedures: List[ProcedureCount]
    summary: DashboardSummary
    filters: FilterState = field(default_factory=FilterState)

    def recent_first(self) -> List[PatientRecord]:
        """Visible records newest-entry first, as the patient list shows them."""
        return list(reversed(self.visible_records))


def _local_day(moment: datetime) -> date:
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone().date()


_VOCABULARY_RANK = {name: index for index, name in enumerate(PROCEDURES)}


class DashboardService:
    """
    Pure filter/aggregation engine behind the dashboard.
    Holds no state between calls: the same records and filters always give the same view.
    """

    def __init__(self, top_limit: Optional[int] = None):
        self.top_limit = top_limit if top_limit is not None else settings.TOP_PROCEDURES_LIMIT

    def filter_records(
        self,
        records: Sequence[PatientRecord],
        filters: FilterState,
    ) -> List[PatientRecord]:
        """Return the records passing every active filter, in input order."""
        result = list(records)

        if filters.text_query:
            term = filters.text_query.lower()
            result = [
                r for r in result
                if term in r.name.lower() or term in r.classification.lower()
            ]

        if filters.classification:
            result = [r for r in result if r.classification == filters.classification]

        if filters.procedures:
            result = [
                r for r in result
                if any(p.strip() in filters.procedures for p in r.procedures)
            ]

        if filters.start_date:
            result = [r for r in result if _local_day(r.created_at) >= filters.start_date]

        if filters.end_date:
            result = [r for r in result if _local_day(r.created_at) <= filters.end_date]

        return result

    def count_procedures(
        self,
        records: Sequence[PatientRecord],
        selected: FrozenSet[str] = frozenset(),
    ) -> Dict[str, int]:
        """
        Count procedure occurrences across records.
        With a selection, procedures outside it are left out of the mapping.
        """
        counts: Dict[str, int] = {}
        for record in records:
            for procedure in record.procedures:
                name = procedure.strip()
                if selected and name not in selected:
                    continue
                counts[name] = counts.get(name, 0) + 1
        return counts

    def classification_breakdown(self, records: Sequence[PatientRecord]) -> List[ClassificationCount]:
        tally = Counter(r.classification for r in records)
        return [
            ClassificationCount(name=cls, value=tally[cls])
            for cls in Classification.ALL
            if tally[cls] > 0
        ]

    def top_procedures(self, procedure_counts: Dict[str, int]) -> List[ProcedureCount]:
        # Ties follow vocabulary order; unknown names go last in first-seen order
        first_seen = {name: index for index, name in enumerate(procedure_counts)}

        def sort_key(item: Tuple[str, int]):
            name, count = item
            return (-count, _VOCABULARY_RANK.get(name, len(PROCEDURES)), first_seen[name])

        ranked = sorted(procedure_counts.items(), key=sort_key)
        return [ProcedureCount(name=name, count=count) for name, count in ranked[: self.top_limit]]

    def summarize(
        self,
        visible: Sequence[PatientRecord],
        total_count: int,
        procedure_counts: Dict[str, int],
        now: Optional[datetime] = None,
    ) -> DashboardSummary:
        today = _local_day(now) if now is not None else date.today()
        return DashboardSummary(
            visible_count=len(visible),
            procedures_realized=sum(procedure_counts.values()),
            seen_today=sum(1 for r in visible if _local_day(r.created_at) == today),
            share_of_total_pct=self.share_of_total(len(visible), total_count),
        )

    @staticmethod
    def share_of_total(visible_count: int, total_count: int) -> int:
        """Visible records as a whole-number percentage of all records (0 when empty)."""
        if total_count <= 0:
            return 0
        # rounds half up (round() is banker's rounding)
        return int(visible_count * 100 / total_count + 0.5)

    def build(
        self,
        records: Sequence[PatientRecord],
        filters: Optional[FilterState] = None,
        now: Optional[datetime] = None,
    ) -> DashboardView:
        filters = filters or FilterState()
        visible = self.filter_records(records, filters)
        procedure_counts = self.count_procedures(visible, filters.procedures)
        return DashboardView(
            visible_records=visible,
            procedure_counts=procedure_counts,
            classification_breakdown=self.classification_breakdown(visible),
            top_procedures=self.top_procedures(procedure_counts),
            summary=self.summarize(visible, len(records), procedure_counts, now=now),
            filters=filters,
        )

    @staticmethod
    def search_vocabulary(term: str = "") -> List[str]:
        """Procedure picker search: vocabulary entries containing term, any case."""
        needle = term.lower()
        return [p for p in PROCEDURES if needle in p.lower()]


dashboard_service = DashboardService()
