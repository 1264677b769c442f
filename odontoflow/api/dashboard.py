from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from pydantic import BaseModel
from datetime import date

from ..models.base import get_db
from ..models.patient import Patient, Classification
from ..services.dashboard import FilterState, dashboard_service
from ..core.security import get_current_user
from ..schemas import PatientRecord

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class ClassificationCountResponse(BaseModel):
    name: str
    value: int


class ProcedureCountResponse(BaseModel):
    name: str
    count: int


class SummaryResponse(BaseModel):
    visible_count: int
    procedures_realized: int
    seen_today: int
    share_of_total_pct: int


class DashboardResponse(BaseModel):
    is_filtered: bool
    summary: SummaryResponse
    classification_breakdown: List[ClassificationCountResponse]
    top_procedures: List[ProcedureCountResponse]
    procedure_counts: Dict[str, int]
    patients: List[PatientRecord]


class VocabularyResponse(BaseModel):
    classifications: List[str]
    procedures: List[str]


@router.get("/", response_model=DashboardResponse)
def get_dashboard(
    q: str = Query("", description="Case-insensitive search on name or classification"),
    classification: Optional[str] = Query(None, description="Exact classification"),
    procedures: List[str] = Query([], description="Show records with any of these procedures"),
    start_date: Optional[date] = Query(None, description="First day included"),
    end_date: Optional[date] = Query(None, description="Last day included"),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """
    Filtered patient list plus the statistics shown on the dashboard.
    Patients are listed most recent first.
    """
    if classification and classification not in Classification.ALL:
        raise HTTPException(status_code=422, detail=f"Unknown classification: {classification}")

    rows = db.query(Patient).order_by(Patient.created_at).all()
    records = [PatientRecord.model_validate(row) for row in rows]
    filters = FilterState(
        text_query=q,
        classification=classification or None,
        procedures=frozenset(procedures),
        start_date=start_date,
        end_date=end_date,
    )
    view = dashboard_service.build(records, filters)

    return DashboardResponse(
        is_filtered=filters.is_active,
        summary=SummaryResponse(**view.summary.__dict__),
        classification_breakdown=[
            ClassificationCountResponse(name=c.name, value=c.value)
            for c in view.classification_breakdown
        ],
        top_procedures=[
            ProcedureCountResponse(name=p.name, count=p.count) for p in view.top_procedures
        ],
        procedure_counts=view.procedure_counts,
        patients=view.recent_first(),
    )


@router.get("/vocabulary", response_model=VocabularyResponse)
def get_vocabulary(
    search: str = "",
    current_user=Depends(get_current_user),
):
    """Classifications and procedures available to the patient form and filters."""
    return VocabularyResponse(
        classifications=list(Classification.ALL),
        procedures=dashboard_service.search_vocabulary(search),
    )
